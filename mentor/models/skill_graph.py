"""
Skill Graph Models

Per-user skill state: tracked skills, their mastery/confidence estimates and
the append-only history of every adjustment. Serialized with camelCase keys,
which is the persisted record layout.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# Known categories. Any other string is accepted as an open extension.
DSA = "DSA"
DP = "DP"
RECURSION = "Recursion"
SYSTEM_DESIGN = "System Design"
CPP_SYNTAX = "C++ Syntax"
COMPLEXITY_ANALYSIS = "Complexity Analysis"

KNOWN_CATEGORIES = (DSA, DP, RECURSION, SYSTEM_DESIGN, CPP_SYNTAX, COMPLEXITY_ANALYSIS)

SkillCategory = str

DEFAULT_USER_ID = "default-user"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Offset-less timestamps in stored records are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SkillHistoryEntry(_CamelModel):
    """One recorded adjustment of a skill's mastery."""

    timestamp: datetime = Field(description="When the adjustment was applied")
    change: float = Field(description="Signed delta applied to mastery_probability")
    reason: str = Field(description="Free-text reason for the adjustment")

    @field_validator("timestamp")
    @classmethod
    def timestamp_as_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class SkillNode(_CamelModel):
    """A single tracked skill."""

    id: str = Field(description="Stable unique key, e.g. 'dsa-recursion'")
    name: str = Field(description="Display label")
    category: SkillCategory = Field(description="Skill category")
    mastery_probability: float = Field(ge=0.0, le=1.0, description="Estimated mastery (0-1)")
    confidence: float = Field(ge=0.0, le=1.0, description="Certainty in the mastery estimate (0-1)")
    last_updated: datetime = Field(default_factory=utcnow)
    history: list[SkillHistoryEntry] = Field(default_factory=list)

    @field_validator("last_updated")
    @classmethod
    def last_updated_as_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def level(self) -> str:
        if self.mastery_probability > 0.8:
            return "expert"
        elif self.mastery_probability > 0.5:
            return "intermediate"
        return "beginner"


class ThreadSummary(_CamelModel):
    """Archived conversation summary. Not interpreted by the skill engine."""

    id: str
    domain: str
    summary: str
    timestamp: datetime = Field(default_factory=utcnow)

    @field_validator("timestamp")
    @classmethod
    def timestamp_as_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


class UserSkillContext(_CamelModel):
    """Full skill record for one user."""

    id: str = Field(default=DEFAULT_USER_ID, description="User identifier")
    skills: dict[str, SkillNode] = Field(default_factory=dict, description="Skill id -> node")
    thread_summaries: list[ThreadSummary] = Field(default_factory=list)

    def skills_for_topics(self, topics: Iterable[SkillCategory]) -> list[SkillNode]:
        """
        Skills whose category or display name equals one of the topics.

        A topic that matches a skill's name counts even when the categories
        differ. Each skill appears once, in the context's insertion order.
        """
        wanted = set(topics)
        return [
            skill for skill in self.skills.values()
            if skill.category in wanted or skill.name in wanted
        ]

    def to_record(self) -> dict:
        """JSON-ready dict in the persisted camelCase layout."""
        return self.model_dump(mode="json", by_alias=True)

    def to_record_json(self) -> str:
        return self.model_dump_json(by_alias=True)


def _seed_skill(
    skill_id: str,
    name: str,
    category: SkillCategory,
    mastery: float,
    confidence: float,
    now: datetime,
) -> SkillNode:
    return SkillNode(
        id=skill_id,
        name=name,
        category=category,
        mastery_probability=mastery,
        confidence=confidence,
        last_updated=now,
    )


def initialize_context(user_id: str = DEFAULT_USER_ID, now: Optional[datetime] = None) -> UserSkillContext:
    """Seed context for a user with no stored record."""
    now = now or utcnow()
    seeds = [
        _seed_skill("dsa-recursion", "Recursion", RECURSION, 0.2, 0.5, now),
        _seed_skill("dsa-dp", "Dynamic Programming", DP, 0.1, 0.4, now),
        _seed_skill("cpp-syntax", "C++ Syntax", CPP_SYNTAX, 0.5, 0.8, now),
    ]
    return UserSkillContext(
        id=user_id,
        skills={skill.id: skill for skill in seeds},
        thread_summaries=[],
    )
