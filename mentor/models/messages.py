"""
Message Models

Chat messages and request/response DTOs for the mentor API.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Message(BaseModel):
    """Individual message in a conversation."""

    role: Literal["user", "assistant", "system"] = Field(description="Role of the message sender")
    content: str = Field(description="Message content text")


class ChatRequest(BaseModel):
    messages: list[Message] = Field(description="Conversation so far; the last entry is the new user turn")
    user_id: Optional[str] = Field(default=None, description="Defaults to the configured user")


class FeedbackRequest(BaseModel):
    """Out-of-band feedback on a specific message (e.g. a thumbs-up)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: Literal["correct", "confusion"] = Field(description="Feedback signal")
    context_text: str = Field(min_length=1, description="Text of the message the feedback refers to")
    user_id: Optional[str] = None


class FeedbackResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    updated_topics: list[str] = Field(default_factory=list)


class SkillStats(BaseModel):
    """Aggregate view of a user's skill context."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    average_mastery: float = Field(description="Mean mastery across skills, as a percentage")
    total_updates: int = Field(description="Total history entries across skills")
    top_skill: str = Field(description="Name of the highest-mastery skill")
    last_active: datetime = Field(description="Most recent skill update")
    level: Literal["Beginner", "Intermediate", "Advanced"]
    thread_count: int = 0
