"""Aggregate statistics over a user's skill context (read-only)."""

from typing import Optional

from mentor.models.messages import SkillStats
from mentor.models.skill_graph import UserSkillContext


def _level_for(average_mastery: float) -> str:
    if average_mastery > 0.7:
        return "Advanced"
    elif average_mastery > 0.4:
        return "Intermediate"
    return "Beginner"


def compute_skill_stats(context: UserSkillContext) -> Optional[SkillStats]:
    """Summarize a context; None when it has no skills."""
    skills = list(context.skills.values())
    if not skills:
        return None

    average = sum(s.mastery_probability for s in skills) / len(skills)
    # max() keeps the first of equal values
    top = max(skills, key=lambda s: s.mastery_probability)

    return SkillStats(
        average_mastery=average * 100,
        total_updates=sum(len(s.history) for s in skills),
        top_skill=top.name,
        last_active=max(s.last_updated for s in skills),
        level=_level_for(average),
        thread_count=len(context.thread_summaries),
    )
