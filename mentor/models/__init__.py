"""Mentor models."""
from mentor.models.skill_graph import (
    SkillNode,
    SkillHistoryEntry,
    ThreadSummary,
    UserSkillContext,
    initialize_context,
)
from mentor.models.messages import Message, ChatRequest, FeedbackRequest, FeedbackResponse, SkillStats
