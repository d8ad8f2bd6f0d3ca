"""Data access layer."""
from shared.repositories.skill_context_repository import SkillContextRepository, StoredSkillContext
