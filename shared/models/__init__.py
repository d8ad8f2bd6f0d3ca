"""Shared ORM models."""
from shared.models.entities import Base, SkillContextRecord
