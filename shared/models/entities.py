"""SQLAlchemy ORM database models."""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Text, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class SkillContextRecord(Base):
    """Skill context table - one UserSkillContext per user, stored as camelCase JSON."""
    __tablename__ = "skill_contexts"

    user_id = Column(String, primary_key=True)
    context_json = Column(Text, nullable=False)  # JSON: {id, skills, threadSummaries}
    version = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
