"""Skill context read endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from database import get_db
from mentor.services.mentor_service import MentorService

router = APIRouter(prefix="/skills", tags=["skills"])


@router.get("")
def get_skills(user_id: Optional[str] = None, db: DBSession = Depends(get_db)):
    """Full skill context in its persisted (camelCase) layout. Never mutates."""
    service = MentorService(db)
    return service.get_context(user_id).to_record()


@router.get("/stats")
def get_skill_stats(user_id: Optional[str] = None, db: DBSession = Depends(get_db)):
    """Aggregate stats: average mastery, total updates, strongest skill, level."""
    service = MentorService(db)
    stats = service.get_stats(user_id)
    if stats is None:
        raise HTTPException(status_code=404, detail="No skills tracked yet")
    return stats.model_dump(mode="json", by_alias=True)
