"""Explicit feedback API endpoint."""
import logging
import traceback

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session as DBSession

from database import get_db
from mentor.models.messages import FeedbackRequest, FeedbackResponse
from mentor.services.mentor_service import MentorService
from shared.utils.exceptions import SkillMentorException

logger = logging.getLogger("mentor.api.feedback")

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackResponse, response_model_by_alias=True)
def submit_feedback(request: FeedbackRequest, db: DBSession = Depends(get_db)):
    """Apply a thumbs-up / thumbs-down on a message to the skills it mentions."""
    if not request.context_text.strip():
        raise HTTPException(status_code=400, detail="Missing required fields")

    try:
        service = MentorService(db)
        topics = service.apply_feedback(request.type, request.context_text, user_id=request.user_id)
        return FeedbackResponse(success=True, updated_topics=sorted(topics))
    except SkillMentorException as e:
        raise e.to_http_exception()
    except Exception as e:
        logger.error(f"Error in feedback: {str(e)}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail="Internal Server Error")
