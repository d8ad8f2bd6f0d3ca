"""Chat API endpoint: streams the mentor's reply."""
import logging
import traceback

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session as DBSession

from database import get_db
from mentor.exceptions import LLMError
from mentor.models.messages import ChatRequest
from mentor.services.mentor_service import MentorService
from shared.utils.exceptions import LLMProviderException, SkillMentorException

logger = logging.getLogger("mentor.api.chat")

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("")
def chat(request: ChatRequest, db: DBSession = Depends(get_db)):
    """Update skills from the latest user message and stream the reply as plain text."""
    if not request.messages:
        raise HTTPException(status_code=400, detail="No message provided")

    try:
        service = MentorService(db)
        preparation, chunks = service.stream_reply(request.messages, user_id=request.user_id)
    except SkillMentorException as e:
        raise e.to_http_exception()
    except LLMError as e:
        raise LLMProviderException(e).to_http_exception()
    except Exception as e:
        logger.error(f"Error in chat: {str(e)}\n{traceback.format_exc()}")
        raise HTTPException(status_code=500, detail={"message": "Internal Server Error", "details": str(e)})

    headers = {"X-Detected-Topics": ",".join(sorted(preparation.topics))}
    return StreamingResponse(chunks, media_type="text/plain; charset=utf-8", headers=headers)
