"""Health check API endpoints."""
from fastapi import APIRouter

from config import get_settings
from database import get_db_manager

router = APIRouter(tags=["health"])


@router.get("/")
def read_root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "SkillMentor Backend",
        "version": "1.0.0"
    }


@router.get("/config/models")
def get_model_config():
    """Return the configured LLM provider and model (never the key)."""
    settings = get_settings()
    return {
        "provider": settings.llm_provider,
        "model_id": settings.llm_model,
        "configured": bool(settings.llm_api_key),
    }


@router.get("/health/db")
def database_health():
    """Database health check."""
    try:
        db_manager = get_db_manager()
        is_healthy = db_manager.health_check()

        if is_healthy:
            return {"status": "ok", "database": "connected"}
        else:
            return {"status": "error", "database": "connection_failed"}
    except Exception as e:
        return {"status": "error", "database": f"error: {str(e)}"}
