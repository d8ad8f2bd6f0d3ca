"""
SkillMentor Backend - FastAPI Application

Entry point for the adaptive programming mentor API. Skill-state logic lives
in mentor/, persistence and LLM access in shared/.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings, validate_required_settings
from database import get_db_manager
from mentor.api import chat, feedback, skills
from shared.api import health

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Validate configuration on startup
validate_required_settings()

# Initialize FastAPI app
app = FastAPI(
    title="SkillMentor Backend",
    description="Skill-aware programming mentor API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(chat.router)
app.include_router(feedback.router)
app.include_router(skills.router)


@app.on_event("startup")
async def startup_event():
    """Create tables and validate the database connection on startup."""
    logger.info("Starting SkillMentor Backend...")

    db_manager = get_db_manager()
    db_manager.create_tables()
    if not db_manager.health_check():
        logger.warning("Database health check failed on startup")
    else:
        logger.info("Database connection healthy")

    if not settings.llm_api_key:
        logger.warning(f"No API key set for LLM provider '{settings.llm_provider}'; /chat will fail")

    logger.info("Application started successfully")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
