"""Pytest configuration and shared fixtures."""
from datetime import datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from config import Settings, reset_settings
from shared.models.entities import Base


@pytest.fixture(scope="function")
def db_session():
    """
    Create a test database session with in-memory SQLite.

    This fixture creates a fresh database for each test function,
    ensuring test isolation. StaticPool keeps one connection so the
    TestClient worker thread sees the same database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    Base.metadata.create_all(engine)

    # Create session
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    # Cleanup
    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep the global settings singleton from leaking between tests."""
    for key in ("GEMINI_API_KEY", "OPENAI_API_KEY", "LLM_PROVIDER", "LLM_MODEL",
                "CONTEXT_WRITE_MODE", "TOPIC_KEYWORDS_PATH", "DEFAULT_USER_ID"):
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def test_settings():
    """Settings that ignore any local .env file."""
    return Settings(_env_file=None, gemini_api_key="test-gemini-key")


@pytest.fixture
def fixed_now():
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def seed_context(fixed_now):
    """Seed skill context with deterministic timestamps."""
    from mentor.models.skill_graph import initialize_context

    return initialize_context(now=fixed_now)


@pytest.fixture
def recursion_skill(seed_context):
    return seed_context.skills["dsa-recursion"]


@pytest.fixture
def mock_llm_service(mocker):
    """Mock LLM service for testing without API calls."""
    mock_service = mocker.Mock()
    mock_service.stream_chat.return_value = iter(["Recursion ", "is a function ", "calling itself."])
    return mock_service
