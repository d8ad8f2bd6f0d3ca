"""
Tests for mentor/api: chat, feedback and skills endpoints.

Each test builds a FastAPI app with the routers under test and overrides
get_db with the in-memory db_session. The LLM client class is patched so no
provider is ever contacted.
"""

import json

import pytest
from unittest.mock import patch
from fastapi import FastAPI
from fastapi.testclient import TestClient

from database import get_db
from mentor.api import chat, feedback, skills
from mentor.exceptions import LLMServiceError
from mentor.models.skill_graph import UserSkillContext
from shared.models.entities import SkillContextRecord
from shared.repositories.skill_context_repository import SkillContextRepository


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def client(db_session):
    """Build a test app with the mentor routers and the test DB session."""
    app = FastAPI()
    app.include_router(chat.router)
    app.include_router(feedback.router)
    app.include_router(skills.router)

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def gemini_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")


@pytest.fixture
def mock_llm_cls():
    with patch("mentor.services.mentor_service.LLMService") as mock_cls:
        mock_cls.return_value.stream_chat.return_value = iter(["Great, ", "let's go deeper."])
        yield mock_cls


def _chat_body(*texts, **extra):
    roles = ["user", "assistant"]
    messages = [{"role": roles[i % 2], "content": text} for i, text in enumerate(texts)]
    return {"messages": messages, **extra}


# ===========================================================================
# POST /chat
# ===========================================================================

class TestChat:

    def test_streams_reply(self, client, gemini_key, mock_llm_cls):
        resp = client.post("/chat", json=_chat_body("I understood recursion now"))

        assert resp.status_code == 200
        assert resp.text == "Great, let's go deeper."
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.headers["x-detected-topics"] == "DSA,Recursion"

    def test_updates_skill_before_streaming(self, client, gemini_key, mock_llm_cls, db_session):
        client.post("/chat", json=_chat_body("I understood recursion now"))

        skill = SkillContextRepository(db_session).get("default-user").context.skills["dsa-recursion"]
        assert skill.mastery_probability == pytest.approx(0.25)

    def test_user_id_routed(self, client, gemini_key, mock_llm_cls, db_session):
        client.post("/chat", json=_chat_body("I understood recursion now", user_id="learner-1"))

        stored = SkillContextRepository(db_session).get("learner-1")
        assert stored.version == 1

    def test_system_prompt_sent_first(self, client, gemini_key, mock_llm_cls):
        client.post("/chat", json=_chat_body("hi", "hello!", "explain dp"))

        history, latest = mock_llm_cls.return_value.stream_chat.call_args.args
        assert latest == "explain dp"
        assert history[0].content.startswith("You are an Adaptive Programming Mentor.")
        assert "Dynamic Programming: beginner" in history[0].content

    def test_empty_messages(self, client):
        resp = client.post("/chat", json={"messages": []})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No message provided"

    def test_invalid_role(self, client):
        resp = client.post("/chat", json={"messages": [{"role": "bot", "content": "hi"}]})
        assert resp.status_code == 422

    def test_missing_api_key(self, client):
        resp = client.post("/chat", json=_chat_body("hello"))
        assert resp.status_code == 500
        assert resp.json()["detail"] == "API Key is missing"

    def test_provider_failure(self, client, gemini_key, mock_llm_cls):
        mock_llm_cls.return_value.stream_chat.side_effect = LLMServiceError("overloaded")

        resp = client.post("/chat", json=_chat_body("hello"))
        assert resp.status_code == 503
        assert resp.json()["detail"] == "AI service temporarily unavailable"

    def test_unexpected_error(self, client, gemini_key):
        with patch("mentor.api.chat.MentorService") as mock_service_cls:
            mock_service_cls.return_value.stream_reply.side_effect = RuntimeError("boom")
            resp = client.post("/chat", json=_chat_body("hello"))

        assert resp.status_code == 500
        assert resp.json()["detail"]["message"] == "Internal Server Error"


# ===========================================================================
# POST /feedback
# ===========================================================================

class TestFeedback:

    def test_correct_feedback(self, client, db_session):
        resp = client.post("/feedback", json={"type": "correct", "contextText": "Recursion needs a base case"})

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "updatedTopics": ["DSA", "Recursion"]}
        skill = SkillContextRepository(db_session).get("default-user").context.skills["dsa-recursion"]
        assert skill.history[0].reason == "Explicit user feedback on message"

    def test_snake_case_body_accepted(self, client):
        resp = client.post("/feedback", json={"type": "confusion", "context_text": "vectors"})
        assert resp.status_code == 200
        assert resp.json()["updatedTopics"] == ["C++ Syntax", "DSA"]

    def test_no_topics(self, client, db_session):
        resp = client.post("/feedback", json={"type": "correct", "contextText": "Nice weather"})

        assert resp.json() == {"success": True, "updatedTopics": []}
        assert SkillContextRepository(db_session).get_record("default-user") is None

    def test_whitespace_text(self, client):
        resp = client.post("/feedback", json={"type": "correct", "contextText": "   "})
        assert resp.status_code == 400

    @pytest.mark.parametrize("body", [
        {"type": "correct"},
        {"type": "correct", "contextText": ""},
        {"type": "struggle", "contextText": "recursion"},
        {"contextText": "recursion"},
    ])
    def test_invalid_body(self, client, body):
        assert client.post("/feedback", json=body).status_code == 422

    def test_unexpected_error(self, client):
        with patch("mentor.api.feedback.MentorService") as mock_service_cls:
            mock_service_cls.return_value.apply_feedback.side_effect = RuntimeError("boom")
            resp = client.post("/feedback", json={"type": "correct", "contextText": "dp"})

        assert resp.status_code == 500


# ===========================================================================
# GET /skills, /skills/stats
# ===========================================================================

class TestSkills:

    def test_seed_context(self, client):
        resp = client.get("/skills")

        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] == "default-user"
        assert data["threadSummaries"] == []
        assert data["skills"]["dsa-dp"]["masteryProbability"] == 0.1

    def test_reading_does_not_persist(self, client, db_session):
        client.get("/skills")
        assert SkillContextRepository(db_session).get_record("default-user") is None

    def test_user_id_query(self, client):
        assert client.get("/skills", params={"user_id": "learner-9"}).json()["id"] == "learner-9"

    def test_reflects_feedback(self, client):
        client.post("/feedback", json={"type": "correct", "contextText": "dynamic programming"})

        dp = client.get("/skills").json()["skills"]["dsa-dp"]
        assert dp["masteryProbability"] == pytest.approx(0.15)
        assert len(dp["history"]) == 1

    def test_stats(self, client):
        resp = client.get("/skills/stats")

        assert resp.status_code == 200
        data = resp.json()
        assert data["averageMastery"] == pytest.approx(80 / 3)
        assert data["topSkill"] == "C++ Syntax"
        assert data["level"] == "Beginner"
        assert data["totalUpdates"] == 0

    def test_stats_with_naive_stored_timestamp(self, client, db_session, seed_context):
        record = seed_context.to_record()
        record["skills"]["dsa-recursion"]["lastUpdated"] = "2025-01-01T00:00:00"
        db_session.add(SkillContextRecord(user_id="default-user", context_json=json.dumps(record), version=1))
        db_session.commit()

        resp = client.get("/skills/stats")
        assert resp.status_code == 200
        assert resp.json()["lastActive"].startswith("2025-01-15T12:00:00")

    def test_stats_without_skills(self, client, db_session):
        SkillContextRepository(db_session).put(UserSkillContext(id="empty", skills={}))

        resp = client.get("/skills/stats", params={"user_id": "empty"})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "No skills tracked yet"
