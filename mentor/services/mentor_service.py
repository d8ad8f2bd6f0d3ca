"""Mentor conversation logic: skill updates, persona calibration and replies."""

import logging
import threading
import zlib
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import ContextManager, Iterable, Iterator, Optional, Sequence

from sqlalchemy.orm import Session as DBSession

from config import Settings, get_settings
from mentor.models.messages import Message, SkillStats
from mentor.models.skill_graph import SkillCategory, UserSkillContext
from mentor.prompts.mentor_prompts import MENTOR_ACKNOWLEDGEMENT, build_mentor_system_prompt
from mentor.prompts.persona import synthesize_persona
from mentor.services.sentiment import classify_sentiment
from mentor.services.skill_stats import compute_skill_stats
from mentor.services.skill_updater import SkillAction, update_skill
from mentor.services.topic_detector import TopicKeywords, detect_topics, get_topic_keywords
from shared.repositories.skill_context_repository import SkillContextRepository
from shared.services.llm_service import LLMService
from shared.utils.exceptions import LLMNotConfiguredException

logger = logging.getLogger("mentor.mentor_service")

IMPLICIT_FEEDBACK_REASON = "Implicit user feedback"
EXPLICIT_FEEDBACK_REASON = "Explicit user feedback on message"

# Fixed pool of locks shared by hash; user ids that collide just wait on each other
LOCK_STRIPES = 64
_user_locks = tuple(threading.Lock() for _ in range(LOCK_STRIPES))


def _lock_for(user_id: str) -> threading.Lock:
    return _user_locks[zlib.crc32(user_id.encode("utf-8")) % LOCK_STRIPES]


@dataclass
class TurnPreparation:
    """Everything derived from one user message before the LLM is called."""

    topics: set[SkillCategory]
    sentiment: Optional[str]
    context: UserSkillContext
    persona_stub: str
    system_prompt: str
    updated_skill_ids: list[str] = field(default_factory=list)


class MentorService:
    """
    Wires the skill engine to the context store and the LLM.

    Read-modify-write of the stored context follows CONTEXT_WRITE_MODE:
    ``best_effort`` saves unconditionally (concurrent updates for the same
    user can be lost; the store logs when that happens), ``serialized`` holds
    the user's lock stripe and saves with a version check.
    """

    def __init__(
        self,
        db: DBSession,
        llm_service: Optional[LLMService] = None,
        settings: Optional[Settings] = None,
        keywords: Optional[TopicKeywords] = None,
    ):
        self.settings = settings or get_settings()
        self.context_repo = SkillContextRepository(db)
        self.keywords = keywords if keywords is not None else get_topic_keywords(self.settings.topic_keywords_path)
        self._llm_service = llm_service

    @property
    def serialized_writes(self) -> bool:
        return self.settings.context_write_mode == "serialized"

    def _user(self, user_id: Optional[str]) -> str:
        return user_id or self.settings.default_user_id

    # ─── Read contract ────────────────────────────────────────────────

    def get_context(self, user_id: Optional[str] = None) -> UserSkillContext:
        return self.context_repo.get(self._user(user_id)).context

    def get_stats(self, user_id: Optional[str] = None) -> Optional[SkillStats]:
        return compute_skill_stats(self.get_context(user_id))

    # ─── Skill updates ────────────────────────────────────────────────

    def _write_guard(self, user_id: str) -> ContextManager:
        if self.serialized_writes:
            return _lock_for(user_id)
        return nullcontext()

    def _apply_signal(
        self,
        user_id: str,
        topics: Iterable[SkillCategory],
        action: SkillAction,
        reason: str,
    ) -> tuple[UserSkillContext, list[str]]:
        """Load, update every skill matching the topics, save once."""
        with self._write_guard(user_id):
            stored = self.context_repo.get(user_id)
            context = stored.context

            updated_ids = []
            for skill in context.skills_for_topics(topics):
                context.skills[skill.id] = update_skill(skill, action, reason)
                updated_ids.append(skill.id)

            saved = self.context_repo.put(
                context,
                expected_version=stored.version,
                strict=self.serialized_writes,
            )
            if not saved:
                logger.error(f"Skill context for {user_id} was not saved; {len(updated_ids)} updates dropped")

        logger.info(f"Applied '{action}' for {user_id} to {updated_ids or 'no skills'}")
        return context, updated_ids

    def prepare_turn(self, user_text: str, user_id: Optional[str] = None) -> TurnPreparation:
        """
        Process one inbound user message.

        Detects topics and sentiment, updates matching skills when both are
        present, then renders the persona and the full system prompt.
        """
        user_id = self._user(user_id)
        topics = detect_topics(user_text, self.keywords)
        sentiment = classify_sentiment(user_text)

        updated_ids: list[str] = []
        if sentiment and topics:
            context, updated_ids = self._apply_signal(user_id, topics, sentiment, IMPLICIT_FEEDBACK_REASON)
        else:
            context = self.context_repo.get(user_id).context

        persona_stub = synthesize_persona(context, topics)
        logger.info(f"Turn for {user_id}: topics={sorted(topics)} sentiment={sentiment}")

        return TurnPreparation(
            topics=topics,
            sentiment=sentiment,
            context=context,
            persona_stub=persona_stub,
            system_prompt=build_mentor_system_prompt(persona_stub),
            updated_skill_ids=updated_ids,
        )

    def apply_feedback(
        self,
        feedback_type: SkillAction,
        context_text: str,
        user_id: Optional[str] = None,
    ) -> set[SkillCategory]:
        """
        Apply explicit feedback about a message, bypassing sentiment detection.

        Returns:
            Topics detected in ``context_text`` (empty: nothing was changed)
        """
        user_id = self._user(user_id)
        topics = detect_topics(context_text, self.keywords)
        if topics:
            self._apply_signal(user_id, topics, feedback_type, EXPLICIT_FEEDBACK_REASON)
        return topics

    # ─── Replies ──────────────────────────────────────────────────────

    def _get_llm_service(self) -> LLMService:
        if self._llm_service is None:
            if not self.settings.llm_api_key:
                raise LLMNotConfiguredException(self.settings.llm_provider)
            self._llm_service = LLMService(
                self.settings.llm_api_key,
                provider=self.settings.llm_provider,
                model_id=self.settings.llm_model,
                max_retries=self.settings.llm_max_retries,
                timeout=self.settings.llm_timeout,
            )
        return self._llm_service

    @staticmethod
    def build_chat_history(system_prompt: str, prior: Sequence[Message]) -> list[Message]:
        """Prime the history with the system prompt and the mentor's acknowledgement."""
        return [
            Message(role="user", content=system_prompt),
            Message(role="assistant", content=MENTOR_ACKNOWLEDGEMENT),
            *prior,
        ]

    def stream_reply(
        self,
        messages: Sequence[Message],
        user_id: Optional[str] = None,
    ) -> tuple[TurnPreparation, Iterator[str]]:
        """
        Run the per-turn skill logic on the last message and stream the reply.

        Raises:
            ValueError: no messages
            LLMNotConfiguredException: provider key missing
        """
        if not messages:
            raise ValueError("No message provided")

        latest = messages[-1]
        preparation = self.prepare_turn(latest.content, user_id)

        llm = self._get_llm_service()
        history = self.build_chat_history(preparation.system_prompt, messages[:-1])
        return preparation, llm.stream_chat(history, latest.content)
