"""
LLM Service: Centralized interface for mentor chat calls.

Routes streaming chat calls to Google Gemini or OpenAI based on the
configured provider. Opening the stream is retried with exponential backoff
on rate limits and timeouts; other provider errors fail immediately.
"""

import json
import time
from typing import Any, Callable, Iterator, Optional, Protocol, Sequence
from openai import OpenAI, OpenAIError, RateLimitError, APITimeoutError
from google import genai
from google.genai import types
from google.genai import errors as genai_errors
import logging

from mentor.exceptions import LLMRateLimitError, LLMServiceError, LLMTimeoutError

logger = logging.getLogger(__name__)

# Gemini status codes worth retrying
_GEMINI_RETRYABLE_CODES = {429, 500, 503, 504}

SUPPORTED_PROVIDERS = ("google", "openai")


class ChatTurn(Protocol):
    role: str
    content: str


class LLMService:
    """
    Service for making LLM chat calls with retry logic and error handling.

    ``provider`` and ``model_id`` come from settings (LLM_PROVIDER, LLM_MODEL).
    """

    def __init__(
        self,
        api_key: str,
        *,
        provider: str,
        model_id: str,
        max_retries: int = 3,
        initial_retry_delay: float = 1.0,
        timeout: int = 60,
    ):
        if provider not in SUPPORTED_PROVIDERS:
            raise LLMServiceError(f"Unsupported LLM provider: {provider}")

        self.max_retries = max_retries
        self.initial_retry_delay = initial_retry_delay
        self.timeout = timeout
        self.provider = provider
        self.model_id = model_id

        self.client = None
        self.gemini_client = None
        if provider == "openai":
            self.client = OpenAI(api_key=api_key, timeout=timeout)
        else:
            self.gemini_client = genai.Client(api_key=api_key)

    # ─── Primary entry point ───────────────────────────────────────────

    def stream_chat(self, history: Sequence[ChatTurn], message: str) -> Iterator[str]:
        """
        Stream the model's reply to ``message`` given prior turns.

        ``history`` roles are "user" or anything else (treated as the model).
        Yields non-empty text chunks.
        """
        if self.provider == "openai":
            return self._stream_openai(history, message)
        return self._stream_gemini(history, message)

    # ─── Google Gemini ────────────────────────────────────────────────

    def _stream_gemini(self, history: Sequence[ChatTurn], message: str) -> Iterator[str]:
        contents = [
            types.Content(
                role="user" if turn.role == "user" else "model",
                parts=[types.Part(text=turn.content)],
            )
            for turn in history
        ]
        contents.append(types.Content(role="user", parts=[types.Part(text=message)]))

        self._log_start(len(contents))

        def _open():
            return self.gemini_client.models.generate_content_stream(
                model=self.model_id, contents=contents
            )

        return self._iterate_chunks(_open, lambda chunk: chunk.text)

    # ─── OpenAI Chat Completions ──────────────────────────────────────

    def _stream_openai(self, history: Sequence[ChatTurn], message: str) -> Iterator[str]:
        messages = [
            {"role": "user" if turn.role == "user" else "assistant", "content": turn.content}
            for turn in history
        ]
        messages.append({"role": "user", "content": message})

        self._log_start(len(messages))

        def _open():
            return self.client.chat.completions.create(
                model=self.model_id,
                messages=messages,
                stream=True,
            )

        def _text(chunk: Any) -> Optional[str]:
            if not chunk.choices:
                return None
            return chunk.choices[0].delta.content

        return self._iterate_chunks(_open, _text)

    # ─── Helpers ──────────────────────────────────────────────────────

    def _log_start(self, turn_count: int) -> None:
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "starting",
            "provider": self.provider,
            "model": self.model_id,
            "params": {"turns": turn_count, "stream": True}
        }))

    def _iterate_chunks(self, open_stream: Callable[[], Any], extract: Callable[[Any], Optional[str]]) -> Iterator[str]:
        """Open the stream (with retries, including the first chunk) and yield text."""

        def _first_chunk():
            stream = iter(open_stream())
            return next(stream, None), stream

        first, stream = self._execute_with_retry(_first_chunk, self.model_id)

        def _generate() -> Iterator[str]:
            total = 0
            chunk = first
            try:
                while chunk is not None:
                    text = extract(chunk)
                    if text:
                        total += len(text)
                        yield text
                    chunk = next(stream, None)
            except (OpenAIError, genai_errors.APIError) as e:
                logger.error(f"{self.model_id} stream interrupted: {str(e)}")
                raise LLMServiceError(f"{self.model_id} stream interrupted: {str(e)}") from e
            logger.info(json.dumps({
                "step": "LLM_CALL",
                "status": "streamed",
                "model": self.model_id,
                "output": {"response_length": total},
            }))

        return _generate()

    @staticmethod
    def _is_retryable(error: Exception) -> bool:
        if isinstance(error, (RateLimitError, APITimeoutError)):
            return True
        if isinstance(error, genai_errors.APIError):
            return error.code in _GEMINI_RETRYABLE_CODES
        return False

    def _execute_with_retry(self, api_call_fn, model_name: str) -> Any:
        """Execute API call with exponential backoff retry logic."""
        last_error = None
        delay = self.initial_retry_delay
        start_time = time.time()

        for attempt in range(self.max_retries):
            try:
                result = api_call_fn()
                duration_ms = int((time.time() - start_time) * 1000)

                logger.info(json.dumps({
                    "step": "LLM_CALL",
                    "status": "opened",
                    "model": model_name,
                    "duration_ms": duration_ms,
                    "attempts": attempt + 1
                }))

                if attempt > 0:
                    logger.info(f"{model_name} call succeeded on attempt {attempt + 1}")
                return result

            except (OpenAIError, genai_errors.APIError) as e:
                last_error = e
                if not self._is_retryable(e):
                    logger.error(f"{model_name} API error: {str(e)}")
                    raise LLMServiceError(f"{model_name} API error: {str(e)}", model_name=model_name) from e
                logger.warning(
                    f"{model_name} retryable error (attempt {attempt + 1}/{self.max_retries}): {str(e)}. "
                    f"Retrying in {delay}s..."
                )
                time.sleep(delay)
                delay *= 2

            except Exception as e:
                logger.error(f"{model_name} unexpected error: {str(e)}")
                raise LLMServiceError(f"{model_name} unexpected error: {str(e)}", model_name=model_name) from e

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(json.dumps({
            "step": "LLM_CALL",
            "status": "failed",
            "model": model_name,
            "error": str(last_error),
            "duration_ms": duration_ms,
            "attempts": self.max_retries
        }))
        if isinstance(last_error, APITimeoutError):
            raise LLMTimeoutError(self.timeout, model_name=model_name) from last_error
        if isinstance(last_error, RateLimitError) or (
            isinstance(last_error, genai_errors.APIError) and last_error.code == 429
        ):
            raise LLMRateLimitError() from last_error
        raise LLMServiceError(
            f"{model_name} failed after {self.max_retries} attempts. Last error: {str(last_error)}",
            model_name=model_name,
            attempts=self.max_retries,
        ) from last_error
