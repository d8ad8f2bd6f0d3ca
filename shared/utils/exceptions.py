"""Custom exception hierarchy for better error handling."""
from fastapi import HTTPException, status


class SkillMentorException(Exception):
    """Base exception for all application errors."""
    pass


class LLMProviderException(SkillMentorException):
    """Raised when LLM provider fails."""

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        super().__init__(f"LLM provider error: {str(original_error)}")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="AI service temporarily unavailable"
        )


class LLMNotConfiguredException(SkillMentorException):
    """Raised when a reply is requested but no provider key is set."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"API key for LLM provider '{provider}' is missing")

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API Key is missing"
        )


class StaleStateError(SkillMentorException):
    """Raised when an optimistic locking conflict is detected during a skill context update."""

    def __init__(self, message: str):
        super().__init__(message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(self)
        )
