"""
Custom Exception Hierarchy for the Mentor Module

Exception Hierarchy:
    MentorError (base)
    ├── SkillError
    │   └── InvalidSkillActionError (also a ValueError)
    ├── LLMError
    │   ├── LLMServiceError
    │   ├── LLMTimeoutError
    │   └── LLMRateLimitError
    ├── PromptError
    │   └── PromptTemplateError
    └── ConfigurationError
"""

from typing import Optional


class MentorError(Exception):
    """Base exception for all mentor errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Skill Errors

class SkillError(MentorError):
    """Base exception for skill-state errors."""
    pass


class InvalidSkillActionError(SkillError, ValueError):
    """Raised when the update rule receives an action it does not define."""

    def __init__(self, action: object, allowed: tuple[str, ...]):
        message = f"Invalid skill action {action!r}; expected one of: {', '.join(allowed)}"
        super().__init__(message)
        self.action = action
        self.allowed = allowed


# LLM Errors

class LLMError(MentorError):
    """Base exception for LLM-related errors."""
    pass


class LLMServiceError(LLMError):
    """Raised when LLM API call fails."""

    def __init__(self, message: str, model_name: Optional[str] = None, attempts: Optional[int] = None):
        super().__init__(message)
        self.model_name = model_name
        self.attempts = attempts


class LLMTimeoutError(LLMError):
    """Raised when LLM API call times out."""

    def __init__(self, timeout_seconds: int, model_name: Optional[str] = None):
        message = f"LLM call timed out after {timeout_seconds}s"
        if model_name:
            message += f" (model: {model_name})"
        super().__init__(message)
        self.timeout_seconds = timeout_seconds
        self.model_name = model_name


class LLMRateLimitError(LLMError):
    """Raised when LLM rate limit is exceeded."""

    def __init__(self, retry_after: Optional[int] = None):
        message = "LLM rate limit exceeded"
        if retry_after:
            message += f". Retry after {retry_after}s"
        super().__init__(message)
        self.retry_after = retry_after


# Prompt Errors

class PromptError(MentorError):
    """Base exception for prompt-related errors."""
    pass


class PromptTemplateError(PromptError):
    """Raised when prompt template rendering fails."""

    def __init__(self, template_name: str, missing_vars: list[str]):
        message = f"Prompt template '{template_name}' missing variables: {', '.join(missing_vars)}"
        super().__init__(message)
        self.template_name = template_name
        self.missing_vars = missing_vars


# Configuration Errors

class ConfigurationError(MentorError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, config_key: str, reason: str):
        message = f"Configuration error for '{config_key}': {reason}"
        super().__init__(message)
        self.config_key = config_key
        self.reason = reason
