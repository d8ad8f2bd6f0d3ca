"""
Configuration management for the SkillMentor backend.

Centralizes all configuration using Pydantic settings with environment variable support.
"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./data/skill_mentor.db",
        description="SQLAlchemy connection URL for the skill context store"
    )
    db_pool_size: int = Field(
        default=5,
        description="Database connection pool size"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Maximum overflow connections"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Connection pool timeout in seconds"
    )

    # API Configuration
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8000,
        description="API server port"
    )

    # LLM Configuration
    llm_provider: Literal["google", "openai"] = Field(
        default="google",
        description="Provider used for mentor replies"
    )
    llm_model: str = Field(
        default="gemini-flash-latest",
        description="Model id passed to the provider"
    )
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key (required when llm_provider=google)"
    )
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key (required when llm_provider=openai)"
    )
    llm_timeout: int = Field(
        default=60,
        description="Per-call LLM timeout in seconds"
    )
    llm_max_retries: int = Field(
        default=3,
        description="Retry attempts on rate limit / timeout"
    )

    # Skill Engine
    default_user_id: str = Field(
        default="default-user",
        description="User id used when a request does not name one"
    )
    topic_keywords_path: Optional[str] = Field(
        default=None,
        description="Optional JSON file overriding the topic keyword table"
    )
    context_write_mode: Literal["best_effort", "serialized"] = Field(
        default="best_effort",
        description="best_effort: last writer wins; serialized: per-user lock + version check"
    )

    # Application Settings
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def llm_api_key(self) -> str:
        """API key for the configured provider."""
        if self.llm_provider == "openai":
            return self.openai_api_key
        return self.gemini_api_key


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    Returns:
        Settings: Application settings
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (useful for testing)."""
    global _settings
    _settings = None


def validate_required_settings():
    """
    Validate that all required settings are present at runtime.

    The LLM key is only needed to stream replies, so a missing key is reported
    per request rather than here. Raises ValueError for settings that would
    break every request.
    """
    settings = get_settings()

    if not settings.database_url:
        raise ValueError("DATABASE_URL is required but not set")

    if settings.llm_provider == "openai" and settings.llm_model.startswith("gemini"):
        raise ValueError(
            f"LLM_MODEL '{settings.llm_model}' is a Gemini model but LLM_PROVIDER is 'openai'"
        )

    return True
