"""
Application settings, read from the environment and an optional .env file.

Field names double as environment variable names (case-insensitive), so
`wikipedia_timeout` is set with WIKIPEDIA_TIMEOUT. A malformed value fails
validation with the offending variable named.
"""
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Wikipedia
    wikipedia_api_url: str = "https://en.wikipedia.org/w/api.php"
    wikipedia_timeout: float = 10.0
    quiz_generation_timeout: float = 15.0

    # Completion provider
    completion_provider: str = "anthropic"
    anthropic_api_key: Optional[str] = None
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    completion_model: str = "claude-sonnet-4-20250514"
    completion_max_tokens: int = 4000
    completion_timeout: float = 60.0
    gemini_api_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("gemini_api_key", "google_api_key")
    )
    gemini_model: Optional[str] = None

    # Storage
    database_url: str = "sqlite:///./quizzes.db"
    storage_backend: str = "sql"

    log_level: str = "INFO"

    @field_validator("completion_provider", "storage_backend")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
