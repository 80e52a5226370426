"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.legal_assistant.models.sessions import MAX_MESSAGE_CHARS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (in-memory stores when unset)
    database_url: str | None = None

    # Cache
    redis_url: str | None = None

    # Dev corpus for the in-memory document store
    seed_dev_data: bool = True

    # Generation service (OpenAI-compatible endpoint)
    generation_api_key: SecretStr | None = None
    generation_base_url: str | None = "https://api.deepseek.com/v1"
    generation_model: str = "deepseek-chat"
    generation_temperature: float = 0.7
    generation_max_tokens: int = 1500

    # Deadline for one generation call (seconds)
    generation_timeout_s: float = 15.0

    # Conversation window sent to the generation service
    history_window: int = 10

    # Retrieval
    retrieval_limit: int = 5
    context_char_budget: int = 1000

    # Input validation
    max_message_length: int = Field(2000, gt=0, le=MAX_MESSAGE_CHARS)

    # Language of deterministic fallback answers
    response_language: Literal["ar", "en"] = "ar"

    # Rate limiting (requests per minute)
    chat_requests_per_min: int = 10

    # Extra system-prompt instruction keyed by category value
    category_instructions: dict[str, str] = {}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
