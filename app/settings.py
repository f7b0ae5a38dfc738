# app/settings.py

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant."
DEFAULT_MODEL = "gpt-3.5-turbo"


class Settings(BaseSettings):
    """Runtime configuration, read from the environment or a local .env."""

    # OpenAI; when unset the SDK falls back to its own env lookup
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None

    default_model: str = DEFAULT_MODEL
    default_system_prompt: str = DEFAULT_SYSTEM_PROMPT

    # Signed cookie carrying the session uuid
    session_secret: str = "change-me"
    session_cookie: str = "session"

    # None keeps conversation memory in process only
    memory_db_path: Optional[str] = None

    log_level: str = "INFO"
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
