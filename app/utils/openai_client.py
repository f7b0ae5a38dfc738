# app/utils/openai_client.py
from openai import AsyncOpenAI

from app.settings import get_settings

__all__ = [
    "configure_openai",
    "get_async_client",
]

_client: AsyncOpenAI | None = None  # singleton


def configure_openai(api_key: str | None = None, api_base: str | None = None) -> AsyncOpenAI:
    """
    Build the reusable AsyncOpenAI() client. With no arguments the SDK reads
    OPENAI_API_KEY / OPENAI_BASE_URL itself.
    """
    global _client
    # failures go straight back to the caller, no SDK retries
    _client = AsyncOpenAI(api_key=api_key, base_url=api_base, max_retries=0)
    return _client


def get_async_client() -> AsyncOpenAI:
    """
    Returns the singleton AsyncOpenAI client, configuring it from settings
    on first use.
    """
    if _client is None:
        settings = get_settings()
        return configure_openai(settings.openai_api_key, settings.openai_base_url)
    return _client
