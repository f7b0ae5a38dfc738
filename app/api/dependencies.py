# app/api/dependencies.py
from fastapi import Request
from typing import TYPE_CHECKING

from app.utils.exceptions import ServiceUnavailableError

if TYPE_CHECKING:
    from app.services.chat_model import ChatModelFactory
    from app.services.history_manager import MemoryRegistry
    from app.settings import Settings


def get_app_settings(request: Request) -> "Settings":
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        raise ServiceUnavailableError("Settings are not loaded.")
    return settings


def get_memory_registry(request: Request) -> "MemoryRegistry":
    registry = getattr(request.app.state, "memory_registry", None)
    if registry is None:
        raise ServiceUnavailableError("Conversation memory is not initialized.")
    return registry


def get_model_factory(request: Request) -> "ChatModelFactory":
    factory = getattr(request.app.state, "model_factory", None)
    if factory is None:
        raise ServiceUnavailableError("Chat model is not configured.")
    return factory
