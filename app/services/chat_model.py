# app/services/chat_model.py
"""Model client seam used by the chat endpoint.

The endpoint only needs ``factory(model_id).invoke(messages)``; anything
satisfying :class:`ChatModelClient` can stand in for OpenAI (tests pass a
fake factory through ``create_app``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from langchain_core.messages import BaseMessage
from logging import getLogger
from openai import AsyncOpenAI

from app.settings import Settings
from app.utils.openai_client import configure_openai, get_async_client

logger = getLogger(__name__)

# langchain message type → OpenAI chat role
_ROLES = {
    "system": "system",
    "human": "user",
    "ai": "assistant",
}


@dataclass
class ChatModelReply:
    text: str
    content: Any


class ChatModelClient(Protocol):
    model_id: str

    async def invoke(self, messages: List[BaseMessage]) -> ChatModelReply:
        ...


ChatModelFactory = Callable[[str], ChatModelClient]


def _msg_to_dict(msg: BaseMessage) -> Dict[str, str]:
    """Convert a langchain message → plain dict for the OpenAI SDK."""
    role = _ROLES.get(msg.type)
    if role is None:
        raise ValueError(f"Unsupported message type: {msg.type}")
    return {"role": role, "content": msg.content}


class OpenAIChatModel:
    """Chat-completion client bound to one model id."""

    def __init__(self, model_id: str, client: Optional[AsyncOpenAI] = None):
        self.model_id = model_id
        self.client = client or get_async_client()

    async def invoke(self, messages: List[BaseMessage]) -> ChatModelReply:
        logger.debug("Calling %s with %d messages", self.model_id, len(messages))
        completion = await self.client.chat.completions.create(
            model=self.model_id,
            messages=[_msg_to_dict(m) for m in messages],
        )
        content = completion.choices[0].message.content or ""
        return ChatModelReply(text=content, content=content)


class OpenAIModelFactory:
    """Builds model clients sharing one AsyncOpenAI configured from *settings*.

    The SDK client is created on first use so a missing key surfaces as a
    failed request rather than a failed startup.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.client: Optional[AsyncOpenAI] = None

    def __call__(self, model_id: str) -> OpenAIChatModel:
        if self.client is None:
            self.client = configure_openai(
                self.settings.openai_api_key, self.settings.openai_base_url
            )
        return OpenAIChatModel(model_id, self.client)
