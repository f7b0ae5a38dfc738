from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.services.chat_model import ChatModelReply
from app.services.history_manager import MemoryRegistry


class FakeChatModel:
    def __init__(self, factory: "FakeModelFactory", model_id: str):
        self.factory = factory
        self.model_id = model_id

    async def invoke(self, messages):
        self.factory.calls.append(messages)
        await asyncio.sleep(0)
        if self.factory.error is not None:
            raise self.factory.error
        reply = self.factory.replies.pop(0) if self.factory.replies else "ok"
        return ChatModelReply(text=reply, content=reply)


class FakeModelFactory:
    """Stands in for the OpenAI factory; records every model id and call."""

    def __init__(self, *replies: str, error: Exception | None = None):
        self.replies = list(replies)
        self.error = error
        self.created = []
        self.calls = []

    def __call__(self, model_id: str) -> FakeChatModel:
        self.created.append(model_id)
        return FakeChatModel(self, model_id)


@pytest.fixture
def registry():
    registry = MemoryRegistry()
    yield registry
    registry.close()


@pytest.fixture
def factory():
    return FakeModelFactory()


@pytest.fixture
def client(registry, factory):
    app = create_app(model_factory=factory, registry=registry)
    with TestClient(app) as client:
        yield client


def stored_turns(registry: MemoryRegistry):
    return sorted(
        registry.db.table("turns").all(),
        key=lambda row: (row["session_id"], row["seq"]),
    )
