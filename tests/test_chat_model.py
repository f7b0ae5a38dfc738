from types import SimpleNamespace

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from app.services import chat_model
from app.services.chat_model import OpenAIChatModel, OpenAIModelFactory, _msg_to_dict
from app.settings import Settings
from app.utils import openai_client


class FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_msg_to_dict_maps_roles():
    assert _msg_to_dict(SystemMessage(content="s")) == {"role": "system", "content": "s"}
    assert _msg_to_dict(HumanMessage(content="h")) == {"role": "user", "content": "h"}
    assert _msg_to_dict(AIMessage(content="a")) == {"role": "assistant", "content": "a"}


@pytest.mark.asyncio
async def test_openai_model_sends_messages_and_reads_reply(monkeypatch):
    completions = FakeCompletions("4")
    fake_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(chat_model, "get_async_client", lambda: fake_client)

    model = OpenAIChatModel("gpt-4")
    reply = await model.invoke([SystemMessage(content="Be brief."), HumanMessage(content="2+2?")])

    assert reply.text == reply.content == "4"
    assert completions.requests == [
        {
            "model": "gpt-4",
            "messages": [
                {"role": "system", "content": "Be brief."},
                {"role": "user", "content": "2+2?"},
            ],
        }
    ]


@pytest.mark.asyncio
async def test_openai_model_treats_missing_content_as_empty(monkeypatch):
    completions = FakeCompletions(None)
    fake_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    monkeypatch.setattr(chat_model, "get_async_client", lambda: fake_client)

    reply = await OpenAIChatModel("gpt-4").invoke([HumanMessage(content="Hi")])

    assert reply.text == ""


def test_configure_openai_replaces_singleton(monkeypatch):
    monkeypatch.setattr(openai_client, "_client", None)

    client = openai_client.configure_openai("sk-test", "http://localhost:1234/v1")

    assert openai_client.get_async_client() is client
    assert "localhost:1234" in str(client.base_url)


def test_factory_builds_client_from_settings(monkeypatch):
    monkeypatch.setattr(openai_client, "_client", None)
    factory = OpenAIModelFactory(
        Settings(openai_api_key="sk-test", openai_base_url="http://localhost:9999/v1")
    )

    first = factory("gpt-4")
    second = factory("gpt-4o")

    assert first.client is second.client
    assert "localhost:9999" in str(first.client.base_url)
    assert second.model_id == "gpt-4o"
