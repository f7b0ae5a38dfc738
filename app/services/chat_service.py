# app/services/chat_service.py
"""One chat turn: prompt in, reply out, history kept per session.

Message order sent to the model is fixed: the system prompt, every prior
turn of the session as human/assistant pairs, then the new prompt. A turn
is written to memory only once the model has answered.
"""

from __future__ import annotations

from typing import Any, List, MutableMapping, Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder
from logging import getLogger

from app.services.chat_model import ChatModelFactory
from app.services.history_manager import MemoryRegistry, Turn
from app.services.session_store import resolve_session_uuid
from app.settings import Settings, get_settings
from app.utils.exceptions import InvalidPromptError, UpstreamError

logger = getLogger(__name__)

PROMPT_TEMPLATE = ChatPromptTemplate.from_messages(
    [
        ("system", "{system_message}"),
        MessagesPlaceholder("history"),
        ("human", "{prompt}"),
    ]
)


def history_to_messages(turns: List[Turn]) -> List[BaseMessage]:
    messages: List[BaseMessage] = []
    for input_text, output_text in turns:
        messages.append(HumanMessage(content=input_text))
        messages.append(AIMessage(content=output_text))
    return messages


def build_messages(
    system_message: str, turns: List[Turn], prompt: str
) -> List[BaseMessage]:
    prompt_value = PROMPT_TEMPLATE.invoke(
        {
            "system_message": system_message,
            "history": history_to_messages(turns),
            "prompt": prompt,
        }
    )
    return prompt_value.to_messages()


async def process_prompt(
    session: MutableMapping[str, Any],
    registry: MemoryRegistry,
    model_factory: ChatModelFactory,
    prompt: Optional[str],
    system_prompt: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> str:
    """Run one turn for the caller's session and return the reply text.

    Raises InvalidPromptError before touching the session, the model or the
    memory when *prompt* is empty. Every later failure is re-raised as
    UpstreamError and leaves the session's history as it was.
    """
    if not prompt:
        raise InvalidPromptError("Prompt is required")

    session_uuid = resolve_session_uuid(session)
    settings = settings or get_settings()
    system_message = system_prompt or settings.default_system_prompt
    model_id = model or settings.default_model

    try:
        ai = model_factory(model_id)
        async with registry.lock_for(session_uuid):
            memory = registry.get(session_uuid, ai)
            turns = await memory.load_history()
            messages = build_messages(system_message, turns, prompt)
            logger.debug(
                "Session %s: sending %d messages to %s",
                session_uuid,
                len(messages),
                model_id,
            )
            reply = await ai.invoke(messages)
            await memory.save_turn(prompt, reply.content)
    except Exception as e:
        logger.exception("Error calling OpenAI for session %s: %s", session_uuid, e)
        raise UpstreamError(str(e)) from e

    return reply.text
