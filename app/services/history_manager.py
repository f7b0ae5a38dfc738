from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Tuple
from logging import getLogger

from tinydb import TinyDB

from app.services.chat_model import ChatModelClient
from app.utils import json_db

logger = getLogger(__name__)

Turn = Tuple[str, str]


class ConversationBuffer:
    """Append-only (input, output) history of one session."""

    def __init__(self, db: TinyDB, session_id: str):
        self.db = db
        self.session_id = session_id
        self.model_id: Optional[str] = None

    async def load_history(self) -> List[Turn]:
        rows = await json_db.load_turns(self.db, self.session_id)
        return [(row["input"], row["output"]) for row in rows]

    async def save_turn(self, input_text: str, output_text: str) -> None:
        await json_db.append_turn(
            self.db, self.session_id, input_text, output_text, model=self.model_id
        )


class MemoryRegistry:
    """Process-wide map of session id → conversation buffer.

    Created by the application lifespan and handed to the endpoint through a
    dependency. ``lock_for`` gives one lock per session so a session's turns
    are recorded one request at a time.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db = json_db.open_db(db_path)
        self._buffers: Dict[str, ConversationBuffer] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(
        self, session_id: str, model: Optional[ChatModelClient] = None
    ) -> ConversationBuffer:
        buffer = self._buffers.get(session_id)
        if buffer is None:
            logger.debug("Creating memory buffer for session %s", session_id)
            buffer = ConversationBuffer(self.db, session_id)
            self._buffers[session_id] = buffer
        if model is not None:
            # turns saved from here on are tagged with this model
            buffer.model_id = model.model_id
        return buffer

    def lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    def close(self) -> None:
        logger.debug("Closing memory store (%d sessions)", len(self._buffers))
        self.db.close()
