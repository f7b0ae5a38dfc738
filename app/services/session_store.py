# app/services/session_store.py
import uuid
from typing import Any, MutableMapping
from logging import getLogger

logger = getLogger(__name__)

SESSION_KEY = "sessionUuid"


def resolve_session_uuid(session: MutableMapping[str, Any]) -> str:
    """Return the session's uuid, minting and storing one on first use."""
    session_uuid = session.get(SESSION_KEY)
    if not session_uuid:
        session_uuid = str(uuid.uuid4())
        session[SESSION_KEY] = session_uuid
        logger.debug("Started session %s", session_uuid)
    return session_uuid
