# app/utils/json_db.py
"""
Light‑weight turn persistence using TinyDB.
------------------------------------------
* Every exchange is one document in the ``turns`` table:
  ``{session_id, seq, input, output, model}``.
* ``open_db(None)`` keeps the table in process memory; a path stores it in
  a JSON file behind TinyDB's caching middleware (flushed on each write).
* All helpers are async‑friendly (they return awaitables),
  but TinyDB itself is synchronous.  If you later move to a
  real async DB you can keep identical function signatures.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Dict, Any
from logging import getLogger

from tinydb import TinyDB, where
from tinydb.storages import JSONStorage, MemoryStorage
from tinydb.middlewares import CachingMiddleware

logger = getLogger(__name__)

TURNS_TABLE = "turns"

Turn = Dict[str, Any]


def open_db(path: str | None = None) -> TinyDB:
    if path is None:
        logger.debug("Opening in-memory turn store")
        return TinyDB(storage=MemoryStorage)

    db_path = Path(path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.debug("Opening turn store at %s", db_path)
    return TinyDB(db_path, storage=CachingMiddleware(JSONStorage))


def _flush(db: TinyDB) -> None:
    # MemoryStorage has nothing to flush
    flush = getattr(db.storage, "flush", None)
    if flush is not None:
        flush()


async def load_turns(db: TinyDB, session_id: str) -> List[Turn]:
    logger.debug("Loading turns for session: %s", session_id)
    rows = db.table(TURNS_TABLE).search(where("session_id") == session_id)
    rows.sort(key=lambda row: row["seq"])
    logger.debug("Loaded %d turns", len(rows))
    return rows


async def append_turn(
    db: TinyDB,
    session_id: str,
    input_text: str,
    output_text: str,
    model: str | None = None,
) -> Turn:
    """
    Append one exchange after the existing turns of *session_id*.
    Returns the stored document.
    """
    table = db.table(TURNS_TABLE)
    turn = {
        "session_id": session_id,
        "seq": table.count(where("session_id") == session_id),
        "input": input_text,
        "output": output_text,
        "model": model,
    }
    logger.debug("Saving turn %d for session %s", turn["seq"], session_id)
    doc_id = table.insert(turn)
    try:
        _flush(db)
    except Exception:
        # the cache already holds the turn; drop it so history is unchanged
        table.remove(doc_ids=[doc_id])
        raise
    return turn

