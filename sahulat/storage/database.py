"""SQLite storage for chat history."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS chat_messages (
    chat_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id       TEXT NOT NULL,
    message       TEXT NOT NULL,
    response      TEXT NOT NULL,
    recommended_programs TEXT,  -- JSON list of program ids
    web_results   TEXT,  -- JSON list of URLs
    confidence    REAL,
    created_at    TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_chat_user ON chat_messages(user_id);
"""


class ChatLogRepository:
    """SQLite-backed log of chat exchanges. Write-only from the pipeline's side."""

    def __init__(self, db_path: str = "chats.db") -> None:
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    # -- Insert -----------------------------------------------------------------

    def log_chat(
        self,
        user_id: str,
        message: str,
        response: str,
        recommended_programs: list[str] | None = None,
        web_results: list[str] | None = None,
        confidence: float | None = None,
    ) -> int:
        """Record one exchange. Returns the new chat id."""
        cursor = self._conn.execute(
            """
            INSERT INTO chat_messages (user_id, message, response,
                                       recommended_programs, web_results, confidence)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                user_id,
                message,
                response,
                json.dumps(recommended_programs or []),
                json.dumps(web_results or []),
                confidence,
            ),
        )
        self._conn.commit()
        logger.debug("Logged chat %d for user %s", cursor.lastrowid, user_id)
        return cursor.lastrowid

    # -- Queries ----------------------------------------------------------------

    def get_recent_chats(self, user_id: str, limit: int = 20) -> list[dict]:
        """Most recent exchanges for a user, newest first."""
        rows = self._conn.execute(
            "SELECT * FROM chat_messages WHERE user_id = ? ORDER BY chat_id DESC LIMIT ?",
            (user_id, limit),
        ).fetchall()
        chats = []
        for row in rows:
            chat = dict(row)
            chat["recommended_programs"] = json.loads(chat["recommended_programs"] or "[]")
            chat["web_results"] = json.loads(chat["web_results"] or "[]")
            chats.append(chat)
        return chats
