"""Transcript persistence: append-only message storage."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Sequence

from ella.core.db import sqlite_connection

from .models import Message


class TranscriptStore(ABC):
    """Abstract interface for persisting transcript messages.

    There is deliberately no update or delete: stored transcripts are an audit
    trail of what was said.
    """

    @abstractmethod
    def append(self, conversation_id: str, message: Message) -> None:
        """Persist a single message at the end of a conversation."""

    @abstractmethod
    def fetch(self, conversation_id: str, limit: int | None = None) -> Sequence[Message]:
        """Return messages in append order, only the most recent ``limit`` if given."""

    @abstractmethod
    def iter_conversations(self) -> Iterable[str]:
        """Iterate over known conversation identifiers."""


class SQLiteTranscriptStore(TranscriptStore):
    """SQLite-backed transcript store."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        """Create required tables if they do not exist."""

        with sqlite_connection(self.db_path) as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS conversations (
                    conversation_id TEXT PRIMARY KEY
                );

                CREATE TABLE IF NOT EXISTS messages (
                    conversation_id TEXT NOT NULL,
                    message_id INTEGER NOT NULL,
                    role TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    PRIMARY KEY (conversation_id, message_id),
                    FOREIGN KEY (conversation_id) REFERENCES conversations (conversation_id)
                );
                """
            )

    def append(self, conversation_id: str, message: Message) -> None:
        with sqlite_connection(self.db_path) as conn:
            conn.execute(
                "INSERT OR IGNORE INTO conversations(conversation_id) VALUES (?)",
                (conversation_id,),
            )
            conn.execute(
                """
                INSERT INTO messages
                    (conversation_id, message_id, role, content, created_at, payload)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    conversation_id,
                    message.id,
                    message.role.value,
                    message.text,
                    message.timestamp.isoformat(),
                    json.dumps(message.to_dict(), separators=(",", ":")),
                ),
            )

    def fetch(self, conversation_id: str, limit: int | None = None) -> Sequence[Message]:
        query = "SELECT payload FROM messages WHERE conversation_id = ? ORDER BY message_id DESC"
        params: tuple = (conversation_id,)
        if limit is not None:
            query += " LIMIT ?"
            params += (limit,)

        with sqlite_connection(self.db_path) as conn:
            rows = conn.execute(query, params).fetchall()

        messages = [Message.from_dict(json.loads(row["payload"])) for row in rows]
        messages.reverse()
        return messages

    def iter_conversations(self) -> Iterable[str]:
        with sqlite_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT conversation_id FROM conversations ORDER BY conversation_id"
            )
            return [row["conversation_id"] for row in rows]
