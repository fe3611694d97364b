"""
infrastructure.persistence.journal_repo - SQLite journal entry repository.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from domain.entities import JournalEntry
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)


class SQLiteJournalRepository:
    """Async SQLite implementation of JournalRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, entry: JournalEntry) -> JournalEntry:
        timestamp = entry.timestamp or datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO journal_entries (user_id, content, prompt, timestamp)
                   VALUES (?, ?, ?, ?)""",
                (entry.user_id, entry.content, entry.prompt, timestamp),
            )
        entry.id = cursor.lastrowid
        entry.timestamp = timestamp
        return entry

    async def get_recent(self, user_id: int, limit: int = 10) -> list[JournalEntry]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM journal_entries
                   WHERE user_id = ?
                   ORDER BY timestamp DESC, id DESC
                   LIMIT ?""",
                (user_id, limit),
            )
            return [self._row_to_entry(r) for r in rows]

    @staticmethod
    def _row_to_entry(row) -> JournalEntry:
        return JournalEntry(
            id=row["id"],
            user_id=row["user_id"],
            content=row["content"],
            prompt=row["prompt"] or "",
            timestamp=row["timestamp"] or "",
        )
