"""
infrastructure.persistence.mood_repo - SQLite mood entry repository.

Saving an entry also moves the user's current mood and daily streak in
the same transaction, so the user row never disagrees with the latest
entry.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from domain.entities import MoodEntry
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)


def next_streak(last_mood_date: str, streak_days: int, today: date) -> int:
    """Daily check-in streak: same day keeps it, next day extends it, a gap resets it."""
    if not last_mood_date:
        return 1
    try:
        last = date.fromisoformat(last_mood_date)
    except ValueError:
        return 1
    if last == today:
        return max(streak_days, 1)
    if last == today - timedelta(days=1):
        return streak_days + 1
    return 1


class SQLiteMoodRepository:
    """Async SQLite implementation of MoodRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, entry: MoodEntry) -> MoodEntry:
        now = datetime.now(timezone.utc)
        timestamp = entry.timestamp or now.isoformat()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO mood_entries (user_id, mood, note, timestamp)
                   VALUES (?, ?, ?, ?)""",
                (entry.user_id, entry.mood, entry.note, timestamp),
            )
            rows = await conn.execute_fetchall(
                "SELECT streak_days, last_mood_date FROM users WHERE id = ?",
                (entry.user_id,),
            )
            if rows:
                today = now.date()
                streak = next_streak(rows[0]["last_mood_date"] or "", rows[0]["streak_days"] or 0, today)
                await conn.execute(
                    """UPDATE users
                       SET current_mood = ?, streak_days = ?, last_mood_date = ?, updated_at = ?
                       WHERE id = ?""",
                    (entry.mood, streak, today.isoformat(), now.isoformat(), entry.user_id),
                )
        entry.id = cursor.lastrowid
        entry.timestamp = timestamp
        logger.debug("Saved mood '%s' for user %s", entry.mood, entry.user_id)
        return entry

    async def get_recent(self, user_id: int, limit: int = 30) -> list[MoodEntry]:
        """Newest first."""
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM mood_entries
                   WHERE user_id = ?
                   ORDER BY timestamp DESC, id DESC
                   LIMIT ?""",
                (user_id, limit),
            )
            return [self._row_to_entry(r) for r in rows]

    @staticmethod
    def _row_to_entry(row) -> MoodEntry:
        return MoodEntry(
            id=row["id"],
            user_id=row["user_id"],
            mood=row["mood"],
            note=row["note"] or "",
            timestamp=row["timestamp"] or "",
        )
