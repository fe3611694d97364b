"""
infrastructure.persistence.user_repo - SQLite user repository.

Implements the UserRepository port.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from domain.entities import User
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)


class SQLiteUserRepository:
    """Async SQLite implementation of UserRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get_by_id(self, user_id: int) -> Optional[User]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM users WHERE id = ?",
                (user_id,),
            )
            if not rows:
                return None
            return self._row_to_user(rows[0])

    async def save(self, user: User) -> User:
        """Insert a new user or update name/mood/streak of an existing one."""
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            if user.id is not None:
                rows = await conn.execute_fetchall(
                    "SELECT id FROM users WHERE id = ?", (user.id,),
                )
                if rows:
                    await conn.execute(
                        """UPDATE users
                           SET name = ?, current_mood = ?, streak_days = ?,
                               last_mood_date = ?, updated_at = ?
                           WHERE id = ?""",
                        (user.name, user.current_mood, user.streak_days,
                         user.last_mood_date, now, user.id),
                    )
                    user.updated_at = now
                    return user
            cursor = await conn.execute(
                """INSERT INTO users
                   (id, name, current_mood, streak_days, last_mood_date, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (user.id, user.name, user.current_mood, user.streak_days,
                 user.last_mood_date, now, now),
            )
            user.id = cursor.lastrowid
            user.created_at = user.updated_at = now
            return user

    async def ensure(self, user_id: int, name: str = "") -> User:
        """Return the user, creating it with defaults on first access."""
        existing = await self.get_by_id(user_id)
        if existing is not None:
            return existing
        logger.info("Creating user %d (%s)", user_id, name or "unnamed")
        return await self.save(User(id=user_id, name=name or f"User {user_id}"))

    @staticmethod
    def _row_to_user(row) -> User:
        return User(
            id=row["id"],
            name=row["name"] or "",
            current_mood=row["current_mood"] or "neutral",
            streak_days=row["streak_days"] or 0,
            last_mood_date=row["last_mood_date"] or "",
            created_at=row["created_at"] or "",
            updated_at=row["updated_at"] or "",
        )
