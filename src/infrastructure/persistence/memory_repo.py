"""
infrastructure.persistence.memory_repo - SQLite agent memory store.

Implements the MemoryStore port: one JSON blob per (user, agent), created
empty on first read, replaced wholesale on every write.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)


class SQLiteMemoryStore:
    """Async SQLite implementation of MemoryStore."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def get(self, user_id: int, agent_name: str) -> dict[str, Any]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT memory_data FROM agent_memory WHERE user_id = ? AND agent_name = ?",
                (user_id, agent_name),
            )
        if not rows:
            return {}
        return self._decode(rows[0]["memory_data"], user_id, agent_name)

    async def put(self, user_id: int, agent_name: str, data: dict[str, Any]) -> None:
        """Last write wins."""
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            await conn.execute(
                """INSERT INTO agent_memory (user_id, agent_name, memory_data, last_updated)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT (user_id, agent_name)
                   DO UPDATE SET memory_data = excluded.memory_data,
                                 last_updated = excluded.last_updated""",
                (user_id, agent_name, json.dumps(data, default=str), now),
            )

    async def get_all_for_user(self, user_id: int) -> dict[str, dict[str, Any]]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT agent_name, memory_data FROM agent_memory WHERE user_id = ?",
                (user_id,),
            )
        return {
            r["agent_name"]: self._decode(r["memory_data"], user_id, r["agent_name"])
            for r in rows
        }

    @staticmethod
    def _decode(raw: str, user_id: int, agent_name: str) -> dict[str, Any]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(
                "Corrupt memory for user %d / %s, starting empty", user_id, agent_name,
            )
            return {}
        return data if isinstance(data, dict) else {}
