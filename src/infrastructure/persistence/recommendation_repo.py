"""
infrastructure.persistence.recommendation_repo - SQLite recommendation store.

Implements the RecommendationStore port. Records are never updated apart
from the is_active flag and never deleted.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from domain.entities import AgentRecommendation
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)


class SQLiteRecommendationStore:
    """Async SQLite implementation of RecommendationStore."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def create(
        self, user_id: int, agent_name: str, type: str, content: dict[str, Any],
    ) -> AgentRecommendation:
        now = datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO agent_recommendations
                   (user_id, agent_name, type, content, is_active, created_at)
                   VALUES (?, ?, ?, ?, 1, ?)""",
                (user_id, agent_name, type, json.dumps(content, default=str), now),
            )
        logger.debug("Stored %s recommendation %d for user %d", type, cursor.lastrowid, user_id)
        return AgentRecommendation(
            id=cursor.lastrowid,
            user_id=user_id,
            agent_name=agent_name,
            type=type,
            content=json.loads(json.dumps(content, default=str)),
            is_active=True,
            created_at=now,
        )

    async def get_by_id(self, recommendation_id: int) -> Optional[AgentRecommendation]:
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                "SELECT * FROM agent_recommendations WHERE id = ?",
                (recommendation_id,),
            )
        if not rows:
            return None
        return self._row_to_recommendation(rows[0])

    async def list_active(
        self, user_id: int, agent_name: Optional[str] = None,
    ) -> list[AgentRecommendation]:
        """Active records, newest first."""
        query = "SELECT * FROM agent_recommendations WHERE user_id = ? AND is_active = 1"
        params: tuple[Any, ...] = (user_id,)
        if agent_name:
            query += " AND agent_name = ?"
            params += (agent_name,)
        query += " ORDER BY created_at DESC, id DESC"
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(query, params)
        return [self._row_to_recommendation(r) for r in rows]

    async def deactivate(self, recommendation_id: int) -> None:
        async with self._conn.acquire() as conn:
            await conn.execute(
                "UPDATE agent_recommendations SET is_active = 0 WHERE id = ?",
                (recommendation_id,),
            )

    @staticmethod
    def _row_to_recommendation(row) -> AgentRecommendation:
        return AgentRecommendation(
            id=row["id"],
            user_id=row["user_id"],
            agent_name=row["agent_name"],
            type=row["type"],
            content=json.loads(row["content"]) if row["content"] else {},
            is_active=bool(row["is_active"]),
            created_at=row["created_at"] or "",
        )
