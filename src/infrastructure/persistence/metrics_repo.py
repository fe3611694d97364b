"""
infrastructure.persistence.metrics_repo - SQLite wellness metrics repository.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from domain.entities import WellnessMetrics
from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)


class SQLiteMetricsRepository:
    """Async SQLite implementation of MetricsRepository."""

    def __init__(self, connection: AsyncSQLiteConnection):
        self._conn = connection

    async def save(self, metrics: WellnessMetrics) -> WellnessMetrics:
        timestamp = metrics.timestamp or datetime.now(timezone.utc).isoformat()
        async with self._conn.acquire() as conn:
            cursor = await conn.execute(
                """INSERT INTO wellness_metrics
                   (user_id, energy_level, stress_level, focus_time, hydration_glasses, timestamp)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (metrics.user_id, metrics.energy_level, metrics.stress_level,
                 metrics.focus_time, metrics.hydration_glasses, timestamp),
            )
        metrics.id = cursor.lastrowid
        metrics.timestamp = timestamp
        return metrics

    async def get_recent(self, user_id: int, days: int = 7) -> list[WellnessMetrics]:
        """Most recent *days* daily records, newest first."""
        async with self._conn.acquire() as conn:
            rows = await conn.execute_fetchall(
                """SELECT * FROM wellness_metrics
                   WHERE user_id = ?
                   ORDER BY timestamp DESC, id DESC
                   LIMIT ?""",
                (user_id, days),
            )
        return [self._row_to_metrics(r) for r in rows]

    @staticmethod
    def _row_to_metrics(row) -> WellnessMetrics:
        return WellnessMetrics(
            id=row["id"],
            user_id=row["user_id"],
            energy_level=row["energy_level"],
            stress_level=row["stress_level"],
            focus_time=row["focus_time"],
            hydration_glasses=row["hydration_glasses"],
            timestamp=row["timestamp"] or "",
        )
