"""
application.services.user_context - Lightweight user snapshot.

Implements the UserContextProvider port over the user, mood and journal
repositories. Best-effort: any failure yields UserContext.neutral().
"""

from __future__ import annotations

import logging

from domain.models import UserContext
from domain.ports import JournalRepository, MoodRepository, UserRepository

logger = logging.getLogger(__name__)

RECENT_MOOD_COUNT = 5
RECENT_JOURNAL_COUNT = 3
JOURNAL_THEME_CHARS = 100


class UserContextService:
    """Builds the context every agent and the chat layer start from."""

    def __init__(
        self,
        user_repo: UserRepository,
        mood_repo: MoodRepository,
        journal_repo: JournalRepository,
    ):
        self._user_repo = user_repo
        self._mood_repo = mood_repo
        self._journal_repo = journal_repo

    async def get_context(self, user_id: int) -> UserContext:
        try:
            user = await self._user_repo.get_by_id(user_id)
            moods = await self._mood_repo.get_recent(user_id, RECENT_MOOD_COUNT)
            journals = await self._journal_repo.get_recent(user_id, RECENT_JOURNAL_COUNT)
        except Exception:
            logger.exception("Failed to load context for user %d, using neutral context", user_id)
            return UserContext.neutral()

        return UserContext(
            current_mood=(user.current_mood if user else "") or "neutral",
            streak_days=user.streak_days if user else 0,
            recent_moods=[m.mood for m in moods],
            recent_journal_themes=[j.content[:JOURNAL_THEME_CHARS] for j in journals],
            health_status="normal",
        )
