"""
domain.ports - Abstract interfaces (Protocols) for all system boundaries.

These define WHAT the agents need without specifying HOW. Infrastructure
modules provide concrete implementations; agents and the orchestrator
depend only on these protocols, never on concrete classes.

Using typing.Protocol (structural typing) instead of ABC: any class that
implements the methods satisfies the port without explicit inheritance.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable

from domain.models import ChatTurn, ConversationIntent, UserContext
from domain.entities import (
    User,
    MoodEntry,
    JournalEntry,
    AgentRecommendation,
    WellnessMetrics,
)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

@runtime_checkable
class MemoryStore(Protocol):
    """Per-(user, agent) memory blob. Last write wins."""

    async def get(self, user_id: int, agent_name: str) -> dict[str, Any]: ...
    async def put(self, user_id: int, agent_name: str, data: dict[str, Any]) -> None: ...
    async def get_all_for_user(self, user_id: int) -> dict[str, dict[str, Any]]: ...


@runtime_checkable
class RecommendationStore(Protocol):
    """Append-only recommendation records with an active flag."""

    async def create(
        self, user_id: int, agent_name: str, type: str, content: dict[str, Any],
    ) -> AgentRecommendation: ...
    async def get_by_id(self, recommendation_id: int) -> AgentRecommendation | None: ...
    async def list_active(
        self, user_id: int, agent_name: Optional[str] = None,
    ) -> list[AgentRecommendation]: ...
    async def deactivate(self, recommendation_id: int) -> None: ...


# ---------------------------------------------------------------------------
# Repository Ports
# ---------------------------------------------------------------------------

@runtime_checkable
class UserRepository(Protocol):
    async def get_by_id(self, user_id: int) -> User | None: ...
    async def ensure(self, user_id: int, name: str = "") -> User: ...


@runtime_checkable
class MoodRepository(Protocol):
    async def save(self, entry: MoodEntry) -> MoodEntry: ...
    async def get_recent(self, user_id: int, limit: int = 30) -> list[MoodEntry]: ...


@runtime_checkable
class JournalRepository(Protocol):
    async def save(self, entry: JournalEntry) -> JournalEntry: ...
    async def get_recent(self, user_id: int, limit: int = 10) -> list[JournalEntry]: ...


@runtime_checkable
class MetricsRepository(Protocol):
    async def save(self, metrics: WellnessMetrics) -> WellnessMetrics: ...
    async def get_recent(self, user_id: int, days: int = 7) -> list[WellnessMetrics]: ...


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

@runtime_checkable
class UserContextProvider(Protocol):
    """Best-effort user snapshot; never raises."""

    async def get_context(self, user_id: int) -> UserContext: ...


@runtime_checkable
class ContentProvider(Protocol):
    """Domain content for the EXECUTE phase.

    Every method may raise ContentProviderError; callers substitute a
    static payload of the same shape.
    """

    async def analyze_sentiment(self, text: str) -> dict[str, Any]: ...
    async def music_for_mood(self, mood: str) -> dict[str, Any]: ...
    async def nutrition_plan(self, mood: str, preferences: dict[str, Any]) -> dict[str, Any]: ...
    async def workout_plan(
        self, mood: str, intensity: int, duration: int, workout_type: str,
    ) -> dict[str, Any]: ...
    async def mental_wellness_support(
        self, mood: str, recent_entries: list[str],
    ) -> dict[str, Any]: ...
    async def wellness_insights(self, data: dict[str, Any]) -> dict[str, Any]: ...


@runtime_checkable
class ConversationResponder(Protocol):
    """Produce an in-character chat reply for an agent."""

    async def respond(
        self,
        agent_name: str,
        message: str,
        history: list[ChatTurn],
        user_context: UserContext,
    ) -> str: ...


@runtime_checkable
class IntentExtractor(Protocol):
    """Turn a chat message into an actionable intent."""

    async def extract(self, message: str, agent_name: str) -> ConversationIntent: ...
