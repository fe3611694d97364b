"""
domain.entities - Persistence-aware types (have IDs, timestamps).

Decoupled from any persistence strategy: no SQL concerns, no DB imports.
Timestamps are ISO-8601 UTC strings set by the repository implementations,
not by the entities themselves.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class User:
    """Core user entity."""
    id: Optional[int] = None
    name: str = ""
    current_mood: str = "neutral"
    streak_days: int = 0
    last_mood_date: str = ""
    created_at: str = ""
    updated_at: str = ""


@dataclass
class MoodEntry:
    """A single mood check-in."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    mood: str = "neutral"
    note: str = ""
    timestamp: str = ""


@dataclass
class JournalEntry:
    """Free-text journal entry, optionally answering a prompt."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    content: str = ""
    prompt: str = ""
    timestamp: str = ""


@dataclass
class AgentRecommendation:
    """Output record produced by an agent's finalize step.

    content is never modified after creation; is_active may only be
    flipped to False.
    """
    id: Optional[int] = None
    user_id: Optional[int] = None
    agent_name: str = ""
    type: str = ""
    content: dict[str, Any] = field(default_factory=dict)
    is_active: bool = True
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "agentName": self.agent_name,
            "type": self.type,
            "content": self.content,
            "isActive": self.is_active,
            "createdAt": self.created_at,
        }


@dataclass
class WellnessMetrics:
    """Daily self-reported metrics."""
    id: Optional[int] = None
    user_id: Optional[int] = None
    energy_level: Optional[int] = None
    stress_level: Optional[int] = None
    focus_time: Optional[int] = None
    hydration_glasses: Optional[int] = None
    timestamp: str = ""
