"""Pydantic models for REST API request/response validation."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from domain.entities import JournalEntry, MoodEntry, User, WellnessMetrics


# --- Mood ---

class MoodBody(BaseModel):
    mood: str = Field(..., min_length=1, max_length=50)
    user_id: int = 1


class MoodEntryOut(BaseModel):
    id: Optional[int]
    user_id: Optional[int]
    mood: str
    note: str
    timestamp: str

    @classmethod
    def from_entity(cls, entry: MoodEntry) -> MoodEntryOut:
        return cls(
            id=entry.id, user_id=entry.user_id, mood=entry.mood,
            note=entry.note, timestamp=entry.timestamp,
        )


# --- Journal ---

class JournalBody(BaseModel):
    content: str = Field(..., min_length=1)
    user_id: int = 1


class JournalSavedOut(BaseModel):
    success: bool = True
    entry_id: Optional[int] = None


class JournalEntryOut(BaseModel):
    id: Optional[int]
    user_id: Optional[int]
    content: str
    prompt: str
    timestamp: str

    @classmethod
    def from_entity(cls, entry: JournalEntry) -> JournalEntryOut:
        return cls(
            id=entry.id, user_id=entry.user_id, content=entry.content,
            prompt=entry.prompt, timestamp=entry.timestamp,
        )


# --- Agents ---

class AgentRunBody(BaseModel):
    input: dict[str, Any] = Field(default_factory=dict)
    user_id: int = 1


class ChatTurnIn(BaseModel):
    role: str = Field(..., pattern="^(user|assistant)$")
    content: str


class ChatBody(BaseModel):
    message: str = Field(..., min_length=1)
    conversation_history: list[ChatTurnIn] = Field(default_factory=list)
    user_id: int = 1


# --- Wellness metrics ---

class MetricsBody(BaseModel):
    user_id: int = 1
    energy_level: Optional[int] = Field(None, ge=1, le=10)
    stress_level: Optional[int] = Field(None, ge=1, le=10)
    focus_time: Optional[int] = Field(None, ge=0)
    hydration_glasses: Optional[int] = Field(None, ge=0)


class MetricsOut(BaseModel):
    id: Optional[int]
    user_id: Optional[int]
    energy_level: Optional[int]
    stress_level: Optional[int]
    focus_time: Optional[int]
    hydration_glasses: Optional[int]
    timestamp: str

    @classmethod
    def from_entity(cls, metrics: WellnessMetrics) -> MetricsOut:
        return cls(
            id=metrics.id,
            user_id=metrics.user_id,
            energy_level=metrics.energy_level,
            stress_level=metrics.stress_level,
            focus_time=metrics.focus_time,
            hydration_glasses=metrics.hydration_glasses,
            timestamp=metrics.timestamp,
        )


# --- Users ---

class UserOut(BaseModel):
    id: Optional[int]
    name: str
    current_mood: str
    streak_days: int
    last_mood_date: str
    created_at: str

    @classmethod
    def from_entity(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            name=user.name,
            current_mood=user.current_mood,
            streak_days=user.streak_days,
            last_mood_date=user.last_mood_date,
            created_at=user.created_at,
        )
