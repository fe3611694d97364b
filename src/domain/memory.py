"""
domain.memory - Typed per-agent memory schemas.

Each capability owns exactly one memory record per user. The record is
stored as JSON by the Memory Store; these models give it a known shape.
Unknown keys are ignored on load so older records keep loading.

Cross-agent access goes through MemoryView, a frozen projection that
exposes counters and highlights but never the writable model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

OBSERVATION_LIMIT = 10
MOOD_HISTORY_LIMIT = 50
JOURNAL_INSIGHT_LIMIT = 50
INSIGHT_HISTORY_LIMIT = 10


class Observation(BaseModel):
    """Summary of another agent's run, recorded by a passive observer."""
    timestamp: str
    agent: str
    output_type: str
    success: bool
    has_recommendations: bool = False
    collaboration_triggered: bool = False
    context: str = "collaboration"


class ExecutionRecord(BaseModel):
    timestamp: str
    results: list[dict[str, Any]] = Field(default_factory=list)
    success: bool = True


class AgentMemory(BaseModel):
    """Fields every agent keeps, whatever its capability."""

    model_config = ConfigDict(extra="ignore")

    agent_name: ClassVar[str] = ""

    observations: list[Observation] = Field(default_factory=list)
    recent_activity: list[dict[str, Any]] = Field(default_factory=list)
    last_execution: Optional[ExecutionRecord] = None
    execution_count: int = 0
    last_update: str = ""

    def add_observation(self, observation: Observation, limit: int = OBSERVATION_LIMIT) -> None:
        self.observations.append(observation)
        if len(self.observations) > limit:
            self.observations = self.observations[-limit:]

    def record_execution(self, results: list[dict[str, Any]], timestamp: str) -> None:
        self.last_execution = ExecutionRecord(
            timestamp=timestamp,
            results=results,
            success=all(r.get("success") is not False for r in results),
        )
        self.execution_count += 1

    def highlights(self) -> dict[str, Any]:
        """Capability-specific counters worth sharing with other agents."""
        return {}

    def view(self, agent_name: str = "") -> MemoryView:
        return MemoryView(
            agent_name=agent_name or self.agent_name,
            execution_count=self.execution_count,
            last_execution_success=(
                self.last_execution.success if self.last_execution else None
            ),
            observation_count=len(self.observations),
            last_update=self.last_update,
            highlights=MappingProxyType(dict(self.highlights())),
        )


# ---------------------------------------------------------------------------
# Capability schemas
# ---------------------------------------------------------------------------

class MoodHistoryEntry(BaseModel):
    timestamp: str
    mood: str
    confidence: float = 0.9
    source: str = "user_input"
    triggers: list[str] = Field(default_factory=list)


class MoodMateMemory(AgentMemory):
    agent_name: ClassVar[str] = "MoodMate"

    mood_history: list[MoodHistoryEntry] = Field(default_factory=list)
    last_mood: str = ""

    def append_mood(self, entry: MoodHistoryEntry, limit: int = MOOD_HISTORY_LIMIT) -> None:
        self.mood_history.append(entry)
        if len(self.mood_history) > limit:
            self.mood_history = self.mood_history[-limit:]
        self.last_mood = entry.mood

    def highlights(self) -> dict[str, Any]:
        return {"last_mood": self.last_mood, "mood_entries": len(self.mood_history)}


class NutriCoachMemory(AgentMemory):
    agent_name: ClassVar[str] = "NutriCoach"

    preferences: dict[str, Any] = Field(default_factory=dict)
    last_nutrition_plan: Optional[dict[str, Any]] = None
    successful_executions: int = 0

    def highlights(self) -> dict[str, Any]:
        return {"successful_executions": self.successful_executions}


class FlexGenieMemory(AgentMemory):
    agent_name: ClassVar[str] = "FlexGenie"

    preferred_duration: int = 20
    average_energy_level: float = 6.0
    last_workout_plan: Optional[dict[str, Any]] = None
    successful_executions: int = 0
    fitness_streak: int = 0

    def highlights(self) -> dict[str, Any]:
        return {
            "successful_executions": self.successful_executions,
            "fitness_streak": self.fitness_streak,
        }


class JournalInsight(BaseModel):
    sentiment: str = "neutral"
    themes: list[str] = Field(default_factory=list)
    word_count: int = 0
    timestamp: str = ""


class MindPalMemory(AgentMemory):
    agent_name: ClassVar[str] = "MindPal"

    last_wellness_support: Optional[dict[str, Any]] = None
    last_mood: str = ""
    successful_sessions: int = 0
    journal_streak: int = 0
    last_journal_date: str = ""
    journal_insights: list[JournalInsight] = Field(default_factory=list)
    emotional_growth_metrics: dict[str, Any] = Field(default_factory=dict)
    prompt_history: list[str] = Field(default_factory=list)
    preferred_techniques: list[str] = Field(default_factory=list)
    emotional_stability: int = 5
    coping_capacity: int = 7
    emotional_volatility: float = 0.0

    def append_journal_insight(
        self, insight: JournalInsight, limit: int = JOURNAL_INSIGHT_LIMIT,
    ) -> None:
        self.journal_insights.append(insight)
        if len(self.journal_insights) > limit:
            self.journal_insights = self.journal_insights[-limit:]

    def highlights(self) -> dict[str, Any]:
        return {
            "successful_sessions": self.successful_sessions,
            "journal_streak": self.journal_streak,
        }


class InsightBotMemory(AgentMemory):
    agent_name: ClassVar[str] = "InsightBot"

    last_insights: Optional[dict[str, Any]] = None
    successful_analyses: int = 0
    insight_history: list[dict[str, Any]] = Field(default_factory=list)

    def highlights(self) -> dict[str, Any]:
        return {"successful_analyses": self.successful_analyses}


MEMORY_SCHEMAS: dict[str, type[AgentMemory]] = {
    schema.agent_name: schema
    for schema in (
        MoodMateMemory,
        NutriCoachMemory,
        FlexGenieMemory,
        MindPalMemory,
        InsightBotMemory,
    )
}


def memory_model_for(agent_name: str) -> type[AgentMemory]:
    return MEMORY_SCHEMAS.get(agent_name, AgentMemory)


def load_memory(agent_name: str, data: Mapping[str, Any] | None) -> AgentMemory:
    """Parse a stored blob into the agent's schema (empty blob → defaults)."""
    return memory_model_for(agent_name).model_validate(dict(data or {}))


# ---------------------------------------------------------------------------
# Read-only projection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MemoryView:
    """What one agent may learn about another agent's memory."""
    agent_name: str
    execution_count: int = 0
    last_execution_success: Optional[bool] = None
    observation_count: int = 0
    last_update: str = ""
    highlights: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
