"""
domain.models - Value objects for the PLAN → THINK → EXECUTE cycle.

These are data containers with no dependencies on infrastructure
(no LangChain, no SQLite). Everything here lives for one agent run or
one chat turn; persistent records are in domain.entities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AgentState(str, Enum):
    """Lifecycle of a single run. SUCCEEDED and FAILED are terminal."""
    IDLE = "idle"
    PLANNING = "planning"
    THINKING = "thinking"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# User context
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserContext:
    """Lightweight snapshot of the user used by every agent and by chat."""
    current_mood: str = "neutral"
    streak_days: int = 0
    recent_moods: list[str] = field(default_factory=list)
    recent_journal_themes: list[str] = field(default_factory=list)
    health_status: str = "normal"
    preferences: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def neutral(cls) -> UserContext:
        """Returned when the user's data could not be loaded."""
        return cls(current_mood="neutral", health_status="unknown")

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentMood": self.current_mood,
            "streakDays": self.streak_days,
            "recentMoods": list(self.recent_moods),
            "recentJournalThemes": list(self.recent_journal_themes),
            "healthStatus": self.health_status,
        }


# ---------------------------------------------------------------------------
# PLAN
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UserIntent:
    """What the agent believes the caller wants from this run.

    detail holds capability-specific findings made while deriving the
    intent (e.g. the detected mood and its source) so EXECUTE does not
    have to recompute them.
    """
    summary: str
    categories: list[str] = field(default_factory=list)
    urgency: Urgency = Urgency.LOW
    confidence: float = 0.5
    entities: list[str] = field(default_factory=list)
    category: str = ""
    detail: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ContextAnalysis:
    user_mood: str = "neutral"
    recent_activity: list[Any] = field(default_factory=list)
    health_status: str = "unknown"
    preferences: dict[str, Any] = field(default_factory=dict)
    risk_factors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AgentAction:
    """Static catalog entry declared by each capability."""
    name: str
    description: str
    categories: list[str] = field(default_factory=list)
    base_priority: float = 0.5
    required_tools: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    risks: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RiskFlag:
    level: str
    description: str
    mitigation: str

    @property
    def severity(self) -> int:
        return {"high": 3, "medium": 2}.get(self.level, 1)


@dataclass(frozen=True)
class RiskAssessment:
    overall_level: int = 1
    risks: list[RiskFlag] = field(default_factory=list)

    @property
    def safeguards_required(self) -> bool:
        return bool(self.risks)


@dataclass(frozen=True)
class AgentPlan:
    intent: UserIntent
    context: ContextAnalysis
    actions: list[AgentAction]
    expected_outcome: str
    risk_assessment: RiskAssessment


# ---------------------------------------------------------------------------
# THINK
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Alternative:
    name: str
    description: str
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    feasibility: float = 0.8


@dataclass(frozen=True)
class ExecutionStep:
    """One named unit of the EXECUTE phase.

    required_data names the upstream outputs the step may read;
    expected_output is the key its data is published under.
    """
    name: str
    description: str
    required_data: tuple[str, ...] = ()
    expected_output: str = ""


@dataclass(frozen=True)
class SelectedApproach:
    name: str
    description: str
    steps: list[ExecutionStep]
    estimated_duration: int
    success_probability: float


@dataclass(frozen=True)
class AgentThought:
    reasoning: str
    alternatives: list[Alternative]
    selected_approach: SelectedApproach
    confidence: float
    safeguards: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# EXECUTE
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StepResult:
    step: str
    success: bool = True
    data: Any = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"step": self.step, "success": self.success}
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        return result


@dataclass(frozen=True)
class AgentExecution:
    results: list[StepResult]
    success: bool
    output: Any
    collaboration_triggers: list[str]
    memory_updates: dict[str, Any]


@dataclass(frozen=True)
class AgentRunResult:
    """Summary returned by every agent run, successful or not."""
    agent_name: str
    success: bool
    output: Any
    collaboration_triggers: list[str] = field(default_factory=list)
    plan: str = ""
    confidence: float = 0.0
    memory: dict[str, Any] = field(default_factory=dict)
    state: AgentState = AgentState.IDLE
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @property
    def has_recommendations(self) -> bool:
        return isinstance(self.output, dict) and bool(self.output.get("recommendations"))

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "agentName": self.agent_name,
            "success": self.success,
            "output": self.output,
            "collaborationTriggers": list(self.collaboration_triggers),
            "plan": self.plan,
            "confidence": self.confidence,
            "memory": self.memory,
            "state": self.state.value,
        }
        if self.error is not None:
            payload["error"] = self.error
            payload["errorKind"] = self.error_kind
        return payload


# ---------------------------------------------------------------------------
# Conversation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChatTurn:
    role: str
    content: str


@dataclass(frozen=True)
class ConversationIntent:
    """Structured reading of one chat message."""
    intent: str = "general_conversation"
    entities: list[str] = field(default_factory=list)
    needs_action: bool = False
    action_type: Optional[str] = None

    @classmethod
    def general(cls) -> ConversationIntent:
        return cls()
