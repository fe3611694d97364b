"""
application.context - Explicit data channel between execution steps.

Every step of an agent's EXECUTE phase receives a StepContext instead of
re-reading storage. The context is immutable: the engine narrows it to the
step's declared required_data before the call, and derives a new context
with the step's expected_output once the step succeeds.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from domain.exceptions import AgentError, ErrorKind
from domain.memory import AgentMemory
from domain.models import ContextAnalysis, ExecutionStep, UserContext, UserIntent


def _frozen(values: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class StepContext:
    """Per-run accumulator threaded through the step pipeline.

    Attributes:
        user_id:       Owner of the run.
        input:         Raw input handed to Agent.run().
        intent:        Intent derived in PLAN.
        context:       ContextAnalysis derived in PLAN.
        user_context:  Snapshot from the UserContextProvider.
        memory:        The run's working copy of the agent's memory. Steps
                       may update it; the engine persists it once at the end.
        outputs:       Published step outputs, keyed by expected_output.
    """
    user_id: int
    input: Mapping[str, Any]
    intent: UserIntent
    context: ContextAnalysis
    user_context: UserContext
    memory: AgentMemory
    outputs: Mapping[str, Any] = field(default_factory=lambda: _frozen({}))

    @classmethod
    def start(
        cls,
        user_id: int,
        input: Mapping[str, Any],
        intent: UserIntent,
        context: ContextAnalysis,
        user_context: UserContext,
        memory: AgentMemory,
    ) -> StepContext:
        return cls(
            user_id=user_id,
            input=_frozen(input),
            intent=intent,
            context=context,
            user_context=user_context,
            memory=memory,
            outputs=_frozen({"userInput": dict(input)}),
        )

    def for_step(self, step: ExecutionStep) -> StepContext:
        """Return a copy exposing only the outputs the step declared."""
        visible = {k: v for k, v in self.outputs.items() if k in step.required_data}
        return replace(self, outputs=_frozen(visible))

    def with_output(self, key: str, value: Any) -> StepContext:
        if not key:
            return self
        return replace(self, outputs=_frozen({**self.outputs, key: value}))

    def get(self, key: str, default: Any = None) -> Any:
        return self.outputs.get(key, default)

    def require(self, key: str) -> Any:
        """Fetch a declared upstream output, failing the step if absent."""
        if key not in self.outputs:
            raise AgentError(ErrorKind.INVALID_INPUT, f"Missing upstream output '{key}'")
        return self.outputs[key]
