"""
In-memory stand-ins for the domain ports, used by the engine and
orchestrator tests that do not need SQLite.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Optional

from agent.base import WellnessAgent
from domain.entities import AgentRecommendation
from domain.exceptions import ContentProviderError, IntentExtractionError
from domain.models import AgentAction, ConversationIntent, StepResult, UserContext, UserIntent


class InMemoryMemoryStore:
    def __init__(self):
        self.records: dict[tuple[int, str], dict[str, Any]] = {}

    async def get(self, user_id: int, agent_name: str) -> dict[str, Any]:
        return copy.deepcopy(self.records.get((user_id, agent_name), {}))

    async def put(self, user_id: int, agent_name: str, data: dict[str, Any]) -> None:
        self.records[(user_id, agent_name)] = copy.deepcopy(data)

    async def get_all_for_user(self, user_id: int) -> dict[str, dict[str, Any]]:
        return {name: copy.deepcopy(data) for (uid, name), data in self.records.items() if uid == user_id}


class InMemoryRecommendationStore:
    def __init__(self):
        self.items: list[AgentRecommendation] = []

    async def create(self, user_id, agent_name, type, content):
        rec = AgentRecommendation(
            id=len(self.items) + 1, user_id=user_id, agent_name=agent_name,
            type=type, content=content, is_active=True,
        )
        self.items.append(rec)
        return rec

    async def get_by_id(self, recommendation_id):
        return next((r for r in self.items if r.id == recommendation_id), None)

    async def list_active(self, user_id, agent_name=None):
        return [
            r for r in reversed(self.items)
            if r.user_id == user_id and r.is_active and (agent_name is None or r.agent_name == agent_name)
        ]

    async def deactivate(self, recommendation_id):
        for r in self.items:
            if r.id == recommendation_id:
                r.is_active = False


class StaticUserContext:
    def __init__(self, context: Optional[UserContext] = None):
        self.context = context or UserContext()

    async def get_context(self, user_id: int) -> UserContext:
        return self.context


class RecordingContentProvider:
    """Returns canned content; methods listed in *failing* raise ContentProviderError."""

    def __init__(self, failing: tuple[str, ...] = (), **responses: dict[str, Any]):
        self.failing = failing
        self.responses = responses
        self.calls: list[str] = []

    async def _answer(self, name: str) -> dict[str, Any]:
        self.calls.append(name)
        if name in self.failing:
            raise ContentProviderError(f"{name} failed")
        return copy.deepcopy(self.responses.get(name, {}))

    async def analyze_sentiment(self, text):
        return await self._answer("analyze_sentiment")

    async def music_for_mood(self, mood):
        return await self._answer("music_for_mood")

    async def nutrition_plan(self, mood, preferences):
        return await self._answer("nutrition_plan")

    async def workout_plan(self, mood, intensity, duration, workout_type):
        return await self._answer("workout_plan")

    async def mental_wellness_support(self, mood, recent_entries):
        return await self._answer("mental_wellness_support")

    async def wellness_insights(self, data):
        return await self._answer("wellness_insights")


class BrokenResponder:
    async def respond(self, agent_name, message, history, user_context):
        raise ContentProviderError("model unreachable")


class SlowExtractor:
    async def extract(self, message, agent_name):
        await asyncio.sleep(5)
        return ConversationIntent.general()


class BrokenExtractor:
    async def extract(self, message, agent_name):
        raise IntentExtractionError("not json")


def agent_kwargs(memory_store=None, recommendation_store=None, user_context=None, content=None):
    return dict(
        memory_store=memory_store or InMemoryMemoryStore(),
        recommendation_store=recommendation_store or InMemoryRecommendationStore(),
        user_context_provider=user_context or StaticUserContext(),
        content_provider=content or RecordingContentProvider(),
    )


class SampleAgent(WellnessAgent):
    """Minimal capability on the default prepare/execute_main/finalize pipeline.

    Records the outputs each step could see so tests can check narrowing.
    """

    name = "Sample"
    role = "Test capability"
    tools = ["sample_tool"]
    must_do_tasks = ["urgent_sample"]
    recommendation_type = "sample"

    def __init__(self, *, intent: Optional[UserIntent] = None, actions=None, triggers=(), **kwargs):
        super().__init__(**kwargs)
        self.intent = intent or UserIntent(summary="sample things", categories=["sample"], confidence=0.8)
        self.actions = actions if actions is not None else [
            AgentAction("low_sample", "Sample gently", ["sample"], 0.5, ["sample_tool"]),
            AgentAction("urgent_sample", "Sample urgently", ["sample"], 0.4, ["sample_tool"]),
            AgentAction("unrelated", "Do something else", ["other"], 0.99),
        ]
        self.triggers = list(triggers)
        self.seen: dict[str, list[str]] = {}
        self.failing_steps: set[str] = set()

    async def analyze_user_intent(self, input, user_context, memory):
        return self.intent

    def get_available_actions(self):
        return list(self.actions)

    async def execute_step(self, step, ctx):
        self.seen[step.name] = sorted(ctx.outputs)
        if step.name in self.failing_steps:
            raise RuntimeError(f"{step.name} exploded")
        if step.name not in ("prepare", "execute_main", "finalize"):
            raise self.unknown_step(step)
        return StepResult(step=step.name, success=True, data={"step": step.name, "user": ctx.user_id})

    def generate_output(self, results, plan, ctx):
        return {"steps": [r.step for r in results if r.success]}

    def generate_error_response(self, kind, error, input):
        return f"sample failed: {kind.value}"

    def identify_collaboration_needs(self, results, plan, ctx):
        return list(self.triggers)
