"""
agent.orchestrator - Runs agents, fans out observations, drains collaborations.

The orchestrator owns no agents itself: it is handed an AgentRegistry and
the conversational ports by factory.py. Per run it

    1. runs the agent under a per-(user, agent) lock,
    2. lets every other agent observe the result (concurrently, failures
       logged and dropped),
    3. enqueues a collaboration job for each registered trigger.

A bare run_agent() puts its jobs on the shared queue, which only runs when
process_collaboration_queue() is called. run_mood_update() collects the
jobs of its own run in a private queue and drains just those, so
concurrent updates for different users never see each other's results.
Each job carries its depth; jobs deeper than max_depth are dropped with a
warning.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from agent.base import WellnessAgent
from agent.registry import AgentRegistry
from domain.entities import JournalEntry
from domain.exceptions import AgentNotFoundError
from domain.memory import load_memory
from domain.models import AgentRunResult, ChatTurn, ConversationIntent
from domain.ports import ConversationResponder, IntentExtractor, UserContextProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 3
MOOD_KEYWORDS = ("happy", "sad", "stressed", "tired", "focused", "anxious", "excited", "calm")
MIN_JOURNAL_LENGTH = 20


@dataclass(frozen=True)
class CollaborationJob:
    agent_name: str
    input: Mapping[str, Any]
    user_id: int
    triggering_agent: str
    depth: int = 1


@dataclass(frozen=True)
class MoodUpdateResult:
    primary: AgentRunResult
    collaborations: list[AgentRunResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary.to_dict(),
            "collaborations": [c.to_dict() for c in self.collaborations],
        }


@dataclass(frozen=True)
class ConversationResult:
    response: str
    actions: list[dict[str, Any]] = field(default_factory=list)

    @property
    def collaboration_triggered(self) -> bool:
        return bool(self.actions)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"response": self.response}
        if self.actions:
            payload["actions"] = self.actions
            payload["collaborationTriggered"] = True
        return payload


def detect_mood(message: str, entities: list[str]) -> Optional[str]:
    """First known mood word found in the message or the extracted entities."""
    text = message.lower()
    lowered = [e.lower() for e in entities]
    for mood in MOOD_KEYWORDS:
        if mood in text or any(mood in entity for entity in lowered):
            return mood
    return None


class Orchestrator:
    """Coordinates agent runs for every user of the process."""

    def __init__(
        self,
        registry: AgentRegistry,
        user_context_provider: UserContextProvider,
        responder: ConversationResponder,
        extractor: IntentExtractor,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self._registry = registry
        self._user_context = user_context_provider
        self._responder = responder
        self._extractor = extractor
        self._max_depth = max_depth
        self._queue: deque[CollaborationJob] = deque()
        self._locks: dict[tuple[int, str], asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def registry(self) -> AgentRegistry:
        return self._registry

    @property
    def pending_collaborations(self) -> int:
        return len(self._queue)

    def _require(self, name: str) -> WellnessAgent:
        if name not in self._registry:
            raise AgentNotFoundError(name)
        return self._registry.get(name)

    def get_agent(self, name: str) -> Optional[WellnessAgent]:
        return self._registry.get(name) if name in self._registry else None

    def get_all_agents(self) -> list[WellnessAgent]:
        return self._registry.all()

    async def agent_status(self, user_id: Optional[int] = None) -> list[dict[str, Any]]:
        """Descriptors of every agent, with memory counters when *user_id* is given."""
        status = []
        for agent in self._registry:
            entry = {**agent.describe(), "status": "active"}
            if user_id is not None:
                view = await agent.memory_view(user_id)
                entry["memory"] = {
                    "executionCount": view.execution_count,
                    "lastExecutionSuccess": view.last_execution_success,
                    "observationCount": view.observation_count,
                    "lastUpdate": view.last_update,
                    "highlights": dict(view.highlights),
                }
            status.append(entry)
        return status

    def _lock(self, user_id: int, agent_name: str) -> asyncio.Lock:
        key = (user_id, agent_name)
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    async def run_agent(
        self,
        name: str,
        input: Optional[Mapping[str, Any]],
        user_id: int,
        depth: int = 0,
        jobs: Optional[deque[CollaborationJob]] = None,
    ) -> AgentRunResult:
        """Run one agent, notify observers and queue its collaborations.

        Collaborations go to *jobs* when given, otherwise to the shared
        queue drained by process_collaboration_queue().

        Raises:
            AgentNotFoundError: *name* is not registered.
        """
        agent = self._require(name)

        async with self._lock(user_id, name):
            result = await agent.run(input, user_id)

        await self._notify_observers(result, user_id, exclude=name)
        self._queue_collaborations(result, user_id, depth, self._queue if jobs is None else jobs)
        return result

    async def _notify_observers(self, result: AgentRunResult, user_id: int, exclude: str) -> None:
        async def observe(agent: WellnessAgent) -> None:
            try:
                async with self._lock(user_id, agent.name):
                    await agent.observe(result, user_id)
            except Exception:
                logger.exception("Observer error in %s", agent.name)

        await asyncio.gather(*(observe(a) for a in self._registry if a.name != exclude))

    def _queue_collaborations(
        self,
        result: AgentRunResult,
        user_id: int,
        depth: int,
        jobs: deque[CollaborationJob],
    ) -> None:
        if not result.collaboration_triggers:
            return
        current_mood = result.memory.get("last_mood") or "neutral"
        highlights = dict(load_memory(result.agent_name, result.memory).view(result.agent_name).highlights)
        for name in result.collaboration_triggers:
            if name not in self._registry:
                logger.debug("Ignoring trigger for unregistered agent %s", name)
                continue
            job_depth = depth + 1
            if job_depth > self._max_depth:
                logger.warning(
                    "Dropping collaboration %s -> %s for user %d: depth %d exceeds limit %d",
                    result.agent_name, name, user_id, job_depth, self._max_depth,
                )
                continue
            jobs.append(CollaborationJob(
                agent_name=name,
                input={
                    "triggeringAgent": result.agent_name,
                    "currentMood": current_mood,
                    "triggeringMemory": highlights,
                },
                user_id=user_id,
                triggering_agent=result.agent_name,
                depth=job_depth,
            ))
            logger.info("Queued collaboration %s -> %s (depth %d)", result.agent_name, name, job_depth)

    async def _drain(self, jobs: deque[CollaborationJob]) -> list[AgentRunResult]:
        results = []
        while jobs:
            job = jobs.popleft()
            try:
                results.append(await self.run_agent(
                    job.agent_name, job.input, job.user_id, depth=job.depth, jobs=jobs,
                ))
            except Exception:
                logger.exception("Collaboration error with %s", job.agent_name)
        return results

    async def process_collaboration_queue(self) -> list[AgentRunResult]:
        """Run shared-queue jobs FIFO, including any they enqueue. Results in completion order."""
        return await self._drain(self._queue)

    async def run_mood_update(self, mood: str, user_id: int) -> MoodUpdateResult:
        """Run MoodMate, then only the collaborations this update triggered."""
        jobs: deque[CollaborationJob] = deque()
        primary = await self.run_agent("MoodMate", {"mood": mood}, user_id, jobs=jobs)
        collaborations = await self._drain(jobs)
        return MoodUpdateResult(primary=primary, collaborations=collaborations)

    async def run_insights_analysis(self, user_id: int) -> AgentRunResult:
        return await self.run_agent("InsightBot", {}, user_id)

    async def save_journal_entry(self, user_id: int, content: str) -> JournalEntry:
        mind_pal = self._require("MindPal")
        async with self._lock(user_id, mind_pal.name):
            return await mind_pal.save_journal_entry(user_id, content)

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    async def handle_agent_conversation(
        self,
        agent_name: str,
        message: str,
        history: list[ChatTurn],
        user_id: int,
    ) -> ConversationResult:
        """Reply in character and carry out any action the message asks for."""
        self._require(agent_name)
        user_context = await self._user_context.get_context(user_id)

        response = await self._responder.respond(agent_name, message, history, user_context)
        intent = await self._extractor.extract(message, agent_name)

        actions: list[dict[str, Any]] = []
        if intent.needs_action:
            actions = await self._handle_intent(intent, message, user_id, agent_name)
        return ConversationResult(response=response, actions=actions)

    async def _handle_intent(
        self,
        intent: ConversationIntent,
        message: str,
        user_id: int,
        agent_name: str,
    ) -> list[dict[str, Any]]:
        actions: list[dict[str, Any]] = []
        try:
            if intent.action_type == "mood_update":
                mood = detect_mood(message, intent.entities)
                if mood:
                    update = await self.run_mood_update(mood, user_id)
                    actions.append({"type": "mood_update", "result": update.to_dict()})

            elif intent.action_type == "journal_save":
                if agent_name == "MindPal" and len(message) > MIN_JOURNAL_LENGTH:
                    entry = await self.save_journal_entry(user_id, message)
                    actions.append({"type": "journal_save", "success": True, "entryId": entry.id})

            elif intent.action_type == "recommendation_request":
                result = await self.run_agent(
                    agent_name, {"userMessage": message, "intent": intent.intent}, user_id,
                )
                actions.append({"type": "recommendation", "result": result.to_dict()})

            elif intent.action_type == "data_analysis":
                if agent_name == "InsightBot":
                    insights = await self.run_insights_analysis(user_id)
                    actions.append({"type": "insights", "result": insights.to_dict()})
        except Exception:
            # actions completed before the failure are still reported
            logger.exception("Error handling %s intent for %s", intent.action_type, agent_name)
        return actions
