"""
Test the orchestrator: observer fan-out, the collaboration queue and its
depth limit, and the mood-update flow against the real agents.
"""

import asyncio

import pytest

from agent.orchestrator import Orchestrator, detect_mood
from agent.registry import AgentRegistry
from domain.exceptions import AgentNotFoundError
from factory import ServiceFactory
from fakes import InMemoryMemoryStore, SampleAgent, StaticUserContext, agent_kwargs
from infrastructure.llm.conversation import RuleBasedResponder
from infrastructure.llm.intent_extractor import KeywordIntentExtractor


class EchoAgent(SampleAgent):
    name = "Echo"


class GrumpyAgent(SampleAgent):
    name = "Grumpy"

    async def observe(self, output, user_id):
        raise RuntimeError("not listening")


def _orchestrator(*agents, max_depth=3):
    return Orchestrator(
        AgentRegistry(list(agents)),
        StaticUserContext(),
        RuleBasedResponder(),
        KeywordIntentExtractor(),
        max_depth=max_depth,
    )


def _factory_orchestrator(settings):
    factory = ServiceFactory(settings)
    asyncio.run(factory.initialize())
    return factory, factory.create_orchestrator()


def test_detect_mood():
    assert detect_mood("I am so Stressed right now", []) == "stressed"
    assert detect_mood("meh", ["feeling tired"]) == "tired"
    assert detect_mood("nothing to report", []) is None


def test_unknown_agent_raises():
    orchestrator = _orchestrator(SampleAgent(**agent_kwargs()))

    with pytest.raises(AgentNotFoundError, match="Agent Nobody not found"):
        asyncio.run(orchestrator.run_agent("Nobody", {}, 1))
    assert orchestrator.get_agent("Nobody") is None


def test_other_agents_observe_and_observer_failures_are_isolated():
    memory_store = InMemoryMemoryStore()
    kwargs = agent_kwargs(memory_store=memory_store)
    orchestrator = _orchestrator(SampleAgent(**kwargs), EchoAgent(**kwargs), GrumpyAgent(**kwargs))

    result = asyncio.run(orchestrator.run_agent("Sample", {}, 1))

    assert result.success is True
    echo = memory_store.records[(1, "Echo")]["observations"]
    assert [o["agent"] for o in echo] == ["Sample"]
    assert "observations" not in memory_store.records.get((1, "Sample"), {})


def test_collaborations_wait_for_the_queue():
    kwargs = agent_kwargs()
    orchestrator = _orchestrator(SampleAgent(triggers=["Echo", "Missing"], **kwargs), EchoAgent(**kwargs))

    async def main():
        await orchestrator.run_agent("Sample", {}, 1)
        pending = orchestrator.pending_collaborations
        return pending, await orchestrator.process_collaboration_queue()

    pending, results = asyncio.run(main())

    # unregistered trigger names are skipped
    assert pending == 1
    assert [r.agent_name for r in results] == ["Echo"]
    assert orchestrator.pending_collaborations == 0


def test_self_triggering_agent_stops_at_depth_limit():
    sample = SampleAgent(triggers=["Sample"], **agent_kwargs())
    orchestrator = _orchestrator(sample, max_depth=3)

    async def main():
        await orchestrator.run_agent("Sample", {}, 1)
        return await orchestrator.process_collaboration_queue()

    results = asyncio.run(main())

    assert len(results) == 3
    assert orchestrator.pending_collaborations == 0


def test_zero_depth_disables_collaboration():
    kwargs = agent_kwargs()
    orchestrator = _orchestrator(SampleAgent(triggers=["Echo"], **kwargs), EchoAgent(**kwargs), max_depth=0)

    asyncio.run(orchestrator.run_agent("Sample", {}, 1))

    assert orchestrator.pending_collaborations == 0


def test_failed_collaboration_does_not_stop_the_queue(monkeypatch):
    kwargs = agent_kwargs()
    echo = EchoAgent(**kwargs)
    orchestrator = _orchestrator(SampleAgent(triggers=["Echo", "Sample"], **kwargs), echo)

    async def boom(input, user_id):
        raise RuntimeError("crashed outside run()")

    monkeypatch.setattr(echo, "run", boom)

    async def main():
        await orchestrator.run_agent("Sample", {}, 1)
        return await orchestrator.process_collaboration_queue()

    results = asyncio.run(main())

    assert "Sample" in [r.agent_name for r in results]
    assert "Echo" not in [r.agent_name for r in results]


def test_stressed_mood_update_runs_three_collaborations(settings):
    _, orchestrator = _factory_orchestrator(settings)

    update = asyncio.run(orchestrator.run_mood_update("stressed", 1))

    assert update.primary.agent_name == "MoodMate"
    assert update.primary.success is True
    assert [c.agent_name for c in update.collaborations] == ["NutriCoach", "FlexGenie", "MindPal"]
    assert all(c.success for c in update.collaborations)
    payload = update.to_dict()
    assert payload["primary"]["agentName"] == "MoodMate"
    assert len(payload["collaborations"]) == 3


def test_calm_mood_update_has_no_collaborations(settings):
    _, orchestrator = _factory_orchestrator(settings)

    update = asyncio.run(orchestrator.run_mood_update("calm", 1))

    assert update.primary.success is True
    assert update.collaborations == []


def test_agent_status_reports_memory(settings):
    _, orchestrator = _factory_orchestrator(settings)

    async def main():
        await orchestrator.run_mood_update("happy", 1)
        return await orchestrator.agent_status(1)

    status = asyncio.run(main())
    by_name = {entry["name"]: entry for entry in status}

    assert list(by_name) == ["MoodMate", "NutriCoach", "FlexGenie", "MindPal", "InsightBot"]
    assert by_name["MoodMate"]["memory"]["executionCount"] == 1
    assert by_name["MoodMate"]["memory"]["lastExecutionSuccess"] is True
    assert by_name["InsightBot"]["memory"]["observationCount"] == 1
    assert all(entry["status"] == "active" for entry in status)


def test_save_journal_entry_goes_through_mind_pal(settings):
    factory, orchestrator = _factory_orchestrator(settings)

    async def main():
        entry = await orchestrator.save_journal_entry(1, "Slept well and went for a long walk")
        return entry, await factory.create_journal_repository().get_recent(1, 5)

    entry, journals = asyncio.run(main())

    assert entry.id == journals[0].id
    assert journals[0].content == "Slept well and went for a long walk"


def test_stressed_update_leaves_fitness_and_nutrition_recommendations(settings):
    factory, orchestrator = _factory_orchestrator(settings)

    async def main():
        await orchestrator.run_mood_update("stressed", 1)
        return await factory.create_recommendation_store().list_active(1)

    recommendations = asyncio.run(main())
    types = {r.type for r in recommendations}

    assert {"fitness", "nutrition"} <= types
    assert all(r.user_id == 1 and r.content for r in recommendations)


def test_concurrent_mood_updates_keep_their_own_collaborations(settings):
    factory, orchestrator = _factory_orchestrator(settings)

    async def main():
        await factory.create_user_repository().ensure(2, "Sam")
        return await asyncio.gather(
            orchestrator.run_mood_update("stressed", 1),
            orchestrator.run_mood_update("stressed", 2),
        )

    first, second = asyncio.run(main())

    expected = ["NutriCoach", "FlexGenie", "MindPal"]
    assert [c.agent_name for c in first.collaborations] == expected
    assert [c.agent_name for c in second.collaborations] == expected
    assert orchestrator.pending_collaborations == 0


def test_mood_update_leaves_shared_queue_alone():
    kwargs = agent_kwargs()
    orchestrator = _orchestrator(SampleAgent(triggers=["Echo"], **kwargs), EchoAgent(**kwargs))

    class QuietMoodMate(SampleAgent):
        name = "MoodMate"

    orchestrator.registry.register(QuietMoodMate(**kwargs))

    async def main():
        await orchestrator.run_agent("Sample", {}, 1)
        update = await orchestrator.run_mood_update("calm", 1)
        return update, orchestrator.pending_collaborations

    update, pending = asyncio.run(main())

    assert update.collaborations == []
    assert pending == 1


def test_collaboration_input_carries_trigger_highlights():
    seen = []

    class ListeningEcho(EchoAgent):
        async def analyze_user_intent(self, input, user_context, memory):
            seen.append(dict(input))
            return await super().analyze_user_intent(input, user_context, memory)

    kwargs = agent_kwargs()
    orchestrator = _orchestrator(SampleAgent(triggers=["Echo"], **kwargs), ListeningEcho(**kwargs))

    async def main():
        await orchestrator.run_agent("Sample", {}, 1)
        await orchestrator.process_collaboration_queue()

    asyncio.run(main())

    assert seen == [{"triggeringAgent": "Sample", "currentMood": "neutral", "triggeringMemory": {}}]
