"""
Test the shared PLAN -> THINK -> EXECUTE engine with a minimal capability.

Covers action ranking, risk and confidence arithmetic, the default step
pipeline, StepContext narrowing and the never-raising run().
"""

import asyncio

import pytest

from domain.memory import AgentMemory
from domain.models import AgentRunResult, AgentState, ExecutionStep, Urgency, UserContext, UserIntent
from fakes import InMemoryMemoryStore, InMemoryRecommendationStore, SampleAgent, StaticUserContext, agent_kwargs


def test_actions_ranked_by_priority_and_irrelevant_dropped():
    agent = SampleAgent(**agent_kwargs())
    plan = asyncio.run(agent.plan({}, UserContext(), AgentMemory()))

    assert [a.name for a in plan.actions] == ["urgent_sample", "low_sample"]
    assert agent.calculate_action_priority(plan.actions[0], plan.intent) == pytest.approx(0.8)
    assert agent.calculate_action_priority(plan.actions[1], plan.intent) == pytest.approx(0.6)
    assert plan.expected_outcome == "Expected to Sample urgently with 80% confidence"


def test_low_risk_confidence():
    agent = SampleAgent(**agent_kwargs())
    plan = asyncio.run(agent.plan({}, UserContext(), AgentMemory()))
    thought = agent.think(plan, UserContext())

    assert plan.risk_assessment.overall_level == 1
    assert thought.selected_approach.name == "urgent_sample"
    assert thought.selected_approach.success_probability == pytest.approx(0.9)
    assert thought.confidence == pytest.approx(0.75)
    assert thought.safeguards == []


def test_high_urgency_with_low_confidence_raises_risk():
    intent = UserIntent(summary="help now", categories=["sample"], urgency=Urgency.HIGH, confidence=0.6)
    agent = SampleAgent(intent=intent, **agent_kwargs())
    plan = asyncio.run(agent.plan({}, UserContext(), AgentMemory()))
    thought = agent.think(plan, UserContext())

    assert plan.risk_assessment.overall_level == 2
    assert plan.risk_assessment.risks[0].description == "High urgency with low confidence"
    assert thought.confidence == pytest.approx(0.55)
    assert "Validate user input before proceeding" in thought.safeguards


def test_health_concern_lowers_feasibility():
    intent = UserIntent(summary="check health", categories=["sample"], category="health", confidence=0.8)
    agent = SampleAgent(intent=intent, **agent_kwargs())
    user_context = UserContext(health_status="concerning")
    plan = asyncio.run(agent.plan({}, user_context, AgentMemory()))
    thought = agent.think(plan, user_context)

    assert plan.risk_assessment.overall_level == 3
    assert thought.selected_approach.success_probability == pytest.approx(0.7)
    assert thought.confidence == pytest.approx(0.45)
    assert "Provide alternative options if primary approach fails" in thought.safeguards


def test_default_pipeline_narrows_step_context():
    recommendations = InMemoryRecommendationStore()
    memory_store = InMemoryMemoryStore()
    agent = SampleAgent(**agent_kwargs(memory_store=memory_store, recommendation_store=recommendations))

    result = asyncio.run(agent.run({"hello": "world"}, user_id=1))

    assert result.success is True
    assert result.state == AgentState.SUCCEEDED
    assert result.output == {"steps": ["prepare", "execute_main", "finalize"]}
    assert agent.seen == {
        "prepare": ["userInput"],
        "execute_main": ["preparation_complete"],
        "finalize": ["main_result"],
    }
    assert [r.type for r in recommendations.items] == ["sample"]
    assert recommendations.items[0].content == {"step": "finalize", "user": 1}
    assert memory_store.records[(1, "Sample")]["execution_count"] == 1


def test_failed_step_makes_run_partial_but_continues():
    recommendations = InMemoryRecommendationStore()
    agent = SampleAgent(**agent_kwargs(recommendation_store=recommendations))
    agent.failing_steps = {"execute_main"}

    result = asyncio.run(agent.run({}, user_id=1))

    assert result.success is False
    assert result.error is None
    assert result.output == {"steps": ["prepare", "finalize"]}
    # finalize ran without its upstream output
    assert agent.seen["finalize"] == []
    assert result.memory["last_execution"]["success"] is False


def test_run_never_raises(monkeypatch):
    agent = SampleAgent(**agent_kwargs())

    async def boom(*args, **kwargs):
        raise RuntimeError("intent service down")

    monkeypatch.setattr(agent, "analyze_user_intent", boom)
    result = asyncio.run(agent.run({}, user_id=1))

    assert isinstance(result, AgentRunResult)
    assert result.success is False
    assert result.state == AgentState.FAILED
    assert result.error == "intent service down"
    assert result.error_kind == "internal"
    assert result.output == "sample failed: internal"
    assert result.to_dict()["errorKind"] == "internal"


def test_no_applicable_action_is_reported():
    intent = UserIntent(summary="nothing matches", categories=["astronomy"], confidence=0.9)
    agent = SampleAgent(intent=intent, **agent_kwargs())

    result = asyncio.run(agent.run({}, user_id=1))

    assert result.success is False
    assert result.error_kind == "no_applicable_action"


def test_unknown_step_becomes_failed_step(monkeypatch):
    agent = SampleAgent(**agent_kwargs())
    monkeypatch.setattr(
        agent, "generate_execution_steps",
        lambda alternative, plan: [ExecutionStep("mystery", "?", ("userInput",), "mystery_output")],
    )

    result = asyncio.run(agent.run({}, user_id=1))

    assert result.success is False
    assert result.output == {"steps": []}
    assert result.memory["last_execution"]["results"] == [{"step": "mystery", "success": False}]


def test_observe_records_peer_summary():
    memory_store = InMemoryMemoryStore()
    agent = SampleAgent(**agent_kwargs(memory_store=memory_store, user_context=StaticUserContext()))
    peer = AgentRunResult(
        agent_name="MoodMate", success=True, output={"recommendations": ["breathe"]},
        collaboration_triggers=["MindPal"],
    )

    asyncio.run(agent.observe(peer, user_id=7))
    view = asyncio.run(agent.memory_view(7))

    observation = memory_store.records[(7, "Sample")]["observations"][0]
    assert observation["agent"] == "MoodMate"
    assert observation["has_recommendations"] is True
    assert observation["collaboration_triggered"] is True
    assert view.observation_count == 1
    assert view.execution_count == 0


def test_observation_log_keeps_the_latest_ten():
    memory_store = InMemoryMemoryStore()
    agent = SampleAgent(**agent_kwargs(memory_store=memory_store))

    async def main():
        for i in range(12):
            await agent.observe(AgentRunResult(agent_name=f"Peer{i}", success=True, output={}), user_id=1)

    asyncio.run(main())

    observations = memory_store.records[(1, "Sample")]["observations"]
    assert [o["agent"] for o in observations] == [f"Peer{i}" for i in range(2, 12)]
