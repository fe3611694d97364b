"""
Test agent chat: in-character replies, intent-driven actions and the
fallbacks used when the LLM responder or intent extractor fail.
"""

import asyncio

from domain.models import ChatTurn, UserContext
from factory import ServiceFactory
from fakes import BrokenExtractor, BrokenResponder, SlowExtractor
from infrastructure.llm.conversation import FallbackConversationResponder, RuleBasedResponder
from infrastructure.llm.intent_extractor import FallbackIntentExtractor, KeywordIntentExtractor

JOURNAL_MESSAGE = "Please add this to my journal: today I finally finished the garden project"


def _orchestrator(settings):
    factory = ServiceFactory(settings)
    asyncio.run(factory.initialize())
    return factory, factory.create_orchestrator()


def _chat(orchestrator, agent, message, history=()):
    return asyncio.run(orchestrator.handle_agent_conversation(agent, message, list(history), 1))


def test_mood_message_triggers_mood_update(settings):
    _, orchestrator = _orchestrator(settings)

    result = _chat(orchestrator, "MoodMate", "I'm feeling stressed today")
    payload = result.to_dict()

    assert payload["response"]
    assert payload["collaborationTriggered"] is True
    action = payload["actions"][0]
    assert action["type"] == "mood_update"
    assert action["result"]["primary"]["output"]["mood"] == "stressed"
    assert len(action["result"]["collaborations"]) == 3


def test_plain_chat_has_no_actions(settings):
    _, orchestrator = _orchestrator(settings)

    result = _chat(
        orchestrator, "FlexGenie", "hello there",
        history=[ChatTurn(role="user", content="hi"), ChatTurn(role="assistant", content="Hey!")],
    )

    assert result.response
    assert result.actions == []
    assert result.to_dict() == {"response": result.response}


def test_journal_save_only_for_mind_pal(settings):
    factory, orchestrator = _orchestrator(settings)

    saved = _chat(orchestrator, "MindPal", JOURNAL_MESSAGE)
    ignored = _chat(orchestrator, "MoodMate", JOURNAL_MESSAGE)
    too_short = _chat(orchestrator, "MindPal", "journal: ok")
    journals = asyncio.run(factory.create_journal_repository().get_recent(1, 10))

    assert saved.actions[0]["type"] == "journal_save"
    assert saved.actions[0]["success"] is True
    assert saved.actions[0]["entryId"] == journals[0].id
    assert ignored.actions == []
    assert too_short.actions == []
    assert [j.content for j in journals] == [JOURNAL_MESSAGE]


def test_analysis_request_only_for_insight_bot(settings):
    _, orchestrator = _orchestrator(settings)

    insights = _chat(orchestrator, "InsightBot", "Can you analyze my trends?")
    elsewhere = _chat(orchestrator, "NutriCoach", "Can you analyze my trends?")

    assert insights.actions[0]["type"] == "insights"
    assert insights.actions[0]["result"]["agentName"] == "InsightBot"
    assert elsewhere.actions == []


def test_recommendation_request_runs_the_addressed_agent(settings):
    _, orchestrator = _orchestrator(settings)

    result = _chat(orchestrator, "NutriCoach", "Could you suggest something for dinner")

    action = result.actions[0]
    assert action["type"] == "recommendation"
    assert action["result"]["agentName"] == "NutriCoach"
    assert action["result"]["success"] is True


def test_failed_action_yields_no_actions(settings, monkeypatch):
    _, orchestrator = _orchestrator(settings)

    async def boom(mood, user_id):
        raise RuntimeError("database locked")

    monkeypatch.setattr(orchestrator, "run_mood_update", boom)
    result = _chat(orchestrator, "MoodMate", "I'm feeling sad")

    assert result.response
    assert result.actions == []
    assert "collaborationTriggered" not in result.to_dict()


def test_responder_falls_back_to_rules():
    responder = FallbackConversationResponder(BrokenResponder(), RuleBasedResponder(), timeout=1.0)
    context = UserContext(current_mood="tired")

    async def main():
        return (
            await responder.respond("MindPal", "hello", [], context),
            await RuleBasedResponder().respond("MindPal", "hello", [], context),
        )

    reply, expected = asyncio.run(main())
    assert reply == expected


def test_slow_or_broken_extractor_falls_back_to_keywords():
    slow = FallbackIntentExtractor(SlowExtractor(), KeywordIntentExtractor(), timeout=0.05)
    broken = FallbackIntentExtractor(BrokenExtractor(), KeywordIntentExtractor(), timeout=1.0)

    slow_intent = asyncio.run(slow.extract("I'm feeling anxious", "MoodMate"))
    broken_intent = asyncio.run(broken.extract("show me my progress", "InsightBot"))

    assert slow_intent.action_type == "mood_update"
    assert slow_intent.entities == ["anxious"]
    assert broken_intent.action_type == "data_analysis"
