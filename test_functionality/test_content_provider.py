"""
Test LLMContentProvider against scripted chat replies.

Replies the agents cannot use must surface as ContentProviderError so the
capabilities fall back to their static content instead of failing the run.
"""

import asyncio

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from agent.capabilities.resources import playlists_for
from domain.exceptions import ContentProviderError
from factory import ServiceFactory
from infrastructure.llm.content_provider import LLMContentProvider


def _provider(*replies):
    return LLMContentProvider(FakeListChatModel(responses=list(replies)))


def _registry(settings, content):
    factory = ServiceFactory(settings, content_provider=content)
    asyncio.run(factory.initialize())
    return factory, factory.build_registry()


def test_sentiment_is_reshaped():
    provider = _provider('{"sentiment": "Joy", "confidence": 1.7}')

    sentiment = asyncio.run(provider.analyze_sentiment("What a great day"))

    assert sentiment == {"sentiment": "joy", "confidence": 1.0}


def test_wordy_sentiment_confidence_is_rejected():
    provider = _provider('{"sentiment": "joy", "confidence": "high"}')

    with pytest.raises(ContentProviderError, match="unusable data"):
        asyncio.run(provider.analyze_sentiment("What a great day"))


def test_mood_mate_survives_wordy_sentiment_confidence(settings):
    _, registry = _registry(settings, _provider('{"sentiment": "joy", "confidence": "high"}'))

    result = asyncio.run(registry.get("MoodMate").run({"message": "What a great day"}, 1))

    assert result.success is True
    assert result.output["mood"] == "neutral"
    assert result.output["confidence"] == 0.5
    assert result.output["analysis"]["source"] == "ai_analysis"


def test_playlist_without_name_is_rejected():
    provider = _provider('{"playlists": [{"name": null, "tracks": 12}]}')

    with pytest.raises(ContentProviderError):
        asyncio.run(provider.music_for_mood("happy"))


def test_mood_mate_uses_static_playlists_for_nameless_reply(settings):
    _, registry = _registry(settings, _provider('{"playlists": [{"name": null}]}'))

    result = asyncio.run(registry.get("MoodMate").run({"mood": "happy"}, 1))

    assert result.success is True
    assert result.output["music_recommendations"]["playlists"] == playlists_for("happy")["playlists"]


def test_playlists_get_search_links():
    provider = _provider('{"playlists": [{"name": "Sunny Mornings", "tracks": "30"}]}')

    music = asyncio.run(provider.music_for_mood("happy"))

    assert music["playlists"] == [{
        "name": "Sunny Mornings",
        "description": "",
        "url": "https://open.spotify.com/search/Sunny+Mornings",
        "tracks": 30,
    }]


def test_meals_as_plain_strings_are_rejected():
    provider = _provider('{"meals": ["oatmeal", "salad"]}')

    with pytest.raises(ContentProviderError, match="entries must be objects"):
        asyncio.run(provider.nutrition_plan("calm", {}))


def test_nutri_coach_falls_back_on_string_meals(settings):
    factory, registry = _registry(settings, _provider('{"meals": ["oatmeal", "salad"]}'))

    async def main():
        result = await registry.get("NutriCoach").run({"currentMood": "calm"}, 1)
        return result, await factory.create_recommendation_store().list_active(1, "NutriCoach")

    result, saved = asyncio.run(main())

    assert result.success is True
    assert result.output["nutritionPlan"]["source"] == "fallback"
    assert result.output["nutritionPlan"]["meals"]
    assert [r.type for r in saved] == ["nutrition"]


def test_workout_skips_unusable_videos():
    provider = _provider(
        '{"exercises": [{"name": "Walk", "duration": 10}],'
        ' "videos": ["not a video", {"title": ""}, {"title": "Gentle Stretch", "duration": 12}]}'
    )

    plan = asyncio.run(provider.workout_plan("tired", 3, 20, "stretching"))

    assert plan["exercises"] == [{"name": "Walk", "duration": 10}]
    assert [v["title"] for v in plan["videos"]] == ["Gentle Stretch"]
    assert plan["videos"][0]["duration"] == 12
    assert plan["energyAdaptation"] == "Adapted for current energy level"


def test_insights_need_suggestions():
    provider = _provider('{"trends": [], "correlations": []}')

    with pytest.raises(ContentProviderError, match="missing suggestions"):
        asyncio.run(provider.wellness_insights({"summary": {}}))
