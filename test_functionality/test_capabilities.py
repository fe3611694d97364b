"""
Test the five capabilities against SQLite with the offline content
provider (static fallbacks) or a recording fake.
"""

import asyncio
import json

from agent.capabilities.flex_genie import FALLBACK_VIDEOS, assess_energy_level, adapt_intensity
from agent.capabilities.mood_mate import analyze_mood_patterns, determine_urgency, map_sentiment_to_mood
from domain.models import Urgency
from factory import ServiceFactory
from fakes import RecordingContentProvider


def _registry(settings, content=None):
    factory = ServiceFactory(settings, content_provider=content)
    asyncio.run(factory.initialize())
    return factory, factory.build_registry()


# ---------------------------------------------------------------------------
# MoodMate
# ---------------------------------------------------------------------------

def test_sentiment_mapping_and_urgency():
    assert map_sentiment_to_mood("joy") == "happy"
    assert map_sentiment_to_mood("fear") == "anxious"
    assert map_sentiment_to_mood("something odd") == "neutral"
    assert determine_urgency("panic") == Urgency.HIGH
    assert determine_urgency("overwhelmed") == Urgency.MEDIUM
    assert determine_urgency("happy") == Urgency.LOW


def test_mood_patterns_trend():
    moods = ["sad", "sad", "sad", "happy", "happy", "excited"]
    patterns = analyze_mood_patterns(moods)
    assert patterns["dominant_mood"] == "sad"
    assert patterns["mood_distribution"] == {"sad": 3, "happy": 2, "excited": 1}
    assert patterns["trend"] == "improving"


def test_mood_mate_tracks_stressed_mood_with_fallback_music(settings):
    factory, registry = _registry(settings)

    async def main():
        result = await registry.get("MoodMate").run({"mood": "stressed"}, 1)
        return result, await factory.create_mood_repository().get_recent(1, 5)

    result, saved = asyncio.run(main())

    assert result.success is True
    assert result.output["mood"] == "stressed"
    assert result.output["music_recommendations"]["playlists"]
    assert result.output["tracking"] == {"saved": True, "total_entries": 1}
    assert result.collaboration_triggers == ["NutriCoach", "FlexGenie", "MindPal"]
    assert result.memory["last_mood"] == "stressed"
    assert [m.mood for m in saved] == ["stressed"]


def test_mood_mate_reads_sentiment_from_message(settings):
    content = RecordingContentProvider(
        analyze_sentiment={"sentiment": "joy", "confidence": 0.9},
        music_for_mood={"playlists": [{"name": "Sunshine", "url": "https://example.com/p"}]},
    )
    _, registry = _registry(settings, content)

    result = asyncio.run(registry.get("MoodMate").run({"message": "What a great day at work"}, 1))

    assert result.output["mood"] == "happy"
    assert result.output["analysis"]["source"] == "ai_analysis"
    assert "work" in result.output["analysis"]["triggers"]
    assert content.calls.count("analyze_sentiment") == 1
    assert result.collaboration_triggers == []


# ---------------------------------------------------------------------------
# NutriCoach
# ---------------------------------------------------------------------------

def test_nutri_coach_falls_back_and_persists(settings):
    factory, registry = _registry(settings)

    async def main():
        result = await registry.get("NutriCoach").run({"currentMood": "stressed"}, 1)
        return result, await factory.create_recommendation_store().list_active(1, "NutriCoach")

    result, stored = asyncio.run(main())

    assert result.success is True
    plan = result.output["nutritionPlan"]
    assert plan["source"] == "fallback"
    assert len(plan["meals"]) == 3
    assert result.output["shoppingList"]
    assert [r.type for r in stored] == ["nutrition"]
    assert result.memory["successful_executions"] == 1


# ---------------------------------------------------------------------------
# FlexGenie
# ---------------------------------------------------------------------------

def test_energy_and_intensity_for_stress():
    energy = assess_energy_level("stressed", 6.0)
    assert energy == 5
    assert adapt_intensity("stressed", energy) == 3
    # a reported level replaces the mood estimate before blending
    assert assess_energy_level("stressed", 6.0, reported=10) == 8
    assert adapt_intensity("tired", 1) == 1


def test_flex_genie_uses_stress_videos_when_provider_offline(settings):
    _, registry = _registry(settings)

    result = asyncio.run(registry.get("FlexGenie").run({"currentMood": "stressed"}, 1))

    assert result.success is True
    assert result.output["videoRecommendations"] == FALLBACK_VIDEOS["stressed"]
    workout = result.output["workoutPlan"]
    assert workout["source"] == "fallback"
    assert workout["workoutType"] == "yoga"
    assert workout["adaptedIntensity"] == 3


def test_flex_genie_fills_missing_videos_with_one_provider_call(settings):
    content = RecordingContentProvider(
        workout_plan={"exercises": [{"name": "Cat-Cow", "duration": 5}], "videos": []},
    )
    _, registry = _registry(settings, content)

    result = asyncio.run(registry.get("FlexGenie").run({"currentMood": "tired"}, 1))

    assert content.calls == ["workout_plan"]
    assert result.output["workoutPlan"]["source"] == "ai"
    assert result.output["workoutPlan"]["exercises"][0]["name"] == "Cat-Cow"
    assert result.output["videoRecommendations"] == FALLBACK_VIDEOS["tired"]


# ---------------------------------------------------------------------------
# MindPal
# ---------------------------------------------------------------------------

def test_mind_pal_escalates_depressed_mood(settings):
    _, registry = _registry(settings)

    result = asyncio.run(registry.get("MindPal").run({"currentMood": "depressed"}, 1))

    assert result.success is True
    safety = result.output["safetyAssessment"]
    assert safety["riskLevel"] == "high"
    assert safety["needsImmediateSupport"] is True
    assert "988" in json.dumps(safety["crisisResources"])
    assert safety["safetyPlan"]
    risk = result.output["riskAssessment"]
    assert risk["riskLevel"] == "high"
    assert "current_crisis_mood" in risk["riskFactors"]


def test_mind_pal_calm_mood_is_low_risk(settings):
    _, registry = _registry(settings)

    result = asyncio.run(registry.get("MindPal").run({"currentMood": "calm"}, 1))

    assert result.output["safetyAssessment"]["riskLevel"] == "low"
    assert result.output["safetyAssessment"]["crisisResources"] is None


def test_mind_pal_journal_entry_updates_streak_and_insights(settings):
    factory, registry = _registry(settings)
    mind_pal = registry.get("MindPal")

    async def main():
        entry = await mind_pal.save_journal_entry(1, "Grateful for family time, work was stressful though")
        memory = await mind_pal.get_memory(1)
        journals = await factory.create_journal_repository().get_recent(1, 5)
        return entry, memory, journals

    entry, memory, journals = asyncio.run(main())

    assert entry.id is not None
    assert entry.prompt == "Daily reflection"
    assert memory.journal_streak == 1
    insight = memory.journal_insights[-1]
    assert "family" in insight.themes
    assert "work" in insight.themes
    assert insight.word_count == 8
    assert [j.content for j in journals] == [entry.content]


def test_mood_mate_empty_input_defaults_to_neutral(settings):
    _, registry = _registry(settings)

    result = asyncio.run(registry.get("MoodMate").run({}, 1))

    assert result.success is True
    assert result.output["mood"] == "neutral"
    assert result.collaboration_triggers == []
