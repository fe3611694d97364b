"""
Test the InsightBot analytics helpers and a full analysis run.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from agent.capabilities import analytics
from domain.entities import JournalEntry, MoodEntry, WellnessMetrics
from factory import ServiceFactory

BASE = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _mood(mood, day=0):
    return MoodEntry(user_id=1, mood=mood, timestamp=(BASE + timedelta(days=day)).isoformat())


def _metrics(day, energy=None, stress=None):
    return WellnessMetrics(
        user_id=1, energy_level=energy, stress_level=stress,
        timestamp=(BASE + timedelta(days=day, hours=3)).isoformat(),
    )


def test_mood_trend_compares_newest_and_oldest_thirds():
    # newest first
    improving = [_mood(m) for m in ("happy", "happy", "calm", "neutral", "sad", "sad")]
    declining = list(reversed(improving))
    flat = [_mood("calm") for _ in range(6)]

    assert analytics.mood_trend(improving) == "improving"
    assert analytics.mood_trend(declining) == "declining"
    assert analytics.mood_trend(flat) == "stable"
    assert analytics.mood_trend(improving[:2]) == "insufficient_data"


def test_calculate_trends_needs_seven_moods():
    assert analytics.calculate_trends([_mood("happy")] * 6, []) == {"insufficient_data": True}

    trends = analytics.calculate_trends([_mood("happy")] * 8, [])
    assert trends["week"]["moodTrend"] == "stable"
    assert trends["week"]["dominantMoods"][0] == {"mood": "happy", "count": 7, "percentage": 100.0}
    assert "month" in trends
    assert "energy" not in trends


def test_pearson():
    assert analytics.pearson([1, 2, 3], [2, 4, 6]) == pytest.approx(1.0)
    assert analytics.pearson([1, 2, 3], [3, 2, 1]) == pytest.approx(-1.0)
    assert analytics.pearson([1, 1, 1], [1, 2, 3]) == 0.0
    assert analytics.pearson([1, 2], [1]) == 0.0


def test_mood_metric_correlation_pairs_by_day():
    moods = [_mood("sad", 0), _mood("neutral", 1), _mood("happy", 2)]
    metrics = [
        _metrics(0, energy=2),
        _metrics(1, energy=5),
        _metrics(2, energy=8),
        # no mood that day
        _metrics(5, energy=1),
    ]

    assert analytics.mood_metric_correlation(moods, metrics, "energy_level") == pytest.approx(1.0)
    assert analytics.mood_metric_correlation(moods, metrics, "stress_level") == 0.0


def test_data_quality_scoring():
    days = [0, 1, 2, 3, 4, 5, 6, 7, 8, 14]
    moods = [_mood("calm", d) for d in days]
    now = BASE + timedelta(days=14, hours=1)

    quality = analytics.assess_data_quality(moods, [], [], now=now)

    assert quality == {
        "score": 70,
        "completeness": "fair",
        "reliability": "medium",
        "dataPoints": 10,
        "timeSpan": 14,
        "daysSinceLastEntry": 0,
    }


def test_data_quality_without_data():
    quality = analytics.assess_data_quality([], [], [])
    assert quality["score"] == 0
    assert quality["completeness"] == "poor"
    assert quality["daysSinceLastEntry"] == analytics.NO_RECENT_ENTRY_DAYS


def test_empty_data_points_is_insufficient_data(settings):
    factory = ServiceFactory(settings)
    asyncio.run(factory.initialize())
    insight_bot = factory.build_registry().get("InsightBot")

    result = asyncio.run(insight_bot.run({"dataPoints": []}, 1))

    assert result.success is False
    assert result.error_kind == "insufficient_data"
    assert "need more data points" in result.output


def test_insight_bot_analyses_stored_history(settings):
    factory = ServiceFactory(settings)
    asyncio.run(factory.initialize())
    registry = factory.build_registry()
    now = datetime.now(timezone.utc)

    async def main():
        moods = factory.create_mood_repository()
        for i, mood in enumerate(["happy", "calm", "calm", "neutral", "tired", "sad", "sad", "stressed"]):
            await moods.save(MoodEntry(user_id=1, mood=mood, timestamp=(now - timedelta(days=i)).isoformat()))
        await factory.create_journal_repository().save(
            JournalEntry(user_id=1, content="Work was busy but family dinner helped", prompt="Daily reflection"),
        )
        await registry.get("MoodMate").run({"mood": "happy"}, 1)
        return await registry.get("InsightBot").run({}, 1)

    result = asyncio.run(main())

    assert result.success is True
    report = result.output
    assert report["dataQuality"]["dataPoints"] == 10
    assert report["trends"]["week"]["moodTrend"] == "improving"
    assert report["insights"]["source"] == "fallback"
    assert report["insights"]["summary"]["moodCount"] == 9
    assert result.memory["successful_analyses"] == 1
