"""
agent.capabilities.analytics - Deterministic wellness heuristics for InsightBot.

Everything here is a plain function over lists of entities: averages over
thirds of a series, fixed thresholds, a Pearson coefficient and keyword
counts. None of it is a validated statistical model; results are meant
to be read as rough indicators.

Series arguments are newest-first, as the repositories return them.
"""

from __future__ import annotations

import math
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from domain.entities import JournalEntry, MoodEntry, WellnessMetrics

MIN_MOODS_FOR_TRENDS = 7
TREND_WINDOWS = {"week": 7, "month": 30, "quarter": 90}
TREND_THRESHOLD = 0.5
NO_RECENT_ENTRY_DAYS = 999

MOOD_VALUES = {
    "depressed": 1, "sad": 2, "anxious": 3, "stressed": 4, "tired": 4,
    "neutral": 5, "calm": 6, "focused": 7, "content": 7,
    "happy": 8, "excited": 9, "joyful": 9,
}

TRIGGER_KEYWORDS = ("work", "stress", "family", "health", "sleep", "exercise", "social")
RECURRING_THEMES = ("work", "family", "health", "relationships", "goals")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
TIMES_OF_DAY = ("morning", "afternoon", "evening")


def mood_to_numeric(mood: str) -> int:
    return MOOD_VALUES.get(mood, 5)


def parse_timestamp(value: str) -> Optional[datetime]:
    """ISO-8601 → aware datetime (naive values are taken as UTC); None if unparseable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _thirds(values: Sequence[float]) -> tuple[Sequence[float], Sequence[float]]:
    third = len(values) // 3
    return values[:third], values[-third:]


# ---------------------------------------------------------------------------
# Mood trends
# ---------------------------------------------------------------------------

def mood_trend(moods: Sequence[MoodEntry]) -> str:
    """Newest third against oldest third of the window, ±0.5 points."""
    if len(moods) < 3:
        return "insufficient_data"
    recent, older = _thirds([mood_to_numeric(m.mood) for m in moods])
    difference = mean(recent) - mean(older)
    if difference > TREND_THRESHOLD:
        return "improving"
    if difference < -TREND_THRESHOLD:
        return "declining"
    return "stable"


def emotional_volatility(moods: Sequence[MoodEntry]) -> float:
    if len(moods) < 2:
        return 0.0
    values = [mood_to_numeric(m.mood) for m in moods]
    total = sum(abs(b - a) for a, b in zip(values, values[1:]))
    return total / (len(values) - 1) / 10


def dominant_moods(moods: Sequence[MoodEntry], limit: int = 3) -> list[dict[str, Any]]:
    counts = Counter(m.mood for m in moods if m.mood)
    return [
        {"mood": mood, "count": count, "percentage": count / len(moods) * 100}
        for mood, count in counts.most_common(limit)
    ]


def improvement_score(moods: Sequence[MoodEntry]) -> int:
    """Newest three against oldest three, as a percentage of the 10-point scale."""
    if len(moods) < MIN_MOODS_FOR_TRENDS:
        return 0
    recent = mean([mood_to_numeric(m.mood) for m in moods[:3]])
    older = mean([mood_to_numeric(m.mood) for m in moods[-3:]])
    return round((recent - older) / 10 * 100)


def metric_trend(metrics: Sequence[WellnessMetrics], field: str) -> dict[str, Any]:
    values = [getattr(m, field) for m in metrics if getattr(m, field) is not None]
    if len(values) < 3:
        return {"trend": "insufficient_data"}
    recent, older = _thirds(values)
    recent_avg, older_avg = mean(recent), mean(older)
    change = recent_avg - older_avg
    if change > TREND_THRESHOLD:
        trend = "increasing"
    elif change < -TREND_THRESHOLD:
        trend = "decreasing"
    else:
        trend = "stable"
    return {
        "trend": trend,
        "change": round(change, 1),
        "changePercent": round(change / older_avg * 100, 1) if older_avg else 0.0,
        "current": round(recent_avg, 1),
    }


def calculate_trends(moods: Sequence[MoodEntry], metrics: Sequence[WellnessMetrics]) -> dict[str, Any]:
    if len(moods) < MIN_MOODS_FOR_TRENDS:
        return {"insufficient_data": True}

    trends: dict[str, Any] = {}
    for period, days in TREND_WINDOWS.items():
        window = moods[:days]
        if len(window) >= 3:
            trends[period] = {
                "moodTrend": mood_trend(window),
                "volatility": emotional_volatility(window),
                "dominantMoods": dominant_moods(window),
                "improvement": improvement_score(window),
            }
    if metrics:
        trends["energy"] = metric_trend(metrics, "energy_level")
        trends["stress"] = metric_trend(metrics, "stress_level")
        trends["focus"] = metric_trend(metrics, "focus_time")
    return trends


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

def time_of_day(hour: int) -> str:
    if hour < 12:
        return "morning"
    if hour < 17:
        return "afternoon"
    return "evening"


def temporal_patterns(moods: Iterable[MoodEntry]) -> dict[str, dict[str, list[str]]]:
    patterns: dict[str, dict[str, list[str]]] = {"dayOfWeek": {}, "timeOfDay": {}, "monthly": {}}
    for entry in moods:
        when = parse_timestamp(entry.timestamp)
        if when is None:
            continue
        patterns["dayOfWeek"].setdefault(WEEKDAYS[when.weekday()], []).append(entry.mood)
        patterns["timeOfDay"].setdefault(time_of_day(when.hour), []).append(entry.mood)
        patterns["monthly"].setdefault(str(when.month), []).append(entry.mood)
    return patterns


def _group_strength(groups: dict[str, list[str]]) -> float:
    """Spread of group mean moods over the 8-point scale; 0 with fewer than two groups."""
    if len(groups) < 2:
        return 0.0
    means = [mean([mood_to_numeric(m) for m in moods]) for moods in groups.values()]
    return round((max(means) - min(means)) / 8, 2)


def cyclical_patterns(temporal: dict[str, dict[str, list[str]]]) -> dict[str, Any]:
    weekly = _group_strength(temporal["dayOfWeek"])
    monthly = _group_strength(temporal["monthly"])
    return {
        "weekly": {
            "strength": weekly,
            "pattern": "weekly_variation" if weekly > 0.3 else "mild_weekly_variation" if weekly > 0 else "no_clear_weekly_pattern",
        },
        "monthly": {
            "strength": monthly,
            "pattern": "monthly_variation" if monthly > 0.3 else "no_clear_monthly_pattern",
        },
        "detected": weekly > 0.3 or monthly > 0.3,
    }


def associated_moods(
    journals: Sequence[JournalEntry], moods: Sequence[MoodEntry], hours: int = 24,
) -> list[MoodEntry]:
    """Moods logged within *hours* of any of the journal entries."""
    stamps = [t for t in (parse_timestamp(j.timestamp) for j in journals) if t]
    window = hours * 3600
    result = []
    for mood in moods:
        when = parse_timestamp(mood.timestamp)
        if when and any(abs((when - t).total_seconds()) <= window for t in stamps):
            result.append(mood)
    return result


def trigger_impact(moods: Sequence[MoodEntry]) -> str:
    average = mean([mood_to_numeric(m.mood) for m in moods])
    if average < 4:
        return "negative"
    if average > 6:
        return "positive"
    return "neutral"


def mood_triggers(moods: Sequence[MoodEntry], journals: Sequence[JournalEntry]) -> dict[str, Any]:
    triggers: dict[str, Any] = {}
    for keyword in TRIGGER_KEYWORDS:
        related = [j for j in journals if keyword in j.content.lower()]
        if not related:
            continue
        nearby = associated_moods(related, moods)
        if nearby:
            triggers[keyword] = {
                "frequency": len(related),
                "associatedMoods": dict(Counter(m.mood for m in nearby)),
                "impact": trigger_impact(nearby),
            }
    return triggers


def journaling_consistency(journals: Sequence[JournalEntry]) -> float:
    """1 minus the squared coefficient of variation of the gaps between entries."""
    stamps = sorted(t for t in (parse_timestamp(j.timestamp) for j in journals) if t)
    if len(stamps) < 2:
        return 0.0
    gaps = [(b - a).total_seconds() for a, b in zip(stamps, stamps[1:])]
    average = mean(gaps)
    if average == 0:
        return 0.0
    variance = mean([(g - average) ** 2 for g in gaps])
    return max(0.0, 1 - variance / (average * average))


def identify_patterns(moods: Sequence[MoodEntry], journals: Sequence[JournalEntry]) -> dict[str, Any]:
    patterns: dict[str, Any] = {}
    if moods:
        temporal = temporal_patterns(moods)
        patterns["temporal"] = temporal
        patterns["cyclical"] = cyclical_patterns(temporal)
        patterns["triggers"] = mood_triggers(moods, journals)
    if journals:
        patterns["journaling"] = {
            "frequency": len(journals),
            "averageLength": mean([len(j.content) for j in journals]),
            "consistency": journaling_consistency(journals),
        }
        theme_counts = {
            theme: sum(1 for j in journals if theme in j.content.lower())
            for theme in RECURRING_THEMES
        }
        patterns["themes"] = {theme: count for theme, count in theme_counts.items() if count}
    return patterns


# ---------------------------------------------------------------------------
# Correlations
# ---------------------------------------------------------------------------

def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    if len(x) != len(y) or not x:
        return 0.0
    n = len(x)
    sum_x, sum_y = sum(x), sum(y)
    sum_xy = sum(a * b for a, b in zip(x, y))
    sum_x2 = sum(a * a for a in x)
    sum_y2 = sum(b * b for b in y)
    numerator = n * sum_xy - sum_x * sum_y
    denominator = math.sqrt((n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y))
    return 0.0 if denominator == 0 else numerator / denominator


def _day(timestamp: str) -> Optional[str]:
    when = parse_timestamp(timestamp)
    return when.date().isoformat() if when else None


def daily_mood_average(moods: Iterable[MoodEntry]) -> dict[str, float]:
    by_day: dict[str, list[int]] = defaultdict(list)
    for entry in moods:
        day = _day(entry.timestamp)
        if day:
            by_day[day].append(mood_to_numeric(entry.mood))
    return {day: mean(values) for day, values in by_day.items()}


def mood_metric_correlation(
    moods: Sequence[MoodEntry], metrics: Sequence[WellnessMetrics], field: str,
) -> float:
    """Pearson over the days that have both a mood and a value for *field*."""
    daily = daily_mood_average(moods)
    pairs = []
    for record in metrics:
        value = getattr(record, field)
        day = _day(record.timestamp)
        if value is not None and day in daily:
            pairs.append((daily[day], float(value)))
    if len(pairs) < 2:
        return 0.0
    return round(pearson([p[0] for p in pairs], [p[1] for p in pairs]), 3)


def journaling_mood_correlation(journals: Sequence[JournalEntry], moods: Sequence[MoodEntry]) -> float:
    """Pearson between 'journaled that day' (0/1) and the day's mood."""
    daily = daily_mood_average(moods)
    journal_days = {d for d in (_day(j.timestamp) for j in journals) if d}
    days = sorted(daily)
    if len(days) < 2:
        return 0.0
    return round(pearson([1.0 if d in journal_days else 0.0 for d in days], [daily[d] for d in days]), 3)


def detect_correlations(
    moods: Sequence[MoodEntry], journals: Sequence[JournalEntry], metrics: Sequence[WellnessMetrics],
) -> dict[str, float]:
    correlations: dict[str, float] = {}
    if moods and metrics:
        correlations["moodEnergy"] = mood_metric_correlation(moods, metrics, "energy_level")
        correlations["moodStress"] = mood_metric_correlation(moods, metrics, "stress_level")
    if moods and journals:
        correlations["journalingMood"] = journaling_mood_correlation(journals, moods)
    return correlations


# ---------------------------------------------------------------------------
# Data quality
# ---------------------------------------------------------------------------

def time_span_days(*series: Iterable[Any]) -> int:
    stamps = [t for entries in series for t in (parse_timestamp(e.timestamp) for e in entries) if t]
    if not stamps:
        return 0
    return (max(stamps) - min(stamps)).days


def days_since_last_entry(*series: Iterable[Any], now: Optional[datetime] = None) -> int:
    stamps = [t for entries in series for t in (parse_timestamp(e.timestamp) for e in entries) if t]
    if not stamps:
        return NO_RECENT_ENTRY_DAYS
    now = now or datetime.now(timezone.utc)
    return max(0, (now - max(stamps)).days)


def assess_data_quality(
    moods: Sequence[MoodEntry],
    journals: Sequence[JournalEntry],
    metrics: Sequence[WellnessMetrics],
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Volume (max 40) + time span (max 30) + recency (max 30)."""
    score = 0
    points = len(moods) + len(journals) + len(metrics)
    if points >= 50:
        score, completeness = score + 40, "excellent"
    elif points >= 20:
        score, completeness = score + 30, "good"
    elif points >= 10:
        score, completeness = score + 20, "fair"
    else:
        completeness = "poor"

    span = time_span_days(moods, metrics)
    if span >= 30:
        score, reliability = score + 30, "high"
    elif span >= 14:
        score, reliability = score + 20, "medium"
    elif span >= 7:
        score, reliability = score + 10, "low"
    else:
        reliability = "low"

    since = days_since_last_entry(moods, journals, metrics, now=now)
    if since <= 1:
        score += 30
    elif since <= 3:
        score += 20
    elif since <= 7:
        score += 10

    return {
        "score": min(100, score),
        "completeness": completeness,
        "reliability": reliability,
        "dataPoints": points,
        "timeSpan": span,
        "daysSinceLastEntry": since,
    }


# ---------------------------------------------------------------------------
# Predictions
# ---------------------------------------------------------------------------

def generate_predictions(trends: dict[str, Any], patterns: dict[str, Any]) -> dict[str, Any]:
    predictions: dict[str, Any] = {}
    week = trends.get("week")
    if week and patterns.get("cyclical"):
        predictions["moodForecast"] = {
            "nextWeek": week["moodTrend"],
            "confidence": 0.7 if patterns["cyclical"]["detected"] else 0.6,
            "factors": ["historical_patterns", "current_trends"],
        }
    energy = trends.get("energy")
    if energy and energy.get("trend") != "insufficient_data":
        predictions["energyForecast"] = {
            "nextWeek": energy.get("current", 5),
            "trend": energy["trend"],
            "confidence": 0.6,
        }

    volatility = week["volatility"] if week else 0.0
    if week and week["moodTrend"] == "declining":
        milestone = "mood_recovery"
    elif volatility > 0.3:
        milestone = "mood_stability"
    else:
        milestone = "consistent_routine"
    predictions["milestones"] = {"nextMilestone": milestone, "estimatedDays": 14, "confidence": 0.5}

    factors = []
    if week and week["moodTrend"] == "declining":
        factors.append("declining_mood")
    if volatility > 0.5:
        factors.append("high_volatility")
    stress = trends.get("stress")
    if stress and stress.get("trend") == "increasing":
        factors.append("rising_stress")
    level = "high" if len(factors) >= 2 else "medium" if factors else "low"
    predictions["riskAssessment"] = {
        "riskLevel": level,
        "factors": factors,
        "recommendations": ["reach_out_for_support"] if level == "high" else ["continue_current_practices"],
    }
    return predictions
