"""
agent.capabilities.insight_bot - Cross-source wellness analytics.

prepare gathers moods, journals, metrics, active recommendations and a
read-only MemoryView of every other agent. execute_main runs the
heuristics in agent.capabilities.analytics and makes the single
wellness_insights provider call; finalize assembles the report.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from application.context import StepContext
from agent.base import WellnessAgent, step_data, utcnow_iso
from agent.capabilities import analytics
from domain.exceptions import AgentError, ContentProviderError, ErrorKind
from domain.memory import (
    INSIGHT_HISTORY_LIMIT,
    AgentMemory,
    InsightBotMemory,
    MemoryView,
    load_memory,
)
from domain.models import (
    AgentAction,
    AgentPlan,
    ExecutionStep,
    StepResult,
    Urgency,
    UserContext,
    UserIntent,
)
from domain.ports import JournalRepository, MetricsRepository, MoodRepository

logger = logging.getLogger(__name__)

PLAN_CONFIDENCE = 0.95
MOOD_HISTORY = 60
JOURNAL_HISTORY = 30
METRIC_DAYS = 60
BIG_DATA_POINTS = 100

PEER_AGENTS = ("MoodMate", "NutriCoach", "FlexGenie", "MindPal")
COVERAGE_AREAS = {
    "MoodMate": "mood_tracking",
    "NutriCoach": "nutrition_planning",
    "FlexGenie": "exercise_consistency",
    "MindPal": "journaling",
}
AGENT_FOCUS = {
    "MoodMate": "focus_on_pattern_recognition",
    "NutriCoach": "improve_meal_timing",
    "FlexGenie": "increase_consistency",
    "MindPal": "enhance_journaling_prompts",
}

FALLBACK_SUGGESTIONS = [
    "Keep logging your mood daily so trends become clearer",
    "Pair a short walk with your next stressful day and note how you feel",
    "Write a brief journal entry when your mood shifts",
]


def synthesize_cross_agent_insights(
    views: Mapping[str, MemoryView], data_quality: dict[str, Any], has_metrics: bool,
) -> dict[str, Any]:
    active = [name for name in PEER_AGENTS if name in views and views[name].execution_count > 0]
    succeeded = [name for name in active if views[name].last_execution_success]
    effectiveness = (
        "good" if active and len(succeeded) == len(active)
        else "fair" if succeeded
        else "limited"
    )

    gaps = [COVERAGE_AREAS[name] for name in PEER_AGENTS if name not in active]
    if not has_metrics:
        gaps.append("wellness_metrics")

    coverage = len(active) / len(PEER_AGENTS) * 100
    score = round((coverage + data_quality["score"]) / 2)
    return {
        "collaborationEffectiveness": {
            "effectiveness": effectiveness,
            "collaborationCount": len(active),
            "observations": sum(views[name].observation_count for name in active),
        },
        "coverageGaps": {
            "gaps": gaps,
            "priority": "high" if len(gaps) >= 3 else "medium" if gaps else "low",
        },
        "agentRecommendations": dict(AGENT_FOCUS),
        "ecosystemHealth": {
            "overallHealth": "good" if score >= 75 else "fair" if score >= 50 else "needs_attention",
            "score": score,
            "activeAgents": active,
        },
    }


def personalized_recommendations(
    mood: str, trends: dict[str, Any], data_quality: dict[str, Any],
) -> dict[str, list[str]]:
    immediate = ["Maintain regular mood check-ins"]
    stress = trends.get("stress") or {}
    if stress.get("trend") == "increasing":
        immediate.insert(0, "Schedule a short break or breathing exercise today")
    week = trends.get("week") or {}
    if week.get("moodTrend") == "declining":
        immediate.insert(0, "Reach out to someone you trust this week")
    immediate.append("Focus on a consistent sleep schedule")

    personalized = []
    if mood in ("stressed", "anxious", "overwhelmed"):
        personalized.append(f"Based on your {mood} mood, focus on calming activities")
    else:
        personalized.append(f"Your {mood} mood is a good moment to build on what is working")
    if data_quality["score"] >= 60:
        personalized.append("Your tracking is consistent - keep it up!")
    else:
        personalized.append("A few more days of tracking will sharpen these insights")

    return {
        "immediate": immediate,
        "shortTerm": [
            "Establish weekly wellness review sessions",
            "Experiment with new stress management techniques",
            "Set achievable fitness goals",
        ],
        "longTerm": [
            "Develop comprehensive wellness routine",
            "Build strong support network",
            "Create sustainable lifestyle changes",
        ],
        "personalized": personalized,
    }


def visualization_data(
    moods: list[Any],
    trends: dict[str, Any],
    patterns: dict[str, Any],
    correlations: dict[str, float],
    data_quality: dict[str, Any],
) -> dict[str, Any]:
    chronological = list(reversed(moods))
    heatmap = []
    for day, day_moods in (patterns.get("temporal") or {}).get("dayOfWeek", {}).items():
        heatmap.append({
            "day": day,
            "averageMood": round(analytics.mean([analytics.mood_to_numeric(m) for m in day_moods]), 2),
            "entries": len(day_moods),
        })
    week = trends.get("week") or {}
    energy = trends.get("energy") or {}
    return {
        "moodChart": {
            "labels": [m.timestamp[:10] for m in chronological],
            "data": [analytics.mood_to_numeric(m.mood) for m in chronological],
            "type": "line",
        },
        "trendLines": {
            "moodTrend": week.get("moodTrend", "stable"),
            "energyTrend": energy.get("trend", "stable"),
            "stressTrend": (trends.get("stress") or {}).get("trend", "stable"),
        },
        "heatmap": {"type": "heatmap", "data": heatmap},
        "correlationMatrix": {"type": "correlation_matrix", "correlations": dict(correlations)},
        "progressIndicators": {
            "moodProgress": week.get("improvement", 0),
            "energyProgress": energy.get("changePercent", 0),
            "overallProgress": data_quality["score"],
        },
    }


class InsightBotAgent(WellnessAgent):
    name = "InsightBot"
    role = "Advanced Analytics & Predictive Wellness Intelligence"
    tools = ["trend_analysis", "correlation_detection", "predictive_insights", "pattern_recognition", "data_visualization"]
    capabilities = ["comprehensive_analytics", "predictive_modeling", "cross_agent_insights", "wellness_forecasting"]
    must_do_tasks = ["analyze_wellness_trends", "predict_mood_patterns", "generate_insights", "create_recommendations"]
    recommendation_type = "insights"

    def __init__(
        self,
        *,
        mood_repo: MoodRepository,
        journal_repo: JournalRepository,
        metrics_repo: MetricsRepository,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self._mood_repo = mood_repo
        self._journal_repo = journal_repo
        self._metrics_repo = metrics_repo

    async def analyze_user_intent(
        self, input: Mapping[str, Any], user_context: UserContext, memory: AgentMemory,
    ) -> UserIntent:
        analysis_type = input.get("analysisType")
        time_range = input.get("timeRange")
        triggering = input.get("triggeringAgent")
        data_points = input.get("dataPoints")

        if data_points is not None and len(data_points) == 0:
            raise AgentError(ErrorKind.INSUFFICIENT_DATA, "No data points supplied for analysis")

        categories = ["analytics", "insights"]
        if analysis_type:
            categories.append(analysis_type)
        if triggering:
            categories.append("collaboration")
        if data_points and len(data_points) > BIG_DATA_POINTS:
            categories.append("big_data_analysis")

        urgency = Urgency.LOW
        if analysis_type == "crisis_detection":
            urgency = Urgency.HIGH
        if triggering == "MoodMate" and data_points:
            urgency = Urgency.MEDIUM

        return UserIntent(
            summary=f"Generate wellness insights and analytics for {time_range or 'recent'} data",
            categories=categories,
            urgency=urgency,
            confidence=PLAN_CONFIDENCE,
            entities=[e for e in (analysis_type, triggering, time_range) if e],
            category="analytics",
        )

    def get_available_actions(self) -> list[AgentAction]:
        return [
            AgentAction(
                name="comprehensive_analysis",
                description="Perform comprehensive wellness data analysis",
                categories=["analytics", "comprehensive_analysis"],
                base_priority=0.9,
                required_tools=["trend_analysis", "pattern_recognition"],
                benefits=["deep_insights", "pattern_discovery", "predictive_accuracy", "holistic_understanding"],
                risks=["analysis_paralysis", "data_overload"],
            ),
            AgentAction(
                name="predictive_modeling",
                description="Generate predictive insights and forecasts",
                categories=["analytics", "prediction"],
                base_priority=0.85,
                required_tools=["predictive_insights", "correlation_detection"],
                benefits=["early_warning", "proactive_interventions", "trend_prediction"],
                risks=["false_predictions", "over_reliance_on_data"],
            ),
            AgentAction(
                name="cross_agent_synthesis",
                description="Synthesize insights across all wellness agents",
                categories=["collaboration", "synthesis"],
                base_priority=0.8,
                required_tools=["cross_agent_insights"],
                benefits=["holistic_view", "agent_coordination", "comprehensive_recommendations"],
                risks=["complexity_overload"],
            ),
            AgentAction(
                name="personalized_insights",
                description="Generate highly personalized wellness insights",
                categories=["personalization", "insights"],
                base_priority=0.75,
                required_tools=["pattern_recognition", "personalization"],
                benefits=["targeted_recommendations", "user_specific_insights", "improved_relevance"],
                risks=["over_personalization"],
            ),
        ]

    async def execute_step(self, step: ExecutionStep, ctx: StepContext) -> StepResult:
        if step.name == "prepare":
            data = await self._gather(ctx)
        elif step.name == "execute_main":
            data = await self._analyze(ctx)
        elif step.name == "finalize":
            data = self._finalize(ctx)
        else:
            raise self.unknown_step(step)
        return StepResult(step=step.name, success=True, data=data)

    async def agent_views(self, user_id: int) -> dict[str, MemoryView]:
        """Read-only projections of the other agents' memories."""
        blobs = await self._memory_store.get_all_for_user(user_id)
        return {
            name: load_memory(name, blob).view(name)
            for name, blob in blobs.items()
            if name != self.name
        }

    async def _gather(self, ctx: StepContext) -> dict[str, Any]:
        moods, journals, metrics, recommendations = await asyncio.gather(
            self._mood_repo.get_recent(ctx.user_id, MOOD_HISTORY),
            self._journal_repo.get_recent(ctx.user_id, JOURNAL_HISTORY),
            self._metrics_repo.get_recent(ctx.user_id, METRIC_DAYS),
            self._recommendations.list_active(ctx.user_id),
        )
        views = await self.agent_views(ctx.user_id)
        top = analytics.dominant_moods(moods, 1)
        return {
            "moods": moods,
            "journals": journals,
            "metrics": metrics,
            "activeRecommendations": len(recommendations),
            "agentViews": views,
            "dataQuality": analytics.assess_data_quality(moods, journals, metrics),
            "summary": {
                "moodCount": len(moods),
                "journalCount": len(journals),
                "metricsCount": len(metrics),
                "timeSpan": analytics.time_span_days(moods, metrics),
                "dominantMood": top[0]["mood"] if top else "unknown",
            },
            "preparationComplete": True,
        }

    async def _analyze(self, ctx: StepContext) -> dict[str, Any]:
        data = ctx.require("preparation_complete")
        moods, journals, metrics = data["moods"], data["journals"], data["metrics"]

        trends = analytics.calculate_trends(moods, metrics)
        patterns = analytics.identify_patterns(moods, journals)
        correlations = analytics.detect_correlations(moods, journals, metrics)
        predictions = analytics.generate_predictions(trends, patterns)

        try:
            ai_insights = await self._content.wellness_insights({"summary": data["summary"]})
            source = "ai"
        except ContentProviderError as e:
            logger.warning("[%s] Insights provider unavailable (%s), using fallback suggestions", self.name, e)
            ai_insights = {"trends": [], "correlations": [], "suggestions": list(FALLBACK_SUGGESTIONS)}
            source = "fallback"

        mood = ctx.input.get("currentMood") or ctx.user_context.current_mood
        return {
            "insights": {
                "summary": data["summary"],
                "suggestions": ai_insights.get("suggestions", []),
                "aiTrends": ai_insights.get("trends", []),
                "aiCorrelations": ai_insights.get("correlations", []),
                "patterns": patterns,
                "correlations": correlations,
                "crossAgentInsights": synthesize_cross_agent_insights(
                    data["agentViews"], data["dataQuality"], bool(metrics),
                ),
                "activeRecommendations": data["activeRecommendations"],
                "source": source,
            },
            "trends": trends,
            "predictions": predictions,
            "recommendations": personalized_recommendations(mood, trends, data["dataQuality"]),
            "visualizations": visualization_data(moods, trends, patterns, correlations, data["dataQuality"]),
            "dataQuality": data["dataQuality"],
        }

    def _finalize(self, ctx: StepContext) -> dict[str, Any]:
        report = dict(ctx.require("main_result"))
        memory: InsightBotMemory = ctx.memory
        memory.last_insights = {
            "summary": report["insights"]["summary"],
            "suggestions": report["insights"]["suggestions"],
        }
        memory.successful_analyses += 1
        memory.insight_history = (memory.insight_history + [{
            "timestamp": utcnow_iso(),
            "dataPoints": report["dataQuality"]["dataPoints"],
            "dataQualityScore": report["dataQuality"]["score"],
        }])[-INSIGHT_HISTORY_LIMIT:]
        return report

    def generate_output(self, results: list[StepResult], plan: AgentPlan, ctx: StepContext) -> Any:
        data = step_data(results, "finalize", "execute_main")
        if data is None:
            return {
                "error": "Failed to generate wellness insights",
                "fallback": "Your wellness journey is unique. Keep tracking your progress and patterns will emerge over time.",
            }
        return {
            "insights": data.get("insights"),
            "trends": data.get("trends"),
            "predictions": data.get("predictions"),
            "recommendations": data.get("recommendations"),
            "visualizations": data.get("visualizations"),
            "confidence": plan.intent.confidence,
            "dataQuality": data.get("dataQuality"),
        }

    def generate_error_response(
        self, kind: ErrorKind, error: BaseException, input: Mapping[str, Any],
    ) -> str:
        if kind == ErrorKind.INSUFFICIENT_DATA:
            return (
                "I need more data points to generate meaningful insights. Keep using the app "
                "for a few more days and I'll have better analysis for you!"
            )
        if kind == ErrorKind.TIMEOUT:
            return (
                "The analysis is taking longer than expected. "
                "Let me provide some quick insights based on your recent activity."
            )
        return (
            "I encountered an issue while analyzing your wellness data. "
            "Let me provide some general insights based on common patterns."
        )
