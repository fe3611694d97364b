"""
agent.capabilities.mood_mate - Mood detection, tracking and music support.

MoodMate takes an explicit mood or a free-text message (classified by the
content provider's sentiment call during PLAN), logs it as a MoodEntry,
suggests music for it and, when the user is stressed, asks the nutrition,
fitness and mental-wellness agents to follow up.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Mapping

from application.context import StepContext
from agent.base import WellnessAgent, step_data, utcnow_iso
from agent.capabilities.resources import affirmation_for, playlists_for, therapy_resources
from domain.entities import MoodEntry
from domain.exceptions import ContentProviderError, ErrorKind
from domain.memory import AgentMemory, MoodHistoryEntry, MoodMateMemory
from domain.models import (
    AgentAction,
    AgentPlan,
    Alternative,
    ExecutionStep,
    StepResult,
    Urgency,
    UserContext,
    UserIntent,
)
from domain.ports import MoodRepository

logger = logging.getLogger(__name__)

SENTIMENT_TO_MOOD = {
    "positive": "happy",
    "negative": "sad",
    "neutral": "neutral",
    "joy": "happy",
    "anger": "angry",
    "fear": "anxious",
    "sadness": "sad",
    "surprise": "excited",
    "disgust": "frustrated",
}

HIGH_URGENCY_MOODS = ("depressed", "suicidal", "panic", "crisis")
MEDIUM_URGENCY_MOODS = ("anxious", "stressed", "angry", "overwhelmed")

MOOD_KEYWORDS = (
    "happy", "sad", "angry", "anxious", "stressed", "excited", "calm",
    "frustrated", "overwhelmed", "peaceful", "energetic", "tired", "focused",
)
TRIGGER_KEYWORDS = (
    "work", "family", "relationship", "health", "money", "school",
    "friends", "weather", "sleep", "exercise", "food",
)

MOOD_SCORES = {
    "happy": 5, "excited": 4, "calm": 3, "neutral": 2.5,
    "tired": 2, "stressed": 1.5, "sad": 1, "anxious": 0.5,
}

SUPPORT_MESSAGES = {
    "sad": {
        "message": "It's okay to feel sad. Your emotions are valid, and this feeling will pass.",
        "techniques": ["Deep breathing", "Gentle self-talk", "Reach out to a friend", "Practice self-compassion"],
    },
    "anxious": {
        "message": "Anxiety can feel overwhelming, but you have the strength to get through this.",
        "techniques": ["4-7-8 breathing", "Grounding exercises", "Progressive muscle relaxation", "Mindful observation"],
    },
    "stressed": {
        "message": "Stress is your body's way of responding to challenges. Let's find ways to manage it.",
        "techniques": ["Take breaks", "Prioritize tasks", "Physical exercise", "Meditation"],
    },
    "happy": {
        "message": "I'm so glad you're feeling happy! Let's celebrate and maintain this positive energy.",
        "techniques": ["Share your joy", "Practice gratitude", "Engage in activities you love", "Connect with others"],
    },
}
DEFAULT_SUPPORT = {
    "message": "Thank you for sharing how you're feeling. I'm here to support you.",
    "techniques": ["Mindful breathing", "Self-reflection", "Gentle movement", "Positive affirmations"],
}

PATTERN_MIN_ENTRIES = 5
PATTERN_WINDOW = 14


def map_sentiment_to_mood(sentiment: str) -> str:
    return SENTIMENT_TO_MOOD.get(sentiment.lower(), "neutral")


def determine_urgency(mood: str) -> Urgency:
    if mood in HIGH_URGENCY_MOODS:
        return Urgency.HIGH
    if mood in MEDIUM_URGENCY_MOODS:
        return Urgency.MEDIUM
    return Urgency.LOW


def keywords_in(text: str, keywords: tuple[str, ...]) -> list[str]:
    lowered = text.lower()
    return [k for k in keywords if k in lowered]


def mood_trend(moods: list[str]) -> str:
    """Average score of the last three entries against the three before."""
    if len(moods) < 3:
        return "insufficient_data"
    scores = [MOOD_SCORES.get(m, 2.5) for m in moods]
    recent = sum(scores[-3:]) / 3
    earlier = sum(scores[-6:-3]) / 3
    if recent > earlier + 0.5:
        return "improving"
    if recent < earlier - 0.5:
        return "declining"
    return "stable"


def analyze_mood_patterns(moods: list[str]) -> dict[str, Any]:
    window = moods[-PATTERN_WINDOW:]
    counts = Counter(window)
    dominant = max(counts, key=counts.get)
    insights = []
    if dominant == "happy":
        insights.append("You've been experiencing mostly positive moods lately! Keep up the great work.")
    elif dominant == "stressed":
        insights.append("I notice you've been feeling stressed frequently. Consider stress management techniques.")
    if sum(counts.values()) >= 7:
        insights.append("Great job tracking your mood consistently! This data helps me provide better support.")
    return {
        "dominant_mood": dominant,
        "mood_distribution": dict(counts),
        "trend": mood_trend(window),
        "insights": insights,
    }


class MoodMateAgent(WellnessAgent):
    name = "MoodMate"
    role = "Emotional Intelligence & Mood Detection Specialist"
    tools = ["mood_analysis", "music_recommendations", "sentiment_analysis", "emotional_memory"]
    capabilities = ["music_integration", "sentiment_ai", "mood_tracking", "music_therapy"]
    must_do_tasks = ["track_mood", "suggest_music", "analyze_sentiment", "save_mood_data"]

    def __init__(self, *, mood_repo: MoodRepository, **kwargs: Any):
        super().__init__(**kwargs)
        self._mood_repo = mood_repo

    # ----- PLAN -----

    async def analyze_user_intent(
        self, input: Mapping[str, Any], user_context: UserContext, memory: AgentMemory,
    ) -> UserIntent:
        mood = input.get("mood")
        message = input.get("message") or ""
        detected = mood or "neutral"
        confidence = 0.8
        source = "user_input"

        if message and not mood:
            try:
                sentiment = await self._content.analyze_sentiment(message)
            except ContentProviderError as e:
                logger.warning("[%s] Sentiment unavailable (%s), assuming neutral", self.name, e)
                sentiment = {"sentiment": "neutral", "confidence": 0.5}
            detected = map_sentiment_to_mood(sentiment["sentiment"])
            confidence = float(sentiment.get("confidence", 0.5))
            source = "ai_analysis"

        context = input.get("context") or {}
        triggers = keywords_in(message, TRIGGER_KEYWORDS) if message else list(context.get("triggers", []))

        return UserIntent(
            summary=f"User wants to {'track' if mood else 'analyze'} mood: {detected}",
            categories=["mood", "emotional_wellness"],
            urgency=determine_urgency(detected),
            confidence=confidence,
            entities=keywords_in(message, MOOD_KEYWORDS) if message else [detected],
            category="mood",
            detail={
                "mood": detected,
                "confidence": confidence if source == "ai_analysis" else 0.9,
                "source": source,
                "triggers": triggers,
            },
        )

    def get_available_actions(self) -> list[AgentAction]:
        return [
            AgentAction(
                name="track_mood_with_music",
                description="Track user mood and provide personalized music recommendations",
                categories=["mood", "music"],
                base_priority=0.9,
                required_tools=["mood_analysis", "music_recommendations"],
                benefits=["Mood tracking", "Personalized music therapy", "Emotional support"],
                risks=["Misinterpretation of mood"],
            ),
            AgentAction(
                name="analyze_sentiment_deep",
                description="Perform deep sentiment analysis on user text",
                categories=["mood", "analysis"],
                base_priority=0.8,
                required_tools=["sentiment_analysis"],
                benefits=["Accurate mood detection", "Context understanding"],
                risks=["Privacy concerns with text analysis"],
            ),
            AgentAction(
                name="provide_emotional_support",
                description="Offer emotional support and coping strategies",
                categories=["emotional_wellness", "support"],
                base_priority=0.7,
                required_tools=["emotional_memory"],
                benefits=["Emotional validation", "Coping strategies", "Mental health support"],
                risks=["Not a replacement for professional help"],
            ),
            AgentAction(
                name="mood_pattern_analysis",
                description="Analyze mood patterns and trends",
                categories=["mood", "analysis"],
                base_priority=0.6,
                required_tools=["emotional_memory"],
                benefits=["Pattern recognition", "Trend analysis", "Predictive insights"],
                risks=["Requires sufficient historical data"],
            ),
        ]

    # ----- THINK -----

    def generate_execution_steps(self, alternative: Alternative, plan: AgentPlan) -> list[ExecutionStep]:
        steps = [ExecutionStep(
            "analyze_mood", "Analyze user mood using AI sentiment analysis", ("userInput",), "mood_data",
        )]
        save = ExecutionStep(
            "save_mood_data", "Save mood data to database and memory", ("mood_data",), "save_confirmation",
        )
        if alternative.name == "track_mood_with_music":
            steps.append(ExecutionStep(
                "get_music_recommendations", "Get personalized music recommendations",
                ("mood_data",), "music_recommendations",
            ))
            steps.append(save)
        elif alternative.name == "provide_emotional_support":
            steps.append(ExecutionStep(
                "provide_emotional_support", "Generate emotional support content",
                ("mood_data",), "support_content",
            ))
        elif alternative.name == "mood_pattern_analysis":
            steps.append(ExecutionStep(
                "analyze_patterns", "Analyze mood patterns and trends", ("mood_data",), "pattern_analysis",
            ))
        elif alternative.name == "analyze_sentiment_deep":
            pass
        else:
            steps.append(save)
        return steps

    # ----- EXECUTE -----

    async def execute_step(self, step: ExecutionStep, ctx: StepContext) -> StepResult:
        handlers = {
            "analyze_mood": self._analyze_mood,
            "get_music_recommendations": self._music_recommendations,
            "save_mood_data": self._save_mood_data,
            "provide_emotional_support": self._emotional_support,
            "analyze_patterns": self._analyze_patterns,
        }
        handler = handlers.get(step.name)
        if handler is None:
            raise self.unknown_step(step)
        return StepResult(step=step.name, success=True, data=await handler(ctx))

    async def _analyze_mood(self, ctx: StepContext) -> dict[str, Any]:
        return dict(ctx.intent.detail)

    async def _music_recommendations(self, ctx: StepContext) -> dict[str, Any]:
        mood = ctx.require("mood_data")["mood"]
        try:
            music = await self._content.music_for_mood(mood)
        except ContentProviderError as e:
            logger.warning("[%s] Music provider unavailable (%s), using fallback playlists", self.name, e)
            music = playlists_for(mood)

        memory: MoodMateMemory = ctx.memory
        helped_before = sum(1 for entry in memory.mood_history if entry.mood == mood)
        return {
            "playlists": music.get("playlists", []),
            "personalized": {
                "message": f"Based on your mood history, here are some personalized suggestions for {mood} mood",
                "similarEntries": helped_before,
                "suggestions": [
                    "Try the same music that helped you last time you felt this way",
                    "Consider instrumental music if you need to focus",
                    "Upbeat music can help shift your mood gradually",
                ],
            },
            "moodContext": mood,
        }

    async def _save_mood_data(self, ctx: StepContext) -> dict[str, Any]:
        mood_data = ctx.require("mood_data")
        await self._mood_repo.save(MoodEntry(
            user_id=ctx.user_id,
            mood=mood_data["mood"],
            note=ctx.input.get("message") or "",
        ))
        memory: MoodMateMemory = ctx.memory
        memory.append_mood(MoodHistoryEntry(
            timestamp=utcnow_iso(),
            mood=mood_data["mood"],
            confidence=mood_data.get("confidence", 0.9),
            source=mood_data.get("source", "user_input"),
            triggers=mood_data.get("triggers", []),
        ))
        return {"saved": True, "moodCount": len(memory.mood_history)}

    async def _emotional_support(self, ctx: StepContext) -> dict[str, Any]:
        mood = ctx.require("mood_data")["mood"]
        return {
            "support": SUPPORT_MESSAGES.get(mood, DEFAULT_SUPPORT),
            "therapyResources": therapy_resources() if mood in ("depressed", "anxious") else None,
            "affirmation": affirmation_for(mood),
        }

    async def _analyze_patterns(self, ctx: StepContext) -> dict[str, Any]:
        memory: MoodMateMemory = ctx.memory
        moods = [entry.mood for entry in memory.mood_history]
        if len(moods) < PATTERN_MIN_ENTRIES:
            return {"message": "Insufficient data for pattern analysis. Keep tracking!"}
        return analyze_mood_patterns(moods)

    def generate_output(self, results: list[StepResult], plan: AgentPlan, ctx: StepContext) -> Any:
        mood_data = step_data(results, "analyze_mood") or {}
        music = step_data(results, "get_music_recommendations")
        support = step_data(results, "provide_emotional_support")
        patterns = step_data(results, "analyze_patterns")
        saved = step_data(results, "save_mood_data")
        confidence = mood_data.get("confidence", 0)

        return {
            "mood": mood_data.get("mood"),
            "confidence": confidence,
            "analysis": {
                "detected_mood": mood_data.get("mood"),
                "confidence_level": f"{round(confidence * 100)}%",
                "source": mood_data.get("source"),
                "triggers": mood_data.get("triggers", []),
            },
            "music_recommendations": {
                "playlists": music["playlists"],
                "personalized": music["personalized"],
                "mood_context": music["moodContext"],
            } if music else None,
            "emotional_support": {
                "message": support["support"]["message"],
                "techniques": support["support"]["techniques"],
                "affirmation": support["affirmation"],
                "therapy_resources": support["therapyResources"],
            } if support else None,
            "patterns": patterns,
            "tracking": {
                "saved": saved["saved"],
                "total_entries": saved["moodCount"],
            } if saved else None,
            "timestamp": utcnow_iso(),
        }

    def identify_collaboration_needs(
        self, results: list[StepResult], plan: AgentPlan, ctx: StepContext,
    ) -> list[str]:
        analysed = plan.intent.detail.get("mood")
        stressed = (
            analysed == "stressed"
            or "stressed" in plan.intent.entities
            or plan.context.user_mood == "stressed"
        )
        if plan.intent.category == "mood" and stressed:
            return ["NutriCoach", "FlexGenie", "MindPal"]
        return []

    def generate_error_response(
        self, kind: ErrorKind, error: BaseException, input: Mapping[str, Any],
    ) -> str:
        return (
            f"I encountered an issue while analyzing your mood. {error}. "
            "Please try again or describe how you're feeling in different words."
        )
