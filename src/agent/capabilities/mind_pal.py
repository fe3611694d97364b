"""
agent.capabilities.mind_pal - Journaling, mindfulness and emotional support.

MindPal looks at recent moods and journal entries, rates mental-health risk
and chooses an intervention level (light / moderate / intensive). The single
content-provider call (mental_wellness_support) yields a journal prompt and
an affirmation; everything else is drawn from the tables below. Concerning
moods always produce a high-risk safety assessment with crisis resources
and a safety plan, whatever the provider returns.

MindPal also owns journaling: save_journal_entry stores the entry against
the current prompt and records simple keyword insights in memory.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from application.context import StepContext
from agent.base import WellnessAgent, step_data, utcnow_iso
from agent.capabilities.resources import CRISIS_LINES, affirmation_for
from domain.entities import JournalEntry, MoodEntry
from domain.exceptions import ContentProviderError, ErrorKind
from domain.memory import AgentMemory, JournalInsight, MindPalMemory
from domain.models import (
    AgentAction,
    AgentPlan,
    ExecutionStep,
    StepResult,
    Urgency,
    UserContext,
    UserIntent,
)
from domain.ports import JournalRepository, MoodRepository

logger = logging.getLogger(__name__)

PLAN_CONFIDENCE = 0.92
RECENT_JOURNALS = 10
RECENT_MOODS = 14
PROMPT_HISTORY_LIMIT = 20
DEFAULT_PROMPT = "Daily reflection"

CONCERNING_MOODS = ("suicidal", "hopeless", "depressed")
CRISIS_MOODS = ("depressed", "suicidal", "panicked")
JOURNAL_THEMES = ("work", "family", "relationships", "health", "goals", "stress", "gratitude")
POSITIVE_WORDS = {"happy", "good", "great", "wonderful", "amazing", "grateful", "blessed", "joy"}
NEGATIVE_WORDS = {"sad", "bad", "terrible", "awful", "depressed", "anxious", "worried", "stressed"}

MOOD_INTENSITY = {
    "suicidal": 10, "depressed": 9, "hopeless": 9, "panicked": 9,
    "anxious": 7, "stressed": 6, "sad": 5, "angry": 6, "overwhelmed": 7,
    "tired": 4, "neutral": 3, "calm": 2, "focused": 3, "content": 2,
    "happy": 4, "excited": 6, "joyful": 5,
}
VOLATILITY_SCORES = {
    "happy": 8, "excited": 9, "calm": 6, "focused": 7, "neutral": 5,
    "tired": 3, "stressed": 2, "anxious": 2, "sad": 1, "depressed": 0,
}
IMPROVEMENT_SCORES = {
    "depressed": 1, "sad": 2, "anxious": 3, "stressed": 4, "neutral": 5,
    "calm": 6, "focused": 7, "happy": 8, "excited": 9,
}

MOOD_TECHNIQUES = {
    "anxious": ["Box breathing", "Progressive muscle relaxation", "Grounding exercises"],
    "stressed": ["Deep breathing", "Body scan meditation", "Stress ball exercises"],
    "sad": ["Gratitude journaling", "Self-compassion exercises", "Gentle movement"],
    "angry": ["Anger release techniques", "Counting exercises", "Physical activity"],
    "overwhelmed": ["Priority setting", "Break tasks down", "Mindful breathing"],
}
DEFAULT_TECHNIQUES = ["Mindful breathing", "Present moment awareness"]

MOOD_PROMPTS = {
    "anxious": [
        "What specific thoughts are creating anxiety right now?",
        "What would you tell a friend experiencing this same worry?",
        "What's one small step you can take to feel more grounded?",
    ],
    "stressed": [
        "What's the most important thing on your mind right now?",
        "How can you show yourself compassion in this stressful time?",
        "What boundaries do you need to set to protect your peace?",
    ],
    "sad": [
        "What emotions are you experiencing beneath the sadness?",
        "What has brought you comfort during difficult times before?",
        "How can you honor your feelings while also caring for yourself?",
    ],
    "happy": [
        "What contributed to this positive feeling?",
        "How can you carry this energy forward?",
        "What are you most grateful for right now?",
    ],
}
DEFAULT_PROMPTS = [
    "How are you feeling right now, and what do you need?",
    "What's one thing you learned about yourself today?",
    "What would self-care look like for you right now?",
]

EXERCISES = {
    "breathing": {
        "name": "4-7-8 Breathing",
        "duration": 5,
        "instructions": "Inhale for 4, hold for 7, exhale for 8",
        "benefits": ["anxiety_reduction", "sleep_improvement"],
    },
    "body_scan": {
        "name": "Progressive Body Scan",
        "duration": 10,
        "instructions": "Systematically relax each part of your body",
        "benefits": ["tension_release", "body_awareness"],
    },
    "loving_kindness": {
        "name": "Loving-Kindness Meditation",
        "duration": 8,
        "instructions": "Send compassionate thoughts to yourself and others",
        "benefits": ["self_compassion", "emotional_healing"],
    },
    "grounding": {
        "name": "5-4-3-2-1 Grounding",
        "duration": 3,
        "instructions": "Notice 5 things you see, 4 you hear, 3 you touch, 2 you smell, 1 you taste",
        "benefits": ["anxiety_relief", "present_moment_awareness"],
    },
}

ACTIVATION_SUGGESTIONS = {
    "sad": ["Take a short walk", "Call a friend", "Listen to uplifting music", "Do a small creative activity"],
    "anxious": ["Practice deep breathing", "Do gentle stretching", "Organize a small space", "Take a warm bath"],
    "stressed": ["Take breaks every hour", "Do one thing at a time", "Practice saying no", "Delegate tasks"],
    "angry": ["Physical exercise", "Write in a journal", "Practice progressive muscle relaxation", "Take time alone"],
}
DEFAULT_ACTIVATION = ["Engage in a hobby", "Connect with nature", "Practice gratitude", "Help someone else"]

SAFETY_PLAN = {
    "warningSignsToWatch": [
        "Thoughts of self-harm",
        "Feeling hopeless",
        "Isolating from others",
        "Substance use increase",
    ],
    "copingStrategies": [
        "Call a trusted friend or family member",
        "Use grounding techniques",
        "Remove means of self-harm",
        "Go to a safe, public place",
    ],
    "supportContacts": [
        "Emergency services: 911",
        "Crisis hotline: 988",
        "Trusted friend or family member",
    ],
    "professionalContacts": [
        "Primary care doctor",
        "Mental health professional",
        "Local emergency room",
    ],
}

FALLBACK_SUPPORT = {
    "journalPrompt": "How are you feeling right now, and what do you need most today?",
    "techniques": ["Deep breathing", "Mindful awareness"],
}


# ---------------------------------------------------------------------------
# Heuristics
# ---------------------------------------------------------------------------

def extract_themes(text: str) -> list[str]:
    lowered = text.lower()
    return [theme for theme in JOURNAL_THEMES if theme in lowered]


def journal_themes(journals: list[JournalEntry], limit: int = 5) -> list[str]:
    """Most frequent themes across entries, most common first."""
    counts: Counter[str] = Counter()
    for entry in journals:
        counts.update(extract_themes(entry.content))
    return [theme for theme, _ in counts.most_common(limit)]


def keyword_sentiment(text: str) -> str:
    words = [w.strip(".,!?;:\"'()") for w in text.lower().split()]
    positive = sum(1 for w in words if w in POSITIVE_WORDS)
    negative = sum(1 for w in words if w in NEGATIVE_WORDS)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def emotional_volatility(moods: list[str]) -> float:
    """Mean absolute step between consecutive moods, normalised to 0..1."""
    if len(moods) < 2:
        return 0.0
    values = [VOLATILITY_SCORES.get(m, 5) for m in moods]
    total = sum(abs(b - a) for a, b in zip(values, values[1:]))
    return total / (len(moods) - 1) / 9


def analyze_emotional_patterns(moods: list[MoodEntry], journals: list[JournalEntry]) -> dict[str, Any]:
    chronological = sorted(moods, key=lambda m: m.timestamp)
    transitions = []
    for prev, curr in zip(chronological, chronological[1:]):
        try:
            gap = (datetime.fromisoformat(curr.timestamp) - datetime.fromisoformat(prev.timestamp)).total_seconds()
        except ValueError:
            gap = None
        transitions.append({"from": prev.mood, "to": curr.mood, "timeGapSeconds": gap})

    counts = Counter(m.mood for m in chronological)
    return {
        "dominantMoods": [[mood, count] for mood, count in counts.most_common(3)],
        "moodTrends": transitions,
        "journalThemes": journal_themes(journals),
        "emotionalVolatility": emotional_volatility([m.mood for m in chronological]),
    }


def assess_mental_health_risk(mood: str, patterns: dict[str, Any]) -> dict[str, Any]:
    level = "low"
    factors = []
    if any(m in ("depressed", "suicidal", "hopeless") for m, _ in patterns["dominantMoods"]):
        level = "high"
        factors.append("concerning_mood_patterns")
    if patterns["emotionalVolatility"] > 0.7:
        level = "high" if level == "high" else "medium"
        factors.append("emotional_instability")
    if mood in CRISIS_MOODS:
        level = "high"
        factors.append("current_crisis_mood")
    return {"riskLevel": level, "riskFactors": factors, "needsProfessionalSupport": level == "high"}


def support_needs(mood: str) -> list[str]:
    needs = []
    if mood in ("anxious", "panicked", "stressed"):
        needs += ["anxiety_management", "stress_reduction"]
    if mood in ("sad", "depressed", "hopeless"):
        needs += ["emotional_support", "mood_lifting"]
    if mood in ("angry", "frustrated"):
        needs += ["anger_management", "conflict_resolution"]
    return needs


def intervention_level(assessment: dict[str, Any]) -> str:
    if assessment["intensity"] >= 8 or assessment["copingCapacity"] <= 3:
        return "intensive"
    if assessment["intensity"] >= 6 or assessment["stability"] <= 4:
        return "moderate"
    return "light"


def personalized_techniques(mood: str, preferred: list[str]) -> list[str]:
    techniques = list(MOOD_TECHNIQUES.get(mood, DEFAULT_TECHNIQUES)) + list(preferred[:2])
    return list(dict.fromkeys(techniques))[:5]


def contextual_prompts(mood: str, recent: list[str]) -> list[str]:
    """Mood prompts not used recently; all of them again once exhausted."""
    candidates = MOOD_PROMPTS.get(mood, DEFAULT_PROMPTS)
    fresh = [p for p in candidates if p not in recent]
    return (fresh or list(candidates))[:3]


def mindfulness_exercises(mood: str, intensity: int) -> list[dict[str, Any]]:
    if mood == "anxious" or intensity >= 7:
        keys = ("breathing", "grounding")
    elif mood == "stressed":
        keys = ("body_scan", "breathing")
    elif mood == "sad":
        keys = ("loving_kindness", "body_scan")
    else:
        keys = ("breathing", "body_scan")
    return [dict(EXERCISES[k]) for k in keys]


def cognitive_tools(mood: str, level: str) -> list[dict[str, Any]]:
    thought_record = {
        "name": "Thought Record",
        "description": "Identify and examine negative thought patterns",
        "steps": [
            "Identify the triggering situation",
            "Notice your automatic thoughts",
            "Examine the evidence for and against",
            "Develop a balanced perspective",
        ],
    }
    reframing = {
        "name": "Cognitive Reframing",
        "description": "Transform negative thoughts into more balanced ones",
        "techniques": ["Question the thought", "Find alternative perspectives", "Consider the bigger picture"],
    }
    activation = {
        "name": "Behavioral Activation",
        "description": "Engage in meaningful activities to improve mood",
        "suggestions": list(ACTIVATION_SUGGESTIONS.get(mood, DEFAULT_ACTIVATION)),
    }
    if level == "intensive":
        return [thought_record, reframing, activation]
    if level == "moderate":
        return [thought_record, reframing]
    return [reframing]


def crisis_resources() -> dict[str, Any]:
    return {
        "hotlines": [
            {"name": line["name"], "number": line["contact"], "available": "24/7"}
            for line in CRISIS_LINES
        ],
        "emergencyContacts": ["Call 911 for immediate emergency"],
        "onlineResources": ["https://988lifeline.org", "https://www.crisistextline.org"],
    }


def safety_assessment(mood: str, intensity: int) -> dict[str, Any]:
    concerning = mood in CONCERNING_MOODS
    return {
        "riskLevel": "high" if concerning else "low",
        "needsImmediateSupport": concerning,
        "crisisResources": crisis_resources() if concerning else None,
        "recommendProfessionalHelp": concerning or intensity >= 9,
        "safetyPlan": {k: list(v) for k, v in SAFETY_PLAN.items()} if concerning else None,
    }


def journal_streak(memory: MindPalMemory, now: Optional[datetime] = None) -> int:
    """Current streak, or 0 when the last entry is more than a day old."""
    if not memory.last_journal_date:
        return 0
    try:
        last = datetime.fromisoformat(memory.last_journal_date)
    except ValueError:
        return 0
    if last.tzinfo is None:
        last = last.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return memory.journal_streak if (now - last).days <= 1 else 0


def overall_progress(memory: MindPalMemory) -> int:
    score = 0
    if memory.journal_streak >= 7:
        score += 20
    if memory.successful_sessions >= 5:
        score += 30
    if memory.coping_capacity >= 7:
        score += 25
    if memory.emotional_stability >= 7:
        score += 25
    return min(score, 100)


def emotional_insights(memory: MindPalMemory) -> dict[str, Any]:
    strengths = []
    if memory.journal_streak >= 7:
        strengths.append("Consistent self-reflection")
    if memory.successful_sessions >= 10:
        strengths.append("Commitment to growth")
    if memory.coping_capacity >= 7:
        strengths.append("Strong coping skills")

    growth_areas = []
    if memory.emotional_volatility > 0.6:
        growth_areas.append("Emotional regulation")
    if memory.coping_capacity < 5:
        growth_areas.append("Coping strategies")
    if memory.journal_streak < 3:
        growth_areas.append("Consistent self-reflection")

    goals = []
    if memory.journal_streak < 7:
        goals.append("Maintain 7-day journaling streak")
    if memory.coping_capacity < 8:
        goals.append("Develop additional coping strategies")
    if memory.emotional_stability < 7:
        goals.append("Practice emotional regulation techniques")

    return {
        "growth": dict(memory.emotional_growth_metrics),
        "strengths": strengths,
        "areasForGrowth": growth_areas,
        "progress": {"overallScore": overall_progress(memory), "nextGoals": goals},
    }


class MindPalAgent(WellnessAgent):
    name = "MindPal"
    role = "Mental Wellness & Emotional Intelligence"
    tools = ["journal_prompts", "affirmations", "emotional_regulation", "mindfulness", "cbt_techniques"]
    capabilities = ["therapeutic_journaling", "emotional_processing", "mindfulness_practice", "cognitive_restructuring"]
    must_do_tasks = ["generate_journal_prompts", "provide_emotional_support", "guide_mindfulness", "track_mental_wellness"]
    recommendation_type = "mental_wellness"

    def __init__(self, *, mood_repo: MoodRepository, journal_repo: JournalRepository, **kwargs: Any):
        super().__init__(**kwargs)
        self._mood_repo = mood_repo
        self._journal_repo = journal_repo

    async def analyze_user_intent(
        self, input: Mapping[str, Any], user_context: UserContext, memory: AgentMemory,
    ) -> UserIntent:
        mood = input.get("currentMood")
        stress = input.get("stressLevel")
        triggering = input.get("triggeringAgent")

        categories = ["mental_health", "emotional_wellness"]
        if mood:
            categories.append("mood_support")
        if input.get("journalContext"):
            categories.append("journaling")
        if triggering:
            categories.append("collaboration")
        if stress is not None and stress > 7:
            categories.append("crisis_support")

        urgency = Urgency.MEDIUM
        if mood in ("depressed", "suicidal", "anxious", "panicked"):
            urgency = Urgency.HIGH
        if stress is not None and stress >= 8:
            urgency = Urgency.HIGH

        entities = [e for e in (mood, triggering) if e]
        if stress is not None:
            entities.append(f"stress_{stress}")

        return UserIntent(
            summary=f"Provide mental wellness support for {mood or 'general'} emotional state",
            categories=categories,
            urgency=urgency,
            confidence=PLAN_CONFIDENCE,
            entities=entities,
            category="mental_health",
        )

    def get_available_actions(self) -> list[AgentAction]:
        return [
            AgentAction(
                name="generate_therapeutic_support",
                description="Provide personalized therapeutic interventions",
                categories=["mental_health", "therapeutic_support"],
                base_priority=0.95,
                required_tools=["therapeutic_techniques"],
                benefits=["emotional_regulation", "stress_reduction", "mental_clarity", "self_awareness"],
                risks=["emotional_overwhelm", "inappropriate_intervention"],
            ),
            AgentAction(
                name="create_journal_prompts",
                description="Generate personalized journaling prompts",
                categories=["journaling", "self_reflection"],
                base_priority=0.85,
                required_tools=["journal_prompts"],
                benefits=["self_discovery", "emotional_processing", "pattern_recognition"],
                risks=["emotional_triggering"],
            ),
            AgentAction(
                name="guide_mindfulness_practice",
                description="Provide mindfulness and meditation guidance",
                categories=["mindfulness", "stress_reduction"],
                base_priority=0.8,
                required_tools=["mindfulness"],
                benefits=["stress_reduction", "present_moment_awareness", "emotional_balance"],
                risks=["spiritual_bypassing"],
            ),
            AgentAction(
                name="cognitive_restructuring",
                description="Help identify and reframe negative thought patterns",
                categories=["cbt", "cognitive_therapy"],
                base_priority=0.9,
                required_tools=["cbt_techniques"],
                benefits=["improved_thinking_patterns", "reduced_anxiety", "better_mood"],
                risks=["oversimplification", "resistance_to_change"],
            ),
        ]

    async def execute_step(self, step: ExecutionStep, ctx: StepContext) -> StepResult:
        if step.name == "prepare":
            data = await self._prepare(ctx)
        elif step.name == "execute_main":
            data = await self._generate_support(ctx)
        elif step.name == "finalize":
            data = self._finalize(ctx)
        else:
            raise self.unknown_step(step)
        return StepResult(step=step.name, success=True, data=data)

    async def _prepare(self, ctx: StepContext) -> dict[str, Any]:
        user_input = ctx.require("userInput")
        mood = user_input.get("currentMood") or ctx.user_context.current_mood
        journals = await self._journal_repo.get_recent(ctx.user_id, RECENT_JOURNALS)
        moods = await self._mood_repo.get_recent(ctx.user_id, RECENT_MOODS)
        patterns = analyze_emotional_patterns(moods, journals)
        return {
            "mood": mood,
            "recentThemes": [entry.content[:100] for entry in journals[:5]],
            "emotionalPatterns": patterns,
            "riskAssessment": assess_mental_health_risk(mood, patterns),
            "preparationComplete": True,
        }

    async def _generate_support(self, ctx: StepContext) -> dict[str, Any]:
        prepared = ctx.require("preparation_complete")
        mood = prepared["mood"]
        memory: MindPalMemory = ctx.memory

        assessment = {
            "mood": mood,
            "intensity": MOOD_INTENSITY.get(mood, 5),
            "stability": memory.emotional_stability,
            "copingCapacity": memory.coping_capacity,
            "supportNeeds": support_needs(mood),
        }
        level = intervention_level(assessment)
        prompts = contextual_prompts(mood, memory.prompt_history)

        try:
            support = await self._content.mental_wellness_support(mood, prepared["recentThemes"])
            source = "ai"
        except ContentProviderError as e:
            logger.warning("[%s] Wellness provider unavailable (%s), using fallback support", self.name, e)
            support = {
                "journalPrompt": prompts[0] if prompts else FALLBACK_SUPPORT["journalPrompt"],
                "affirmation": affirmation_for(mood),
                "techniques": list(FALLBACK_SUPPORT["techniques"]),
            }
            source = "fallback"

        return {
            "mood": mood,
            "wellnessSupport": {
                **support,
                "personalizedTechniques": personalized_techniques(mood, memory.preferred_techniques),
                "source": source,
            },
            "journalPrompts": prompts,
            "mindfulnessExercises": mindfulness_exercises(mood, assessment["intensity"]),
            "cognitiveTools": cognitive_tools(mood, level),
            "safetyAssessment": safety_assessment(mood, assessment["intensity"]),
            "emotionalAssessment": assessment,
            "interventionLevel": level,
            "emotionalPatterns": prepared["emotionalPatterns"],
            "riskAssessment": prepared["riskAssessment"],
        }

    def _finalize(self, ctx: StepContext) -> dict[str, Any]:
        main = ctx.require("main_result")
        mood = main["mood"]
        memory: MindPalMemory = ctx.memory

        previous_mood = memory.last_mood
        memory.last_wellness_support = main["wellnessSupport"]
        memory.successful_sessions += 1
        memory.journal_streak = journal_streak(memory)
        memory.emotional_volatility = main["emotionalPatterns"]["emotionalVolatility"]
        memory.prompt_history = (memory.prompt_history + main["journalPrompts"])[-PROMPT_HISTORY_LIMIT:]
        growth = dict(memory.emotional_growth_metrics)
        memory.emotional_growth_metrics = {
            **growth,
            "sessionsCompleted": growth.get("sessionsCompleted", 0) + 1,
            "lastMoodImprovement": IMPROVEMENT_SCORES.get(mood, 5) - IMPROVEMENT_SCORES.get(previous_mood, 5),
            "copingSkillsUsed": growth.get("copingSkillsUsed", []),
            "consistencyScore": min(100, memory.successful_sessions * 5 + memory.journal_streak * 10),
        }
        memory.last_mood = mood

        return {
            "wellnessSupport": main["wellnessSupport"],
            "journalPrompts": main["journalPrompts"],
            "mindfulnessExercises": main["mindfulnessExercises"],
            "cognitiveTools": main["cognitiveTools"],
            "emotionalInsights": {
                "patterns": main["emotionalPatterns"],
                **emotional_insights(memory),
            },
            "safetyAssessment": main["safetyAssessment"],
            "riskAssessment": main["riskAssessment"],
            "interventionLevel": main["interventionLevel"],
        }

    def generate_output(self, results: list[StepResult], plan: AgentPlan, ctx: StepContext) -> Any:
        data = step_data(results, "finalize", "execute_main")
        if data is None:
            return {
                "error": "Failed to generate mental wellness support",
                "fallback": "Take a moment to breathe deeply and remember that you're not alone in this journey.",
            }
        return {
            "wellnessSupport": data.get("wellnessSupport"),
            "journalPrompts": data.get("journalPrompts"),
            "mindfulnessExercises": data.get("mindfulnessExercises"),
            "cognitiveTools": data.get("cognitiveTools"),
            "emotionalInsights": data.get("emotionalInsights"),
            "confidence": plan.intent.confidence,
            "safetyAssessment": data.get("safetyAssessment"),
            "riskAssessment": data.get("riskAssessment"),
        }

    def generate_error_response(
        self, kind: ErrorKind, error: BaseException, input: Mapping[str, Any],
    ) -> str:
        if kind == ErrorKind.DATA_UNAVAILABLE:
            return (
                "I'm having trouble accessing your journal history right now. "
                "Let me offer some general reflection prompts to get you started."
            )
        if kind == ErrorKind.INVALID_INPUT:
            return "I need to better understand how you're feeling right now. Can you share what's on your mind?"
        return (
            "I encountered an issue while preparing your mental wellness support. "
            "Let me provide some immediate grounding techniques instead."
        )

    async def save_journal_entry(self, user_id: int, content: str) -> JournalEntry:
        """Store a journal entry against the current prompt and record its insights."""
        memory: MindPalMemory = await self.get_memory(user_id)
        support = memory.last_wellness_support or {}
        prompt = support.get("journalPrompt") or DEFAULT_PROMPT

        entry = await self._journal_repo.save(JournalEntry(user_id=user_id, content=content, prompt=prompt))

        memory.journal_streak = journal_streak(memory) + 1
        memory.last_journal_date = utcnow_iso()
        memory.append_journal_insight(JournalInsight(
            sentiment=keyword_sentiment(content),
            themes=extract_themes(content),
            word_count=len(content.split()),
            timestamp=memory.last_journal_date,
        ))
        await self.update_memory(user_id, memory)
        logger.info("[%s] Saved journal entry %s for user %d", self.name, entry.id, user_id)
        return entry
