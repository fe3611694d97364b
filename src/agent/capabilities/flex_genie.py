"""
agent.capabilities.flex_genie - Energy-adaptive workout planning.

The user's energy is estimated from their mood (or taken from the input),
blended with the remembered average, then shifted by a per-mood intensity
modifier. One workout_plan call to the content provider returns exercises
and follow-along videos; if it fails, the static per-mood video list and a
gentle exercise list are used instead.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from application.context import StepContext
from agent.base import WellnessAgent, clamp, step_data
from domain.exceptions import ContentProviderError, ErrorKind
from domain.memory import AgentMemory, FlexGenieMemory
from domain.models import (
    AgentAction,
    AgentPlan,
    ExecutionStep,
    StepResult,
    Urgency,
    UserContext,
    UserIntent,
)

logger = logging.getLogger(__name__)

PLAN_CONFIDENCE = 0.88
DEFAULT_ENERGY = 6

MOOD_ENERGY = {
    "excited": 9, "happy": 8, "focused": 7, "neutral": 6,
    "tired": 3, "stressed": 4, "anxious": 5, "sad": 4,
}
MOOD_INTENSITY_MODIFIERS = {
    "stressed": -2, "anxious": -1, "tired": -3, "excited": 1,
    "happy": 0, "focused": 0, "sad": -1,
}

FALLBACK_VIDEOS = {
    "stressed": [
        {"title": "10 Min Stress Relief Yoga", "url": "https://youtube.com/watch?v=stress1",
         "channel": "Yoga with Adriene", "duration": 10},
        {"title": "Gentle Stretching for Stress", "url": "https://youtube.com/watch?v=stress2",
         "channel": "DoYogaWithMe", "duration": 15},
    ],
    "tired": [
        {"title": "Energizing Morning Yoga", "url": "https://youtube.com/watch?v=energy1",
         "channel": "Yoga with Adriene", "duration": 12},
        {"title": "Gentle Wake-Up Stretches", "url": "https://youtube.com/watch?v=energy2",
         "channel": "PsycheTruth", "duration": 8},
    ],
    "excited": [
        {"title": "High Energy HIIT Workout", "url": "https://youtube.com/watch?v=hiit1",
         "channel": "Fitness Blender", "duration": 20},
        {"title": "Dance Cardio Workout", "url": "https://youtube.com/watch?v=dance1",
         "channel": "POPSUGAR Fitness", "duration": 25},
    ],
}
DEFAULT_VIDEOS = [
    {"title": "Full Body Beginner Workout", "url": "https://youtube.com/watch?v=beginner1",
     "channel": "Fitness Blender", "duration": 15},
    {"title": "Bodyweight Strength Training", "url": "https://youtube.com/watch?v=strength1",
     "channel": "Calisthenic Movement", "duration": 20},
]

FALLBACK_EXERCISES = [
    {"name": "Gentle Movement", "type": "stretching", "duration": 10, "intensity": "low",
     "description": "Light stretching to support wellness"},
    {"name": "Brisk Walk", "type": "walking", "duration": 10, "intensity": "moderate",
     "description": "Easy-paced walk to lift energy and clear the mind"},
]

STRETCHES = {
    "stressed": ["Neck and shoulder stretches", "Hip flexor stretches", "Spinal twists"],
    "tired": ["Gentle backbends", "Leg elevation", "Restorative poses"],
    "anxious": ["Chest opening stretches", "Grounding poses", "Breathing-focused stretches"],
}
DEFAULT_STRETCHES = ["Full body stretching routine", "Hold each stretch 30 seconds"]

FITNESS_RECOMMENDATIONS = {
    "stressed": [
        "Focus on stress-relieving exercises like yoga or walking",
        "Keep workouts shorter and less intense",
        "Include breathing exercises in your routine",
    ],
    "tired": [
        "Start with gentle movement to boost energy",
        "Try energizing exercises like light cardio",
        "Don't push too hard - listen to your body",
    ],
    "excited": [
        "Channel your energy into high-intensity workouts",
        "Try new and challenging exercises",
        "Remember to warm up properly before intense activity",
    ],
    "anxious": [
        "Choose calming exercises like yoga or tai chi",
        "Focus on controlled movements and breathing",
        "Avoid overly stimulating or competitive activities",
    ],
}
DEFAULT_FITNESS_RECOMMENDATIONS = [
    "Aim for 150 minutes of moderate exercise per week",
    "Include both cardio and strength training",
    "Stay consistent with your fitness routine",
]

PROGRESS_TRACKING = {
    "metrics": [
        "Workout completion rate",
        "Energy levels before/after exercise",
        "Mood improvements",
        "Strength/endurance gains",
        "Recovery time",
    ],
    "frequency": "Weekly check-ins",
    "tools": ["Fitness app integration", "Mood tracking", "Energy level logging", "Photo progress tracking"],
    "goals": [
        "Consistency over intensity",
        "Gradual progression",
        "Mood and energy improvement",
        "Injury prevention",
    ],
}


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def assess_energy_level(mood: str, average_energy: float, reported: int | None = None) -> int:
    """Blend today's energy (reported, or implied by mood) with the user's average."""
    base = reported if reported is not None else MOOD_ENERGY.get(mood, DEFAULT_ENERGY)
    return round_half_up((base + (average_energy or DEFAULT_ENERGY)) / 2)


def adapt_intensity(mood: str, energy_level: int) -> int:
    return int(clamp(energy_level + MOOD_INTENSITY_MODIFIERS.get(mood, 0), 1, 10))


def workout_type_for(mood: str, intensity: int) -> str:
    if intensity <= 3:
        return "yoga"
    if mood in ("stressed", "anxious"):
        return "yoga"
    if intensity >= 8:
        return "hiit"
    if mood == "excited":
        return "hiit"
    return "strength"


def fallback_videos(mood: str) -> list[dict[str, Any]]:
    return [dict(video) for video in FALLBACK_VIDEOS.get(mood, DEFAULT_VIDEOS)]


def energy_adaptation(energy_level: int, intensity: int) -> dict[str, Any]:
    if intensity < energy_level:
        reasoning = "Reduced intensity to prevent overexertion and support recovery"
    elif intensity > energy_level:
        reasoning = "Slightly increased intensity to boost energy and mood"
    else:
        reasoning = "Intensity matched to current energy level for optimal performance"

    if energy_level <= 3:
        recommendations = [
            "Focus on gentle movement and stretching",
            "Stay hydrated and consider a light snack",
            "Listen to your body and rest if needed",
        ]
    elif energy_level >= 8:
        recommendations = [
            "Great energy for challenging workouts",
            "Don't forget to warm up properly",
            "Consider adding some high-intensity intervals",
        ]
    else:
        recommendations = [
            "Good energy for moderate exercise",
            "Mix cardio and strength training",
            "Stay consistent with your routine",
        ]

    if intensity <= 3:
        outcome = "Improved flexibility and reduced stress"
    elif intensity <= 6:
        outcome = "Enhanced mood and steady energy boost"
    else:
        outcome = "Significant energy boost and endorphin release"

    return {
        "originalEnergy": energy_level,
        "adaptedIntensity": intensity,
        "reasoning": reasoning,
        "recommendations": recommendations,
        "expectedOutcome": outcome,
    }


def recovery_guidance(mood: str, intensity: int) -> dict[str, Any]:
    return {
        "coolDown": (
            ["5-10 minutes walking", "Deep breathing exercises", "Light stretching"]
            if intensity >= 7
            else ["3-5 minutes walking", "Gentle stretching", "Relaxation breathing"]
        ),
        "stretching": list(STRETCHES.get(mood, DEFAULT_STRETCHES)),
        "hydration": {
            "during": "Sip water every 10-15 minutes" if intensity >= 6 else "Drink when thirsty",
            "after": f"Drink {math.ceil(intensity / 2)} glasses of water within 2 hours",
            "electrolytes": "Consider electrolyte replacement" if intensity >= 8 else "Water is sufficient",
        },
        "restDay": {
            "frequency": "Every 2-3 days" if intensity >= 8 else "Every 3-4 days",
            "activities": (
                ["Meditation", "Gentle yoga", "Nature walks"]
                if mood == "stressed"
                else ["Light walking", "Stretching", "Leisure activities"]
            ),
            "signs": ["Persistent fatigue", "Decreased motivation", "Muscle soreness lasting >48 hours"],
        },
    }


def recovery_plan(mood: str) -> dict[str, Any]:
    return {
        "immediate": {
            "coolDown": "5-10 minutes light movement",
            "stretching": "10-15 minutes full body stretching",
            "hydration": "16-24 oz water within 30 minutes",
        },
        "daily": {
            "sleep": "7-9 hours quality sleep",
            "nutrition": "Protein within 2 hours post-workout",
            "movement": "Light activity on rest days",
        },
        "weekly": {
            "restDays": "2-3 complete rest days" if mood == "stressed" else "1-2 active recovery days",
            "assessment": "Weekly progress and energy level check-in",
            "adjustment": "Modify intensity based on recovery",
        },
    }


class FlexGenieAgent(WellnessAgent):
    name = "FlexGenie"
    role = "Fitness Intelligence & Adaptive Workouts"
    tools = ["workout_planning", "energy_adaptation", "video_recommendations", "fitness_tracking", "recovery_planning"]
    capabilities = ["mood_based_fitness", "energy_optimization", "adaptive_intensity", "injury_prevention"]
    must_do_tasks = ["assess_fitness_level", "generate_workout_plan", "provide_recovery_guidance", "track_progress"]
    recommendation_type = "fitness"

    async def analyze_user_intent(
        self, input: Mapping[str, Any], user_context: UserContext, memory: AgentMemory,
    ) -> UserIntent:
        mood = input.get("currentMood")
        energy = input.get("energyLevel")
        triggering = input.get("triggeringAgent")

        categories = ["fitness", "health"]
        if mood:
            categories.append("mood_support")
        if energy is not None:
            categories.append("energy_optimization")
        if triggering:
            categories.append("collaboration")

        urgency = Urgency.MEDIUM
        if mood in ("stressed", "anxious"):
            urgency = Urgency.HIGH
        if energy is not None and energy < 3:
            urgency = Urgency.LOW

        entities = [e for e in (mood, triggering) if e]
        if energy is not None:
            entities.append(f"{energy}_energy")

        return UserIntent(
            summary=f"Create fitness plan for {mood or 'general'} state with {energy or 'moderate'} energy",
            categories=categories,
            urgency=urgency,
            confidence=PLAN_CONFIDENCE,
            entities=entities,
            category="fitness",
        )

    def get_available_actions(self) -> list[AgentAction]:
        return [
            AgentAction(
                name="generate_workout_plan",
                description="Create personalized workout recommendations",
                categories=["fitness", "workout_planning"],
                base_priority=0.9,
                required_tools=["workout_planning"],
                benefits=["improved_fitness", "mood_enhancement", "energy_boost", "stress_relief"],
                risks=["overexertion", "injury_risk"],
            ),
            AgentAction(
                name="adapt_intensity",
                description="Adjust workout intensity based on current state",
                categories=["fitness", "energy_adaptation"],
                base_priority=0.85,
                required_tools=["energy_adaptation"],
                benefits=["optimal_performance", "injury_prevention", "sustainable_progress"],
                risks=["under_training"],
            ),
            AgentAction(
                name="recommend_videos",
                description="Provide workout video recommendations",
                categories=["fitness", "video_recommendations"],
                base_priority=0.8,
                required_tools=["video_recommendations"],
                benefits=["guided_workouts", "proper_form", "motivation"],
                risks=["screen_dependency"],
            ),
            AgentAction(
                name="plan_recovery",
                description="Create recovery and rest day plans",
                categories=["fitness", "recovery"],
                base_priority=0.7,
                required_tools=["recovery_planning"],
                benefits=["injury_prevention", "improved_performance", "better_sleep"],
                risks=["reduced_activity"],
            ),
        ]

    async def execute_step(self, step: ExecutionStep, ctx: StepContext) -> StepResult:
        if step.name == "prepare":
            data = await self._prepare(ctx)
        elif step.name == "execute_main":
            data = await self._generate_workout(ctx)
        elif step.name == "finalize":
            data = self._finalize(ctx)
        else:
            raise self.unknown_step(step)
        return StepResult(step=step.name, success=True, data=data)

    async def _prepare(self, ctx: StepContext) -> dict[str, Any]:
        memory: FlexGenieMemory = ctx.memory
        user_input = ctx.require("userInput")
        mood = user_input.get("currentMood") or ctx.user_context.current_mood
        energy = assess_energy_level(mood, memory.average_energy_level, user_input.get("energyLevel"))
        recent = await self._recommendations.list_active(ctx.user_id, self.name)
        return {
            "mood": mood,
            "energyLevel": energy,
            "duration": int(user_input.get("timeAvailable") or memory.preferred_duration),
            "recentRecommendations": len(recent),
            "preparationComplete": True,
        }

    async def _generate_workout(self, ctx: StepContext) -> dict[str, Any]:
        prepared = ctx.require("preparation_complete")
        mood = prepared["mood"]
        energy = prepared["energyLevel"]
        intensity = adapt_intensity(mood, energy)
        workout_type = workout_type_for(mood, intensity)

        try:
            plan = await self._content.workout_plan(mood, intensity, prepared["duration"], workout_type)
            videos = plan.pop("videos", None) or fallback_videos(mood)
            source = "ai"
        except ContentProviderError as e:
            logger.warning("[%s] Workout provider unavailable (%s), using fallback plan", self.name, e)
            plan = {
                "exercises": [dict(exercise) for exercise in FALLBACK_EXERCISES],
                "energyAdaptation": "Adapted for current energy level",
            }
            videos = fallback_videos(mood)
            source = "fallback"

        return {
            "mood": mood,
            "workoutPlan": {
                **plan,
                "workoutType": workout_type,
                "adaptedIntensity": intensity,
                "energyLevel": energy,
                "confidence": PLAN_CONFIDENCE,
                "source": source,
            },
            "videoRecommendations": videos,
            "energyAdaptation": energy_adaptation(energy, intensity),
            "recoveryGuidance": recovery_guidance(mood, intensity),
        }

    def _finalize(self, ctx: StepContext) -> dict[str, Any]:
        main = ctx.require("main_result")
        mood = main["mood"]
        workout = main["workoutPlan"]

        memory: FlexGenieMemory = ctx.memory
        memory.last_workout_plan = workout
        memory.successful_executions += 1
        memory.fitness_streak += 1
        memory.average_energy_level = round((memory.average_energy_level + workout["energyLevel"]) / 2, 1)

        return {
            "workoutPlan": workout,
            "recoveryPlan": recovery_plan(mood),
            "recoveryGuidance": main["recoveryGuidance"],
            "videoRecommendations": main["videoRecommendations"],
            "progressTracking": {k: list(v) if isinstance(v, list) else v for k, v in PROGRESS_TRACKING.items()},
            "energyAdaptation": main["energyAdaptation"],
            "recommendations": list(FITNESS_RECOMMENDATIONS.get(mood, DEFAULT_FITNESS_RECOMMENDATIONS)),
        }

    def generate_output(self, results: list[StepResult], plan: AgentPlan, ctx: StepContext) -> Any:
        data = step_data(results, "finalize", "execute_main")
        if data is None:
            return {
                "error": "Failed to generate fitness recommendations",
                "fallback": "Try some light stretching or a short walk to get started",
            }
        return {
            "workoutPlan": data.get("workoutPlan"),
            "recoveryPlan": data.get("recoveryPlan"),
            "videoRecommendations": data.get("videoRecommendations"),
            "progressTracking": data.get("progressTracking"),
            "energyAdaptation": data.get("energyAdaptation"),
            "confidence": plan.intent.confidence,
            "recommendations": data.get("recommendations", []),
        }

    def generate_error_response(
        self, kind: ErrorKind, error: BaseException, input: Mapping[str, Any],
    ) -> str:
        if kind == ErrorKind.DATA_UNAVAILABLE:
            return (
                "I'm having trouble accessing fitness data right now. "
                "Let me suggest some basic exercises you can do anywhere!"
            )
        if kind == ErrorKind.INVALID_INPUT:
            return (
                "I need to know your current energy level to create the best workout plan for you. "
                "How are you feeling today?"
            )
        return (
            "I encountered an issue while creating your workout plan. "
            "Let me provide some general fitness tips instead."
        )
