"""
agent.capabilities.nutri_coach - Mood-aware meal planning and hydration.

Runs the default prepare / execute_main / finalize pipeline. execute_main
makes the single content-provider call (nutrition_plan); finalize adds the
deterministic parts: hydration plan, meal schedule, shopping list, insights
and mood-specific recommendations.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from application.context import StepContext
from agent.base import WellnessAgent, step_data
from domain.exceptions import ContentProviderError, ErrorKind
from domain.memory import AgentMemory, NutriCoachMemory
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

PLAN_CONFIDENCE = 0.85

FALLBACK_MEALS = [
    {
        "name": "Balanced Meal",
        "description": "A nutritious meal to support your wellness",
        "benefits": "Provides essential nutrients",
        "emoji": "🥗",
        "ingredients": ["leafy greens", "quinoa", "chickpeas", "olive oil"],
    },
    {
        "name": "Greek Yogurt with Berries",
        "description": "Protein-rich snack with antioxidants",
        "benefits": "Steady energy and gut health",
        "emoji": "🫐",
        "ingredients": ["greek yogurt", "mixed berries", "honey"],
    },
    {
        "name": "Salmon with Sweet Potato",
        "description": "Omega-3 rich dinner with complex carbohydrates",
        "benefits": "Supports mood and brain health",
        "emoji": "🐟",
        "ingredients": ["salmon", "sweet potato", "broccoli"],
    },
]

MOOD_ADAPTATIONS = {
    "stressed": ["Include magnesium-rich foods", "Avoid excessive caffeine", "Focus on omega-3 sources"],
    "tired": ["Emphasize iron-rich foods", "Include complex carbohydrates", "Add B-vitamin sources"],
    "anxious": ["Include calming herbs", "Avoid stimulants", "Focus on stable blood sugar"],
    "sad": ["Include serotonin-boosting foods", "Add vitamin D sources", "Include comfort foods (healthy versions)"],
}
DEFAULT_ADAPTATIONS = ["Focus on balanced nutrition", "Include variety of nutrients"]

MOOD_RECOMMENDATIONS = {
    "stressed": [
        "Try chamomile tea before bed",
        "Include dark leafy greens in your meals",
        "Limit caffeine after 2 PM",
    ],
    "tired": [
        "Eat iron-rich foods with vitamin C",
        "Include protein in every meal",
        "Stay hydrated throughout the day",
    ],
    "anxious": [
        "Avoid processed foods and excess sugar",
        "Include probiotic foods for gut health",
        "Try magnesium-rich foods like nuts and seeds",
    ],
}
DEFAULT_RECOMMENDATIONS = [
    "Eat a variety of colorful fruits and vegetables",
    "Stay hydrated with water throughout the day",
    "Include lean proteins in your meals",
]

MEAL_SCHEDULE = {
    "breakfast": "7:00-9:00 AM",
    "snack1": "10:30-11:00 AM",
    "lunch": "12:30-1:30 PM",
    "snack2": "3:30-4:00 PM",
    "dinner": "6:30-8:00 PM",
    "principles": ["eat_every_3_hours", "larger_breakfast", "lighter_dinner"],
}


def fallback_nutrition_plan() -> dict[str, Any]:
    return {
        "meals": [dict(meal) for meal in FALLBACK_MEALS],
        "hydrationGoal": 8,
        "adaptations": ["Stay hydrated throughout the day"],
    }


def mood_adaptations(mood: str) -> list[str]:
    return list(MOOD_ADAPTATIONS.get(mood, DEFAULT_ADAPTATIONS))


def hydration_plan(mood: str) -> dict[str, Any]:
    return {
        "dailyTarget": "8-10 glasses",
        "timing": ["upon_waking", "before_meals", "during_exercise", "before_bed"],
        "enhancements": ["herbal_teas", "electrolytes"] if mood == "stressed" else ["lemon_water", "plain_water"],
        "tracking": "Use hydration app or water bottle markers",
    }


def shopping_list(meals: list[dict[str, Any]]) -> list[str]:
    """Unique ingredients across meals, in first-seen order."""
    seen: dict[str, None] = {}
    for meal in meals or []:
        for ingredient in meal.get("ingredients") or []:
            seen.setdefault(ingredient, None)
    return list(seen)


class NutriCoachAgent(WellnessAgent):
    name = "NutriCoach"
    role = "Nutrition Intelligence & Meal Planning"
    tools = ["meal_planning", "hydration_tracking", "nutrition_analysis", "dietary_restrictions", "calorie_tracking"]
    capabilities = ["mood_based_nutrition", "deficiency_detection", "meal_timing_optimization"]
    must_do_tasks = ["assess_nutritional_needs", "generate_meal_plan", "provide_hydration_guidance"]
    recommendation_type = "nutrition"

    async def analyze_user_intent(
        self, input: Mapping[str, Any], user_context: UserContext, memory: AgentMemory,
    ) -> UserIntent:
        mood = input.get("currentMood")
        triggering = input.get("triggeringAgent")

        categories = ["nutrition", "health"]
        if mood:
            categories.append("mood_support")
        if triggering:
            categories.append("collaboration")

        return UserIntent(
            summary=f"Provide nutrition guidance for {mood or 'general'} state",
            categories=categories,
            urgency=Urgency.HIGH if mood in ("stressed", "tired") else Urgency.MEDIUM,
            confidence=PLAN_CONFIDENCE,
            entities=[e for e in (mood, triggering) if e],
            category="nutrition",
        )

    def get_available_actions(self) -> list[AgentAction]:
        return [
            AgentAction(
                name="generate_meal_plan",
                description="Create personalized meal recommendations",
                categories=["nutrition", "meal_planning"],
                base_priority=0.9,
                required_tools=["meal_planning"],
                benefits=["personalized_nutrition", "mood_support", "health_optimization"],
                risks=["dietary_restrictions_conflict"],
            ),
            AgentAction(
                name="analyze_nutritional_needs",
                description="Assess current nutritional status and deficiencies",
                categories=["nutrition", "analysis"],
                base_priority=0.8,
                required_tools=["nutrition_analysis"],
                benefits=["targeted_recommendations", "health_insights"],
                risks=["incomplete_data"],
            ),
            AgentAction(
                name="create_hydration_plan",
                description="Develop hydration strategy",
                categories=["hydration", "health"],
                base_priority=0.7,
                required_tools=["hydration_tracking"],
                benefits=["improved_energy", "better_health"],
                risks=["over_hydration"],
            ),
        ]

    async def execute_step(self, step: ExecutionStep, ctx: StepContext) -> StepResult:
        if step.name == "prepare":
            data = await self._prepare(ctx)
        elif step.name == "execute_main":
            data = await self._generate_plan(ctx)
        elif step.name == "finalize":
            data = self._finalize(ctx)
        else:
            raise self.unknown_step(step)
        return StepResult(step=step.name, success=True, data=data)

    async def _prepare(self, ctx: StepContext) -> dict[str, Any]:
        memory: NutriCoachMemory = ctx.memory
        user_input = ctx.require("userInput")
        recent = await self._recommendations.list_active(ctx.user_id, self.name)
        return {
            "mood": user_input.get("currentMood") or ctx.user_context.current_mood,
            "preferences": {**memory.preferences, **(user_input.get("preferences") or {})},
            "userContext": ctx.user_context.to_dict(),
            "recentRecommendations": len(recent),
            "preparationComplete": True,
        }

    async def _generate_plan(self, ctx: StepContext) -> dict[str, Any]:
        prepared = ctx.require("preparation_complete")
        mood = prepared["mood"]
        try:
            plan = await self._content.nutrition_plan(mood, prepared["preferences"])
            source = "ai"
        except ContentProviderError as e:
            logger.warning("[%s] Nutrition provider unavailable (%s), using fallback meals", self.name, e)
            plan = fallback_nutrition_plan()
            source = "fallback"

        return {
            "mood": mood,
            "nutritionPlan": {
                **plan,
                "adaptations": mood_adaptations(mood),
                "confidence": PLAN_CONFIDENCE,
                "source": source,
            },
        }

    def _finalize(self, ctx: StepContext) -> dict[str, Any]:
        main = ctx.require("main_result")
        mood = main["mood"]
        plan = main["nutritionPlan"]

        memory: NutriCoachMemory = ctx.memory
        memory.last_nutrition_plan = plan
        memory.successful_executions += 1

        return {
            "nutritionPlan": plan,
            "hydrationPlan": hydration_plan(mood),
            "mealSchedule": dict(MEAL_SCHEDULE),
            "shoppingList": shopping_list(plan.get("meals", [])),
            "insights": {
                "keyInsights": [
                    f"Nutrition plan optimized for {mood} mood",
                    f"Focus on {plan.get('primaryFocus', 'balanced nutrition')}",
                    f"Confidence level: {round(PLAN_CONFIDENCE * 100)}%",
                ],
                "recommendations": [
                    "Track your meals for better personalization",
                    "Stay consistent with meal timing",
                    "Monitor how foods affect your mood and energy",
                ],
            },
            "recommendations": list(MOOD_RECOMMENDATIONS.get(mood, DEFAULT_RECOMMENDATIONS)),
        }

    def generate_output(self, results: list[StepResult], plan: AgentPlan, ctx: StepContext) -> Any:
        data = step_data(results, "finalize", "execute_main")
        if data is None:
            return {
                "error": "Failed to generate nutrition recommendations",
                "fallback": "Please try again or consult with a nutritionist",
            }
        return {
            "nutritionPlan": data.get("nutritionPlan"),
            "hydrationPlan": data.get("hydrationPlan"),
            "mealSchedule": data.get("mealSchedule"),
            "shoppingList": data.get("shoppingList"),
            "nutritionalInsights": data.get("insights"),
            "confidence": plan.intent.confidence,
            "recommendations": data.get("recommendations", []),
        }

    def generate_error_response(
        self, kind: ErrorKind, error: BaseException, input: Mapping[str, Any],
    ) -> str:
        if kind == ErrorKind.DATA_UNAVAILABLE:
            return (
                "I'm having trouble accessing nutrition data right now. Please try again in a moment, "
                "or I can provide general nutrition guidance based on your mood."
            )
        if kind == ErrorKind.INVALID_INPUT:
            return (
                "I need more information about your dietary preferences and health goals "
                "to provide personalized nutrition advice."
            )
        return (
            "I encountered an issue while creating your nutrition plan. "
            "Let me provide some general healthy eating tips instead."
        )
