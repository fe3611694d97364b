"""
infrastructure.llm.content_provider - LLM-backed domain content.

Implements the ContentProvider port using LangChain JSON chains. The LLM
provider (openai / groq / ollama) is controlled by the centralized
LLM_PROVIDER setting. Each method is one chain call; any failure, including
a reply that does not have the expected shape, raises ContentProviderError
so the calling agent can substitute its static fallback.

OfflineContentProvider is wired when LLM_PROVIDER="offline": every call
reports the provider as unavailable.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable
from urllib.parse import quote_plus

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate

from domain.exceptions import ContentProviderError

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.youtube.com/results?search_query="
SPOTIFY_SEARCH_URL = "https://open.spotify.com/search/"

_SENTIMENT_SYSTEM = """You are a sentiment classifier for a wellness app.
Classify the emotional tone of the user's text. Respond with JSON:
{{"sentiment": "one of: positive, negative, neutral, joy, sadness, anger, fear, surprise, disgust",
  "confidence": number between 0 and 1}}"""

_MUSIC_SYSTEM = """You are MoodMate, an empathetic AI wellness agent who curates music.
Suggest 2-3 playlists that suit the listener's mood. Respond with JSON:
{{"playlists": [{{"name": "playlist name", "description": "why it fits", "tracks": approximate number of tracks}}]}}"""

_NUTRITION_SYSTEM = """You are NutriCoach, a personalized nutrition AI agent.
Create meal recommendations based on mood and wellness goals. Respond with JSON:
{{"meals": [{{"name": "meal name", "description": "brief description", "benefits": "health benefits", "emoji": "food emoji"}}],
  "hydrationGoal": number of glasses,
  "adaptations": array of mood-specific dietary adaptations}}"""

_WORKOUT_SYSTEM = """You are FlexGenie, a fitness AI agent that adapts workouts to mood and energy.
Respond with JSON:
{{"exercises": [{{"name": "exercise name", "type": "yoga/cardio/strength/walking", "duration": minutes,
                  "intensity": "low/moderate/high", "description": "brief description"}}],
  "energyAdaptation": "explanation of how the workout matches current energy",
  "videos": [{{"title": "title of a well-known follow-along workout video", "channel": "channel name", "duration": minutes}}]}}"""

_WELLNESS_SYSTEM = """You are MindPal, a mental wellness AI agent focused on emotional support and growth.
Respond with JSON:
{{"journalPrompt": "a thoughtful, open-ended prompt for reflection",
  "affirmation": "a positive, personalized affirmation",
  "techniques": array of specific mental wellness techniques}}"""

_INSIGHTS_SYSTEM = """You are InsightBot, an analytics AI agent that identifies wellness patterns and trends.
Respond with JSON:
{{"trends": [{{"metric": "metric name", "change": percentage change, "direction": "up or down"}}],
  "correlations": array of interesting correlations found,
  "suggestions": array of actionable wellness suggestions based on data}}"""


class LLMContentProvider:
    """Implements ContentProvider with one LangChain chain per request type.

    Replies are reshaped into the payload the agents expect before they are
    returned. A missing field, a wrong type or a value that cannot be
    coerced raises ContentProviderError, never a bare TypeError/ValueError.
    """

    def __init__(self, llm: BaseChatModel):
        self._llm = llm
        self._parser = JsonOutputParser()

    async def _ask(self, name: str, system: str, user: str, variables: dict[str, Any]) -> dict[str, Any]:
        prompt = ChatPromptTemplate.from_messages([("system", system), ("user", user)])
        chain = prompt | self._llm | self._parser
        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, chain.invoke, variables)
        except Exception as e:
            logger.error("Content request '%s' failed: %s", name, e)
            raise ContentProviderError(f"{name} failed: {e}") from e
        if not isinstance(result, dict):
            raise ContentProviderError(f"{name} returned {type(result).__name__}, expected an object")
        return result

    async def _request(
        self,
        name: str,
        system: str,
        user: str,
        variables: dict[str, Any],
        shape: Callable[[dict[str, Any]], dict[str, Any]],
    ) -> dict[str, Any]:
        result = await self._ask(name, system, user, variables)
        try:
            return shape(result)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Content request '%s' returned unusable data: %s", name, e)
            raise ContentProviderError(f"{name} returned unusable data: {e}") from e

    async def analyze_sentiment(self, text: str) -> dict[str, Any]:
        def shape(result: dict[str, Any]) -> dict[str, Any]:
            return {
                "sentiment": _text(result, "sentiment", "sentiment").lower(),
                "confidence": min(1.0, max(0.0, float(result.get("confidence", 0.5)))),
            }

        return await self._request("sentiment", _SENTIMENT_SYSTEM, "{text}", {"text": text}, shape)

    async def music_for_mood(self, mood: str) -> dict[str, Any]:
        def shape(result: dict[str, Any]) -> dict[str, Any]:
            playlists = []
            for p in _records(result, "music", "playlists"):
                name = _text(p, "music", "name")
                playlists.append({
                    "name": name,
                    "description": str(p.get("description") or ""),
                    "url": SPOTIFY_SEARCH_URL + quote_plus(name),
                    "tracks": int(p.get("tracks") or 0),
                })
            return {"playlists": playlists}

        return await self._request(
            "music", _MUSIC_SYSTEM, "Current mood: {mood}", {"mood": mood}, shape,
        )

    async def nutrition_plan(self, mood: str, preferences: dict[str, Any]) -> dict[str, Any]:
        def shape(result: dict[str, Any]) -> dict[str, Any]:
            meals = []
            for meal in _records(result, "nutrition_plan", "meals"):
                _text(meal, "nutrition_plan", "name")
                ingredients = meal.get("ingredients") or []
                if not isinstance(ingredients, list):
                    raise ContentProviderError("nutrition_plan meal ingredients must be a list")
                meals.append({**meal, "ingredients": [str(i) for i in ingredients]})
            return {
                **result,
                "meals": meals,
                "hydrationGoal": int(result.get("hydrationGoal") or 8),
                "adaptations": _strings(result.get("adaptations")),
            }

        return await self._request(
            "nutrition_plan",
            _NUTRITION_SYSTEM,
            "Current mood: {mood}\nPreferences: {preferences}\n"
            "Provide 3-4 meal/snack recommendations that support this mood state.",
            {"mood": mood, "preferences": json.dumps(preferences or {})},
            shape,
        )

    async def workout_plan(
        self, mood: str, intensity: int, duration: int, workout_type: str,
    ) -> dict[str, Any]:
        def shape(result: dict[str, Any]) -> dict[str, Any]:
            exercises = []
            for exercise in _records(result, "workout_plan", "exercises"):
                _text(exercise, "workout_plan", "name")
                exercises.append(exercise)
            videos = result.get("videos") or []
            if not isinstance(videos, list):
                raise ContentProviderError("workout_plan videos must be a list")
            return {
                **result,
                "exercises": exercises,
                "energyAdaptation": str(result.get("energyAdaptation") or "Adapted for current energy level"),
                # videos are optional; unusable entries are skipped
                "videos": [
                    {
                        "title": v["title"],
                        "channel": str(v.get("channel") or ""),
                        "duration": int(v.get("duration") or duration),
                        "url": YOUTUBE_SEARCH_URL + quote_plus(v["title"]),
                    }
                    for v in videos if isinstance(v, dict) and isinstance(v.get("title"), str) and v["title"]
                ],
            }

        return await self._request(
            "workout_plan",
            _WORKOUT_SYSTEM,
            "Current mood: {mood}\nEnergy level (1-10): {intensity}\n"
            "Time available: {duration} minutes\nPreferred workout type: {workout_type}\n"
            "Recommend 2-3 exercises that match this state.",
            {"mood": mood, "intensity": intensity, "duration": duration, "workout_type": workout_type},
            shape,
        )

    async def mental_wellness_support(
        self, mood: str, recent_entries: list[str],
    ) -> dict[str, Any]:
        def shape(result: dict[str, Any]) -> dict[str, Any]:
            return {
                "journalPrompt": _text(result, "mental_wellness_support", "journalPrompt"),
                "affirmation": _text(result, "mental_wellness_support", "affirmation"),
                "techniques": _strings(result.get("techniques")),
            }

        return await self._request(
            "mental_wellness_support",
            _WELLNESS_SYSTEM,
            "Current mood: {mood}\nRecent journal themes: {entries}\nProvide mental wellness support.",
            {"mood": mood, "entries": json.dumps(recent_entries or [])},
            shape,
        )

    async def wellness_insights(self, data: dict[str, Any]) -> dict[str, Any]:
        def shape(result: dict[str, Any]) -> dict[str, Any]:
            if "suggestions" not in result:
                raise ContentProviderError("wellness_insights response missing suggestions")
            trends = result.get("trends") or []
            correlations = result.get("correlations") or []
            if not isinstance(trends, list) or not isinstance(correlations, list):
                raise ContentProviderError("wellness_insights trends and correlations must be lists")
            return {
                "suggestions": _strings(result["suggestions"]),
                "trends": trends,
                "correlations": correlations,
            }

        summary = data.get("summary", {})
        return await self._request(
            "wellness_insights",
            _INSIGHTS_SYSTEM,
            "Wellness data summary:\n- Mood entries: {moods}\n- Journal entries: {journals}\n"
            "- Wellness metrics: {metrics}\n- Dominant mood: {dominant}\n"
            "Analyze patterns and provide insights based on this data.",
            {
                "moods": summary.get("moodCount", 0),
                "journals": summary.get("journalCount", 0),
                "metrics": summary.get("metricsCount", 0),
                "dominant": summary.get("dominantMood", "unknown"),
            },
            shape,
        )


def _text(result: dict[str, Any], name: str, field: str) -> str:
    value = result.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ContentProviderError(f"{name} response has no usable '{field}'")
    return value


def _records(result: dict[str, Any], name: str, field: str) -> list[dict[str, Any]]:
    """A non-empty list of objects; any other entry rejects the whole reply."""
    value = result.get(field)
    if not isinstance(value, list) or not value:
        raise ContentProviderError(f"{name} response has no '{field}'")
    if not all(isinstance(item, dict) for item in value):
        raise ContentProviderError(f"{name} '{field}' entries must be objects")
    return value


def _strings(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ContentProviderError(f"expected a list, got {type(value).__name__}")
    return [str(item) for item in value]


class OfflineContentProvider:
    """ContentProvider that is never available."""

    async def _unavailable(self, name: str) -> dict[str, Any]:
        raise ContentProviderError(f"{name}: content provider is offline")

    async def analyze_sentiment(self, text: str) -> dict[str, Any]:
        return await self._unavailable("sentiment")

    async def music_for_mood(self, mood: str) -> dict[str, Any]:
        return await self._unavailable("music")

    async def nutrition_plan(self, mood: str, preferences: dict[str, Any]) -> dict[str, Any]:
        return await self._unavailable("nutrition_plan")

    async def workout_plan(
        self, mood: str, intensity: int, duration: int, workout_type: str,
    ) -> dict[str, Any]:
        return await self._unavailable("workout_plan")

    async def mental_wellness_support(
        self, mood: str, recent_entries: list[str],
    ) -> dict[str, Any]:
        return await self._unavailable("mental_wellness_support")

    async def wellness_insights(self, data: dict[str, Any]) -> dict[str, Any]:
        return await self._unavailable("wellness_insights")
