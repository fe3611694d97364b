"""
infrastructure.llm.intent_extractor - Chat message → actionable intent.

Three implementations of the IntentExtractor port:

    LLMIntentExtractor      - LangChain JSON chain (provider from LLM_PROVIDER)
    KeywordIntentExtractor  - deterministic keyword rules, never fails
    FallbackIntentExtractor - tries the primary within a timeout, otherwise
                              the fallback

Usage (wired in factory.py):
    extractor = FallbackIntentExtractor(
        primary=LLMIntentExtractor(llm),
        fallback=KeywordIntentExtractor(),
        timeout=settings.provider_timeout,
    )
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate

from domain.exceptions import IntentExtractionError
from domain.models import ConversationIntent
from domain.ports import IntentExtractor

logger = logging.getLogger(__name__)

ACTION_TYPES = (
    "mood_update",
    "journal_save",
    "recommendation_request",
    "data_analysis",
)

_SYSTEM_INSTRUCTIONS = """Analyze the user's message to understand their intent when talking to {agent_name},
a wellness agent. Respond with JSON in this format:
{{"intent": "brief description of what the user wants",
  "entities": ["key entities/topics mentioned"],
  "needsAction": true if the agent should take a specific action, otherwise false,
  "actionType": "one of: mood_update, journal_save, recommendation_request, data_analysis, or null"}}

RULES:
1. mood_update: the user reports how they feel right now ("I'm stressed", "feeling happy today").
2. journal_save: the user shares a reflection they want kept as a journal entry.
3. recommendation_request: the user asks for a plan, suggestion or recommendation.
4. data_analysis: the user asks about trends, patterns, progress or insights.
5. Greetings and small talk: needsAction false, actionType null."""


class LLMIntentExtractor:
    """Implements IntentExtractor using any supported LLM provider."""

    def __init__(self, llm: BaseChatModel):
        self._llm = llm
        self._parser = JsonOutputParser()
        self._chain = self._build_chain()

    def _build_chain(self):
        prompt = ChatPromptTemplate.from_messages([
            ("system", _SYSTEM_INSTRUCTIONS),
            ("user", "{message}"),
        ])
        return prompt | self._llm | self._parser

    async def extract(self, message: str, agent_name: str) -> ConversationIntent:
        """Runs the sync LangChain chain in a thread pool to avoid blocking."""
        try:
            loop = asyncio.get_running_loop()
            result: dict[str, Any] = await loop.run_in_executor(
                None, self._chain.invoke, {"message": message, "agent_name": agent_name},
            )
        except Exception as e:
            logger.error("Intent extraction failed: %s", e)
            raise IntentExtractionError(f"Failed to extract intent: {e}") from e

        if not isinstance(result, dict):
            raise IntentExtractionError("Intent extractor returned a non-object reply")
        action_type = result.get("actionType")
        if action_type not in ACTION_TYPES:
            action_type = None
        return ConversationIntent(
            intent=str(result.get("intent") or "general_conversation"),
            entities=[str(e) for e in result.get("entities") or []],
            needs_action=bool(result.get("needsAction")) and action_type is not None,
            action_type=action_type,
        )


class KeywordIntentExtractor:
    """Deterministic intent rules used when no LLM is reachable."""

    MOOD_WORDS = (
        "happy", "sad", "stressed", "tired", "focused", "anxious", "excited", "calm",
    )
    FEELING_MARKERS = ("feel", "feeling", "i'm", "i am", "im ")
    ANALYSIS_WORDS = ("analy", "insight", "trend", "pattern", "progress")
    REQUEST_WORDS = ("plan", "recommend", "suggest", "give me", "create", "show me")

    async def extract(self, message: str, agent_name: str) -> ConversationIntent:
        text = message.lower()
        moods = [m for m in self.MOOD_WORDS if m in text]

        if moods and any(marker in text for marker in self.FEELING_MARKERS):
            return ConversationIntent("report mood", moods, True, "mood_update")
        if "journal" in text or (agent_name == "MindPal" and "dear diary" in text):
            return ConversationIntent("save journal entry", [], True, "journal_save")
        if any(w in text for w in self.ANALYSIS_WORDS):
            return ConversationIntent("analyze wellness data", [], True, "data_analysis")
        if any(w in text for w in self.REQUEST_WORDS):
            return ConversationIntent("request recommendations", moods, True, "recommendation_request")
        return ConversationIntent(entities=moods)


class FallbackIntentExtractor:
    """Try the primary extractor; fall back on failure or timeout.

    Implements IntentExtractor (structural typing, no explicit inheritance).
    """

    def __init__(
        self,
        primary: IntentExtractor,
        fallback: IntentExtractor,
        timeout: float = 20.0,
    ):
        self._primary = primary
        self._fallback = fallback
        self._timeout = timeout

    async def extract(self, message: str, agent_name: str) -> ConversationIntent:
        try:
            return await asyncio.wait_for(
                self._primary.extract(message, agent_name),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Intent extraction timed out after %.1fs, using keyword rules", self._timeout,
            )
        except IntentExtractionError as e:
            logger.warning("Intent extraction unavailable (%s), using keyword rules", e)

        return await self._fallback.extract(message, agent_name)
