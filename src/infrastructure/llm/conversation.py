"""
infrastructure.llm.conversation - In-character chat replies per agent.

Three implementations of the ConversationResponder port:

    LLMConversationResponder     - chat model with a per-agent system prompt
                                   and the last few history turns
    RuleBasedResponder           - keyword templates, never fails
    FallbackConversationResponder - primary within a timeout, otherwise the
                                   rule-based reply
"""

from __future__ import annotations

import asyncio
import logging

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from domain.exceptions import ContentProviderError
from domain.models import ChatTurn, UserContext
from domain.ports import ConversationResponder

logger = logging.getLogger(__name__)

_PERSONAS = {
    "MoodMate": (
        "You are MoodMate, an empathetic AI wellness agent specializing in emotional "
        "intelligence and mood support. You help users track their mood, suggest "
        "mood-appropriate music and offer emotional support.\n"
        "Personality: warm, understanding and supportive. Acknowledge feelings first, "
        "then give one or two specific coping techniques or playlist ideas."
    ),
    "NutriCoach": (
        "You are NutriCoach, a personalized nutrition AI agent. You create meal "
        "suggestions based on the user's goals, mood and energy.\n"
        "Personality: knowledgeable, encouraging and practical. Give concrete meals "
        "with their benefits and keep advice sustainable."
    ),
    "FlexGenie": (
        "You are FlexGenie, an adaptive fitness AI agent. You recommend workouts "
        "that match the user's energy level, available time and goals.\n"
        "Personality: motivating and adaptable. List specific exercises with "
        "durations or rep counts and offer easier modifications."
    ),
    "MindPal": (
        "You are MindPal, a mental wellness AI agent focused on journaling, "
        "mindfulness and emotional growth.\n"
        "Personality: compassionate and steady. Validate emotions, offer a journal "
        "prompt or breathing exercise, and point to professional resources when "
        "the user sounds at risk."
    ),
    "InsightBot": (
        "You are InsightBot, a wellness analytics AI agent that turns the user's "
        "mood, journal and metric history into insights.\n"
        "Personality: analytical and encouraging. Reference the user's actual data "
        "and never invent numbers."
    ),
}


def system_prompt(agent_name: str, user_context: UserContext) -> str:
    persona = _PERSONAS.get(
        agent_name,
        f"You are a helpful wellness AI agent named {agent_name}. "
        "Provide supportive, practical advice for the user's wellness journey.",
    )
    recent = ", ".join(user_context.recent_moods) or "none"
    return (
        f"{persona}\n\nUser Context:\n"
        f"- Current Mood: {user_context.current_mood}\n"
        f"- Recent Moods: {recent}\n"
        f"- Streak Days: {user_context.streak_days}"
    )


class LLMConversationResponder:
    """Implements ConversationResponder with a LangChain chat model."""

    def __init__(self, llm: BaseChatModel, history_turns: int = 6):
        self._llm = llm
        self._history_turns = history_turns

    def _build_messages(
        self,
        agent_name: str,
        message: str,
        history: list[ChatTurn],
        user_context: UserContext,
    ) -> list[BaseMessage]:
        messages: list[BaseMessage] = [SystemMessage(content=system_prompt(agent_name, user_context))]
        for turn in history[-self._history_turns:]:
            if turn.role == "user":
                messages.append(HumanMessage(content=turn.content))
            elif turn.role == "assistant":
                messages.append(AIMessage(content=turn.content))
        messages.append(HumanMessage(content=message))
        return messages

    async def respond(
        self,
        agent_name: str,
        message: str,
        history: list[ChatTurn],
        user_context: UserContext,
    ) -> str:
        messages = self._build_messages(agent_name, message, history, user_context)
        try:
            reply = await self._llm.ainvoke(messages)
        except Exception as e:
            logger.error("%s conversation failed: %s", agent_name, e)
            raise ContentProviderError(f"Conversation failed: {e}") from e

        content = reply.content if isinstance(reply.content, str) else ""
        if not content.strip():
            raise ContentProviderError("Conversation model returned an empty reply")
        return content


class RuleBasedResponder:
    """Keyword-driven replies, one small rule table per agent."""

    GREETINGS = ("hello", "hi ", "hey", "good morning", "good afternoon", "good evening")

    async def respond(
        self,
        agent_name: str,
        message: str,
        history: list[ChatTurn],
        user_context: UserContext,
    ) -> str:
        text = f"{message.lower().strip()} "
        handler = getattr(self, f"_reply_{agent_name.lower()}", None)
        if handler is None:
            return (
                "Hello! I'm here to help you with your wellness journey. "
                "What can I assist you with today?"
            )
        greeting = not history and (
            text.startswith(("hi ", "hey")) or any(g in text for g in self.GREETINGS)
        )
        return handler(text, greeting, user_context)

    @staticmethod
    def _has(text: str, *words: str) -> bool:
        return any(w in text for w in words)

    def _reply_moodmate(self, text: str, greeting: bool, ctx: UserContext) -> str:
        if self._has(text, "stressed", "anxious", "overwhelmed"):
            return (
                "I hear that you're feeling stressed. Let's slow things down together.\n\n"
                "Breathing: inhale for 4 counts, hold for 4, exhale for 6. Repeat three times.\n"
                "Music: try a calm piano or lo-fi playlist while you breathe.\n\n"
                "This feeling is temporary. What's the main source of your stress right now?"
            )
        if self._has(text, "sad", "down", "depressed"):
            return (
                "I'm sorry you're feeling low. Your feelings are valid, and it's okay "
                "not to be okay sometimes.\n\n"
                "Gentle, uplifting acoustic music can help a little. Would you like to "
                "talk about what's weighing on you?"
            )
        if self._has(text, "happy", "good", "great", "excited"):
            return (
                "That's wonderful to hear! Let's keep that energy going with an upbeat "
                "playlist. What's been bringing you joy today?"
            )
        if greeting:
            return (
                "Hello! I'm MoodMate, your emotional wellness companion. Tell me how "
                "you're feeling, in your own words, and I'll log your mood and suggest "
                "music and support to match."
            )
        return (
            f"I'm here for you. Your last recorded mood was {ctx.current_mood}. "
            "How are you feeling right now?"
        )

    def _reply_nutricoach(self, text: str, greeting: bool, ctx: UserContext) -> str:
        if self._has(text, "energy", "tired", "fatigue"):
            return (
                "For steadier energy: overnight oats with berries for breakfast, a quinoa "
                "bowl with leafy greens for lunch, an apple with almond butter as a snack, "
                "and salmon with sweet potato for dinner. Aim for 8-10 glasses of water."
            )
        if self._has(text, "lose weight", "weight loss"):
            return (
                "A sustainable approach: a veggie scramble breakfast, a grilled chicken "
                "salad at lunch, Greek yogurt with berries as a snack and baked fish with "
                "roasted vegetables for dinner. Drinking water before meals helps too."
            )
        if self._has(text, "muscle", "protein", "strength"):
            return (
                "For muscle gain, spread protein across the day: a protein smoothie with "
                "oats, a chicken and rice bowl, a banana with peanut butter before training "
                "and lean beef with quinoa for dinner."
            )
        if greeting:
            return (
                "Hi! I'm NutriCoach. Tell me your main goal (more energy, weight "
                "management, muscle gain or just eating healthier) and I'll suggest meals."
            )
        return (
            f"Since you're feeling {ctx.current_mood}, I can tailor a meal plan for you. "
            "What's your main nutrition goal?"
        )

    def _reply_flexgenie(self, text: str, greeting: bool, ctx: UserContext) -> str:
        if self._has(text, "warm up", "warmup"):
            return (
                "Quick warm-up: 30s arm circles each way, 10 leg swings per leg, 10 hip "
                "circles, 10 torso twists and a minute of marching in place."
            )
        if self._has(text, "tired", "low energy", "exhausted"):
            return (
                "Gentle movement can lift your energy: 5 minutes of stretching, a 10 minute "
                "walk and a short yoga flow with cat-cow and child's pose."
            )
        if self._has(text, "beginner", "start", "new"):
            return (
                "Beginner plan, three times a week: 2 sets of 8-12 bodyweight squats, "
                "2 sets of wall push-ups, a 10 minute walk and 5 minutes of stretching."
            )
        if self._has(text, "quick", "short", "busy"):
            return (
                "5 minute power circuit, 45 seconds each with 15 seconds rest: jumping "
                "jacks, squats, push-ups, mountain climbers and a plank. Repeat for 10 minutes."
            )
        if greeting:
            return (
                "Hey there! I'm FlexGenie. Tell me how much time and energy you have and "
                "I'll put together a workout that fits."
            )
        return (
            "What kind of movement sounds good today: a warm-up, a quick workout, a "
            "beginner routine or something gentle?"
        )

    def _reply_mindpal(self, text: str, greeting: bool, ctx: UserContext) -> str:
        if self._has(text, "stress", "overwhelmed", "anxious"):
            return (
                "I hear that you're overwhelmed. Take three slow breaths: 4 counts in, "
                "hold for 4, 6 counts out.\n\n"
                "Journal prompt: What's one small thing I can control right now?\n\n"
                "If things feel like too much, the Crisis Text Line is available: text "
                "HOME to 741741."
            )
        if self._has(text, "journal", "write", "thoughts"):
            return (
                "Journaling is a great idea. Try one of these:\n"
                "- How am I feeling right now, and what do I need most today?\n"
                "- What are three things I'm grateful for, however small?\n"
                "- What's one challenge I handled recently, and how?"
            )
        if self._has(text, "meditation", "mindfulness", "calm"):
            return (
                "Let's do a 5 minute practice: 2 minutes of slow breathing, 2 minutes "
                "scanning your body for tension and releasing it, and 1 minute thinking "
                "of something you appreciate right now."
            )
        if greeting:
            return (
                "Hello, I'm MindPal. I can offer journal prompts, affirmations, stress "
                "relief and mindfulness exercises. What would help most today?"
            )
        return (
            "I'm here to support you. Would you like a journal prompt, a calming "
            "technique or some encouragement?"
        )

    def _reply_insightbot(self, text: str, greeting: bool, ctx: UserContext) -> str:
        moods = ctx.recent_moods
        if self._has(text, "analy", "insight", "pattern", "trend", "progress"):
            if not moods:
                return (
                    "I don't have enough data yet. Log your mood for a few days and I'll "
                    "start spotting patterns for you."
                )
            dominant = max(set(moods), key=moods.count)
            return (
                f"From your last {len(moods)} check-ins, your most frequent mood is "
                f"{dominant} and your current streak is {ctx.streak_days} day(s). "
                "Ask me for a full analysis to see trends and correlations."
            )
        if greeting:
            return (
                "Hello! I'm InsightBot. I analyze your moods, journal entries and wellness "
                "metrics to find trends. Ask me to analyze your data."
            )
        return (
            "I can show your mood patterns, track your progress or look for correlations "
            "between your habits and how you feel. What would you like to see?"
        )


class FallbackConversationResponder:
    """Try the primary responder; fall back to rule-based replies.

    Implements ConversationResponder (structural typing, no explicit inheritance).
    """

    def __init__(
        self,
        primary: ConversationResponder,
        fallback: ConversationResponder,
        timeout: float = 20.0,
    ):
        self._primary = primary
        self._fallback = fallback
        self._timeout = timeout

    async def respond(
        self,
        agent_name: str,
        message: str,
        history: list[ChatTurn],
        user_context: UserContext,
    ) -> str:
        try:
            return await asyncio.wait_for(
                self._primary.respond(agent_name, message, history, user_context),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "%s reply timed out after %.1fs, using rule-based reply",
                agent_name, self._timeout,
            )
        except ContentProviderError as e:
            logger.warning("%s reply unavailable (%s), using rule-based reply", agent_name, e)

        return await self._fallback.respond(agent_name, message, history, user_context)
