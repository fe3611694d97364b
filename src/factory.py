"""
factory - Composition root for the wellness agents.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (CLI, REST) call this factory to get fully
configured repositories, agents and the orchestrator.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    orchestrator = factory.create_orchestrator()
    result = await orchestrator.run_mood_update("stressed", user_id=1)
"""

from __future__ import annotations

import logging
from typing import Optional

from agent.capabilities.flex_genie import FlexGenieAgent
from agent.capabilities.insight_bot import InsightBotAgent
from agent.capabilities.mind_pal import MindPalAgent
from agent.capabilities.mood_mate import MoodMateAgent
from agent.capabilities.nutri_coach import NutriCoachAgent
from agent.orchestrator import Orchestrator
from agent.registry import AgentRegistry
from application.services.user_context import UserContextService
from domain.ports import ContentProvider, ConversationResponder, IntentExtractor
from infrastructure.config import Settings
from infrastructure.llm.content_provider import LLMContentProvider, OfflineContentProvider
from infrastructure.llm.conversation import (
    FallbackConversationResponder,
    LLMConversationResponder,
    RuleBasedResponder,
)
from infrastructure.llm.intent_extractor import (
    FallbackIntentExtractor,
    KeywordIntentExtractor,
    LLMIntentExtractor,
)
from infrastructure.llm.llm_builder import build_llm_from_settings
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.journal_repo import SQLiteJournalRepository
from infrastructure.persistence.memory_repo import SQLiteMemoryStore
from infrastructure.persistence.metrics_repo import SQLiteMetricsRepository
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.mood_repo import SQLiteMoodRepository
from infrastructure.persistence.recommendation_repo import SQLiteRecommendationStore
from infrastructure.persistence.user_repo import SQLiteUserRepository

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root: wires all dependencies together.

    Call initialize() once at startup, then create repositories and the
    orchestrator as needed. The orchestrator is a lazy singleton because it
    owns the collaboration queue and the per-user memory locks.
    """

    def __init__(
        self,
        config: Settings,
        *,
        content_provider: Optional[ContentProvider] = None,
        responder: Optional[ConversationResponder] = None,
        extractor: Optional[IntentExtractor] = None,
    ):
        self._config = config
        self._connection = AsyncSQLiteConnection(config.db_path)

        # Explicit overrides (tests, demos) win over the LLM_PROVIDER wiring
        self._content_provider = content_provider
        self._responder = responder
        self._extractor = extractor

        self._orchestrator: Optional[Orchestrator] = None
        self._initialized = False

    @property
    def config(self) -> Settings:
        return self._config

    async def initialize(self) -> None:
        """One-time startup: run migrations and seed the default user.

        Must be called before creating the orchestrator.
        """
        logger.info("Initializing ServiceFactory...")

        await run_migrations(self._connection)
        logger.info("Database migrations complete")

        await self.create_user_repository().ensure(
            self._config.default_user_id, self._config.default_user_name,
        )
        logger.info("Default user %d ready", self._config.default_user_id)

        self._initialized = True
        logger.info("ServiceFactory ready (llm_provider=%s)", self._config.llm_provider)

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def create_user_repository(self) -> SQLiteUserRepository:
        return SQLiteUserRepository(self._connection)

    def create_mood_repository(self) -> SQLiteMoodRepository:
        return SQLiteMoodRepository(self._connection)

    def create_journal_repository(self) -> SQLiteJournalRepository:
        return SQLiteJournalRepository(self._connection)

    def create_metrics_repository(self) -> SQLiteMetricsRepository:
        return SQLiteMetricsRepository(self._connection)

    def create_memory_store(self) -> SQLiteMemoryStore:
        return SQLiteMemoryStore(self._connection)

    def create_recommendation_store(self) -> SQLiteRecommendationStore:
        return SQLiteRecommendationStore(self._connection)

    def create_user_context_service(self) -> UserContextService:
        return UserContextService(
            user_repo=self.create_user_repository(),
            mood_repo=self.create_mood_repository(),
            journal_repo=self.create_journal_repository(),
        )

    # ------------------------------------------------------------------
    # LLM-backed ports
    # ------------------------------------------------------------------

    def create_content_provider(self) -> ContentProvider:
        """Content for the EXECUTE phase. Offline mode forces every agent onto its fallbacks."""
        if self._content_provider is not None:
            return self._content_provider
        if self._config.is_offline:
            logger.info("Content provider: offline (static fallbacks only)")
            return OfflineContentProvider()
        return LLMContentProvider(build_llm_from_settings(self._config, json_mode=True))

    def create_conversation_responder(self) -> ConversationResponder:
        if self._responder is not None:
            return self._responder
        if self._config.is_offline:
            return RuleBasedResponder()
        llm = build_llm_from_settings(
            self._config,
            temperature=self._config.conversation_temperature,
            max_tokens=self._config.conversation_max_tokens,
        )
        return FallbackConversationResponder(
            primary=LLMConversationResponder(llm, history_turns=self._config.conversation_history_turns),
            fallback=RuleBasedResponder(),
            timeout=self._config.provider_timeout,
        )

    def create_intent_extractor(self) -> IntentExtractor:
        if self._extractor is not None:
            return self._extractor
        if self._config.is_offline:
            return KeywordIntentExtractor()
        return FallbackIntentExtractor(
            primary=LLMIntentExtractor(build_llm_from_settings(self._config, json_mode=True)),
            fallback=KeywordIntentExtractor(),
            timeout=self._config.provider_timeout,
        )

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def build_registry(self) -> AgentRegistry:
        """Create the five wellness agents sharing one set of stores."""
        shared = dict(
            memory_store=self.create_memory_store(),
            recommendation_store=self.create_recommendation_store(),
            user_context_provider=self.create_user_context_service(),
            content_provider=self.create_content_provider(),
        )
        mood_repo = self.create_mood_repository()
        journal_repo = self.create_journal_repository()

        registry = AgentRegistry()
        registry.register(MoodMateAgent(mood_repo=mood_repo, **shared))
        registry.register(NutriCoachAgent(**shared))
        registry.register(FlexGenieAgent(**shared))
        registry.register(MindPalAgent(mood_repo=mood_repo, journal_repo=journal_repo, **shared))
        registry.register(InsightBotAgent(
            mood_repo=mood_repo,
            journal_repo=journal_repo,
            metrics_repo=self.create_metrics_repository(),
            **shared,
        ))
        logger.info("Registered agents: %s", ", ".join(registry.names()))
        return registry

    def create_orchestrator(self) -> Orchestrator:
        """Return the process-wide Orchestrator, building it on first use."""
        self._ensure_initialized()
        if self._orchestrator is None:
            self._orchestrator = Orchestrator(
                registry=self.build_registry(),
                user_context_provider=self.create_user_context_service(),
                responder=self.create_conversation_responder(),
                extractor=self.create_intent_extractor(),
                max_depth=self._config.max_collaboration_depth,
            )
        return self._orchestrator

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "ServiceFactory not initialized. Call await factory.initialize() first."
            )
