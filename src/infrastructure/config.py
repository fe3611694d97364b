"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment or passed
explicitly in tests. Also owns the process-wide logging setup used by the
entry points.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the wellness agents.

    No module-level globals: construct via from_env() or pass explicitly
    in tests.
    """

    # ── Centralized LLM Provider ────────────────────────────────
    # One setting controls ALL LLM components (content provider,
    # conversation responder, intent extractor).
    # Allowed: "openai", "groq", "ollama", "offline"
    llm_provider: str = "ollama"

    # Model names: only the one matching llm_provider is used.
    llm_model_ollama: str = "llama3.2"
    llm_model_openai: str = "gpt-4.1-mini"
    llm_model_groq: str = "llama-3.3-70b-versatile"

    # Connection details
    ollama_base_url: str = "http://localhost:11434/"
    groq_api_key: str = ""
    openai_api_key: str = ""

    # Database
    db_path: str = "wellness.db"

    # Agents
    provider_timeout: float = 20.0
    max_collaboration_depth: int = 3

    # Conversation
    conversation_history_turns: int = 6
    conversation_temperature: float = 0.7
    conversation_max_tokens: int = 500

    # Seed user created at startup
    default_user_id: int = 1
    default_user_name: str = "Alex"

    log_level: str = "INFO"

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "openai":
            return self.llm_model_openai
        elif self.llm_provider == "groq":
            return self.llm_model_groq
        return self.llm_model_ollama

    @property
    def is_offline(self) -> bool:
        return self.llm_provider == "offline"

    @classmethod
    def from_env(cls) -> Settings:
        """Build Settings from .env and the process environment."""
        from dotenv import load_dotenv
        load_dotenv()

        return cls(
            llm_provider=os.getenv("LLM_PROVIDER", "ollama").lower(),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-4.1-mini"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            db_path=os.getenv("DB_PATH", "wellness.db"),
            provider_timeout=float(os.getenv("PROVIDER_TIMEOUT", "20")),
            max_collaboration_depth=int(os.getenv("MAX_COLLABORATION_DEPTH", "3")),
            conversation_history_turns=int(os.getenv("CONVERSATION_HISTORY_TURNS", "6")),
            conversation_temperature=float(os.getenv("CONVERSATION_TEMPERATURE", "0.7")),
            conversation_max_tokens=int(os.getenv("CONVERSATION_MAX_TOKENS", "500")),
            default_user_id=int(os.getenv("DEFAULT_USER_ID", "1")),
            default_user_name=os.getenv("DEFAULT_USER_NAME", "Alex"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Apply the project-wide log format. Called once by each entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
