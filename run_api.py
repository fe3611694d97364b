"""
Run the wellness agents REST API.

Usage:
    python run_api.py

Environment variables (all optional):
    LLM_PROVIDER        "openai", "groq", "ollama" or "offline" (static fallbacks only)
    LLM_MODEL_OPENAI    Model name when LLM_PROVIDER=openai (default: gpt-4.1-mini)
    LLM_MODEL_GROQ      Model name when LLM_PROVIDER=groq (default: llama-3.3-70b-versatile)
    LLM_MODEL_OLLAMA    Model name when LLM_PROVIDER=ollama (default: llama3.2)
    OPENAI_API_KEY      Required when LLM_PROVIDER=openai
    GROQ_API_KEY        Required when LLM_PROVIDER=groq
    OLLAMA_BASE_URL     Ollama server URL (default: http://localhost:11434/)
    DB_PATH             SQLite database file path (default: wellness.db)
    LOG_LEVEL           Logging level (default: INFO)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

from infrastructure.config import Settings, configure_logging

if __name__ == "__main__":
    configure_logging(Settings.from_env().log_level)
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
