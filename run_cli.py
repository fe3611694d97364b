"""
Run the wellness agents CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    mood             Record a mood; MoodMate runs and its collaborators follow
    journal          Save a journal entry through MindPal
    run              Run one agent directly (--input '{"energyLevel": 4}')
    insights         Run InsightBot's analysis
    chat             Interactive chat with one agent
    recommendations  List active recommendations
    status           Show agents and their memory counters

Examples:
    python run_cli.py mood stressed
    python run_cli.py chat MindPal
    LLM_PROVIDER=offline python run_cli.py insights

Environment variables (all optional):
    LLM_PROVIDER        "openai", "groq", "ollama" or "offline"; controls ALL LLM components
    DB_PATH             SQLite database file path (default: wellness.db)
    DEFAULT_USER_ID     User the commands act on without --user (default: 1)
    LOG_LEVEL           Logging level (default: INFO)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app
from infrastructure.config import Settings, configure_logging

if __name__ == "__main__":
    configure_logging(Settings.from_env().log_level)
    app()
