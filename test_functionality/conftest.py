"""
Shared pytest setup.

Puts src/ on sys.path (same as the run_*.py entry points) and provides an
offline Settings pointing at a throwaway SQLite file, so every agent runs
against real repositories with its static fallbacks.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from infrastructure.config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(llm_provider="offline", db_path=str(tmp_path / "wellness_test.db"))
