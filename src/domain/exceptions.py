"""
domain.exceptions - Custom exception hierarchy for the wellness agents.

All domain-level errors inherit from DomainError so callers can catch
broad or specific exceptions as needed. Agent failures carry an ErrorKind
so capabilities pick their fallback message by kind, never by message text.
"""

from __future__ import annotations

import asyncio
from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories an agent run can end with."""
    DATA_UNAVAILABLE = "data_unavailable"
    INVALID_INPUT = "invalid_input"
    INSUFFICIENT_DATA = "insufficient_data"
    TIMEOUT = "timeout"
    NO_APPLICABLE_ACTION = "no_applicable_action"
    UNKNOWN_STEP = "unknown_step"
    INTERNAL = "internal"


class DomainError(Exception):
    """Base exception for all domain-level errors."""


class RepositoryError(DomainError):
    """Raised when a database operation fails."""


class ContentProviderError(DomainError):
    """Raised when the content provider cannot produce usable content."""


class IntentExtractionError(DomainError):
    """Raised when a chat message cannot be turned into a structured intent."""


class AgentNotFoundError(DomainError):
    """Raised when the orchestrator is asked to run an unregistered agent."""

    def __init__(self, name: str):
        super().__init__(f"Agent {name} not found")
        self.name = name


class AgentError(DomainError):
    """Raised inside an agent run; classified by kind."""

    def __init__(self, kind: ErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind


def classify_error(error: BaseException) -> ErrorKind:
    """Map any exception escaping an agent run onto an ErrorKind."""
    if isinstance(error, AgentError):
        return error.kind
    if isinstance(error, RepositoryError):
        return ErrorKind.DATA_UNAVAILABLE
    if isinstance(error, asyncio.TimeoutError):
        return ErrorKind.TIMEOUT
    return ErrorKind.INTERNAL
