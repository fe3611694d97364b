"""
agent.registry - Agent registration and discovery.

An explicit object passed to the orchestrator and request handlers, so
tests can build isolated registries with stub agents.
"""

from __future__ import annotations

import logging
from typing import Iterator

from agent.base import WellnessAgent

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Manages agent registration by name."""

    def __init__(self, agents: list[WellnessAgent] | None = None):
        self._agents: dict[str, WellnessAgent] = {}
        for agent in agents or []:
            self.register(agent)

    def register(self, agent: WellnessAgent) -> None:
        """Register an agent by its name. Re-registering replaces the old one."""
        self._agents[agent.name] = agent
        logger.debug("Registered agent: %s", agent.name)

    def get(self, name: str) -> WellnessAgent:
        """Get an agent by name."""
        if name not in self._agents:
            raise KeyError(f"Agent '{name}' not registered")
        return self._agents[name]

    def all(self) -> list[WellnessAgent]:
        """Return all registered agents, in registration order."""
        return list(self._agents.values())

    def names(self) -> list[str]:
        return list(self._agents.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._agents

    def __iter__(self) -> Iterator[WellnessAgent]:
        return iter(self._agents.values())

    def __len__(self) -> int:
        return len(self._agents)
