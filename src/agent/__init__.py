"""
agent - Wellness agents and their orchestration.

Contains the shared PLAN → THINK → EXECUTE engine, the five capabilities,
the agent registry and the orchestrator with its collaboration queue.
Depends on domain/ and application/. Never imports from infrastructure/.
"""
