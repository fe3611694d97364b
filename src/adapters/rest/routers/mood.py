"""Mood check-ins: run MoodMate and its collaborators, list recent entries."""

from fastapi import APIRouter, Depends

from agent.orchestrator import Orchestrator
from factory import ServiceFactory
from adapters.rest.dependencies import get_factory, get_orchestrator
from adapters.rest.schemas import MoodBody, MoodEntryOut

router = APIRouter(tags=["mood"])

RECENT_MOOD_LIMIT = 30


@router.post("/mood")
async def update_mood(
    body: MoodBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """
    Record a mood through MoodMate and drain the collaborations it triggers.

    Returns the MoodMate run summary as `primary` and every collaborating
    agent's run summary under `collaborations`.
    """
    result = await orchestrator.run_mood_update(body.mood.strip().lower(), body.user_id)
    return result.to_dict()


@router.get("/mood/{user_id}", response_model=list[MoodEntryOut])
async def get_mood_entries(
    user_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    entries = await factory.create_mood_repository().get_recent(user_id, RECENT_MOOD_LIMIT)
    return [MoodEntryOut.from_entity(e) for e in entries]
