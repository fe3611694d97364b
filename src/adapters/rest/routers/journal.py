"""Journal entries, saved through MindPal so its insights stay current."""

from fastapi import APIRouter, Depends

from agent.orchestrator import Orchestrator
from factory import ServiceFactory
from adapters.rest.dependencies import get_factory, get_orchestrator
from adapters.rest.schemas import JournalBody, JournalEntryOut, JournalSavedOut

router = APIRouter(tags=["journal"])

RECENT_JOURNAL_LIMIT = 10


@router.post("/journal", response_model=JournalSavedOut)
async def save_journal_entry(
    body: JournalBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    entry = await orchestrator.save_journal_entry(body.user_id, body.content)
    return JournalSavedOut(success=True, entry_id=entry.id)


@router.get("/journal/{user_id}", response_model=list[JournalEntryOut])
async def get_journal_entries(
    user_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    entries = await factory.create_journal_repository().get_recent(user_id, RECENT_JOURNAL_LIMIT)
    return [JournalEntryOut.from_entity(e) for e in entries]
