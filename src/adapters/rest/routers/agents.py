"""Agent endpoints: status, direct runs, chat and per-agent recommendations."""

from fastapi import APIRouter, Depends, HTTPException

from agent.orchestrator import Orchestrator
from domain.exceptions import AgentNotFoundError
from domain.models import ChatTurn
from factory import ServiceFactory
from adapters.rest.dependencies import get_factory, get_orchestrator
from adapters.rest.schemas import AgentRunBody, ChatBody

router = APIRouter(prefix="/agents", tags=["agents"])


@router.get("/status")
async def agent_status(
    user_id: int | None = None,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    """Descriptors of all registered agents; memory counters when `user_id` is given."""
    return await orchestrator.agent_status(user_id)


@router.post("/{agent_name}/run")
async def run_agent(
    agent_name: str,
    body: AgentRunBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    try:
        result = await orchestrator.run_agent(agent_name, body.input, body.user_id)
    except AgentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return result.to_dict()


@router.post("/{agent_name}/chat")
async def chat(
    agent_name: str,
    body: ChatBody,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")

    history = [ChatTurn(role=t.role, content=t.content) for t in body.conversation_history]
    try:
        result = await orchestrator.handle_agent_conversation(
            agent_name, body.message, history, body.user_id,
        )
    except AgentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return result.to_dict()


@router.get("/{agent_name}/recommendations/{user_id}")
async def get_recommendations(
    agent_name: str,
    user_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    store = factory.create_recommendation_store()
    recommendations = await store.list_active(user_id, agent_name)
    return [r.to_dict() for r in recommendations]
