"""InsightBot analysis endpoint."""

from fastapi import APIRouter, Depends

from agent.orchestrator import Orchestrator
from adapters.rest.dependencies import get_orchestrator

router = APIRouter(tags=["insights"])


@router.get("/insights/{user_id}")
async def get_insights(
    user_id: int,
    orchestrator: Orchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.run_insights_analysis(user_id)
    return result.to_dict()
