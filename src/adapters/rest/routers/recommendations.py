"""Recommendation lifecycle: soft deactivation."""

from fastapi import APIRouter, Depends, HTTPException

from factory import ServiceFactory
from adapters.rest.dependencies import get_factory

router = APIRouter(tags=["recommendations"])


@router.post("/recommendations/{recommendation_id}/deactivate")
async def deactivate_recommendation(
    recommendation_id: int,
    factory: ServiceFactory = Depends(get_factory),
):
    store = factory.create_recommendation_store()
    if await store.get_by_id(recommendation_id) is None:
        raise HTTPException(status_code=404, detail="Recommendation not found")
    await store.deactivate(recommendation_id)
    return {"success": True, "id": recommendation_id}
