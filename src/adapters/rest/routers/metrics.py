"""Self-reported daily wellness metrics."""

from fastapi import APIRouter, Depends, Query

from domain.entities import WellnessMetrics
from factory import ServiceFactory
from adapters.rest.dependencies import get_factory
from adapters.rest.schemas import MetricsBody, MetricsOut

router = APIRouter(tags=["wellness-metrics"])


@router.post("/wellness-metrics", response_model=MetricsOut)
async def save_metrics(
    body: MetricsBody,
    factory: ServiceFactory = Depends(get_factory),
):
    saved = await factory.create_metrics_repository().save(WellnessMetrics(
        user_id=body.user_id,
        energy_level=body.energy_level,
        stress_level=body.stress_level,
        focus_time=body.focus_time,
        hydration_glasses=body.hydration_glasses,
    ))
    return MetricsOut.from_entity(saved)


@router.get("/wellness-metrics/{user_id}", response_model=list[MetricsOut])
async def get_metrics(
    user_id: int,
    days: int = Query(7, ge=1, le=365),
    factory: ServiceFactory = Depends(get_factory),
):
    metrics = await factory.create_metrics_repository().get_recent(user_id, days)
    return [MetricsOut.from_entity(m) for m in metrics]
