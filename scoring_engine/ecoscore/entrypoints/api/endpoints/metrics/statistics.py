"""API endpoints for model, cache and error statistics."""

from typing import List

from fastapi import APIRouter, Depends

from ecoscore.core.models import ErrorLogEntry
from ecoscore.entrypoints.api.schemas.health import MetricsResponse
from ecoscore.setup.container import ServiceContainer
from ecoscore.setup.services import get_container

router = APIRouter(tags=["Metrics"])


@router.get("", summary="Model, cache and tracker statistics.", response_model=MetricsResponse)
async def metrics(container: ServiceContainer = Depends(get_container)) -> MetricsResponse:
    return MetricsResponse(
        model=await container.model_service.get_model_metrics(),
        cache=await container.cache.stats(),
        tracker=await container.metrics.get_metrics(),
    )


@router.get("/errors", summary="Recent pipeline errors, newest first.", response_model=List[ErrorLogEntry])
async def errors(container: ServiceContainer = Depends(get_container)) -> List[ErrorLogEntry]:
    return await container.cache.get_error_logs()
