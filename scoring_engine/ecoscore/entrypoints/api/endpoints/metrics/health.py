"""API endpoint for health checks."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ecoscore.entrypoints.api.schemas.health import HealthStatusResponse
from ecoscore.setup.container import ServiceContainer
from ecoscore.setup.services import get_container

router = APIRouter(tags=["Metrics"])


@router.get(
    "",
    summary="API health check.",
    response_model=HealthStatusResponse,
)
async def health_check(
    container: ServiceContainer = Depends(get_container),
) -> HealthStatusResponse:
    """Returns the health status of the API."""

    return HealthStatusResponse(
        status="healthy",
        model_state=container.model_service.state.value,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
