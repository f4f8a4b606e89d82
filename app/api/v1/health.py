"""Health check endpoint with a users manager connectivity probe."""

from typing import Annotated

import grpc
from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings
from app.core.rpc_client import check_users_service_connected, get_users_channel
from app.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(
    channel: Annotated[grpc.Channel, Depends(get_users_channel)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Return gateway health and whether the users manager is reachable.
    Used by load balancers and monitoring.
    """
    connected = check_users_service_connected(
        channel, settings.USERS_GRPC_HEALTH_TIMEOUT_SEC
    )
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        users_service="connected" if connected else "disconnected",
    )
