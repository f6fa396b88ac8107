from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Response, status

from src.platform.config.di import Container
from src.service.telemetry.app.telemetry_forwarder import TelemetryForwarder
from src.service.telemetry.driving_adapter.http_controller.schema.telemetry_schema import (
    TelemetryEventRequest,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_204_NO_CONTENT)
@inject
async def track_event(
    request: TelemetryEventRequest,
    telemetry_forwarder: TelemetryForwarder = Depends(Provide[Container.telemetry_forwarder]),
) -> Response:
    # Accepted even when dropped; analytics never fail the caller
    telemetry_forwarder.submit(request.model_dump(exclude_none=True))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
