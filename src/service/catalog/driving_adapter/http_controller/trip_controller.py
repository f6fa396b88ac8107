from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, Response, status

from src.platform.logging.loguru_io import Logger
from src.service.cache.driving_adapter.http_controller.conditional_response import (
    to_http_response,
)
from src.service.catalog.app.command.create_schedule_use_case import (
    CreateScheduleUseCase,
    PriceTierInput,
)
from src.service.catalog.app.command.create_trip_use_case import CreateTripUseCase
from src.service.catalog.app.command.update_trip_use_case import UpdateTripUseCase
from src.service.catalog.app.dto.trip_read_model import TripFilters
from src.service.catalog.app.query.get_trip_use_case import GetTripUseCase
from src.service.catalog.app.query.list_schedules_use_case import ListSchedulesUseCase
from src.service.catalog.app.query.list_trips_use_case import ListTripsUseCase
from src.service.catalog.domain.entity.trip_entity import Trip
from src.service.catalog.domain.entity.trip_schedule_entity import TripSchedule
from src.service.catalog.domain.enum.trip_category import TripCategory
from src.service.catalog.domain.enum.trip_status import ScheduleStatus
from src.service.catalog.driving_adapter.http_controller.schema.trip_schema import (
    CreateScheduleRequest,
    CreateTripRequest,
    PriceTierResponse,
    ScheduleResponse,
    TripResponse,
    UpdateTripRequest,
)


router = APIRouter()


def _trip_response(trip: Trip) -> TripResponse:
    return TripResponse(
        id=trip.id,
        title=trip.title,
        description=trip.description,
        category=trip.category,
        duration_minutes=trip.duration_minutes,
        operator_id=trip.operator_id,
        amenities=trip.amenities,
        highlights=trip.highlights,
        status=trip.status,
        created_at=trip.created_at,
        updated_at=trip.updated_at,
    )


def _schedule_response(schedule: TripSchedule) -> ScheduleResponse:
    return ScheduleResponse(
        id=schedule.id,
        trip_id=schedule.trip_id,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        capacity=schedule.capacity,
        booked_seats=schedule.booked_seats,
        available_seats=schedule.available_seats,
        departure_port=schedule.departure_port,
        arrival_port=schedule.arrival_port,
        status=schedule.status.value,
        price_tiers=[
            PriceTierResponse(
                id=tier.id,
                name=tier.name,
                description=tier.description,
                amount_kobo=tier.amount_kobo,
                capacity=tier.capacity,
            )
            for tier in schedule.price_tiers
        ],
    )


# ============================ Cacheable Reads ============================


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_trips(
    category: Optional[TripCategory] = None,
    operator_id: Optional[str] = Query(None, alias='operatorId'),
    search: Optional[str] = None,
    include_schedules: bool = Query(False, alias='includeSchedules'),
    start_date: Optional[datetime] = Query(None, alias='startDate'),
    end_date: Optional[datetime] = Query(None, alias='endDate'),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    if_none_match: Optional[str] = Header(None),
    use_case: ListTripsUseCase = Depends(ListTripsUseCase.depends),
) -> Response:
    filters = TripFilters(
        category=category.value if category else None,
        operator_id=operator_id,
        search=search,
        include_schedules=include_schedules,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    result = await use_case.execute(filters=filters, if_none_match=if_none_match)
    return to_http_response(result)


@router.get('/{trip_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_trip(
    trip_id: str,
    if_none_match: Optional[str] = Header(None),
    use_case: GetTripUseCase = Depends(GetTripUseCase.depends),
) -> Response:
    result = await use_case.execute(trip_id=trip_id, if_none_match=if_none_match)
    return to_http_response(result)


@router.get('/{trip_id}/schedules', status_code=status.HTTP_200_OK)
@Logger.io
async def list_schedules(
    trip_id: str,
    start_date: Optional[datetime] = Query(None, alias='startDate'),
    end_date: Optional[datetime] = Query(None, alias='endDate'),
    schedule_status: Optional[ScheduleStatus] = Query(None, alias='status'),
    if_none_match: Optional[str] = Header(None),
    use_case: ListSchedulesUseCase = Depends(ListSchedulesUseCase.depends),
) -> Response:
    result = await use_case.execute(
        trip_id=trip_id,
        start_date=start_date,
        end_date=end_date,
        status=schedule_status.value if schedule_status else None,
        if_none_match=if_none_match,
    )
    return to_http_response(result)


# ============================ Writes (invalidate on success) ============================


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_trip(
    request: CreateTripRequest,
    use_case: CreateTripUseCase = Depends(CreateTripUseCase.depends),
) -> TripResponse:
    trip = await use_case.create_trip(
        title=request.title,
        description=request.description,
        category=request.category,
        duration_minutes=request.duration_minutes,
        operator_id=request.operator_id,
        amenities=request.amenities,
        highlights=request.highlights,
    )
    return _trip_response(trip)


@router.patch('/{trip_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def update_trip(
    trip_id: str,
    request: UpdateTripRequest,
    use_case: UpdateTripUseCase = Depends(UpdateTripUseCase.depends),
) -> TripResponse:
    trip = await use_case.update_trip(
        trip_id=trip_id, changes=request.model_dump(exclude_unset=True)
    )
    return _trip_response(trip)


@router.post('/{trip_id}/schedules', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_schedule(
    trip_id: str,
    request: CreateScheduleRequest,
    use_case: CreateScheduleUseCase = Depends(CreateScheduleUseCase.depends),
) -> ScheduleResponse:
    schedule = await use_case.create_schedule(
        trip_id=trip_id,
        start_time=request.start_time,
        end_time=request.end_time,
        capacity=request.capacity,
        departure_port=request.departure_port,
        arrival_port=request.arrival_port,
        price_tiers=[
            PriceTierInput(
                name=tier.name,
                amount_kobo=tier.price_kobo,
                description=tier.description,
                capacity=tier.capacity,
            )
            for tier in request.price_tiers
        ],
    )
    return _schedule_response(schedule)
