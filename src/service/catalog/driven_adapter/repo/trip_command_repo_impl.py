from typing import AsyncContextManager, Callable, Optional
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.catalog.app.interface.i_trip_command_repo import ITripCommandRepo
from src.service.catalog.domain.entity.trip_entity import Trip
from src.service.catalog.domain.entity.trip_schedule_entity import TripSchedule
from src.service.catalog.domain.enum.trip_category import TripCategory
from src.service.catalog.domain.enum.trip_status import TripStatus
from src.service.catalog.driven_adapter.model.trip_model import (
    PriceTierModel,
    TripModel,
    TripScheduleModel,
)


def _db_uuid(value: UUID) -> uuid.UUID:
    return uuid.UUID(str(value))


class TripCommandRepoImpl(ITripCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def create_trip(self, *, trip: Trip) -> Trip:
        async with self.session_factory() as session:
            trip_model = TripModel(
                id=_db_uuid(trip.id),
                operator_id=_db_uuid(trip.operator_id) if trip.operator_id else None,
                title=trip.title,
                description=trip.description,
                category=trip.category.value,
                duration_minutes=trip.duration_minutes,
                amenities=list(trip.amenities),
                highlights=list(trip.highlights),
                status=trip.status.value,
            )
            session.add(trip_model)
            await session.commit()
            await session.refresh(trip_model)

            return self._model_to_entity(trip_model)

    @Logger.io
    async def get_trip(self, *, trip_id: str) -> Optional[Trip]:
        try:
            trip_uuid = uuid.UUID(trip_id)
        except ValueError:
            return None

        async with self.session_factory() as session:
            trip_model = await session.get(TripModel, trip_uuid)
            return self._model_to_entity(trip_model) if trip_model else None

    @Logger.io
    async def update_trip(self, *, trip: Trip) -> Trip:
        async with self.session_factory() as session:
            trip_model = await session.get(TripModel, _db_uuid(trip.id))
            if trip_model is None:
                raise NotFoundError(f'Trip not found: {trip.id}')

            trip_model.title = trip.title
            trip_model.description = trip.description
            trip_model.category = trip.category.value
            trip_model.duration_minutes = trip.duration_minutes
            trip_model.amenities = list(trip.amenities)
            trip_model.highlights = list(trip.highlights)
            trip_model.status = trip.status.value

            await session.commit()
            await session.refresh(trip_model)
            return self._model_to_entity(trip_model)

    @Logger.io
    async def create_schedule(self, *, schedule: TripSchedule) -> TripSchedule:
        async with self.session_factory() as session:
            async with session.begin():
                session.add(
                    TripScheduleModel(
                        id=_db_uuid(schedule.id),
                        trip_id=_db_uuid(schedule.trip_id),
                        start_time=schedule.start_time,
                        end_time=schedule.end_time,
                        capacity=schedule.capacity,
                        booked_seats=schedule.booked_seats,
                        departure_port=schedule.departure_port,
                        arrival_port=schedule.arrival_port,
                        status=schedule.status.value,
                    )
                )
                # Flush parent row before tiers reference it
                await session.flush()
                session.add_all(
                    PriceTierModel(
                        id=_db_uuid(tier.id),
                        trip_schedule_id=_db_uuid(schedule.id),
                        name=tier.name,
                        description=tier.description,
                        amount_kobo=tier.amount_kobo,
                        capacity=tier.capacity,
                    )
                    for tier in schedule.price_tiers
                )

        return schedule

    def _model_to_entity(self, trip_model: TripModel) -> Trip:
        return Trip(
            id=UUID(str(trip_model.id)),
            operator_id=UUID(str(trip_model.operator_id)) if trip_model.operator_id else None,
            title=trip_model.title,
            description=trip_model.description,
            category=TripCategory(trip_model.category),
            duration_minutes=trip_model.duration_minutes,
            amenities=list(trip_model.amenities or []),
            highlights=list(trip_model.highlights or []),
            status=TripStatus(trip_model.status),
            created_at=trip_model.created_at,
            updated_at=trip_model.updated_at,
        )
