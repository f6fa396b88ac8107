from datetime import datetime
from typing import List, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cache.app.interface.i_cache_invalidator import ICacheInvalidator
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.catalog.app.interface.i_trip_command_repo import ITripCommandRepo
from src.service.catalog.domain.entity.trip_schedule_entity import PriceTier, TripSchedule


@attrs.define(frozen=True)
class PriceTierInput:
    name: str
    amount_kobo: int
    description: Optional[str] = None
    capacity: Optional[int] = None


class CreateScheduleUseCase:
    def __init__(
        self, *, trip_command_repo: ITripCommandRepo, cache_invalidator: ICacheInvalidator
    ) -> None:
        self.trip_command_repo = trip_command_repo
        self.cache_invalidator = cache_invalidator
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        trip_command_repo: ITripCommandRepo = Depends(Provide[Container.trip_command_repo]),
        cache_invalidator: ICacheInvalidator = Depends(Provide[Container.cache_invalidator]),
    ) -> Self:
        return cls(trip_command_repo=trip_command_repo, cache_invalidator=cache_invalidator)

    @Logger.io
    async def create_schedule(
        self,
        *,
        trip_id: str,
        start_time: datetime,
        end_time: datetime,
        capacity: int,
        departure_port: str,
        arrival_port: str,
        price_tiers: List[PriceTierInput],
    ) -> TripSchedule:
        """
        Create a departure with its price tiers.

        A new schedule changes the schedule list, the price range shown in
        listings and the upcoming schedules on the detail page, so all three
        namespaces are bumped.

        Raises:
            NotFoundError: Unknown trip
            DomainError: Invalid time window or tier price
            BackendUnavailableError: Schedule committed but caches were not invalidated
        """
        with self.tracer.start_as_current_span(
            'use_case.create_schedule', attributes={'trip.id': trip_id}
        ):
            trip = await self.trip_command_repo.get_trip(trip_id=trip_id)
            if trip is None:
                raise NotFoundError(f'Trip not found: {trip_id}')

            schedule = TripSchedule.create(
                id=uuid_utils.uuid7(),
                trip_id=trip.id,
                start_time=start_time,
                end_time=end_time,
                capacity=capacity,
                departure_port=departure_port,
                arrival_port=arrival_port,
                price_tiers=[
                    PriceTier(
                        id=uuid_utils.uuid7(),
                        name=tier.name,
                        amount_kobo=tier.amount_kobo,
                        description=tier.description,
                        capacity=tier.capacity,
                    )
                    for tier in price_tiers
                ],
            )
            created = await self.trip_command_repo.create_schedule(schedule=schedule)
            Logger.base.info(
                f'📅 [CREATE_SCHEDULE] Schedule {created.id} for trip {trip_id} '
                f'with {len(created.price_tiers)} tiers'
            )

            await self.cache_invalidator.invalidate(
                CacheNamespace.SCHEDULES, CacheNamespace.TRIPS, CacheNamespace.TRIP_DETAIL
            )
            return created
