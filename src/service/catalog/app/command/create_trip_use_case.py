from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cache.app.interface.i_cache_invalidator import ICacheInvalidator
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.catalog.app.interface.i_trip_command_repo import ITripCommandRepo
from src.service.catalog.domain.entity.trip_entity import Trip
from src.service.catalog.domain.enum.trip_category import TripCategory


class CreateTripUseCase:
    """
    Persist a new trip, then invalidate trip listings.

    The trip is committed before the bump; a failed bump raises
    BackendUnavailableError so the caller learns listings may be stale.
    """

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
    async def create_trip(
        self,
        *,
        title: str,
        description: str,
        category: TripCategory,
        duration_minutes: int,
        operator_id: Optional[uuid_utils.UUID] = None,
        amenities: Optional[List[str]] = None,
        highlights: Optional[List[str]] = None,
    ) -> Trip:
        trip_id = uuid_utils.uuid7()
        with self.tracer.start_as_current_span(
            'use_case.create_trip', attributes={'trip.id': str(trip_id)}
        ):
            trip = Trip.create(
                id=trip_id,
                title=title,
                description=description,
                category=category,
                duration_minutes=duration_minutes,
                operator_id=operator_id,
                amenities=amenities,
                highlights=highlights,
            )
            created = await self.trip_command_repo.create_trip(trip=trip)
            Logger.base.info(f'🛥️ [CREATE_TRIP] Trip {created.id} created')

            await self.cache_invalidator.invalidate(CacheNamespace.TRIPS)
            return created
