from typing import Any, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cache.app.interface.i_cache_invalidator import ICacheInvalidator
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.catalog.app.interface.i_trip_command_repo import ITripCommandRepo
from src.service.catalog.domain.entity.trip_entity import Trip


class UpdateTripUseCase:
    def __init__(
        self, *, trip_command_repo: ITripCommandRepo, cache_invalidator: ICacheInvalidator
    ) -> None:
        self.trip_command_repo = trip_command_repo
        self.cache_invalidator = cache_invalidator

    @classmethod
    @inject
    def depends(
        cls,
        trip_command_repo: ITripCommandRepo = Depends(Provide[Container.trip_command_repo]),
        cache_invalidator: ICacheInvalidator = Depends(Provide[Container.cache_invalidator]),
    ) -> Self:
        return cls(trip_command_repo=trip_command_repo, cache_invalidator=cache_invalidator)

    @Logger.io
    async def update_trip(self, *, trip_id: str, changes: dict[str, Any]) -> Trip:
        """
        Raises:
            NotFoundError: Unknown trip
            BackendUnavailableError: Update committed but caches were not invalidated
        """
        trip = await self.trip_command_repo.get_trip(trip_id=trip_id)
        if trip is None:
            raise NotFoundError(f'Trip not found: {trip_id}')

        updated = await self.trip_command_repo.update_trip(trip=trip.apply_changes(changes))

        # Listing rows and the detail page both render trip fields
        await self.cache_invalidator.invalidate(CacheNamespace.TRIPS, CacheNamespace.TRIP_DETAIL)
        return updated
