from typing import Any, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cache.app.query.conditional_read_use_case import ConditionalReadUseCase
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.cache.domain.conditional_result import ConditionalResult
from src.service.catalog.app.interface.i_trip_query_repo import ITripQueryRepo


class GetTripUseCase:
    def __init__(
        self, *, trip_query_repo: ITripQueryRepo, conditional_reader: ConditionalReadUseCase
    ) -> None:
        self.trip_query_repo = trip_query_repo
        self.conditional_reader = conditional_reader

    @classmethod
    @inject
    def depends(
        cls,
        trip_query_repo: ITripQueryRepo = Depends(Provide[Container.trip_query_repo]),
        conditional_reader: ConditionalReadUseCase = Depends(
            Provide[Container.conditional_read_use_case]
        ),
    ) -> Self:
        return cls(trip_query_repo=trip_query_repo, conditional_reader=conditional_reader)

    @Logger.io
    async def execute(self, *, trip_id: str, if_none_match: Optional[str] = None) -> ConditionalResult:
        """
        Raises:
            NotFoundError: Trip does not exist (only discovered on a cache miss)
        """

        async def compute() -> dict[str, Any]:
            detail = await self.trip_query_repo.get_trip_detail(trip_id=trip_id)
            if detail is None:
                raise NotFoundError(f'Trip not found: {trip_id}')
            return {'trip': attrs.asdict(detail)}

        return await self.conditional_reader.read(
            namespace=CacheNamespace.TRIP_DETAIL,
            filters={'id': trip_id},
            if_none_match=if_none_match,
            compute=compute,
        )
