from typing import Any, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cache.app.query.conditional_read_use_case import ConditionalReadUseCase
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.cache.domain.conditional_result import ConditionalResult
from src.service.catalog.app.dto.trip_read_model import TripFilters
from src.service.catalog.app.interface.i_trip_query_repo import ITripQueryRepo


class ListTripsUseCase:
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

    @staticmethod
    def cache_filters(filters: TripFilters) -> dict[str, Any]:
        """Key segments in fixed order; every filter that changes the body must appear"""
        return {
            'cat': filters.category,
            'op': filters.operator_id,
            'q': filters.search,
            'incSchedules': filters.include_schedules,
            'start': filters.start_date,
            'end': filters.end_date,
            'l': filters.limit,
            'o': filters.offset,
        }

    @Logger.io
    async def execute(
        self, *, filters: TripFilters, if_none_match: Optional[str] = None
    ) -> ConditionalResult:
        async def compute() -> dict[str, Any]:
            page = await self.trip_query_repo.list_trips(filters=filters)
            Logger.base.info(f'🔎 [LIST_TRIPS] {len(page.trips)} of {page.total} trips loaded')
            return {
                'trips': [attrs.asdict(trip) for trip in page.trips],
                'pagination': {
                    'total': page.total,
                    'limit': filters.limit,
                    'offset': filters.offset,
                    'has_more': filters.offset + filters.limit < page.total,
                },
            }

        return await self.conditional_reader.read(
            namespace=CacheNamespace.TRIPS,
            filters=self.cache_filters(filters),
            if_none_match=if_none_match,
            compute=compute,
        )
