from datetime import datetime
from typing import Any, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cache.app.query.conditional_read_use_case import ConditionalReadUseCase
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.cache.domain.conditional_result import ConditionalResult
from src.service.catalog.app.interface.i_trip_query_repo import ITripQueryRepo


class ListSchedulesUseCase:
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
    async def execute(
        self,
        *,
        trip_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: Optional[str] = None,
        if_none_match: Optional[str] = None,
    ) -> ConditionalResult:
        async def compute() -> dict[str, Any]:
            schedules = await self.trip_query_repo.list_schedules(
                trip_id=trip_id, start_date=start_date, end_date=end_date, status=status
            )
            return {'schedules': [attrs.asdict(s) for s in schedules]}

        return await self.conditional_reader.read(
            namespace=CacheNamespace.SCHEDULES,
            filters={'trip': trip_id, 'start': start_date, 'end': end_date, 'status': status},
            if_none_match=if_none_match,
            compute=compute,
        )
