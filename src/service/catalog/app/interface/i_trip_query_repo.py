"""
Trip Query Repository Interface - CQRS Read Side
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.service.catalog.app.dto.trip_read_model import (
    ScheduleView,
    TripDetail,
    TripFilters,
    TripPage,
)


class ITripQueryRepo(ABC):
    @abstractmethod
    async def list_trips(self, *, filters: TripFilters) -> TripPage:
        """Active trips matching the filters, newest first, with price range."""
        pass

    @abstractmethod
    async def get_trip_detail(self, *, trip_id: str) -> Optional[TripDetail]:
        """Trip with upcoming schedules and statistics, None when absent."""
        pass

    @abstractmethod
    async def list_schedules(
        self,
        *,
        trip_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> List[ScheduleView]:
        pass
