"""
Trip Command Repository Interface - CQRS Write Side
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.service.catalog.domain.entity.trip_entity import Trip
from src.service.catalog.domain.entity.trip_schedule_entity import TripSchedule


class ITripCommandRepo(ABC):
    @abstractmethod
    async def create_trip(self, *, trip: Trip) -> Trip:
        pass

    @abstractmethod
    async def get_trip(self, *, trip_id: str) -> Optional[Trip]:
        pass

    @abstractmethod
    async def update_trip(self, *, trip: Trip) -> Trip:
        pass

    @abstractmethod
    async def create_schedule(self, *, schedule: TripSchedule) -> TripSchedule:
        """Persist the schedule and its price tiers in one transaction."""
        pass
