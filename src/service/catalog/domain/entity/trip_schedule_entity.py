from datetime import datetime, timezone
from typing import List, Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import DomainError
from src.service.catalog.domain.enum.trip_status import ScheduleStatus


MIN_TIER_PRICE_KOBO = 100


@attrs.define(frozen=True)
class PriceTier:
    id: UUID
    name: str
    amount_kobo: int
    description: Optional[str] = None
    capacity: Optional[int] = None


@attrs.define
class TripSchedule:
    id: UUID
    trip_id: UUID
    start_time: datetime
    end_time: datetime
    capacity: int
    departure_port: str
    arrival_port: str
    booked_seats: int = 0
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    price_tiers: List[PriceTier] = attrs.field(factory=list)
    created_at: Optional[datetime] = None

    @property
    def available_seats(self) -> int:
        return max(self.capacity - self.booked_seats, 0)

    @classmethod
    def create(
        cls,
        *,
        id: UUID,
        trip_id: UUID,
        start_time: datetime,
        end_time: datetime,
        capacity: int,
        departure_port: str,
        arrival_port: str,
        price_tiers: List[PriceTier],
        now: Optional[datetime] = None,
    ) -> 'TripSchedule':
        """
        Raises:
            DomainError: end before start, start in the past, or a tier below the minimum price
        """
        now = now or datetime.now(timezone.utc)
        if start_time >= end_time:
            raise DomainError('End time must be after start time')
        if start_time < now:
            raise DomainError('Cannot create schedule in the past')
        for tier in price_tiers:
            if tier.amount_kobo < MIN_TIER_PRICE_KOBO:
                raise DomainError(f'Price tier {tier.name!r} is below {MIN_TIER_PRICE_KOBO} kobo')

        return cls(
            id=id,
            trip_id=trip_id,
            start_time=start_time,
            end_time=end_time,
            capacity=capacity,
            departure_port=departure_port,
            arrival_port=arrival_port,
            booked_seats=0,
            status=ScheduleStatus.SCHEDULED,
            price_tiers=list(price_tiers),
            created_at=now,
        )
