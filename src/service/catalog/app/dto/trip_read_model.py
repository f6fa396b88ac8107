"""
Read models returned by the trip query repo.

They are plain attrs records so `attrs.asdict` produces the cached JSON body.
"""

from datetime import datetime
from typing import List, Optional

import attrs
from uuid_utils import UUID


@attrs.define(frozen=True)
class TripFilters:
    category: Optional[str] = None
    operator_id: Optional[str] = None
    search: Optional[str] = None
    include_schedules: bool = False
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = 20
    offset: int = 0


@attrs.define(frozen=True)
class PricingSummary:
    min_price_kobo: int
    max_price_kobo: int
    tiers: int


@attrs.define(frozen=True)
class PriceTierView:
    id: UUID
    name: str
    description: Optional[str]
    amount_kobo: int
    capacity: Optional[int]


@attrs.define(frozen=True)
class ScheduleView:
    id: UUID
    start_time: datetime
    end_time: datetime
    departure_port: str
    arrival_port: str
    capacity: int
    booked_seats: int
    available_seats: int
    status: str
    price_tiers: List[PriceTierView] = attrs.field(factory=list)


@attrs.define(frozen=True)
class TripSummary:
    id: UUID
    title: str
    description: str
    category: str
    duration_minutes: int
    operator_id: Optional[UUID]
    amenities: List[str]
    highlights: List[str]
    pricing: PricingSummary
    created_at: datetime
    schedules: Optional[List[ScheduleView]] = None


@attrs.define(frozen=True)
class TripPage:
    trips: List[TripSummary]
    total: int


@attrs.define(frozen=True)
class TripStatistics:
    upcoming_schedules: int
    total_capacity: int
    total_booked_seats: int


@attrs.define(frozen=True)
class TripDetail:
    id: UUID
    title: str
    description: str
    category: str
    duration_minutes: int
    operator_id: Optional[UUID]
    amenities: List[str]
    highlights: List[str]
    status: str
    schedules: List[ScheduleView]
    statistics: TripStatistics
    created_at: datetime
    updated_at: datetime
