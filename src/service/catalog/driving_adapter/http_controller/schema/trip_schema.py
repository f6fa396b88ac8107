from datetime import datetime
from typing import List, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.catalog.domain.enum.trip_category import TripCategory
from src.service.catalog.domain.enum.trip_status import TripStatus


class CreateTripRequest(BaseModel):
    title: str = Field(min_length=5, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    category: TripCategory
    duration_minutes: int = Field(ge=15, le=1440)
    operator_id: Optional[UtilsUUID7] = None
    amenities: List[str] = Field(default_factory=list)
    highlights: List[str] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'title': 'Lagos Lagoon Sunset Cruise',
                'description': 'Two hours on the lagoon with drinks and live music.',
                'category': 'tour',
                'duration_minutes': 120,
                'amenities': ['bar', 'life jackets'],
            }
        }
    )


class UpdateTripRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = Field(default=None, min_length=10, max_length=2000)
    category: Optional[TripCategory] = None
    duration_minutes: Optional[int] = Field(default=None, ge=15, le=1440)
    amenities: Optional[List[str]] = None
    highlights: Optional[List[str]] = None
    status: Optional[TripStatus] = None


class PriceTierRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    price_kobo: int = Field(ge=100)
    capacity: Optional[int] = Field(default=None, ge=1)


class CreateScheduleRequest(BaseModel):
    start_time: AwareDatetime
    end_time: AwareDatetime
    capacity: int = Field(ge=1, le=500)
    departure_port: str = Field(min_length=2)
    arrival_port: str = Field(min_length=2)
    price_tiers: List[PriceTierRequest]


class TripResponse(BaseModel):
    id: UtilsUUID7
    title: str
    description: str
    category: TripCategory
    duration_minutes: int
    operator_id: Optional[UtilsUUID7]
    amenities: List[str]
    highlights: List[str]
    status: TripStatus
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class PriceTierResponse(BaseModel):
    id: UtilsUUID7
    name: str
    description: Optional[str]
    amount_kobo: int
    capacity: Optional[int]


class ScheduleResponse(BaseModel):
    id: UtilsUUID7
    trip_id: UtilsUUID7
    start_time: datetime
    end_time: datetime
    capacity: int
    booked_seats: int
    available_seats: int
    departure_port: str
    arrival_port: str
    status: str
    price_tiers: List[PriceTierResponse]
