from datetime import datetime, timezone
from typing import Any, List, Optional

import attrs
from uuid_utils import UUID

from src.service.catalog.domain.enum.trip_category import TripCategory
from src.service.catalog.domain.enum.trip_status import TripStatus


UPDATABLE_FIELDS = frozenset(
    {'title', 'description', 'duration_minutes', 'category', 'amenities', 'highlights', 'status'}
)


@attrs.define
class Trip:
    id: UUID
    title: str
    description: str
    category: TripCategory
    duration_minutes: int
    operator_id: Optional[UUID] = None
    amenities: List[str] = attrs.field(factory=list)
    highlights: List[str] = attrs.field(factory=list)
    status: TripStatus = TripStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        id: UUID,
        title: str,
        description: str,
        category: TripCategory,
        duration_minutes: int,
        operator_id: Optional[UUID] = None,
        amenities: Optional[List[str]] = None,
        highlights: Optional[List[str]] = None,
    ) -> 'Trip':
        now = datetime.now(timezone.utc)
        return cls(
            id=id,
            title=title,
            description=description,
            category=TripCategory(category),
            duration_minutes=duration_minutes,
            operator_id=operator_id,
            amenities=amenities or [],
            highlights=highlights or [],
            status=TripStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )

    def apply_changes(self, changes: dict[str, Any]) -> 'Trip':
        """Return a copy with only the known, non-None fields replaced"""
        accepted = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS and v is not None}
        if 'category' in accepted:
            accepted['category'] = TripCategory(accepted['category'])
        if 'status' in accepted:
            accepted['status'] = TripStatus(accepted['status'])
        return attrs.evolve(self, **accepted, updated_at=datetime.now(timezone.utc))
