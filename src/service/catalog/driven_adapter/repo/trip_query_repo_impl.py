"""
Trip Query Repository Implementation - CQRS Read Side

These are the "expensive" queries the conditional read path exists to skip.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional
import uuid

from sqlalchemy import Select, and_, exists, false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.catalog.app.dto.trip_read_model import (
    PriceTierView,
    PricingSummary,
    ScheduleView,
    TripDetail,
    TripFilters,
    TripPage,
    TripStatistics,
    TripSummary,
)
from src.service.catalog.app.interface.i_trip_query_repo import ITripQueryRepo
from src.service.catalog.domain.enum.trip_status import ScheduleStatus, TripStatus
from src.service.catalog.driven_adapter.model.trip_model import (
    PriceTierModel,
    TripModel,
    TripScheduleModel,
)


UPCOMING_SCHEDULES_PER_TRIP = 5


def _parse_uuid(value: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _domain_uuid(value: Optional[uuid.UUID]) -> Optional[UUID]:
    return UUID(str(value)) if value is not None else None


class TripQueryRepoImpl(ITripQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ) -> None:
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @staticmethod
    def _model_to_schedule_view(model: TripScheduleModel) -> ScheduleView:
        return ScheduleView(
            id=UUID(str(model.id)),
            start_time=model.start_time,
            end_time=model.end_time,
            departure_port=model.departure_port,
            arrival_port=model.arrival_port,
            capacity=model.capacity,
            booked_seats=model.booked_seats,
            available_seats=max(model.capacity - model.booked_seats, 0),
            status=model.status,
            price_tiers=[
                PriceTierView(
                    id=UUID(str(tier.id)),
                    name=tier.name,
                    description=tier.description,
                    amount_kobo=int(tier.amount_kobo),
                    capacity=tier.capacity,
                )
                for tier in model.price_tiers
            ],
        )

    @staticmethod
    def _apply_filters(stmt: Select, filters: TripFilters) -> Select:
        stmt = stmt.where(TripModel.status == TripStatus.ACTIVE.value)

        if filters.category:
            stmt = stmt.where(TripModel.category == filters.category)
        if filters.operator_id:
            operator_uuid = _parse_uuid(filters.operator_id)
            # Unparseable operator id matches nothing rather than erroring
            stmt = stmt.where(
                TripModel.operator_id == operator_uuid if operator_uuid is not None else false()
            )
        if filters.search:
            pattern = f'%{filters.search}%'
            stmt = stmt.where(
                or_(TripModel.title.ilike(pattern), TripModel.description.ilike(pattern))
            )
        if filters.start_date or filters.end_date:
            window = [TripScheduleModel.trip_id == TripModel.id]
            if filters.start_date:
                window.append(TripScheduleModel.start_time >= filters.start_date)
            if filters.end_date:
                window.append(TripScheduleModel.start_time <= filters.end_date)
            stmt = stmt.where(exists().where(and_(*window)))
        return stmt

    @Logger.io
    async def list_trips(self, *, filters: TripFilters) -> TripPage:
        pricing = (
            select(
                TripScheduleModel.trip_id.label('trip_id'),
                func.min(PriceTierModel.amount_kobo).label('min_price'),
                func.max(PriceTierModel.amount_kobo).label('max_price'),
                func.count(PriceTierModel.id).label('tiers'),
            )
            .join(PriceTierModel, PriceTierModel.trip_schedule_id == TripScheduleModel.id)
            .group_by(TripScheduleModel.trip_id)
            .subquery()
        )

        page_stmt = self._apply_filters(
            select(TripModel, pricing.c.min_price, pricing.c.max_price, pricing.c.tiers).outerjoin(
                pricing, pricing.c.trip_id == TripModel.id
            ),
            filters,
        )
        page_stmt = (
            page_stmt.order_by(TripModel.created_at.desc(), TripModel.id)
            .limit(filters.limit)
            .offset(filters.offset)
        )
        count_stmt = self._apply_filters(select(func.count(TripModel.id)), filters)

        async with self._get_session() as session:
            rows = (await session.execute(page_stmt)).all()
            total = (await session.execute(count_stmt)).scalar_one()

            schedules_by_trip: dict[uuid.UUID, List[ScheduleView]] = {}
            if filters.include_schedules and rows:
                trip_ids = [row[0].id for row in rows]
                schedule_rows = (
                    await session.scalars(
                        select(TripScheduleModel)
                        .options(selectinload(TripScheduleModel.price_tiers))
                        .where(
                            TripScheduleModel.trip_id.in_(trip_ids),
                            TripScheduleModel.start_time >= datetime.now(timezone.utc),
                            TripScheduleModel.status == ScheduleStatus.SCHEDULED.value,
                        )
                        .order_by(TripScheduleModel.start_time)
                    )
                ).all()
                for schedule in schedule_rows:
                    bucket = schedules_by_trip.setdefault(schedule.trip_id, [])
                    if len(bucket) < UPCOMING_SCHEDULES_PER_TRIP:
                        bucket.append(self._model_to_schedule_view(schedule))

        trips = [
            TripSummary(
                id=UUID(str(trip.id)),
                title=trip.title,
                description=trip.description,
                category=trip.category,
                duration_minutes=trip.duration_minutes,
                operator_id=_domain_uuid(trip.operator_id),
                amenities=list(trip.amenities or []),
                highlights=list(trip.highlights or []),
                pricing=PricingSummary(
                    min_price_kobo=int(min_price or 0),
                    max_price_kobo=int(max_price or 0),
                    tiers=int(tiers or 0),
                ),
                created_at=trip.created_at,
                schedules=schedules_by_trip.get(trip.id, []) if filters.include_schedules else None,
            )
            for trip, min_price, max_price, tiers in rows
        ]
        return TripPage(trips=trips, total=int(total))

    @Logger.io
    async def get_trip_detail(self, *, trip_id: str) -> Optional[TripDetail]:
        trip_uuid = _parse_uuid(trip_id)
        if trip_uuid is None:
            return None

        async with self._get_session() as session:
            trip = await session.get(TripModel, trip_uuid)
            if trip is None:
                return None

            schedules = (
                await session.scalars(
                    select(TripScheduleModel)
                    .options(selectinload(TripScheduleModel.price_tiers))
                    .where(
                        TripScheduleModel.trip_id == trip_uuid,
                        TripScheduleModel.start_time >= datetime.now(timezone.utc),
                        TripScheduleModel.status == ScheduleStatus.SCHEDULED.value,
                    )
                    .order_by(TripScheduleModel.start_time)
                )
            ).all()

        schedule_views = [self._model_to_schedule_view(s) for s in schedules]
        return TripDetail(
            id=UUID(str(trip.id)),
            title=trip.title,
            description=trip.description,
            category=trip.category,
            duration_minutes=trip.duration_minutes,
            operator_id=_domain_uuid(trip.operator_id),
            amenities=list(trip.amenities or []),
            highlights=list(trip.highlights or []),
            status=trip.status,
            schedules=schedule_views,
            statistics=TripStatistics(
                upcoming_schedules=len(schedule_views),
                total_capacity=sum(s.capacity for s in schedule_views),
                total_booked_seats=sum(s.booked_seats for s in schedule_views),
            ),
            created_at=trip.created_at,
            updated_at=trip.updated_at,
        )

    @Logger.io
    async def list_schedules(
        self,
        *,
        trip_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: Optional[str] = None,
    ) -> List[ScheduleView]:
        trip_uuid = _parse_uuid(trip_id)
        if trip_uuid is None:
            return []

        stmt = (
            select(TripScheduleModel)
            .options(selectinload(TripScheduleModel.price_tiers))
            .where(TripScheduleModel.trip_id == trip_uuid)
        )
        if start_date:
            stmt = stmt.where(TripScheduleModel.start_time >= start_date)
        if end_date:
            stmt = stmt.where(TripScheduleModel.start_time <= end_date)
        if status:
            stmt = stmt.where(TripScheduleModel.status == status)

        async with self._get_session() as session:
            schedules = (await session.scalars(stmt.order_by(TripScheduleModel.start_time))).all()

        return [self._model_to_schedule_view(s) for s in schedules]
