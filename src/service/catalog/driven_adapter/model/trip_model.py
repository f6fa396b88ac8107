from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import ARRAY, BigInteger, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class TripModel(Base):
    __tablename__ = 'trip'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)  # UUID7
    operator_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    amenities: Mapped[List[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    highlights: Mapped[List[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='active', index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    schedules: Mapped[List['TripScheduleModel']] = relationship(
        back_populates='trip', lazy='noload'
    )


class TripScheduleModel(Base):
    __tablename__ = 'trip_schedule'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    trip_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('trip.id', ondelete='CASCADE'), nullable=False, index=True
    )
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    booked_seats: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    departure_port: Mapped[str] = mapped_column(String(100), nullable=False)
    arrival_port: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='scheduled')
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    trip: Mapped[TripModel] = relationship(back_populates='schedules', lazy='noload')
    price_tiers: Mapped[List['PriceTierModel']] = relationship(
        back_populates='schedule', lazy='selectin', order_by='PriceTierModel.amount_kobo'
    )


class PriceTierModel(Base):
    __tablename__ = 'price_tier'

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    trip_schedule_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey('trip_schedule.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    amount_kobo: Mapped[int] = mapped_column(BigInteger, nullable=False)
    capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    schedule: Mapped[TripScheduleModel] = relationship(back_populates='price_tiers', lazy='noload')
