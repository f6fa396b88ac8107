"""init_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18

Schema:
- trip: Bookable trips (catalog)
- trip_schedule: Departures of a trip
- price_tier: Ticket prices per departure, in kobo
- booking: Bookings referenced by payment provider webhooks
- payment: One row per provider transaction
- webhook_event: Durable log of provider deliveries, unique per (provider, event_key)
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name, sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False
    )


def upgrade() -> None:
    """Create all tables with final schema."""

    # ========== Catalog ==========

    op.create_table(
        'trip',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('operator_id', UUID(as_uuid=True), nullable=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('amenities', ARRAY(sa.String()), nullable=False, server_default='{}'),
        sa.Column('highlights', ARRAY(sa.String()), nullable=False, server_default='{}'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_trip_operator_id'), 'trip', ['operator_id'])
    op.create_index(op.f('ix_trip_category'), 'trip', ['category'])
    op.create_index(op.f('ix_trip_status'), 'trip', ['status'])

    op.create_table(
        'trip_schedule',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('trip_id', UUID(as_uuid=True), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('booked_seats', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('departure_port', sa.String(length=100), nullable=False),
        sa.Column('arrival_port', sa.String(length=100), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='scheduled'),
        _timestamp('created_at'),
        sa.ForeignKeyConstraint(['trip_id'], ['trip.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_trip_schedule_trip_id'), 'trip_schedule', ['trip_id'])
    op.create_index(op.f('ix_trip_schedule_start_time'), 'trip_schedule', ['start_time'])

    op.create_table(
        'price_tier',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('trip_schedule_id', UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('amount_kobo', sa.BigInteger(), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['trip_schedule_id'], ['trip_schedule.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_price_tier_trip_schedule_id'), 'price_tier', ['trip_schedule_id'])

    # ========== Bookings & payments ==========

    op.create_table(
        'booking',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('booking_reference', sa.String(length=50), nullable=False),
        sa.Column('trip_schedule_id', UUID(as_uuid=True), nullable=False),
        sa.Column('passenger_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('total_amount_kobo', sa.BigInteger(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('payment_status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['trip_schedule_id'], ['trip_schedule.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('booking_reference'),
    )
    op.create_index(op.f('ix_booking_trip_schedule_id'), 'booking', ['trip_schedule_id'])
    op.create_index(op.f('ix_booking_status'), 'booking', ['status'])

    op.create_table(
        'payment',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('booking_id', UUID(as_uuid=True), nullable=False),
        sa.Column('provider', sa.String(length=20), nullable=False),
        sa.Column('transaction_id', sa.String(length=255), nullable=False),
        sa.Column('amount_kobo', sa.BigInteger(), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='NGN'),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('metadata', JSONB(), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.ForeignKeyConstraint(['booking_id'], ['booking.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('provider', 'transaction_id', name='uq_payment_provider_transaction'),
    )
    op.create_index(op.f('ix_payment_booking_id'), 'payment', ['booking_id'])

    # ========== Webhook event log ==========

    op.create_table(
        'webhook_event',
        sa.Column('id', UUID(as_uuid=True), nullable=False),
        sa.Column('provider', sa.String(length=20), nullable=False),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('event_key', sa.String(length=255), nullable=False),
        sa.Column('booking_reference', sa.String(length=50), nullable=True),
        sa.Column('payload', JSONB(), nullable=False),
        sa.Column('signature', sa.Text(), nullable=False),
        _timestamp('received_at'),
        sa.Column('processed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('success', sa.Boolean(), nullable=True),
        sa.Column('failure_reason', sa.Text(), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'provider', 'event_key', name='uq_webhook_event_provider_event_key'
        ),
    )
    op.create_index(
        op.f('ix_webhook_event_booking_reference'), 'webhook_event', ['booking_reference']
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('webhook_event')
    op.drop_table('payment')
    op.drop_table('booking')
    op.drop_table('price_tier')
    op.drop_table('trip_schedule')
    op.drop_table('trip')
