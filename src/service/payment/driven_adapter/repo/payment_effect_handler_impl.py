"""
Payment Effect Handler Implementation

Applies payment events to bookings. Each effect runs in one transaction
with the booking row locked, so concurrent duplicate deliveries serialize
here and the loser sees AlreadyProcessedError.
"""

from datetime import datetime, timezone
from typing import AsyncContextManager, Callable
import uuid

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func
import uuid_utils

from src.platform.exception.exceptions import AlreadyProcessedError, BookingNotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.payment.app.interface.i_payment_effect_handler import IPaymentEffectHandler
from src.service.payment.domain.enum.booking_status import BookingStatus, PaymentStatus
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.value_object.payment_event import (
    PaymentFailed,
    PaymentSucceeded,
    RefundProcessed,
)
from src.service.payment.driven_adapter.model.booking_model import BookingModel
from src.service.payment.driven_adapter.model.payment_model import PaymentModel


class PaymentEffectHandlerImpl(IPaymentEffectHandler):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    async def _lock_booking(session: AsyncSession, booking_reference: str) -> BookingModel:
        booking = (
            await session.scalars(
                select(BookingModel)
                .where(BookingModel.booking_reference == booking_reference)
                .with_for_update()
            )
        ).one_or_none()
        if booking is None:
            raise BookingNotFoundError(f'Booking not found: {booking_reference}')
        return booking

    @Logger.io
    async def process_payment_success(
        self, *, event: PaymentSucceeded, provider: PaymentProvider
    ) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                booking = await self._lock_booking(session, event.booking_reference)
                if booking.payment_status == PaymentStatus.PAID:
                    raise AlreadyProcessedError(
                        f'Booking {event.booking_reference} already processed'
                    )

                booking.status = BookingStatus.CONFIRMED.value
                booking.payment_status = PaymentStatus.PAID.value
                booking.failure_reason = None
                booking.confirmed_at = event.paid_at

                stmt = insert(PaymentModel.__table__).values(
                    id=uuid.UUID(str(uuid_utils.uuid7())),
                    booking_id=booking.id,
                    provider=provider.value,
                    transaction_id=event.transaction_id,
                    amount_kobo=event.amount_kobo,
                    currency=event.currency,
                    status=PaymentStatus.PAID.value,
                    payment_method=event.payment_method,
                    metadata=event.metadata,
                    paid_at=event.paid_at,
                )
                await session.execute(
                    stmt.on_conflict_do_update(
                        index_elements=['provider', 'transaction_id'],
                        set_={
                            'status': PaymentStatus.PAID.value,
                            'amount_kobo': stmt.excluded.amount_kobo,
                            'paid_at': stmt.excluded.paid_at,
                            'updated_at': func.now(),
                        },
                    )
                )

        Logger.base.info(
            f'💰 [PAYMENT] Booking {event.booking_reference} paid '
            f'({event.amount_kobo} kobo via {provider})'
        )

    @Logger.io
    async def process_payment_failure(self, *, event: PaymentFailed) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                booking = await self._lock_booking(session, event.booking_reference)
                if booking.payment_status == PaymentStatus.PAID:
                    raise AlreadyProcessedError(
                        f'Booking {event.booking_reference} already processed'
                    )

                booking.payment_status = PaymentStatus.FAILED.value
                booking.failure_reason = event.reason

        Logger.base.warning(
            f'⚠️ [PAYMENT] Booking {event.booking_reference} payment failed: {event.reason}'
        )

    @Logger.io
    async def process_refund(self, *, event: RefundProcessed) -> None:
        async with self.session_factory() as session:
            async with session.begin():
                booking = await self._lock_booking(session, event.booking_reference)
                if booking.payment_status == PaymentStatus.REFUNDED:
                    raise AlreadyProcessedError(
                        f'Booking {event.booking_reference} already processed'
                    )

                booking.payment_status = PaymentStatus.REFUNDED.value
                booking.status = BookingStatus.CANCELLED.value
                booking.cancelled_at = datetime.now(timezone.utc)

                await session.execute(
                    update(PaymentModel)
                    .where(PaymentModel.booking_id == booking.id)
                    .values(status=PaymentStatus.REFUNDED.value, updated_at=func.now())
                )

        Logger.base.info(f'↩️ [PAYMENT] Booking {event.booking_reference} refunded')
