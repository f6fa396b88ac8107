"""PaymentEffectHandlerImpl against PostgreSQL"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from src.platform.database.orm_db_setting import AsyncEngineManager, Database
from src.platform.exception.exceptions import AlreadyProcessedError, BookingNotFoundError
from src.service.payment.domain.enum.booking_status import BookingStatus, PaymentStatus
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.value_object.payment_event import (
    PaymentFailed,
    PaymentSucceeded,
    RefundProcessed,
)
from src.service.payment.driven_adapter.model.booking_model import BookingModel
from src.service.payment.driven_adapter.model.payment_model import PaymentModel
from src.service.payment.driven_adapter.repo.payment_effect_handler_impl import (
    PaymentEffectHandlerImpl,
)
from test.postgres_seed import seed_booking


BOOKING_REFERENCE = 'BK-7F3A21'

SUCCESS = PaymentSucceeded(
    booking_reference=BOOKING_REFERENCE,
    transaction_id='ps_ref_001',
    amount_kobo=1_500_000,
    paid_at=datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc),
    payment_method='card',
    metadata={'channel': 'card'},
)


@pytest.fixture
def handler(engine_manager: AsyncEngineManager) -> PaymentEffectHandlerImpl:
    return PaymentEffectHandlerImpl(session_factory=Database(engine_manager=engine_manager).session)


async def _seed(engine_manager: AsyncEngineManager, **kwargs) -> None:
    async with engine_manager.get_session_maker()() as session:
        await seed_booking(session, booking_reference=BOOKING_REFERENCE, **kwargs)
        await session.commit()


async def _booking(engine_manager: AsyncEngineManager) -> BookingModel:
    async with engine_manager.get_session_maker()() as session:
        return (
            await session.scalars(
                select(BookingModel).where(BookingModel.booking_reference == BOOKING_REFERENCE)
            )
        ).one()


async def _payments(engine_manager: AsyncEngineManager) -> list[PaymentModel]:
    async with engine_manager.get_session_maker()() as session:
        return list((await session.scalars(select(PaymentModel))).all())


@pytest.mark.postgres
class TestPaymentSuccess:
    @pytest.mark.asyncio
    async def test_confirms_booking_and_records_payment(self, handler, engine_manager) -> None:
        await _seed(engine_manager)

        await handler.process_payment_success(event=SUCCESS, provider=PaymentProvider.PAYSTACK)

        booking = await _booking(engine_manager)
        payments = await _payments(engine_manager)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.PAID
        assert booking.confirmed_at == SUCCESS.paid_at
        assert len(payments) == 1
        assert payments[0].amount_kobo == 1_500_000
        assert payments[0].payment_metadata == {'channel': 'card'}

    @pytest.mark.asyncio
    async def test_repeat_success_raises_already_processed(self, handler, engine_manager) -> None:
        await _seed(engine_manager)
        await handler.process_payment_success(event=SUCCESS, provider=PaymentProvider.PAYSTACK)

        with pytest.raises(AlreadyProcessedError):
            await handler.process_payment_success(
                event=SUCCESS, provider=PaymentProvider.METATICKETS
            )

        assert len(await _payments(engine_manager)) == 1

    @pytest.mark.asyncio
    async def test_unknown_booking_raises_not_found(self, handler, engine_manager) -> None:
        await _seed(engine_manager)

        with pytest.raises(BookingNotFoundError):
            await handler.process_payment_success(
                event=PaymentSucceeded(
                    booking_reference='BK-NOPE00',
                    transaction_id='ps_ref_404',
                    amount_kobo=100,
                    paid_at=SUCCESS.paid_at,
                ),
                provider=PaymentProvider.PAYSTACK,
            )

        assert await _payments(engine_manager) == []


@pytest.mark.postgres
class TestPaymentFailureAndRefund:
    @pytest.mark.asyncio
    async def test_failure_marks_payment_failed(self, handler, engine_manager) -> None:
        await _seed(engine_manager)

        await handler.process_payment_failure(
            event=PaymentFailed(
                booking_reference=BOOKING_REFERENCE,
                transaction_id='ps_ref_001',
                reason='Card declined',
            )
        )

        booking = await _booking(engine_manager)
        assert booking.payment_status == PaymentStatus.FAILED
        assert booking.failure_reason == 'Card declined'

    @pytest.mark.asyncio
    async def test_failure_after_payment_raises_already_processed(
        self, handler, engine_manager
    ) -> None:
        await _seed(engine_manager, payment_status=PaymentStatus.PAID)

        with pytest.raises(AlreadyProcessedError):
            await handler.process_payment_failure(
                event=PaymentFailed(booking_reference=BOOKING_REFERENCE, transaction_id='x')
            )

        assert (await _booking(engine_manager)).payment_status == PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_refund_cancels_booking_and_payment(self, handler, engine_manager) -> None:
        await _seed(engine_manager)
        await handler.process_payment_success(event=SUCCESS, provider=PaymentProvider.PAYSTACK)

        await handler.process_refund(
            event=RefundProcessed(booking_reference=BOOKING_REFERENCE, transaction_id='ps_ref_001')
        )

        booking = await _booking(engine_manager)
        payments = await _payments(engine_manager)
        assert booking.status == BookingStatus.CANCELLED
        assert booking.payment_status == PaymentStatus.REFUNDED
        assert booking.cancelled_at is not None
        assert payments[0].status == PaymentStatus.REFUNDED
