"""ProcessWebhookUseCase over the SQLAlchemy event store and effect handler"""

import hashlib
import hmac

import orjson
import pytest
from sqlalchemy import select

from src.platform.database.orm_db_setting import AsyncEngineManager, Database
from src.service.payment.app.command.process_webhook_use_case import ProcessWebhookUseCase
from src.service.payment.app.provider.webhook_provider_registry import WebhookProviderRegistry
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.enum.webhook_outcome import WebhookOutcome
from src.service.payment.driven_adapter.model.payment_model import PaymentModel
from src.service.payment.driven_adapter.model.webhook_event_model import WebhookEventModel
from src.service.payment.driven_adapter.repo.payment_effect_handler_impl import (
    PaymentEffectHandlerImpl,
)
from src.service.payment.driven_adapter.repo.webhook_event_repo_impl import WebhookEventRepoImpl
from test.postgres_seed import seed_booking


def _paystack_success(booking_reference: str) -> tuple[bytes, str]:
    body = orjson.dumps(
        {
            'event': 'charge.success',
            'data': {
                'reference': 'ps_ref_001',
                'amount': 1_500_000,
                'metadata': {'booking_reference': booking_reference},
            },
        }
    )
    return body, hmac.new(b'sk_test_paystack', body, hashlib.sha512).hexdigest()


@pytest.fixture
def use_case(engine_manager: AsyncEngineManager, test_settings) -> ProcessWebhookUseCase:
    database = Database(engine_manager=engine_manager)
    return ProcessWebhookUseCase(
        webhook_event_repo=WebhookEventRepoImpl(session_factory=database.session),
        payment_effect_handler=PaymentEffectHandlerImpl(session_factory=database.session),
        provider_registry=WebhookProviderRegistry(settings=test_settings),
    )


async def _rows(engine_manager: AsyncEngineManager, model: type) -> list:
    async with engine_manager.get_session_maker()() as session:
        return list((await session.scalars(select(model))).all())


@pytest.mark.postgres
class TestWebhookPipelineOnPostgres:
    @pytest.mark.asyncio
    async def test_redelivery_applies_effect_once(self, use_case, engine_manager) -> None:
        async with engine_manager.get_session_maker()() as session:
            await seed_booking(session, booking_reference='BK-7F3A21')
            await session.commit()
        body, signature = _paystack_success('BK-7F3A21')

        first = await use_case.process(
            provider=PaymentProvider.PAYSTACK, raw_body=body, signature=signature
        )
        second = await use_case.process(
            provider=PaymentProvider.PAYSTACK, raw_body=body, signature=signature
        )

        events = await _rows(engine_manager, WebhookEventModel)
        assert first.outcome == WebhookOutcome.PROCESSED
        assert second.outcome == WebhookOutcome.DUPLICATE
        assert len(await _rows(engine_manager, PaymentModel)) == 1
        assert [(e.attempts, e.success) for e in events] == [(2, True)]

    @pytest.mark.asyncio
    async def test_failed_delivery_is_retried_after_booking_appears(
        self, use_case, engine_manager
    ) -> None:
        body, signature = _paystack_success('BK-LATE01')

        failed = await use_case.process(
            provider=PaymentProvider.PAYSTACK, raw_body=body, signature=signature
        )
        async with engine_manager.get_session_maker()() as session:
            await seed_booking(session, booking_reference='BK-LATE01')
            await session.commit()
        retried = await use_case.process(
            provider=PaymentProvider.PAYSTACK, raw_body=body, signature=signature
        )

        events = await _rows(engine_manager, WebhookEventModel)
        assert failed.outcome == WebhookOutcome.HANDLER_FAILED
        assert retried.outcome == WebhookOutcome.PROCESSED
        assert [(e.attempts, e.success) for e in events] == [(2, True)]
