"""
Webhook Event Repository Implementation

The (provider, event_key) unique constraint is the only dedupe mechanism;
there is no lock around a delivery.
"""

from typing import AsyncContextManager, Callable, Optional
import uuid

from sqlalchemy import and_, case, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID
import uuid_utils

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.payment.app.interface.i_webhook_event_repo import IWebhookEventRepo
from src.service.payment.domain.entity.webhook_event_entity import WebhookEvent
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.enum.webhook_outcome import ConclusionResult
from src.service.payment.domain.value_object.inbound_webhook import InboundWebhook
from src.service.payment.driven_adapter.model.webhook_event_model import WebhookEventModel


class WebhookEventRepoImpl(IWebhookEventRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _model_to_entity(model: WebhookEventModel) -> WebhookEvent:
        return WebhookEvent(
            id=UUID(str(model.id)),
            provider=PaymentProvider(model.provider),
            event_type=model.event_type,
            event_key=model.event_key,
            payload=model.payload,
            signature=model.signature,
            booking_reference=model.booking_reference,
            received_at=model.received_at,
            processed=model.processed,
            success=model.success,
            failure_reason=model.failure_reason,
            processed_at=model.processed_at,
            attempts=model.attempts,
        )

    @Logger.io
    async def store_webhook_event(self, *, webhook: InboundWebhook) -> WebhookEvent:
        table = WebhookEventModel.__table__
        failed = and_(table.c.processed.is_(True), table.c.success.is_(False))

        stmt = insert(WebhookEventModel).values(
            id=uuid.UUID(str(uuid_utils.uuid7())),
            provider=webhook.provider.value,
            event_type=webhook.event_type,
            event_key=webhook.event_key,
            booking_reference=webhook.booking_reference,
            payload=webhook.payload,
            signature=webhook.signature,
            processed=False,
            attempts=1,
        )
        # Redelivery of a failed event reopens it; a succeeded one stays processed
        stmt = stmt.on_conflict_do_update(
            index_elements=[WebhookEventModel.provider, WebhookEventModel.event_key],
            set_={
                'attempts': table.c.attempts + 1,
                'processed': case((failed, False), else_=table.c.processed),
                'success': case((failed, None), else_=table.c.success),
                'processed_at': case((failed, None), else_=table.c.processed_at),
            },
        ).returning(WebhookEventModel)

        async with self.session_factory() as session:
            model = (
                await session.scalars(stmt, execution_options={'populate_existing': True})
            ).one()
            await session.commit()

        event = self._model_to_entity(model)
        if not event.is_new:
            Logger.base.info(
                f'🔁 [WEBHOOK] Redelivery {event.provider}:{event.event_key} '
                f'(attempt {event.attempts}, processed={event.processed})'
            )
        return event

    @Logger.io
    async def get_webhook_event(self, *, event_id: UUID) -> Optional[WebhookEvent]:
        async with self.session_factory() as session:
            model = await session.get(WebhookEventModel, uuid.UUID(str(event_id)))
            return self._model_to_entity(model) if model else None

    @Logger.io
    async def mark_processed(
        self, *, event_id: UUID, success: bool, failure_reason: Optional[str] = None
    ) -> ConclusionResult:
        async with self.session_factory() as session:
            async with session.begin():
                model = (
                    await session.scalars(
                        select(WebhookEventModel)
                        .where(WebhookEventModel.id == uuid.UUID(str(event_id)))
                        .with_for_update()
                    )
                ).one_or_none()
                if model is None:
                    raise NotFoundError(f'Webhook event not found: {event_id}')

                concluded, result = self._model_to_entity(model).conclude(
                    success=success, failure_reason=failure_reason
                )
                if result in (ConclusionResult.APPLIED, ConclusionResult.RECOVERED):
                    model.processed = concluded.processed
                    model.success = concluded.success
                    model.failure_reason = concluded.failure_reason
                    model.processed_at = concluded.processed_at

        return result
