"""
MetaTickets webhooks

    header  x-metatickets-signature: hex HMAC-SHA256 of the raw body
    events  payment.successful, payment.failed, refund.processed
    amount  in naira, converted to kobo
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.service.payment.app.provider.webhook_provider import WebhookProvider
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.value_object.inbound_webhook import InboundWebhook
from src.service.payment.domain.value_object.payment_event import (
    PaymentEvent,
    PaymentFailed,
    PaymentSucceeded,
    RefundProcessed,
    UnknownEvent,
)


class MetaTicketsData(BaseModel):
    model_config = ConfigDict(extra='allow')

    transaction_id: str = Field(min_length=1)
    booking_reference: str = Field(min_length=1)
    amount: Decimal
    currency: str = 'NGN'
    status: Optional[str] = None
    paid_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    payment_method: Optional[str] = None
    customer: Optional[dict[str, Any]] = None


class MetaTicketsPayload(BaseModel):
    event: str
    data: MetaTicketsData
    timestamp: Optional[datetime] = None


def naira_to_kobo(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class MetaTicketsProvider(WebhookProvider):
    PROVIDER = PaymentProvider.METATICKETS
    SIGNATURE_HEADER = 'x-metatickets-signature'
    ALGORITHM = 'sha256'

    @property
    def secret(self) -> str:
        return self.settings.METATICKETS_WEBHOOK_SECRET.get_secret_value()

    def parse(self, *, raw_body: bytes, signature: str) -> InboundWebhook:
        document = self.load_json(raw_body)
        payload = self.validate(MetaTicketsPayload, document)

        return InboundWebhook(
            provider=self.PROVIDER,
            event_type=payload.event,
            event_key=f'{payload.event}:{payload.data.transaction_id}',
            booking_reference=payload.data.booking_reference,
            payload=document,
            signature=signature,
            event=self._to_event(payload),
        )

    @staticmethod
    def _to_event(payload: MetaTicketsPayload) -> PaymentEvent:
        data = payload.data
        if payload.event == 'payment.successful':
            return PaymentSucceeded(
                booking_reference=data.booking_reference,
                transaction_id=data.transaction_id,
                amount_kobo=naira_to_kobo(data.amount),
                paid_at=data.paid_at or payload.timestamp or datetime.now(timezone.utc),
                currency=data.currency,
                payment_method=data.payment_method,
                metadata={'customer': data.customer, 'currency': data.currency},
            )
        if payload.event == 'payment.failed':
            return PaymentFailed(
                booking_reference=data.booking_reference,
                transaction_id=data.transaction_id,
                reason=data.failure_reason or 'Payment failed',
            )
        if payload.event == 'refund.processed':
            return RefundProcessed(
                booking_reference=data.booking_reference,
                transaction_id=data.transaction_id,
                amount_kobo=naira_to_kobo(data.amount),
            )
        return UnknownEvent(event_type=payload.event, booking_reference=data.booking_reference)
