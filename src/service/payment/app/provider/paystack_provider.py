"""
Paystack webhooks

    header  x-paystack-signature: hex HMAC-SHA512 of the raw body
    events  charge.success, charge.failed, refund.processed
    amount  already in kobo
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.platform.exception.exceptions import MalformedPayloadError
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


class PaystackMetadata(BaseModel):
    model_config = ConfigDict(extra='allow')

    booking_reference: Optional[str] = None


class PaystackData(BaseModel):
    model_config = ConfigDict(extra='allow')

    reference: str = Field(min_length=1)
    amount: int
    currency: str = 'NGN'
    status: Optional[str] = None
    paid_at: Optional[datetime] = None
    gateway_response: Optional[str] = None
    channel: Optional[str] = None
    customer: Optional[dict[str, Any]] = None
    metadata: Optional[PaystackMetadata] = None


class PaystackPayload(BaseModel):
    event: str
    data: PaystackData


class PaystackProvider(WebhookProvider):
    PROVIDER = PaymentProvider.PAYSTACK
    SIGNATURE_HEADER = 'x-paystack-signature'
    ALGORITHM = 'sha512'

    @property
    def secret(self) -> str:
        return self.settings.PAYSTACK_SECRET_KEY.get_secret_value()

    def parse(self, *, raw_body: bytes, signature: str) -> InboundWebhook:
        document = self.load_json(raw_body)
        payload = self.validate(PaystackPayload, document)
        data = payload.data

        booking_reference = data.metadata.booking_reference if data.metadata else None
        if not booking_reference:
            raise MalformedPayloadError('Missing booking reference')

        return InboundWebhook(
            provider=self.PROVIDER,
            event_type=payload.event,
            event_key=f'{payload.event}:{data.reference}',
            booking_reference=booking_reference,
            payload=document,
            signature=signature,
            event=self._to_event(payload, booking_reference),
        )

    @staticmethod
    def _to_event(payload: PaystackPayload, booking_reference: str) -> PaymentEvent:
        data = payload.data
        if payload.event == 'charge.success':
            return PaymentSucceeded(
                booking_reference=booking_reference,
                transaction_id=data.reference,
                amount_kobo=data.amount,
                paid_at=data.paid_at or datetime.now(timezone.utc),
                currency=data.currency,
                payment_method=data.channel,
                metadata={
                    'customer': data.customer,
                    'currency': data.currency,
                    'gateway_response': data.gateway_response,
                },
            )
        if payload.event == 'charge.failed':
            return PaymentFailed(
                booking_reference=booking_reference,
                transaction_id=data.reference,
                reason=data.gateway_response or 'Payment failed',
            )
        if payload.event == 'refund.processed':
            return RefundProcessed(
                booking_reference=booking_reference,
                transaction_id=data.reference,
                amount_kobo=data.amount,
            )
        return UnknownEvent(event_type=payload.event, booking_reference=booking_reference)
