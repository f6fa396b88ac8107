from typing import Any, Optional

import attrs

from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.value_object.payment_event import PaymentEvent


@attrs.define(frozen=True)
class InboundWebhook:
    """An authenticated, parsed delivery, not yet persisted"""

    provider: PaymentProvider
    event_type: str
    event_key: str  # provider-scoped delivery identity, unique with provider
    booking_reference: Optional[str]
    payload: dict[str, Any]
    signature: str
    event: PaymentEvent
