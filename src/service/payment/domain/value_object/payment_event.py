"""
Provider-neutral payment events.

Provider payloads are parsed into exactly one of these variants; the
pipeline dispatches on the variant, never on raw event-type strings.
"""

from datetime import datetime
from typing import Any, Optional, Union

import attrs


@attrs.define(frozen=True)
class PaymentSucceeded:
    booking_reference: str
    transaction_id: str
    amount_kobo: int
    paid_at: datetime
    currency: str = 'NGN'
    payment_method: Optional[str] = None
    metadata: dict[str, Any] = attrs.field(factory=dict)


@attrs.define(frozen=True)
class PaymentFailed:
    booking_reference: str
    transaction_id: str
    reason: str = 'Payment failed'


@attrs.define(frozen=True)
class RefundProcessed:
    booking_reference: str
    transaction_id: str
    amount_kobo: Optional[int] = None


@attrs.define(frozen=True)
class UnknownEvent:
    event_type: str
    booking_reference: Optional[str] = None


PaymentEvent = Union[PaymentSucceeded, PaymentFailed, RefundProcessed, UnknownEvent]
