from datetime import datetime, timezone
from typing import Any, Optional

import attrs
from uuid_utils import UUID

from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.enum.webhook_outcome import ConclusionResult


@attrs.define
class WebhookEvent:
    """
    Durable record of a provider delivery.

    received -> processed(success) | processed(failure); a redelivery of a
    failed event reopens it so the retry can be processed again.
    """

    id: UUID
    provider: PaymentProvider
    event_type: str
    event_key: str
    payload: dict[str, Any]
    signature: str
    booking_reference: Optional[str] = None
    received_at: Optional[datetime] = None
    processed: bool = False
    success: Optional[bool] = None
    failure_reason: Optional[str] = None
    processed_at: Optional[datetime] = None
    attempts: int = 1

    @property
    def is_new(self) -> bool:
        return self.attempts == 1

    @property
    def succeeded(self) -> bool:
        return self.processed and bool(self.success)

    def conclude(
        self, *, success: bool, failure_reason: Optional[str] = None, now: Optional[datetime] = None
    ) -> tuple['WebhookEvent', ConclusionResult]:
        """
        Record a terminal outcome.

        Returns the (possibly unchanged) event and what happened. Only a first
        outcome or a failure -> success transition changes stored state.
        """
        now = now or datetime.now(timezone.utc)
        concluded = attrs.evolve(
            self,
            processed=True,
            success=success,
            failure_reason=failure_reason,
            processed_at=now,
        )

        if not self.processed:
            return concluded, ConclusionResult.APPLIED
        if bool(self.success) == success:
            return self, ConclusionResult.UNCHANGED
        if success:
            return concluded, ConclusionResult.RECOVERED
        return self, ConclusionResult.CONFLICT
