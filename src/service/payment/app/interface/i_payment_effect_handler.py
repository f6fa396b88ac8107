"""
Business effects of payment events on bookings.

Implementations must be idempotent: when the booking already reflects the
event they raise AlreadyProcessedError instead of applying it twice.
"""

from abc import ABC, abstractmethod

from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.value_object.payment_event import (
    PaymentFailed,
    PaymentSucceeded,
    RefundProcessed,
)


class IPaymentEffectHandler(ABC):
    @abstractmethod
    async def process_payment_success(
        self, *, event: PaymentSucceeded, provider: PaymentProvider
    ) -> None:
        pass

    @abstractmethod
    async def process_payment_failure(self, *, event: PaymentFailed) -> None:
        pass

    @abstractmethod
    async def process_refund(self, *, event: RefundProcessed) -> None:
        pass
