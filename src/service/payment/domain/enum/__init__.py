"""Payment Domain Enums"""

from src.service.payment.domain.enum.booking_status import BookingStatus, PaymentStatus
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.enum.webhook_outcome import ConclusionResult, WebhookOutcome

__all__ = ['BookingStatus', 'ConclusionResult', 'PaymentProvider', 'PaymentStatus', 'WebhookOutcome']
