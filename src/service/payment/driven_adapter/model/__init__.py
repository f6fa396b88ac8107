"""
Payment Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.payment.driven_adapter.model.booking_model import BookingModel
from src.service.payment.driven_adapter.model.payment_model import PaymentModel
from src.service.payment.driven_adapter.model.webhook_event_model import WebhookEventModel

__all__ = ['BookingModel', 'PaymentModel', 'WebhookEventModel']
