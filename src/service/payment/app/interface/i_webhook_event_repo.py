from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.payment.domain.entity.webhook_event_entity import WebhookEvent
from src.service.payment.domain.enum.webhook_outcome import ConclusionResult
from src.service.payment.domain.value_object.inbound_webhook import InboundWebhook


class IWebhookEventRepo(ABC):
    @abstractmethod
    async def store_webhook_event(self, *, webhook: InboundWebhook) -> WebhookEvent:
        """
        Insert the delivery, or count another attempt of a known one.

        Idempotent on (provider, event_key). A previously failed event is
        reopened; a successfully processed one is returned untouched apart
        from its attempt counter.

        Raises:
            BackendUnavailableError: Store unreachable
        """
        pass

    @abstractmethod
    async def get_webhook_event(self, *, event_id: UUID) -> Optional[WebhookEvent]:
        pass

    @abstractmethod
    async def mark_processed(
        self, *, event_id: UUID, success: bool, failure_reason: Optional[str] = None
    ) -> ConclusionResult:
        """Record the terminal outcome via WebhookEvent.conclude"""
        pass
