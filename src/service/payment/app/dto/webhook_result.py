from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.payment.domain.enum.webhook_outcome import WebhookOutcome


@attrs.define(frozen=True)
class WebhookResult:
    outcome: WebhookOutcome
    reason: Optional[str] = None
    event_id: Optional[UUID] = None
