from datetime import datetime, timezone

import pytest
import uuid_utils

from src.service.payment.domain.entity.webhook_event_entity import WebhookEvent
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.enum.webhook_outcome import ConclusionResult


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _event(**overrides) -> WebhookEvent:
    params = {
        'id': uuid_utils.uuid7(),
        'provider': PaymentProvider.PAYSTACK,
        'event_type': 'charge.success',
        'event_key': 'charge.success:ps_ref_001',
        'payload': {'event': 'charge.success'},
        'signature': 'sig',
        'booking_reference': 'BK-7F3A21',
    }
    params.update(overrides)
    return WebhookEvent(**params)


@pytest.mark.unit
class TestWebhookEventConclude:
    def test_first_success_applied(self) -> None:
        concluded, result = _event().conclude(success=True, now=NOW)

        assert result is ConclusionResult.APPLIED
        assert concluded.processed is True
        assert concluded.success is True
        assert concluded.processed_at == NOW
        assert concluded.succeeded is True

    def test_first_failure_applied_with_reason(self) -> None:
        concluded, result = _event().conclude(success=False, failure_reason='boom', now=NOW)

        assert result is ConclusionResult.APPLIED
        assert concluded.success is False
        assert concluded.failure_reason == 'boom'
        assert concluded.succeeded is False

    def test_same_outcome_twice_is_unchanged(self) -> None:
        done, _ = _event().conclude(success=True, now=NOW)

        again, result = done.conclude(success=True, now=datetime(2026, 10, 19, tzinfo=timezone.utc))

        assert result is ConclusionResult.UNCHANGED
        assert again.processed_at == NOW

    def test_success_overwrites_failure(self) -> None:
        failed, _ = _event().conclude(success=False, failure_reason='timeout', now=NOW)

        recovered, result = failed.conclude(success=True)

        assert result is ConclusionResult.RECOVERED
        assert recovered.success is True
        assert recovered.failure_reason is None

    def test_failure_never_overwrites_success(self) -> None:
        done, _ = _event().conclude(success=True, now=NOW)

        kept, result = done.conclude(success=False, failure_reason='late failure')

        assert result is ConclusionResult.CONFLICT
        assert kept.success is True
        assert kept.failure_reason is None

    def test_is_new_tracks_attempts(self) -> None:
        assert _event().is_new is True
        assert _event(attempts=3).is_new is False
