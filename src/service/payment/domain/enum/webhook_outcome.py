from enum import StrEnum


class WebhookOutcome(StrEnum):
    """Terminal result of one webhook delivery, as seen by the provider"""

    PROCESSED = 'processed'
    IGNORED = 'ignored'  # unknown event type, acknowledged without effect
    DUPLICATE = 'duplicate'
    ALREADY_PROCESSED = 'already_processed'
    HANDLER_FAILED = 'handler_failed'
    BACKEND_UNAVAILABLE = 'backend_unavailable'
    INVALID_SIGNATURE = 'invalid_signature'
    MALFORMED = 'malformed'


class ConclusionResult(StrEnum):
    """What recording a terminal outcome did to a webhook event row"""

    APPLIED = 'applied'  # first terminal outcome
    UNCHANGED = 'unchanged'  # same outcome again, no-op
    RECOVERED = 'recovered'  # failure overwritten by a later success
    CONFLICT = 'conflict'  # success already recorded, failure ignored
