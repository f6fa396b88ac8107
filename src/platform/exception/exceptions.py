class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class BackendUnavailableError(CustomBaseError):
    """Transport failure or timeout talking to Redis or PostgreSQL. Always recoverable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class SignatureInvalidError(CustomBaseError):
    def __init__(self, message: str = 'Invalid signature') -> None:
        super().__init__(message, 401)


class MalformedPayloadError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class HandlerFailureError(CustomBaseError):
    """A payment effect handler failed; the provider is expected to retry."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 500)


class AlreadyProcessedError(ConflictError):
    """Raised by effect handlers when the booking already reflects the event."""


class BookingNotFoundError(NotFoundError):
    pass
