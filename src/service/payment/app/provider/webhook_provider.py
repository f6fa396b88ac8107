from abc import ABC, abstractmethod
from typing import Any, TypeVar

import orjson
from pydantic import BaseModel, ValidationError

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import MalformedPayloadError, SignatureInvalidError
from src.service.payment.domain.enum.payment_provider import PaymentProvider
from src.service.payment.domain.signature import verify_signature
from src.service.payment.domain.value_object.inbound_webhook import InboundWebhook


ModelT = TypeVar('ModelT', bound=BaseModel)


class WebhookProvider(ABC):
    """One payment provider's authentication and payload dialect"""

    PROVIDER: PaymentProvider
    SIGNATURE_HEADER: str
    ALGORITHM: str

    def __init__(self, *, settings: Settings) -> None:
        self.settings = settings

    @property
    @abstractmethod
    def secret(self) -> str:
        pass

    def verify(self, *, raw_body: bytes, signature: str | None) -> bool:
        return verify_signature(raw_body, signature, self.secret, self.ALGORITHM)

    def authenticate(self, *, raw_body: bytes, signature: str | None) -> None:
        if not self.verify(raw_body=raw_body, signature=signature):
            raise SignatureInvalidError(f'Invalid {self.PROVIDER} signature')

    @abstractmethod
    def parse(self, *, raw_body: bytes, signature: str) -> InboundWebhook:
        """
        Raises:
            MalformedPayloadError: Not JSON, wrong shape, or no booking reference
        """
        pass

    @staticmethod
    def load_json(raw_body: bytes) -> dict[str, Any]:
        try:
            document = orjson.loads(raw_body)
        except orjson.JSONDecodeError as e:
            raise MalformedPayloadError('Invalid JSON payload') from e
        if not isinstance(document, dict):
            raise MalformedPayloadError('Payload must be a JSON object')
        return document

    @staticmethod
    def validate(model: type[ModelT], document: dict[str, Any]) -> ModelT:
        try:
            return model.model_validate(document)
        except ValidationError as e:
            first = e.errors()[0]
            location = '.'.join(str(part) for part in first['loc'])
            raise MalformedPayloadError(f'Invalid payload: {location}: {first["msg"]}') from e
