from abc import ABC, abstractmethod
from typing import Optional


class IEtagStore(ABC):
    @abstractmethod
    async def get_etag(self, *, request_key: str) -> Optional[str]:
        """ETag stored for a versioned request key. Raises BackendUnavailableError."""
        pass

    @abstractmethod
    async def store_etag(self, *, request_key: str, etag: str, ttl_seconds: int) -> None:
        pass
