from typing import Optional

from src.platform.logging.loguru_io import Logger
from src.platform.state.redis_client import RedisClient, backend_call
from src.service.cache.app.interface.i_etag_store import IEtagStore
from src.service.cache.domain.etag import etag_storage_key


class EtagStoreImpl(IEtagStore):
    """ETags live at {versioned request key}:etag and expire with the namespace TTL"""

    def __init__(self, *, redis_client: RedisClient) -> None:
        self.redis_client = redis_client

    def _key(self, request_key: str) -> str:
        return self.redis_client.make_key(etag_storage_key(request_key))

    @Logger.io
    async def get_etag(self, *, request_key: str) -> Optional[str]:
        async with backend_call('GET'):
            raw = await self.redis_client.get_client().get(self._key(request_key))
        if raw is None:
            return None
        return raw.decode() if isinstance(raw, bytes) else str(raw)

    @Logger.io
    async def store_etag(self, *, request_key: str, etag: str, ttl_seconds: int) -> None:
        async with backend_call('SET'):
            await self.redis_client.get_client().set(self._key(request_key), etag, ex=ttl_seconds)
