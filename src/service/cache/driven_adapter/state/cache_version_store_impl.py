"""
Cache Version Store Implementation

Redis-backed namespace version counters.

Storage Format:
    Key: cache_version:{namespace}
    Type: String (integer)
    No TTL: a counter only ever moves forward, or is deleted by reset
"""

from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.state.redis_client import RedisClient, backend_call
from src.service.cache.app.interface.i_cache_version_store import ICacheVersionStore
from src.service.cache.domain.versioned_key import parse_version, version_key


class CacheVersionStoreImpl(ICacheVersionStore):
    def __init__(self, *, redis_client: RedisClient) -> None:
        self.redis_client = redis_client
        self.tracer = trace.get_tracer(__name__)

    def _key(self, namespace: str) -> str:
        return self.redis_client.make_key(version_key(namespace))

    @Logger.io
    async def get_version(self, *, namespace: str) -> int:
        with self.tracer.start_as_current_span(
            'cache.version.get', attributes={'cache.namespace': namespace}
        ):
            async with backend_call('GET'):
                raw = await self.redis_client.get_client().get(self._key(namespace))
            return parse_version(raw)

    @Logger.io
    async def bump_version(self, *, namespace: str) -> int:
        with self.tracer.start_as_current_span(
            'cache.version.bump', attributes={'cache.namespace': namespace}
        ):
            async with backend_call('INCR'):
                new_version = await self.redis_client.get_client().incr(self._key(namespace))
            Logger.base.info(f'🔼 [CACHE] {namespace} -> v{new_version}')
            return int(new_version)

    @Logger.io
    async def reset_version(self, *, namespace: str) -> None:
        async with backend_call('DEL'):
            await self.redis_client.get_client().delete(self._key(namespace))
        Logger.base.warning(f'♻️ [CACHE] {namespace} version reset to 0')
