from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

from redis.asyncio import ConnectionPool as AsyncConnectionPool, Redis as AsyncRedis
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import BackendUnavailableError
from src.platform.logging.loguru_io import Logger


class RedisClient:
    """
    Async Redis client with connection pool.

    Owned by the DI container: constructed once per process, initialized in the
    app lifespan and closed at shutdown.

    Usage:
        await container.redis_client().initialize()  # In startup
        client = redis_client.get_client()  # In adapters
    """

    def __init__(self, *, settings: Settings) -> None:
        self._settings = settings
        self._client: Optional[AsyncRedis] = None

    @property
    def key_prefix(self) -> str:
        return self._settings.REDIS_KEY_PREFIX

    def make_key(self, key: str) -> str:
        """Add prefix to key for test isolation in parallel testing"""
        return f'{self.key_prefix}{key}'

    async def initialize(self) -> AsyncRedis:
        """Initialize connection pool (idempotent)"""
        if self._client is not None:
            return self._client

        s = self._settings
        pool = AsyncConnectionPool.from_url(
            f'redis://{s.REDIS_HOST}:{s.REDIS_PORT}/{s.REDIS_DB}',
            password=s.REDIS_PASSWORD if s.REDIS_PASSWORD else None,
            decode_responses=s.REDIS_DECODE_RESPONSES,
            max_connections=s.REDIS_POOL_MAX_CONNECTIONS,
            socket_timeout=s.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=s.REDIS_SOCKET_CONNECT_TIMEOUT,
            socket_keepalive=s.REDIS_SOCKET_KEEPALIVE,
            health_check_interval=s.REDIS_HEALTH_CHECK_INTERVAL,
        )
        client = AsyncRedis.from_pool(pool)
        try:
            await client.ping()
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            # Cache is optional for correctness; reads fail open until Redis is back
            Logger.base.warning(f'⚠️ [REDIS] Ping failed at startup, continuing degraded: {e}')
        self._client = client
        Logger.base.info(f'📡 [REDIS] Pool ready for {s.REDIS_HOST}:{s.REDIS_PORT}/{s.REDIS_DB}')
        return client

    def get_client(self) -> AsyncRedis:
        if self._client is None:
            raise RuntimeError(
                'Redis client not initialized. '
                'Call await redis_client.initialize() during startup.'
            )
        return self._client

    async def disconnect(self) -> None:
        """Close connection pool"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


@asynccontextmanager
async def backend_call(operation: str) -> AsyncIterator[None]:
    """Translate Redis transport failures and timeouts into BackendUnavailableError."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError, OSError) as e:
        raise BackendUnavailableError(f'Redis {operation} failed: {e}') from e
