"""
In-memory Redis double

Implements only the commands the cache layer uses (GET, INCR, SET EX, DEL).
`fail()` makes every command raise redis ConnectionError, which the adapters
must translate into BackendUnavailableError.
"""

import time
from typing import Any, Optional

from redis.exceptions import ConnectionError as RedisConnectionError

from src.platform.config.core_setting import Settings
from src.platform.state.redis_client import RedisClient


class InMemoryRedis:
    def __init__(self) -> None:
        self._data: dict[str, tuple[str, Optional[float]]] = {}
        self._failing = False
        self.commands: list[str] = []

    def fail(self, failing: bool = True) -> None:
        self._failing = failing

    def _check(self, command: str) -> None:
        self.commands.append(command)
        if self._failing:
            raise RedisConnectionError('Connection refused')

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= time.monotonic():
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        self._check('GET')
        return self._live(key)

    async def set(self, key: str, value: Any, ex: Optional[int] = None) -> bool:
        self._check('SET')
        expires_at = time.monotonic() + ex if ex else None
        self._data[key] = (str(value), expires_at)
        return True

    async def incr(self, key: str) -> int:
        self._check('INCR')
        current = self._live(key)
        new_value = int(current or 0) + 1
        self._data[key] = (str(new_value), None)
        return new_value

    async def delete(self, *keys: str) -> int:
        self._check('DEL')
        removed = 0
        for key in keys:
            if self._data.pop(key, None) is not None:
                removed += 1
        return removed

    async def ping(self) -> bool:
        self._check('PING')
        return True

    async def aclose(self) -> None:
        pass

    def peek(self, key: str) -> Optional[str]:
        """Read without recording a command"""
        return self._live(key)

    def ttl(self, key: str) -> Optional[float]:
        entry = self._data.get(key)
        if entry is None or entry[1] is None:
            return None
        return entry[1] - time.monotonic()

    def keys(self) -> list[str]:
        return list(self._data)

    def flushall(self) -> None:
        self._data.clear()
        self.commands.clear()


class InMemoryRedisClient(RedisClient):
    """RedisClient whose connection is an InMemoryRedis; no server needed"""

    def __init__(self, *, settings: Settings) -> None:
        super().__init__(settings=settings)
        self.fake = InMemoryRedis()

    async def initialize(self) -> Any:
        return self.fake

    def get_client(self) -> Any:
        return self.fake

    async def disconnect(self) -> None:
        pass
