from enum import StrEnum
from typing import Optional

import attrs


class CacheStatus(StrEnum):
    HIT = 'HIT'
    MISS = 'MISS'


@attrs.define(frozen=True)
class ConditionalResult:
    """
    Outcome of one conditional read.

    - HIT: stored ETag matched If-None-Match; body was never computed
    - MISS: body computed (and ETag stored when the cache was reachable)
    - MISS + not_modified: fresh body hashed to the client's ETag (content fallback)
    """

    not_modified: bool
    cache_status: CacheStatus
    etag: Optional[str] = None
    body: Optional[bytes] = None

    @classmethod
    def hit(cls, *, etag: str) -> 'ConditionalResult':
        return cls(not_modified=True, cache_status=CacheStatus.HIT, etag=etag)

    @classmethod
    def miss(cls, *, etag: str, body: bytes) -> 'ConditionalResult':
        return cls(not_modified=False, cache_status=CacheStatus.MISS, etag=etag, body=body)

    @classmethod
    def revalidated(cls, *, etag: str) -> 'ConditionalResult':
        return cls(not_modified=True, cache_status=CacheStatus.MISS, etag=etag)
