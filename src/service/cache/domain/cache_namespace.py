"""
Cache Namespace Enum - Domain Value Object

Each namespace groups cached responses that are invalidated together by
bumping a single version counter.
"""

from enum import StrEnum


class CacheNamespace(StrEnum):
    TRIPS = 'api_cache:trips'
    TRIP_DETAIL = 'api_cache:trip_detail'
    SCHEDULES = 'api_cache:schedules'

    @property
    def ttl_seconds(self) -> int:
        """Lifetime of a stored ETag in this namespace"""
        return _TTL_SECONDS[self]


_TTL_SECONDS: dict[CacheNamespace, int] = {
    CacheNamespace.TRIPS: 300,
    CacheNamespace.TRIP_DETAIL: 300,
    CacheNamespace.SCHEDULES: 15,  # seat availability moves fast
}
