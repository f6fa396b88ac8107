"""
Unit tests for ConditionalReadUseCase

Real key builder and stores over the in-memory Redis; `compute` is an
AsyncMock standing in for the primary-store query.
"""

from unittest.mock import AsyncMock

import pytest

from src.platform.config.core_setting import ConditionalPolicy
from src.service.cache.app.command.invalidate_cache_use_case import InvalidateCacheUseCase
from src.service.cache.app.query.conditional_read_use_case import ConditionalReadUseCase
from src.service.cache.app.query.versioned_key_builder import VersionedKeyBuilder
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.cache.domain.conditional_result import CacheStatus
from src.service.cache.driven_adapter.state.cache_version_store_impl import CacheVersionStoreImpl
from src.service.cache.driven_adapter.state.etag_store_impl import EtagStoreImpl
from test.fake_redis import InMemoryRedisClient


FILTERS = {'cat': 'tour', 'l': 20, 'o': 0}
BODY = {'trips': [{'id': 't1', 'title': 'Lagos Lagoon Cruise'}], 'total': 1}


@pytest.fixture
def version_store(redis_client: InMemoryRedisClient) -> CacheVersionStoreImpl:
    return CacheVersionStoreImpl(redis_client=redis_client)


@pytest.fixture
def invalidator(version_store: CacheVersionStoreImpl) -> InvalidateCacheUseCase:
    return InvalidateCacheUseCase(version_store=version_store)


def _reader(
    redis_client: InMemoryRedisClient, version_store: CacheVersionStoreImpl, policy
) -> ConditionalReadUseCase:
    return ConditionalReadUseCase(
        etag_store=EtagStoreImpl(redis_client=redis_client),
        key_builder=VersionedKeyBuilder(version_store=version_store),
        policy=policy,
    )


@pytest.fixture
def reader(redis_client, version_store) -> ConditionalReadUseCase:
    return _reader(redis_client, version_store, ConditionalPolicy.VERSION_ONLY)


@pytest.fixture
def fallback_reader(redis_client, version_store) -> ConditionalReadUseCase:
    return _reader(redis_client, version_store, ConditionalPolicy.CONTENT_FALLBACK)


@pytest.fixture
def compute() -> AsyncMock:
    return AsyncMock(return_value=BODY)


async def _read(reader: ConditionalReadUseCase, compute: AsyncMock, if_none_match=None):
    return await reader.read(
        namespace=CacheNamespace.TRIPS,
        filters=FILTERS,
        if_none_match=if_none_match,
        compute=compute,
    )


@pytest.mark.unit
class TestConditionalRead:
    @pytest.mark.asyncio
    async def test_first_request_is_miss_with_body_and_etag(self, reader, compute) -> None:
        result = await _read(reader, compute)

        assert result.not_modified is False
        assert result.cache_status is CacheStatus.MISS
        assert result.etag is not None
        assert result.body is not None
        compute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_matching_etag_is_hit_without_compute(self, reader, compute) -> None:
        first = await _read(reader, compute)
        compute.reset_mock()

        second = await _read(reader, compute, if_none_match=first.etag)

        assert second.not_modified is True
        assert second.cache_status is CacheStatus.HIT
        assert second.etag == first.etag
        assert second.body is None
        compute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stale_etag_recomputes(self, reader, compute) -> None:
        await _read(reader, compute)

        result = await _read(reader, compute, if_none_match='"stale"')

        assert result.not_modified is False
        assert result.cache_status is CacheStatus.MISS
        assert compute.await_count == 2

    @pytest.mark.asyncio
    async def test_version_bump_invalidates_old_etag(self, reader, invalidator, compute) -> None:
        first = await _read(reader, compute)
        await invalidator.invalidate(CacheNamespace.TRIPS)

        result = await _read(reader, compute, if_none_match=first.etag)

        # Same content, new key: an intentional over-invalidation
        assert result.not_modified is False
        assert result.cache_status is CacheStatus.MISS
        assert result.etag == first.etag
        assert compute.await_count == 2

    @pytest.mark.asyncio
    async def test_content_fallback_revalidates_unchanged_body_after_bump(
        self, fallback_reader, invalidator, compute
    ) -> None:
        first = await _read(fallback_reader, compute)
        await invalidator.invalidate(CacheNamespace.TRIPS)

        result = await _read(fallback_reader, compute, if_none_match=first.etag)

        assert result.not_modified is True
        assert result.cache_status is CacheStatus.MISS
        assert result.body is None
        assert compute.await_count == 2

    @pytest.mark.asyncio
    async def test_content_fallback_changed_body_is_full_response(
        self, fallback_reader, invalidator, compute
    ) -> None:
        first = await _read(fallback_reader, compute)
        await invalidator.invalidate(CacheNamespace.TRIPS)
        compute.return_value = {'trips': [], 'total': 0}

        result = await _read(fallback_reader, compute, if_none_match=first.etag)

        assert result.not_modified is False
        assert result.etag != first.etag

    @pytest.mark.asyncio
    async def test_bump_on_other_namespace_keeps_hit(self, reader, invalidator, compute) -> None:
        first = await _read(reader, compute)
        await invalidator.invalidate(CacheNamespace.SCHEDULES)

        result = await _read(reader, compute, if_none_match=first.etag)

        assert result.cache_status is CacheStatus.HIT

    @pytest.mark.asyncio
    async def test_redis_down_fails_open(self, reader, redis_client, compute) -> None:
        first = await _read(reader, compute)
        redis_client.fake.fail()

        result = await _read(reader, compute, if_none_match=first.etag)

        assert result.not_modified is False
        assert result.body is not None
        assert compute.await_count == 2

    @pytest.mark.asyncio
    async def test_etag_store_failure_still_returns_body(
        self, reader, redis_client, compute
    ) -> None:
        redis_client.fake.fail()

        result = await reader.handle(
            request_key='api_cache:trips:v0:l:20',
            if_none_match=None,
            compute=compute,
            ttl_seconds=300,
        )

        assert result.cache_status is CacheStatus.MISS
        assert result.body is not None

    @pytest.mark.asyncio
    async def test_no_if_none_match_skips_lookup(self, reader, redis_client, compute) -> None:
        await reader.handle(
            request_key='api_cache:trips:v0:l:20',
            if_none_match=None,
            compute=compute,
            ttl_seconds=300,
        )

        assert redis_client.fake.commands == ['SET']

    @pytest.mark.asyncio
    async def test_etag_stored_with_namespace_ttl(self, reader, redis_client, compute) -> None:
        await reader.read(
            namespace=CacheNamespace.SCHEDULES,
            filters={'trip': 't1'},
            if_none_match=None,
            compute=compute,
        )

        ttl = redis_client.fake.ttl('test_api_cache:schedules:v0:trip:t1:etag')
        assert ttl is not None and 0 < ttl <= 15

    @pytest.mark.asyncio
    async def test_wildcard_matches_stored_etag(self, reader, compute) -> None:
        await _read(reader, compute)
        compute.reset_mock()

        result = await _read(reader, compute, if_none_match='*')

        assert result.cache_status is CacheStatus.HIT
        compute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_compute_errors_propagate(self, reader) -> None:
        failing = AsyncMock(side_effect=RuntimeError('db exploded'))

        with pytest.raises(RuntimeError):
            await _read(reader, failing)
