"""
Test/ops endpoints. Mounted only when ENABLE_TEST_ENDPOINTS is true.
"""

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, status

from src.platform.config.di import Container
from src.platform.database.query_counter import QueryCounter
from src.platform.logging.loguru_io import Logger
from src.service.cache.app.command.invalidate_cache_use_case import InvalidateCacheUseCase
from src.service.cache.driving_adapter.http_controller.schema.cache_ops_schema import (
    CacheBumpResponse,
    CacheNamespaceRequest,
    CacheResetResponse,
    QueryCountRequest,
    QueryCountResponse,
)


router = APIRouter()


@router.post('/cache-bump', status_code=status.HTTP_200_OK)
@Logger.io
@inject
async def bump_cache(
    request: CacheNamespaceRequest,
    cache_invalidator: InvalidateCacheUseCase = Depends(Provide[Container.cache_invalidator]),
) -> CacheBumpResponse:
    new_version = await cache_invalidator.bump(namespace=request.namespace)
    return CacheBumpResponse(namespace=request.namespace, new_version=new_version)


@router.post('/cache-reset', status_code=status.HTTP_200_OK)
@Logger.io
@inject
async def reset_cache(
    request: CacheNamespaceRequest,
    cache_invalidator: InvalidateCacheUseCase = Depends(Provide[Container.cache_invalidator]),
) -> CacheResetResponse:
    await cache_invalidator.reset(namespace=request.namespace)
    return CacheResetResponse(namespace=request.namespace, version=0)


@router.get('/query-count', status_code=status.HTTP_200_OK)
@inject
async def get_query_count(
    query_counter: QueryCounter = Depends(Provide[Container.query_counter]),
) -> QueryCountResponse:
    return QueryCountResponse(count=query_counter.count)


@router.post('/query-count', status_code=status.HTTP_200_OK)
@inject
async def reset_query_count(
    request: QueryCountRequest,
    query_counter: QueryCounter = Depends(Provide[Container.query_counter]),
) -> QueryCountResponse:
    query_counter.reset()
    return QueryCountResponse(count=query_counter.count)
