"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import AsyncEngineManager, Database
from src.platform.database.query_counter import QueryCounter
from src.platform.state.redis_client import RedisClient
from src.service.cache.app.command.invalidate_cache_use_case import InvalidateCacheUseCase
from src.service.cache.app.query.conditional_read_use_case import ConditionalReadUseCase
from src.service.cache.app.query.versioned_key_builder import VersionedKeyBuilder
from src.service.cache.driven_adapter.state.cache_version_store_impl import CacheVersionStoreImpl
from src.service.cache.driven_adapter.state.etag_store_impl import EtagStoreImpl
from src.service.catalog.driven_adapter.repo.trip_command_repo_impl import TripCommandRepoImpl
from src.service.catalog.driven_adapter.repo.trip_query_repo_impl import TripQueryRepoImpl
from src.service.payment.app.provider.webhook_provider_registry import WebhookProviderRegistry
from src.service.payment.driven_adapter.repo.payment_effect_handler_impl import (
    PaymentEffectHandlerImpl,
)
from src.service.payment.driven_adapter.repo.webhook_event_repo_impl import WebhookEventRepoImpl
from src.service.telemetry.app.telemetry_forwarder import TelemetryForwarder


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (write engine on the primary, read engine on the replica if configured)
    engine_manager = providers.Singleton(AsyncEngineManager, settings=config_service)
    database = providers.Singleton(Database, engine_manager=engine_manager, read_only=False)
    read_database = providers.Singleton(Database, engine_manager=engine_manager, read_only=True)
    query_counter = providers.Singleton(QueryCounter)

    # Redis (initialized and closed by main.py lifespan)
    redis_client = providers.Singleton(RedisClient, settings=config_service)

    # Read-path cache
    cache_version_store = providers.Singleton(CacheVersionStoreImpl, redis_client=redis_client)
    etag_store = providers.Singleton(EtagStoreImpl, redis_client=redis_client)
    versioned_key_builder = providers.Singleton(
        VersionedKeyBuilder, version_store=cache_version_store
    )
    conditional_read_use_case = providers.Singleton(
        ConditionalReadUseCase,
        etag_store=etag_store,
        key_builder=versioned_key_builder,
        policy=config_service.provided.CONDITIONAL_POLICY,
    )
    cache_invalidator = providers.Singleton(
        InvalidateCacheUseCase, version_store=cache_version_store
    )

    # Repositories (stateless - use session_factory per-request)
    trip_query_repo = providers.Singleton(
        TripQueryRepoImpl, session_factory=read_database.provided.session
    )
    trip_command_repo = providers.Singleton(
        TripCommandRepoImpl, session_factory=database.provided.session
    )
    webhook_event_repo = providers.Singleton(
        WebhookEventRepoImpl, session_factory=database.provided.session
    )
    payment_effect_handler = providers.Singleton(
        PaymentEffectHandlerImpl, session_factory=database.provided.session
    )

    # Payment providers
    webhook_provider_registry = providers.Singleton(
        WebhookProviderRegistry, settings=config_service
    )

    # Telemetry (background task started by main.py lifespan)
    telemetry_forwarder = providers.Singleton(TelemetryForwarder, settings=config_service)


container = Container()
