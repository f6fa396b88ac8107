"""
Test Configuration and Fixtures

This module provides:
- Environment setup before application modules read settings
- An in-memory Redis client shared by cache and API tests

Architecture:
- Unit tests (test/**/unit/): Ports replaced with AsyncMock or in-memory doubles
- API tests (test/service/e2e/): Real FastAPI app and DI container, repositories
  overridden, Redis replaced by the in-memory double
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time (core_setting.settings)
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    os.environ['REDIS_KEY_PREFIX'] = 'test_' if worker_id == 'master' else f'test_{worker_id}_'
    os.environ['POSTGRES_DB'] = (
        'booking_platform_test_db' if worker_id == 'master' else f'booking_platform_test_db_{worker_id}'
    )

    # Create test log directory
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['PAYSTACK_SECRET_KEY'] = 'sk_test_paystack'
    os.environ['METATICKETS_WEBHOOK_SECRET'] = 'whsec_test_metatickets'
    os.environ['ENABLE_TEST_ENDPOINTS'] = 'true'
    os.environ.pop('TELEMETRY_FORWARD_URL', None)


# Call immediately to set env vars before any imports
_early_setup_test_environment()

import asyncio  # noqa: E402
from collections.abc import AsyncGenerator, Generator  # noqa: E402
from contextlib import ExitStack  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock  # noqa: E402

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
import attrs  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import make_url, text  # noqa: E402
from sqlalchemy.exc import DBAPIError  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402

from src.platform.config.core_setting import Settings  # noqa: E402
from src.platform.config.di import container  # noqa: E402
from src.platform.constant.path import ALEMBIC_INI  # noqa: E402
from src.platform.database.orm_db_setting import AsyncEngineManager  # noqa: E402
from src.platform.database.query_counter import QueryCounter  # noqa: E402
from src.service.catalog.app.dto.trip_read_model import TripPage  # noqa: E402
from src.service.catalog.app.interface.i_trip_query_repo import ITripQueryRepo  # noqa: E402
from src.service.telemetry.app.telemetry_forwarder import TelemetryForwarder  # noqa: E402
from test.fake_payment_store import (  # noqa: E402
    SEEDED_BOOKING_REFERENCE,
    InMemoryWebhookEventRepo,
    RecordingPaymentEffectHandler,
)
from test.fake_redis import InMemoryRedisClient  # noqa: E402
from test.postgres_seed import truncate_tables  # noqa: E402


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        PAYSTACK_SECRET_KEY='sk_test_paystack',
        METATICKETS_WEBHOOK_SECRET='whsec_test_metatickets',
        REDIS_KEY_PREFIX='test_',
        TELEMETRY_FORWARD_URL=None,
    )


@pytest.fixture
def redis_client(test_settings: Settings) -> Generator[InMemoryRedisClient, None, None]:
    client = InMemoryRedisClient(settings=test_settings)
    yield client
    client.fake.flushall()


# =============================================================================
# PostgreSQL (tests marked `postgres`; one database per xdist worker)
# =============================================================================
async def _reset_test_database(settings: Settings) -> None:
    url = make_url(settings.DATABASE_URL_ASYNC)

    # Create database if not exists
    admin_engine = create_async_engine(url.set(database='postgres'), isolation_level='AUTOCOMMIT')
    try:
        async with admin_engine.connect() as conn:
            exists = await conn.scalar(
                text('SELECT 1 FROM pg_database WHERE datname = :name'), {'name': url.database}
            )
            if not exists:
                await conn.execute(text(f'CREATE DATABASE "{url.database}"'))
    finally:
        await admin_engine.dispose()

    # Reset schema; alembic rebuilds it
    engine = create_async_engine(url)
    try:
        async with engine.begin() as conn:
            await conn.execute(text('DROP SCHEMA public CASCADE'))
            await conn.execute(text('CREATE SCHEMA public'))
    finally:
        await engine.dispose()


@pytest.fixture(scope='session')
def postgres_schema() -> None:
    try:
        asyncio.run(_reset_test_database(Settings()))
    except (OSError, DBAPIError) as e:
        pytest.skip(f'PostgreSQL not reachable: {e}')

    # env.py runs its own event loop, so migrate outside one
    command.upgrade(Config(str(ALEMBIC_INI)), 'head')


@pytest_asyncio.fixture
async def engine_manager(postgres_schema: None) -> AsyncGenerator[AsyncEngineManager, None]:
    """Engines on the test database, with every table emptied first"""
    manager = AsyncEngineManager(settings=Settings())
    await truncate_tables(manager.get_engine())
    yield manager
    await manager.dispose()


# =============================================================================
# API test fixtures
# =============================================================================


@attrs.define
class ApiDoubles:
    """Everything the `client` fixture put in place of real backends"""

    redis_client: InMemoryRedisClient
    query_counter: QueryCounter
    trip_query_repo: ITripQueryRepo
    trip_command_repo: AsyncMock
    webhook_event_repo: InMemoryWebhookEventRepo
    payment_effect_handler: RecordingPaymentEffectHandler
    telemetry_forwarder: TelemetryForwarder


def _counted(query_counter: QueryCounter, result: Any) -> AsyncMock:
    """Stand-in repo method that counts one primary-store statement per call"""

    async def run(**_: Any) -> Any:
        query_counter.increment()
        return result

    return AsyncMock(side_effect=run)


@pytest.fixture
def app_settings(test_settings: Settings) -> Settings:
    return test_settings


def build_api_doubles(app_settings: Settings) -> ApiDoubles:
    query_counter = QueryCounter()
    trip_query_repo = AsyncMock()
    trip_query_repo.list_trips = _counted(query_counter, TripPage(trips=[], total=0))
    trip_query_repo.get_trip_detail = _counted(query_counter, None)
    trip_query_repo.list_schedules = _counted(query_counter, [])
    return ApiDoubles(
        redis_client=InMemoryRedisClient(settings=app_settings),
        query_counter=query_counter,
        trip_query_repo=trip_query_repo,
        trip_command_repo=AsyncMock(),
        webhook_event_repo=InMemoryWebhookEventRepo(),
        payment_effect_handler=RecordingPaymentEffectHandler(SEEDED_BOOKING_REFERENCE),
        telemetry_forwarder=TelemetryForwarder(settings=app_settings),
    )


@pytest.fixture
def api_doubles(app_settings: Settings) -> ApiDoubles:
    return build_api_doubles(app_settings)


@pytest.fixture
def client(
    app_settings: Settings, api_doubles: ApiDoubles
) -> Generator[TestClient, None, None]:
    from test.test_main import app

    container.reset_singletons()
    with ExitStack() as overrides:
        overrides.enter_context(container.config_service.override(app_settings))
        overrides.enter_context(container.redis_client.override(api_doubles.redis_client))
        overrides.enter_context(container.query_counter.override(api_doubles.query_counter))
        overrides.enter_context(container.trip_query_repo.override(api_doubles.trip_query_repo))
        overrides.enter_context(
            container.trip_command_repo.override(api_doubles.trip_command_repo)
        )
        overrides.enter_context(
            container.webhook_event_repo.override(api_doubles.webhook_event_repo)
        )
        overrides.enter_context(
            container.payment_effect_handler.override(api_doubles.payment_effect_handler)
        )
        overrides.enter_context(
            container.telemetry_forwarder.override(api_doubles.telemetry_forwarder)
        )

        with TestClient(app, raise_server_exceptions=False) as test_client:
            yield test_client

    container.reset_singletons()
