"""
Production FastAPI Application

Catalog reads with conditional GET, payment webhooks and telemetry forwarding.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage unified application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Booking Platform] Starting up...')

    # Setup OpenTelemetry tracing (OTLP when OTEL_EXPORTER_OTLP_ENDPOINT is set)
    tracing = TracingConfig(service_name='booking-platform')
    tracing.setup()
    Logger.base.info('📊 [Booking Platform] OpenTelemetry tracing configured')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Booking Platform] Dependency injection wired')

    # Database engines + per-statement query counter
    engine_manager = container.engine_manager()
    tracing.instrument_sqlalchemy(
        engines=[engine_manager.get_engine(), engine_manager.get_engine(read_only=True)]
    )
    container.query_counter().install()
    Logger.base.info('🗄️  [Booking Platform] Database engines ready + instrumented')

    # Redis (degraded start allowed; cache reads fail open)
    tracing.instrument_redis()
    redis_client = container.redis_client()
    await redis_client.initialize()
    Logger.base.info('📡 [Booking Platform] Redis initialized')

    telemetry_forwarder = container.telemetry_forwarder()

    async with anyio.create_task_group() as tg:
        await telemetry_forwarder.start(task_group=tg)
        Logger.base.info('✅ [Booking Platform] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Booking Platform] Shutting down...')
        # Closing the send side lets the forwarder drain and exit
        await telemetry_forwarder.aclose()

    container.query_counter().uninstall()

    await engine_manager.dispose()
    Logger.base.info('🗄️  [Booking Platform] Database engines disposed')

    await redis_client.disconnect()
    Logger.base.info('📡 [Booking Platform] Redis disconnected')

    # Shutdown tracing (flush remaining spans)
    tracing.shutdown()
    Logger.base.info('📊 [Booking Platform] Tracing shutdown complete')

    # Unwire DI
    container.unwire()

    Logger.base.info('👋 [Booking Platform] Shutdown complete')


# Create FastAPI app using shared factory
app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
