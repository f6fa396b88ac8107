"""
Shared FastAPI App Factory

Provides common app setup for production and test environments.
"""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.platform.config.core_setting import settings
from src.platform.exception.exception_handlers import register_exception_handlers
from src.platform.observability.tracing import TracingConfig
from src.service.cache.driving_adapter.http_controller.cache_ops_controller import (
    router as cache_ops_router,
)
from src.service.catalog.driving_adapter.http_controller.trip_controller import (
    router as trip_router,
)
from src.service.payment.driving_adapter.http_controller.webhook_controller import (
    router as webhook_router,
)
from src.service.telemetry.driving_adapter.http_controller.telemetry_controller import (
    router as telemetry_router,
)


def create_app(
    *,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[Any]],
    title_suffix: str = '',
    description: str = 'Booking Platform - trip catalog reads and payment webhooks',
    service_name: str = 'booking-platform',
    enable_test_endpoints: Optional[bool] = None,
) -> FastAPI:
    """
    Create a configured FastAPI application.

    Args:
        lifespan: Async context manager for app lifespan (startup/shutdown)
        title_suffix: Optional suffix for app title (e.g., " (Test)")
        description: App description
        service_name: Service name for tracing
        enable_test_endpoints: Mount /api/test; defaults to ENABLE_TEST_ENDPOINTS

    Returns:
        Configured FastAPI application
    """
    title = f'{settings.PROJECT_NAME}{title_suffix}'

    app = FastAPI(
        title=title,
        description=description,
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # Auto-instrument FastAPI (must be done before mounting routes)
    tracing_config = TracingConfig(service_name=service_name)
    tracing_config.instrument_fastapi(app=app)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,  # type: ignore
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
        expose_headers=['ETag', 'X-Cache'],
    )

    # Register exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(trip_router, prefix='/api/trips', tags=['trips'])
    app.include_router(webhook_router, prefix='/api/webhooks', tags=['webhooks'])
    app.include_router(telemetry_router, prefix='/api/telemetry', tags=['telemetry'])

    if enable_test_endpoints is None:
        enable_test_endpoints = settings.ENABLE_TEST_ENDPOINTS
    if enable_test_endpoints:
        app.include_router(cache_ops_router, prefix='/api/test', tags=['test'])

    # Register common endpoints
    _register_common_endpoints(app)

    return app


def _register_common_endpoints(app: FastAPI) -> None:
    """Register health and metrics endpoints."""

    @app.get('/health')
    async def health_check() -> dict[str, str]:
        """Health check endpoint for container orchestration."""
        return {'status': 'healthy', 'service': 'Booking Platform'}

    @app.get('/metrics')
    async def get_metrics() -> PlainTextResponse:
        """Prometheus metrics endpoint."""
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
