from opentelemetry import trace

from src.platform.exception.exceptions import BackendUnavailableError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cache.app.interface.i_cache_invalidator import ICacheInvalidator
from src.service.cache.app.interface.i_cache_version_store import ICacheVersionStore


class InvalidateCacheUseCase(ICacheInvalidator):
    """
    Bumps namespace versions after writes.

    Every requested namespace is attempted even if an earlier one fails, so a
    single Redis hiccup invalidates as much as it can before reporting.
    """

    def __init__(self, *, version_store: ICacheVersionStore) -> None:
        self.version_store = version_store
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def invalidate(self, *namespaces: str) -> dict[str, int]:
        with self.tracer.start_as_current_span(
            'use_case.invalidate_cache', attributes={'cache.namespaces': list(namespaces)}
        ):
            new_versions: dict[str, int] = {}
            failures: list[BackendUnavailableError] = []

            for namespace in dict.fromkeys(namespaces):
                try:
                    new_versions[namespace] = await self.bump(namespace=namespace)
                except BackendUnavailableError as e:
                    failures.append(e)

            if failures:
                missed = [ns for ns in dict.fromkeys(namespaces) if ns not in new_versions]
                raise BackendUnavailableError(
                    f'Cache invalidation incomplete for {", ".join(missed)}'
                ) from failures[0]
            return new_versions

    @Logger.io
    async def bump(self, *, namespace: str) -> int:
        try:
            new_version = await self.version_store.bump_version(namespace=namespace)
        except BackendUnavailableError:
            metrics.record_version_bump(namespace=namespace, ok=False)
            raise
        metrics.record_version_bump(namespace=namespace, ok=True)
        return new_version

    @Logger.io
    async def reset(self, *, namespace: str) -> None:
        await self.version_store.reset_version(namespace=namespace)
