"""
Conditional Read Use Case

Serves cacheable GETs with ETag revalidation:

    If-None-Match == stored ETag at the versioned key  -> 304, compute skipped (HIT)
    otherwise                                           -> compute, store ETag, 200 (MISS)

A version bump changes the key, so ETags issued before a write can never
produce a HIT afterwards. Redis being unreachable never fails a read: the
request is served as a MISS straight from the primary store.

Under the content_fallback policy a MISS whose freshly computed ETag still
matches If-None-Match is answered with 304. The primary store has already
been read by then, so the fallback only saves re-sending the body.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Mapping, Optional

from opentelemetry import trace

from src.platform.config.core_setting import ConditionalPolicy
from src.platform.exception.exceptions import BackendUnavailableError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cache.app.interface.i_etag_store import IEtagStore
from src.service.cache.app.query.versioned_key_builder import VersionedKeyBuilder
from src.service.cache.domain.cache_namespace import CacheNamespace
from src.service.cache.domain.conditional_result import ConditionalResult
from src.service.cache.domain.etag import canonical_body, compute_etag, etag_matches


ComputeBody = Callable[[], Awaitable[Any]]


class ConditionalReadUseCase:
    def __init__(
        self,
        *,
        etag_store: IEtagStore,
        key_builder: VersionedKeyBuilder,
        policy: ConditionalPolicy = ConditionalPolicy.VERSION_ONLY,
    ) -> None:
        self.etag_store = etag_store
        self.key_builder = key_builder
        self.policy = ConditionalPolicy(policy)
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def read(
        self,
        *,
        namespace: CacheNamespace,
        filters: Mapping[str, Any],
        if_none_match: Optional[str],
        compute: ComputeBody,
    ) -> ConditionalResult:
        """Build the versioned key for `filters`, then handle the request"""
        try:
            request_key: Optional[str] = await self.key_builder.build_from_filters(
                namespace, dict(filters)
            )
        except BackendUnavailableError as e:
            Logger.base.warning(f'⚠️ [CACHE] Key build failed for {namespace}, bypassing: {e}')
            request_key = None

        return await self.handle(
            request_key=request_key,
            if_none_match=if_none_match,
            compute=compute,
            ttl_seconds=namespace.ttl_seconds,
            namespace=namespace,
        )

    @Logger.io
    async def handle(
        self,
        *,
        request_key: Optional[str],
        if_none_match: Optional[str],
        compute: ComputeBody,
        ttl_seconds: int,
        namespace: str = 'unknown',
    ) -> ConditionalResult:
        """
        Args:
            request_key: Versioned key; None bypasses the cache entirely
            if_none_match: Raw If-None-Match header
            compute: Produces the JSON-serializable body from the primary store
            ttl_seconds: Lifetime of the stored ETag
            namespace: Metrics label
        """
        with self.tracer.start_as_current_span(
            'use_case.conditional_read',
            attributes={'cache.namespace': str(namespace), 'cache.policy': self.policy.value},
        ) as span:
            failed_open = request_key is None

            # Step 1: version-keyed lookup
            if request_key is not None and if_none_match:
                try:
                    stored_etag = await self.etag_store.get_etag(request_key=request_key)
                except BackendUnavailableError as e:
                    Logger.base.warning(f'⚠️ [CACHE] ETag lookup failed, serving fresh: {e}')
                    failed_open = True
                    stored_etag = None

                if etag_matches(stored_etag, if_none_match):
                    span.set_attribute('cache.result', 'hit')
                    metrics.record_conditional_request(namespace=namespace, result='hit')
                    return ConditionalResult.hit(etag=stored_etag)  # type: ignore[arg-type]

            # Step 2: compute from the primary store
            body = canonical_body(await compute())
            etag = compute_etag(body)

            # Step 3: remember the ETag for the next revalidation
            if request_key is not None:
                try:
                    await self.etag_store.store_etag(
                        request_key=request_key, etag=etag, ttl_seconds=ttl_seconds
                    )
                except BackendUnavailableError as e:
                    Logger.base.warning(f'⚠️ [CACHE] ETag store failed, response unaffected: {e}')
                    failed_open = True

            # Body already computed; a match here only avoids sending it
            if (
                self.policy is ConditionalPolicy.CONTENT_FALLBACK
                and if_none_match
                and etag_matches(etag, if_none_match)
            ):
                result_label = 'fail_open' if failed_open else 'fallback_304'
                span.set_attribute('cache.result', result_label)
                metrics.record_conditional_request(namespace=namespace, result=result_label)
                return ConditionalResult.revalidated(etag=etag)

            result_label = 'fail_open' if failed_open else 'miss'
            span.set_attribute('cache.result', result_label)
            metrics.record_conditional_request(namespace=namespace, result=result_label)
            return ConditionalResult.miss(etag=etag, body=body)
