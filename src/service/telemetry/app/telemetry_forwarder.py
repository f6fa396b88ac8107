"""
Best-effort analytics forwarding.

Request handlers enqueue without waiting; one background task drains the
queue and POSTs each event with bounded retries. Events are dropped, and
counted, when the queue is full, every attempt failed, or shutdown ran out
of drain time.
"""

from typing import Any, Optional

from anyio import (
    BrokenResourceError,
    CancelScope,
    ClosedResourceError,
    WouldBlock,
    create_memory_object_stream,
    current_time,
    sleep,
)
from anyio.abc import TaskGroup
import httpx
import orjson

from src.platform.config.core_setting import Settings
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics


class TelemetryForwarder:
    def __init__(self, *, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.url = settings.TELEMETRY_FORWARD_URL
        self.max_attempts = max(settings.TELEMETRY_MAX_ATTEMPTS, 1)
        self.backoff_seconds = settings.TELEMETRY_RETRY_BACKOFF_SECONDS
        self.timeout_seconds = settings.TELEMETRY_TIMEOUT_SECONDS
        self.drain_timeout_seconds = settings.TELEMETRY_DRAIN_TIMEOUT_SECONDS
        self._send_stream, self._receive_stream = create_memory_object_stream[dict[str, Any]](
            max_buffer_size=settings.TELEMETRY_QUEUE_SIZE
        )
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._started = False
        self._drain_scope: Optional[CancelScope] = None
        self._drain_deadline: Optional[float] = None

        self.forwarded_count = 0
        self.dropped_count = 0
        self.failed_count = 0

    @property
    def pending(self) -> int:
        return self._send_stream.statistics().current_buffer_used

    def submit(self, event: dict[str, Any]) -> bool:
        """Enqueue without blocking. Returns False when the event was dropped."""
        try:
            self._send_stream.send_nowait(event)
        except WouldBlock:
            self._drop(event, reason='queue full')
            return False
        except (ClosedResourceError, BrokenResourceError):
            self._drop(event, reason='forwarder stopped')
            return False
        return True

    def _drop(self, event: dict[str, Any], *, reason: str) -> None:
        self.dropped_count += 1
        metrics.telemetry_events_dropped.inc()
        Logger.base.warning(f'⚠️ [TELEMETRY] Dropping event {event.get("event")!r}: {reason}')

    async def start(self, *, task_group: TaskGroup) -> None:
        self._started = True
        task_group.start_soon(self.run)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(
            f'📈 [TELEMETRY] Forwarder started (target={self.url or "log only"})'
        )

    async def run(self) -> None:
        """
        Drain the queue until the send side is closed.

        Once aclose() is called the drain has TELEMETRY_DRAIN_TIMEOUT_SECONDS
        left; whatever is still queued or in flight then is counted as dropped.
        The owned HTTP client is closed here, after the last forward.
        """
        in_flight: Optional[dict[str, Any]] = None
        try:
            with CancelScope() as scope:
                self._drain_scope = scope
                if self._drain_deadline is not None:
                    scope.deadline = self._drain_deadline
                async for event in self._receive_stream:
                    in_flight = event
                    await self.forward(event)
                    in_flight = None

            if scope.cancelled_caught:
                abandoned = self._receive_stream.statistics().current_buffer_used
                abandoned += 1 if in_flight is not None else 0
                self.dropped_count += abandoned
                metrics.telemetry_events_dropped.inc(abandoned)
                Logger.base.warning(
                    f'⚠️ [TELEMETRY] Drain timed out, dropped {abandoned} pending event(s)'
                )
        finally:
            self._drain_scope = None
            with CancelScope(shield=True):
                await self._receive_stream.aclose()
                await self._close_http_client()

    async def forward(self, event: dict[str, Any]) -> bool:
        if not self.url:
            Logger.base.info(f'📈 [TELEMETRY] {event.get("event")} {event.get("properties") or {}}')
            return True

        client = self._get_http_client()
        content = orjson.dumps(event)
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = await client.post(
                    self.url,
                    content=content,
                    headers={'Content-Type': 'application/json'},
                    timeout=self.timeout_seconds,
                )
                response.raise_for_status()
                self.forwarded_count += 1
                return True
            except httpx.HTTPError as e:
                Logger.base.warning(
                    f'⚠️ [TELEMETRY] Forward attempt {attempt}/{self.max_attempts} failed: {e}'
                )
                if attempt < self.max_attempts:
                    await sleep(self.backoff_seconds * attempt)

        self.failed_count += 1
        metrics.telemetry_forward_failures.inc()
        Logger.base.error(
            f'❌ [TELEMETRY] Giving up on event {event.get("event")!r} '
            f'after {self.max_attempts} attempts'
        )
        return False

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def _close_http_client(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def aclose(self) -> None:
        """Stop accepting events and bound the remaining drain"""
        self._drain_deadline = current_time() + self.drain_timeout_seconds
        if self._drain_scope is not None:
            self._drain_scope.deadline = self._drain_deadline
        await self._send_stream.aclose()

        # Without a running drain nothing else will release the client
        if not self._started:
            await self._close_http_client()
