"""
Unit tests for TelemetryForwarder

The collector is an httpx.MockTransport; backoff is zero so retries do not
slow the suite down.
"""

import anyio
import httpx
import orjson
import pytest

from src.platform.config.core_setting import Settings
from src.service.telemetry.app import telemetry_forwarder as forwarder_module
from src.service.telemetry.app.telemetry_forwarder import TelemetryForwarder


COLLECTOR_URL = 'http://collector.test/events'


def _settings(**overrides) -> Settings:
    params = {
        'TELEMETRY_FORWARD_URL': COLLECTOR_URL,
        'TELEMETRY_QUEUE_SIZE': 10,
        'TELEMETRY_MAX_ATTEMPTS': 3,
        'TELEMETRY_RETRY_BACKOFF_SECONDS': 0,
    }
    params.update(overrides)
    return Settings(**params)


class Collector:
    """Answers with the queued status codes, then 202"""

    def __init__(self, *statuses: int) -> None:
        self.statuses = list(statuses)
        self.received: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.received.append(orjson.loads(request.content))
        status_code = self.statuses.pop(0) if self.statuses else 202
        return httpx.Response(status_code)


def _forwarder(collector: Collector, **overrides) -> TelemetryForwarder:
    return TelemetryForwarder(
        settings=_settings(**overrides),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(collector)),
    )


EVENT = {'event': 'trip_viewed', 'properties': {'trip_id': 't1'}}


@pytest.mark.unit
class TestSubmit:
    def test_full_queue_drops_and_counts(self) -> None:
        forwarder = _forwarder(Collector(), TELEMETRY_QUEUE_SIZE=2)

        accepted = [forwarder.submit(EVENT) for _ in range(5)]

        assert accepted == [True, True, False, False, False]
        assert forwarder.dropped_count == 3

    @pytest.mark.asyncio
    async def test_submit_after_close_drops(self) -> None:
        forwarder = _forwarder(Collector())
        await forwarder.aclose()

        assert forwarder.submit(EVENT) is False
        assert forwarder.dropped_count == 1


@pytest.mark.unit
class TestForward:
    @pytest.mark.asyncio
    async def test_posts_event_as_json(self) -> None:
        collector = Collector()
        forwarder = _forwarder(collector)

        assert await forwarder.forward(EVENT) is True

        assert collector.received == [EVENT]
        assert forwarder.forwarded_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self) -> None:
        collector = Collector(503, 500)
        forwarder = _forwarder(collector)

        assert await forwarder.forward(EVENT) is True

        assert len(collector.received) == 3
        assert forwarder.failed_count == 0

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self) -> None:
        collector = Collector(500, 500, 500, 500)
        forwarder = _forwarder(collector)

        assert await forwarder.forward(EVENT) is False

        assert len(collector.received) == 3
        assert forwarder.failed_count == 1
        assert forwarder.forwarded_count == 0

    @pytest.mark.asyncio
    async def test_without_url_only_logs(self) -> None:
        collector = Collector()
        forwarder = _forwarder(collector, TELEMETRY_FORWARD_URL=None)

        assert await forwarder.forward(EVENT) is True

        assert collector.received == []


@pytest.mark.unit
class TestRun:
    @pytest.mark.asyncio
    async def test_drains_queue_until_closed(self) -> None:
        collector = Collector()
        forwarder = _forwarder(collector)

        async with anyio.create_task_group() as task_group:
            await forwarder.start(task_group=task_group)
            forwarder.submit({'event': 'search'})
            forwarder.submit({'event': 'checkout_started'})
            await forwarder.aclose()

        assert [event['event'] for event in collector.received] == ['search', 'checkout_started']
        assert forwarder.forwarded_count == 2


@pytest.mark.unit
class TestShutdown:
    @pytest.fixture
    def owned_clients(self, monkeypatch) -> list[httpx.AsyncClient]:
        """Make the forwarder build its own clients over a MockTransport"""
        created: list[httpx.AsyncClient] = []
        real_client = httpx.AsyncClient

        def build() -> httpx.AsyncClient:
            client = real_client(transport=httpx.MockTransport(Collector()))
            created.append(client)
            return client

        monkeypatch.setattr(forwarder_module.httpx, 'AsyncClient', build)
        return created

    @pytest.mark.asyncio
    async def test_buffered_events_use_one_client_that_ends_closed(self, owned_clients) -> None:
        forwarder = TelemetryForwarder(settings=_settings())
        for name in ('search', 'trip_viewed', 'checkout_started'):
            forwarder.submit({'event': name})

        async with anyio.create_task_group() as task_group:
            await forwarder.start(task_group=task_group)
            await forwarder.aclose()

        assert forwarder.forwarded_count == 3
        assert len(owned_clients) == 1
        assert owned_clients[0].is_closed

    @pytest.mark.asyncio
    async def test_close_without_start_releases_owned_client(self, owned_clients) -> None:
        forwarder = TelemetryForwarder(settings=_settings())
        await forwarder.forward(EVENT)

        await forwarder.aclose()

        assert owned_clients[0].is_closed

    @pytest.mark.asyncio
    async def test_drain_is_bounded_and_counts_abandoned_events(self) -> None:
        async def stalled(request: httpx.Request) -> httpx.Response:
            await anyio.sleep_forever()

        forwarder = TelemetryForwarder(
            settings=_settings(TELEMETRY_DRAIN_TIMEOUT_SECONDS=0.1),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(stalled)),
        )
        for _ in range(3):
            forwarder.submit(EVENT)

        with anyio.fail_after(5):
            async with anyio.create_task_group() as task_group:
                await forwarder.start(task_group=task_group)
                await forwarder.aclose()

        assert forwarder.forwarded_count == 0
        assert forwarder.dropped_count == 3
