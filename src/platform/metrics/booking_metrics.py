from prometheus_client import Counter


class BookingMetrics:
    """
    Booking Platform Core Metrics Collector

    Tracks conditional-read cache efficiency, webhook pipeline outcomes
    and telemetry forwarding health
    """

    def __init__(self) -> None:
        # ========== Read-path Cache Metrics ==========
        self.cache_conditional_requests = Counter(
            'cache_conditional_requests_total',
            'Conditional read requests by outcome',
            ['namespace', 'result'],  # result: hit/miss/fallback_304/fail_open
        )

        self.cache_version_bumps = Counter(
            'cache_version_bumps_total',
            'Namespace version bumps',
            ['namespace', 'result'],  # result: ok/error
        )

        # ========== Webhook Pipeline Metrics ==========
        self.webhook_events = Counter(
            'webhook_events_total',
            'Webhook deliveries by outcome',
            ['provider', 'outcome'],
        )

        self.webhook_anomalies = Counter(
            'webhook_outcome_anomalies_total',
            'Conflicting terminal outcomes recorded for one webhook event',
            ['provider'],
        )

        # ========== Telemetry Forwarder Metrics ==========
        self.telemetry_events_dropped = Counter(
            'telemetry_events_dropped_total',
            'Telemetry events dropped before queueing (queue full or forwarder stopped)',
        )

        self.telemetry_forward_failures = Counter(
            'telemetry_forward_failures_total',
            'Telemetry events dropped after exhausting forward attempts',
        )

    def record_conditional_request(self, *, namespace: str, result: str) -> None:
        self.cache_conditional_requests.labels(namespace=namespace, result=result).inc()

    def record_version_bump(self, *, namespace: str, ok: bool) -> None:
        self.cache_version_bumps.labels(namespace=namespace, result='ok' if ok else 'error').inc()

    def record_webhook(self, *, provider: str, outcome: str) -> None:
        self.webhook_events.labels(provider=provider, outcome=outcome).inc()

    def record_webhook_anomaly(self, *, provider: str) -> None:
        self.webhook_anomalies.labels(provider=provider).inc()


metrics = BookingMetrics()
