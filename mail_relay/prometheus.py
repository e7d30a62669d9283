"""Prometheus metrics exposed by the mail relay."""

from prometheus_client import Counter, CollectorRegistry, generate_latest


class RelayMetrics:
    """Wrapper around the Prometheus registry used by the relay."""

    def __init__(self, registry: CollectorRegistry | None = None):
        """Create counters inside the provided registry."""
        self.registry = registry or CollectorRegistry()
        self.requests = Counter("relay_requests_total", "Handled relay requests", ["outcome"], registry=self.registry)
        self.send_errors = Counter("relay_send_errors_total", "Failed SMTP dispatches", ["error_code"], registry=self.registry)

    def inc_request(self, outcome: str):
        """Increase the ``requests`` counter for the given outcome."""
        self.requests.labels(outcome=outcome).inc()

    def inc_send_error(self, error_code: str | None):
        """Increase the ``send_errors`` counter for the given error code."""
        self.send_errors.labels(error_code=error_code or "unknown").inc()

    def generate_latest(self) -> bytes:
        """Return the latest metrics snapshot in Prometheus text format."""
        return generate_latest(self.registry)
