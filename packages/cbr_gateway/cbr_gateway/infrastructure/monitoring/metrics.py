"""Metrics collection for remote schema calls."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

from cbr_gateway.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Remote call metrics
remote_calls_total = Counter(
    "cbr_gateway_remote_calls_total",
    "Total number of remote procedure calls",
    ["schema", "method", "status"],
)

remote_call_duration = Histogram(
    "cbr_gateway_remote_call_duration_seconds",
    "Remote procedure call duration in seconds",
    ["schema", "method"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

# Schema metadata metrics
contract_discoveries_total = Counter(
    "cbr_gateway_contract_discoveries_total",
    "Total number of schema contract discovery passes",
    ["schema", "status"],
)

clients_opened_total = Counter(
    "cbr_gateway_clients_opened_total",
    "Total number of remote schema clients opened",
    ["schema"],
)


class GatewayMetricsCollector:
    """Records call metrics for one gateway, honouring the metrics feature flag."""

    def __init__(self, enabled: bool = True) -> None:
        """Initialize metrics collector.

        Args:
            enabled: Whether metrics are recorded at all
        """
        self.enabled = enabled

    def record_call(self, schema: str, method: str, success: bool, duration: float) -> None:
        """Record the outcome of a remote procedure call.

        Args:
            schema: Schema identifier
            method: Remote method name
            success: Whether the call returned a result
            duration: Elapsed time in seconds
        """
        if not self.enabled:
            return
        status = "success" if success else "failure"
        remote_calls_total.labels(schema=schema, method=method, status=status).inc()
        remote_call_duration.labels(schema=schema, method=method).observe(duration)

    def record_discovery(self, schema: str, success: bool) -> None:
        """Record a contract discovery pass."""
        if not self.enabled:
            return
        status = "success" if success else "failure"
        contract_discoveries_total.labels(schema=schema, status=status).inc()

    def record_client_opened(self, schema: str) -> None:
        """Record that a new remote client was opened."""
        if not self.enabled:
            return
        clients_opened_total.labels(schema=schema).inc()
        logger.debug("Remote client opened", extra={"schema_id": schema})
