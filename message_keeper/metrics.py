"""
Prometheus metrics for the message keeper server.

This module provides:
- RPC call counter (method, outcome)
- RPC latency histogram (method)
- Saved messages counter

Metrics are stored in-memory using prometheus-client and exposed over HTTP
only when the server is started with a metrics port.
"""

import logging

from prometheus_client import Counter, Histogram, generate_latest, start_http_server

logger = logging.getLogger(__name__)


# =============================================================================
# Metric Definitions
# =============================================================================

# outcome: ok, remote_error, not_bound, already_bound, unknown_method, error
rpc_calls_total = Counter(
    "rpc_calls_total",
    "Total RPC calls dispatched",
    labelnames=["method", "outcome"]
)

rpc_latency_seconds = Histogram(
    "rpc_latency_seconds",
    "RPC call latency in seconds",
    labelnames=["method"]
)

messages_saved_total = Counter(
    "messages_saved_total",
    "Total messages stored"
)


# =============================================================================
# Helper Functions
# =============================================================================

def record_rpc_call(method: str, outcome: str, latency_seconds: float) -> None:
    """
    Record a dispatched RPC call in metrics.

    Args:
        method: Remote method name
        outcome: Dispatch outcome label
        latency_seconds: Call processing time in seconds
    """
    rpc_calls_total.labels(method=method, outcome=outcome).inc()
    rpc_latency_seconds.labels(method=method).observe(latency_seconds)


def record_message_saved() -> None:
    messages_saved_total.inc()


def get_metrics() -> bytes:
    """Generate Prometheus exposition format metrics."""
    return generate_latest()


def start_metrics_server(port: int) -> None:
    """Serve /metrics on ``port`` from a daemon thread."""
    logger.info(f"Exposing metrics on port: {port}")
    start_http_server(port)
