"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Command metrics
command_results = Counter(
    'sync_commands_total',
    'Command API outcomes',
    ['command', 'result']  # result: success or an error kind
)

# Bootstrap metrics
bootstrap_runs = Counter(
    'sync_bootstrap_total',
    'Bootstrap runs by the source that populated the store',
    ['source']  # remote, cache, none
)

# Realtime metrics
realtime_events = Counter(
    'realtime_events_total',
    'Change events received from the live channel',
    ['entity', 'type', 'outcome']  # outcome: applied, duplicate, conflict, dropped
)

realtime_reconnecting = Gauge(
    'realtime_reconnecting',
    'Live channel state (1=reconnecting, 0=subscribed)'
)

# Statistics metrics
statistics_failures = Counter(
    'customer_statistics_failures_total',
    'Customer counter adjustments that failed and were skipped'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Local cache operations',
    ['operation', 'result']  # save/load, hit/miss/error
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_command(command: str, result: str):
    """Record command outcome. Result: success or the error kind."""
    command_results.labels(command=command, result=result).inc()


def record_bootstrap(source: str):
    bootstrap_runs.labels(source=source).inc()


def record_realtime_event(entity: str, event_type: str, outcome: str):
    realtime_events.labels(entity=entity, type=event_type, outcome=outcome).inc()


def record_cache_operation(operation: str, result: str):
    """Record cache operation. Result: hit, miss, ok, error"""
    cache_operations.labels(operation=operation, result=result).inc()
