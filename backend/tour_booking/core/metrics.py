"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# HTTP
http_requests = Counter(
    'http_requests_total',
    'HTTP requests by route template',
    ['method', 'route', 'status']
)

http_request_latency = Histogram(
    'http_request_latency_seconds',
    'HTTP request latency by route template',
    ['route'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Booking admission
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking submissions',
    ['status']  # admitted, rejected, busy
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking admission latency (lock + capacity check + write)',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Capacity checks
capacity_checks = Counter(
    'capacity_checks_total',
    'Capacity checks by outcome',
    ['result']  # available, insufficient, unlimited, not_found
)

capacity_check_latency = Histogram(
    'capacity_check_latency_seconds',
    'Capacity check latency',
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1]
)

# Admission locks
admission_lock_wait = Histogram(
    'admission_lock_wait_seconds',
    'Time spent waiting for a per-activity/day admission lock',
    ['strategy'],
    buckets=[0.0001, 0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

admission_lock_timeouts = Counter(
    'admission_lock_timeouts_total',
    'Admission lock acquisitions that timed out',
    ['strategy']
)

# Side effects
side_effect_dispatch = Counter(
    'side_effect_dispatch_total',
    'Post-admission side effect handler runs',
    ['handler', 'result']  # success, error
)

whatsapp_messages = Counter(
    'whatsapp_messages_total',
    'WhatsApp messages sent through Twilio',
    ['recipient', 'result']  # sent, failed
)

crm_syncs = Counter(
    'crm_syncs_total',
    'CRM contact sync attempts',
    ['provider', 'result']  # success, failed
)

# Cache / Redis
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

redis_connection_errors = Counter(
    'redis_connection_errors_total',
    'Redis connection errors'
)


def metrics_endpoint() -> Response:
    """Prometheus scrape payload."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Record booking attempt. Status: admitted, rejected, busy"""
    booking_attempts.labels(status=status).inc()


def record_capacity_check(result: str):
    capacity_checks.labels(result=result).inc()


def record_side_effect(handler: str, ok: bool):
    side_effect_dispatch.labels(handler=handler, result="success" if ok else "error").inc()


def record_whatsapp(recipient: str, sent: bool):
    whatsapp_messages.labels(recipient=recipient, result="sent" if sent else "failed").inc()


def record_crm_sync(provider: str, ok: bool):
    crm_syncs.labels(provider=provider, result="success" if ok else "failed").inc()


def record_cache_operation(operation: str, hit: bool):
    """Record cache operation."""
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()


def record_http_request(method: str, route: str, status_code: int, seconds: float):
    http_requests.labels(method=method, route=route, status=str(status_code)).inc()
    http_request_latency.labels(route=route).observe(seconds)
