"""Prometheus metric definitions shared across services."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_submissions_total = Counter(
    "payment_submissions_total",
    "Payment verification submissions by outcome",
    ["service", "outcome"],
)
payment_transitions_total = Counter(
    "payment_transitions_total",
    "Payment status transitions",
    ["service", "from_status", "to_status"],
)
notifications_total = Counter(
    "notifications_total",
    "Operator notifications attempted by template and outcome",
    ["service", "template", "outcome"],
)
notification_latency_seconds = Histogram(
    "notification_latency_seconds",
    "Round trip of one bot API call",
    ["service", "method"],
)
sms_received_total = Counter("sms_received_total", "Inbound SMS stored", ["service", "device_id"])
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["service", "route", "method", "status_code"],
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration seconds",
    ["service", "route", "method"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
