"""Prometheus metric definitions for the payment service."""

from prometheus_client import Counter, Histogram, generate_latest
from starlette.responses import Response


payment_requests_total = Counter("payment_requests_total", "Total payment requests", ["service"])
payment_success_total = Counter("payment_success_total", "Total completed payment runs", ["service"])
payment_failure_total = Counter(
    "payment_failure_total",
    "Total failed payment runs by workflow stage and error class",
    ["service", "stage", "error"],
)
payment_latency_seconds = Histogram("payment_latency_seconds", "Payment latency seconds", ["service"])
gateway_charges_total = Counter(
    "gateway_charges_total",
    "Charge submissions to the payment gateway",
    ["service", "outcome"],
)
payment_orphaned_charges_total = Counter(
    "payment_orphaned_charges_total",
    "Gateway charges that succeeded without a stored payment record",
    ["service"],
)


def metrics_response() -> Response:
    """Expose all registered Prometheus metrics in text format."""

    return Response(content=generate_latest(), media_type="text/plain")
