"""Prometheus metrics helpers."""

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse


def create_counter(
    name: str,
    description: str,
    labels: list[str] | None = None,
) -> Counter:
    """Create a Prometheus counter metric.

    Args:
        name: Metric name (e.g., 'verification_operations_total')
        description: Human-readable description
        labels: List of label names for the metric
    """
    return Counter(name, description, labels or [])


def create_histogram(
    name: str,
    description: str,
    labels: list[str] | None = None,
    buckets: tuple[float, ...] | None = None,
) -> Histogram:
    """Create a Prometheus histogram metric.

    Args:
        name: Metric name (e.g., 'verification_request_duration_seconds')
        description: Human-readable description
        labels: List of label names for the metric
        buckets: Custom bucket boundaries (defaults to Prometheus defaults)
    """
    if buckets is None:
        buckets = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
    return Histogram(name, description, labels or [], buckets=buckets)


REQUEST_COUNT = create_counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

REQUEST_LATENCY = create_histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect HTTP request metrics."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        """Process request and record metrics."""
        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time

        # Label by route template so path parameters do not explode cardinality
        endpoint = request.url.path
        if request.scope.get("route"):
            endpoint = request.scope["route"].path

        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        REQUEST_LATENCY.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


async def metrics_endpoint(request: Request) -> StarletteResponse:
    """Endpoint to expose Prometheus metrics."""
    return StarletteResponse(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
