"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

REQUEST_COUNT = Counter(
    "recall_requests_total",
    "Total HTTP requests",
    labelnames=("endpoint", "method", "status"),
    registry=REGISTRY,
)

REQUEST_LATENCY = Histogram(
    "recall_request_latency_seconds",
    "Latency of HTTP requests",
    labelnames=("endpoint", "method"),
    registry=REGISTRY,
)

INDEX_DURATION = Histogram(
    "recall_index_duration_seconds",
    "Duration of a single content indexing run",
    registry=REGISTRY,
)

INDEX_JOBS = Counter(
    "recall_index_jobs_total",
    "Background index jobs by kind and outcome",
    labelnames=("kind", "status"),
    registry=REGISTRY,
)

INDEX_QUEUE_DEPTH = Gauge(
    "recall_index_queue_depth",
    "Jobs waiting in the background index queue",
    registry=REGISTRY,
)

PROVIDER_ERRORS = Counter(
    "recall_provider_errors_total",
    "Remote provider failures",
    labelnames=("operation", "kind"),
    registry=REGISTRY,
)

INDEX_SIZE = Gauge(
    "recall_index_chunks",
    "Number of chunks stored in the vector store",
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "INDEX_DURATION",
    "INDEX_JOBS",
    "INDEX_QUEUE_DEPTH",
    "PROVIDER_ERRORS",
    "INDEX_SIZE",
    "metrics_response",
]
