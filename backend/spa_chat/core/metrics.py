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

CHAT_REQUESTS = Counter(
    "spa_chat_requests_total",
    "Chat requests by response status",
    labelnames=("status",),
    registry=REGISTRY,
)

CHAT_LATENCY = Histogram(
    "spa_chat_latency_seconds",
    "End-to-end latency of chat requests",
    registry=REGISTRY,
)

RETRIEVAL_PASSES = Counter(
    "spa_retrieval_passes_total",
    "Retrieval passes executed, by pass and outcome",
    labelnames=("pass_name", "outcome"),
    registry=REGISTRY,
)

UPSTREAM_FAILURES = Counter(
    "spa_upstream_failures_total",
    "Absorbed failures of non-critical upstream calls",
    labelnames=("operation",),
    registry=REGISTRY,
)

KNOWLEDGE_CHUNKS = Gauge(
    "spa_knowledge_chunks",
    "Number of knowledge chunks stored",
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "CHAT_REQUESTS",
    "CHAT_LATENCY",
    "RETRIEVAL_PASSES",
    "UPSTREAM_FAILURES",
    "KNOWLEDGE_CHUNKS",
    "metrics_response",
]
