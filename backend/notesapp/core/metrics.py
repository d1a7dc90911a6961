"""
Prometheus metrics: request counter and latency histogram per method, route and status.
"""

import time

from fastapi import FastAPI, Request, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)


class HttpMetrics:
    """Metrics live in their own registry so each app instance starts from zero."""

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or CollectorRegistry()

        # Process, platform and GC metrics (CPU, memory, ...)
        ProcessCollector(registry=self.registry)
        PlatformCollector(registry=self.registry)
        GCCollector(registry=self.registry)

        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests in seconds",
            labelnames=["method", "route", "status_code"],
            buckets=[0.001, 0.01, 0.1, 0.5, 1, 2, 5],
            registry=self.registry,
        )
        self.request_counter = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            labelnames=["method", "route", "status_code"],
            registry=self.registry,
        )

    def observe(self, method: str, route: str, status_code: int, duration: float) -> None:
        labels = {"method": method, "route": route, "status_code": str(status_code)}
        self.request_duration.labels(**labels).observe(duration)
        self.request_counter.labels(**labels).inc()

    def render(self) -> bytes:
        return generate_latest(self.registry)


def _route_template(request: Request) -> str:
    # matched route pattern (e.g. /api/notes/{note_id}); raw path when nothing matched
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


def install_metrics(app: FastAPI, metrics: HttpMetrics) -> None:
    """Record every request and expose the registry at GET /metrics."""

    @app.middleware("http")
    async def _record_request(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            metrics.observe(
                request.method,
                _route_template(request),
                status_code,
                time.perf_counter() - start,
            )

    @app.get("/metrics", tags=["System"], include_in_schema=False)
    async def metrics_endpoint():
        return Response(content=metrics.render(), media_type=CONTENT_TYPE_LATEST)
