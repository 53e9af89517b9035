"""Prometheus metrics for the ContentDesk API.

Request counters and latency histograms are collected by middleware; the
invoice lifecycle counter is bumped by the invoices router. ``/metrics``
exposes everything in the text exposition format.
"""

from __future__ import annotations

import re
import time

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

METRICS_PATH = "/metrics"

http_requests_total = Counter(
    "contentdesk_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

http_request_duration_seconds = Histogram(
    "contentdesk_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

http_exceptions_total = Counter(
    "contentdesk_http_exceptions_total",
    "Total unhandled exceptions",
    ["method", "path", "exception_type"],
)

invoice_events_total = Counter(
    "contentdesk_invoice_events_total",
    "Invoice lifecycle events",
    ["event"],
)

_ID_SEGMENT = re.compile(r"/\d+")


def normalize_path(path: str) -> str:
    """Collapse numeric ids so per-record URLs share one label."""
    return "/".join(_ID_SEGMENT.sub("/{id}", path).split("/")[:5])


def record_invoice_event(event: str) -> None:
    invoice_events_total.labels(event=event).inc()


class PrometheusMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        if request.url.path == METRICS_PATH:
            return await call_next(request)

        method = request.method
        path = normalize_path(request.url.path)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            http_exceptions_total.labels(method=method, path=path, exception_type=type(exc).__name__).inc()
            http_requests_total.labels(method=method, path=path, status=500).inc()
            http_request_duration_seconds.labels(method=method, path=path).observe(time.perf_counter() - start)
            raise

        http_requests_total.labels(method=method, path=path, status=response.status_code).inc()
        http_request_duration_seconds.labels(method=method, path=path).observe(time.perf_counter() - start)
        return response


async def metrics_endpoint(request: Request) -> Response:
    return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
