"""Prometheus metrics and Sentry integration.

Provides:
- MetricsMiddleware: per-request counter and latency histogram, labelled by route template
- record_deal_report(): count served reports by which filters were active
- track_report_query(): time one report build and count its outcome
- init_sentry(): Sentry with client errors (400/404) filtered out
- get_metrics_response(): Prometheus exposition for the /metrics route
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import sentry_sdk
from prometheus_client import REGISTRY, Counter, Histogram, generate_latest
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.dealboard.deals.errors import InvalidInputError, OrganizationNotFoundError

# ── HTTP Metrics ─────────────────────────────────────────────────────────────

http_requests_total = Counter(
    "dealboard_http_requests_total",
    "HTTP requests served",
    ["method", "endpoint", "status_code"],
)

http_request_duration_seconds = Histogram(
    "dealboard_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

# ── Report Metrics ───────────────────────────────────────────────────────────

deal_reports_total = Counter(
    "dealboard_deal_reports_total",
    "Organization deal reports served",
    ["status_filter", "year_filter"],
)

report_queries_total = Counter(
    "dealboard_report_queries_total",
    "Organization report builds by outcome",
    ["outcome"],
)

report_query_duration_seconds = Histogram(
    "dealboard_report_query_duration_seconds",
    "Time spent building one organization report",
    ["filtered"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
)


def _flag(value: bool) -> str:
    return "true" if value else "false"


def record_deal_report(status_filter: bool, year_filter: bool) -> None:
    """Count one served report, labelled by which filters were active."""
    deal_reports_total.labels(
        status_filter=_flag(status_filter),
        year_filter=_flag(year_filter),
    ).inc()


@asynccontextmanager
async def track_report_query(filtered: bool) -> AsyncGenerator[None, None]:
    """Time the enclosed report build and count it as ok, not_found or error.

    Usage:
        async with track_report_query(filters.is_active):
            report = await self._build_report(...)
    """
    start_time = time.perf_counter()
    outcome = "ok"
    try:
        yield
    except OrganizationNotFoundError:
        outcome = "not_found"
        raise
    except Exception:
        outcome = "error"
        raise
    finally:
        report_queries_total.labels(outcome=outcome).inc()
        report_query_duration_seconds.labels(filtered=_flag(filtered)).observe(
            time.perf_counter() - start_time
        )


# ── Metrics Middleware ───────────────────────────────────────────────────────


def _endpoint_label(request: Request) -> str:
    """Route template when one matched, so /api/organizations/1/deals and /2/deals share a series."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record request count and latency for everything except /metrics itself."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path == "/metrics":
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        endpoint = _endpoint_label(request)
        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=str(response.status_code),
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
        ).observe(duration)

        return response


# ── Sentry Integration ───────────────────────────────────────────────────────

_CLIENT_ERRORS = (InvalidInputError, OrganizationNotFoundError)


def _before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """Drop events for malformed ids and unknown organizations."""
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], _CLIENT_ERRORS):
        return None
    return event


def init_sentry(dsn: str, environment: str) -> None:
    """Initialize Sentry SDK.

    Args:
        dsn: Sentry DSN string.
        environment: Deployment environment (development, staging, production).
    """
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=0.1 if environment == "production" else 1.0,
        before_send=_before_send,
        integrations=[
            StarletteIntegration(),
            FastApiIntegration(),
        ],
    )


# ── Metrics Endpoint ─────────────────────────────────────────────────────────


def get_metrics_response() -> Response:
    """Generate Prometheus exposition format response."""
    return Response(
        content=generate_latest(REGISTRY),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
