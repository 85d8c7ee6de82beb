"""
Prometheus Metrics Middleware

Provides request/response metrics for monitoring:
- HTTP request latency
- Request count by endpoint and status
- Active request gauge
- Gamification counters (badges, points, goals)
- Job-title search and cache reload counters

Usage:
    from jobtrackr.middleware.metrics import setup_metrics

    # In main.py
    app = FastAPI()
    setup_metrics(app)

Metrics Endpoint:
    GET /metrics - Prometheus-format metrics
"""

import time
import logging
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    CONTENT_TYPE_LATEST,
    generate_latest,
    REGISTRY,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

logger = logging.getLogger(__name__)

# ==================== HTTP Metrics ====================

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint", "status"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

ACTIVE_REQUESTS = Gauge(
    "http_requests_active",
    "Number of active HTTP requests",
    ["method", "endpoint"]
)

# ==================== Gamification Metrics ====================

BADGES_AWARDED = Counter(
    "gamification_badges_awarded_total",
    "Badges awarded",
    ["badge_type"]
)

POINTS_AWARDED = Counter(
    "gamification_points_awarded_total",
    "Points written to the ledger (absolute value)",
    ["reason"]
)

GOALS_COMPLETED = Counter(
    "gamification_goals_completed_total",
    "Goals completed by progress updates",
    ["goal_type"]
)

RULE_FAILURES = Counter(
    "gamification_rule_failures_total",
    "Badge rules or goals that raised during evaluation",
    ["kind"]  # badge, goal
)

# ==================== Job-Title Search Metrics ====================

JOB_TITLE_SEARCH_LATENCY = Histogram(
    "job_title_search_seconds",
    "Time to rank job titles for a query",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25]
)

JOB_TITLE_CACHE_RELOADS = Counter(
    "job_title_cache_reloads_total",
    "Job-title cache reload attempts",
    ["outcome"]  # loaded, stale, failed
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    FastAPI middleware for Prometheus metrics collection.

    Records:
    - Request latency
    - Request count by status code
    - Active request count
    """

    def __init__(self, app: FastAPI, app_name: str = "jobtrackr"):
        super().__init__(app)
        self.app_name = app_name

    async def dispatch(
        self,
        request: Request,
        call_next: Callable
    ) -> Response:
        """Process request and record metrics."""
        endpoint = self._get_endpoint(request)
        method = request.method

        if endpoint == "/metrics":
            return await call_next(request)

        ACTIVE_REQUESTS.labels(method=method, endpoint=endpoint).inc()
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            status = str(response.status_code)
        except Exception as e:
            status = "500"
            logger.error(f"Request error: {e}")
            raise
        finally:
            duration = time.perf_counter() - start_time
            template = self._get_route_template(request) or endpoint

            REQUEST_LATENCY.labels(
                method=method,
                endpoint=template,
                status=status
            ).observe(duration)

            REQUEST_COUNT.labels(
                method=method,
                endpoint=template,
                status=status
            ).inc()

            ACTIVE_REQUESTS.labels(
                method=method,
                endpoint=endpoint
            ).dec()

        return response

    def _get_endpoint(self, request: Request) -> str:
        """
        Get normalized endpoint path from request.

        Uses route pattern (e.g., /api/gamification/goals/{goal_id}) instead
        of the actual path to avoid high cardinality.
        """
        for route in request.app.routes:
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                # Mounted or included routers may not carry a path template
                path = getattr(route, "path", None)
                if path:
                    return path
                break

        return request.url.path

    @staticmethod
    def _get_route_template(request: Request) -> Optional[str]:
        """Path template of the route that handled the request, once routing ran."""
        return getattr(request.scope.get("route"), "path", None)


def metrics_endpoint(request: Request) -> Response:
    """Endpoint handler for Prometheus metrics scraping."""
    return PlainTextResponse(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST
    )


def setup_metrics(app: FastAPI) -> None:
    """
    Configure Prometheus metrics for FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_middleware(PrometheusMiddleware, app_name="jobtrackr")
    app.add_route("/metrics", metrics_endpoint, methods=["GET"])

    logger.info("Prometheus metrics configured")


# ==================== Helper Functions ====================

def record_badge_awarded(badge_type: str) -> None:
    BADGES_AWARDED.labels(badge_type=badge_type).inc()


def record_points_awarded(reason: str, points: int) -> None:
    """Counters only go up, so negative adjustments are recorded by magnitude."""
    POINTS_AWARDED.labels(reason=reason).inc(abs(points))


def record_goal_completed(goal_type: str) -> None:
    GOALS_COMPLETED.labels(goal_type=goal_type).inc()


def record_rule_failure(kind: str) -> None:
    RULE_FAILURES.labels(kind=kind).inc()


def record_job_title_search_latency(duration: float) -> None:
    JOB_TITLE_SEARCH_LATENCY.observe(duration)


def record_job_title_cache_reload(outcome: str) -> None:
    JOB_TITLE_CACHE_RELOADS.labels(outcome=outcome).inc()
