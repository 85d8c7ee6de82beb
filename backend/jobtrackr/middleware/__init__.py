"""
Middleware Package

Contains FastAPI middleware for:
- Prometheus metrics collection
- Domain counters for gamification and job-title search
"""

from jobtrackr.middleware.metrics import (
    PrometheusMiddleware,
    setup_metrics,
    REQUEST_LATENCY,
    REQUEST_COUNT,
    ACTIVE_REQUESTS,
    BADGES_AWARDED,
    POINTS_AWARDED,
    GOALS_COMPLETED,
)

__all__ = [
    "PrometheusMiddleware",
    "setup_metrics",
    "REQUEST_LATENCY",
    "REQUEST_COUNT",
    "ACTIVE_REQUESTS",
    "BADGES_AWARDED",
    "POINTS_AWARDED",
    "GOALS_COMPLETED",
]
