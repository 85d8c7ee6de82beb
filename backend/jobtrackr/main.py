"""
JobTrackr API - Main Application Entry Point

This module initializes the FastAPI application with:
- Logging configuration
- Database schema initialization
- The job-title cache shared by search requests
- CORS middleware for frontend communication
- Prometheus metrics
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup)
    ├── CORS Middleware
    ├── Prometheus Middleware (/metrics)
    └── API Router (/api)
        ├── /gamification - Stats, badges, points, goals, activity events
        └── /job-titles   - Job-title search
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from jobtrackr.api import api_router
from jobtrackr.config import get_settings
from jobtrackr.database import init_db
from jobtrackr.logging_config import configure_logging
from jobtrackr.middleware import setup_metrics
from jobtrackr.services.job_titles import JobTitleCache

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle events.

    Startup:
        1. Configure logging
        2. Initialize database tables

    The job-title referential is loaded lazily on the first search.

    Yields:
        Control to the application during its runtime
    """
    configure_logging(settings.log_level)
    await init_db()
    logger.info("JobTrackr API started")
    yield


app = FastAPI(
    title="JobTrackr API",
    description="Job application tracking with gamification",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.job_title_cache = JobTitleCache(
    path=settings.job_titles_path,
    ttl=settings.job_titles_cache_ttl_seconds,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_metrics(app)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
