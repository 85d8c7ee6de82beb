"""
Job-Title Search API

Endpoints:
    GET /api/job-titles?q=&limit= - ranked job-title suggestions
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from jobtrackr.middleware.metrics import record_job_title_search_latency
from jobtrackr.schemas import JobTitleResponse
from jobtrackr.services.job_titles import (
    DEFAULT_LIMIT,
    JobTitleCache,
    JobTitlesUnavailableError,
    rank_job_titles,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def get_job_title_cache(request: Request) -> JobTitleCache:
    return request.app.state.job_title_cache


@router.get("", response_model=list[JobTitleResponse])
def search_job_titles(
    q: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_LIMIT, ge=1),
    cache: JobTitleCache = Depends(get_job_title_cache),
):
    # Runs in the threadpool: loading the referential is blocking file IO
    try:
        titles = cache.get()
    except JobTitlesUnavailableError as e:
        logger.error(f"Job titles unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Job titles are unavailable",
        )

    start_time = time.perf_counter()
    results = rank_job_titles(titles, q, limit)
    record_job_title_search_latency(time.perf_counter() - start_time)

    if q:
        logger.debug(f"Job title search {q!r} -> {len(results)} results")

    return [
        JobTitleResponse(
            label=title.label,
            short_label=title.short_label,
            code=title.code,
            code_rome=title.code_rome,
        )
        for title in results
    ]
