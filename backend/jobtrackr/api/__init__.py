from fastapi import APIRouter
from jobtrackr.api import gamification, job_titles

api_router = APIRouter(prefix="/api")
api_router.include_router(gamification.router, prefix="/gamification", tags=["gamification"])
api_router.include_router(job_titles.router, prefix="/job-titles", tags=["job-titles"])
