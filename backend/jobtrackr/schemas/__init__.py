from jobtrackr.schemas.gamification import (
    ActivityRequest,
    ActivityResponse,
    BadgeListResponse,
    BadgeResponse,
    EvaluationResponse,
    GoalCreate,
    GoalListResponse,
    GoalResponse,
    GoalUpdate,
    PointEntryResponse,
    PointsResponse,
    StatsResponse,
    StreakResponse,
)
from jobtrackr.schemas.job_title import JobTitleResponse

__all__ = [
    "ActivityRequest",
    "ActivityResponse",
    "BadgeListResponse",
    "BadgeResponse",
    "EvaluationResponse",
    "GoalCreate",
    "GoalListResponse",
    "GoalResponse",
    "GoalUpdate",
    "PointEntryResponse",
    "PointsResponse",
    "StatsResponse",
    "StreakResponse",
    "JobTitleResponse",
]
