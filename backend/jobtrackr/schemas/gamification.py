from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional

from jobtrackr.services.gamification import ActivityAction, GoalPeriod, GoalType


class BadgeResponse(BaseModel):
    id: str
    badge_type: str
    name: str
    description: str
    earned_at: datetime


class StreakResponse(BaseModel):
    current: int
    longest: int
    last_activity_date: Optional[datetime] = None


class StatsResponse(BaseModel):
    total_points: int
    badges_count: int
    badges: list[BadgeResponse]
    streak: Optional[StreakResponse] = None


class BadgeListResponse(BaseModel):
    badges: list[BadgeResponse]


class PointEntryResponse(BaseModel):
    id: str
    points: int
    reason: str
    metadata: Optional[Dict[str, Any]] = None
    created_at: datetime


class PointsResponse(BaseModel):
    total: int
    history: list[PointEntryResponse]


class GoalCreate(BaseModel):
    type: GoalType
    period: GoalPeriod
    target: int = Field(..., gt=0)
    end_date: Optional[datetime] = None


class GoalUpdate(BaseModel):
    current: Optional[int] = Field(None, ge=0)
    completed: Optional[bool] = None


class GoalResponse(BaseModel):
    id: str
    type: str
    period: str
    target: int
    current: int
    start_date: datetime
    end_date: Optional[datetime] = None
    completed: bool
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GoalListResponse(BaseModel):
    goals: list[GoalResponse]


class ActivityRequest(BaseModel):
    action: ActivityAction
    occurred_at: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None


class EvaluationResponse(BaseModel):
    new_badges: list[str]
    completed_goals: list[str]


class ActivityResponse(EvaluationResponse):
    points_awarded: int
    streak: StreakResponse
