"""
Gamification API - stats, badges, points, goals and activity events

Endpoints:
    GET    /api/gamification/stats            - points total, badges, streak
    GET    /api/gamification/badges           - earned badges, newest first
    GET    /api/gamification/points           - total and ledger history
    POST   /api/gamification/check            - evaluate badges and goals
    POST   /api/gamification/activity         - record a qualifying action
    GET    /api/gamification/goals            - list goals
    POST   /api/gamification/goals            - create a goal
    PUT    /api/gamification/goals/{goal_id}  - edit progress/completion
    DELETE /api/gamification/goals/{goal_id}  - delete a goal
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrackr.auth import get_current_user
from jobtrackr.database import get_db
from jobtrackr.models import UserBadge, UserGoal, UserPoint
from jobtrackr.repositories import ActivityRecordsRepository, GamificationRepository
from jobtrackr.schemas import (
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
from jobtrackr.services.gamification import BADGE_RULES, BadgeType
from jobtrackr.services.gamification.engine import GamificationEngine

logger = logging.getLogger(__name__)
router = APIRouter()


def get_repository(db: AsyncSession = Depends(get_db)) -> GamificationRepository:
    return GamificationRepository(db)


def get_engine(db: AsyncSession = Depends(get_db)) -> GamificationEngine:
    return GamificationEngine(GamificationRepository(db), ActivityRecordsRepository(db))


def _badge_response(badge: UserBadge) -> BadgeResponse:
    try:
        rule = BADGE_RULES[BadgeType(badge.badge_type)]
        name, description = rule.name, rule.description
    except ValueError:
        # Badge type no longer defined; still show that it was earned
        name, description = badge.badge_type, ""

    return BadgeResponse(
        id=badge.id,
        badge_type=badge.badge_type,
        name=name,
        description=description,
        earned_at=badge.earned_at,
    )


def _point_response(entry: UserPoint) -> PointEntryResponse:
    return PointEntryResponse(
        id=entry.id,
        points=entry.points,
        reason=entry.reason,
        metadata=entry.details,
        created_at=entry.created_at,
    )


async def _get_owned_goal(repo: GamificationRepository, goal_id: str, user_id: str) -> UserGoal:
    goal = await repo.get_goal(goal_id, user_id)
    if not goal:
        raise HTTPException(status_code=404, detail="Goal not found")
    return goal


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    repo: GamificationRepository = Depends(get_repository),
    user_id: str = Depends(get_current_user),
):
    total_points = await repo.get_total_points(user_id)
    badges = await repo.list_badges(user_id)
    streak = await repo.get_streak(user_id)

    return StatsResponse(
        total_points=total_points,
        badges_count=len(badges),
        badges=[_badge_response(badge) for badge in badges],
        streak=StreakResponse(
            current=streak.current_streak,
            longest=streak.longest_streak,
            last_activity_date=streak.last_activity_date,
        ) if streak else None,
    )


@router.get("/badges", response_model=BadgeListResponse)
async def list_badges(
    repo: GamificationRepository = Depends(get_repository),
    user_id: str = Depends(get_current_user),
):
    badges = await repo.list_badges(user_id)
    return BadgeListResponse(badges=[_badge_response(badge) for badge in badges])


@router.get("/points", response_model=PointsResponse)
async def get_points(
    limit: int = Query(50, ge=1, le=1000),
    repo: GamificationRepository = Depends(get_repository),
    user_id: str = Depends(get_current_user),
):
    total = await repo.get_total_points(user_id)
    history = await repo.list_points(user_id, limit=limit)
    return PointsResponse(total=total, history=[_point_response(entry) for entry in history])


@router.post("/check", response_model=EvaluationResponse)
async def run_checks(
    engine: GamificationEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user),
):
    new_badges, completed_goals = await engine.evaluate(user_id)
    return EvaluationResponse(
        new_badges=[badge.value for badge in new_badges],
        completed_goals=completed_goals,
    )


@router.post("/activity", response_model=ActivityResponse)
async def record_activity(
    activity: ActivityRequest,
    engine: GamificationEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user),
):
    outcome = await engine.record_activity(
        user_id,
        activity.action,
        occurred_at=activity.occurred_at,
        metadata=activity.metadata,
    )
    return ActivityResponse(
        points_awarded=outcome.points_awarded,
        streak=StreakResponse(
            current=outcome.streak.current_streak,
            longest=outcome.streak.longest_streak,
            last_activity_date=outcome.streak.last_activity_date,
        ),
        new_badges=[badge.value for badge in outcome.new_badges],
        completed_goals=outcome.completed_goals,
    )


@router.get("/goals", response_model=GoalListResponse)
async def list_goals(
    repo: GamificationRepository = Depends(get_repository),
    user_id: str = Depends(get_current_user),
):
    goals = await repo.list_goals(user_id)
    return GoalListResponse(goals=[GoalResponse.model_validate(goal) for goal in goals])


@router.post("/goals", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal: GoalCreate,
    repo: GamificationRepository = Depends(get_repository),
    user_id: str = Depends(get_current_user),
):
    created = await repo.create_goal(
        user_id,
        goal.type.value,
        goal.period.value,
        goal.target,
        end_date=goal.end_date,
    )
    return GoalResponse.model_validate(created)


@router.put("/goals/{goal_id}", response_model=GoalResponse)
async def update_goal(
    goal_id: str,
    update: GoalUpdate,
    repo: GamificationRepository = Depends(get_repository),
    user_id: str = Depends(get_current_user),
):
    goal = await _get_owned_goal(repo, goal_id, user_id)
    updated = await repo.update_goal(goal, current=update.current, completed=update.completed)
    return GoalResponse.model_validate(updated)


@router.delete("/goals/{goal_id}")
async def delete_goal(
    goal_id: str,
    repo: GamificationRepository = Depends(get_repository),
    user_id: str = Depends(get_current_user),
):
    goal = await _get_owned_goal(repo, goal_id, user_id)
    await repo.delete_goal(goal)
    logger.info(f"User {user_id} deleted goal {goal_id}")
    return {"success": True}
