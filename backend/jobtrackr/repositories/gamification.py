"""
Gamification Repository - persistence for badges, points, streaks and goals

Every write commits immediately, so a failure while processing one badge or
goal never discards what was already recorded for the others.

Usage:
    repo = GamificationRepository(db)
    await repo.add_points(user_id, 10, "application_created")
    total = await repo.get_total_points(user_id)
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set, runtime_checkable

from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrackr.database import utcnow
from jobtrackr.models import UserBadge, UserPoint, UserStreak, UserGoal
from jobtrackr.services.gamification.streaks import StreakState


@runtime_checkable
class GamificationStore(Protocol):
    """Read/write interface the gamification engine depends on."""

    async def get_badge_types(self, user_id: str) -> Set[str]:
        ...

    async def has_badge(self, user_id: str, badge_type: str) -> bool:
        ...

    async def add_badge(self, user_id: str, badge_type: str) -> UserBadge:
        ...

    async def add_points(
        self,
        user_id: str,
        points: int,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> UserPoint:
        ...

    async def list_points(self, user_id: str, limit: Optional[int] = None) -> Sequence[UserPoint]:
        ...

    async def get_point_reasons(self, user_id: str) -> Set[str]:
        ...

    async def get_streak(self, user_id: str) -> Optional[UserStreak]:
        ...

    async def save_streak(self, user_id: str, state: StreakState) -> UserStreak:
        ...

    async def list_active_goals(self, user_id: str) -> Sequence[UserGoal]:
        ...

    async def set_goal_progress(self, goal_id: str, current: int) -> None:
        ...

    async def mark_goal_completed(
        self, goal_id: str, current: int, completed_at: datetime
    ) -> bool:
        ...

    async def rollback(self) -> None:
        ...


class GamificationRepository:
    """SQLAlchemy implementation of ``GamificationStore`` plus read-side queries."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def rollback(self) -> None:
        await self.db.rollback()

    # ==================== Badges ====================

    async def list_badges(self, user_id: str) -> List[UserBadge]:
        result = await self.db.execute(
            select(UserBadge)
            .where(UserBadge.user_id == user_id)
            .order_by(UserBadge.earned_at.desc())
        )
        return list(result.scalars().all())

    async def get_badge_types(self, user_id: str) -> Set[str]:
        result = await self.db.execute(
            select(UserBadge.badge_type).where(UserBadge.user_id == user_id)
        )
        return {row[0] for row in result.all()}

    async def has_badge(self, user_id: str, badge_type: str) -> bool:
        result = await self.db.execute(
            select(UserBadge.id)
            .where(UserBadge.user_id == user_id, UserBadge.badge_type == badge_type)
            .limit(1)
        )
        return result.first() is not None

    async def add_badge(self, user_id: str, badge_type: str) -> UserBadge:
        """
        Insert a badge row.

        Raises:
            sqlalchemy.exc.IntegrityError: if the user already holds the badge
        """
        badge = UserBadge(user_id=user_id, badge_type=badge_type, earned_at=utcnow())
        self.db.add(badge)
        await self.db.commit()
        await self.db.refresh(badge)
        return badge

    # ==================== Points ====================

    async def add_points(
        self,
        user_id: str,
        points: int,
        reason: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> UserPoint:
        entry = UserPoint(
            user_id=user_id,
            points=points,
            reason=reason,
            details=details,
            created_at=utcnow(),
        )
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    async def get_total_points(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.coalesce(func.sum(UserPoint.points), 0)).where(
                UserPoint.user_id == user_id
            )
        )
        return int(result.scalar() or 0)

    async def list_points(self, user_id: str, limit: Optional[int] = None) -> List[UserPoint]:
        query = (
            select(UserPoint)
            .where(UserPoint.user_id == user_id)
            .order_by(UserPoint.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_point_reasons(self, user_id: str) -> Set[str]:
        result = await self.db.execute(
            select(UserPoint.reason).where(UserPoint.user_id == user_id).distinct()
        )
        return {row[0] for row in result.all()}

    # ==================== Streaks ====================

    async def get_streak(self, user_id: str) -> Optional[UserStreak]:
        result = await self.db.execute(
            select(UserStreak).where(UserStreak.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def save_streak(self, user_id: str, state: StreakState) -> UserStreak:
        """Create or update the user's streak row from ``state``."""
        streak = await self.get_streak(user_id)
        if streak is None:
            streak = UserStreak(user_id=user_id)
            self.db.add(streak)

        streak.current_streak = state.current_streak
        streak.longest_streak = state.longest_streak
        streak.last_activity_date = state.last_activity_date
        streak.updated_at = utcnow()

        await self.db.commit()
        await self.db.refresh(streak)
        return streak

    # ==================== Goals ====================

    async def list_goals(self, user_id: str) -> List[UserGoal]:
        result = await self.db.execute(
            select(UserGoal)
            .where(UserGoal.user_id == user_id)
            .order_by(UserGoal.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_active_goals(self, user_id: str) -> List[UserGoal]:
        result = await self.db.execute(
            select(UserGoal)
            .where(UserGoal.user_id == user_id, UserGoal.completed.is_(False))
            .order_by(UserGoal.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_goal(self, goal_id: str, user_id: str) -> Optional[UserGoal]:
        result = await self.db.execute(
            select(UserGoal).where(UserGoal.id == goal_id, UserGoal.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create_goal(
        self,
        user_id: str,
        goal_type: str,
        period: str,
        target: int,
        end_date: Optional[datetime] = None,
    ) -> UserGoal:
        now = utcnow()
        goal = UserGoal(
            user_id=user_id,
            type=goal_type,
            period=period,
            target=target,
            current=0,
            start_date=now,
            end_date=end_date,
            completed=False,
            created_at=now,
            updated_at=now,
        )
        self.db.add(goal)
        await self.db.commit()
        await self.db.refresh(goal)
        return goal

    async def set_goal_progress(self, goal_id: str, current: int) -> None:
        await self.db.execute(
            update(UserGoal)
            .where(UserGoal.id == goal_id)
            .values(current=current, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

    async def mark_goal_completed(
        self, goal_id: str, current: int, completed_at: datetime
    ) -> bool:
        """
        Flip ``completed`` from false to true.

        The UPDATE is conditional on ``completed`` still being false, so only
        one caller ever sees the transition.

        Returns:
            True if this call completed the goal
        """
        result = await self.db.execute(
            update(UserGoal)
            .where(UserGoal.id == goal_id, UserGoal.completed.is_(False))
            .values(
                current=current,
                completed=True,
                completed_at=completed_at,
                updated_at=completed_at,
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1

    async def update_goal(
        self,
        goal: UserGoal,
        current: Optional[int] = None,
        completed: Optional[bool] = None,
    ) -> UserGoal:
        """Manual goal edit. Completing a goal this way grants no bonus."""
        now = utcnow()
        if current is not None:
            goal.current = current
        if completed is not None:
            if completed and not goal.completed:
                goal.completed_at = now
            elif not completed:
                goal.completed_at = None
            goal.completed = completed
        goal.updated_at = now

        await self.db.commit()
        await self.db.refresh(goal)
        return goal

    async def delete_goal(self, goal: UserGoal) -> None:
        await self.db.delete(goal)
        await self.db.commit()
