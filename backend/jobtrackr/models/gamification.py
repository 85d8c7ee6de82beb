"""
Gamification Models - badges, point ledger, streaks and goals

Tables:
    user_badges  - one row per (user, badge type), never updated
    user_points  - append-only ledger, totals are SUM(points)
    user_streaks - one row per user
    user_goals   - user-defined targets scoped to a period
"""

from sqlalchemy import (
    Column,
    String,
    Integer,
    Boolean,
    DateTime,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from jobtrackr.database import Base
import uuid


class UserBadge(Base):
    __tablename__ = "user_badges"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    badge_type = Column(String(50), nullable=False)
    earned_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "badge_type", name="uq_user_badges_user_badge"),
    )


class UserPoint(Base):
    """
    Point ledger entry.

    Attributes:
        points: Signed amount (negative adjustments are allowed)
        reason: Reason code, e.g. "badge_earned", "goal_completed", "ai_used"
        details: Optional JSON payload (badge type, goal id, ...)
    """

    __tablename__ = "user_points"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    points = Column(Integer, nullable=False)
    reason = Column(String(100), nullable=False)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)


class UserStreak(Base):
    __tablename__ = "user_streaks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, unique=True)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class UserGoal(Base):
    """
    User-defined goal.

    Attributes:
        type: applications_count, interviews_count, streak_days or points_earned
        period: daily, weekly or monthly
        target: Value that completes the goal
        current: Last computed progress
        completed: Set once, never reset by progress updates
    """

    __tablename__ = "user_goals"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    type = Column(String(30), nullable=False)
    period = Column(String(10), nullable=False)
    target = Column(Integer, nullable=False)
    current = Column(Integer, nullable=False, default=0)
    start_date = Column(DateTime, nullable=False, server_default=func.now())
    end_date = Column(DateTime, nullable=True)
    completed = Column(Boolean, nullable=False, default=False, index=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
