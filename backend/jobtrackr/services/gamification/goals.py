"""
Goal period windows and progress computation.

Windows are half-open ``[start, end)`` ranges ending at midnight after ``now``:

    daily    today 00:00            → tomorrow 00:00
    weekly   Sunday 00:00 this week → tomorrow 00:00
    monthly  1st of month 00:00     → tomorrow 00:00

All timestamps are naive UTC, like the rest of the database.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Iterable, List, NamedTuple, Sequence, Tuple, TypeVar

T = TypeVar("T")


class DatedEntry(NamedTuple):
    """Timestamp and value of one counted record, detached from the session."""

    created_at: datetime
    points: int = 0


class GoalType(str, Enum):
    APPLICATIONS_COUNT = "applications_count"
    INTERVIEWS_COUNT = "interviews_count"
    STREAK_DAYS = "streak_days"
    POINTS_EARNED = "points_earned"


class GoalPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def period_window(period: GoalPeriod, now: datetime) -> Tuple[datetime, datetime]:
    """
    Return the ``[start, end)`` window for ``period`` around ``now``.

    Args:
        period: Goal period
        now: Reference time

    Returns:
        Tuple of (start, end) datetimes
    """
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = today + timedelta(days=1)

    period = GoalPeriod(period)
    if period is GoalPeriod.DAILY:
        start = today
    elif period is GoalPeriod.WEEKLY:
        # weekday(): Monday=0 ... Sunday=6
        start = today - timedelta(days=(today.weekday() + 1) % 7)
    else:
        start = today.replace(day=1)

    return start, end


def filter_by_period(
    items: Iterable[T],
    period: GoalPeriod,
    now: datetime,
    timestamp: Callable[[T], datetime] = lambda item: item.created_at,
) -> List[T]:
    """Keep the items whose timestamp falls inside the period window."""
    start, end = period_window(period, now)
    return [item for item in items if start <= timestamp(item) < end]


def compute_goal_progress(
    goal_type: GoalType,
    period: GoalPeriod,
    now: datetime,
    *,
    applications: Sequence = (),
    interviews: Sequence = (),
    points: Sequence = (),
    current_streak: int = 0,
) -> int:
    """
    Compute a goal's current value.

    Only the collection matching ``goal_type`` is read, so callers may pass
    just that one. Streak goals use the current streak as-is; the period
    does not apply to them.

    Args:
        goal_type: What the goal counts
        period: Window used to filter records
        now: Reference time for the window
        applications: Application records or DatedEntry items
        interviews: Interview records or DatedEntry items
        points: Ledger entries or DatedEntry items (need ``points``)
        current_streak: Current streak length

    Returns:
        Progress value to compare against the goal's target
    """
    goal_type = GoalType(goal_type)

    if goal_type is GoalType.APPLICATIONS_COUNT:
        return len(filter_by_period(applications, period, now))
    if goal_type is GoalType.INTERVIEWS_COUNT:
        return len(filter_by_period(interviews, period, now))
    if goal_type is GoalType.STREAK_DAYS:
        return current_streak
    return sum(entry.points for entry in filter_by_period(points, period, now))
