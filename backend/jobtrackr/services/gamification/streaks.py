"""
Streak transitions.

A streak counts consecutive calendar days with at least one activity. The
transition is a pure function of the previous state and the activity date:

    no previous state      → current = longest = 1
    same calendar day      → unchanged
    next calendar day      → current + 1, longest = max(longest, current)
    gap of 2+ days         → current = 1, longest unchanged

Dates are compared as calendar days, so 23:00 and 01:00 the next morning are
one day apart and 00:01 and 23:59 the same day are zero days apart.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class StreakState:
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[datetime]


def _as_day(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime(value.year, value.month, value.day)


def days_between(earlier: DateLike, later: DateLike) -> int:
    """Number of calendar days from ``earlier`` to ``later`` (time of day ignored)."""
    return (_as_day(later) - _as_day(earlier)).days


def advance_streak(previous: Optional[StreakState], activity_date: DateLike) -> StreakState:
    """
    Compute the streak state after an activity on ``activity_date``.

    An activity dated before the last recorded one leaves the state unchanged,
    so replayed or out-of-order events never shorten a streak.

    Args:
        previous: Current persisted state, or None when the user has no streak yet
        activity_date: When the activity happened

    Returns:
        The new state (``previous`` itself when nothing changes)
    """
    activity_at = _as_datetime(activity_date)

    if previous is None or previous.last_activity_date is None:
        return StreakState(current_streak=1, longest_streak=1, last_activity_date=activity_at)

    gap = days_between(previous.last_activity_date, activity_at)

    if gap <= 0:
        return previous

    if gap == 1:
        current = previous.current_streak + 1
        return StreakState(
            current_streak=current,
            longest_streak=max(previous.longest_streak, current),
            last_activity_date=activity_at,
        )

    return StreakState(
        current_streak=1,
        longest_streak=max(previous.longest_streak, 1),
        last_activity_date=activity_at,
    )
