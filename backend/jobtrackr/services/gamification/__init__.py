"""
Gamification rules: badges, points, streaks and goals.

The pure rule modules are re-exported here. The engine, which needs the
repositories, is imported from ``jobtrackr.services.gamification.engine``.
"""

from jobtrackr.services.gamification.badges import (
    BADGE_RULES,
    BadgeRule,
    BadgeType,
    UserSnapshot,
    eligible_badges,
)
from jobtrackr.services.gamification.goals import (
    DatedEntry,
    GoalPeriod,
    GoalType,
    compute_goal_progress,
    filter_by_period,
    period_window,
)
from jobtrackr.services.gamification.points import (
    ACTION_POINTS,
    BADGE_BONUS_POINTS,
    GOAL_BONUS_POINTS,
    ActivityAction,
)
from jobtrackr.services.gamification.streaks import StreakState, advance_streak, days_between

__all__ = [
    "BADGE_RULES",
    "BadgeRule",
    "BadgeType",
    "UserSnapshot",
    "eligible_badges",
    "DatedEntry",
    "GoalPeriod",
    "GoalType",
    "compute_goal_progress",
    "filter_by_period",
    "period_window",
    "ACTION_POINTS",
    "BADGE_BONUS_POINTS",
    "GOAL_BONUS_POINTS",
    "ActivityAction",
    "StreakState",
    "advance_streak",
    "days_between",
]
