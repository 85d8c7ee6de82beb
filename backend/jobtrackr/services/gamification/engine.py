"""
Gamification Engine - badges, points, streaks and goal progress

Orchestrates the pure rules in this package against a user's persisted data.

Flow for one qualifying activity (record_activity):
    1. Append the action's points to the ledger
    2. Advance the streak for the activity date
    3. Evaluate badge rules, award new badges (+50 points each)
    4. Recompute active goals, complete reached ones (+100 points each)

Failure Semantics:
    A badge rule or goal that raises is logged and skipped; the session is
    rolled back so the remaining rules and goals still run. Nothing is
    retried. Running a pass twice is safe: held badges are skipped and
    completed goals are no longer active.

Concurrency:
    Two passes for the same user can race between the badge lookup and the
    insert. The unique (user_id, badge_type) constraint rejects the second
    insert, which then surfaces as a logged rule failure.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from jobtrackr.database import utcnow
from jobtrackr.middleware.metrics import (
    record_badge_awarded,
    record_goal_completed,
    record_points_awarded,
    record_rule_failure,
)
from jobtrackr.models import UserPoint
from jobtrackr.repositories.gamification import GamificationStore
from jobtrackr.repositories.records import ActivityRecords
from jobtrackr.services.gamification.badges import BADGE_RULES, BadgeType, UserSnapshot
from jobtrackr.services.gamification.goals import DatedEntry, GoalType, compute_goal_progress
from jobtrackr.services.gamification.points import (
    ACTION_POINTS,
    BADGE_BONUS_POINTS,
    BADGE_EARNED_REASON,
    GOAL_BONUS_POINTS,
    GOAL_COMPLETED_REASON,
    ActivityAction,
)
from jobtrackr.services.gamification.streaks import StreakState, advance_streak

logger = logging.getLogger(__name__)


@dataclass
class ActivityOutcome:
    """Everything that changed because of one recorded activity."""

    points_awarded: int
    streak: StreakState
    new_badges: List[BadgeType] = field(default_factory=list)
    completed_goals: List[str] = field(default_factory=list)


class GamificationEngine:
    """
    Applies gamification rules for a user.

    Attributes:
        store: Badge/point/streak/goal persistence
        records: Read-only access to applications, interviews and documents
    """

    def __init__(self, store: GamificationStore, records: ActivityRecords):
        self.store = store
        self.records = records

    # ==================== Points ====================

    async def award_points(
        self,
        user_id: str,
        amount: int,
        reason: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> UserPoint:
        """
        Append one ledger entry. Negative amounts are allowed.

        Args:
            user_id: User receiving the points
            amount: Signed number of points
            reason: Reason code (e.g. "badge_earned")
            metadata: Optional JSON-serializable details

        Returns:
            The stored ledger entry
        """
        entry = await self.store.add_points(user_id, amount, reason, metadata)
        record_points_awarded(reason, amount)
        return entry

    # ==================== Streaks ====================

    async def update_streak(
        self, user_id: str, activity_date: Optional[datetime] = None
    ) -> StreakState:
        """Advance the user's streak for an activity at ``activity_date`` (default: now)."""
        activity_date = activity_date or utcnow()

        row = await self.store.get_streak(user_id)
        previous = None
        if row is not None:
            previous = StreakState(
                current_streak=row.current_streak,
                longest_streak=row.longest_streak,
                last_activity_date=row.last_activity_date,
            )

        state = advance_streak(previous, activity_date)
        if state != previous:
            await self.store.save_streak(user_id, state)
        return state

    # ==================== Badges ====================

    async def build_snapshot(self, user_id: str) -> UserSnapshot:
        """Collect the counts and flags the badge rules evaluate."""
        applications = await self.records.list_applications(user_id)
        interviews = await self.records.list_interviews(user_id)
        documents = await self.records.list_documents(user_id)
        streak = await self.store.get_streak(user_id)
        reasons = await self.store.get_point_reasons(user_id)

        return UserSnapshot(
            application_count=len(applications),
            has_accepted_application=any(app.status == "accepted" for app in applications),
            interview_count=len(interviews),
            document_types=frozenset(doc.type for doc in documents),
            current_streak=streak.current_streak if streak else 0,
            point_reasons=frozenset(reasons),
        )

    async def check_and_award_badges(self, user_id: str) -> List[BadgeType]:
        """
        Award every badge the user now qualifies for and does not hold yet.

        Each new badge also grants BADGE_BONUS_POINTS. A second call with no
        data change in between returns an empty list.

        Returns:
            Badge types awarded by this call, in rule order
        """
        snapshot = await self.build_snapshot(user_id)
        held = await self.store.get_badge_types(user_id)
        new_badges: List[BadgeType] = []

        for badge_type, rule in BADGE_RULES.items():
            if badge_type.value in held:
                continue

            try:
                if not rule.check(snapshot):
                    continue

                # Re-check right before writing; another request may have won.
                if await self.store.has_badge(user_id, badge_type.value):
                    continue

                await self.store.add_badge(user_id, badge_type.value)
                new_badges.append(badge_type)
                record_badge_awarded(badge_type.value)
                logger.info(f"User {user_id} earned badge {badge_type.value}")

                await self.award_points(
                    user_id,
                    BADGE_BONUS_POINTS,
                    BADGE_EARNED_REASON,
                    {"badge_type": badge_type.value},
                )
            except Exception:
                logger.exception(f"Badge rule {badge_type.value} failed for user {user_id}")
                record_rule_failure("badge")
                await self.store.rollback()

        return new_badges

    # ==================== Goals ====================

    async def update_goals_progress(
        self, user_id: str, now: Optional[datetime] = None
    ) -> List[str]:
        """
        Recompute every active goal and complete those that reached their target.

        The completion bonus is only granted when this call is the one that
        flips ``completed`` to true.

        Args:
            user_id: Goal owner
            now: Reference time for period windows (default: now)

        Returns:
            Ids of the goals completed by this call
        """
        now = now or utcnow()
        # A rollback expires loaded rows, so work from plain values
        goals = [
            (goal.id, goal.type, goal.period, goal.target)
            for goal in await self.store.list_active_goals(user_id)
        ]
        completed: List[str] = []
        loaded: Dict[GoalType, Dict[str, Any]] = {}

        for goal_id, raw_type, period, target in goals:
            try:
                goal_type = GoalType(raw_type)
                if goal_type not in loaded:
                    loaded[goal_type] = await self._load_goal_inputs(user_id, goal_type)

                current = compute_goal_progress(goal_type, period, now, **loaded[goal_type])

                if current < target:
                    await self.store.set_goal_progress(goal_id, current)
                    continue

                if not await self.store.mark_goal_completed(goal_id, current, now):
                    continue

                completed.append(goal_id)
                record_goal_completed(goal_type.value)
                logger.info(f"User {user_id} completed goal {goal_id} ({goal_type.value})")

                await self.award_points(
                    user_id,
                    GOAL_BONUS_POINTS,
                    GOAL_COMPLETED_REASON,
                    {"goal_id": goal_id, "goal_type": goal_type.value},
                )
                # The bonus is itself ledger points
                loaded.pop(GoalType.POINTS_EARNED, None)
            except Exception:
                logger.exception(f"Goal {goal_id} progress update failed for user {user_id}")
                record_rule_failure("goal")
                await self.store.rollback()

        return completed

    async def _load_goal_inputs(self, user_id: str, goal_type: GoalType) -> Dict[str, Any]:
        if goal_type is GoalType.APPLICATIONS_COUNT:
            applications = await self.records.list_applications(user_id)
            return {"applications": [DatedEntry(app.created_at) for app in applications]}
        if goal_type is GoalType.INTERVIEWS_COUNT:
            interviews = await self.records.list_interviews(user_id)
            return {"interviews": [DatedEntry(item.created_at) for item in interviews]}
        if goal_type is GoalType.STREAK_DAYS:
            streak = await self.store.get_streak(user_id)
            return {"current_streak": streak.current_streak if streak else 0}
        entries = await self.store.list_points(user_id)
        return {"points": [DatedEntry(entry.created_at, entry.points) for entry in entries]}

    # ==================== Activities ====================

    async def evaluate(self, user_id: str, now: Optional[datetime] = None):
        """Run badge evaluation then goal progress. Returns (new_badges, completed_goal_ids)."""
        new_badges = await self.check_and_award_badges(user_id)
        completed_goals = await self.update_goals_progress(user_id, now)
        return new_badges, completed_goals

    async def record_activity(
        self,
        user_id: str,
        action: ActivityAction,
        occurred_at: Optional[datetime] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ActivityOutcome:
        """
        Record a qualifying user action.

        Args:
            user_id: Acting user
            action: What the user did; its ledger reason is the action name
            occurred_at: When it happened (default: now)
            metadata: Optional details stored on the ledger entry

        Returns:
            ActivityOutcome with points, streak, new badges and completed goals
        """
        action = ActivityAction(action)
        occurred_at = occurred_at or utcnow()
        points = ACTION_POINTS[action]

        await self.award_points(user_id, points, action.value, metadata)
        streak = await self.update_streak(user_id, occurred_at)
        new_badges, completed_goals = await self.evaluate(user_id)

        return ActivityOutcome(
            points_awarded=points,
            streak=streak,
            new_badges=new_badges,
            completed_goals=completed_goals,
        )
