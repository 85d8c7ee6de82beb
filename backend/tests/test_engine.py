"""
Tests for the gamification engine against a real (in-memory) database

Tests cover:
- Point awards and ledger totals
- Streak persistence through update_streak
- Badge awarding, bonus points and idempotence
- A failing badge rule does not stop the others
- Duplicate badge inserts are rejected by the unique constraint
- Goal progress, exactly-once completion and bonus
- A broken goal does not stop the others
- record_activity end to end
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from jobtrackr.database import utcnow
from jobtrackr.models import UserGoal
from jobtrackr.repositories import ActivityRecordsRepository, GamificationRepository
from jobtrackr.services.gamification import ActivityAction, BadgeType
from jobtrackr.services.gamification.engine import GamificationEngine

USER_ID = "user-1"


@pytest.fixture
def repo(db_session):
    return GamificationRepository(db_session)


@pytest.fixture
def engine(db_session, repo):
    return GamificationEngine(repo, ActivityRecordsRepository(db_session))


class TestAwardPoints:
    """Test the point ledger."""

    @pytest.mark.asyncio
    async def test_total_is_sum_of_entries(self, engine, repo):
        await engine.award_points(USER_ID, 10, "application_created")
        await engine.award_points(USER_ID, 25, "profile_complete", {"source": "test"})
        await engine.award_points(USER_ID, -5, "adjustment")

        assert await repo.get_total_points(USER_ID) == 30
        history = await repo.list_points(USER_ID)
        assert len(history) == 3
        assert {entry.reason for entry in history} == {
            "application_created",
            "profile_complete",
            "adjustment",
        }

    @pytest.mark.asyncio
    async def test_metadata_is_stored(self, engine):
        entry = await engine.award_points(USER_ID, 5, "ai_used", {"feature": "cover_letter"})
        assert entry.details == {"feature": "cover_letter"}

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, engine, repo):
        await engine.award_points(USER_ID, 10, "application_created")
        assert await repo.get_total_points("someone-else") == 0


class TestUpdateStreak:
    """Test streak persistence."""

    @pytest.mark.asyncio
    async def test_consecutive_days_are_persisted(self, engine, repo):
        day = datetime(2024, 1, 1, 9, 0)
        for offset in range(3):
            await engine.update_streak(USER_ID, day + timedelta(days=offset))

        row = await repo.get_streak(USER_ID)
        assert row.current_streak == 3
        assert row.longest_streak == 3

    @pytest.mark.asyncio
    async def test_same_day_does_not_write(self, engine, repo):
        await engine.update_streak(USER_ID, datetime(2024, 1, 1, 14, 0))

        with patch.object(repo, "save_streak", wraps=repo.save_streak) as save:
            state = await engine.update_streak(USER_ID, datetime(2024, 1, 1, 23, 0))

        save.assert_not_called()
        assert state.current_streak == 1

    @pytest.mark.asyncio
    async def test_gap_resets(self, engine, repo):
        await engine.update_streak(USER_ID, datetime(2024, 1, 1))
        await engine.update_streak(USER_ID, datetime(2024, 1, 2))
        state = await engine.update_streak(USER_ID, datetime(2024, 1, 5))

        assert state.current_streak == 1
        assert state.longest_streak == 2

    @pytest.mark.asyncio
    async def test_backdated_activity_keeps_streak(self, engine, repo):
        """An activity older than the last one never resets the streak."""
        await engine.update_streak(USER_ID, datetime(2024, 1, 1))
        await engine.update_streak(USER_ID, datetime(2024, 1, 2))

        state = await engine.update_streak(USER_ID, datetime(2023, 12, 20))

        assert state.current_streak == 2
        row = await repo.get_streak(USER_ID)
        assert row.last_activity_date == datetime(2024, 1, 2)


class TestCheckAndAwardBadges:
    """Test badge evaluation."""

    @pytest.mark.asyncio
    async def test_no_data_no_badges(self, engine):
        assert await engine.check_and_award_badges(USER_ID) == []

    @pytest.mark.asyncio
    async def test_awards_badge_and_bonus(self, engine, repo, add_records):
        await add_records(applications=1)

        new_badges = await engine.check_and_award_badges(USER_ID)

        assert new_badges == [BadgeType.FIRST_APPLICATION]
        assert await repo.get_badge_types(USER_ID) == {"first_application"}
        assert await repo.get_total_points(USER_ID) == 50

    @pytest.mark.asyncio
    async def test_second_pass_awards_nothing(self, engine, repo, add_records):
        await add_records(applications=10, accepted=1, interviews=1, documents=("cv",))

        first = await engine.check_and_award_badges(USER_ID)
        total_after_first = await repo.get_total_points(USER_ID)
        second = await engine.check_and_award_badges(USER_ID)

        assert set(first) == {
            BadgeType.FIRST_APPLICATION,
            BadgeType.APPLICATIONS_10,
            BadgeType.FIRST_ACCEPTANCE,
            BadgeType.FIRST_INTERVIEW,
            BadgeType.CV_CREATED,
        }
        assert second == []
        assert await repo.get_total_points(USER_ID) == total_after_first == 5 * 50

    @pytest.mark.asyncio
    async def test_failing_rule_does_not_block_others(self, engine, repo, add_records):
        await add_records(documents=("cv", "cover_letter"))
        original_add_badge = repo.add_badge

        async def flaky_add_badge(user_id, badge_type):
            if badge_type == BadgeType.CV_CREATED.value:
                raise RuntimeError("storage error")
            return await original_add_badge(user_id, badge_type)

        with patch.object(repo, "add_badge", side_effect=flaky_add_badge), patch(
            "jobtrackr.services.gamification.engine.logger"
        ) as mock_logger:
            new_badges = await engine.check_and_award_badges(USER_ID)

        assert new_badges == [BadgeType.LETTER_CREATED]
        mock_logger.exception.assert_called_once()
        assert await repo.get_badge_types(USER_ID) == {"letter_created"}

        # The failed badge is picked up by the next pass
        assert await engine.check_and_award_badges(USER_ID) == [BadgeType.CV_CREATED]

    @pytest.mark.asyncio
    async def test_duplicate_insert_is_rejected(self, engine, repo, add_records):
        """Simulate a concurrent pass that already inserted the badge."""
        await add_records(applications=1)
        await repo.add_badge(USER_ID, BadgeType.FIRST_APPLICATION.value)

        with patch.object(repo, "get_badge_types", AsyncMock(return_value=set())), patch.object(
            repo, "has_badge", AsyncMock(return_value=False)
        ), patch("jobtrackr.services.gamification.engine.logger") as mock_logger:
            new_badges = await engine.check_and_award_badges(USER_ID)

        assert new_badges == []
        mock_logger.exception.assert_called_once()
        assert len(await repo.list_badges(USER_ID)) == 1
        assert await repo.get_total_points(USER_ID) == 0

    @pytest.mark.asyncio
    async def test_reason_badges_from_ledger(self, engine, repo):
        await engine.award_points(USER_ID, 5, "ai_used")
        assert await engine.check_and_award_badges(USER_ID) == [BadgeType.AI_USED]


class TestUpdateGoalsProgress:
    """Test goal progress and completion."""

    @pytest.mark.asyncio
    async def test_progress_below_target(self, engine, repo, add_records, db_session):
        goal = await repo.create_goal(USER_ID, "applications_count", "daily", 3)
        await add_records(applications=2)

        assert await engine.update_goals_progress(USER_ID) == []

        await db_session.refresh(goal)
        assert goal.current == 2
        assert goal.completed is False

    @pytest.mark.asyncio
    async def test_completion_is_exactly_once(self, engine, repo, add_records, db_session):
        goal = await repo.create_goal(USER_ID, "applications_count", "weekly", 1)
        await add_records(applications=1)

        first = await engine.update_goals_progress(USER_ID)
        second = await engine.update_goals_progress(USER_ID)

        assert first == [goal.id]
        assert second == []
        await db_session.refresh(goal)
        assert goal.completed is True
        assert goal.completed_at is not None
        assert goal.current == 1

        history = await repo.list_points(USER_ID)
        bonuses = [entry for entry in history if entry.reason == "goal_completed"]
        assert len(bonuses) == 1
        assert bonuses[0].points == 100
        assert bonuses[0].details["goal_id"] == goal.id

    @pytest.mark.asyncio
    async def test_concurrent_completion_grants_one_bonus(self, engine, repo, add_records):
        goal = await repo.create_goal(USER_ID, "applications_count", "daily", 1)
        await add_records(applications=1)

        assert await repo.mark_goal_completed(goal.id, 1, utcnow()) is True
        assert await repo.mark_goal_completed(goal.id, 1, utcnow()) is False

    @pytest.mark.asyncio
    async def test_old_records_do_not_count(self, engine, repo, add_records, db_session):
        goal = await repo.create_goal(USER_ID, "applications_count", "daily", 1)
        await add_records(applications=3, created_at=utcnow() - timedelta(days=2))

        assert await engine.update_goals_progress(USER_ID) == []
        await db_session.refresh(goal)
        assert goal.current == 0

    @pytest.mark.asyncio
    async def test_points_goal(self, engine, repo):
        goal = await repo.create_goal(USER_ID, "points_earned", "monthly", 30)
        await engine.award_points(USER_ID, 20, "application_created")
        await engine.award_points(USER_ID, 15, "interview_scheduled")

        assert await engine.update_goals_progress(USER_ID) == [goal.id]

    @pytest.mark.asyncio
    async def test_streak_goal(self, engine, repo):
        goal = await repo.create_goal(USER_ID, "streak_days", "daily", 2)
        await engine.update_streak(USER_ID, datetime(2024, 1, 1))
        await engine.update_streak(USER_ID, datetime(2024, 1, 2))

        assert await engine.update_goals_progress(USER_ID) == [goal.id]

    @pytest.mark.asyncio
    async def test_broken_goal_does_not_block_others(self, engine, repo, add_records, db_session):
        db_session.add(
            UserGoal(user_id=USER_ID, type="unknown_type", period="daily", target=1, current=0)
        )
        await db_session.commit()
        goal = await repo.create_goal(USER_ID, "interviews_count", "daily", 1)
        # The rollback after the broken goal expires ORM instances
        goal_id = goal.id
        await add_records(interviews=1)

        with patch("jobtrackr.services.gamification.engine.logger") as mock_logger:
            completed = await engine.update_goals_progress(USER_ID)

        assert completed == [goal_id]
        mock_logger.exception.assert_called_once()

    @pytest.mark.asyncio
    async def test_goal_bonus_counts_toward_points_goal(self, engine, repo, db_session):
        """A completion bonus can complete another points goal in the same pass."""
        larger = await repo.create_goal(USER_ID, "points_earned", "daily", 110)
        larger.created_at = utcnow() - timedelta(minutes=5)
        await db_session.commit()
        smaller = await repo.create_goal(USER_ID, "points_earned", "daily", 10)
        larger_id, smaller_id = larger.id, smaller.id
        await engine.award_points(USER_ID, 10, "application_created")

        completed = await engine.update_goals_progress(USER_ID)

        assert completed == [smaller_id, larger_id]
        assert await repo.get_total_points(USER_ID) == 10 + 2 * 100


class TestRecordActivity:
    """Test the full activity pipeline."""

    @pytest.mark.asyncio
    async def test_application_created(self, engine, repo, add_records):
        await add_records(applications=1)

        outcome = await engine.record_activity(USER_ID, ActivityAction.APPLICATION_CREATED)

        assert outcome.points_awarded == 10
        assert outcome.streak.current_streak == 1
        assert outcome.new_badges == [BadgeType.FIRST_APPLICATION]
        assert outcome.completed_goals == []
        assert await repo.get_total_points(USER_ID) == 10 + 50

    @pytest.mark.asyncio
    async def test_action_name_is_ledger_reason(self, engine, repo):
        outcome = await engine.record_activity(USER_ID, "ai_used", metadata={"feature": "cv"})

        assert outcome.new_badges == [BadgeType.AI_USED]
        reasons = await repo.get_point_reasons(USER_ID)
        assert reasons == {"ai_used", "badge_earned"}

    @pytest.mark.asyncio
    async def test_completes_goal(self, engine, repo):
        goal = await repo.create_goal(USER_ID, "points_earned", "daily", 20)

        outcome = await engine.record_activity(USER_ID, ActivityAction.INTERVIEW_COMPLETED)

        assert outcome.completed_goals == [goal.id]
        assert await repo.get_total_points(USER_ID) == 20 + 100

    @pytest.mark.asyncio
    async def test_unknown_action_is_rejected(self, engine):
        with pytest.raises(ValueError):
            await engine.record_activity(USER_ID, "not_an_action")
