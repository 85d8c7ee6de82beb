"""
Tests for badge rules

Tests cover:
- Every badge type has a rule with a name and description
- Count thresholds (applications, interviews, streaks)
- Document and ledger-reason badges
- eligible_badges ordering and empty snapshot
"""

import pytest

from jobtrackr.services.gamification import (
    BADGE_RULES,
    BadgeType,
    UserSnapshot,
    eligible_badges,
)


class TestBadgeCatalog:
    """Test the rule table itself."""

    def test_every_badge_type_has_a_rule(self):
        assert set(BADGE_RULES) == set(BadgeType)
        assert len(BADGE_RULES) == 13

    def test_rules_have_display_text(self):
        for rule in BADGE_RULES.values():
            assert rule.name
            assert rule.description


class TestBadgeThresholds:
    """Test individual predicates."""

    @pytest.mark.parametrize(
        "count,expected",
        [
            (0, set()),
            (1, {BadgeType.FIRST_APPLICATION}),
            (9, {BadgeType.FIRST_APPLICATION}),
            (10, {BadgeType.FIRST_APPLICATION, BadgeType.APPLICATIONS_10}),
            (
                100,
                {
                    BadgeType.FIRST_APPLICATION,
                    BadgeType.APPLICATIONS_10,
                    BadgeType.APPLICATIONS_50,
                    BadgeType.APPLICATIONS_100,
                },
            ),
        ],
    )
    def test_application_milestones(self, count, expected):
        assert set(eligible_badges(UserSnapshot(application_count=count))) == expected

    def test_streak_badges(self):
        assert eligible_badges(UserSnapshot(current_streak=6)) == []
        assert eligible_badges(UserSnapshot(current_streak=7)) == [BadgeType.STREAK_7]
        assert set(eligible_badges(UserSnapshot(current_streak=100))) == {
            BadgeType.STREAK_7,
            BadgeType.STREAK_30,
            BadgeType.STREAK_100,
        }

    def test_first_interview(self):
        assert BADGE_RULES[BadgeType.FIRST_INTERVIEW].check(UserSnapshot(interview_count=1))
        assert not BADGE_RULES[BadgeType.FIRST_INTERVIEW].check(UserSnapshot())

    def test_first_acceptance_needs_accepted_status(self):
        rule = BADGE_RULES[BadgeType.FIRST_ACCEPTANCE]
        assert rule.check(UserSnapshot(application_count=1, has_accepted_application=True))
        assert not rule.check(UserSnapshot(application_count=5))

    def test_document_badges(self):
        snapshot = UserSnapshot(document_types=frozenset({"cv"}))
        assert eligible_badges(snapshot) == [BadgeType.CV_CREATED]

        snapshot = UserSnapshot(document_types=frozenset({"cv", "cover_letter"}))
        assert set(eligible_badges(snapshot)) == {BadgeType.CV_CREATED, BadgeType.LETTER_CREATED}

    def test_ledger_reason_badges(self):
        snapshot = UserSnapshot(point_reasons=frozenset({"ai_used", "profile_complete"}))
        assert set(eligible_badges(snapshot)) == {BadgeType.AI_USED, BadgeType.PROFILE_COMPLETE}

    def test_unrelated_reason_awards_nothing(self):
        assert eligible_badges(UserSnapshot(point_reasons=frozenset({"badge_earned"}))) == []

    def test_eligible_badges_follow_rule_order(self):
        snapshot = UserSnapshot(
            application_count=10,
            interview_count=1,
            document_types=frozenset({"cv"}),
        )
        order = list(BADGE_RULES)
        result = eligible_badges(snapshot)
        assert result == sorted(result, key=order.index)
