"""
Badge Rules - pure eligibility predicates over a user snapshot

Each of the 13 badges is described by a ``BadgeRule`` whose ``check`` takes a
``UserSnapshot`` and returns a bool. Rules never touch the database and never
look at which badges the user already holds; the engine handles both.

Rule Table:
    first_application   applications >= 1
    applications_10     applications >= 10
    applications_50     applications >= 50
    applications_100    applications >= 100
    first_interview     interviews >= 1
    first_acceptance    an application has status "accepted"
    streak_7/30/100     current streak >= 7 / 30 / 100
    cv_created          a document of type "cv"
    letter_created      a document of type "cover_letter"
    ai_used             ledger contains reason "ai_used"
    profile_complete    ledger contains reason "profile_complete"
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List


class BadgeType(str, Enum):
    FIRST_APPLICATION = "first_application"
    FIRST_INTERVIEW = "first_interview"
    FIRST_ACCEPTANCE = "first_acceptance"
    APPLICATIONS_10 = "applications_10"
    APPLICATIONS_50 = "applications_50"
    APPLICATIONS_100 = "applications_100"
    STREAK_7 = "streak_7"
    STREAK_30 = "streak_30"
    STREAK_100 = "streak_100"
    CV_CREATED = "cv_created"
    LETTER_CREATED = "letter_created"
    AI_USED = "ai_used"
    PROFILE_COMPLETE = "profile_complete"


@dataclass(frozen=True)
class UserSnapshot:
    """
    Everything the badge rules need to know about a user.

    Attributes:
        application_count: Number of applications
        has_accepted_application: Any application with status "accepted"
        interview_count: Number of interviews
        document_types: Distinct document types ("cv", "cover_letter")
        current_streak: Current streak length (0 without a streak row)
        point_reasons: Distinct reason codes found in the point ledger
    """

    application_count: int = 0
    has_accepted_application: bool = False
    interview_count: int = 0
    document_types: FrozenSet[str] = field(default_factory=frozenset)
    current_streak: int = 0
    point_reasons: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class BadgeRule:
    name: str
    description: str
    check: Callable[[UserSnapshot], bool]


def _min_applications(count: int) -> Callable[[UserSnapshot], bool]:
    return lambda snapshot: snapshot.application_count >= count


def _min_streak(days: int) -> Callable[[UserSnapshot], bool]:
    return lambda snapshot: snapshot.current_streak >= days


def _has_document(doc_type: str) -> Callable[[UserSnapshot], bool]:
    return lambda snapshot: doc_type in snapshot.document_types


def _has_point_reason(reason: str) -> Callable[[UserSnapshot], bool]:
    return lambda snapshot: reason in snapshot.point_reasons


BADGE_RULES: Dict[BadgeType, BadgeRule] = {
    BadgeType.FIRST_APPLICATION: BadgeRule(
        name="First step",
        description="Create your first application",
        check=_min_applications(1),
    ),
    BadgeType.FIRST_INTERVIEW: BadgeRule(
        name="First interview",
        description="Schedule your first interview",
        check=lambda snapshot: snapshot.interview_count >= 1,
    ),
    BadgeType.FIRST_ACCEPTANCE: BadgeRule(
        name="First win",
        description="Get your first acceptance",
        check=lambda snapshot: snapshot.has_accepted_application,
    ),
    BadgeType.APPLICATIONS_10: BadgeRule(
        name="Determined",
        description="Create 10 applications",
        check=_min_applications(10),
    ),
    BadgeType.APPLICATIONS_50: BadgeRule(
        name="Persistent",
        description="Create 50 applications",
        check=_min_applications(50),
    ),
    BadgeType.APPLICATIONS_100: BadgeRule(
        name="Unstoppable",
        description="Create 100 applications",
        check=_min_applications(100),
    ),
    BadgeType.STREAK_7: BadgeRule(
        name="7-day streak",
        description="Keep a streak of 7 consecutive days",
        check=_min_streak(7),
    ),
    BadgeType.STREAK_30: BadgeRule(
        name="30-day streak",
        description="Keep a streak of 30 consecutive days",
        check=_min_streak(30),
    ),
    BadgeType.STREAK_100: BadgeRule(
        name="Legend",
        description="Keep a streak of 100 consecutive days",
        check=_min_streak(100),
    ),
    BadgeType.CV_CREATED: BadgeRule(
        name="CV created",
        description="Create your first CV",
        check=_has_document("cv"),
    ),
    BadgeType.LETTER_CREATED: BadgeRule(
        name="Letter created",
        description="Create your first cover letter",
        check=_has_document("cover_letter"),
    ),
    BadgeType.AI_USED: BadgeRule(
        name="AI used",
        description="Use the AI assistant for the first time",
        check=_has_point_reason("ai_used"),
    ),
    BadgeType.PROFILE_COMPLETE: BadgeRule(
        name="Profile complete",
        description="Complete your profile",
        check=_has_point_reason("profile_complete"),
    ),
}


def eligible_badges(snapshot: UserSnapshot) -> List[BadgeType]:
    """Return every badge whose predicate holds for the snapshot, in rule order."""
    return [badge for badge, rule in BADGE_RULES.items() if rule.check(snapshot)]
