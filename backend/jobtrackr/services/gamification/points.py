"""
Point values for gamification events.

Every award is a ledger row whose ``reason`` is one of the codes below, or an
action name from ``ActivityAction``.
"""

from enum import Enum
from typing import Dict

BADGE_EARNED_REASON = "badge_earned"
GOAL_COMPLETED_REASON = "goal_completed"

BADGE_BONUS_POINTS = 50
GOAL_BONUS_POINTS = 100


class ActivityAction(str, Enum):
    """User actions that count as streak activity and earn points."""

    APPLICATION_CREATED = "application_created"
    APPLICATION_UPDATED = "application_updated"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_COMPLETED = "interview_completed"
    APPLICATION_ACCEPTED = "application_accepted"
    DOCUMENT_CREATED = "document_created"
    AI_USED = "ai_used"
    PROFILE_COMPLETE = "profile_complete"


ACTION_POINTS: Dict[ActivityAction, int] = {
    ActivityAction.APPLICATION_CREATED: 10,
    ActivityAction.APPLICATION_UPDATED: 5,
    ActivityAction.INTERVIEW_SCHEDULED: 15,
    ActivityAction.INTERVIEW_COMPLETED: 20,
    ActivityAction.APPLICATION_ACCEPTED: 50,
    ActivityAction.DOCUMENT_CREATED: 10,
    ActivityAction.AI_USED: 5,
    ActivityAction.PROFILE_COMPLETE: 25,
}
