from jobtrackr.models.activity import Application, Interview, Document
from jobtrackr.models.gamification import UserBadge, UserPoint, UserStreak, UserGoal

__all__ = [
    "Application",
    "Interview",
    "Document",
    "UserBadge",
    "UserPoint",
    "UserStreak",
    "UserGoal",
]
