from jobtrackr.repositories.records import ActivityRecords, ActivityRecordsRepository
from jobtrackr.repositories.gamification import GamificationStore, GamificationRepository

__all__ = [
    "ActivityRecords",
    "ActivityRecordsRepository",
    "GamificationStore",
    "GamificationRepository",
]
