"""JobTrackr backend: gamification engine and job-title search."""

__version__ = "0.1.0"
