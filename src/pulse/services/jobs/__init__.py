# src/pulse/services/jobs/__init__.py
"""
Background Jobs Module

Scheduled jobs that generate chat notifications:
- Overdue Milestone Check (weekly, and once at startup)
- Milestone Date Tracking (every minute)
- Project Refresh (every 15 minutes)

Scheduled via APScheduler (services/scheduler.py) or triggered through the API.
"""

from .base import JobConfig, JOB_CONFIGS, run_job
from .date_tracking import DateTrackingJob
from .overdue_check import OverdueCheckJob
from .project_refresh import ProjectRefreshJob

__all__ = [
    # Configuration
    "JobConfig",
    "JOB_CONFIGS",
    # Job classes
    "DateTrackingJob",
    "OverdueCheckJob",
    "ProjectRefreshJob",
    # Runner functions
    "run_job",
]
