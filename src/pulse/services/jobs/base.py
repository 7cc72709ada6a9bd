# src/pulse/services/jobs/base.py
"""
Background Jobs Base Module

Job configuration registry and the by-name runner used by the scheduler and
the manual trigger endpoints.
"""

from dataclasses import dataclass
from typing import Any, Dict
import logging

from ...core.container import Container

logger = logging.getLogger(__name__)


@dataclass
class JobConfig:
    """Configuration for a background job."""
    name: str
    description: str
    schedule: str  # cron expression or description
    enabled: bool = True


# Job configuration registry; real schedules come from PulseConfig
JOB_CONFIGS: Dict[str, JobConfig] = {
    "overdue_check": JobConfig(
        name="Overdue Milestone Check",
        description="Alert on overdue milestones and post the cross-project summary",
        schedule="0 9 * * 1",  # Mondays at 9 AM, plus once at startup
    ),
    "date_tracking": JobConfig(
        name="Milestone Date Tracking",
        description="Detect target date drift and send dwell reminders",
        schedule="every 60 seconds",
    ),
    "project_refresh": JobConfig(
        name="Project Refresh",
        description="Refetch projects from the tracker into the cache",
        schedule="every 15 minutes",
    ),
}


# =============================================================================
# JOB RUNNER FUNCTIONS
# =============================================================================

def run_job(job_name: str, container: Container) -> Dict[str, Any]:
    """
    Run a specific background job by name.

    Args:
        job_name: One of 'overdue_check', 'date_tracking', 'project_refresh'

    Returns:
        Job result dict
    """
    # Import here to avoid circular imports
    from .date_tracking import DateTrackingJob
    from .overdue_check import OverdueCheckJob
    from .project_refresh import ProjectRefreshJob

    jobs = {
        "overdue_check": OverdueCheckJob,
        "date_tracking": DateTrackingJob,
        "project_refresh": ProjectRefreshJob,
    }

    if job_name not in jobs:
        raise ValueError(f"Unknown job: {job_name}. Available: {list(jobs.keys())}")

    job = jobs[job_name](container)
    return job.run()
