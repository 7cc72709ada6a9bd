# src/pulse/services/scheduler.py
"""
Background Job Scheduler for SoW Pulse

Uses APScheduler to run the notification jobs inside the API process:
- Overdue check on a weekly cron, plus one run right after startup
- Date tracking pass every tracking.check_interval_seconds
- Project cache refresh every linear.refresh_interval_minutes

Jobs are fire-and-forget: one instance at a time, missed runs coalesced.
"""

import logging
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from ..core.container import Container
from .jobs import JOB_CONFIGS, run_job

logger = logging.getLogger(__name__)

# Global scheduler instance
_scheduler: Optional[BackgroundScheduler] = None


def get_scheduler() -> Optional[BackgroundScheduler]:
    """Get the global scheduler instance."""
    return _scheduler


def _job_runner(job_name: str, container: Container):
    def run():
        try:
            result = run_job(job_name, container)
            logger.info(f"{JOB_CONFIGS[job_name].name} completed: {result}")
        except Exception as e:
            logger.error(f"{JOB_CONFIGS[job_name].name} failed: {e}")
    run.__name__ = f"run_{job_name}"
    return run


def init_scheduler(container: Container) -> Optional[BackgroundScheduler]:
    """
    Initialize the APScheduler with all background jobs.

    Disabled when ``scheduler_enabled`` is false (tests, one-off scripts).
    """
    global _scheduler

    config = container.config
    if not config.scheduler_enabled:
        logger.info(f"Scheduler disabled in {config.environment} environment")
        return None

    _scheduler = BackgroundScheduler(
        timezone="UTC",
        job_defaults={
            'coalesce': True,  # Combine missed executions
            'max_instances': 1,  # One instance at a time
            'misfire_grace_time': 60 * 30,  # 30 min grace period
        },
    )

    _scheduler.add_job(
        _job_runner("overdue_check", container),
        CronTrigger.from_crontab(config.notifications.overdue_check_cron, timezone="UTC"),
        id="overdue_check",
        name=JOB_CONFIGS["overdue_check"].name,
        replace_existing=True,
    )

    if config.notifications.overdue_check_on_startup:
        # No trigger: runs once as soon as the scheduler starts
        _scheduler.add_job(
            _job_runner("overdue_check", container),
            id="overdue_check_startup",
            name=f"{JOB_CONFIGS['overdue_check'].name} (startup)",
            replace_existing=True,
        )

    _scheduler.add_job(
        _job_runner("date_tracking", container),
        IntervalTrigger(seconds=config.tracking.check_interval_seconds),
        id="date_tracking",
        name=JOB_CONFIGS["date_tracking"].name,
        replace_existing=True,
    )

    _scheduler.add_job(
        _job_runner("project_refresh", container),
        IntervalTrigger(minutes=config.linear.refresh_interval_minutes),
        id="project_refresh",
        name=JOB_CONFIGS["project_refresh"].name,
        replace_existing=True,
    )

    _scheduler.start()
    logger.info("✅ Background job scheduler started")

    for job in _scheduler.get_jobs():
        logger.info(f"  📅 {job.name}: next run at {job.next_run_time}")

    return _scheduler


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler shutdown complete")
        _scheduler = None


def get_next_job_runs() -> list:
    """Get the next scheduled run times for all jobs."""
    if not _scheduler:
        return []

    jobs = []
    for job in _scheduler.get_jobs():
        next_run: Optional[datetime] = job.next_run_time
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": next_run.isoformat() if next_run else None,
        })
    return jobs
