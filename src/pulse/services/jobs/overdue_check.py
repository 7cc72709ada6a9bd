# src/pulse/services/jobs/overdue_check.py
"""
Overdue Milestone Check Job

Refetches projects, then posts one alert per overdue milestone followed by
the cross-project summary. The dispatcher skips the whole batch when a
summary went out within the last 24 hours.

Schedule: Weekly (Mondays 9:00 AM) and once at startup
"""

import logging
from typing import Any, Dict

from ...core.container import Container

logger = logging.getLogger(__name__)


class OverdueCheckJob:
    """Weekly overdue milestone notifications."""

    def __init__(self, container: Container, force: bool = False):
        self.container = container
        self.force = force

    def run(self) -> Dict[str, Any]:
        logger.info("Running Overdue Milestone Check job")

        projects = self.container.project_cache().refresh()
        result = self.container.dispatcher().notify_overdue(projects, force=self.force)

        return {
            "job": "overdue_check",
            "projects_checked": len(projects),
            **result,
        }
