# src/pulse/services/jobs/date_tracking.py
"""
Milestone Date Tracking Job

Evaluates every cached project against its tracking baseline and posts the
resulting date-change or reminder message. A chat failure for one project is
logged and the pass continues; the record has already moved on, so that
message is not retried. A project whose tracking state cannot be saved is
skipped and evaluated again on the next pass.

Schedule: Every tracking.check_interval_seconds (default 60)
"""

import logging
from typing import Any, Dict

from ...core.container import Container
from ...domains.tracking.models import ActionKind
from ...integrations.slack import ChatError

logger = logging.getLogger(__name__)


class DateTrackingJob:
    """Drift detection and dwell reminders for every project."""

    def __init__(self, container: Container, refresh: bool = False):
        self.container = container
        self.refresh = refresh

    def run(self) -> Dict[str, Any]:
        cache = self.container.project_cache()
        projects = cache.refresh() if self.refresh else cache.get()
        store = self.container.tracking_store()
        dispatcher = self.container.dispatcher()

        counts = {ActionKind.DATE_CHANGED: 0, ActionKind.REMINDER: 0}
        failed = []

        for project in projects:
            try:
                action = store.evaluate(project)
            except OSError as e:
                logger.error(f"Failed to save tracking state for {project.name}: {e}")
                failed.append(project.id)
                continue
            if action.is_noop:
                continue
            counts[action.kind] += 1
            try:
                dispatcher.dispatch_tracking_action(action)
            except ChatError as e:
                logger.error(f"Failed to send {action.kind.value} notification for {project.name}: {e}")
                failed.append(project.id)

        if counts[ActionKind.DATE_CHANGED] or counts[ActionKind.REMINDER]:
            logger.info(
                f"DateTrackingJob: {counts[ActionKind.DATE_CHANGED]} date change(s), "
                f"{counts[ActionKind.REMINDER]} reminder(s), {len(failed)} failed"
            )

        return {
            "job": "date_tracking",
            "projects_checked": len(projects),
            "date_changes": counts[ActionKind.DATE_CHANGED],
            "reminders": counts[ActionKind.REMINDER],
            "failed": failed,
        }
