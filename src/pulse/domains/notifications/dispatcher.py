# src/pulse/domains/notifications/dispatcher.py
"""
Notification Dispatcher

Decides when something is worth telling the team and hands composed
messages to the chat client. Composition lives in messages.py; transport
lives in integrations/slack.py.

The only state kept here is the time of the last overdue summary, so the
weekly job and a manual trigger never post the same summary twice within
``summary_interval``.
"""

import logging
import re
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Optional

from ...dates import as_utc, utcnow
from ...integrations.slack import SlackClient
from ...models import Milestone, Project
from ..projects.evaluator import overdue_milestones
from ..tracking.models import ActionKind, TrackingAction
from . import messages
from .messages import ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "C07PWD53552"
DEFAULT_SUMMARY_INTERVAL = timedelta(hours=24)
MAX_CHANNEL_NAME = 80


def channel_name_for(project_name: str, prefix: str = "proj-") -> str:
    """Slack-safe channel name: lowercase, dashes, at most 80 characters."""
    slug = re.sub(r"[^a-z0-9_-]+", "-", project_name.lower()).strip("-")
    return f"{prefix}{slug or 'project'}"[:MAX_CHANNEL_NAME]


class NotificationDispatcher:
    """
    Sends project, overdue, tracking and progress notifications.

    Usage:
        dispatcher = NotificationDispatcher(slack, channel="C0123")
        dispatcher.notify_project_created(project)
        dispatcher.notify_overdue(projects)
    """

    def __init__(
        self,
        chat: SlackClient,
        channel: str = DEFAULT_CHANNEL,
        clock: Callable[[], datetime] = utcnow,
        summary_interval: timedelta = DEFAULT_SUMMARY_INTERVAL,
        create_project_channels: bool = False,
        channel_prefix: str = "proj-",
    ):
        self.chat = chat
        self.channel = channel
        self._clock = clock
        self._summary_interval = summary_interval
        self._create_project_channels = create_project_channels
        self._channel_prefix = channel_prefix

        self._summary_lock = threading.Lock()
        self.last_summary_sent: Optional[datetime] = None

    def send(self, message: ChatMessage, channel: Optional[str] = None) -> Dict[str, Any]:
        return self.chat.post_message(channel or self.channel, message.text, blocks=message.blocks)

    # =========================================================================
    # PROJECT CREATION
    # =========================================================================

    def notify_project_created(self, project: Project) -> str:
        """
        Announce a new project, then ask each estimator for an estimate.

        Returns the channel the announcement went to.
        """
        channel = self.channel
        if self._create_project_channels:
            channel = self.chat.ensure_channel(
                channel_name_for(project.name, self._channel_prefix),
                topic=project.description or project.name,
                member_emails=project.members,
            )

        self.send(messages.project_created(project), channel)
        logger.info(f"Sent project creation notification for {project.name}")

        for milestone in project.milestones:
            if milestone.estimator:
                self.send(messages.estimator_assignment(project, milestone), channel)
                logger.info(f"Sent estimation request to {milestone.estimator} for {milestone.name}")
        return channel

    # =========================================================================
    # OVERDUE
    # =========================================================================

    def notify_overdue(self, projects: Iterable[Project], force: bool = False) -> Dict[str, Any]:
        """
        Alert on each overdue milestone and post the cross-project summary.

        Skipped when a summary went out less than ``summary_interval`` ago,
        unless ``force`` is set. The check and the claim of the slot happen
        under one lock.
        """
        now = as_utc(self._clock())
        overdue = overdue_milestones(list(projects), now)
        if not overdue:
            logger.info("No overdue milestones")
            return {"sent": False, "overdue": 0, "reason": "none_overdue"}

        with self._summary_lock:
            previous = self.last_summary_sent
            if not force and previous is not None and now - previous < self._summary_interval:
                logger.info(f"Overdue summary already sent at {previous.isoformat()}, skipping")
                return {"sent": False, "overdue": len(overdue), "reason": "recently_sent"}
            self.last_summary_sent = now

        try:
            for project, milestone in overdue:
                self.send(messages.milestone_overdue(project, milestone))
            self.send(messages.overdue_summary(overdue))
        except Exception:
            with self._summary_lock:
                if self.last_summary_sent == now:
                    self.last_summary_sent = previous
            raise

        logger.info(f"Sent overdue notifications for {len(overdue)} milestone(s)")
        return {"sent": True, "overdue": len(overdue)}

    # =========================================================================
    # TRACKING / PROGRESS
    # =========================================================================

    def dispatch_tracking_action(self, action: TrackingAction) -> bool:
        """Post the message a tracking evaluation asked for. False for no-ops."""
        if action.kind == ActionKind.DATE_CHANGED:
            self.send(messages.date_change(action.project_name, action.changes))
            logger.info(f"Sent date change notification for {action.project_name}")
            return True
        if action.kind == ActionKind.REMINDER:
            self.send(messages.date_reminder(action.project_name, action.milestones))
            logger.info(f"Sent date reminder for {action.project_name}")
            return True
        return False

    def notify_progress(self, project_name: str, milestone: Milestone) -> None:
        self.send(messages.progress_at_risk(project_name, milestone))
        logger.info(f"Sent at-risk notification for {milestone.name} ({project_name})")
