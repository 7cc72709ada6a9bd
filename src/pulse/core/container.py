# src/pulse/core/container.py
"""
Dependency Injection Container

Owns the process-scoped collaborators: tracker and chat clients, the
project cache, the tracking store and the notification dispatcher. Each is
built lazily from configuration on first use; tests pass ready-made
instances instead.

Usage:
    from src.pulse.core.container import get_container

    container = get_container()
    projects = container.project_cache().get()
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..config import PulseConfig, get_config
from ..dates import utcnow
from ..domains.notifications.dispatcher import NotificationDispatcher
from ..domains.tracking.store import TrackingStore
from ..infrastructure.cache import ProjectCache
from ..integrations.linear import LinearClient, TrackerError
from ..integrations.slack import ChatError, SlackClient

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency injection container.

    Any collaborator passed to the constructor is used as-is; the rest are
    created from ``config`` when first asked for.
    """

    def __init__(
        self,
        config: Optional[PulseConfig] = None,
        tracker: Optional[LinearClient] = None,
        chat: Optional[SlackClient] = None,
        clock: Callable[[], datetime] = utcnow,
        tracking_store: Optional[TrackingStore] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        project_cache: Optional[ProjectCache] = None,
    ):
        self.config = config or get_config()
        self.clock = clock

        # Cached instances
        self._tracker = tracker
        self._chat = chat
        self._tracking_store = tracking_store
        self._dispatcher = dispatcher
        self._project_cache = project_cache

        logger.info(
            f"Container initialized: env={self.config.environment}, "
            f"tracking_store={self.config.tracking.store_path or 'memory'}"
        )

    # =============================================================================
    # INTEGRATIONS
    # =============================================================================

    def tracker(self) -> LinearClient:
        """Linear client; TrackerError when no API key is configured."""
        if self._tracker is None:
            linear = self.config.linear
            if not linear.api_key:
                raise TrackerError("Linear API key not configured. Set LINEAR_API_KEY.")
            self._tracker = LinearClient(
                api_key=linear.api_key,
                api_url=linear.api_url,
                team_id=linear.team_id,
                timeout=linear.timeout,
            )
        return self._tracker

    def chat(self) -> SlackClient:
        """Slack client; ChatError when no bot token is configured."""
        if self._chat is None:
            slack = self.config.slack
            if not slack.bot_token:
                raise ChatError("auth", "Slack bot token not configured. Set SLACK_BOT_TOKEN.")
            self._chat = SlackClient(token=slack.bot_token, api_url=slack.api_url, timeout=slack.timeout)
        return self._chat

    # =============================================================================
    # STATE
    # =============================================================================

    def project_cache(self) -> ProjectCache:
        if self._project_cache is None:
            self._project_cache = ProjectCache(
                self.tracker(),
                clock=self.clock,
                fetch_limit=self.config.linear.fetch_limit,
            )
        return self._project_cache

    def tracking_store(self) -> TrackingStore:
        if self._tracking_store is None:
            tracking = self.config.tracking
            self._tracking_store = TrackingStore(
                path=tracking.store_path,
                dwell=tracking.reminder_dwell,
                clock=self.clock,
                date_order=tracking.date_order,
            )
        return self._tracking_store

    def dispatcher(self) -> NotificationDispatcher:
        if self._dispatcher is None:
            slack = self.config.slack
            self._dispatcher = NotificationDispatcher(
                self.chat(),
                channel=slack.channel,
                clock=self.clock,
                summary_interval=self.config.notifications.overdue_summary_interval,
                create_project_channels=slack.create_project_channels,
                channel_prefix=slack.channel_prefix,
            )
        return self._dispatcher

    # =============================================================================
    # UTILITY
    # =============================================================================

    def close(self) -> None:
        """Close the tracker and chat HTTP clients."""
        for client in (self._tracker, self._chat):
            if client is not None:
                client.close()
        logger.info("Container closed")


# Global container instance
_container: Optional[Container] = None


def get_container() -> Container:
    """Get the global container, creating it from the global config if needed."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def set_container(container: Optional[Container]) -> None:
    """Install (or clear, with None) the global container."""
    global _container
    _container = container


def container_from(request) -> Container:
    """Container attached to the running app, falling back to the global one."""
    container = getattr(request.app.state, "container", None)
    return container or get_container()
