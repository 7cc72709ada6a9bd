# src/pulse/infrastructure/cache.py
"""
Project Cache

Process-scoped snapshot of the projects fetched from the tracker.

The snapshot is replaced wholesale on each refresh and never patched in
place. Readers get copies annotated for the current clock, so derived
fields (isOverdue, progress, isAtRisk) are always computed at read time.

Usage:
    cache = ProjectCache(tracker, clock=utcnow)
    projects = cache.get()          # fetches on first use
    cache.refresh()                 # force a refetch
    cache.last_updated              # datetime of the last successful fetch
"""

import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional

from ..dates import utcnow
from ..domains.projects.evaluator import annotate_project
from ..integrations.linear import LinearClient
from ..models import Project

logger = logging.getLogger(__name__)


class ProjectCache:
    """Cache of tracker projects with an explicit refresh()/get() contract."""

    def __init__(
        self,
        tracker: LinearClient,
        clock: Callable[[], datetime] = utcnow,
        fetch_limit: int = 50,
    ):
        self._tracker = tracker
        self._clock = clock
        self._fetch_limit = fetch_limit

        self._projects: Optional[List[Project]] = None
        self._last_updated: Optional[datetime] = None
        self._lock = threading.Lock()

    @property
    def last_updated(self) -> Optional[datetime]:
        return self._last_updated

    def refresh(self) -> List[Project]:
        """
        Refetch every project and replace the snapshot.

        On tracker failure the previous snapshot is kept and the error
        propagates.
        """
        projects = self._tracker.fetch_projects(limit=self._fetch_limit)

        with self._lock:
            self._projects = projects
            self._last_updated = self._clock()

        logger.info(f"Project cache refreshed: {len(projects)} project(s)")
        return self._annotated(projects)

    def get(self) -> List[Project]:
        """Annotated projects; fetches first when the cache is empty."""
        snapshot = self._projects
        if not snapshot:
            return self.refresh()
        return self._annotated(snapshot)

    def _annotated(self, projects: List[Project]) -> List[Project]:
        now = self._clock()
        return [
            annotate_project(p, now).model_copy(update={"last_updated": self._last_updated})
            for p in projects
        ]
