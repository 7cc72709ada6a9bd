# src/pulse/services/jobs/project_refresh.py
"""
Project Refresh Job

Keeps the project cache close to the tracker so the dashboard and the
tracking pass see recent dates without a manual refresh.
"""

import logging
from typing import Any, Dict

from ...core.container import Container

logger = logging.getLogger(__name__)


class ProjectRefreshJob:

    def __init__(self, container: Container):
        self.container = container

    def run(self) -> Dict[str, Any]:
        cache = self.container.project_cache()
        projects = cache.refresh()
        return {
            "job": "project_refresh",
            "projects": len(projects),
            "last_updated": cache.last_updated.isoformat() if cache.last_updated else None,
        }
