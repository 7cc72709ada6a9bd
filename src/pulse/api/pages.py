# src/pulse/api/pages.py
"""
Page render routes for SoW Pulse.

One dashboard page: projects with milestone status, the SoW upload form and
the project creation form. Data comes from the project cache; the page still
renders (with an error banner) when the tracker is unreachable.
"""
import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.templating import Jinja2Templates

from ..core.container import container_from
from ..dates import format_display_date
from ..integrations.linear import TrackerError
from ..models import ProjectState

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["display_date"] = lambda value: format_display_date(value) if value else "Not set"


@router.get("/")
async def dashboard_page(request: Request):
    """Project dashboard."""
    container = container_from(request)
    projects = []
    last_updated = None
    error = None
    try:
        cache = container.project_cache()
        projects = await run_in_threadpool(cache.get)
        last_updated = cache.last_updated
    except TrackerError as e:
        logger.error(f"Dashboard could not load projects: {e}")
        error = "Could not load projects from Linear."

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "projects": projects,
            "error": error,
            "last_updated": last_updated,
            "states": [state.value for state in ProjectState],
            "max_upload_mb": container.config.uploads.max_bytes / (1024 * 1024),
        },
    )
