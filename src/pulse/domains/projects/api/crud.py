# src/pulse/domains/projects/api/crud.py
"""
Project API Routes

List cached projects, refresh from the tracker, list overdue milestones and
create new projects (tracker records, tracking baseline, chat announcement).
"""

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import logging

from ....api.responses import APIException, ErrorCode
from ....core.container import Container, container_from
from ....dates import DateParseError, parse_date
from ....integrations.linear import ProjectCreationError, TrackerError
from ....integrations.slack import ChatError
from ....models import Project, ProjectInput
from ..evaluator import overdue_milestones

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/projects")
async def list_projects(request: Request):
    """Cached projects, fetched on first use, annotated for now."""
    container = container_from(request)
    try:
        projects = await run_in_threadpool(lambda: container.project_cache().get())
    except TrackerError as e:
        logger.error(f"Error fetching projects: {e}")
        raise APIException(ErrorCode.TRACKER_ERROR, "Failed to fetch projects")
    return JSONResponse([p.to_api() for p in projects])


@router.get("/overdue-milestones")
async def list_overdue_milestones(request: Request):
    """Every overdue milestone, tagged with its project."""
    container = container_from(request)
    try:
        projects = await run_in_threadpool(lambda: container.project_cache().get())
    except TrackerError as e:
        logger.error(f"Error checking overdue milestones: {e}")
        raise APIException(ErrorCode.TRACKER_ERROR, "Failed to check overdue milestones")

    overdue = overdue_milestones(projects, container.clock())
    return JSONResponse([
        {**milestone.to_api(), "projectId": project.id, "projectName": project.name}
        for project, milestone in overdue
    ])


@router.post("/refresh")
async def refresh_projects(request: Request):
    """Refetch everything from the tracker."""
    container = container_from(request)
    try:
        await run_in_threadpool(lambda: container.project_cache().refresh())
    except TrackerError as e:
        logger.error(f"Error refreshing data: {e}")
        raise APIException(ErrorCode.TRACKER_ERROR, "Failed to refresh data")

    last_updated = container.project_cache().last_updated
    return JSONResponse({
        "success": True,
        "message": "Data refreshed successfully",
        "lastUpdated": last_updated.isoformat() if last_updated else None,
    })


@router.post("/projects")
async def create_project(request: Request):
    """
    Create a project with its milestones and subtasks.

    Baseline dates are recorded from the created project so later drift is
    measured against what the user submitted. Chat failures after a
    successful create are logged only.
    """
    try:
        data = await request.json()
    except ValueError:
        raise APIException(ErrorCode.INVALID_INPUT, "Request body must be JSON")

    if not isinstance(data, dict) or not str(data.get("name") or "").strip():
        raise APIException(ErrorCode.MISSING_REQUIRED_FIELD, "Project name is required")

    try:
        project_input = ProjectInput.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise APIException(ErrorCode.INVALID_INPUT, f"Invalid project input: {location} {first.get('msg')}".strip())

    validate_project_dates(project_input)

    container = container_from(request)
    logger.info(f"Creating project {project_input.name} with {len(project_input.milestones)} milestone(s)")
    try:
        project = await run_in_threadpool(lambda: container.tracker().create_project(project_input))
    except ProjectCreationError as e:
        logger.error(f"Error creating project: {e.step}")
        raise APIException(ErrorCode.TRACKER_ERROR, e.step)
    except TrackerError as e:
        logger.error(f"Error creating project: {e}")
        raise APIException(ErrorCode.TRACKER_ERROR, "Failed to create project")

    await run_in_threadpool(
        lambda: container.tracking_store().record_baseline(project.id, project.name, project.milestones)
    )
    await run_in_threadpool(announce_project, container, project)

    return JSONResponse(
        {"success": True, "message": "Project created successfully", "project": project.to_api()},
        status_code=201,
    )


def validate_project_dates(project_input: ProjectInput) -> None:
    """Reject unreadable dates and an end date before the start date."""
    parsed = {}
    for label, value in (("start", project_input.start_date), ("end", project_input.end_date)):
        if not value:
            continue
        try:
            parsed[label] = parse_date(value)
        except DateParseError:
            raise APIException(ErrorCode.INVALID_INPUT, f"Invalid {label} date: {value}")

    if "start" in parsed and "end" in parsed and parsed["end"] < parsed["start"]:
        raise APIException(ErrorCode.INVALID_INPUT, "End date cannot be before start date")

    for milestone in project_input.milestones:
        if not milestone.target_date:
            continue
        try:
            parse_date(milestone.target_date)
        except DateParseError:
            raise APIException(
                ErrorCode.INVALID_INPUT,
                f"Invalid target date for milestone {milestone.name}: {milestone.target_date}",
            )


def announce_project(container: Container, project: Project) -> None:
    try:
        container.dispatcher().notify_project_created(project)
    except ChatError as e:
        logger.error(f"Error sending project creation notification for {project.name}: {e}")
