# src/pulse/domains/notifications/api.py
"""
Notification API Routes

Manual triggers for the messages the background jobs normally send:
date change / reminder, milestone progress, and the overdue check.
"""

from typing import List
import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import Field, ValidationError

from ...api.responses import APIException, ErrorCode
from ...core.container import container_from
from ...integrations.linear import TrackerError
from ...integrations.slack import ChatError
from ...models import CamelModel, Milestone
from ...services.jobs.overdue_check import OverdueCheckJob
from ..projects.evaluator import annotate_milestone
from ..tracking.models import ActionKind, DateChange, MilestoneBaseline, TrackingAction

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


class DateReminderRequest(CamelModel):
    """Changed dates make a date-change message; otherwise a reminder."""
    project_id: str = ""
    project_name: str = ""
    changes: List[DateChange] = Field(default_factory=list)
    milestones: List[MilestoneBaseline] = Field(default_factory=list)

    def to_action(self) -> TrackingAction:
        return TrackingAction(
            kind=ActionKind.DATE_CHANGED if self.changes else ActionKind.REMINDER,
            project_id=self.project_id,
            project_name=self.project_name,
            changes=self.changes,
            milestones=self.milestones,
        )


class MilestoneProgressRequest(CamelModel):
    project_name: str = ""
    milestone: Milestone


class OverdueCheckRequest(CamelModel):
    force: bool = False


async def _parse(request: Request, model, required: bool = True):
    try:
        data = await request.json()
    except ValueError:
        if not required:
            return model()
        raise APIException(ErrorCode.INVALID_INPUT, "Request body must be JSON")
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise APIException(ErrorCode.INVALID_INPUT, f"Invalid request: {location} {first.get('msg')}".strip())


@router.post("/date-reminder")
async def send_date_reminder(request: Request):
    """Post a date-change (when ``changes`` is non-empty) or date-confirmation reminder."""
    body: DateReminderRequest = await _parse(request, DateReminderRequest)
    if not body.project_name.strip():
        raise APIException(ErrorCode.MISSING_REQUIRED_FIELD, "Project name is required")

    action = body.to_action()
    container = container_from(request)
    try:
        await run_in_threadpool(lambda: container.dispatcher().dispatch_tracking_action(action))
    except ChatError as e:
        logger.error(f"Error sending date reminder for {body.project_name}: {e}")
        raise APIException(ErrorCode.CHAT_ERROR, "Failed to send notification")

    return JSONResponse({"success": True, "message": "Notification sent", "kind": action.kind.value})


@router.post("/milestone-progress")
async def send_milestone_progress(request: Request):
    """Post the progress / at-risk message for one milestone."""
    body: MilestoneProgressRequest = await _parse(request, MilestoneProgressRequest)
    if not body.project_name.strip():
        raise APIException(ErrorCode.MISSING_REQUIRED_FIELD, "Project name is required")

    container = container_from(request)
    milestone = annotate_milestone(body.milestone, container.clock())
    try:
        await run_in_threadpool(lambda: container.dispatcher().notify_progress(body.project_name, milestone))
    except ChatError as e:
        logger.error(f"Error sending progress notification for {milestone.name}: {e}")
        raise APIException(ErrorCode.CHAT_ERROR, "Failed to send notification")

    return JSONResponse({
        "success": True,
        "message": "Notification sent",
        "progress": milestone.progress,
        "isAtRisk": milestone.is_at_risk,
    })


@router.post("/overdue-check")
async def run_overdue_check(request: Request):
    """Run the overdue check now; the 24 hour gate applies unless ``force`` is set."""
    body: OverdueCheckRequest = await _parse(request, OverdueCheckRequest, required=False)
    job = OverdueCheckJob(container_from(request), force=body.force)
    try:
        result = await run_in_threadpool(job.run)
    except TrackerError as e:
        logger.error(f"Error fetching projects for overdue check: {e}")
        raise APIException(ErrorCode.TRACKER_ERROR, "Failed to check overdue milestones")
    except ChatError as e:
        logger.error(f"Error sending overdue notifications: {e}")
        raise APIException(ErrorCode.CHAT_ERROR, "Failed to send notification")

    return JSONResponse({"success": True, **result})
