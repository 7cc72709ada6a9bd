# src/pulse/domains/tracking/api.py
"""
Tracking API Routes

Read the tracking records and run one tracking pass on demand.
"""

import logging

from fastapi import APIRouter, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from ...api.responses import APIException, ErrorCode
from ...core.container import container_from
from ...integrations.linear import TrackerError
from ...integrations.slack import ChatError
from ...services.jobs.date_tracking import DateTrackingJob

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tracking", tags=["tracking"])


@router.get("")
async def list_tracking_records(request: Request):
    """Every tracking record, keyed fields in camelCase."""
    store = container_from(request).tracking_store()
    return JSONResponse([record.to_api() for record in store.all()])


@router.get("/{project_id}")
async def get_tracking_record(project_id: str, request: Request):
    record = container_from(request).tracking_store().get(project_id)
    if record is None:
        raise APIException(ErrorCode.NOT_FOUND, f"No tracking record for project {project_id}")
    return JSONResponse(record.to_api())


@router.post("/check")
async def run_tracking_check(request: Request, refresh: bool = Query(False)):
    """Evaluate every project now and send any due date-change or reminder messages."""
    job = DateTrackingJob(container_from(request), refresh=refresh)
    try:
        result = await run_in_threadpool(job.run)
    except TrackerError as e:
        logger.error(f"Error fetching projects for tracking check: {e}")
        raise APIException(ErrorCode.TRACKER_ERROR, "Failed to fetch projects")
    except ChatError as e:
        logger.error(f"Chat unavailable for tracking check: {e}")
        raise APIException(ErrorCode.CHAT_ERROR, "Failed to send notification")

    return JSONResponse({"success": True, **result})
