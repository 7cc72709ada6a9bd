# src/pulse/domains/projects/evaluator.py
"""
Overdue / Progress Evaluator

Pure functions over milestone data. Nothing here keeps state: every answer
is re-derived from the milestone and the ``now`` passed in, so the dashboard
and the notification jobs always agree.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Tuple

from ...dates import as_utc, to_utc_datetime
from ...models import Milestone, Project
from .constants import (
    AT_RISK_PROGRESS_THRESHOLD,
    DONE_STATUS,
    DUE_SOON_DAYS,
    TERMINAL_STATUSES,
)


def is_terminal_status(status: str) -> bool:
    return (status or "").strip().lower() in TERMINAL_STATUSES


def is_overdue(milestone: Milestone, now: datetime) -> bool:
    """Not finished, has a readable target date, and that date is before now."""
    if is_terminal_status(milestone.status):
        return False
    target = to_utc_datetime(milestone.target_date)
    if target is None:
        return False
    return target < as_utc(now)


def progress_ratio(milestone: Milestone) -> float:
    """Fraction of subtasks whose status is exactly "Done"; 0 when none."""
    if not milestone.subtasks:
        return 0.0
    done = sum(1 for s in milestone.subtasks if s.status == DONE_STATUS)
    return done / len(milestone.subtasks)


def is_due_soon(milestone: Milestone, now: datetime, days: int = DUE_SOON_DAYS) -> bool:
    """Target date falls in [now, now + days], both ends inclusive."""
    target = to_utc_datetime(milestone.target_date)
    if target is None:
        return False
    now = as_utc(now)
    return now <= target <= now + timedelta(days=days)


def is_at_risk(
    milestone: Milestone,
    now: datetime,
    threshold: float = AT_RISK_PROGRESS_THRESHOLD,
    days: int = DUE_SOON_DAYS,
) -> bool:
    """Due soon with less than ``threshold`` of its subtasks done."""
    return is_due_soon(milestone, now, days) and progress_ratio(milestone) < threshold


def annotate_milestone(milestone: Milestone, now: datetime) -> Milestone:
    """Copy of the milestone with derived fields filled for ``now``."""
    return milestone.model_copy(update={
        "is_overdue": is_overdue(milestone, now),
        "progress": progress_ratio(milestone),
        "is_at_risk": is_at_risk(milestone, now),
    })


def annotate_project(project: Project, now: datetime) -> Project:
    """Copy of the project with every milestone annotated."""
    return project.model_copy(update={
        "milestones": [annotate_milestone(m, now) for m in project.milestones],
    })


def overdue_milestones(projects: Iterable[Project], now: datetime) -> List[Tuple[Project, Milestone]]:
    """All (project, milestone) pairs that are overdue at ``now``."""
    found = []
    for project in projects:
        for milestone in project.milestones:
            if is_overdue(milestone, now):
                found.append((project, annotate_milestone(milestone, now)))
    return found
