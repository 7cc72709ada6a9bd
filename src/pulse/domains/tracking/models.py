# src/pulse/domains/tracking/models.py
"""
Tracking Models

A TrackingRecord is the baseline of milestone dates captured when a project
is first seen (or created through the form), plus the flags that keep each
project to at most one drift notification and one dwell reminder.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from ...models import CamelModel


class MilestoneBaseline(CamelModel):
    """Milestone date as recorded at baseline time ("" when it had none)."""
    id: str = ""
    name: str
    initial_date: str = ""


class TrackingRecord(CamelModel):
    project_id: str
    project_name: str = ""
    milestones: List[MilestoneBaseline] = Field(default_factory=list)
    reminder_sent: bool = False
    date_change_notified: bool = False
    date_set_at: datetime

    def baseline_for(self, milestone_id: str) -> Optional[MilestoneBaseline]:
        for baseline in self.milestones:
            if baseline.id == milestone_id:
                return baseline
        return None


class ActionKind(str, Enum):
    """What a tracking evaluation asks the dispatcher to do."""
    NONE = "none"
    DATE_CHANGED = "date_changed"
    REMINDER = "reminder"


class DateChange(CamelModel):
    milestone_id: str = ""
    name: str
    old_date: str
    new_date: str


class TrackingAction(CamelModel):
    kind: ActionKind = ActionKind.NONE
    project_id: str
    project_name: str = ""
    changes: List[DateChange] = Field(default_factory=list)
    milestones: List[MilestoneBaseline] = Field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return self.kind == ActionKind.NONE
