# src/pulse/models.py
"""
SoW Pulse Data Models

Pydantic models shared by the tracker client, the project cache, the
tracking store and the API. Field names serialize in camelCase because the
dashboard and the tracker both speak camelCase.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting snake_case or camelCase, emitting camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENUMS
# =============================================================================

class ProjectState(str, Enum):
    """Lifecycle labels offered by the creation form."""
    PLANNED = "planned"
    STARTED = "started"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELED = "canceled"


# =============================================================================
# DOMAIN MODELS
# =============================================================================

class Subtask(CamelModel):
    """A child issue under a milestone."""
    name: str
    description: Optional[str] = None
    status: str = "Backlog"


class Milestone(CamelModel):
    """A top-level tracked deliverable."""
    id: str
    name: str
    description: Optional[str] = None
    target_date: Optional[str] = None
    status: str = "Active"
    subtasks: List[Subtask] = Field(default_factory=list)
    estimator: Optional[str] = None

    # Derived; overwritten by evaluator.annotate_project on every read
    is_overdue: bool = False
    progress: float = 0.0
    is_at_risk: bool = False


class Project(CamelModel):
    """A project as mirrored from the issue tracker."""
    id: str
    name: str
    description: Optional[str] = None
    state: str = ProjectState.PLANNED.value
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    milestones: List[Milestone] = Field(default_factory=list)
    members: List[str] = Field(default_factory=list)
    last_updated: Optional[datetime] = None


# =============================================================================
# CREATION INPUT
# =============================================================================

class SubtaskInput(CamelModel):
    name: str
    description: Optional[str] = None


class MilestoneInput(CamelModel):
    name: str
    description: Optional[str] = None
    target_date: Optional[str] = None
    estimator: Optional[str] = None
    subtasks: List[SubtaskInput] = Field(default_factory=list)


class ProjectInput(CamelModel):
    """Payload for creating a project through the form or a parsed draft."""
    name: str
    description: Optional[str] = None
    team_id: Optional[str] = None
    state: str = ProjectState.PLANNED.value
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    milestones: List[MilestoneInput] = Field(default_factory=list)
    members: List[str] = Field(default_factory=list)
