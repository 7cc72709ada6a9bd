# src/pulse/domains/documents/models.py
"""
Draft models produced by the SoW parser.

A draft is disposable: the user edits it in the creation form and either
submits it (it becomes a ProjectInput) or throws it away.
"""

from typing import List, Optional

from pydantic import Field

from ...models import CamelModel, MilestoneInput, ProjectInput, SubtaskInput


class DraftSubtask(CamelModel):
    name: str
    description: Optional[str] = None


class DraftMilestone(CamelModel):
    name: str
    description: Optional[str] = None
    target_date: Optional[str] = None
    subtasks: List[DraftSubtask] = Field(default_factory=list)


class SowDraft(CamelModel):
    """Structured project draft recovered from a SoW document."""
    project_name: str = ""
    description: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    milestones: List[DraftMilestone] = Field(default_factory=list)

    def to_project_input(self) -> ProjectInput:
        """Convert the draft into a creation payload."""
        return ProjectInput(
            name=self.project_name,
            description=self.description or None,
            start_date=self.start_date or None,
            end_date=self.end_date or None,
            milestones=[
                MilestoneInput(
                    name=m.name,
                    description=m.description,
                    target_date=m.target_date,
                    subtasks=[SubtaskInput(name=s.name, description=s.description) for s in m.subtasks],
                )
                for m in self.milestones
            ],
        )
