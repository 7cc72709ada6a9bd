# src/pulse/domains/projects/__init__.py
"""
Projects Domain - Tracker projects, milestones and their derived status

This domain handles:
- Overdue / due-soon / at-risk evaluation
- Listing, refreshing and creating projects (see api/)
"""

from .evaluator import (
    annotate_milestone,
    annotate_project,
    is_at_risk,
    is_due_soon,
    is_overdue,
    is_terminal_status,
    overdue_milestones,
    progress_ratio,
)

__all__ = [
    "annotate_milestone",
    "annotate_project",
    "is_at_risk",
    "is_due_soon",
    "is_overdue",
    "is_terminal_status",
    "overdue_milestones",
    "progress_ratio",
]
