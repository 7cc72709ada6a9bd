# src/pulse/domains/tracking/__init__.py
"""
Tracking Domain - Milestone date baselines and drift/reminder decisions.
"""

from .models import (
    ActionKind,
    DateChange,
    MilestoneBaseline,
    TrackingAction,
    TrackingRecord,
)
from .store import DEFAULT_REMINDER_DWELL, TrackingStore

__all__ = [
    "ActionKind",
    "DateChange",
    "MilestoneBaseline",
    "TrackingAction",
    "TrackingRecord",
    "TrackingStore",
    "DEFAULT_REMINDER_DWELL",
]
