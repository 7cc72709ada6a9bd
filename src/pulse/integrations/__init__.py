# src/pulse/integrations/__init__.py
"""
External service clients.

- linear: issue tracker (projects, milestones, subtasks)
- slack: team chat (messages, channels, invitations)
"""

from .linear import LinearClient, ProjectCreationError, TrackerError
from .slack import ChatError, SlackClient

__all__ = [
    "LinearClient",
    "ProjectCreationError",
    "TrackerError",
    "ChatError",
    "SlackClient",
]
