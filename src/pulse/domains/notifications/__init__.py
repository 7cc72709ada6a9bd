# src/pulse/domains/notifications/__init__.py
"""
Notifications Domain - Chat messages and when to send them

This domain handles:
- Composing Slack messages (messages.py)
- Deciding what to send and gating the overdue summary (dispatcher.py)
- Manual trigger endpoints (api.py)
"""

from .dispatcher import NotificationDispatcher, channel_name_for
from .messages import ChatMessage

__all__ = ["ChatMessage", "NotificationDispatcher", "channel_name_for"]
