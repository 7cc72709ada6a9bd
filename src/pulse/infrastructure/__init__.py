# src/pulse/infrastructure/__init__.py
"""
Infrastructure - Process-scoped state shared across requests.
"""

from .cache import ProjectCache

__all__ = ["ProjectCache"]
