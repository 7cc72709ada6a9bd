# src/pulse/core/__init__.py
"""
Core - Dependency wiring shared by the API, jobs and scheduler.
"""

from .container import Container, container_from, get_container, set_container

__all__ = ["Container", "container_from", "get_container", "set_container"]
