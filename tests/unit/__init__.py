# tests/unit/__init__.py
"""
Unit tests for SoW Pulse.

Unit tests cover individual functions, classes, and modules in isolation
from Linear, Slack and the HTTP layer.
"""
