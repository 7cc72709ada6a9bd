# src/pulse/api/__init__.py
"""
API - Shared response helpers and the dashboard page.

JSON routers live with their domains (domains/*/api).
"""
