# src/pulse/domains/__init__.py
"""
Domain packages: documents (SoW parsing), projects, tracking, notifications.

Routers live in each domain's ``api`` module and are imported by main.py.
"""
