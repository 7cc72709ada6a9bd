# src/pulse/services/__init__.py
"""
Services - Background jobs and their scheduler.
"""
