# src/pulse/domains/projects/api/__init__.py
"""
Projects Domain API Routes

Aggregates the project sub-routers into a single router for main.py.
"""

from fastapi import APIRouter

from .crud import router as crud_router

router = APIRouter(tags=["projects"])

router.include_router(crud_router)

__all__ = ["router"]
