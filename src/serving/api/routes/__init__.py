"""
API Routes Module
"""
from .health import router as health_router
from .reports import router as reports_router
from .reference import router as reference_router

__all__ = [
    "health_router",
    "reports_router",
    "reference_router",
]
