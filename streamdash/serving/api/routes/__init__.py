"""
API Routes Module
"""
from .dashboards import router as dashboards_router
from .health import router as health_router

__all__ = [
    "dashboards_router",
    "health_router",
]
