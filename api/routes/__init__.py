"""API route modules."""

from .dashboard_routes import router as dashboard_router
from .habits_routes import router as habits_router
from .health_routes import router as health_router

__all__ = [
    "dashboard_router",
    "habits_router",
    "health_router",
]
