"""API routers."""

from tombo.routers.dashboard import router as dashboard_router
from tombo.routers.health import router as health_router

__all__ = ["dashboard_router", "health_router"]
