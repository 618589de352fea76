"""FastAPI application for the Tombo dashboard backend."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from tombo.config import get_settings
from tombo.routers import dashboard_router, health_router
from tombo.services.loader import DashboardLoader
from tombo.state import store
from tombo.tasks.scheduler import setup_scheduler, shutdown_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    logger.info("Starting Tombo dashboard backend...")

    # A failed first load leaves the service up in the failed state
    snapshot = await store.reload(DashboardLoader())
    if snapshot.error:
        logger.error(f"Initial dashboard load failed: {snapshot.error}")
    else:
        logger.info(f"Initial dashboard load: {len(snapshot.records)} reports")

    setup_scheduler()

    yield

    # Shutdown
    shutdown_scheduler()
    logger.info("Tombo dashboard backend shut down")


# Create FastAPI app
app = FastAPI(
    title="Tombo Dashboard API",
    description="Monitoring dashboard API for Tombo citizen incident reports - powered by Supabase",
    version="0.1.0",
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unhandled exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Include routers
app.include_router(health_router)
app.include_router(dashboard_router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Tombo Dashboard API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tombo.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
