"""Health and reload endpoints."""

from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from tombo.schemas.report import TableCounts
from tombo.services.loader import DashboardLoader
from tombo.state import DashboardStore, LoadStatus, get_store

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    load_status: str
    loaded_at: datetime | None = None
    record_count: int
    table_counts: TableCounts
    error: str | None = None


class RefreshResult(BaseModel):
    """Result of a manual reload."""

    load_status: str
    records_loaded: int
    message: str


def get_loader() -> DashboardLoader:
    """Dependency to get a loader bound to a fresh Supabase client."""
    return DashboardLoader()


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: Annotated[DashboardStore, Depends(get_store)],
) -> HealthResponse:
    """
    Health check endpoint with load status.

    The service stays up when Supabase is unreachable; a failed load is
    reported as `degraded`.
    """
    snapshot = store.snapshot
    status = "degraded" if snapshot.status is LoadStatus.FAILED else "healthy"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(UTC),
        load_status=snapshot.status.value,
        loaded_at=snapshot.loaded_at,
        record_count=len(snapshot.records),
        table_counts=snapshot.table_counts,
        error=snapshot.error,
    )


@router.post("/refresh", response_model=RefreshResult)
async def refresh_dashboard(
    store: Annotated[DashboardStore, Depends(get_store)],
    loader: Annotated[DashboardLoader, Depends(get_loader)],
) -> RefreshResult:
    """Reload every table from Supabase now."""
    snapshot = await store.reload(loader)

    if snapshot.error:
        message = f"Reload failed: {snapshot.error}"
    else:
        message = f"Loaded {len(snapshot.records)} reports"

    return RefreshResult(
        load_status=snapshot.status.value,
        records_loaded=len(snapshot.records),
        message=message,
    )


@router.get("/ready")
async def readiness_check() -> dict:
    """Simple readiness check for container orchestration."""
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict:
    """Simple liveness check for container orchestration."""
    return {"status": "alive"}
