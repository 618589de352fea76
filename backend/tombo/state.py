"""Application state shared by the dashboard routes."""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Protocol

from tombo.schemas.report import IncidentRecord, TableCounts

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    """Lifecycle of a dashboard load: loading -> ready | failed."""

    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class DashboardSnapshot:
    """
    One load of the dashboard data.

    A failed load never carries partial data: `records` and `recent` are
    empty and `error` holds the reason.
    """

    status: LoadStatus = LoadStatus.LOADING
    records: list[IncidentRecord] = field(default_factory=list)
    table_counts: TableCounts = field(default_factory=TableCounts)
    recent: list[IncidentRecord] = field(default_factory=list)
    loaded_at: datetime | None = None
    error: str | None = None


class SnapshotLoader(Protocol):
    async def load(self) -> DashboardSnapshot: ...


class DashboardStore:
    """
    Holds the current dashboard snapshot.

    Reloads are serialized; readers always see a complete snapshot.
    """

    def __init__(self, snapshot: DashboardSnapshot | None = None):
        self._snapshot = snapshot or DashboardSnapshot()
        self._lock = asyncio.Lock()

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._snapshot

    async def reload(self, loader: SnapshotLoader) -> DashboardSnapshot:
        """Run the loader and publish its result."""
        async with self._lock:
            if self._snapshot.status is not LoadStatus.READY:
                self._snapshot = replace(self._snapshot, status=LoadStatus.LOADING)

            snapshot = await loader.load()
            self._snapshot = snapshot
            logger.info(
                f"Dashboard snapshot {snapshot.status.value}: {len(snapshot.records)} reports"
            )
            return snapshot


# Global singleton instance
store = DashboardStore()


def get_store() -> DashboardStore:
    """Dependency to get the dashboard store."""
    return store
