"""Pytest fixtures for Tombo dashboard tests."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tombo.config import Settings, get_dashboard_tz
from tombo.main import app
from tombo.schemas.report import IncidentRecord, TableCounts
from tombo.services.supabase_client import SupabaseClient
from tombo.state import DashboardSnapshot, DashboardStore, LoadStatus, get_store


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults."""
    return Settings(
        supabase_url="http://supabase.test",
        supabase_key="test_key",
        debug=True,
    )


def make_record(
    id: str,
    report_type: str | None = "theft",
    created_at: datetime | None = datetime(2024, 1, 1, 10, 0),
    process_start: datetime | None = None,
    process_end: datetime | None = None,
    latitude: float | None = -12.0464,
    longitude: float | None = -77.0428,
) -> IncidentRecord:
    """Build an incident record with naive (local) timestamps."""
    return IncidentRecord(
        id=id,
        report_type=report_type,
        title=f"Report {id}",
        description="Test report",
        address="Av. Arequipa 123",
        latitude=latitude,
        longitude=longitude,
        created_at=created_at,
        process_start=process_start,
        process_end=process_end,
        user_id="user-1",
    )


@pytest.fixture
def sample_records() -> list[IncidentRecord]:
    """Five reports over three days covering every status."""
    return [
        # Monday 2024-01-01
        make_record("r1", "theft", datetime(2024, 1, 1, 8, 15)),
        make_record(
            "r2",
            "robbery",
            datetime(2024, 1, 1, 22, 40),
            process_start=datetime(2024, 1, 2, 9, 0),
        ),
        # Tuesday 2024-01-02
        make_record(
            "r3",
            "theft",
            datetime(2024, 1, 2, 8, 5),
            process_start=datetime(2024, 1, 2, 10, 0),
            process_end=datetime(2024, 1, 2, 12, 0),
        ),
        make_record("r4", None, datetime(2024, 1, 2, 23, 59, 30), latitude=None, longitude=None),
        # Sunday 2024-02-04
        make_record(
            "r5",
            "assault",
            datetime(2024, 2, 4, 15, 30),
            process_start=datetime(2024, 2, 4, 16, 0),
            process_end=datetime(2024, 2, 5, 0, 0),
        ),
    ]


@pytest.fixture
def ready_store(sample_records) -> DashboardStore:
    """Store holding a ready snapshot of the sample records."""
    return DashboardStore(
        DashboardSnapshot(
            status=LoadStatus.READY,
            records=sample_records,
            table_counts=TableCounts(reports=5, comments=12, points=40),
            recent=list(reversed(sample_records))[:3],
            loaded_at=datetime(2024, 2, 5, 12, 0, tzinfo=UTC),
        )
    )


@pytest_asyncio.fixture
async def client(ready_store: DashboardStore) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client with store and timezone overrides."""
    app.dependency_overrides[get_store] = lambda: ready_store
    app.dependency_overrides[get_dashboard_tz] = lambda: None
    app.state.limiter.enabled = False

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
    app.state.limiter.enabled = True


@pytest.fixture
def mock_supabase_client() -> SupabaseClient:
    """Create mocked Supabase client."""
    client = SupabaseClient(base_url="http://supabase.test", api_key="test_key")
    client._request_with_retry = AsyncMock()
    return client


@pytest.fixture
def sample_report_rows() -> list[dict[str, Any]]:
    """Sample rows of the reports table as returned by PostgREST."""
    return [
        {
            "id": "5f0c6a3e-0001",
            "report_type": "robbery",
            "title": "Robo de celular",
            "description": "Me robaron el celular en el paradero",
            "address": "Av. Javier Prado 1500",
            "latitude": -12.0903,
            "longitude": -77.0219,
            "created_at": "2024-01-15T14:30:00.123456+00:00",
            "process_start": "2024-01-15T15:00:00+00:00",
            "process_end": "2024-01-15T18:00:00+00:00",
            "user_id": "u-100",
        },
        {
            "id": "5f0c6a3e-0002",
            "report_type": "vandalism",
            "title": "Pintas en fachada",
            "description": None,
            "address": "Jr. de la Unión 300",
            "latitude": "-12.0464",
            "longitude": "-77.0300",
            "created_at": "2024-01-16T03:00:00Z",
            "process_start": None,
            "process_end": None,
            "user_id": "u-101",
        },
        {
            "id": "5f0c6a3e-0003",
            "report_type": None,
            "title": "Sin tipo",
            "description": "",
            "address": None,
            "latitude": None,
            "longitude": "invalid",
            "created_at": "not a date",
            "process_start": None,
            "process_end": None,
            "user_id": None,
        },
    ]
