"""API routes for dashboard metrics, charts and report lists."""

from datetime import date, tzinfo
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from tombo.config import get_dashboard_tz
from tombo.schemas.dashboard import DashboardCharts, DashboardResponse, DashboardSummary
from tombo.schemas.report import (
    ALL_TYPES,
    Coordinates,
    FilterCriteria,
    IncidentRecord,
    ReportOut,
    ReportsResponse,
)
from tombo.services.aggregator import (
    apply_filters,
    build_charts,
    build_summary,
    distinct_types,
    has_coordinates,
    status_of,
)
from tombo.state import DashboardStore, get_store

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_filters(
    report_type: str = Query(ALL_TYPES, description="Report type, or 'all'"),
    date_from: date | None = Query(None, description="Only reports created on or after this day"),
    date_to: date | None = Query(None, description="Only reports created on or before this day"),
) -> FilterCriteria:
    """Build filter criteria from query parameters."""
    # A blank type selects everything
    if not report_type.strip():
        report_type = ALL_TYPES
    if date_from and date_to and date_from > date_to:
        raise HTTPException(status_code=422, detail="date_from must not be after date_to")
    return FilterCriteria(report_type=report_type, date_from=date_from, date_to=date_to)


StoreDep = Annotated[DashboardStore, Depends(get_store)]
FiltersDep = Annotated[FilterCriteria, Depends(get_filters)]
TzDep = Annotated[tzinfo | None, Depends(get_dashboard_tz)]


def _to_report_out(record: IncidentRecord) -> ReportOut:
    coords = (
        Coordinates(latitude=record.latitude, longitude=record.longitude)
        if has_coordinates(record)
        else None
    )
    return ReportOut(
        id=record.id,
        report_type=record.report_type,
        title=record.title,
        description=record.description,
        address=record.address,
        status=status_of(record),
        created_at=record.created_at,
        process_start=record.process_start,
        process_end=record.process_end,
        coordinates=coords,
        user_id=record.user_id,
    )


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    store: StoreDep,
    filters: FiltersDep,
    tz: TzDep,
) -> DashboardResponse:
    """
    Everything the dashboard renders for the selected filters.

    Metrics and charts cover the filtered reports; table counts and the
    report-type choices cover the whole data set.
    """
    snapshot = store.snapshot
    records = apply_filters(snapshot.records, filters, tz)

    return DashboardResponse(
        status=snapshot.status.value,
        loaded_at=snapshot.loaded_at,
        error=snapshot.error,
        filters=filters,
        summary=build_summary(records, snapshot.table_counts),
        charts=build_charts(records, tz),
        report_types=sorted(distinct_types(snapshot.records)),
    )


@router.get("/summary", response_model=DashboardSummary)
async def get_summary(
    store: StoreDep,
    filters: FiltersDep,
    tz: TzDep,
) -> DashboardSummary:
    """Metric cards: table counts, status buckets and average resolution time."""
    snapshot = store.snapshot
    records = apply_filters(snapshot.records, filters, tz)
    return build_summary(records, snapshot.table_counts)


@router.get("/charts", response_model=DashboardCharts)
async def get_charts(
    store: StoreDep,
    filters: FiltersDep,
    tz: TzDep,
) -> DashboardCharts:
    """Chart series for the filtered reports."""
    records = apply_filters(store.snapshot.records, filters, tz)
    return build_charts(records, tz)


@router.get("/reports", response_model=ReportsResponse)
async def list_reports(
    store: StoreDep,
    filters: FiltersDep,
    tz: TzDep,
    limit: int = Query(500, ge=1, le=5000),
    offset: int = Query(0, ge=0),
) -> ReportsResponse:
    """Filtered reports for the table view, in load order."""
    records = apply_filters(store.snapshot.records, filters, tz)
    page = records[offset : offset + limit]
    return ReportsResponse(
        reports=[_to_report_out(record) for record in page],
        total=len(records),
        offset=offset,
    )


@router.get("/reports/map", response_model=list[ReportOut])
async def list_map_reports(
    store: StoreDep,
    filters: FiltersDep,
    tz: TzDep,
) -> list[ReportOut]:
    """Filtered reports that can be placed on the map."""
    records = apply_filters(store.snapshot.records, filters, tz)
    return [_to_report_out(record) for record in records if has_coordinates(record)]


@router.get("/reports/recent", response_model=list[ReportOut])
async def list_recent_reports(store: StoreDep) -> list[ReportOut]:
    """Most recent reports, newest first."""
    return [_to_report_out(record) for record in store.snapshot.recent]


@router.get("/report-types", response_model=list[str])
async def list_report_types(store: StoreDep) -> list[str]:
    """Get list of all report types present in the data."""
    return sorted(distinct_types(store.snapshot.records))
