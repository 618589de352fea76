"""Pydantic schemas for incident reports."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict

ReportStatus = Literal["pending", "in_progress", "resolved"]

ALL_TYPES = "all"


class Coordinates(BaseModel):
    """Geographic coordinates."""

    latitude: float
    longitude: float


class IncidentRecord(BaseModel):
    """
    A citizen incident report as stored in the Supabase `reports` table.

    Read-only. Timestamps and coordinates that were absent or malformed in
    the source row are None.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    report_type: str | None = None
    title: str | None = None
    description: str | None = None
    address: str | None = None

    latitude: float | None = None
    longitude: float | None = None

    created_at: datetime | None = None
    process_start: datetime | None = None
    process_end: datetime | None = None

    user_id: str | None = None


class ReportOut(BaseModel):
    """Incident report response schema with its derived status."""

    id: str
    report_type: str | None = None
    title: str | None = None
    description: str | None = None
    address: str | None = None
    status: ReportStatus

    created_at: datetime | None = None
    process_start: datetime | None = None
    process_end: datetime | None = None

    coordinates: Coordinates | None = None
    user_id: str | None = None


class ReportsResponse(BaseModel):
    """Paginated response for incident reports."""

    reports: list[ReportOut]
    total: int
    offset: int = 0


class FilterCriteria(BaseModel):
    """Category and date-range constraints selected in the dashboard."""

    report_type: str = ALL_TYPES
    date_from: date | None = None
    date_to: date | None = None  # inclusive, through the end of the day


class TableCounts(BaseModel):
    """Row counts of the three Supabase tables."""

    reports: int = 0
    comments: int = 0
    points: int = 0
