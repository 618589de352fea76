"""Pydantic schemas for dashboard metrics and chart series."""

from datetime import datetime

from pydantic import BaseModel

from tombo.schemas.report import FilterCriteria, TableCounts


class StatusCounts(BaseModel):
    """Reports per derived status."""

    pending: int = 0
    in_progress: int = 0
    resolved: int = 0


class TypeCount(BaseModel):
    type: str
    count: int


class TypeResolution(BaseModel):
    type: str
    avg_hours: float


class DateCount(BaseModel):
    date: str  # YYYY-MM-DD
    count: int


class MonthCount(BaseModel):
    month_key: str  # YYYY-MM
    label: str
    count: int


class WeekdayCount(BaseModel):
    day: str
    count: int


class HourlyTypeCount(BaseModel):
    """Reports created in one hour of the day, split by known category."""

    hour: str  # "00".."23"
    total: int = 0
    robbery: int = 0
    assault: int = 0
    theft: int = 0
    vandalism: int = 0
    suspicious: int = 0
    other: int = 0


class DashboardSummary(BaseModel):
    """Metric cards shown at the top of the dashboard."""

    table_counts: TableCounts
    total_reports: int
    status: StatusCounts
    average_resolution_hours: float


class DashboardCharts(BaseModel):
    """Chart-ready series for the filtered report set."""

    by_type: list[TypeCount]
    resolution_by_type: list[TypeResolution]
    by_date: list[DateCount]
    by_month: list[MonthCount]
    by_weekday: list[WeekdayCount]
    by_hour: list[HourlyTypeCount]
    heatmap: list[DateCount]


class DashboardResponse(BaseModel):
    """Everything the dashboard renders for one set of filters."""

    status: str
    loaded_at: datetime | None = None
    error: str | None = None
    filters: FilterCriteria
    summary: DashboardSummary
    charts: DashboardCharts
    report_types: list[str]
