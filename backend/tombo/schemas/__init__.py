"""Pydantic schemas for API request/response validation."""

from tombo.schemas.dashboard import (
    DashboardCharts,
    DashboardResponse,
    DashboardSummary,
    StatusCounts,
)
from tombo.schemas.report import (
    Coordinates,
    FilterCriteria,
    IncidentRecord,
    ReportOut,
    TableCounts,
)

__all__ = [
    "Coordinates",
    "DashboardCharts",
    "DashboardResponse",
    "DashboardSummary",
    "FilterCriteria",
    "IncidentRecord",
    "ReportOut",
    "StatusCounts",
    "TableCounts",
]
