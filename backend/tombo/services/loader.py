"""Loader that turns Supabase rows into a dashboard snapshot."""

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from tombo.config import get_settings
from tombo.schemas.report import IncidentRecord, TableCounts
from tombo.services.supabase_client import SupabaseClient, SupabaseClientError
from tombo.state import DashboardSnapshot, LoadStatus

logger = logging.getLogger(__name__)
settings = get_settings()


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse an ISO 8601 timestamp as returned by PostgREST.

    Accepts `T` or space separators, optional fractions and `Z` or numeric
    offsets. Returns None for anything else.
    """
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_coordinate(value: Any) -> float | None:
    """Parse a latitude or longitude, None when absent or not numeric."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None
    # Reject NaN and infinities
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_report_row(row: dict[str, Any]) -> IncidentRecord | None:
    """Transform a raw `reports` row into an IncidentRecord."""
    report_id = _optional_str(row.get("id"))
    if not report_id:
        return None

    return IncidentRecord(
        id=report_id,
        report_type=_optional_str(row.get("report_type")),
        title=_optional_str(row.get("title")),
        description=_optional_str(row.get("description")),
        address=_optional_str(row.get("address")),
        latitude=parse_coordinate(row.get("latitude")),
        longitude=parse_coordinate(row.get("longitude")),
        created_at=parse_datetime(row.get("created_at")),
        process_start=parse_datetime(row.get("process_start")),
        process_end=parse_datetime(row.get("process_end")),
        user_id=_optional_str(row.get("user_id")),
    )


def parse_report_rows(rows: list[dict[str, Any]]) -> list[IncidentRecord]:
    records = []
    skipped = 0
    for row in rows:
        record = parse_report_row(row)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.warning(f"Skipped {skipped} report rows without an id")
    return records


class DashboardLoader:
    """
    Loads everything the dashboard needs in one pass.

    Issues the full reports select, the row counts of the three tables and
    the recent-reports query. Any backend failure yields a failed snapshot
    with no records, never a partial one.
    """

    def __init__(
        self,
        client: SupabaseClient | None = None,
        recent_limit: int = settings.recent_reports_limit,
    ):
        self.client = client or SupabaseClient()
        self.recent_limit = recent_limit

    async def _fetch(self) -> DashboardSnapshot:
        rows = await self.client.fetch_all_reports()
        records = parse_report_rows(rows)

        table_counts = TableCounts(
            reports=await self.client.count_rows(settings.reports_table),
            comments=await self.client.count_rows(settings.comments_table),
            points=await self.client.count_rows(settings.points_table),
        )

        recent_rows = await self.client.fetch_recent_reports(limit=self.recent_limit)
        recent = parse_report_rows(recent_rows)

        return DashboardSnapshot(
            status=LoadStatus.READY,
            records=records,
            table_counts=table_counts,
            recent=recent,
            loaded_at=datetime.now(UTC),
        )

    async def load(self) -> DashboardSnapshot:
        """Load the dashboard data, returning a ready or failed snapshot."""
        logger.info("Loading dashboard data from Supabase")
        try:
            snapshot = await self._fetch()
        except (SupabaseClientError, httpx.HTTPError) as e:
            logger.error(f"Dashboard load failed: {e}", exc_info=True)
            return DashboardSnapshot(
                status=LoadStatus.FAILED,
                loaded_at=datetime.now(UTC),
                error=str(e),
            )

        logger.info(
            f"Loaded {len(snapshot.records)} reports "
            f"({snapshot.table_counts.comments} comments, {snapshot.table_counts.points} points)"
        )
        return snapshot
