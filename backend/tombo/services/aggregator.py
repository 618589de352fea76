"""
Report aggregation for the dashboard.

Every function here is pure: it takes the in-memory list of incident records
(plus filter criteria or a local timezone where relevant), returns new values
and never mutates its input. Absent or malformed fields are skipped rather
than rejected, so none of these functions raise on bad data.

Time-bucketed views work on the local wall clock. Aware timestamps are
converted to ``tz`` when one is given; naive timestamps are taken as local.
Records without ``created_at`` are left out of every time-bucketed view but
still count toward status buckets and type groups.
"""

from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime, time, tzinfo

from tombo.schemas.dashboard import (
    DashboardCharts,
    DashboardSummary,
    DateCount,
    HourlyTypeCount,
    MonthCount,
    StatusCounts,
    TypeCount,
    TypeResolution,
    WeekdayCount,
)
from tombo.schemas.report import (
    ALL_TYPES,
    FilterCriteria,
    IncidentRecord,
    ReportStatus,
    TableCounts,
)

KNOWN_TYPES = ("robbery", "assault", "theft", "vandalism", "suspicious", "other")
UNKNOWN_TYPE = "unknown"

WEEKDAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

HEATMAP_DAYS = 90


def _local(value: datetime | None, tz: tzinfo | None) -> datetime | None:
    """Project a timestamp onto the naive local wall clock."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    if tz is not None:
        value = value.astimezone(tz)
    return value.replace(tzinfo=None)


def _created_local(
    records: Iterable[IncidentRecord], tz: tzinfo | None
) -> Iterator[tuple[IncidentRecord, datetime]]:
    for record in records:
        created = _local(record.created_at, tz)
        if created is not None:
            yield record, created


def _type_label(record: IncidentRecord) -> str:
    return record.report_type or UNKNOWN_TYPE


def _resolution_hours(record: IncidentRecord) -> float | None:
    """Hours from triage start to resolution, None when not measurable."""
    if record.process_start is None or record.process_end is None:
        return None
    try:
        delta = record.process_end - record.process_start
    except TypeError:
        # Naive and aware timestamps cannot be compared
        return None
    hours = delta.total_seconds() / 3600
    # Inverted timestamps are a data-quality problem, not a duration
    if hours < 0:
        return None
    return hours


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 1)


def status_of(record: IncidentRecord) -> ReportStatus:
    """Derive pending / in_progress / resolved from the process timestamps."""
    if record.process_end is not None:
        return "resolved"
    if record.process_start is not None:
        return "in_progress"
    return "pending"


def count_by_status(records: Iterable[IncidentRecord]) -> StatusCounts:
    return StatusCounts(**Counter(status_of(record) for record in records))


def average_resolution_hours(records: Iterable[IncidentRecord]) -> float:
    """Mean resolution time in hours (one decimal), 0 when nothing is resolved."""
    hours = [h for h in map(_resolution_hours, records) if h is not None]
    return _mean(hours)


def group_by_type(records: Iterable[IncidentRecord]) -> list[TypeCount]:
    """Report counts per type, in the order each type first appears."""
    counts = Counter(_type_label(record) for record in records)
    return [TypeCount(type=label, count=count) for label, count in counts.items()]


def resolution_by_type(records: Iterable[IncidentRecord]) -> list[TypeResolution]:
    hours_by_type: dict[str, list[float]] = {}
    for record in records:
        hours = _resolution_hours(record)
        if hours is not None:
            hours_by_type.setdefault(_type_label(record), []).append(hours)

    return [
        TypeResolution(type=label, avg_hours=_mean(hours))
        for label, hours in hours_by_type.items()
    ]


def group_by_calendar_date(
    records: Iterable[IncidentRecord], tz: tzinfo | None = None
) -> list[DateCount]:
    """Report counts per local calendar day, ascending, without empty days."""
    days = Counter(created.date().isoformat() for _, created in _created_local(records, tz))
    return [DateCount(date=day, count=days[day]) for day in sorted(days)]


def group_by_month(
    records: Iterable[IncidentRecord], tz: tzinfo | None = None
) -> list[MonthCount]:
    months: Counter[tuple[int, int]] = Counter(
        (created.year, created.month) for _, created in _created_local(records, tz)
    )
    return [
        MonthCount(
            month_key=f"{year:04d}-{month:02d}",
            label=f"{MONTHS[month - 1]} {year}",
            count=months[(year, month)],
        )
        for year, month in sorted(months)
    ]


def group_by_weekday(
    records: Iterable[IncidentRecord], tz: tzinfo | None = None
) -> list[WeekdayCount]:
    """Seven entries, Sunday through Saturday, including empty days."""
    counts = [0] * 7
    for _, created in _created_local(records, tz):
        # date.weekday() is Monday=0
        counts[(created.weekday() + 1) % 7] += 1
    return [WeekdayCount(day=day, count=count) for day, count in zip(WEEKDAYS, counts)]


def group_by_hour_and_type(
    records: Iterable[IncidentRecord], tz: tzinfo | None = None
) -> list[HourlyTypeCount]:
    """
    Twenty-four entries, "00" through "23", each with a total and a count per
    known category.

    Reports with an unknown or missing type only add to ``total``.
    """
    buckets = [HourlyTypeCount(hour=f"{hour:02d}") for hour in range(24)]
    for record, created in _created_local(records, tz):
        bucket = buckets[created.hour]
        bucket.total += 1
        if record.report_type in KNOWN_TYPES:
            setattr(bucket, record.report_type, getattr(bucket, record.report_type) + 1)
    return buckets


def heatmap_last_90_days(
    records: Iterable[IncidentRecord], tz: tzinfo | None = None
) -> list[DateCount]:
    """The most recent 90 distinct dates that have reports, ascending."""
    return group_by_calendar_date(records, tz)[-HEATMAP_DAYS:]


def matches_filters(
    record: IncidentRecord, criteria: FilterCriteria, tz: tzinfo | None = None
) -> bool:
    if criteria.report_type != ALL_TYPES and record.report_type != criteria.report_type:
        return False

    if criteria.date_from is None and criteria.date_to is None:
        return True

    created = _local(record.created_at, tz)
    if created is None:
        return False
    if criteria.date_from is not None and created < datetime.combine(criteria.date_from, time.min):
        return False
    if criteria.date_to is not None and created > datetime.combine(criteria.date_to, time.max):
        return False
    return True


def apply_filters(
    records: Iterable[IncidentRecord],
    criteria: FilterCriteria,
    tz: tzinfo | None = None,
) -> list[IncidentRecord]:
    """Records passing the type and date-range criteria, in input order."""
    return [record for record in records if matches_filters(record, criteria, tz)]


def distinct_types(records: Iterable[IncidentRecord]) -> set[str]:
    return {record.report_type for record in records if record.report_type}


def has_coordinates(record: IncidentRecord) -> bool:
    """True when the record can be placed on the map."""
    lat, lng = record.latitude, record.longitude
    if lat is None or lng is None:
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def build_summary(
    records: Sequence[IncidentRecord], table_counts: TableCounts
) -> DashboardSummary:
    return DashboardSummary(
        table_counts=table_counts,
        total_reports=len(records),
        status=count_by_status(records),
        average_resolution_hours=average_resolution_hours(records),
    )


def build_charts(
    records: Sequence[IncidentRecord], tz: tzinfo | None = None
) -> DashboardCharts:
    return DashboardCharts(
        by_type=group_by_type(records),
        resolution_by_type=resolution_by_type(records),
        by_date=group_by_calendar_date(records, tz),
        by_month=group_by_month(records, tz),
        by_weekday=group_by_weekday(records, tz),
        by_hour=group_by_hour_and_type(records, tz),
        heatmap=heatmap_last_90_days(records, tz),
    )
