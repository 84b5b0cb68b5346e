"""
Request Dependencies

Translates query-string filters into report parameters. Every default that
depends on the current time is resolved here, once per request.
"""

from datetime import date, datetime, timezone
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, Query

from src.analytics.filters import ReportFilters, end_of_day, resolve_period
from src.config import get_settings

settings = get_settings()


def get_request_time() -> datetime:
    """Reference instant for the request, naive UTC to match stored timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_timestamp(value: Optional[str], param: str, end_of_range: bool = False) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or datetime query parameter.

    A bare date used as the end of a range covers the whole day. Aware
    datetimes are converted to naive UTC.

    Raises:
        HTTPException: 422 when the value is not ISO 8601
    """
    if not value:
        return None

    try:
        day = date.fromisoformat(value)
    except ValueError:
        pass
    else:
        return end_of_day(day) if end_of_range else datetime.combine(day, datetime.min.time())

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid {param}: expected ISO 8601, got {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_id_list(value: Optional[str], param: str) -> Tuple[int, ...]:
    """
    Parse a comma-separated list of integer ids.

    Raises:
        HTTPException: 422 when an element is not an integer
    """
    if not value:
        return ()

    try:
        return tuple(int(part) for part in value.split(",") if part.strip())
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid {param}: expected comma-separated integers")


def get_report_filters(
    start_date: Optional[str] = Query(None, alias="startDate", description="Period start, ISO 8601"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Period end, ISO 8601"),
    store_ids: Optional[str] = Query(None, alias="storeIds", description="Comma-separated store ids"),
    channel_ids: Optional[str] = Query(None, alias="channelIds", description="Comma-separated channel ids"),
    now: datetime = Depends(get_request_time),
) -> ReportFilters:
    """FastAPI dependency building the filter set shared by all reports."""
    start = parse_timestamp(start_date, "startDate")
    end = parse_timestamp(end_date, "endDate", end_of_range=True)
    try:
        start, end = resolve_period(start, end, now=now, default_days=settings.reports.default_range_days)
    except OverflowError:
        raise HTTPException(status_code=422, detail="Invalid endDate: default period starts before year 1")
    return ReportFilters(
        start=start,
        end=end,
        store_ids=parse_id_list(store_ids, "storeIds"),
        channel_ids=parse_id_list(channel_ids, "channelIds"),
    )
