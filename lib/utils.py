# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

import calendar
from datetime import datetime, timezone
from uuid import UUID

from pydantic import TypeAdapter

_datetime_adapter = TypeAdapter(datetime)


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        asset_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        asset_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Time Utilities
# =============================================================================

def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time formatted for timestamp columns."""
    return utc_now().isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a timestamp column value into an aware datetime.

    Accepts the ISO strings PostgREST and the auth API return (trailing "Z"
    or an offset, any number of fractional digits). Naive values are
    assumed to be UTC.

    Raises:
        ValueError: If the value is not a timestamp
    """
    if value is None or value == "":
        return None
    parsed = _datetime_adapter.validate_python(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def add_months(moment: datetime, months: int) -> datetime:
    """
    Add calendar months, clamping the day to the end of the target month.

    Example:
        add_months(datetime(2024, 1, 31), 1)  # 2024-02-29
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
