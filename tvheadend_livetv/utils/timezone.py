"""
Date and Time utilities

TVHeadend reports every timestamp as Unix seconds and every padding value in
minutes. These helpers convert between those units and the aware UTC
datetimes / seconds used by the host entities.
"""
from datetime import datetime, timezone
import logging


logger = logging.getLogger(__name__)


class DateFormatError(ValueError):
    """Raised when a datetime cannot be converted to Unix seconds"""
    pass


def from_unix_seconds(value: int) -> datetime:
    """
    Convert Unix seconds to a timezone-aware UTC datetime

    Args:
        value: Seconds since the epoch

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.fromtimestamp(value, tz=timezone.utc)


def to_unix_seconds(value: datetime) -> int:
    """
    Convert a datetime to Unix seconds

    Naive datetimes are treated as UTC.

    Args:
        value: Datetime to convert

    Returns:
        Whole seconds since the epoch

    Raises:
        DateFormatError: If value is not a datetime
    """
    if not isinstance(value, datetime):
        raise DateFormatError(f"Expected a datetime, got {type(value).__name__}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime (naive values are assumed UTC)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def seconds_to_minutes(seconds: int) -> int:
    """Convert padding seconds to whole minutes, rounding to the nearest integer"""
    return round(seconds / 60)


def minutes_to_seconds(minutes: int) -> int:
    return minutes * 60
