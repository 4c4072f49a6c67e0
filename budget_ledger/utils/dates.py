"""Date and datetime helpers shared by the engine and the scheduler."""

from datetime import date, datetime, time, timezone
from typing import Union

DateLike = Union[date, datetime]

END_OF_DAY = time(23, 59, 59, 999000)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def align_tz(value: datetime, reference: datetime) -> datetime:
    """
    Make `value` comparable with `reference`.

    A naive value compared against an aware reference is read in the
    reference's timezone; an aware value compared against a naive
    reference keeps its wall-clock fields and drops its tzinfo.
    """
    if reference.tzinfo is not None and value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    if reference.tzinfo is None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def start_of_day(value: DateLike) -> datetime:
    """Midnight of the given day. Datetimes are returned unchanged."""
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def end_of_day(value: DateLike) -> datetime:
    """23:59:59.999 of the calendar day `value` falls on."""
    if isinstance(value, datetime):
        return datetime.combine(value.date(), END_OF_DAY, tzinfo=value.tzinfo)
    return datetime.combine(value, END_OF_DAY)


def month_key(value: DateLike) -> str:
    """Calendar month bucket key, e.g. '2024-01'."""
    return value.strftime("%Y-%m")


def short_date(value: DateLike) -> str:
    """Format as 'Jan 5, 2024'."""
    return f"{value:%b} {value.day}, {value.year}"


def as_aware(value: datetime) -> datetime:
    """Naive datetimes are read as UTC so they order against aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
