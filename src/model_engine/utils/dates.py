"""
UTC date helpers.

Naive datetimes are taken to be in UTC; every helper returns aware values.
"""
from datetime import datetime, timedelta, timezone


def _utc(value: datetime | None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def create_offset(value: datetime, years: int = 0, months: int = 0, days: int = 0) -> datetime:
    """
    Midnight (UTC) of the day `years`, `months` and `days` away from `value`.

    Overflowing parts roll over into the next unit, so 2020-01-31 plus one
    month is 2020-03-02.
    """
    value = _utc(value)
    month_index = value.year * 12 + (value.month - 1) + years * 12 + months
    year, month = divmod(month_index, 12)
    first = datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return first + timedelta(days=value.day - 1 + days)


def normalize_to_date(value: datetime | None = None) -> datetime:
    """Midnight (UTC) of the day of `value`, now by default."""
    value = _utc(value)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def full_utc_datetime(value: datetime | None = None) -> str:
    """Format as `YYYY/MM/DD_hh:mm:ss_mmm` in UTC, now by default."""
    value = _utc(value)
    return (
        f"{value.year:04d}/{value.month:02d}/{value.day:02d}"
        f"_{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f"_{value.microsecond // 1000:03d}"
    )


def timestamp(value: datetime | None = None) -> float:
    """Seconds since the epoch, now by default."""
    return _utc(value).timestamp()
