"""Time helpers shared by the slot generator, the busy-set query and the API boundary"""

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Current time as naive UTC, the form timestamps are stored in"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    """
    Normalize a timestamp to naive UTC.
    Naive input is assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """Attach the UTC zone to a stored naive timestamp for serialization"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def time_to_minutes(value: str) -> int:
    """
    Convert "HH:MM" to minutes since midnight.

    Raises:
        ValueError: If the string is not a valid 24h time
    """
    try:
        hours_str, minutes_str = value.strip().split(":")
        hours, minutes = int(hours_str), int(minutes_str)
    except (AttributeError, ValueError):
        raise ValueError(f"Invalid time format: {value!r}. Expected HH:MM") from None

    if not (0 <= hours <= 24 and 0 <= minutes < 60) or (hours == 24 and minutes):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hours * 60 + minutes


def local_minutes_to_utc(day: date, minutes: int, tz: ZoneInfo) -> datetime:
    """Minutes since local midnight of `day` in `tz`, as naive UTC"""
    local_midnight = datetime.combine(day, time.min, tzinfo=tz)
    # Wall-clock arithmetic: add to the naive local value, then attach the zone
    local = (local_midnight.replace(tzinfo=None) + timedelta(minutes=minutes)).replace(tzinfo=tz)
    return to_utc_naive(local)


def day_bounds_utc(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """[local midnight, next local midnight) of `day` as naive UTC bounds"""
    start = to_utc_naive(datetime.combine(day, time.min, tzinfo=tz))
    end = to_utc_naive(datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz))
    return start, end
