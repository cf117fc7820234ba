"""
Slot Generation

Candidate slot start times for a business day. All arithmetic is done in
minutes since local midnight; results are converted to naive UTC so they can
be compared directly with stored appointment start times.
"""

from datetime import date, datetime
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from ...config import BUSINESS_CLOSE_TIME, BUSINESS_OPEN_TIME, BUSINESS_TIMEZONE
from ...utils.time_utils import local_minutes_to_utc, time_to_minutes

DEFAULT_OPEN_MINUTE = time_to_minutes(BUSINESS_OPEN_TIME)
DEFAULT_CLOSE_MINUTE = time_to_minutes(BUSINESS_CLOSE_TIME)


def generate_slots(
    day: date,
    duration_minutes: int,
    open_minute: int = DEFAULT_OPEN_MINUTE,
    close_minute: int = DEFAULT_CLOSE_MINUTE,
    tz: Optional[ZoneInfo] = None,
) -> list[datetime]:
    """
    Generate slot start times spaced `duration_minutes` apart from opening.

    A slot is emitted only if slot_start + duration <= closing, so a duration
    that does not divide the window drops the trailing partial slot.

    Args:
        day: calendar date in the business timezone
        duration_minutes: service duration
        open_minute: opening time in minutes since midnight
        close_minute: closing time in minutes since midnight
        tz: business timezone (defaults to BUSINESS_TIMEZONE)

    Returns:
        Ordered list of naive UTC start times
    """
    if duration_minutes <= 0:
        raise ValueError("Slot duration must be a positive number of minutes")

    tz = tz or ZoneInfo(BUSINESS_TIMEZONE)

    slots = []
    minute = open_minute
    while minute + duration_minutes <= close_minute:
        slots.append(local_minutes_to_utc(day, minute, tz))
        minute += duration_minutes
    return slots


def generate_slots_for_windows(
    day: date,
    duration_minutes: int,
    windows: Iterable[tuple[int, int]],
    tz: Optional[ZoneInfo] = None,
) -> list[datetime]:
    """Generate slots inside each (open_minute, close_minute) window, merged and sorted"""
    slots: set[datetime] = set()
    for open_minute, close_minute in windows:
        slots.update(generate_slots(day, duration_minutes, open_minute, close_minute, tz))
    return sorted(slots)
