"""Availability service - busy sets and free candidate slots"""

import logging
from datetime import date, datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from ...config import BUSINESS_TIMEZONE
from ...models import StaffAvailability
from ...utils.time_utils import day_bounds_utc, time_to_minutes, utc_now
from .base import SchedulingService
from .slots import DEFAULT_CLOSE_MINUTE, DEFAULT_OPEN_MINUTE, generate_slots_for_windows

logger = logging.getLogger(__name__)


def to_weekday_index(day: date) -> int:
    """0 (Sun) to 6 (Sat), the convention used by staff availability rows"""
    return (day.weekday() + 1) % 7


def windows_for_day(windows: list[StaffAvailability], day: date) -> list[tuple[int, int]]:
    """
    Working windows in minutes for a date.

    No rows at all means the staff member follows business hours; rows on other
    weekdays only mean the staff member does not work that day.
    """
    if not windows:
        return [(DEFAULT_OPEN_MINUTE, DEFAULT_CLOSE_MINUTE)]

    weekday = to_weekday_index(day)
    return [
        (time_to_minutes(w.start_time), time_to_minutes(w.end_time))
        for w in windows
        if w.day_of_week == weekday
    ]


class AvailabilityService(SchedulingService):
    """Read-only availability queries"""

    def __init__(
        self,
        db: Session,
        tz: Optional[ZoneInfo] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(db)
        self.tz = tz or ZoneInfo(BUSINESS_TIMEZONE)
        self.clock = clock

    def get_busy_set(self, staff_id: int, day: date) -> set[datetime]:
        """Start times of the staff member's non-cancelled appointments on `day`"""
        range_start, range_end = day_bounds_utc(day, self.tz)
        return self.repo.get_busy_start_times(self.db, staff_id, range_start, range_end)

    def get_busy_slots(self, staff_id: int, day: date) -> list[datetime]:
        self._require_staff(staff_id)
        return sorted(self.get_busy_set(staff_id, day))

    def get_candidate_slots(self, staff_id: int, duration_minutes: int, day: date) -> list[datetime]:
        windows = self.repo.get_staff_windows(self.db, staff_id)
        return generate_slots_for_windows(
            day, duration_minutes, windows_for_day(windows, day), self.tz
        )

    def check_availability(self, staff_id: int, service_id: int, day: date) -> dict:
        """
        Occupied and free slots for a staff member, service and date.

        Returns:
            dict: {"bookedSlots": [...], "availableSlots": [...]}
        """
        self._require_staff(staff_id)
        service = self._require_service(service_id)

        busy = self.get_busy_set(staff_id, day)
        now = self.clock()
        available = [
            slot
            for slot in self.get_candidate_slots(staff_id, service.duration, day)
            if slot not in busy and slot > now
        ]

        logger.debug(
            f"Availability for staff {staff_id} on {day}: {len(busy)} booked, {len(available)} free"
        )
        return {"bookedSlots": sorted(busy), "availableSlots": available}
