"""Scheduling domain exceptions"""


class SlotUnavailableError(Exception):
    """Raised by the repository when a write violates the (staff, start_time) constraint"""

    def __init__(self, staff_id: int, start_time):
        self.staff_id = staff_id
        self.start_time = start_time
        super().__init__(f"Slot {start_time} is already held for staff {staff_id}")
