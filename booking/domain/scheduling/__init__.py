"""
Scheduling Domain

Appointment scheduling and conflict resolution:
- slots.py: candidate slot generation from business hours and service duration
- repository.py: appointment store, busy-set queries, unique-constraint translation
- availability.py: busy sets and free slots for a staff member and date
- booking.py / reschedule.py / cancellation.py: appointment lifecycle services
- notifications.py: confirmation, reminder, reschedule and cancellation jobs

Double-booking is prevented by the (staff_id, start_time) unique constraint on
appointments, not by application locks. Reads of the busy set only keep taken
slots out of the UI.
"""

from .router import router

__all__ = ["router"]
