"""
Deferred Notification Scheduling

Decides which follow-up jobs an appointment state change produces and hands
them to the injected NotificationQueue. Called only after the change is
committed; queue failures are logged and never propagate.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from ...config import REMINDER_LEAD_HOURS
from ...models_appointment import Appointment
from ...services.notification_queue import NotificationQueue
from ...utils.time_utils import as_utc, utc_now

logger = logging.getLogger(__name__)

CONFIRMATION_JOB = "send_appointment_confirmation"
REMINDER_JOB = "send_appointment_reminder"
RESCHEDULE_JOB = "send_reschedule_notice"
CANCELLATION_JOB = "send_cancellation_notice"


def reminder_delay(
    start_time: datetime, now: datetime, lead: timedelta
) -> Optional[timedelta]:
    """Delay until start_time - lead, or None if that moment is not in the future"""
    delay = (start_time - lead) - now
    if delay <= timedelta(0):
        return None
    return delay


class AppointmentNotifier:
    """Enqueues notification jobs for appointment lifecycle events"""

    def __init__(
        self,
        queue: NotificationQueue,
        clock: Callable[[], datetime] = utc_now,
        reminder_lead: timedelta = timedelta(hours=REMINDER_LEAD_HOURS),
    ):
        self.queue = queue
        self.clock = clock
        self.reminder_lead = reminder_lead

    async def appointment_booked(self, appointment: Appointment) -> None:
        payload = self._payload(appointment)
        await self._enqueue(CONFIRMATION_JOB, payload)
        await self._schedule_reminder(appointment)

    async def appointment_rescheduled(
        self, appointment: Appointment, old_start_time: datetime, old_end_time: datetime
    ) -> None:
        payload = self._payload(appointment)
        payload["old_start_time"] = as_utc(old_start_time).isoformat()
        payload["old_end_time"] = as_utc(old_end_time).isoformat()
        await self._enqueue(RESCHEDULE_JOB, payload)
        await self._schedule_reminder(appointment)

    async def appointment_cancelled(self, appointment: Appointment) -> None:
        await self._enqueue(CANCELLATION_JOB, self._payload(appointment))

    async def _schedule_reminder(self, appointment: Appointment) -> None:
        delay = reminder_delay(appointment.start_time, self.clock(), self.reminder_lead)
        if delay is None:
            logger.debug(
                f"Reminder for appointment {appointment.id} skipped: less than "
                f"{self.reminder_lead} before start"
            )
            return
        await self._enqueue(REMINDER_JOB, self._payload(appointment), delay=delay)

    async def _enqueue(
        self, kind: str, payload: dict[str, Any], delay: Optional[timedelta] = None
    ) -> None:
        try:
            job_id = await self.queue.enqueue(kind, payload, delay=delay)
            logger.info(
                f"Enqueued {kind} for appointment {payload['appointment_id']}"
                + (f" (delay {delay})" if delay else "")
                + (f" job={job_id}" if job_id else "")
            )
        except Exception as e:
            # Notifications are best-effort; the appointment change is already committed
            logger.error(f"Failed to enqueue {kind} for appointment {payload['appointment_id']}: {e}")

    @staticmethod
    def _payload(appointment: Appointment) -> dict[str, Any]:
        return {
            "appointment_id": appointment.id,
            "customer_id": appointment.customer_id,
            "staff_id": appointment.staff_id,
            "service_id": appointment.service_id,
            "start_time": as_utc(appointment.start_time).isoformat(),
            "end_time": as_utc(appointment.end_time).isoformat(),
        }
