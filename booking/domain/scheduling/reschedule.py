"""Reschedule service - moves an existing appointment without double-booking"""

import logging
from datetime import timedelta

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...models_appointment import STATUS_SCHEDULED, Appointment
from .base import SLOT_UNAVAILABLE_DETAIL, SchedulingService
from .exceptions import SlotUnavailableError
from .notifications import AppointmentNotifier
from .schemas import AppointmentReschedule

logger = logging.getLogger(__name__)


class RescheduleService(SchedulingService):
    def __init__(self, db: Session, notifier: AppointmentNotifier):
        super().__init__(db)
        self.notifier = notifier

    async def reschedule(
        self, appointment_id: int, requester: User, data: AppointmentReschedule
    ) -> Appointment:
        """
        Move an appointment to a new start time, optionally changing staff or service.

        The conflict query excludes the appointment itself, so moving onto its own
        slot is allowed. The update is then committed through the same unique
        constraint as booking, which catches a booking that lands in between.
        """
        appointment = self._require_owned_appointment(appointment_id, requester)

        staff_id = appointment.staff_id
        if data.staffId is not None and data.staffId != appointment.staff_id:
            staff_id = self._require_staff(data.staffId).id

        if data.serviceId is not None and data.serviceId != appointment.service_id:
            service = self._require_service(data.serviceId)
        else:
            service = self._require_service(appointment.service_id)

        new_start = data.newStartTime
        new_end = new_start + timedelta(minutes=service.duration)

        conflict = self.repo.find_conflict(
            self.db, staff_id, new_start, exclude_appointment_id=appointment.id
        )
        if conflict:
            logger.info(
                f"Reschedule of appointment {appointment.id} rejected: "
                f"staff {staff_id} already booked at {new_start} (appointment {conflict.id})"
            )
            raise HTTPException(status_code=409, detail=SLOT_UNAVAILABLE_DETAIL)

        old_start, old_end = appointment.start_time, appointment.end_time

        appointment.staff_id = staff_id
        appointment.service_id = service.id
        appointment.start_time = new_start
        appointment.end_time = new_end
        appointment.status = STATUS_SCHEDULED

        try:
            appointment = self.repo.save_appointment(self.db, appointment)
        except SlotUnavailableError:
            logger.info(
                f"Reschedule of appointment {appointment_id} lost the race for "
                f"staff {staff_id} at {new_start}"
            )
            raise HTTPException(status_code=409, detail=SLOT_UNAVAILABLE_DETAIL) from None

        logger.info(
            f"Appointment {appointment.id} rescheduled: {old_start} -> {appointment.start_time} "
            f"(staff {appointment.staff_id})"
        )

        await self.notifier.appointment_rescheduled(appointment, old_start, old_end)
        return appointment
