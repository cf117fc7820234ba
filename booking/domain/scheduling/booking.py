"""Booking service - reserves a slot for a new appointment"""

import logging
from datetime import timedelta

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models_appointment import STATUS_SCHEDULED, Appointment
from .base import SLOT_UNAVAILABLE_DETAIL, SchedulingService
from .exceptions import SlotUnavailableError
from .notifications import AppointmentNotifier
from .schemas import AppointmentCreate

logger = logging.getLogger(__name__)


class BookingService(SchedulingService):
    """
    Creates appointments.

    The reservation is a plain insert; the (staff_id, start_time) unique
    constraint decides between concurrent bookers and the loser gets a 409.
    """

    def __init__(self, db: Session, notifier: AppointmentNotifier):
        super().__init__(db)
        self.notifier = notifier

    async def create(self, customer_id: int, data: AppointmentCreate) -> Appointment:
        self._require_customer(customer_id)
        self._require_staff(data.staffId)
        service = self._require_service(data.serviceId)

        start_time = data.startTime
        end_time = start_time + timedelta(minutes=service.duration)

        try:
            appointment = self.repo.create_appointment(
                self.db,
                customer_id=customer_id,
                staff_id=data.staffId,
                service_id=service.id,
                start_time=start_time,
                end_time=end_time,
                status=STATUS_SCHEDULED,
                notes=data.notes,
            )
        except SlotUnavailableError:
            logger.info(
                f"Booking rejected for customer {customer_id}: staff {data.staffId} "
                f"already booked at {start_time}"
            )
            raise HTTPException(status_code=409, detail=SLOT_UNAVAILABLE_DETAIL) from None

        logger.info(
            f"Appointment {appointment.id} booked: customer {customer_id}, "
            f"staff {appointment.staff_id}, {appointment.start_time} - {appointment.end_time}"
        )

        await self.notifier.appointment_booked(appointment)
        return appointment
