"""Shared lookups for the scheduling services"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Service, Staff, User
from ...models_appointment import Appointment
from .repository import AppointmentRepository

logger = logging.getLogger(__name__)

SLOT_UNAVAILABLE_DETAIL = "This time slot is no longer available. Please choose another time."


class SchedulingService:
    """Base class holding the session, the repository and entity lookups"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def _require_customer(self, customer_id: int) -> User:
        customer = self.repo.get_user(self.db, customer_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def _require_staff(self, staff_id: int) -> Staff:
        staff = self.repo.get_staff(self.db, staff_id)
        if not staff:
            raise HTTPException(status_code=404, detail="Staff not found")
        return staff

    def _require_service(self, service_id: int) -> Service:
        service = self.repo.get_service(self.db, service_id)
        if not service:
            raise HTTPException(status_code=404, detail="Service not found")
        return service

    def _require_owned_appointment(self, appointment_id: int, requester: User) -> Appointment:
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        if appointment.customer_id != requester.id:
            logger.warning(
                f"User {requester.id} attempted to modify appointment {appointment_id} "
                f"owned by user {appointment.customer_id}"
            )
            raise HTTPException(
                status_code=403, detail="You are not allowed to modify this appointment"
            )
        return appointment
