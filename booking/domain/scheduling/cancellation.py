"""Cancellation service"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...models_appointment import STATUS_CANCELLED, Appointment
from .base import SchedulingService
from .notifications import AppointmentNotifier

logger = logging.getLogger(__name__)


class CancellationService(SchedulingService):
    def __init__(self, db: Session, notifier: AppointmentNotifier):
        super().__init__(db)
        self.notifier = notifier

    async def cancel(self, appointment_id: int, requester: User) -> Appointment:
        """Cancel an appointment owned by the requester; a second cancel is a 400"""
        appointment = self._require_owned_appointment(appointment_id, requester)

        if appointment.status == STATUS_CANCELLED:
            raise HTTPException(status_code=400, detail="Appointment is already cancelled")

        appointment.status = STATUS_CANCELLED
        self.db.commit()
        self.db.refresh(appointment)

        logger.info(f"Appointment {appointment.id} cancelled by user {requester.id}")

        await self.notifier.appointment_cancelled(appointment)
        return appointment
