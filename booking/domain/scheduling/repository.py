"""Appointment repository - Database operations for the scheduling core"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from ...models import Service, Staff, StaffAvailability, User
from ...models_appointment import SLOT_CONSTRAINT_NAME, STATUS_CANCELLED, Appointment
from .exceptions import SlotUnavailableError

logger = logging.getLogger(__name__)


def is_slot_conflict(error: IntegrityError) -> bool:
    """True if the integrity error comes from the (staff_id, start_time) constraint"""
    message = str(error.orig).lower()
    if SLOT_CONSTRAINT_NAME in message:
        return True
    # SQLite names the columns rather than the constraint
    return "appointments.staff_id" in message and "appointments.start_time" in message


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_user(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_staff(db: Session, staff_id: int) -> Optional[Staff]:
        return (
            db.query(Staff)
            .filter(Staff.id == staff_id)
            .options(joinedload(Staff.user))
            .first()
        )

    @staticmethod
    def get_service(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def get_staff_windows(db: Session, staff_id: int) -> list[StaffAvailability]:
        """All weekly availability windows of a staff member"""
        return (
            db.query(StaffAvailability)
            .filter(StaffAvailability.staff_id == staff_id)
            .order_by(StaffAvailability.day_of_week, StaffAvailability.start_time)
            .all()
        )

    @staticmethod
    def get_busy_start_times(
        db: Session, staff_id: int, range_start: datetime, range_end: datetime
    ) -> set[datetime]:
        """Start times of non-cancelled appointments in [range_start, range_end)"""
        rows = (
            db.query(Appointment.start_time)
            .filter(
                Appointment.staff_id == staff_id,
                Appointment.start_time >= range_start,
                Appointment.start_time < range_end,
                Appointment.status != STATUS_CANCELLED,
            )
            .all()
        )
        return {row.start_time for row in rows}

    @staticmethod
    def find_conflict(
        db: Session,
        staff_id: int,
        start_time: datetime,
        exclude_appointment_id: Optional[int] = None,
    ) -> Optional[Appointment]:
        """Another non-cancelled appointment holding (staff_id, start_time)"""
        query = db.query(Appointment).filter(
            Appointment.staff_id == staff_id,
            Appointment.start_time == start_time,
            Appointment.status != STATUS_CANCELLED,
        )
        if exclude_appointment_id is not None:
            query = query.filter(Appointment.id != exclude_appointment_id)
        return query.first()

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        """
        Insert an appointment and commit.

        Raises:
            SlotUnavailableError: If (staff_id, start_time) is already held
        """
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        AppointmentRepository._commit_reservation(
            db, appointment_data["staff_id"], appointment_data["start_time"]
        )
        db.refresh(appointment)
        return appointment

    @staticmethod
    def save_appointment(db: Session, appointment: Appointment) -> Appointment:
        """
        Commit pending changes to an appointment.

        Raises:
            SlotUnavailableError: If the new (staff_id, start_time) is already held
        """
        staff_id, start_time = appointment.staff_id, appointment.start_time
        AppointmentRepository._commit_reservation(db, staff_id, start_time)
        db.refresh(appointment)
        return appointment

    @staticmethod
    def _commit_reservation(db: Session, staff_id: int, start_time: datetime) -> None:
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_slot_conflict(e):
                logger.info(f"Slot conflict for staff {staff_id} at {start_time}")
                raise SlotUnavailableError(staff_id, start_time) from e
            raise

    @staticmethod
    def list_for_customer(db: Session, customer_id: int) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.customer_id == customer_id)
            .options(
                joinedload(Appointment.service),
                joinedload(Appointment.staff).joinedload(Staff.user),
            )
            .order_by(Appointment.start_time.desc())
            .all()
        )

    @staticmethod
    def list_all(db: Session, status: Optional[str] = None) -> list[Appointment]:
        query = db.query(Appointment).options(
            joinedload(Appointment.service),
            joinedload(Appointment.customer),
            joinedload(Appointment.staff).joinedload(Staff.user),
        )
        if status:
            query = query.filter(Appointment.status == status)
        return query.order_by(Appointment.start_time.desc()).all()
