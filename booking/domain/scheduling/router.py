"""Scheduling router - FastAPI endpoints for availability and appointments"""

import logging
from datetime import date as Date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ...models_appointment import AppointmentStatus
from ...services.notification_queue import NotificationQueue, get_notification_queue
from .availability import AvailabilityService
from .booking import BookingService
from .cancellation import CancellationService
from .notifications import AppointmentNotifier
from .repository import AppointmentRepository
from .reschedule import RescheduleService
from .schemas import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AvailabilityRequest,
    AvailabilityResponse,
    BusySlotsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_notifier(queue: NotificationQueue = Depends(get_notification_queue)) -> AppointmentNotifier:
    """Dependency injection for AppointmentNotifier"""
    return AppointmentNotifier(queue)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db), notifier: AppointmentNotifier = Depends(get_notifier)
) -> BookingService:
    return BookingService(db, notifier)


def get_reschedule_service(
    db: Session = Depends(get_db), notifier: AppointmentNotifier = Depends(get_notifier)
) -> RescheduleService:
    return RescheduleService(db, notifier)


def get_cancellation_service(
    db: Session = Depends(get_db), notifier: AppointmentNotifier = Depends(get_notifier)
) -> CancellationService:
    return CancellationService(db, notifier)


# ============================================================================
# AVAILABILITY (public)
# ============================================================================


@router.post("/availability", response_model=AvailabilityResponse)
async def check_availability(
    data: AvailabilityRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Booked and free slot start times for a staff member and service on a date"""
    result = service.check_availability(data.staffId, data.serviceId, data.date)
    return AvailabilityResponse(**result)


@router.get("/busy-slots", response_model=BusySlotsResponse)
async def get_busy_slots(
    staff_id: int = Query(..., alias="staffId"),
    date: Date = Query(...),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Occupied (non-cancelled) start times for a staff member on a date"""
    busy = service.get_busy_slots(staff_id, date)
    return BusySlotsResponse(staffId=staff_id, date=date, busySlots=busy)


# ============================================================================
# APPOINTMENTS (authenticated)
# ============================================================================


@router.post("", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    """Book an appointment for the current user"""
    appointment = await service.create(current_user.id, data)
    return AppointmentResponse.from_model(appointment)


@router.get("/me", response_model=list[AppointmentResponse])
async def get_my_appointments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Appointments of the current user, latest start first"""
    appointments = AppointmentRepository.list_for_customer(db, current_user.id)
    return [AppointmentResponse.from_model(a, include_relations=True) for a in appointments]


@router.get("/all", response_model=list[AppointmentResponse])
async def get_all_appointments(
    status: Optional[AppointmentStatus] = Query(None),
    _admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """All appointments (admin only)"""
    appointments = AppointmentRepository.list_all(db, status)
    return [AppointmentResponse.from_model(a, include_relations=True) for a in appointments]


@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: int,
    data: AppointmentReschedule,
    current_user: User = Depends(get_current_user),
    service: RescheduleService = Depends(get_reschedule_service),
):
    """Move one of the current user's appointments"""
    appointment = await service.reschedule(appointment_id, current_user, data)
    return AppointmentResponse.from_model(appointment)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    service: CancellationService = Depends(get_cancellation_service),
):
    """Cancel one of the current user's appointments"""
    appointment = await service.cancel(appointment_id, current_user)
    return AppointmentResponse.from_model(appointment)
