"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import date as Date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models_appointment import Appointment
from ...utils.sanitization import sanitize_string, strip_control_characters
from ...utils.time_utils import as_utc, to_utc_naive


class AvailabilityRequest(BaseModel):
    """Schema for checking a staff member's availability for a service on a date"""

    staffId: int
    serviceId: int
    date: Date


class AvailabilityResponse(BaseModel):
    bookedSlots: list[datetime]
    availableSlots: list[datetime]

    @field_validator("bookedSlots", "availableSlots")
    @classmethod
    def attach_utc(cls, v):
        return [as_utc(slot) for slot in v]


class BusySlotsResponse(BaseModel):
    staffId: int
    date: Date
    busySlots: list[datetime]

    @field_validator("busySlots")
    @classmethod
    def attach_utc(cls, v):
        return [as_utc(slot) for slot in v]


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment"""

    staffId: int
    serviceId: int
    startTime: datetime
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("startTime")
    @classmethod
    def normalize_start_time(cls, v):
        return to_utc_naive(v)

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v):
        if v:
            return sanitize_string(strip_control_characters(v).strip()) or None
        return None


class AppointmentReschedule(BaseModel):
    """Schema for moving an appointment; staff and service are optional substitutions"""

    newStartTime: datetime
    staffId: Optional[int] = None
    serviceId: Optional[int] = None

    @field_validator("newStartTime")
    @classmethod
    def normalize_start_time(cls, v):
        return to_utc_naive(v)


class ServiceSummary(BaseModel):
    id: int
    name: str
    duration: int


class StaffSummary(BaseModel):
    id: int
    name: str


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    publicId: str
    customerId: int
    staffId: int
    serviceId: int
    startTime: datetime
    endTime: datetime
    status: str
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    service: Optional[ServiceSummary] = None
    staff: Optional[StaffSummary] = None

    @classmethod
    def from_model(cls, appointment: Appointment, include_relations: bool = False):
        service = staff = None
        if include_relations:
            if appointment.service is not None:
                service = ServiceSummary(
                    id=appointment.service.id,
                    name=appointment.service.name,
                    duration=appointment.service.duration,
                )
            if appointment.staff is not None:
                staff = StaffSummary(
                    id=appointment.staff.id, name=appointment.staff.display_name
                )

        return cls(
            id=appointment.id,
            publicId=appointment.public_id,
            customerId=appointment.customer_id,
            staffId=appointment.staff_id,
            serviceId=appointment.service_id,
            startTime=as_utc(appointment.start_time),
            endTime=as_utc(appointment.end_time),
            status=appointment.status,
            notes=appointment.notes,
            createdAt=appointment.created_at,
            service=service,
            staff=staff,
        )
