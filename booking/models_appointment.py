"""
Appointment model - the record the scheduling core reserves, moves and cancels
"""

import uuid
from typing import Literal, get_args

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base

# Status workflow: scheduled → completed | cancelled | no-show
AppointmentStatus = Literal["scheduled", "completed", "cancelled", "no-show"]
APPOINTMENT_STATUSES = get_args(AppointmentStatus)

STATUS_SCHEDULED = "scheduled"
STATUS_CANCELLED = "cancelled"

# One appointment per (staff, start_time). The constraint does not look at status,
# so a cancelled appointment keeps holding its slot.
SLOT_CONSTRAINT_NAME = "uq_appointment_staff_start"


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        UniqueConstraint("staff_id", "start_time", name=SLOT_CONSTRAINT_NAME),
        CheckConstraint("end_time > start_time", name="ck_appointment_end_after_start"),
        CheckConstraint(
            "status IN ({})".format(", ".join(f"'{s}'" for s in APPOINTMENT_STATUSES)),
            name="ck_appointment_status",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(
        String(36), unique=True, nullable=False, index=True, default=generate_public_id
    )

    customer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    # Naive UTC
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    status = Column(String(20), default=STATUS_SCHEDULED, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship("User", back_populates="appointments")
    staff = relationship("Staff", back_populates="appointments")
    service = relationship("Service")
