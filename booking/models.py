from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Subject claim issued by the identity provider
    external_uid = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), default="customer", nullable=False)  # customer, staff, admin

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    staff_profile = relationship("Staff", back_populates="user", uselist=False)
    appointments = relationship("Appointment", back_populates="customer")


class Service(Base):
    __tablename__ = "services"
    __table_args__ = (CheckConstraint("duration >= 5", name="ck_service_min_duration"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    duration = Column(Integer, nullable=False)  # minutes
    price = Column(Float, nullable=False, default=0)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Staff(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="staff_profile")
    availability = relationship(
        "StaffAvailability",
        back_populates="staff",
        cascade="all, delete-orphan",
        order_by="StaffAvailability.start_time",
    )
    appointments = relationship("Appointment", back_populates="staff")

    @property
    def display_name(self) -> str:
        if self.user and self.user.name:
            return self.user.name
        return f"Staff #{self.id}"


class StaffAvailability(Base):
    """Weekly working window for a staff member"""

    __tablename__ = "staff_availability"

    id = Column(Integer, primary_key=True, index=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)  # 0 (Sun) to 6 (Sat)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM

    staff = relationship("Staff", back_populates="availability")
