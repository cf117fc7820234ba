"""Shared pytest fixtures for testing."""

import os
from datetime import date, datetime, timedelta
from typing import Optional

# Set test environment before the application modules read it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BUSINESS_TIMEZONE"] = "UTC"
os.environ["BUSINESS_OPEN_TIME"] = "09:00"
os.environ["BUSINESS_CLOSE_TIME"] = "22:00"
os.environ["REMINDER_LEAD_HOURS"] = "24"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from booking import models_appointment  # noqa: F401
from booking.auth import get_current_user
from booking.database import Base, get_db
from booking.models import Service, Staff, StaffAvailability, User
from booking.services.notification_queue import NotificationQueue, get_notification_queue

# A Monday well in the future, so no slot is filtered as past
BOOKING_DAY = date(2030, 6, 3)


def at(hour: int, minute: int = 0, day: date = BOOKING_DAY) -> datetime:
    """Naive UTC timestamp on the booking day"""
    return datetime(day.year, day.month, day.day, hour, minute)


class RecordingQueue(NotificationQueue):
    """In-memory NotificationQueue that records every enqueued job"""

    def __init__(self, fail: bool = False):
        self.jobs: list[tuple[str, dict, Optional[timedelta]]] = []
        self.fail = fail
        self.closed = False

    async def enqueue(self, kind, payload, delay=None):
        if self.fail:
            raise ConnectionError("Redis unavailable")
        self.jobs.append((kind, payload, delay))
        return f"job-{len(self.jobs)}"

    async def close(self):
        self.closed = True

    def kinds(self) -> list[str]:
        return [kind for kind, _, _ in self.jobs]

    def jobs_of(self, kind: str) -> list[tuple[str, dict, Optional[timedelta]]]:
        return [job for job in self.jobs if job[0] == kind]


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def db_engine(tmp_path):
    """File-backed SQLite engine so separate connections share the database."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'booking_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# =============================================================================
# Test Data Fixtures
# =============================================================================


def _make_user(db, uid: str, name: str, role: str = "customer", phone=None) -> User:
    user = User(external_uid=uid, name=name, email=f"{uid}@example.com", role=role, phone=phone)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def customer(db) -> User:
    return _make_user(db, "cust-1", "Ada Customer", phone="+15551230001")


@pytest.fixture
def other_customer(db) -> User:
    return _make_user(db, "cust-2", "Bob Customer")


@pytest.fixture
def admin(db) -> User:
    return _make_user(db, "admin-1", "Alice Admin", role="admin")


@pytest.fixture
def staff(db) -> Staff:
    staff_user = _make_user(db, "staff-1", "Sam Stylist", role="staff")
    member = Staff(user_id=staff_user.id)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


@pytest.fixture
def second_staff(db) -> Staff:
    staff_user = _make_user(db, "staff-2", "Kim Colorist", role="staff")
    member = Staff(user_id=staff_user.id)
    db.add(member)
    db.commit()
    db.refresh(member)
    return member


@pytest.fixture
def service(db) -> Service:
    item = Service(name="Haircut", description="Wash and cut", duration=30, price=25.0)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@pytest.fixture
def long_service(db) -> Service:
    item = Service(name="Colour", description="Full colour", duration=90, price=80.0)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@pytest.fixture
def add_window(db):
    """Create a weekly availability window for a staff member."""

    def _add(staff_member: Staff, day_of_week: int, start: str, end: str) -> StaffAvailability:
        window = StaffAvailability(
            staff_id=staff_member.id, day_of_week=day_of_week, start_time=start, end_time=end
        )
        db.add(window)
        db.commit()
        return window

    return _add


# =============================================================================
# Queue / API Fixtures
# =============================================================================


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def app(db, queue):
    """The FastAPI app wired to the test database and recording queue."""
    from booking.main import app as fastapi_app

    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_notification_queue] = lambda: queue
    fastapi_app.state.notification_queue = queue
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    fastapi_app.state.notification_queue = None


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def login(app):
    """Authenticate subsequent requests as the given user."""

    def _login(user: User) -> None:
        app.dependency_overrides[get_current_user] = lambda: user

    return _login
