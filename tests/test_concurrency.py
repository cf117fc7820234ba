"""
Concurrent booking of one slot.

Each thread uses its own session against a shared file-backed SQLite database,
so the unique constraint is the only thing arbitrating between them.
"""

import threading
from datetime import timedelta

from booking.domain.scheduling.exceptions import SlotUnavailableError
from booking.domain.scheduling.repository import AppointmentRepository
from booking.models_appointment import Appointment

from conftest import at

BOOKERS = 5


def test_exactly_one_concurrent_booking_wins(db, session_factory, customer, staff, service):
    barrier = threading.Barrier(BOOKERS)
    outcomes = []
    lock = threading.Lock()

    customer_id, staff_id, service_id = customer.id, staff.id, service.id
    # Release any read transaction held by the fixture session
    db.rollback()

    def attempt():
        session = session_factory()
        try:
            barrier.wait()
            AppointmentRepository.create_appointment(
                session,
                customer_id=customer_id,
                staff_id=staff_id,
                service_id=service_id,
                start_time=at(10),
                end_time=at(10) + timedelta(minutes=30),
                status="scheduled",
            )
            result = "won"
        except SlotUnavailableError:
            result = "conflict"
        except Exception as e:
            result = f"error: {e!r}"
        finally:
            session.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt) for _ in range(BOOKERS)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) == ["conflict"] * (BOOKERS - 1) + ["won"]
    assert db.query(Appointment).filter(Appointment.staff_id == staff_id).count() == 1
