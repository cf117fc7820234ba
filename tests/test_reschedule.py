"""Tests for rescheduling appointments."""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from booking.domain.scheduling.availability import AvailabilityService
from booking.domain.scheduling.booking import BookingService
from booking.domain.scheduling.cancellation import CancellationService
from booking.domain.scheduling.notifications import (
    REMINDER_JOB,
    RESCHEDULE_JOB,
    AppointmentNotifier,
)
from booking.domain.scheduling.reschedule import RescheduleService
from booking.domain.scheduling.schemas import AppointmentCreate, AppointmentReschedule

from conftest import BOOKING_DAY, at


@pytest.fixture
def notifier(queue):
    return AppointmentNotifier(queue)


@pytest.fixture
def book(db, notifier):
    async def _book(customer, staff, service, start):
        request = AppointmentCreate(staffId=staff.id, serviceId=service.id, startTime=start)
        return await BookingService(db, notifier).create(customer.id, request)

    return _book


@pytest.fixture
def reschedule_service(db, notifier):
    return RescheduleService(db, notifier)


class TestReschedule:
    @pytest.mark.asyncio
    async def test_moves_appointment_and_recomputes_end(
        self, book, reschedule_service, customer, staff, service
    ):
        appointment = await book(customer, staff, service, at(10))

        moved = await reschedule_service.reschedule(
            appointment.id, customer, AppointmentReschedule(newStartTime=at(14))
        )

        assert moved.start_time == at(14)
        assert moved.end_time == at(14, 30)
        assert moved.status == "scheduled"

    @pytest.mark.asyncio
    async def test_reschedule_onto_own_slot_is_allowed(
        self, book, reschedule_service, customer, staff, service
    ):
        appointment = await book(customer, staff, service, at(10))

        moved = await reschedule_service.reschedule(
            appointment.id, customer, AppointmentReschedule(newStartTime=at(10))
        )

        assert moved.id == appointment.id
        assert moved.start_time == at(10)

    @pytest.mark.asyncio
    async def test_conflict_with_another_appointment(
        self, book, reschedule_service, customer, other_customer, staff, service
    ):
        mine = await book(customer, staff, service, at(10))
        await book(other_customer, staff, service, at(11))

        with pytest.raises(HTTPException) as exc_info:
            await reschedule_service.reschedule(
                mine.id, customer, AppointmentReschedule(newStartTime=at(11))
            )

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_slot_held_by_cancelled_appointment_conflicts_at_write(
        self, db, book, notifier, reschedule_service, customer, other_customer, staff, service
    ):
        mine = await book(customer, staff, service, at(10))
        theirs = await book(other_customer, staff, service, at(11))
        await CancellationService(db, notifier).cancel(theirs.id, other_customer)

        with pytest.raises(HTTPException) as exc_info:
            await reschedule_service.reschedule(
                mine.id, customer, AppointmentReschedule(newStartTime=at(11))
            )

        assert exc_info.value.status_code == 409
        db.refresh(mine)
        assert mine.start_time == at(10)

    @pytest.mark.asyncio
    async def test_vacated_slot_is_free_again(
        self, db, book, reschedule_service, customer, other_customer, staff, service
    ):
        appointment = await book(customer, staff, service, at(10))
        await reschedule_service.reschedule(
            appointment.id, customer, AppointmentReschedule(newStartTime=at(12))
        )

        result = AvailabilityService(db).check_availability(staff.id, service.id, BOOKING_DAY)
        assert at(10) in result["availableSlots"]
        assert result["bookedSlots"] == [at(12)]

        rebooked = await book(other_customer, staff, service, at(10))
        assert rebooked.start_time == at(10)

    @pytest.mark.asyncio
    async def test_staff_and_service_substitution(
        self, book, reschedule_service, customer, staff, second_staff, service, long_service
    ):
        appointment = await book(customer, staff, service, at(10))

        moved = await reschedule_service.reschedule(
            appointment.id,
            customer,
            AppointmentReschedule(
                newStartTime=at(15), staffId=second_staff.id, serviceId=long_service.id
            ),
        )

        assert moved.staff_id == second_staff.id
        assert moved.service_id == long_service.id
        assert moved.end_time == at(16, 30)

    @pytest.mark.asyncio
    async def test_unknown_substitute_staff(self, book, reschedule_service, customer, staff, service):
        appointment = await book(customer, staff, service, at(10))

        with pytest.raises(HTTPException) as exc_info:
            await reschedule_service.reschedule(
                appointment.id, customer, AppointmentReschedule(newStartTime=at(12), staffId=999)
            )

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Staff not found"

    @pytest.mark.asyncio
    async def test_unknown_substitute_service(self, book, reschedule_service, customer, staff, service):
        appointment = await book(customer, staff, service, at(10))

        with pytest.raises(HTTPException) as exc_info:
            await reschedule_service.reschedule(
                appointment.id, customer, AppointmentReschedule(newStartTime=at(12), serviceId=999)
            )

        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Service not found"


class TestRescheduleOwnership:
    @pytest.mark.asyncio
    async def test_missing_appointment(self, reschedule_service, customer):
        with pytest.raises(HTTPException) as exc_info:
            await reschedule_service.reschedule(
                999, customer, AppointmentReschedule(newStartTime=at(12))
            )

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_other_customer_cannot_reschedule(
        self, db, book, reschedule_service, customer, other_customer, staff, service
    ):
        appointment = await book(customer, staff, service, at(10))

        with pytest.raises(HTTPException) as exc_info:
            await reschedule_service.reschedule(
                appointment.id, other_customer, AppointmentReschedule(newStartTime=at(12))
            )

        assert exc_info.value.status_code == 403
        db.refresh(appointment)
        assert appointment.start_time == at(10)


class TestRescheduleNotifications:
    @pytest.mark.asyncio
    async def test_notice_carries_old_and_new_times(
        self, book, reschedule_service, queue, customer, staff, service
    ):
        appointment = await book(customer, staff, service, at(10))
        queue.jobs.clear()

        await reschedule_service.reschedule(
            appointment.id, customer, AppointmentReschedule(newStartTime=at(14))
        )

        assert queue.kinds() == [RESCHEDULE_JOB, REMINDER_JOB]
        _, payload, _ = queue.jobs_of(RESCHEDULE_JOB)[0]
        assert payload["old_start_time"] == "2030-06-03T10:00:00+00:00"
        assert payload["start_time"] == "2030-06-03T14:00:00+00:00"

    @pytest.mark.asyncio
    async def test_new_reminder_gated_on_new_start(self, db, book, queue, customer, staff, service):
        appointment = await book(customer, staff, service, at(10))
        queue.jobs.clear()
        now = at(10) - timedelta(hours=2)
        service_under_test = RescheduleService(db, AppointmentNotifier(queue, clock=lambda: now))

        await service_under_test.reschedule(
            appointment.id, customer, AppointmentReschedule(newStartTime=at(12))
        )

        assert queue.kinds() == [RESCHEDULE_JOB]
