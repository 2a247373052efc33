"""
Tests for customer reschedule requests and the slot change applied on approval.
"""

from __future__ import annotations

from datetime import date, time

import pytest

from booking_ops.application.exceptions import (
    Conflict,
    InvalidDate,
    NotFound,
    PreconditionFailed,
    TerminalState,
    ValidationError,
)
from booking_ops.application.use_cases.reschedule import RescheduleRequestUseCase
from booking_ops.domain.entities.payment import PaymentResult
from booking_ops.domain.entities.status import BookingStatus, RescheduleStatus
from booking_ops.infrastructure.store.memory_store import MemoryRescheduleStore

from conftest import make_draft

REASON = "Family visiting that week"


@pytest.fixture
def reschedules(store, workflow, notifier, clock) -> RescheduleRequestUseCase:
    return RescheduleRequestUseCase(
        requests=MemoryRescheduleStore(),
        bookings=store,
        workflow=workflow,
        notifier=notifier,
        clock=clock,
    )


def _pending_booking(workflow):
    submitted = workflow.submit_booking(make_draft())
    return workflow.confirm_payment(PaymentResult(booking_id=submitted.booking_id, payment_token="t1", success=True))


def _confirmed_booking(workflow):
    return workflow.transition(_pending_booking(workflow).id, BookingStatus.confirmed, actor_id="staff_1")


def test_file_request(reschedules, workflow):
    booking = _confirmed_booking(workflow)
    request = reschedules.file_request(booking.id, "cust_1", "2025-04-18", "13:30", f"  {REASON} ")

    assert request.status == RescheduleStatus.pending
    assert request.requested_date == date(2025, 4, 18)
    assert request.requested_time == time(13, 30)
    assert request.reason == REASON
    # filing does not move the booking
    assert workflow.get_booking(booking.id).scheduled_date == date(2025, 4, 15)


@pytest.mark.parametrize(
    "requested_date,requested_time,reason",
    [
        ("2025-04-18", "13:30", "too short"),
        ("2025-04-18", "13:30", "x" * 501),
        ("2025-04-09", "13:30", REASON),  # before today
        ("2025-04-18", "13:15", REASON),  # not on the slot grid
        ("2025-04-18", "19:00", REASON),  # after closing
    ],
)
def test_file_request_validation(reschedules, workflow, requested_date, requested_time, reason):
    booking = _confirmed_booking(workflow)
    with pytest.raises(ValidationError):
        reschedules.file_request(booking.id, "cust_1", requested_date, requested_time, reason)


def test_file_request_checks_owner_and_dates(reschedules, workflow):
    booking = _confirmed_booking(workflow)
    with pytest.raises(ValidationError):
        reschedules.file_request(booking.id, "someone_else", "2025-04-18", "13:30", REASON)
    with pytest.raises(InvalidDate):
        reschedules.file_request(booking.id, "cust_1", "18/04/2025", "13:30", REASON)
    with pytest.raises(NotFound):
        reschedules.file_request("missing", "cust_1", "2025-04-18", "13:30", REASON)


def test_same_day_request_is_allowed(reschedules, workflow):
    booking = _confirmed_booking(workflow)
    request = reschedules.file_request(booking.id, "cust_1", "2025-04-10", "17:00", REASON)
    assert request.requested_date == date(2025, 4, 10)


def test_only_confirmed_bookings_can_be_rescheduled(reschedules, workflow):
    booking = _pending_booking(workflow)
    with pytest.raises(PreconditionFailed):
        reschedules.file_request(booking.id, "cust_1", "2025-04-18", "13:30", REASON)

    workflow.transition(booking.id, "cancelled")
    with pytest.raises(TerminalState):
        reschedules.file_request(booking.id, "cust_1", "2025-04-18", "13:30", REASON)


def test_only_one_open_request_per_appointment(reschedules, workflow):
    booking = _confirmed_booking(workflow)
    reschedules.file_request(booking.id, "cust_1", "2025-04-18", "13:30", REASON)
    with pytest.raises(Conflict):
        reschedules.file_request(booking.id, "cust_1", "2025-04-19", "09:00", REASON)


def test_approve_moves_booking(reschedules, workflow, notifier):
    booking = _confirmed_booking(workflow)
    request = reschedules.file_request(booking.id, "cust_1", "2025-04-18", "13:30", REASON)

    resolved = reschedules.resolve(request.id, approve=True, staff_id="staff_7", note="Crew swapped")

    assert resolved.status == RescheduleStatus.approved
    assert resolved.resolved_by == "staff_7"
    assert resolved.resolution_note == "Crew swapped"
    assert (resolved.previous_date, resolved.previous_time) == (date(2025, 4, 15), time(9, 0))

    moved = workflow.get_booking(booking.id)
    assert (moved.scheduled_date, moved.scheduled_time) == (date(2025, 4, 18), time(13, 30))
    assert moved.status == BookingStatus.confirmed
    assert moved.version == booking.version + 1
    assert [template for _, template, _ in notifier.sent][-2:] == ["booking_rescheduled", "reschedule_approved"]


def test_deny_keeps_slot(reschedules, workflow, notifier):
    booking = _confirmed_booking(workflow)
    request = reschedules.file_request(booking.id, "cust_1", "2025-04-18", "13:30", REASON)

    resolved = reschedules.resolve(request.id, approve=False, staff_id="staff_7")

    assert resolved.status == RescheduleStatus.denied
    assert resolved.previous_date is None
    assert workflow.get_booking(booking.id).scheduled_date == date(2025, 4, 15)
    assert notifier.sent[-1][1] == "reschedule_denied"

    again = reschedules.file_request(booking.id, "cust_1", "2025-04-19", "10:00", REASON)
    assert [r.id for r in reschedules.history(booking.id)] == [request.id, again.id]


def test_resolved_request_is_final(reschedules, workflow):
    booking = _confirmed_booking(workflow)
    request = reschedules.file_request(booking.id, "cust_1", "2025-04-18", "13:30", REASON)
    reschedules.resolve(request.id, approve=True, staff_id="staff_7")

    with pytest.raises(TerminalState):
        reschedules.resolve(request.id, approve=False, staff_id="staff_7")


def test_approval_fails_when_booking_moved_on(reschedules, workflow):
    """If work started after filing, approval is rejected and the request stays open."""
    booking = _confirmed_booking(workflow)
    request = reschedules.file_request(booking.id, "cust_1", "2025-04-18", "13:30", REASON)
    workflow.assign_staff(booking.id, ["emp_1"])
    workflow.transition(booking.id, "in-progress")

    with pytest.raises(PreconditionFailed):
        reschedules.resolve(request.id, approve=True, staff_id="staff_7")
    assert reschedules.history(booking.id)[0].status == RescheduleStatus.pending
    assert workflow.get_booking(booking.id).scheduled_date == date(2025, 4, 15)


def test_coordinator_reschedule_checks_version(workflow):
    booking = _confirmed_booking(workflow)
    with pytest.raises(Conflict):
        workflow.reschedule(booking.id, date(2025, 4, 18), time(13, 30), expected_version=booking.version - 1)
    assert workflow.get_booking(booking.id).scheduled_date == date(2025, 4, 15)
