"""
Tests for the schedule use case: bookings projected onto calendar views.
"""

from __future__ import annotations

from datetime import date, time
from zoneinfo import ZoneInfo

from booking_ops.application.use_cases.schedule import ScheduleUseCase
from booking_ops.application.utils.appointment_aggregator import AppointmentFilter
from booking_ops.domain.entities.payment import PaymentResult

from conftest import make_draft


def _schedule(store) -> ScheduleUseCase:
    return ScheduleUseCase(store=store, timezone=ZoneInfo("UTC"))


def _paid(workflow, **overrides):
    submitted = workflow.submit_booking(make_draft(**overrides))
    return workflow.confirm_payment(PaymentResult(booking_id=submitted.booking_id, payment_token="t1", success=True))


def test_week_view_shows_scheduled_bookings(workflow, store):
    paid = _paid(workflow)
    estimate = workflow.submit_booking(make_draft(service_code="on_site_estimate", scheduled_time=time(8, 0)))
    workflow.submit_booking(make_draft())  # unpaid draft stays off the calendar

    cells = _schedule(store).calendar_view("2025-04-15", "week", today=date(2025, 4, 15))

    assert [c.key for c in cells][0] == "2025-04-14"
    tuesday = next(c for c in cells if c.key == "2025-04-15")
    assert tuesday.is_today
    assert [a.id for a in tuesday.appointments] == [estimate.booking_id, paid.id]
    assert tuesday.appointments[1].duration_label == "4 hours"
    assert tuesday.appointments[1].title == "Move-Out Cleaning"


def test_month_view_and_filters(workflow, store):
    _paid(workflow, scheduled_date=date(2025, 4, 2))
    _paid(workflow, scheduled_date=date(2025, 4, 20), branch_id="mississauga")
    _paid(workflow, scheduled_date=date(2025, 6, 1))

    cells = _schedule(store).calendar_view("2025-04-15", "month", AppointmentFilter(branch="missis"))

    assert len(cells) == 35
    found = [(c.key, a.branch) for c in cells for a in c.appointments]
    assert found == [("2025-04-20", "mississauga")]


def test_expired_and_rejected_bookings_are_hidden(workflow, store):
    rejected = _paid(workflow)
    workflow.transition(rejected.id, "rejected")
    cancelled = _paid(workflow)
    workflow.transition(cancelled.id, "cancelled")

    cells = _schedule(store).calendar_view("2025-04-15", "day")
    assert [a.id for a in cells[0].appointments] == [cancelled.id]
    assert cells[0].appointments[0].status.value == "cancelled"


def test_day_slots(workflow, store):
    morning = _paid(workflow, scheduled_time=time(9, 15))
    _paid(workflow, scheduled_time=None)

    slots = _schedule(store).day_slots("2025-04-15")

    assert len(slots) == 21
    assert [a.id for a in slots["09:00"]] == [morning.id]
    assert sum(len(items) for items in slots.values()) == 1


def test_offset_pages_to_neighbouring_views(workflow, store):
    earlier = _paid(workflow, scheduled_date=date(2025, 4, 8))
    _paid(workflow, scheduled_date=date(2025, 4, 15))

    previous_week = _schedule(store).calendar_view("2025-04-15", "week", offset=-1)
    assert previous_week[0].key == "2025-04-07"
    assert [a.id for c in previous_week for a in c.appointments] == [earlier.id]

    next_month = _schedule(store).calendar_view("2025-04-15", "month", offset=1)
    assert next_month[0].key == "2025-04-28"
    assert next(c for c in next_month if c.key == "2025-05-01").is_current_period
    assert not next(c for c in next_month if c.key == "2025-04-30").is_current_period
