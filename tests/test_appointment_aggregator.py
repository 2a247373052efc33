"""
Tests for appointment filtering, calendar aggregation and slot bucketing.
"""

from __future__ import annotations

from datetime import date, time

import pytest

from booking_ops.application.exceptions import ValidationError
from booking_ops.application.utils.appointment_aggregator import (
    AppointmentFilter,
    aggregate,
    bucket_by_slot,
    build_calendar,
    filter_appointments,
    slot_labels,
)
from booking_ops.application.utils.calendar_grid import build_grid
from booking_ops.domain.entities.appointment import Appointment, duration_label
from booking_ops.domain.entities.status import AppointmentStatus


def _appt(
    id: str,
    day: str,
    at: str | None = None,
    status: AppointmentStatus = AppointmentStatus.confirmed,
    branch: str = "Toronto Downtown",
    customer: str = "Jane Cooper",
    title: str = "Deep Cleaning",
    address: str = "12 King St W",
) -> Appointment:
    hour_minute = time.fromisoformat(at) if at else None
    return Appointment(
        id=id,
        booking_id=id,
        title=title,
        customer=customer,
        address=address,
        date=date.fromisoformat(day),
        branch=branch,
        status=status,
        time=hour_minute,
    )


APPOINTMENTS = [
    _appt("a1", "2025-04-15", "14:00", customer="Jane Cooper"),
    _appt("a2", "2025-04-15", "09:15", status=AppointmentStatus.pending, branch="Mississauga"),
    _appt("a3", "2025-04-15", None, title="On-Site Estimate"),
    _appt("a4", "2025-04-16", "09:00", customer="Wade Warren", address="88 Queen St E"),
    _appt("a5", "2025-04-22", "10:00"),
]


def test_aggregate_keys_every_grid_date():
    grid = build_grid("2025-04-15", "week")
    grouped = aggregate(APPOINTMENTS, grid)
    assert list(grouped) == [d.isoformat() for d in grid]
    assert grouped["2025-04-14"] == []


def test_aggregate_sorts_by_time_with_untimed_last():
    grouped = aggregate(APPOINTMENTS, build_grid("2025-04-15", "week"))
    assert [a.id for a in grouped["2025-04-15"]] == ["a2", "a1", "a3"]


def test_aggregate_drops_appointments_outside_the_grid():
    grouped = aggregate(APPOINTMENTS, build_grid("2025-04-15", "week"))
    ids = {a.id for bucket in grouped.values() for a in bucket}
    assert "a5" not in ids
    assert ids == {"a1", "a2", "a3", "a4"}


def test_aggregate_is_idempotent():
    grid = build_grid("2025-04-15", "week")
    assert aggregate(APPOINTMENTS, grid) == aggregate(APPOINTMENTS, grid)


def test_search_matches_id_customer_title_and_address():
    assert [a.id for a in filter_appointments(APPOINTMENTS, AppointmentFilter(search="wade"))] == ["a4"]
    assert [a.id for a in filter_appointments(APPOINTMENTS, AppointmentFilter(search="QUEEN"))] == ["a4"]
    assert [a.id for a in filter_appointments(APPOINTMENTS, AppointmentFilter(search="estimate"))] == ["a3"]
    assert [a.id for a in filter_appointments(APPOINTMENTS, AppointmentFilter(search="a5"))] == ["a5"]


def test_status_and_branch_filters():
    pending = filter_appointments(APPOINTMENTS, AppointmentFilter(status="pending"))
    assert [a.id for a in pending] == ["a2"]

    # branch is a case-insensitive substring match
    west = filter_appointments(APPOINTMENTS, AppointmentFilter(branch="missis"))
    assert [a.id for a in west] == ["a2"]


def test_all_sentinel_bypasses_filters():
    everything = filter_appointments(APPOINTMENTS, AppointmentFilter(search="", status="all", branch="ALL"))
    assert everything == APPOINTMENTS


def test_filtered_aggregate_is_a_subset_of_unfiltered():
    grid = build_grid("2025-04-15", "month")
    full = aggregate(APPOINTMENTS, grid)
    filtered = aggregate(APPOINTMENTS, grid, AppointmentFilter(status="confirmed"))
    for key, items in filtered.items():
        assert all(a in full[key] for a in items)
        assert all(a.status == AppointmentStatus.confirmed for a in items)


def test_slot_labels_cover_business_day():
    labels = slot_labels()
    assert labels[0] == "08:00"
    assert labels[1] == "08:30"
    assert labels[-1] == "18:00"
    assert len(labels) == 21


def test_bucket_by_slot_truncates_to_slot_start():
    day = [a for a in APPOINTMENTS if a.date == date(2025, 4, 15)]
    buckets = bucket_by_slot(day)
    assert [a.id for a in buckets["09:00"]] == ["a2"]
    assert [a.id for a in buckets["14:00"]] == ["a1"]
    # untimed appointments have no slot
    assert all(a.id != "a3" for bucket in buckets.values() for a in bucket)


def test_bucket_by_slot_surfaces_double_booking():
    overlapping = [_appt("x1", "2025-04-15", "10:00"), _appt("x2", "2025-04-15", "10:10")]
    buckets = bucket_by_slot(overlapping)
    assert [a.id for a in buckets["10:00"]] == ["x1", "x2"]


def test_bucket_by_slot_drops_out_of_hours():
    early_and_late = [_appt("e", "2025-04-15", "07:30"), _appt("l", "2025-04-15", "19:00")]
    buckets = bucket_by_slot(early_and_late)
    assert not any(buckets.values())


def test_bucket_by_slot_rejects_bad_configuration():
    with pytest.raises(ValidationError):
        bucket_by_slot(APPOINTMENTS, slot_minutes=0)
    with pytest.raises(ValidationError):
        slot_labels("18:00", "08:00")


def test_build_calendar_attaches_appointments_to_cells():
    cells = build_calendar(APPOINTMENTS, "2025-04-15", "week", today=date(2025, 4, 16))
    by_key = {cell.key: cell for cell in cells}
    assert len(cells) == 7
    assert [a.id for a in by_key["2025-04-16"].appointments] == ["a4"]
    assert by_key["2025-04-16"].is_today


def test_duration_labels():
    assert duration_label(60) == "1 hour"
    assert duration_label(90) == "1.5 hours"
    assert duration_label(240) == "4 hours"
    assert duration_label(45) == "45 minutes"
    assert duration_label(0) == ""
