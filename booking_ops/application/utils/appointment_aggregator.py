from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, time
from typing import Iterable
from zoneinfo import ZoneInfo

from booking_ops.application.exceptions import ValidationError
from booking_ops.application.utils.calendar_grid import build_cells, parse_hhmm
from booking_ops.domain.entities.appointment import Appointment
from booking_ops.domain.entities.calendar import CalendarCell, Granularity

ALL = "all"


@dataclass(frozen=True)
class AppointmentFilter:
    search: str | None = None
    status: str | None = ALL
    branch: str | None = ALL

    def matches(self, appointment: Appointment) -> bool:
        return self._matches_search(appointment) and self._matches_status(appointment) and self._matches_branch(appointment)

    def _matches_search(self, appointment: Appointment) -> bool:
        term = _normalize(self.search)
        if not term:
            return True
        haystack = (appointment.id, appointment.customer, appointment.title, appointment.address)
        return any(term in (field or "").lower() for field in haystack)

    def _matches_status(self, appointment: Appointment) -> bool:
        wanted = _normalize(self.status)
        if _is_bypass(wanted):
            return True
        return appointment.status.value == wanted

    def _matches_branch(self, appointment: Appointment) -> bool:
        wanted = _normalize(self.branch)
        if _is_bypass(wanted):
            return True
        return wanted in (appointment.branch or "").lower()


def filter_appointments(appointments: Iterable[Appointment], filters: AppointmentFilter | None = None) -> list[Appointment]:
    active = filters or AppointmentFilter()
    return [a for a in appointments if active.matches(a)]


def aggregate(
    appointments: Iterable[Appointment],
    grid: Iterable[date],
    filters: AppointmentFilter | None = None,
) -> dict[str, list[Appointment]]:
    """
    Group appointments by ISO date for every date of the grid.

    Every grid date gets a key, in grid order. Appointments whose date is not
    on the grid belong to another period and are left out.
    """
    grouped: dict[str, list[Appointment]] = {day.isoformat(): [] for day in grid}
    for appointment in filter_appointments(appointments, filters):
        bucket = grouped.get(appointment.date.isoformat())
        if bucket is not None:
            bucket.append(appointment)
    return {key: sort_by_time(items) for key, items in grouped.items()}


def sort_by_time(appointments: Iterable[Appointment]) -> list[Appointment]:
    # untimed appointments go last; sorted() keeps input order for ties
    return sorted(appointments, key=lambda a: (a.time is None, a.time or time.min))


def slot_labels(slot_start: time | str = "08:00", slot_end: time | str = "18:00", slot_minutes: int = 30) -> list[str]:
    start, end = _slot_bounds(slot_start, slot_end, slot_minutes)
    return [_label(minute) for minute in range(start, end + 1, slot_minutes)]


def bucket_by_slot(
    appointments: Iterable[Appointment],
    slot_start: time | str = "08:00",
    slot_end: time | str = "18:00",
    slot_minutes: int = 30,
    filters: AppointmentFilter | None = None,
) -> dict[str, list[Appointment]]:
    """
    Bucket one day's appointments into fixed-width time slots.

    Times are truncated to the slot boundary, so 09:15 lands in "09:00" with
    30 minute slots. A slot may hold several appointments; overlaps are
    surfaced here, not rejected.
    """
    start, end = _slot_bounds(slot_start, slot_end, slot_minutes)
    buckets: dict[str, list[Appointment]] = {label: [] for label in slot_labels(slot_start, slot_end, slot_minutes)}

    for appointment in sort_by_time(filter_appointments(appointments, filters)):
        if appointment.time is None:
            continue
        minute = appointment.time.hour * 60 + appointment.time.minute
        if minute < start:
            continue
        slot = start + ((minute - start) // slot_minutes) * slot_minutes
        if slot > end:
            continue
        buckets[_label(slot)].append(appointment)
    return buckets


def build_calendar(
    appointments: Iterable[Appointment],
    reference_date: date | str,
    granularity: Granularity | str,
    filters: AppointmentFilter | None = None,
    today: date | None = None,
    timezone: ZoneInfo | None = None,
) -> list[CalendarCell]:
    cells = build_cells(reference_date, granularity, today=today, timezone=timezone)
    grouped = aggregate(appointments, [cell.date for cell in cells], filters)
    return [replace(cell, appointments=tuple(grouped[cell.key])) for cell in cells]


def _slot_bounds(slot_start: time | str, slot_end: time | str, slot_minutes: int) -> tuple[int, int]:
    start_time = parse_hhmm(slot_start)
    end_time = parse_hhmm(slot_end)
    if slot_minutes <= 0:
        raise ValidationError("slot_minutes must be positive")
    start = start_time.hour * 60 + start_time.minute
    end = end_time.hour * 60 + end_time.minute
    if end < start:
        raise ValidationError("slot_end must not be before slot_start")
    return start, end


def _label(minute: int) -> str:
    return f"{minute // 60:02d}:{minute % 60:02d}"


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def _is_bypass(value: str) -> bool:
    return value in ("", ALL)
