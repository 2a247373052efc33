from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from zoneinfo import ZoneInfo

from booking_ops.application.ports.booking_store import BookingStorePort
from booking_ops.application.utils.appointment_aggregator import AppointmentFilter, bucket_by_slot, build_calendar
from booking_ops.application.utils.calendar_grid import build_grid, coerce_granularity, parse_iso_date, shift_reference
from booking_ops.domain.entities.appointment import Appointment
from booking_ops.domain.entities.booking import BookingQuery
from booking_ops.domain.entities.calendar import CalendarCell, Granularity
from booking_ops.domain.entities.status import BookingStatus

SCHEDULED_STATUSES = (
    BookingStatus.pending,
    BookingStatus.confirmed,
    BookingStatus.in_progress,
    BookingStatus.completed,
    BookingStatus.cancelled,
)


@dataclass
class ScheduleUseCase:
    store: BookingStorePort
    timezone: ZoneInfo
    slot_start: str = "08:00"
    slot_end: str = "18:00"
    slot_minutes: int = 30

    def calendar_view(
        self,
        reference_date: date | str,
        granularity: Granularity | str,
        filters: AppointmentFilter | None = None,
        today: date | None = None,
        offset: int = 0,
    ) -> list[CalendarCell]:
        """`offset` pages through views: -1 is the previous week or month, 1 the next."""
        ref = shift_reference(reference_date, granularity, offset)
        grid = build_grid(ref, granularity)
        appointments = self._appointments_between(grid[0], grid[-1])
        return build_calendar(
            appointments,
            ref,
            coerce_granularity(granularity),
            filters,
            today=today,
            timezone=self.timezone,
        )

    def day_slots(self, day: date | str, filters: AppointmentFilter | None = None) -> dict[str, list[Appointment]]:
        target = parse_iso_date(day)
        return bucket_by_slot(
            self._appointments_between(target, target),
            slot_start=self.slot_start,
            slot_end=self.slot_end,
            slot_minutes=self.slot_minutes,
            filters=filters,
        )

    def _appointments_between(self, start: date, end: date) -> list[Appointment]:
        bookings = self.store.query(BookingQuery(statuses=SCHEDULED_STATUSES, date_from=start, date_to=end))
        projected = (Appointment.from_booking(b) for b in bookings)
        return [a for a in projected if a is not None]
