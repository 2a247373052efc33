from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from booking_ops.domain.entities.booking import Booking
from booking_ops.domain.entities.status import AppointmentStatus, CancellationStatus, RescheduleStatus


@dataclass(frozen=True)
class Appointment:
    id: str
    booking_id: str
    title: str
    customer: str
    address: str
    date: date
    branch: str
    status: AppointmentStatus
    time: time | None = None
    duration_label: str = ""
    staff: tuple[str, ...] = ()
    notes: str | None = None

    @staticmethod
    def from_booking(booking: Booking) -> "Appointment | None":
        """Project a booking onto the calendar. Drafts, rejected and expired
        bookings never show up on a schedule."""
        try:
            status = AppointmentStatus(booking.status.value)
        except ValueError:
            return None
        return Appointment(
            id=booking.id,
            booking_id=booking.id,
            title=booking.service_name or booking.service_code,
            customer=booking.customer_name or booking.customer_id,
            address=booking.address,
            date=booking.scheduled_date,
            branch=booking.branch_id,
            status=status,
            time=booking.scheduled_time,
            duration_label=duration_label(booking.duration_minutes),
            staff=booking.assigned_staff_ids,
            notes=booking.notes,
        )


@dataclass(frozen=True)
class CancellationRequest:
    id: str
    appointment_id: str
    customer_id: str
    reason: str
    created_at: datetime
    status: CancellationStatus = CancellationStatus.pending
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    resolution_note: str | None = None


@dataclass(frozen=True)
class RescheduleRequest:
    id: str
    appointment_id: str
    customer_id: str
    requested_date: date
    requested_time: time
    reason: str
    created_at: datetime
    status: RescheduleStatus = RescheduleStatus.pending
    resolved_at: datetime | None = None
    resolved_by: str | None = None
    resolution_note: str | None = None
    # slot the appointment held before an approval moved it
    previous_date: date | None = None
    previous_time: time | None = None


def duration_label(minutes: int) -> str:
    if minutes <= 0:
        return ""
    if minutes % 30:
        return f"{minutes} minutes"
    hours = minutes / 60
    if hours == 1:
        return "1 hour"
    return f"{hours:g} hours"
