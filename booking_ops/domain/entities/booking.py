from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal

from booking_ops.domain.entities.status import BookingStatus, PaymentStatus

STAFFED_STATUSES = frozenset({BookingStatus.confirmed, BookingStatus.in_progress, BookingStatus.completed})


@dataclass(frozen=True)
class Booking:
    id: str
    customer_id: str
    service_code: str
    branch_id: str
    scheduled_date: date
    duration_minutes: int
    address: str
    amount: Decimal
    created_at: datetime
    modified_at: datetime
    scheduled_time: time | None = None
    status: BookingStatus = BookingStatus.draft
    payment_status: PaymentStatus = PaymentStatus.unpaid
    assigned_staff_ids: tuple[str, ...] = ()
    notes: str | None = None
    customer_name: str = ""
    service_name: str = ""
    payment_token: str | None = None  # last applied payment result
    payment_session_id: str | None = None
    version: int = 1

    def invariant_violations(self) -> list[str]:
        problems: list[str] = []
        if self.assigned_staff_ids and self.status not in STAFFED_STATUSES:
            problems.append(f"staff cannot be assigned while booking is {self.status.value}")
        if len(set(self.assigned_staff_ids)) != len(self.assigned_staff_ids):
            problems.append("assigned staff ids must be unique")
        if self.amount < 0:
            problems.append("amount must not be negative")
        return problems


@dataclass(frozen=True)
class BookingDraft:
    """Caller-supplied data for a new booking. Schema validity is the caller's job;
    the coordinator only checks what the workflow depends on."""

    customer_id: str
    service_code: str
    branch_id: str
    scheduled_date: date
    address: str
    scheduled_time: time | None = None
    duration_minutes: int | None = None
    amount: Decimal | None = None
    notes: str | None = None
    customer_name: str = ""


@dataclass(frozen=True)
class BookingQuery:
    """Structured filter handed to the persistence port."""

    statuses: tuple[BookingStatus, ...] = ()
    branch_id: str | None = None
    customer_id: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    created_before: datetime | None = None

    def matches(self, booking: Booking) -> bool:
        if self.statuses and booking.status not in self.statuses:
            return False
        if self.branch_id and booking.branch_id != self.branch_id:
            return False
        if self.customer_id and booking.customer_id != self.customer_id:
            return False
        if self.date_from and booking.scheduled_date < self.date_from:
            return False
        if self.date_to and booking.scheduled_date > self.date_to:
            return False
        if self.created_before and booking.created_at >= self.created_before:
            return False
        return True
