from __future__ import annotations

from enum import Enum

from booking_ops.application.exceptions import ValidationError
from booking_ops.domain.entities.status import (
    STATUS_ENUMS,
    AppointmentStatus,
    BookingStatus,
    CancellationStatus,
    EmployeeStatus,
    EntityKind,
    InquiryStatus,
    RescheduleStatus,
)

BOOKING_TRANSITIONS: dict[Enum, frozenset[Enum]] = {
    BookingStatus.draft: frozenset({BookingStatus.pending, BookingStatus.expired}),
    BookingStatus.pending: frozenset({BookingStatus.confirmed, BookingStatus.rejected, BookingStatus.cancelled}),
    BookingStatus.confirmed: frozenset({BookingStatus.in_progress, BookingStatus.cancelled}),
    BookingStatus.in_progress: frozenset({BookingStatus.completed}),
    BookingStatus.completed: frozenset(),
    BookingStatus.cancelled: frozenset(),
    BookingStatus.rejected: frozenset(),
    BookingStatus.expired: frozenset(),
}

APPOINTMENT_TRANSITIONS: dict[Enum, frozenset[Enum]] = {
    AppointmentStatus.pending: frozenset({AppointmentStatus.confirmed, AppointmentStatus.cancelled}),
    AppointmentStatus.confirmed: frozenset({AppointmentStatus.in_progress, AppointmentStatus.cancelled}),
    AppointmentStatus.in_progress: frozenset({AppointmentStatus.completed}),
    AppointmentStatus.completed: frozenset(),
    AppointmentStatus.cancelled: frozenset(),
}

EMPLOYEE_TRANSITIONS: dict[Enum, frozenset[Enum]] = {
    EmployeeStatus.probation: frozenset({EmployeeStatus.active, EmployeeStatus.inactive, EmployeeStatus.terminated}),
    EmployeeStatus.active: frozenset({EmployeeStatus.inactive, EmployeeStatus.terminated}),
    EmployeeStatus.inactive: frozenset({EmployeeStatus.active, EmployeeStatus.terminated}),
    EmployeeStatus.terminated: frozenset(),
}

CANCELLATION_TRANSITIONS: dict[Enum, frozenset[Enum]] = {
    CancellationStatus.pending: frozenset({CancellationStatus.approved, CancellationStatus.denied}),
    CancellationStatus.approved: frozenset(),
    CancellationStatus.denied: frozenset(),
}

RESCHEDULE_TRANSITIONS: dict[Enum, frozenset[Enum]] = {
    RescheduleStatus.pending: frozenset({RescheduleStatus.approved, RescheduleStatus.denied}),
    RescheduleStatus.approved: frozenset(),
    RescheduleStatus.denied: frozenset(),
}

INQUIRY_TRANSITIONS: dict[Enum, frozenset[Enum]] = {
    InquiryStatus.new: frozenset({InquiryStatus.in_progress, InquiryStatus.urgent, InquiryStatus.resolved}),
    InquiryStatus.urgent: frozenset({InquiryStatus.in_progress, InquiryStatus.resolved}),
    InquiryStatus.in_progress: frozenset({InquiryStatus.urgent, InquiryStatus.resolved}),
    InquiryStatus.resolved: frozenset(),
}

TRANSITION_GRAPHS: dict[EntityKind, dict[Enum, frozenset[Enum]]] = {
    EntityKind.booking: BOOKING_TRANSITIONS,
    EntityKind.appointment: APPOINTMENT_TRANSITIONS,
    EntityKind.employee: EMPLOYEE_TRANSITIONS,
    EntityKind.cancellation_request: CANCELLATION_TRANSITIONS,
    EntityKind.reschedule_request: RESCHEDULE_TRANSITIONS,
    EntityKind.inquiry: INQUIRY_TRANSITIONS,
}


def coerce_status(kind: EntityKind | str, status: Enum | str) -> Enum:
    """Map a raw status string onto the closed enum of the entity kind."""
    entity_kind = coerce_kind(kind)
    enum_cls = STATUS_ENUMS[entity_kind]
    if isinstance(status, enum_cls):
        return status
    raw = status.value if isinstance(status, Enum) else status
    try:
        return enum_cls(str(raw).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown {entity_kind.value} status: {raw!r}")


def coerce_kind(kind: EntityKind | str) -> EntityKind:
    if isinstance(kind, EntityKind):
        return kind
    try:
        return EntityKind(str(kind).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown entity kind: {kind!r}")


def allowed_targets(kind: EntityKind | str, status: Enum | str) -> frozenset[Enum]:
    entity_kind = coerce_kind(kind)
    return TRANSITION_GRAPHS[entity_kind][coerce_status(entity_kind, status)]


def is_terminal(kind: EntityKind | str, status: Enum | str) -> bool:
    return not allowed_targets(kind, status)


def statuses(kind: EntityKind | str) -> list[Enum]:
    return list(STATUS_ENUMS[coerce_kind(kind)])
