from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from booking_ops.domain.entities.appointment import Appointment, CancellationRequest, RescheduleRequest
from booking_ops.domain.entities.booking import Booking
from booking_ops.domain.entities.calendar import CalendarCell
from booking_ops.domain.entities.transition import PendingTransition


def _hhmm(value) -> str | None:
    return value.strftime("%H:%M") if value else None


class CreateBookingSchema(BaseModel):
    customer_id: str
    service_code: str
    branch_id: str
    scheduled_date: str
    address: str
    scheduled_time: str | None = None
    duration_minutes: int | None = None
    amount: Decimal | None = None
    notes: str | None = None
    customer_name: str = ""


class SubmissionSchema(BaseModel):
    booking_id: str
    amount: Decimal
    requires_payment: bool


class BookingSchema(BaseModel):
    id: str
    customer_id: str
    customer_name: str
    service_code: str
    service_name: str
    branch_id: str
    scheduled_date: str
    scheduled_time: str | None
    duration_minutes: int
    address: str
    amount: Decimal
    status: str
    payment_status: str
    assigned_staff_ids: list[str]
    notes: str | None
    version: int
    created_at: str
    modified_at: str

    @staticmethod
    def from_entity(booking: Booking) -> "BookingSchema":
        return BookingSchema(
            id=booking.id,
            customer_id=booking.customer_id,
            customer_name=booking.customer_name,
            service_code=booking.service_code,
            service_name=booking.service_name,
            branch_id=booking.branch_id,
            scheduled_date=booking.scheduled_date.isoformat(),
            scheduled_time=_hhmm(booking.scheduled_time),
            duration_minutes=booking.duration_minutes,
            address=booking.address,
            amount=booking.amount,
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            assigned_staff_ids=list(booking.assigned_staff_ids),
            notes=booking.notes,
            version=booking.version,
            created_at=booking.created_at.isoformat(),
            modified_at=booking.modified_at.isoformat(),
        )


class BookingPageSchema(BaseModel):
    items: list[BookingSchema]
    total_count: int
    total_pages: int
    page: int
    page_size: int


class PaymentSessionRequestSchema(BaseModel):
    return_url: str | None = None


class PaymentSessionSchema(BaseModel):
    session_id: str
    session_url: str


class TransitionRequestSchema(BaseModel):
    status: str
    actor_id: str | None = None
    expected_version: int | None = None
    commit: bool = True


class PendingTransitionSchema(BaseModel):
    booking_id: str
    current: str
    requested: str
    expected_version: int
    title: str
    description: str

    @staticmethod
    def from_entity(pending: PendingTransition) -> "PendingTransitionSchema":
        return PendingTransitionSchema(
            booking_id=pending.booking_id,
            current=pending.current,
            requested=pending.requested,
            expected_version=pending.expected_version,
            title=pending.title,
            description=pending.description,
        )


class TransitionResponseSchema(BaseModel):
    pending: PendingTransitionSchema
    booking: BookingSchema | None = None


class AssignStaffSchema(BaseModel):
    staff_ids: list[str] = Field(min_length=1)


class AppointmentSchema(BaseModel):
    id: str
    title: str
    customer: str
    address: str
    date: str
    time: str | None
    duration: str
    branch: str
    staff: list[str]
    status: str
    notes: str | None = None

    @staticmethod
    def from_entity(appointment: Appointment) -> "AppointmentSchema":
        return AppointmentSchema(
            id=appointment.id,
            title=appointment.title,
            customer=appointment.customer,
            address=appointment.address,
            date=appointment.date.isoformat(),
            time=_hhmm(appointment.time),
            duration=appointment.duration_label,
            branch=appointment.branch,
            staff=list(appointment.staff),
            status=appointment.status.value,
            notes=appointment.notes,
        )


class CalendarCellSchema(BaseModel):
    date: str
    is_current_period: bool
    is_today: bool
    appointments: list[AppointmentSchema]

    @staticmethod
    def from_entity(cell: CalendarCell) -> "CalendarCellSchema":
        return CalendarCellSchema(
            date=cell.key,
            is_current_period=cell.is_current_period,
            is_today=cell.is_today,
            appointments=[AppointmentSchema.from_entity(a) for a in cell.appointments],
        )


class FileCancellationSchema(BaseModel):
    appointment_id: str
    customer_id: str
    reason: str


class ResolveCancellationSchema(BaseModel):
    approve: bool
    staff_id: str
    note: str | None = None


class CancellationSchema(BaseModel):
    id: str
    appointment_id: str
    customer_id: str
    reason: str
    status: str
    created_at: str
    resolved_at: str | None = None
    resolved_by: str | None = None
    resolution_note: str | None = None

    @staticmethod
    def from_entity(request: CancellationRequest) -> "CancellationSchema":
        return CancellationSchema(
            id=request.id,
            appointment_id=request.appointment_id,
            customer_id=request.customer_id,
            reason=request.reason,
            status=request.status.value,
            created_at=request.created_at.isoformat(),
            resolved_at=request.resolved_at.isoformat() if request.resolved_at else None,
            resolved_by=request.resolved_by,
            resolution_note=request.resolution_note,
        )


class FileRescheduleSchema(BaseModel):
    appointment_id: str
    customer_id: str
    requested_date: str
    requested_time: str
    reason: str


class ResolveRescheduleSchema(BaseModel):
    approve: bool
    staff_id: str
    note: str | None = None


class RescheduleSchema(BaseModel):
    id: str
    appointment_id: str
    customer_id: str
    requested_date: str
    requested_time: str
    reason: str
    status: str
    created_at: str
    resolved_at: str | None = None
    resolved_by: str | None = None
    resolution_note: str | None = None
    previous_date: str | None = None
    previous_time: str | None = None

    @staticmethod
    def from_entity(request: RescheduleRequest) -> "RescheduleSchema":
        return RescheduleSchema(
            id=request.id,
            appointment_id=request.appointment_id,
            customer_id=request.customer_id,
            requested_date=request.requested_date.isoformat(),
            requested_time=_hhmm(request.requested_time),
            reason=request.reason,
            status=request.status.value,
            created_at=request.created_at.isoformat(),
            resolved_at=request.resolved_at.isoformat() if request.resolved_at else None,
            resolved_by=request.resolved_by,
            resolution_note=request.resolution_note,
            previous_date=request.previous_date.isoformat() if request.previous_date else None,
            previous_time=_hhmm(request.previous_time),
        )
