from enum import Enum


class EntityKind(str, Enum):
    booking = "booking"
    appointment = "appointment"
    cancellation_request = "cancellation_request"
    reschedule_request = "reschedule_request"
    employee = "employee"
    inquiry = "inquiry"


class BookingStatus(str, Enum):
    draft = "draft"
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"
    rejected = "rejected"
    expired = "expired"  # abandoned draft, cancelled-equivalent


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    unpaid = "unpaid"
    paid = "paid"
    refund_due = "refund-due"  # charged after the booking closed
    refunded = "refunded"


class CancellationStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    denied = "denied"


class RescheduleStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    denied = "denied"


class EmployeeStatus(str, Enum):
    probation = "probation"
    active = "active"
    inactive = "inactive"
    terminated = "terminated"


class InquiryStatus(str, Enum):
    new = "new"
    in_progress = "in-progress"
    urgent = "urgent"
    resolved = "resolved"


STATUS_ENUMS: dict[EntityKind, type[Enum]] = {
    EntityKind.booking: BookingStatus,
    EntityKind.appointment: AppointmentStatus,
    EntityKind.cancellation_request: CancellationStatus,
    EntityKind.reschedule_request: RescheduleStatus,
    EntityKind.employee: EmployeeStatus,
    EntityKind.inquiry: InquiryStatus,
}
