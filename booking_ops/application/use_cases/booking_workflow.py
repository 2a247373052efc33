from __future__ import annotations

import logging
import threading
import uuid
import weakref
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable

from booking_ops.application.exceptions import (
    BookingOpsError,
    Conflict,
    InvalidTransition,
    PreconditionFailed,
    TerminalState,
    ValidationError,
    WorkflowError,
)
from booking_ops.application.ports.booking_store import BookingStorePort
from booking_ops.application.ports.notifier import NotifierPort
from booking_ops.application.ports.payment_gateway import PaymentGatewayPort
from booking_ops.application.ports.service_catalog import ServiceCatalogPort
from booking_ops.application.utils.pagination import Page, paginate
from booking_ops.application.utils.status_registry import coerce_status, is_terminal
from booking_ops.application.utils.transition_engine import require_transition
from booking_ops.domain.entities.booking import STAFFED_STATUSES, Booking, BookingDraft, BookingQuery
from booking_ops.domain.entities.payment import PaymentResult, PaymentSession
from booking_ops.domain.entities.status import BookingStatus, EntityKind, PaymentStatus
from booking_ops.domain.entities.transition import PendingTransition, TransitionContext

DEFAULT_DURATION_MINUTES = 60
CENTS = Decimal("0.01")

# reached only through the payment workflow and the draft sweep
PAYMENT_ONLY_STATUSES = frozenset({BookingStatus.pending, BookingStatus.expired})

BOOKING_SEARCH_FIELDS = ("id", "customer_name", "service_name", "address")

STATUS_ACTIONS: dict[BookingStatus, tuple[str, str]] = {
    BookingStatus.confirmed: ("Confirm Booking", "Are you sure you want to confirm this booking?"),
    BookingStatus.in_progress: ("Start Service", "Are you sure you want to mark this booking as in progress?"),
    BookingStatus.completed: ("Mark as Completed", "Are you sure you want to mark this booking as completed?"),
    BookingStatus.cancelled: ("Cancel Booking", "Are you sure you want to cancel this booking?"),
    BookingStatus.rejected: ("Reject Booking", "Are you sure you want to reject this booking?"),
}

NOTIFY_TEMPLATES: dict[BookingStatus, str] = {
    BookingStatus.pending: "booking_payment_received",
    BookingStatus.confirmed: "booking_confirmed",
    BookingStatus.completed: "booking_completed",
    BookingStatus.cancelled: "booking_cancelled",
    BookingStatus.rejected: "booking_rejected",
}


@dataclass(frozen=True)
class SubmissionResult:
    booking_id: str
    amount: Decimal
    requires_payment: bool


@dataclass(frozen=True)
class BookingListQuery:
    search: str | None = None
    status: str | None = "all"
    branch: str | None = "all"
    sort_key: str = "scheduled_date"
    sort_dir: str = "desc"
    page: int = 1
    page_size: int = 10


class BookingWorkflowCoordinator:
    """
    Drives a booking from submission through the payment handshake to staff actions.

    Every status change goes through the transition engine. Changes to one
    booking are serialized with a per-booking lock, and the store's version
    check turns writes based on a stale read into a Conflict.
    """

    def __init__(
        self,
        store: BookingStorePort,
        catalog: ServiceCatalogPort,
        payments: PaymentGatewayPort,
        notifier: NotifierPort,
        default_return_url: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._payments = payments
        self._notifier = notifier
        self._default_return_url = default_return_url
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
        self._lock_lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def submit_booking(self, draft: BookingDraft) -> SubmissionResult:
        self._validate_draft(draft)
        entry = self._catalog.get_service(draft.service_code)
        if draft.amount is None and entry is None:
            raise ValidationError(f"Unknown service {draft.service_code!r}; cannot price booking")

        amount = _money(draft.amount if draft.amount is not None else entry.base_price)
        duration = draft.duration_minutes or (entry.duration_minutes if entry else DEFAULT_DURATION_MINUTES)
        requires_payment = amount > 0
        now = self._clock()

        booking = Booking(
            id=uuid.uuid4().hex,
            customer_id=draft.customer_id.strip(),
            service_code=draft.service_code.strip(),
            branch_id=draft.branch_id.strip(),
            scheduled_date=draft.scheduled_date,
            scheduled_time=draft.scheduled_time,
            duration_minutes=duration,
            address=draft.address.strip(),
            amount=amount,
            status=BookingStatus.draft if requires_payment else BookingStatus.pending,
            notes=draft.notes,
            customer_name=draft.customer_name,
            service_name=entry.display_name if entry else draft.service_code,
            created_at=now,
            modified_at=now,
        )
        if not self._store.save(booking, expected_version=None):
            raise Conflict(f"Booking {booking.id} already exists")

        self._logger.info(
            "Booking submitted",
            extra={"booking_id": booking.id, "status": booking.status.value, "amount": str(amount)},
        )
        return SubmissionResult(booking_id=booking.id, amount=amount, requires_payment=requires_payment)

    def create_payment_session(self, booking_id: str, return_url: str | None = None) -> PaymentSession:
        with self._get_lock(booking_id):
            booking = self._store.load(booking_id)
            _require_draft(booking)

        # the provider call runs unlocked; the version check below catches changes made meanwhile
        session = self._payments.create_session(booking.id, booking.amount, return_url or self._default_return_url)

        with self._get_lock(booking_id):
            current = self._store.load(booking_id)
            if current.version != booking.version:
                self._logger.warning(
                    "Booking changed while the payment session was created",
                    extra={"booking_id": booking_id, "session_id": session.session_id, "status": current.status.value},
                )
                raise Conflict(f"Booking {booking_id} changed while the payment session was created")
            self._save(replace(current, payment_session_id=session.session_id), current)

        self._logger.info(
            "Payment session created",
            extra={"booking_id": booking_id, "session_id": session.session_id},
        )
        return session

    def confirm_payment(self, result: PaymentResult) -> Booking:
        """
        Apply a payment result. Safe to call repeatedly with the same token:
        once a booking has moved past draft on that token, later deliveries
        return the stored booking unchanged.

        A successful charge for a booking that already closed unpaid (expired,
        cancelled or rejected) is kept and flagged `refund-due` instead of
        being rejected, so the provider stops redelivering it.
        """
        if not (result.payment_token or "").strip():
            raise ValidationError("payment_token is required")

        with self._get_lock(result.booking_id):
            booking = self._store.load(result.booking_id)

            if booking.payment_token == result.payment_token and booking.status != BookingStatus.draft:
                self._logger.info(
                    "Duplicate payment result ignored",
                    extra={"booking_id": booking.id, "payment_token": result.payment_token},
                )
                return booking

            if not result.success:
                self._logger.warning(
                    "Payment failed; booking stays in draft",
                    extra={
                        "booking_id": booking.id,
                        "payment_token": result.payment_token,
                        "reason": result.failure_reason,
                    },
                )
                return booking

            refund_due = (
                is_terminal(EntityKind.booking, booking.status) and booking.payment_status == PaymentStatus.unpaid
            )
            if refund_due:
                updated = self._save(
                    replace(booking, payment_status=PaymentStatus.refund_due, payment_token=result.payment_token),
                    booking,
                )
            else:
                try:
                    require_transition(
                        EntityKind.booking,
                        booking.status,
                        BookingStatus.pending,
                        TransitionContext(payment_status=PaymentStatus.paid),
                    )
                except WorkflowError as e:
                    self._logger.error(
                        "Payment succeeded for a booking that cannot accept it",
                        extra={"booking_id": booking.id, "status": booking.status.value, "reason": e.reason.value},
                    )
                    raise

                updated = self._save(
                    replace(
                        booking,
                        status=BookingStatus.pending,
                        payment_status=PaymentStatus.paid,
                        payment_token=result.payment_token,
                    ),
                    booking,
                )

        if refund_due:
            self._logger.error(
                "Payment received for a closed booking; refund required",
                extra={"booking_id": updated.id, "status": updated.status.value, "payment_token": result.payment_token},
            )
            self._notify(
                updated.customer_id,
                "booking_refund_due",
                {"booking_id": updated.id, "status": updated.status.value, "amount": str(updated.amount)},
            )
            return updated

        self._logger.info(
            "Payment confirmed",
            extra={"booking_id": updated.id, "status": updated.status.value, "payment_token": result.payment_token},
        )
        self._notify_status(updated)
        return updated

    def request_transition(
        self,
        booking_id: str,
        requested: BookingStatus | str,
        actor_id: str | None = None,
        expected_version: int | None = None,
    ) -> PendingTransition:
        """Validate a staff/customer status change without applying it."""
        target = coerce_status(EntityKind.booking, requested)
        booking = self._store.load(booking_id)
        if expected_version is not None and booking.version != expected_version:
            raise Conflict(f"Booking {booking_id} changed since it was read")

        self._check_requested(booking, target)
        title, description = STATUS_ACTIONS.get(target, ("", ""))
        return PendingTransition(
            booking_id=booking.id,
            current=booking.status.value,
            requested=target.value,
            expected_version=booking.version,
            title=title,
            description=description,
            actor_id=actor_id,
        )

    def commit_transition(self, pending: PendingTransition) -> Booking:
        with self._get_lock(pending.booking_id):
            booking = self._store.load(pending.booking_id)
            if booking.version != pending.expected_version or booking.status.value != pending.current:
                raise Conflict(
                    f"Booking {booking.id} is now {booking.status.value} (version {booking.version}); "
                    f"expected {pending.current} (version {pending.expected_version})"
                )
            target = coerce_status(EntityKind.booking, pending.requested)
            self._check_requested(booking, target)

            staff = booking.assigned_staff_ids if target in STAFFED_STATUSES else ()
            updated = self._save(replace(booking, status=target, assigned_staff_ids=staff), booking)

        self._logger.info(
            "Booking status changed",
            extra={
                "booking_id": updated.id,
                "status": updated.status.value,
                "previous": pending.current,
                "actor_id": pending.actor_id,
            },
        )
        self._notify_status(updated)
        return updated

    def transition(self, booking_id: str, requested: BookingStatus | str, actor_id: str | None = None) -> Booking:
        return self.commit_transition(self.request_transition(booking_id, requested, actor_id))

    def assign_staff(self, booking_id: str, staff_ids: list[str]) -> Booking:
        unique: list[str] = []
        for staff_id in staff_ids:
            cleaned = (staff_id or "").strip()
            if cleaned and cleaned not in unique:
                unique.append(cleaned)
        if not unique:
            raise ValidationError("At least one staff member is required")

        with self._get_lock(booking_id):
            booking = self._store.load(booking_id)
            if booking.status not in (BookingStatus.confirmed, BookingStatus.in_progress):
                raise PreconditionFailed(
                    f"staff can only be assigned to confirmed or in-progress bookings, not {booking.status.value}"
                )
            updated = self._save(replace(booking, assigned_staff_ids=tuple(unique)), booking)

        self._logger.info("Staff assigned", extra={"booking_id": booking_id, "staff_count": len(unique)})
        return updated

    def reschedule(
        self,
        booking_id: str,
        new_date: date,
        new_time: time | None,
        actor_id: str | None = None,
        expected_version: int | None = None,
    ) -> Booking:
        """Move a confirmed booking to a new slot. The status is unchanged."""
        with self._get_lock(booking_id):
            booking = self._store.load(booking_id)
            if expected_version is not None and booking.version != expected_version:
                raise Conflict(f"Booking {booking_id} changed since it was read")
            if is_terminal(EntityKind.booking, booking.status):
                raise TerminalState(f"booking is {booking.status.value}; it can no longer be rescheduled")
            if booking.status != BookingStatus.confirmed:
                raise PreconditionFailed(f"only confirmed bookings can be rescheduled, not {booking.status.value}")
            updated = self._save(replace(booking, scheduled_date=new_date, scheduled_time=new_time), booking)

        self._logger.info(
            "Booking rescheduled",
            extra={
                "booking_id": booking_id,
                "previous_date": booking.scheduled_date.isoformat(),
                "date": new_date.isoformat(),
                "actor_id": actor_id,
            },
        )
        self._notify(
            updated.customer_id,
            "booking_rescheduled",
            {
                "booking_id": updated.id,
                "service": updated.service_name,
                "date": new_date.isoformat(),
                "time": new_time.strftime("%H:%M") if new_time else None,
            },
        )
        return updated

    def reap_stale_drafts(self, older_than: timedelta, now: datetime | None = None) -> list[str]:
        """Expire drafts whose payment never arrived. Meant for a periodic background job."""
        cutoff = (now or self._clock()) - older_than
        stale = self._store.query(BookingQuery(statuses=(BookingStatus.draft,), created_before=cutoff))
        expired: list[str] = []

        for candidate in stale:
            try:
                with self._get_lock(candidate.id):
                    booking = self._store.load(candidate.id)
                    if booking.status != BookingStatus.draft:
                        continue
                    require_transition(EntityKind.booking, booking.status, BookingStatus.expired)
                    self._save(replace(booking, status=BookingStatus.expired), booking)
                expired.append(candidate.id)
            except BookingOpsError as e:
                self._logger.warning(
                    "Could not expire stale draft",
                    extra={"booking_id": candidate.id, "error": str(e)},
                )

        if expired:
            self._logger.info("Stale drafts expired", extra={"count": len(expired)})
        return expired

    def list_bookings(self, query: BookingListQuery, criteria: BookingQuery | None = None) -> Page[Booking]:
        return paginate(
            self._store.query(criteria or BookingQuery()),
            search_term=query.search,
            search_fields=BOOKING_SEARCH_FIELDS,
            filters={"status": query.status, "branch_id": query.branch},
            sort_key=query.sort_key,
            sort_dir=query.sort_dir,
            page=query.page,
            page_size=query.page_size,
        )

    def get_booking(self, booking_id: str) -> Booking:
        return self._store.load(booking_id)

    def _get_lock(self, booking_id: str) -> threading.Lock:
        # entries vanish once no caller holds the lock
        with self._lock_lock:
            lock = self._locks.get(booking_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[booking_id] = lock
            return lock

    def _check_requested(self, booking: Booking, target: BookingStatus) -> None:
        if target in PAYMENT_ONLY_STATUSES and not is_terminal(EntityKind.booking, booking.status):
            raise InvalidTransition(f"{target.value} is only reached through the payment workflow")
        require_transition(EntityKind.booking, booking.status, target, self._context(booking))

    def _save(self, updated: Booking, read: Booking) -> Booking:
        stamped = replace(updated, version=read.version + 1, modified_at=self._clock())
        problems = stamped.invariant_violations()
        if problems:
            raise ValidationError("; ".join(problems))
        if not self._store.save(stamped, expected_version=read.version):
            raise Conflict(f"Booking {read.id} was modified concurrently")
        return stamped

    @staticmethod
    def _context(booking: Booking) -> TransitionContext:
        return TransitionContext(
            assigned_staff_count=len(booking.assigned_staff_ids),
            payment_status=booking.payment_status,
        )

    def _notify_status(self, booking: Booking) -> None:
        template = NOTIFY_TEMPLATES.get(booking.status)
        if not template:
            return
        self._notify(
            booking.customer_id,
            template,
            {
                "booking_id": booking.id,
                "status": booking.status.value,
                "service": booking.service_name,
                "date": booking.scheduled_date.isoformat(),
                "time": booking.scheduled_time.strftime("%H:%M") if booking.scheduled_time else None,
            },
        )

    def _notify(self, recipient: str, template: str, data: dict[str, Any]) -> None:
        try:
            self._notifier.notify(recipient, template, data)
        except Exception as e:
            # the status change already stands
            self._logger.error(
                "Notification failed",
                extra={"recipient": recipient, "template": template, "error": str(e)},
            )

    def _validate_draft(self, draft: BookingDraft) -> None:
        missing = [
            name
            for name in ("customer_id", "service_code", "branch_id", "address")
            if not (getattr(draft, name) or "").strip()
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {missing}")
        if draft.duration_minutes is not None and draft.duration_minutes <= 0:
            raise ValidationError(f"duration_minutes must be positive, got {draft.duration_minutes}")
        if draft.amount is not None and _money(draft.amount) < 0:
            raise ValidationError(f"amount must not be negative, got {draft.amount}")


def _require_draft(booking: Booking) -> None:
    if booking.status == BookingStatus.draft:
        return
    message = f"booking is {booking.status.value}; payment is only taken for drafts"
    if is_terminal(EntityKind.booking, booking.status):
        raise TerminalState(message)
    raise InvalidTransition(message)


def _money(value: Any) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Not a valid amount: {value!r}")
    if not amount.is_finite():
        raise ValidationError(f"Not a valid amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
