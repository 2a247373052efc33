from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import date, datetime, time, timezone
from typing import Callable

from booking_ops.application.exceptions import Conflict, PreconditionFailed, TerminalState, ValidationError
from booking_ops.application.ports.booking_store import BookingStorePort
from booking_ops.application.ports.notifier import NotifierPort
from booking_ops.application.ports.reschedule_store import RescheduleStorePort
from booking_ops.application.use_cases.booking_workflow import BookingWorkflowCoordinator
from booking_ops.application.utils.appointment_aggregator import slot_labels
from booking_ops.application.utils.calendar_grid import parse_hhmm, parse_iso_date
from booking_ops.application.utils.status_registry import is_terminal
from booking_ops.application.utils.transition_engine import require_transition
from booking_ops.domain.entities.appointment import RescheduleRequest
from booking_ops.domain.entities.status import BookingStatus, EntityKind, RescheduleStatus

REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 500


class RescheduleRequestUseCase:
    """
    Customers ask to move a confirmed appointment to another slot; staff
    approve or deny. Approval moves the booking through the coordinator, so
    the move is serialized with every other change to that booking.
    """

    def __init__(
        self,
        requests: RescheduleStorePort,
        bookings: BookingStorePort,
        workflow: BookingWorkflowCoordinator,
        notifier: NotifierPort,
        clock: Callable[[], datetime] | None = None,
        slot_start: str = "08:00",
        slot_end: str = "18:00",
        slot_minutes: int = 30,
    ) -> None:
        self._requests = requests
        self._bookings = bookings
        self._workflow = workflow
        self._notifier = notifier
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._slots = slot_labels(slot_start, slot_end, slot_minutes)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def file_request(
        self,
        appointment_id: str,
        customer_id: str,
        requested_date: date | str,
        requested_time: time | str,
        reason: str,
    ) -> RescheduleRequest:
        reason_text = (reason or "").strip()
        if not REASON_MIN_LENGTH <= len(reason_text) <= REASON_MAX_LENGTH:
            raise ValidationError(
                f"A reschedule reason must be {REASON_MIN_LENGTH} to {REASON_MAX_LENGTH} characters"
            )

        new_date = parse_iso_date(requested_date)
        if new_date < self._clock().date():
            raise ValidationError("Requested date must be today or in the future")
        new_time = parse_hhmm(requested_time)
        if new_time.strftime("%H:%M") not in self._slots:
            raise ValidationError(f"{new_time.strftime('%H:%M')} is not a bookable time slot")

        booking = self._bookings.load(appointment_id)
        if booking.customer_id != customer_id:
            raise ValidationError("Customers can only reschedule their own appointments")
        if is_terminal(EntityKind.booking, booking.status):
            raise TerminalState(f"booking is {booking.status.value}; it can no longer be rescheduled")
        if booking.status != BookingStatus.confirmed:
            raise PreconditionFailed(f"only confirmed bookings can be rescheduled, not {booking.status.value}")

        with self._lock:
            open_requests = [
                r for r in self._requests.for_appointment(appointment_id) if r.status == RescheduleStatus.pending
            ]
            if open_requests:
                raise Conflict(f"Appointment {appointment_id} already has a pending reschedule request")

            request = RescheduleRequest(
                id=uuid.uuid4().hex,
                appointment_id=appointment_id,
                customer_id=customer_id,
                requested_date=new_date,
                requested_time=new_time,
                reason=reason_text,
                created_at=self._clock(),
            )
            self._requests.save(request)

        self._logger.info(
            "Reschedule requested",
            extra={"booking_id": appointment_id, "request_id": request.id, "date": new_date.isoformat()},
        )
        return request

    def resolve(self, request_id: str, approve: bool, staff_id: str, note: str | None = None) -> RescheduleRequest:
        target = RescheduleStatus.approved if approve else RescheduleStatus.denied

        with self._lock:
            request = self._requests.load(request_id)
            require_transition(EntityKind.reschedule_request, request.status, target)

            previous_date, previous_time = None, None
            if approve:
                booking = self._bookings.load(request.appointment_id)
                # raises if the booking has moved on; the request then stays pending
                self._workflow.reschedule(
                    booking.id,
                    request.requested_date,
                    request.requested_time,
                    actor_id=staff_id,
                    expected_version=booking.version,
                )
                previous_date, previous_time = booking.scheduled_date, booking.scheduled_time

            resolved = replace(
                request,
                status=target,
                resolved_at=self._clock(),
                resolved_by=staff_id,
                resolution_note=(note or "").strip() or None,
                previous_date=previous_date,
                previous_time=previous_time,
            )
            self._requests.save(resolved)

        self._logger.info(
            "Reschedule request resolved",
            extra={"request_id": request_id, "booking_id": request.appointment_id, "status": target.value},
        )
        try:
            self._notifier.notify(
                request.customer_id,
                f"reschedule_{target.value}",
                {
                    "request_id": request_id,
                    "booking_id": request.appointment_id,
                    "date": request.requested_date.isoformat(),
                    "time": request.requested_time.strftime("%H:%M"),
                    "note": resolved.resolution_note,
                },
            )
        except Exception as e:
            self._logger.error("Notification failed", extra={"request_id": request_id, "error": str(e)})
        return resolved

    def history(self, appointment_id: str) -> list[RescheduleRequest]:
        return self._requests.for_appointment(appointment_id)
