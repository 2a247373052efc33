from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from booking_ops.application.exceptions import Conflict, ValidationError, WorkflowError
from booking_ops.application.ports.booking_store import BookingStorePort
from booking_ops.application.ports.cancellation_store import CancellationStorePort
from booking_ops.application.ports.notifier import NotifierPort
from booking_ops.application.use_cases.booking_workflow import BookingWorkflowCoordinator
from booking_ops.application.utils.transition_engine import evaluate_transition, require_transition
from booking_ops.domain.entities.appointment import CancellationRequest
from booking_ops.domain.entities.status import BookingStatus, CancellationStatus, EntityKind
from booking_ops.domain.entities.transition import TransitionContext


class CancellationRequestUseCase:
    """Customers file cancellation requests; staff approve or deny them."""

    def __init__(
        self,
        requests: CancellationStorePort,
        bookings: BookingStorePort,
        workflow: BookingWorkflowCoordinator,
        notifier: NotifierPort,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._requests = requests
        self._bookings = bookings
        self._workflow = workflow
        self._notifier = notifier
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def file_request(self, appointment_id: str, customer_id: str, reason: str) -> CancellationRequest:
        reason_text = (reason or "").strip()
        if not reason_text:
            raise ValidationError("A cancellation reason is required")

        booking = self._bookings.load(appointment_id)
        if booking.customer_id != customer_id:
            raise ValidationError("Customers can only cancel their own appointments")

        result = evaluate_transition(
            EntityKind.booking,
            booking.status,
            BookingStatus.cancelled,
            TransitionContext(assigned_staff_count=len(booking.assigned_staff_ids)),
        )
        if not result.ok:
            raise WorkflowError.from_result(result)

        with self._lock:
            open_requests = [
                r for r in self._requests.for_appointment(appointment_id) if r.status == CancellationStatus.pending
            ]
            if open_requests:
                raise Conflict(f"Appointment {appointment_id} already has a pending cancellation request")

            request = CancellationRequest(
                id=uuid.uuid4().hex,
                appointment_id=appointment_id,
                customer_id=customer_id,
                reason=reason_text,
                created_at=self._clock(),
            )
            self._requests.save(request)

        self._logger.info(
            "Cancellation requested",
            extra={"booking_id": appointment_id, "request_id": request.id},
        )
        return request

    def resolve(self, request_id: str, approve: bool, staff_id: str, note: str | None = None) -> CancellationRequest:
        target = CancellationStatus.approved if approve else CancellationStatus.denied

        with self._lock:
            request = self._requests.load(request_id)
            require_transition(EntityKind.cancellation_request, request.status, target)

            if approve:
                # raises if the booking has moved on; the request then stays pending
                self._workflow.transition(request.appointment_id, BookingStatus.cancelled, actor_id=staff_id)

            resolved = replace(
                request,
                status=target,
                resolved_at=self._clock(),
                resolved_by=staff_id,
                resolution_note=(note or "").strip() or None,
            )
            self._requests.save(resolved)

        self._logger.info(
            "Cancellation request resolved",
            extra={"request_id": request_id, "booking_id": request.appointment_id, "status": target.value},
        )
        try:
            self._notifier.notify(
                request.customer_id,
                f"cancellation_{target.value}",
                {"request_id": request_id, "booking_id": request.appointment_id, "note": resolved.resolution_note},
            )
        except Exception as e:
            self._logger.error("Notification failed", extra={"request_id": request_id, "error": str(e)})
        return resolved

    def history(self, appointment_id: str) -> list[CancellationRequest]:
        return self._requests.for_appointment(appointment_id)
