from __future__ import annotations

from enum import Enum

from booking_ops.application.exceptions import WorkflowError
from booking_ops.application.utils.status_registry import TRANSITION_GRAPHS, coerce_kind, coerce_status
from booking_ops.domain.entities.status import BookingStatus, EntityKind, PaymentStatus
from booking_ops.domain.entities.transition import RejectionReason, TransitionContext, TransitionResult


def evaluate_transition(
    kind: EntityKind | str,
    current: Enum | str,
    requested: Enum | str,
    context: TransitionContext | None = None,
) -> TransitionResult:
    """
    Decide whether `current -> requested` is legal for the entity kind.

    Pure: no I/O, no side effects. Terminal states are reported before graph
    membership, so a terminal status rejects even a request for itself.
    """
    entity_kind = coerce_kind(kind)
    src = coerce_status(entity_kind, current)
    dst = coerce_status(entity_kind, requested)
    ctx = context or TransitionContext()
    graph = TRANSITION_GRAPHS[entity_kind]

    if not graph[src]:
        return _rejected(
            entity_kind, src, dst, RejectionReason.terminal_state,
            f"{entity_kind.value} is {src.value}; no further status changes are allowed",
        )

    if dst not in graph[src]:
        return _rejected(
            entity_kind, src, dst, RejectionReason.invalid_transition,
            f"{entity_kind.value} cannot move from {src.value} to {dst.value}",
        )

    failure = _precondition_failure(entity_kind, src, dst, ctx)
    if failure:
        return _rejected(entity_kind, src, dst, RejectionReason.precondition_failed, failure)

    return TransitionResult(kind=entity_kind, current=src.value, requested=dst.value)


def require_transition(
    kind: EntityKind | str,
    current: Enum | str,
    requested: Enum | str,
    context: TransitionContext | None = None,
) -> TransitionResult:
    result = evaluate_transition(kind, current, requested, context)
    if not result.ok:
        raise WorkflowError.from_result(result)
    return result


def _precondition_failure(kind: EntityKind, src: Enum, dst: Enum, ctx: TransitionContext) -> str | None:
    if kind in (EntityKind.booking, EntityKind.appointment):
        if dst.value == BookingStatus.in_progress.value and ctx.assigned_staff_count <= 0:
            return "at least one staff member must be assigned before work can start"
    if kind == EntityKind.booking and src == BookingStatus.draft and dst == BookingStatus.pending:
        if ctx.payment_status != PaymentStatus.paid:
            return "booking cannot leave draft until payment succeeds"
    return None


def _rejected(kind: EntityKind, src: Enum, dst: Enum, reason: RejectionReason, message: str) -> TransitionResult:
    return TransitionResult(kind=kind, current=src.value, requested=dst.value, reason=reason, message=message)
