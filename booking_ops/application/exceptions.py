from __future__ import annotations

from booking_ops.domain.entities.transition import RejectionReason, TransitionResult


class BookingOpsError(RuntimeError):
    """Base class for every error raised by the booking core."""
    pass


class ValidationError(BookingOpsError, ValueError):
    """Raised when caller input is malformed; the caller can correct it and retry."""
    pass


class InvalidDate(ValidationError):
    """Raised when a date or time string is not ISO YYYY-MM-DD / 24h HH:MM."""
    pass


class NotFound(BookingOpsError):
    """Raised when a referenced booking, appointment or customer request is missing."""
    pass


class Conflict(BookingOpsError):
    """Raised when the stored record changed since the caller read it; reload and retry."""
    pass


class WorkflowError(BookingOpsError):
    reason: RejectionReason = RejectionReason.invalid_transition

    def __init__(self, message: str, result: TransitionResult | None = None) -> None:
        super().__init__(message)
        self.result = result

    @staticmethod
    def from_result(result: TransitionResult) -> "WorkflowError":
        error_cls = _BY_REASON.get(result.reason, InvalidTransition)
        return error_cls(result.message, result)


class InvalidTransition(WorkflowError):
    reason = RejectionReason.invalid_transition


class TerminalState(WorkflowError):
    reason = RejectionReason.terminal_state


class PreconditionFailed(WorkflowError):
    reason = RejectionReason.precondition_failed


_BY_REASON: dict[RejectionReason | None, type[WorkflowError]] = {
    RejectionReason.invalid_transition: InvalidTransition,
    RejectionReason.terminal_state: TerminalState,
    RejectionReason.precondition_failed: PreconditionFailed,
}
