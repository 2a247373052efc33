from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from booking_ops.domain.entities.status import EntityKind, PaymentStatus


class RejectionReason(str, Enum):
    invalid_transition = "invalid-transition"
    terminal_state = "terminal-state"
    precondition_failed = "precondition-failed"


@dataclass(frozen=True)
class TransitionContext:
    assigned_staff_count: int = 0
    payment_status: PaymentStatus | None = None


@dataclass(frozen=True)
class TransitionResult:
    kind: EntityKind
    current: str
    requested: str
    reason: RejectionReason | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.reason is None


@dataclass(frozen=True)
class PendingTransition:
    """A validated but not yet applied status change, shown to the actor for confirmation."""

    booking_id: str
    current: str
    requested: str
    expected_version: int
    title: str
    description: str
    actor_id: str | None = None
