from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from booking_ops.domain.entities.payment import PaymentResult

SUCCESS_EVENTS = {"checkout.session.completed", "payment_intent.succeeded"}
FAILURE_EVENTS = {"checkout.session.expired", "payment_intent.payment_failed"}


class PaymentEventDTO(BaseModel):
    """
    Inbound payment webhook body.

    Accepts provider events (`type` + `data.object`) and the plain
    `{booking_id, payment_token, success}` shape sent by internal callers.
    """

    id: str | None = None
    type: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)

    booking_id: str | None = None
    payment_token: str | None = None
    success: bool | None = None
    failure_reason: str | None = None

    def to_result(self) -> PaymentResult | None:
        if self.booking_id and self.payment_token and self.success is not None:
            return PaymentResult(
                booking_id=self.booking_id,
                payment_token=self.payment_token,
                success=self.success,
                failure_reason=self.failure_reason,
            )

        if self.type not in SUCCESS_EVENTS | FAILURE_EVENTS:
            return None

        obj = self.data.get("object") or {}
        metadata = obj.get("metadata") or {}
        booking_id = metadata.get("booking_id")
        # both checkout and intent events for one payment resolve to the intent id
        if self.type.startswith("payment_intent."):
            token = obj.get("id")
        else:
            token = obj.get("payment_intent") or obj.get("id")

        if not (booking_id and token):
            return None

        failure_reason = None
        if self.type in FAILURE_EVENTS:
            failure_reason = ((obj.get("last_payment_error") or {}).get("message")) or self.type

        return PaymentResult(
            booking_id=str(booking_id),
            payment_token=str(token),
            success=self.type in SUCCESS_EVENTS,
            failure_reason=failure_reason,
        )
