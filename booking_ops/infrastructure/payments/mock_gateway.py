from __future__ import annotations

import logging
from decimal import Decimal

from booking_ops.application.ports.payment_gateway import PaymentGatewayPort
from booking_ops.domain.entities.payment import PaymentSession


class MockPaymentGateway(PaymentGatewayPort):
    def __init__(self, base_url: str = "https://checkout.local") -> None:
        self._base_url = base_url.rstrip("/")
        self._sessions: dict[str, tuple[str, Decimal]] = {}
        self._logger = logging.getLogger(__name__)

    def create_session(self, booking_id: str, amount: Decimal, return_url: str | None) -> PaymentSession:
        session_id = f"mock_session_{len(self._sessions) + 1}"
        self._sessions[session_id] = (booking_id, amount)
        self._logger.info(
            "Mock payment session created",
            extra={"booking_id": booking_id, "session_id": session_id, "amount": str(amount)},
        )
        return PaymentSession(session_id=session_id, session_url=f"{self._base_url}/{session_id}")

    def session_for(self, session_id: str) -> tuple[str, Decimal] | None:
        return self._sessions.get(session_id)
