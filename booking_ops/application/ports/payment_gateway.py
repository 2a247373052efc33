from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from booking_ops.domain.entities.payment import PaymentSession


class PaymentGatewayPort(ABC):
    @abstractmethod
    def create_session(self, booking_id: str, amount: Decimal, return_url: str | None) -> PaymentSession:
        """Open a hosted checkout session. The result arrives later as a PaymentResult event."""
        raise NotImplementedError
