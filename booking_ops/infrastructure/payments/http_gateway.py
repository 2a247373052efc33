from __future__ import annotations

import logging
from decimal import Decimal

import httpx

from booking_ops.application.ports.payment_gateway import PaymentGatewayPort
from booking_ops.core.config import settings
from booking_ops.domain.entities.payment import PaymentSession


class HttpPaymentGateway(PaymentGatewayPort):
    """Hosted checkout over a Stripe-compatible form-encoded REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        currency: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key or settings.PAYMENT_API_KEY
        self._base_url = (base_url or settings.PAYMENT_BASE_URL).rstrip("/")
        self._currency = currency or settings.PAYMENT_CURRENCY
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

        if not self._api_key:
            raise ValueError("PAYMENT_API_KEY is required for the HTTP payment gateway")

    def create_session(self, booking_id: str, amount: Decimal, return_url: str | None) -> PaymentSession:
        base_return = (return_url or settings.PAYMENT_RETURN_URL).rstrip("/")
        payload = {
            "mode": "payment",
            "payment_method_types[0]": "card",
            "line_items[0][quantity]": "1",
            "line_items[0][price_data][currency]": self._currency,
            "line_items[0][price_data][unit_amount]": str(int((amount * 100).to_integral_value())),
            "line_items[0][price_data][product_data][name]": f"Booking #{booking_id[:8]}",
            "success_url": f"{base_return}/success?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": f"{base_return}/canceled",
            "metadata[booking_id]": booking_id,
            "payment_intent_data[metadata][booking_id]": booking_id,
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            response = self._client.post(f"{self._base_url}/checkout/sessions", data=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            self._logger.error(
                "Payment session creation failed",
                extra={"booking_id": booking_id, "error": str(e)},
            )
            raise

        session_id = data.get("id")
        session_url = data.get("url")
        if not session_id or not session_url:
            raise ValueError("Payment provider returned no session id or url")

        self._logger.info("Payment session created", extra={"booking_id": booking_id, "session_id": session_id})
        return PaymentSession(session_id=str(session_id), session_url=str(session_url))
