from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Request, Response

from booking_ops.application.dto.payment_event import PaymentEventDTO
from booking_ops.application.exceptions import BookingOpsError
from booking_ops.api.errors import to_http_error
from booking_ops.core.config import settings
from booking_ops.infrastructure.payments.webhook_verify import verify_payment_signature
from booking_ops.wiring.dependencies import get_booking_workflow


router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/webhooks/payments")
async def payment_webhook(request: Request) -> Response:
    # processed inline: a non-2xx answer makes the provider redeliver
    body = await request.body()
    signature = request.headers.get("X-Payment-Signature")
    if not verify_payment_signature(body, signature, settings.PAYMENT_WEBHOOK_SECRET, settings.ENV):
        return Response(status_code=403)

    try:
        payload = json.loads(body.decode("utf-8")) if body else {}
        event = PaymentEventDTO.model_validate(payload)
    except Exception:
        logger.exception("Failed to parse payment webhook body")
        return Response(status_code=400)

    result = event.to_result()
    if result is None:
        logger.info("Payment event ignored", extra={"event_type": event.type, "event_id": event.id})
        return Response(status_code=200)

    try:
        booking = get_booking_workflow().confirm_payment(result)
    except BookingOpsError as e:
        logger.error(
            "Payment result could not be applied",
            extra={"booking_id": result.booking_id, "payment_token": result.payment_token, "error": str(e)},
        )
        return Response(status_code=to_http_error(e).status_code)

    logger.info(
        "Payment webhook processed",
        extra={"booking_id": booking.id, "status": booking.status.value, "payment_token": result.payment_token},
    )
    return Response(status_code=200)
