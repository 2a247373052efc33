from __future__ import annotations

import hmac
import logging
import time

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


def sign_payload(body: bytes, secret: str, timestamp: int) -> str:
    """Build a `t=<unix>,v1=<hex>` signature header for `body`."""
    signed = f"{timestamp}.".encode("utf-8") + body
    digest = hmac.new(secret.encode("utf-8"), signed, "sha256").hexdigest()
    return f"t={timestamp},v1={digest}"


def verify_payment_signature(
    body: bytes,
    signature_header: str | None,
    secret: str | None,
    env: str,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS,
    now: float | None = None,
) -> bool:
    if not signature_header:
        if env.lower() in {"dev", "local"}:
            logger.warning("Missing payment signature header; accepting in dev mode")
            return True
        return False

    if not secret:
        logger.error("Missing webhook secret for payment signature verification")
        return False

    parts: dict[str, list[str]] = {}
    for item in signature_header.split(","):
        key, sep, value = item.strip().partition("=")
        if sep:
            parts.setdefault(key, []).append(value)

    try:
        timestamp = int(parts["t"][0])
    except (KeyError, IndexError, ValueError):
        return False

    current = time.time() if now is None else now
    if abs(current - timestamp) > tolerance_seconds:
        logger.warning("Payment signature timestamp outside tolerance", extra={"timestamp": timestamp})
        return False

    expected = sign_payload(body, secret, timestamp).split("v1=", 1)[1]
    return any(hmac.compare_digest(expected, candidate) for candidate in parts.get("v1", []))
