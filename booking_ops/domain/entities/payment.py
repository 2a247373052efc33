from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentResult:
    booking_id: str
    payment_token: str
    success: bool
    failure_reason: str | None = None


@dataclass(frozen=True)
class PaymentSession:
    session_id: str
    session_url: str
