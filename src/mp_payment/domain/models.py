"""Payment domain models — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime

from src.mp_common.enums import DeclineReason

DECLINE_MESSAGES: dict[DeclineReason, str] = {
    DeclineReason.INSUFFICIENT_FUNDS: "Payment declined: Insufficient funds",
    DeclineReason.CARD_DECLINED: "Payment declined: Card declined by issuer",
    DeclineReason.EXPIRED_CARD: "Payment declined: Card has expired",
    DeclineReason.FRAUD_DETECTED: "Payment declined: Suspected fraud",
    DeclineReason.NETWORK_ERROR: "Payment failed: Network error, please try again",
}


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: str
    processed_at: datetime
    authorization_id: str | None = None
    decline_reason: DeclineReason | None = None
