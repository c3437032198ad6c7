"""SimulatedPaymentGateway: stand-in for a card processor.

Latency and success probability are fixed at construction, so one
instance is safe to share between concurrent orders. Pass a seeded
``random.Random`` for deterministic runs.
"""

import asyncio
import logging
import random
import uuid

from config.settings import settings
from src.mp_common.datetime_utils import utc_now
from src.mp_common.enums import DeclineReason
from src.mp_payment.domain.models import DECLINE_MESSAGES, AuthResult

logger = logging.getLogger(__name__)


class SimulatedPaymentGateway:
    def __init__(
        self,
        success_rate: float = 0.9,
        min_latency_ms: int = 500,
        max_latency_ms: int = 1500,
        rng: random.Random | None = None,
    ) -> None:
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError(f"success_rate must be within [0, 1], got {success_rate}")
        if min_latency_ms < 0 or max_latency_ms < min_latency_ms:
            raise ValueError(
                f"invalid latency bounds: {min_latency_ms}-{max_latency_ms}ms"
            )
        self._success_rate = success_rate
        self._min_latency_ms = min_latency_ms
        self._max_latency_ms = max_latency_ms
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(cls) -> "SimulatedPaymentGateway":
        return cls(
            success_rate=settings.PAYMENT_SUCCESS_RATE,
            min_latency_ms=settings.PAYMENT_MIN_LATENCY_MS,
            max_latency_ms=settings.PAYMENT_MAX_LATENCY_MS,
        )

    @property
    def success_rate(self) -> float:
        return self._success_rate

    async def authorize(self, order_id: str, amount: int, currency: str) -> AuthResult:
        logger.info("Processing payment: %s %d for order %s", currency, amount, order_id)
        await self._simulate_latency()

        if self._rng.random() < self._success_rate:
            auth_id = f"AUTH-{uuid.uuid4().hex[:16].upper()}"
            logger.info("Payment authorized for order %s (%s)", order_id, auth_id)
            return AuthResult(
                success=True,
                message="Payment authorized successfully",
                processed_at=utc_now(),
                authorization_id=auth_id,
            )

        reason = self._rng.choice(list(DeclineReason))
        message = DECLINE_MESSAGES[reason]
        logger.warning("Payment failed for order %s: %s", order_id, message)
        return AuthResult(
            success=False,
            message=message,
            processed_at=utc_now(),
            decline_reason=reason,
        )

    async def void_authorization(self, authorization_id: str) -> AuthResult:
        logger.info("Voiding authorization: %s", authorization_id)
        await self._simulate_latency()
        return AuthResult(
            success=True,
            message="Authorization voided successfully",
            processed_at=utc_now(),
            authorization_id=authorization_id,
        )

    async def _simulate_latency(self) -> None:
        if self._max_latency_ms == 0:
            return
        latency_ms = self._rng.uniform(self._min_latency_ms, self._max_latency_ms)
        await asyncio.sleep(latency_ms / 1000)
