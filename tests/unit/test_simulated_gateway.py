# tests/unit/test_simulated_gateway.py
"""SimulatedPaymentGateway: outcome distribution, decline taxonomy, latency bounds."""
import random
import re
import time

import pytest

from src.mp_common.enums import DeclineReason
from src.mp_payment.domain.models import DECLINE_MESSAGES
from src.mp_payment.infrastructure.simulated_gateway import SimulatedPaymentGateway


def _gateway(success_rate: float, seed: int = 42, **kwargs) -> SimulatedPaymentGateway:
    return SimulatedPaymentGateway(
        success_rate=success_rate,
        min_latency_ms=kwargs.get("min_latency_ms", 0),
        max_latency_ms=kwargs.get("max_latency_ms", 0),
        rng=random.Random(seed),
    )


class TestAuthorize:
    async def test_always_approves_at_rate_one(self) -> None:
        gateway = _gateway(1.0)
        for n in range(20):
            result = await gateway.authorize(f"order-{n}", 30_000, "ZAR")
            assert result.success is True
            assert result.decline_reason is None
            assert result.authorization_id is not None
            assert re.fullmatch(r"AUTH-[0-9A-F]{16}", result.authorization_id)

    async def test_always_declines_at_rate_zero(self) -> None:
        gateway = _gateway(0.0)
        for n in range(20):
            result = await gateway.authorize(f"order-{n}", 30_000, "ZAR")
            assert result.success is False
            assert result.authorization_id is None
            assert result.decline_reason in DeclineReason
            assert result.message == DECLINE_MESSAGES[result.decline_reason]

    async def test_authorization_ids_are_unique(self) -> None:
        gateway = _gateway(1.0)
        ids = {(await gateway.authorize("o", 100, "ZAR")).authorization_id for _ in range(50)}
        assert len(ids) == 50

    async def test_rate_is_roughly_honoured(self) -> None:
        gateway = _gateway(0.9, seed=1234)
        results = [await gateway.authorize("o", 100, "ZAR") for _ in range(1000)]
        approved = sum(r.success for r in results)
        assert 850 <= approved <= 950

    async def test_decline_reasons_all_reachable(self) -> None:
        gateway = _gateway(0.0, seed=7)
        reasons = {(await gateway.authorize("o", 100, "ZAR")).decline_reason for _ in range(200)}
        assert reasons == set(DeclineReason)

    async def test_seeded_runs_are_reproducible(self) -> None:
        first, second = _gateway(0.5, seed=9), _gateway(0.5, seed=9)
        outcomes_a = [(await first.authorize("o", 1, "ZAR")).success for _ in range(30)]
        outcomes_b = [(await second.authorize("o", 1, "ZAR")).success for _ in range(30)]
        assert outcomes_a == outcomes_b

    async def test_latency_within_bounds(self) -> None:
        gateway = _gateway(1.0, min_latency_ms=20, max_latency_ms=40)
        start = time.perf_counter()
        await gateway.authorize("o", 100, "ZAR")
        elapsed_ms = (time.perf_counter() - start) * 1000
        assert elapsed_ms >= 19


class TestVoid:
    async def test_void_succeeds(self) -> None:
        gateway = _gateway(1.0)
        result = await gateway.void_authorization("AUTH-0123456789ABCDEF")
        assert result.success is True
        assert result.authorization_id == "AUTH-0123456789ABCDEF"


class TestConstruction:
    @pytest.mark.parametrize("rate", [-0.1, 1.5])
    def test_rejects_bad_success_rate(self, rate: float) -> None:
        with pytest.raises(ValueError):
            SimulatedPaymentGateway(success_rate=rate)

    def test_rejects_inverted_latency(self) -> None:
        with pytest.raises(ValueError):
            SimulatedPaymentGateway(min_latency_ms=100, max_latency_ms=50)

    def test_from_settings(self) -> None:
        gateway = SimulatedPaymentGateway.from_settings()
        assert gateway.success_rate == 0.9
