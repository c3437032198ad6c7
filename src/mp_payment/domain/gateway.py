"""PaymentGateway Protocol: the external card processor seam.

Only authorization is part of the order pipeline. Capture/settlement is
out of scope; an authorization that is never captured expires on its own,
and ``void_authorization`` releases it early.
"""

from typing import Protocol

from src.mp_payment.domain.models import AuthResult


class PaymentGatewayProtocol(Protocol):
    async def authorize(self, order_id: str, amount: int, currency: str) -> AuthResult: ...

    async def void_authorization(self, authorization_id: str) -> AuthResult: ...
