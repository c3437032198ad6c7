"""OrderTransactionCoordinator: the seven-stage order pipeline.

All stages run inside ONE ``async with db.begin()`` unit of work bounded by
``asyncio.timeout``. Any failure rolls back every write of stages 1-6, so
other transactions never observe a half-built order:

  1. create draft order + item snapshots (PENDING)
  2. validate inventory            (advisory read, no reservation)
  3. apply discount                (lenient: bad codes give zero discount)
  4. authorize payment             (decline -> abort)
  5. confirm                       (CONFIRMED)
  6. deduct inventory              (atomic conditional decrement, the real guard)
  7. fulfil                        (FULFILLED, history appended)

Stage 2 and stage 6 are separate: the pre-check gives fast
feedback before the slow payment call, while stage 6 alone decides whether
stock exists. A buyer that passes stage 2 can still lose the race at
stage 6; the whole attempt then rolls back.

When the unit of work fails after a successful authorization, the
authorization is voided once the rollback has happened. Voiding failures
are logged and never mask the original error.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mp_common.datetime_utils import utc_now
from src.mp_common.enums import OrderStatus
from src.mp_common.errors import (
    DuplicateOrderNumberError,
    InsufficientStockError,
    InternalError,
    OrderValidationError,
    PaymentAuthorizationFailedError,
    ProductNotFoundError,
    ProductUnavailableError,
    TransactionTimeoutError,
)
from src.mp_common.id_generator import generate_id, generate_order_number
from src.mp_inventory.domain.repository import InventoryRepositoryProtocol
from src.mp_inventory.infrastructure.persistence import InventoryRepository
from src.mp_order.domain.models import Order, OrderItem
from src.mp_order.domain.repository import OrderRepositoryProtocol
from src.mp_order.infrastructure.persistence import OrderRepository
from src.mp_payment.domain.gateway import PaymentGatewayProtocol
from src.mp_payment.infrastructure.simulated_gateway import SimulatedPaymentGateway
from src.mp_pricing.domain.discounts import DiscountCatalog
from src.mp_pricing.domain.pricing import RequestedItem, compute_line_items

logger = logging.getLogger(__name__)


@dataclass
class _Attempt:
    """Per-call scratch state that must outlive the rolled-back transaction."""

    order_number: str | None = None
    authorization_id: str | None = None


class OrderTransactionCoordinator:
    def __init__(
        self,
        orders: OrderRepositoryProtocol | None = None,
        inventory: InventoryRepositoryProtocol | None = None,
        gateway: PaymentGatewayProtocol | None = None,
        discounts: DiscountCatalog | None = None,
        timeout_seconds: float | None = None,
        max_order_number_attempts: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._orders: OrderRepositoryProtocol = orders or OrderRepository()
        self._inventory: InventoryRepositoryProtocol = inventory or InventoryRepository()
        self._gateway: PaymentGatewayProtocol = (
            gateway or SimulatedPaymentGateway.from_settings()
        )
        self._discounts = discounts or DiscountCatalog()
        self._timeout = (
            timeout_seconds if timeout_seconds is not None
            else settings.ORDER_TX_TIMEOUT_SECONDS
        )
        self._max_number_attempts = (
            max_order_number_attempts or settings.ORDER_NUMBER_MAX_ATTEMPTS
        )
        self._clock = clock

    async def create_order(
        self,
        buyer_id: str,
        items: Sequence[RequestedItem],
        discount_code: str | None,
        db: AsyncSession,
    ) -> Order:
        """Run the whole pipeline; returns the FULFILLED, hydrated order.

        Raises one AppError subclass on failure, after rollback.
        """
        if not items:
            raise OrderValidationError("order must contain at least one item")
        logger.info("Creating order for buyer %s (%d lines)", buyer_id, len(items))

        attempt = _Attempt()
        try:
            async with asyncio.timeout(self._timeout):
                async with db.begin():
                    order = await self._run_stages(buyer_id, items, discount_code, db, attempt)
        except TimeoutError:
            logger.error(
                "Order %s timed out after %.1fs; rolled back",
                attempt.order_number or "<unnumbered>",
                self._timeout,
            )
            await self._void_authorization(attempt)
            raise TransactionTimeoutError(self._timeout) from None
        except Exception as exc:
            logger.error(
                "Order creation failed for buyer %s (%s): %s",
                buyer_id,
                attempt.order_number or "<unnumbered>",
                exc,
            )
            await self._void_authorization(attempt)
            raise

        logger.info("Order %s fulfilled for buyer %s", order.order_number, buyer_id)
        return order

    async def _run_stages(
        self,
        buyer_id: str,
        items: Sequence[RequestedItem],
        discount_code: str | None,
        db: AsyncSession,
        attempt: _Attempt,
    ) -> Order:
        order = await self._create_draft(buyer_id, items, db, attempt)
        logger.info("Step 1 complete: order %s created", order.order_number)

        await self._validate_inventory(order, db)
        logger.info("Step 2 complete: inventory validated")

        await self._apply_pricing(order, discount_code, db)
        logger.info(
            "Step 3 complete: subtotal=%d discount=%d total=%d %s",
            order.subtotal, order.discount_amount, order.total, order.currency,
        )

        await self._authorize_payment(order, db, attempt)
        logger.info("Step 4 complete: payment authorized (%s)", order.payment_auth_id)

        await self._confirm(order, db)
        logger.info("Step 5 complete: order confirmed")

        await self._deduct_inventory(order, db)
        logger.info("Step 6 complete: inventory deducted")

        fulfilled = await self._fulfil(order, db)
        logger.info("Step 7 complete: order %s fulfilled", order.order_number)
        return fulfilled

    # ------------------------------------------------------------------
    # Stage 1: draft order
    # ------------------------------------------------------------------

    async def _create_draft(
        self,
        buyer_id: str,
        requested: Sequence[RequestedItem],
        db: AsyncSession,
        attempt: _Attempt,
    ) -> Order:
        product_ids = [r.product_id for r in requested]
        if len(set(product_ids)) != len(product_ids):
            raise OrderValidationError("each product may appear only once per order")

        products = {p.id: p for p in await self._inventory.get_by_ids(product_ids, db)}
        for product_id in product_ids:
            if product_id not in products:
                raise ProductNotFoundError(product_id)
        cart = compute_line_items(products, requested)

        order_id = generate_id()
        order = Order(
            id=order_id,
            order_number="",
            buyer_id=buyer_id,
            subtotal=cart.subtotal,
            total=cart.subtotal,  # discount applied in stage 3
            currency=cart.currency,
            status=OrderStatus.PENDING.value,
            items=[
                OrderItem(
                    id=generate_id(),
                    order_id=order_id,
                    product_id=line.product_id,
                    product_title=line.product_title,
                    product_brand=line.product_brand,
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    line_total=line.line_total,
                )
                for line in cart.lines
            ],
        )
        order.record_status(OrderStatus.PENDING.value, "Order created", self._clock())

        for _ in range(self._max_number_attempts):
            order.order_number = generate_order_number(self._clock())
            try:
                await self._orders.save(order, db)
            except DuplicateOrderNumberError:
                logger.warning("Order number %s taken, regenerating", order.order_number)
                continue
            attempt.order_number = order.order_number
            return order
        raise InternalError(
            f"Could not allocate a unique order number after {self._max_number_attempts} attempts"
        )

    # ------------------------------------------------------------------
    # Stage 2: advisory stock check
    # ------------------------------------------------------------------

    async def _validate_inventory(self, order: Order, db: AsyncSession) -> None:
        for item in order.items:
            product = await self._inventory.get_listed_item(item.product_id, db)
            if product is None:
                # Second read only to pick the right error
                existing = await self._inventory.get_by_id(item.product_id, db)
                if existing is None:
                    raise ProductNotFoundError(item.product_id)
                raise ProductUnavailableError(item.product_id, f"status is {existing.status}")
            if product.quantity < item.quantity:
                raise InsufficientStockError(item.product_id, item.quantity, product.quantity)

    # ------------------------------------------------------------------
    # Stage 3: discount
    # ------------------------------------------------------------------

    async def _apply_pricing(
        self, order: Order, discount_code: str | None, db: AsyncSession
    ) -> None:
        pricing = self._discounts.apply_discount(order.subtotal, discount_code, self._clock())
        if discount_code and pricing.rejection is not None:
            logger.warning(
                "Order %s: discount code %r not applied (%s)",
                order.order_number, discount_code, pricing.rejection.value,
            )
        order.discount_code = pricing.discount_code
        order.discount_amount = pricing.discount_amount
        order.total = pricing.total
        await self._orders.update_pricing(order, db)

    # ------------------------------------------------------------------
    # Stage 4: payment authorization
    # ------------------------------------------------------------------

    async def _authorize_payment(
        self, order: Order, db: AsyncSession, attempt: _Attempt
    ) -> None:
        result = await self._gateway.authorize(order.id, order.total, order.currency)
        if not result.success or result.authorization_id is None:
            reason = result.decline_reason.value if result.decline_reason else "UNKNOWN"
            raise PaymentAuthorizationFailedError(reason, result.message)
        attempt.authorization_id = result.authorization_id
        order.payment_auth_id = result.authorization_id
        await self._orders.set_payment_auth(order.id, result.authorization_id, db)

    # ------------------------------------------------------------------
    # Stage 5: confirmation
    # ------------------------------------------------------------------

    async def _confirm(self, order: Order, db: AsyncSession) -> None:
        order.status = OrderStatus.CONFIRMED.value
        await self._orders.update_status(order.id, order.status, db)

    # ------------------------------------------------------------------
    # Stage 6: stock deduction
    # ------------------------------------------------------------------

    async def _deduct_inventory(self, order: Order, db: AsyncSession) -> None:
        # Fixed lock order across transactions: rows are always taken by product id
        for item in sorted(order.items, key=lambda i: i.product_id):
            await self._inventory.conditional_decrement(item.product_id, item.quantity, db)

    # ------------------------------------------------------------------
    # Stage 7: fulfilment
    # ------------------------------------------------------------------

    async def _fulfil(self, order: Order, db: AsyncSession) -> Order:
        entry = order.record_status(
            OrderStatus.FULFILLED.value,
            "Order fulfilled and ready for delivery",
            self._clock(),
        )
        order.status = OrderStatus.FULFILLED.value
        order.fulfilled_at = entry.timestamp
        await self._orders.update_status(
            order.id, order.status, db, history_entry=entry, fulfilled_at=entry.timestamp
        )
        hydrated = await self._orders.get_by_id(order.id, None, db)
        if hydrated is None:
            raise InternalError(f"Order {order.id} vanished inside its own transaction")
        return hydrated

    # ------------------------------------------------------------------
    # Compensation
    # ------------------------------------------------------------------

    async def _void_authorization(self, attempt: _Attempt) -> None:
        if attempt.authorization_id is None:
            return
        try:
            result = await self._gateway.void_authorization(attempt.authorization_id)
        except Exception:
            logger.exception(
                "Voiding authorization %s failed; it will lapse uncaptured",
                attempt.authorization_id,
            )
            return
        if not result.success:
            logger.error(
                "Gateway refused to void %s: %s", attempt.authorization_id, result.message
            )
        else:
            logger.info("Authorization %s voided", attempt.authorization_id)
