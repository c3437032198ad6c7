# src/mp_order/application/schemas.py
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.mp_common.cents import cents_to_display
from src.mp_order.domain.models import Order, OrderItem, StatusHistoryEntry


class OrderItemRequest(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(..., gt=0, le=1000)


class CreateOrderRequest(BaseModel):
    items: list[OrderItemRequest] = Field(..., min_length=1, max_length=50)
    # Unbounded: unknown codes of any length are priced without a discount
    discount_code: str | None = None

    @field_validator("items")
    @classmethod
    def unique_products(cls, v: list[OrderItemRequest]) -> list[OrderItemRequest]:
        seen: set[str] = set()
        for item in v:
            if item.product_id in seen:
                raise ValueError(f"product {item.product_id} appears more than once")
            seen.add(item.product_id)
        return v

    @field_validator("discount_code")
    @classmethod
    def blank_code_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip()


class ProductSnapshotResponse(BaseModel):
    id: str
    title: str
    brand: str | None
    category: str
    condition: str


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_title: str
    product_brand: str | None
    unit_price_cents: int
    quantity: int
    line_total_cents: int
    line_total_display: str
    product: ProductSnapshotResponse | None = None

    @classmethod
    def from_domain(cls, item: OrderItem, currency: str) -> "OrderItemResponse":
        product = None
        if item.product is not None:
            product = ProductSnapshotResponse(
                id=item.product.id,
                title=item.product.title,
                brand=item.product.brand,
                category=item.product.category,
                condition=item.product.condition,
            )
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_title=item.product_title,
            product_brand=item.product_brand,
            unit_price_cents=item.unit_price,
            quantity=item.quantity,
            line_total_cents=item.line_total,
            line_total_display=cents_to_display(item.line_total, currency),
            product=product,
        )


class StatusHistoryItem(BaseModel):
    status: str
    timestamp: datetime
    note: str | None = None

    @classmethod
    def from_domain(cls, entry: StatusHistoryEntry) -> "StatusHistoryItem":
        return cls(status=entry.status, timestamp=entry.timestamp, note=entry.note)


class OrderResponse(BaseModel):
    id: str
    order_number: str
    buyer_id: str
    status: str
    currency: str
    subtotal_cents: int
    discount_code: str | None
    discount_amount_cents: int
    total_cents: int
    total_display: str
    payment_auth_id: str | None
    item_count: int
    items: list[OrderItemResponse]
    status_history: list[StatusHistoryItem]
    fulfilled_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            order_number=order.order_number,
            buyer_id=order.buyer_id,
            status=order.status,
            currency=order.currency,
            subtotal_cents=order.subtotal,
            discount_code=order.discount_code,
            discount_amount_cents=order.discount_amount,
            total_cents=order.total,
            total_display=cents_to_display(order.total, order.currency),
            payment_auth_id=order.payment_auth_id,
            item_count=order.item_count,
            items=[OrderItemResponse.from_domain(i, order.currency) for i in order.items],
            status_history=[StatusHistoryItem.from_domain(e) for e in order.status_history],
            fulfilled_at=order.fulfilled_at,
            cancelled_at=order.cancelled_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
