"""PricingEngine: pure line-item and subtotal computation. No I/O.

The result is a denormalized snapshot (title, brand, unit price) taken at
order-creation time; later catalog edits never change historical orders.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from src.mp_common.errors import (
    MixedCurrencyError,
    OrderValidationError,
    ProductUnavailableError,
)
from src.mp_inventory.domain.models import InventoryItem


@dataclass(frozen=True)
class RequestedItem:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    product_title: str
    product_brand: str | None
    unit_price: int  # cents
    quantity: int
    line_total: int  # cents


@dataclass(frozen=True)
class PricedCart:
    lines: tuple[PricedLine, ...]
    subtotal: int  # cents
    currency: str


def compute_line_items(
    products: Mapping[str, InventoryItem], requested: Sequence[RequestedItem]
) -> PricedCart:
    """Price every requested line against the product snapshot.

    Raises:
        OrderValidationError: empty cart or non-positive quantity.
        ProductUnavailableError: product missing, not LISTED, or unpriced.
        MixedCurrencyError: products priced in more than one currency.
    """
    if not requested:
        raise OrderValidationError("order must contain at least one item")

    lines: list[PricedLine] = []
    currencies: list[str] = []
    for req in requested:
        if req.quantity <= 0:
            raise OrderValidationError(
                f"quantity for {req.product_id} must be positive, got {req.quantity}"
            )
        product = products.get(req.product_id)
        if product is None:
            raise ProductUnavailableError(req.product_id, "not found or not listed")
        if not product.is_listed:
            raise ProductUnavailableError(req.product_id, f"status is {product.status}")
        if product.resale_price is None:
            raise ProductUnavailableError(req.product_id, "no resale price set")

        if product.currency not in currencies:
            currencies.append(product.currency)
        lines.append(
            PricedLine(
                product_id=product.id,
                product_title=product.title,
                product_brand=product.brand,
                unit_price=product.resale_price,
                quantity=req.quantity,
                line_total=product.resale_price * req.quantity,
            )
        )

    if len(currencies) > 1:
        raise MixedCurrencyError(currencies)

    return PricedCart(
        lines=tuple(lines),
        subtotal=sum(line.line_total for line in lines),
        currency=currencies[0],
    )
