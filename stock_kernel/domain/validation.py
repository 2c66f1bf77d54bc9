"""
Stock movement validation -- pure rule checks, no I/O.

``check_stock_movement`` evaluates every rule in
``stock_kernel.invariants.StockMovementRule`` and returns the violations
instead of stopping at the first one. Each violation carries the product,
order and order line identifiers needed to find the offending movement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from stock_kernel.domain.enums import MoneyField, MovementType
from stock_kernel.invariants import StockMovementRule

if TYPE_CHECKING:
    from stock_kernel.domain.stock_movement import StockMovement

DEFAULT_REFERENCE_MAX_LENGTH = 191

# NUMERIC(5, 2)
_VAT_PERCENTAGE_STEP = Decimal("0.01")
_VAT_PERCENTAGE_LIMIT = Decimal("1000")

_NON_NEGATIVE_AMOUNTS: tuple[tuple[MoneyField, StockMovementRule, str], ...] = (
    (MoneyField.RETAIL_PRICE, StockMovementRule.RETAIL_PRICE_NON_NEGATIVE, "Retail price"),
    (
        MoneyField.TOTAL_RETAIL_PRICE,
        StockMovementRule.TOTAL_RETAIL_PRICE_NON_NEGATIVE,
        "Total retail price",
    ),
    (MoneyField.PRICE, StockMovementRule.PRICE_NON_NEGATIVE, "Price"),
    (MoneyField.TOTAL_PRICE, StockMovementRule.TOTAL_PRICE_NON_NEGATIVE, "Total price"),
)


@dataclass(frozen=True)
class Violation:
    """One broken rule on one stock movement."""

    rule: StockMovementRule
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    @property
    def identifier(self) -> str:
        """E.g. ``[P => SKU-1][O => internal: 7 | external: 1001][OL => internal: 3 | external: 11]``."""
        parts = []
        if "product_number" in self.context or "product_id" in self.context:
            parts.append(
                f"[P => {self.context.get('product_number') or self.context.get('product_id')}]"
            )
        if "order_id" in self.context:
            parts.append(
                f"[O => internal: {self.context['order_id']} | "
                f"external: {self.context.get('order_external_id')}]"
            )
        if "order_line_id" in self.context:
            parts.append(
                f"[OL => internal: {self.context['order_line_id']} | "
                f"external: {self.context.get('order_line_external_id')}]"
            )
        return "".join(parts)

    def __str__(self) -> str:
        if self.identifier:
            return f"{self.identifier} {self.message}"
        return self.message


def _context(movement: StockMovement) -> dict[str, Any]:
    ctx: dict[str, Any] = {}
    product = movement.product
    if product is not None:
        ctx["product_id"] = product.id
        ctx["product_number"] = product.number
    order_line = movement.order_line
    if movement.is_type(MovementType.SALE) and order_line is not None:
        ctx["order_id"] = order_line.order.id
        ctx["order_external_id"] = order_line.order.external_id
        ctx["order_line_id"] = order_line.id
        ctx["order_line_external_id"] = order_line.external_id
    return ctx


def check_stock_movement(
    movement: StockMovement,
    reference_max_length: int = DEFAULT_REFERENCE_MAX_LENGTH,
) -> list[Violation]:
    """
    Evaluate every stock movement rule.

    Returns:
        The violations found, in rule order. Empty when the movement is valid.
    """
    ctx = _context(movement)
    found: list[Violation] = []

    def fail(rule: StockMovementRule, message: str) -> None:
        found.append(Violation(rule=rule, message=message, context=dict(ctx)))

    if movement.product is None:
        fail(StockMovementRule.PRODUCT_REQUIRED, "A product is required")

    if movement.type is None:
        fail(
            StockMovementRule.TYPE_CHOICE,
            f"Type must be one of {', '.join(MovementType.choices())}",
        )

    quantity = movement.quantity
    if movement.is_type(MovementType.SALE):
        if not movement.order_line_removed and movement.order_line is None:
            fail(
                StockMovementRule.SALE_ORDER_LINE_REQUIRED,
                "An order line is required when the type equals sale",
            )
        if quantity >= 0:
            fail(
                StockMovementRule.SALE_QUANTITY_NEGATIVE,
                "Quantity must be negative when the type equals sale",
            )
    elif movement.is_type(MovementType.RETURN) and quantity <= 0:
        fail(
            StockMovementRule.RETURN_QUANTITY_POSITIVE,
            "Quantity should be greater than 0 if the type is a return",
        )

    if quantity == 0:
        fail(StockMovementRule.QUANTITY_NON_ZERO, "Quantity can never be 0")

    if len(movement.reference or "") > reference_max_length:
        fail(
            StockMovementRule.REFERENCE_LENGTH,
            f"Reference must be at most {reference_max_length} characters",
        )

    currency = movement.currency
    if currency is None or len(currency) != 3:
        fail(StockMovementRule.CURRENCY_REQUIRED, "A three letter currency is required")

    for money_field, rule, label in _NON_NEGATIVE_AMOUNTS:
        amount = movement.minor_units(money_field)
        if amount is None or amount < 0:
            fail(rule, f"{label} needs to be an integer >= 0")

    if (
        movement.minor_units(MoneyField.DISCOUNT) is None
        or movement.minor_units(MoneyField.TOTAL_DISCOUNT) is None
    ):
        fail(StockMovementRule.DISCOUNT_REQUIRED, "Discount and total discount need to be integers")

    vat = _vat_or_none(movement.vat_percentage)
    if vat is None or vat < 0:
        fail(
            StockMovementRule.VAT_PERCENTAGE_NON_NEGATIVE,
            "The VAT percentage needs to be a decimal >= 0",
        )
    elif vat >= _VAT_PERCENTAGE_LIMIT or vat != vat.quantize(_VAT_PERCENTAGE_STEP):
        fail(
            StockMovementRule.VAT_PERCENTAGE_PRECISION,
            "The VAT percentage can have at most 2 decimals and must be below 1000",
        )

    price = movement.minor_units(MoneyField.PRICE)
    retail_price = movement.minor_units(MoneyField.RETAIL_PRICE)
    if price is not None and price > 0 and (retail_price is None or retail_price <= 0):
        # a product with a price is assumed to have a retail price
        fail(
            StockMovementRule.RETAIL_PRICE_REQUIRED_WITH_PRICE,
            "When the price is > 0, the retail price must also be > 0",
        )

    if retail_price == 0 and movement.minor_units(MoneyField.DISCOUNT) not in (0, None):
        fail(
            StockMovementRule.ZERO_RETAIL_PRICE_WITHOUT_DISCOUNT,
            "The discount must be 0 when the retail price is 0",
        )

    if movement.complaint and quantity >= 0:
        fail(
            StockMovementRule.COMPLAINT_QUANTITY_NEGATIVE,
            "Quantity needs to be negative when the stock movement is a complaint",
        )

    if movement.product is not None and movement.product.is_variant_master:
        fail(
            StockMovementRule.VARIANT_MASTER_FORBIDDEN,
            "Only simple products and variants are allowed as stock movements",
        )

    return found


def _vat_or_none(value: str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        return None
