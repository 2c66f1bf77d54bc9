"""
StockMovement -- one change to a product's stock level, with its pricing.

Responsibility:
    Holds a single inventory delta (sale, return, delivery, regulation) and
    keeps its derived monetary fields consistent:

        total_price        = price * abs(quantity)
        total_retail_price = retail_price * abs(quantity)
        discount           = retail_price - price
        total_discount     = total_retail_price - total_price

    All monetary fields share one currency, fixed by the first price or
    retail price assigned.

Architecture position:
    Kernel > Domain -- pure, no I/O. Persistence maps this object onto
    ``stock_kernel.models.stock_movement.StockMovementModel``.

Failure modes:
    - CurrencyMismatchError when a price arrives in a second currency
    - UnsetCurrencyError when a monetary field is read before any is set
    - UnsetProductError when built from an order line without a product
    - ProductMismatchError when diffing movements for different products
    - ValidationError from ``validate()`` listing every violated rule

Quantity sign convention: negative quantities leave the stock (sales,
complaints), positive quantities enter it (returns, deliveries). Regulations
may go either way.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from stock_kernel.domain.enums import MoneyField, MovementType
from stock_kernel.domain.references import OrderLine, Product
from stock_kernel.domain.validation import (
    DEFAULT_REFERENCE_MAX_LENGTH,
    Violation,
    check_stock_movement,
)
from stock_kernel.domain.values import Currency, Money, parse_vat_percentage, vat_multiplier
from stock_kernel.exceptions import (
    CurrencyMismatchError,
    ProductMismatchError,
    UnsetCurrencyError,
    UnsetProductError,
    ValidationError,
)
from stock_kernel.logging_config import LogContext, get_logger

logger = get_logger("domain.stock_movement")


class StockMovement:
    """
    A stock movement with single-currency price bookkeeping.

    Monetary values are passed in and returned as ``Money``; internally they
    are kept as integer minor units next to one currency code.
    """

    def __init__(self) -> None:
        self.id: Any = None
        self.complaint: bool = False
        self.reference: str = ""
        self.product: Product | None = None
        self.order_line: OrderLine | None = None
        self.order_line_removed: bool = False
        self.created_at: datetime | None = None
        self.updated_at: datetime | None = None

        self._quantity: int | None = None
        self._type: MovementType | None = None
        self._vat_percentage: str | None = None
        self._currency: str | None = None
        self._amounts: dict[MoneyField, int | None] = dict.fromkeys(MoneyField)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        quantity: int,
        unit_price: Money,
        vat_percent: Decimal | str | int,
        movement_type: MovementType | str,
        product: Product,
        reference: str,
    ) -> StockMovement:
        """
        Build a movement for ``product``.

        The retail price is the product's list price in the unit price's
        currency, converted to excl. VAT at ``vat_percent``. When the product
        has no list price in that currency the unit price is used instead.
        """
        movement = cls()
        movement.quantity = quantity
        movement.price = unit_price
        movement.vat_percentage = vat_percent
        movement.type = movement_type
        movement.product = product
        movement.reference = reference
        movement.retail_price = _retail_price_for(
            product, unit_price.currency, vat_percent, fallback=unit_price
        )

        logger.debug(
            "stock_movement_created",
            extra={
                "product_id": movement.product_id,
                "quantity": quantity,
                "movement_type": movement.type.value,
                "currency": movement.currency,
            },
        )
        return movement

    @classmethod
    def from_order_line(cls, order_line: OrderLine) -> StockMovement:
        """Build the sale movement for an order line."""
        movement = cls()
        movement.populate_from_order_line(order_line)
        return movement

    def populate_from_order_line(self, order_line: OrderLine) -> None:
        """
        Fill this movement from an order line.

        An order counts as outgoing stock, so the quantity is the negated
        order line quantity. The timestamps are the order's creation date:
        the stock left when the order was placed, not when it was synced.
        """
        product = order_line.product
        if product is None:
            raise UnsetProductError(order_line.product_number)

        order = order_line.order

        self.quantity = -1 * order_line.quantity
        self.price = order_line.unit_price_excl_vat
        self.vat_percentage = order_line.vat_pct
        self.type = MovementType.SALE
        self.product = product
        self.order_line = order_line
        self.reference = f"Order {order.external_id}"
        self.created_at = order.created_date
        self.updated_at = order.created_date
        self.retail_price = _retail_price_for(
            product,
            order_line.unit_price.currency,
            order_line.vat_pct,
            fallback=order_line.unit_price_excl_vat,
        )

        logger.debug(
            "stock_movement_populated_from_order_line",
            extra={
                "product_id": self.product_id,
                "order_id": order.id,
                "order_line_id": order_line.id,
                "quantity": self.quantity,
            },
        )

    def copy(self) -> StockMovement:
        """Value copy of every business field; identity and timestamps are not copied."""
        movement = self.__class__()
        movement.complaint = self.complaint
        movement.reference = self.reference
        movement.product = self.product
        movement.order_line = self.order_line
        movement.order_line_removed = self.order_line_removed
        movement._type = self._type
        movement._vat_percentage = self._vat_percentage
        movement._currency = self._currency
        movement._quantity = self._quantity
        movement._amounts = dict(self._amounts)
        return movement

    def inverse(self) -> StockMovement:
        """A copy that undoes this movement."""
        movement = self.copy()
        movement.quantity = -movement.quantity
        return movement

    def diff(self, other: StockMovement) -> StockMovement:
        """
        The movement needed to get from ``other`` to this movement.

        A copy of ``other`` whose quantity is ``-(self.quantity - other.quantity)``.
        """
        if self.product_id != other.product_id:
            raise ProductMismatchError(self.product_id, other.product_id)

        movement = other.copy()
        movement.quantity = -1 * (self.quantity - other.quantity)
        return movement

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def violations(
        self, reference_max_length: int = DEFAULT_REFERENCE_MAX_LENGTH
    ) -> list[Violation]:
        """Every rule this movement currently breaks. Empty when valid."""
        return check_stock_movement(self, reference_max_length=reference_max_length)

    def validate(self, reference_max_length: int = DEFAULT_REFERENCE_MAX_LENGTH) -> None:
        """
        Raise ValidationError unless every rule holds.

        Called by the persistence layer right before the movement is written.
        """
        found = self.violations(reference_max_length=reference_max_length)
        if found:
            error = ValidationError(found)
            with LogContext.bind_movement(self):
                logger.warning(
                    "stock_movement_validation_failed", extra={"rules": error.rules}
                )
            raise error

    def is_valid(self, reference_max_length: int = DEFAULT_REFERENCE_MAX_LENGTH) -> bool:
        return not self.violations(reference_max_length=reference_max_length)

    # ------------------------------------------------------------------
    # Plain fields
    # ------------------------------------------------------------------

    @property
    def quantity(self) -> int:
        return self._quantity if self._quantity is not None else 0

    @quantity.setter
    def quantity(self, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError(f"quantity must be an int, got {type(quantity).__name__}")
        self._quantity = quantity
        self._recompute()

    def has_quantity(self) -> bool:
        return self._quantity is not None

    @property
    def type(self) -> MovementType | None:
        return self._type

    @type.setter
    def type(self, movement_type: MovementType | str) -> None:
        self._type = MovementType(movement_type)

    def is_type(self, movement_type: MovementType | str) -> bool:
        return self._type is MovementType(movement_type)

    @property
    def vat_percentage(self) -> str | None:
        return self._vat_percentage

    @vat_percentage.setter
    def vat_percentage(self, vat_percentage: Decimal | str | int) -> None:
        self._vat_percentage = str(parse_vat_percentage(vat_percentage))

    @property
    def vat_multiplier(self) -> Decimal:
        """E.g. Decimal("1.25") for a VAT percentage of 25."""
        if self._vat_percentage is None:
            raise ValueError("The VAT percentage is not set on this stock movement")
        return vat_multiplier(self._vat_percentage)

    @property
    def currency(self) -> str | None:
        return self._currency

    @property
    def product_id(self) -> Any:
        return self.product.id if self.product is not None else None

    @property
    def order_line_id(self) -> Any:
        return self.order_line.id if self.order_line is not None else None

    # ------------------------------------------------------------------
    # Money fields
    # ------------------------------------------------------------------

    @property
    def price(self) -> Money:
        """Actual unit price excl. VAT."""
        return self.money(MoneyField.PRICE)

    @price.setter
    def price(self, price: Money) -> None:
        self._set_amount(MoneyField.PRICE, price)

    @property
    def retail_price(self) -> Money:
        """Undiscounted unit price excl. VAT when the movement was created."""
        return self.money(MoneyField.RETAIL_PRICE)

    @retail_price.setter
    def retail_price(self, retail_price: Money) -> None:
        self._set_amount(MoneyField.RETAIL_PRICE, retail_price)

    @property
    def total_price(self) -> Money:
        return self.money(MoneyField.TOTAL_PRICE)

    @property
    def total_retail_price(self) -> Money:
        return self.money(MoneyField.TOTAL_RETAIL_PRICE)

    @property
    def discount(self) -> Money:
        return self.money(MoneyField.DISCOUNT)

    @property
    def total_discount(self) -> Money:
        return self.money(MoneyField.TOTAL_DISCOUNT)

    def money(self, field: MoneyField | str) -> Money:
        """Any monetary field as Money in this movement's currency."""
        field = MoneyField(field)
        if self._currency is None:
            raise UnsetCurrencyError(field.value)
        return Money(amount=self._amounts[field] or 0, currency=self._currency)

    def minor_units(self, field: MoneyField | str) -> int | None:
        """The stored amount in minor units, or None when not yet known."""
        return self._amounts[MoneyField(field)]

    def incl_vat(self, field: MoneyField | str) -> Money:
        """Any monetary field with VAT added, rounded half-up to the minor unit."""
        return self.money(field) * self.vat_multiplier

    @property
    def price_incl_vat(self) -> Money:
        return self.incl_vat(MoneyField.PRICE)

    @property
    def total_price_incl_vat(self) -> Money:
        return self.incl_vat(MoneyField.TOTAL_PRICE)

    @property
    def retail_price_incl_vat(self) -> Money:
        return self.incl_vat(MoneyField.RETAIL_PRICE)

    @property
    def total_retail_price_incl_vat(self) -> Money:
        return self.incl_vat(MoneyField.TOTAL_RETAIL_PRICE)

    @property
    def discount_incl_vat(self) -> Money:
        return self.incl_vat(MoneyField.DISCOUNT)

    @property
    def total_discount_incl_vat(self) -> Money:
        return self.incl_vat(MoneyField.TOTAL_DISCOUNT)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _set_amount(self, field: MoneyField, value: Money) -> None:
        if not isinstance(value, Money):
            raise TypeError(f"{field.value} must be Money, got {type(value).__name__}")
        self._update_currency(value.currency)
        self._amounts[field] = value.amount
        self._recompute()

    def _update_currency(self, currency: Currency) -> None:
        if self._currency is not None and currency.code != self._currency:
            raise CurrencyMismatchError(self._currency, currency.code)
        self._currency = currency.code

    def _recompute(self) -> None:
        # Totals need the quantity; discounts need both unit prices.
        amounts = self._amounts
        price = amounts[MoneyField.PRICE]
        retail_price = amounts[MoneyField.RETAIL_PRICE]

        if self._quantity is not None:
            qty = abs(self._quantity)
            if price is not None:
                amounts[MoneyField.TOTAL_PRICE] = price * qty
            if retail_price is not None:
                amounts[MoneyField.TOTAL_RETAIL_PRICE] = retail_price * qty

        total_price = amounts[MoneyField.TOTAL_PRICE]
        total_retail_price = amounts[MoneyField.TOTAL_RETAIL_PRICE]
        if None not in (price, retail_price, total_price, total_retail_price):
            amounts[MoneyField.DISCOUNT] = retail_price - price
            amounts[MoneyField.TOTAL_DISCOUNT] = total_retail_price - total_price

    def __repr__(self) -> str:
        return (
            f"<StockMovement {self.id}: {self._type.value if self._type else None} "
            f"product={self.product_id} qty={self._quantity} currency={self._currency}>"
        )


def _retail_price_for(
    product: Product,
    currency: Currency,
    vat_percentage: Decimal | str | int,
    fallback: Money,
) -> Money:
    price = product.find_price_by_currency(currency)
    if price is None:
        return fallback
    return price.unit_price_excl_vat(str(parse_vat_percentage(vat_percentage)))
