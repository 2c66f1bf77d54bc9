"""
Stock Movement Rules Contract.

Every rule a stock movement must satisfy before it is written. The rules are
evaluated by ``stock_kernel.domain.validation`` and named here so violations
are machine-readable.
"""

from enum import Enum, unique


@unique
class StockMovementRule(str, Enum):
    """Rules enforced by ``StockMovement.validate()``."""

    PRODUCT_REQUIRED = "product_required"
    """Every movement references a product."""

    TYPE_CHOICE = "type_choice"
    """The type is one of sale, return, regulation or delivery."""

    SALE_ORDER_LINE_REQUIRED = "sale_order_line_required"
    """A sale references its order line unless that line was removed."""

    SALE_QUANTITY_NEGATIVE = "sale_quantity_negative"
    """A sale always takes items out of stock."""

    RETURN_QUANTITY_POSITIVE = "return_quantity_positive"
    """A return always puts items back into stock."""

    QUANTITY_NON_ZERO = "quantity_non_zero"
    """A movement of zero items is not a movement."""

    REFERENCE_LENGTH = "reference_length"
    """The reference fits the 191 character column."""

    CURRENCY_REQUIRED = "currency_required"
    """A three letter currency code has been established."""

    RETAIL_PRICE_NON_NEGATIVE = "retail_price_non_negative"
    TOTAL_RETAIL_PRICE_NON_NEGATIVE = "total_retail_price_non_negative"
    PRICE_NON_NEGATIVE = "price_non_negative"
    TOTAL_PRICE_NON_NEGATIVE = "total_price_non_negative"

    DISCOUNT_REQUIRED = "discount_required"
    """Discount and total discount have been derived."""

    VAT_PERCENTAGE_NON_NEGATIVE = "vat_percentage_non_negative"

    VAT_PERCENTAGE_PRECISION = "vat_percentage_precision"
    """The VAT percentage fits the NUMERIC(5, 2) column: two decimals, below 1000."""

    RETAIL_PRICE_REQUIRED_WITH_PRICE = "retail_price_required_with_price"
    """A product that has a price also has a retail price."""

    ZERO_RETAIL_PRICE_WITHOUT_DISCOUNT = "zero_retail_price_without_discount"
    """Without a retail price there is nothing to discount from."""

    COMPLAINT_QUANTITY_NEGATIVE = "complaint_quantity_negative"
    """A complaint always removes the item from stock."""

    VARIANT_MASTER_FORBIDDEN = "variant_master_forbidden"
    """Only simple products and variants are stocked."""


ALL_STOCK_MOVEMENT_RULES: frozenset[StockMovementRule] = frozenset(StockMovementRule)
