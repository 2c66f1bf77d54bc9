"""
Typed Exception Hierarchy for the Stock Kernel.

Every error raised by the kernel is a typed exception with a class-level
machine-readable ``code`` and structured attributes, so callers catch by
type and read fields instead of parsing messages.

    StockKernelError (base)
    |
    +-- CurrencyError
    |   +-- CurrencyMismatchError
    |   +-- UnsetCurrencyError
    |
    +-- ProductError
    |   +-- UnsetProductError
    |   +-- ProductMismatchError
    |
    +-- ValidationError
    |
    +-- StockMovementNotFoundError

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Currency        | CURRENCY_MISMATCH           | Money in another currency than the movement's
                | UNSET_CURRENCY              | Monetary field read before a currency is set
----------------|-----------------------------|-----------------------------------------
Product         | UNSET_PRODUCT               | Order line has no product
                | PRODUCT_MISMATCH            | Movements for different products combined
----------------|-----------------------------|-----------------------------------------
Validation      | STOCK_MOVEMENT_INVALID      | One or more movement rules violated
----------------|-----------------------------|-----------------------------------------
Persistence     | STOCK_MOVEMENT_NOT_FOUND    | No stored movement with the given id

None of these are transient. They indicate programmer or data errors and are
never retried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stock_kernel.domain.validation import Violation


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Currency-related exceptions


class CurrencyError(StockKernelError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class CurrencyMismatchError(CurrencyError):
    """A monetary value does not match the currency already in use."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Currency mismatch: stock movement uses {expected}, got {actual}"
        )


class UnsetCurrencyError(CurrencyError):
    """A monetary value was read before any currency was established."""

    code: str = "UNSET_CURRENCY"

    def __init__(self, field: str):
        self.field = field
        super().__init__(
            f"The currency is not set on this stock movement (reading {field})"
        )


# Product-related exceptions


class ProductError(StockKernelError):
    """Base exception for product-related errors."""

    code: str = "PRODUCT_ERROR"


class UnsetProductError(ProductError):
    """A stock movement was built from an order line lacking a product."""

    code: str = "UNSET_PRODUCT"

    def __init__(self, product_number: str | None):
        self.product_number = product_number
        super().__init__(
            f"No product set on order line with product number: {product_number}"
        )


class ProductMismatchError(ProductError):
    """Stock movements referencing different products were combined."""

    code: str = "PRODUCT_MISMATCH"

    def __init__(self, expected_product_id: Any, actual_product_id: Any):
        self.expected_product_id = expected_product_id
        self.actual_product_id = actual_product_id
        super().__init__(
            f"Stock movements must share one product: "
            f"expected `{expected_product_id}`, got `{actual_product_id}`"
        )


# Validation


class ValidationError(StockKernelError):
    """
    One or more stock movement rules were violated.

    Carries every violation found, not only the first, so the persistence
    layer can report them all at once.
    """

    code: str = "STOCK_MOVEMENT_INVALID"

    def __init__(self, violations: list[Violation]):
        self.violations = list(violations)
        self.rules = [v.rule.value for v in self.violations]
        details = "; ".join(str(v) for v in self.violations)
        super().__init__(
            f"Stock movement failed {len(self.violations)} rule(s): {details}"
        )


# Persistence


class StockMovementNotFoundError(StockKernelError):
    """No stored stock movement has the requested id."""

    code: str = "STOCK_MOVEMENT_NOT_FOUND"

    def __init__(self, movement_id: Any):
        self.movement_id = str(movement_id)
        super().__init__(f"Stock movement not found: {movement_id}")
