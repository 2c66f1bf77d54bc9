"""
Pure domain layer.

Stock movements, their money values and validation rules, with NO
dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O
"""

from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.currency import CurrencyRegistry
from stock_kernel.domain.enums import MoneyField, MovementType
from stock_kernel.domain.order_line import OrderLineStockMovements, StockMovementBook
from stock_kernel.domain.references import Order, OrderLine, Product, ProductPrice
from stock_kernel.domain.stock_movement import StockMovement
from stock_kernel.domain.validation import Violation, check_stock_movement
from stock_kernel.domain.values import Currency, Money, vat_multiplier

__all__ = [
    # Value objects
    "Currency",
    "Money",
    "vat_multiplier",
    "CurrencyRegistry",
    # Clock
    "Clock",
    "SystemClock",
    "DeterministicClock",
    # Stock movements
    "MovementType",
    "MoneyField",
    "StockMovement",
    "OrderLineStockMovements",
    "StockMovementBook",
    "Violation",
    "check_stock_movement",
    # External references
    "Product",
    "ProductPrice",
    "Order",
    "OrderLine",
]
