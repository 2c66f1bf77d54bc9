"""ORM models for the stock kernel."""

from stock_kernel.models.stock_movement import StockMovementModel

__all__ = [
    "StockMovementModel",
]
