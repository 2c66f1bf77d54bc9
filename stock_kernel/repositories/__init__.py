"""Repository wrappers around the caller's SQLAlchemy session."""

from stock_kernel.repositories.base import AbstractRepository
from stock_kernel.repositories.stock_movement import StockMovementRepository

__all__ = [
    "AbstractRepository",
    "StockMovementRepository",
]
