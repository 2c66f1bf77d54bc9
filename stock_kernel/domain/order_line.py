"""
Order line stock movements -- the movements recorded for one order line.

Responsibility:
    ``OrderLineStockMovements`` owns the ordered movements of one order line,
    all for the same product, and folds them into one effective movement.
    ``StockMovementBook`` indexes those collections by order line id and
    detaches movements when an order line is deleted.

Architecture position:
    Kernel > Domain -- pure, no I/O. Movements keep a non-owning reference to
    their order line; the order line itself never points back, so there is
    no reference cycle.

Not safe for concurrent mutation. Callers serialize access per order line.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from stock_kernel.domain.stock_movement import StockMovement
from stock_kernel.exceptions import ProductMismatchError
from stock_kernel.logging_config import get_logger

logger = get_logger("domain.order_line")


class OrderLineStockMovements:
    """
    The stock movements of a single order line, in insertion order.

    Every movement references the product of the first movement added.
    """

    def __init__(self, order_line_id: Any = None):
        self.order_line_id = order_line_id
        self._movements: list[StockMovement] = []

    def add(self, movement: StockMovement) -> None:
        """
        Attach a movement.

        Raises:
            ProductMismatchError: the movement is for another product than the
                first movement already attached.
        """
        self._check_product(movement)
        if movement in self:
            return
        self._movements.append(movement)
        logger.debug(
            "order_line_movement_added",
            extra={
                "order_line_id": self.order_line_id,
                "product_id": movement.product_id,
                "quantity": movement.quantity,
                "movement_count": len(self._movements),
            },
        )

    def add_all(self, movements: Iterable[StockMovement]) -> None:
        """
        Attach several movements, all or nothing.

        Every movement is checked before any is attached, so a product
        mismatch leaves the collection unchanged.
        """
        movements = list(movements)
        reference = self.first or (movements[0] if movements else None)
        if reference is not None:
            for movement in movements:
                if movement.product_id != reference.product_id:
                    raise ProductMismatchError(reference.product_id, movement.product_id)
        for movement in movements:
            self.add(movement)

    def compute_effective_movement(self) -> StockMovement | None:
        """
        Fold every movement into one net movement.

        Say these two movements belong to the order line:

            | qty | product |
            |-----|---------|
            | -1  | Jeans   |
            |  1  | Jeans   |

        then the effective movement is a copy of the last one with quantity
        0. Prices, type and product are those of the last movement added.

        Returns None when the order line has no movements.
        """
        if not self._movements:
            return None

        quantity = sum(movement.quantity for movement in self._movements)
        effective = self._movements[-1].copy()
        effective.quantity = quantity

        logger.debug(
            "effective_movement_computed",
            extra={
                "order_line_id": self.order_line_id,
                "product_id": effective.product_id,
                "quantity": quantity,
                "movement_count": len(self._movements),
            },
        )
        return effective

    @property
    def first(self) -> StockMovement | None:
        return self._movements[0] if self._movements else None

    @property
    def last(self) -> StockMovement | None:
        return self._movements[-1] if self._movements else None

    def _check_product(self, movement: StockMovement) -> None:
        first = self.first
        if first is not None and movement.product_id != first.product_id:
            raise ProductMismatchError(first.product_id, movement.product_id)

    def __contains__(self, movement: object) -> bool:
        return any(existing is movement for existing in self._movements)

    def __iter__(self) -> Iterator[StockMovement]:
        return iter(list(self._movements))

    def __len__(self) -> int:
        return len(self._movements)

    def __repr__(self) -> str:
        return f"<OrderLineStockMovements {self.order_line_id}: {len(self)} movement(s)>"


class StockMovementBook:
    """Order line movement collections indexed by order line id."""

    def __init__(self) -> None:
        self._by_order_line: dict[Any, OrderLineStockMovements] = {}

    def for_order_line(self, order_line_id: Any) -> OrderLineStockMovements:
        """The collection for an order line, created empty on first request."""
        movements = self._by_order_line.get(order_line_id)
        if movements is None:
            movements = OrderLineStockMovements(order_line_id)
            self._by_order_line[order_line_id] = movements
        return movements

    def get(self, order_line_id: Any) -> OrderLineStockMovements | None:
        return self._by_order_line.get(order_line_id)

    def record(self, movement: StockMovement) -> OrderLineStockMovements:
        """Attach a movement to the collection of the order line it references."""
        if movement.order_line_id is None:
            raise ValueError("Stock movement does not reference an order line")
        movements = self.for_order_line(movement.order_line_id)
        movements.add(movement)
        return movements

    def remove_order_line(self, order_line_id: Any) -> list[StockMovement]:
        """
        Forget an order line that was deleted elsewhere.

        Its movements lose their order line reference and are flagged with
        ``order_line_removed`` so that sale movements still validate.

        Returns:
            The detached movements.
        """
        movements = self._by_order_line.pop(order_line_id, None)
        if movements is None:
            return []

        detached = list(movements)
        for movement in detached:
            movement.order_line = None
            movement.order_line_removed = True

        logger.info(
            "order_line_removed",
            extra={"order_line_id": order_line_id, "movement_count": len(detached)},
        )
        return detached

    def order_line_ids(self) -> list[Any]:
        return list(self._by_order_line)

    def __len__(self) -> int:
        return len(self._by_order_line)
