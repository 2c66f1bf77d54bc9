"""
StockMovementRepository -- persistence of validated stock movements.

Responsibility:
    Writes domain ``StockMovement`` objects to ``lds_stock_movements`` and
    reads rows back by id, product, order line and type. Every write is
    preceded by ``StockMovement.validate()``; an invalid movement never
    reaches the session.

Failure modes:
    - ValidationError when the movement breaks a rule (nothing is written).
    - StockMovementNotFoundError when updating or loading an unknown id.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.enums import MovementType
from stock_kernel.domain.stock_movement import StockMovement
from stock_kernel.domain.validation import DEFAULT_REFERENCE_MAX_LENGTH
from stock_kernel.exceptions import StockMovementNotFoundError
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.models.stock_movement import StockMovementModel
from stock_kernel.repositories.base import AbstractRepository

logger = get_logger("repositories.stock_movement")


class StockMovementRepository(AbstractRepository[StockMovementModel]):
    """Stores stock movements within the caller's transaction."""

    model_class = StockMovementModel

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        reference_max_length: int = DEFAULT_REFERENCE_MAX_LENGTH,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._reference_max_length = reference_max_length

    def save_movement(self, movement: StockMovement) -> StockMovementModel:
        """
        Validate and write a movement, inserting or updating its row.

        Missing timestamps are filled from the clock; an update always moves
        ``updated_at`` forward. The generated id is assigned back to the
        domain movement.

        Raises:
            ValidationError: the movement breaks a rule.
            StockMovementNotFoundError: the movement has an id with no row.
        """
        movement.validate(reference_max_length=self._reference_max_length)

        now = self._clock.now()
        if movement.created_at is None:
            movement.created_at = now

        if movement.id is None:
            if movement.updated_at is None:
                movement.updated_at = now
            model = StockMovementModel.from_domain(movement)
            self.save(model)
        else:
            model = self.get(movement.id)
            movement.updated_at = now
            model.apply(movement)
            self.flush()

        movement.id = model.id

        with LogContext.bind_movement(movement):
            logger.info(
                "stock_movement_saved",
                extra={"movement_type": movement.type, "quantity": model.quantity},
            )
        return model

    def get(self, movement_id: UUID) -> StockMovementModel:
        model = self.session.get(StockMovementModel, movement_id)
        if model is None:
            raise StockMovementNotFoundError(movement_id)
        return model

    def find_by_product_id(self, product_id: Any) -> list[StockMovementModel]:
        return self._find(StockMovementModel.product_id == str(product_id))

    def find_by_order_line_id(self, order_line_id: Any) -> list[StockMovementModel]:
        return self._find(StockMovementModel.order_line_id == str(order_line_id))

    def find_by_type(self, movement_type: MovementType | str) -> list[StockMovementModel]:
        return self._find(
            StockMovementModel.movement_type == MovementType(movement_type).value
        )

    def mark_order_line_removed(self, order_line_id: Any) -> int:
        """
        Detach stored movements from an order line that was deleted.

        Returns:
            The number of rows flagged.
        """
        result = self.session.execute(
            update(StockMovementModel)
            .where(StockMovementModel.order_line_id == str(order_line_id))
            .values(
                order_line_id=None,
                order_line_removed=True,
                updated_at=self._clock.now(),
            )
            .execution_options(synchronize_session="fetch")
        )
        self.flush()
        with LogContext.bind(order_line_id=order_line_id):
            logger.info("stored_order_line_removed", extra={"movement_count": result.rowcount})
        return result.rowcount

    def _find(self, criterion) -> list[StockMovementModel]:
        stmt = (
            select(StockMovementModel)
            .where(criterion)
            .order_by(StockMovementModel.created_at, StockMovementModel.id)
        )
        return list(self.session.scalars(stmt))
