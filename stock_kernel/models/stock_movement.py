"""
Module: stock_kernel.models.stock_movement
Responsibility: ORM persistence for stock movements. One row per validated
    ``stock_kernel.domain.stock_movement.StockMovement``.
Architecture position: Kernel > Models. May import from db/ and domain/.
    MUST NOT import from repositories/.

Invariants enforced:
    - Products and order lines are external: only their ids are stored
      (product_id NOT NULL, order_line_id nullable), never foreign keys into
      tables this kernel does not own.
    - Money columns are integer minor units in the row's single currency.
    - Derived columns (totals, discounts) are copied from the domain object,
      which recomputes them; the ORM never calculates them itself.

Failure modes:
    - IntegrityError on a missing product_id or currency (NOT NULL).
    - ProductMismatchError from to_domain() when the supplied product is not
      the one stored on the row.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import TrackedBase
from stock_kernel.domain.enums import MoneyField
from stock_kernel.domain.stock_movement import StockMovement
from stock_kernel.domain.values import Money
from stock_kernel.exceptions import ProductMismatchError

if TYPE_CHECKING:
    from stock_kernel.domain.references import OrderLine, Product


class StockMovementModel(TrackedBase):
    """
    Persistent storage for stock movements.

    Guarantees:
        - (type) index supports listing movements per movement type.
        - product_id and order_line_id index lookups per product and per
          order line.
        - vat_percentage keeps two decimals, up to 999.99.
    """

    __tablename__ = "lds_stock_movements"

    __table_args__ = (
        Index("type_idx", "type"),
        Index("idx_stock_movement_product", "product_id"),
        Index("idx_stock_movement_order_line", "order_line_id"),
    )

    # Negative = outgoing (sale, complaint), positive = incoming
    quantity: Mapped[int] = mapped_column(nullable=False)

    complaint: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    reference: Mapped[str] = mapped_column(String(191), nullable=False, default="")

    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    # Money in minor units, excl. VAT
    retail_price: Mapped[int] = mapped_column(nullable=False)
    total_retail_price: Mapped[int] = mapped_column(nullable=False)
    price: Mapped[int] = mapped_column(nullable=False)
    total_price: Mapped[int] = mapped_column(nullable=False)
    discount: Mapped[int] = mapped_column(nullable=False)
    total_discount: Mapped[int] = mapped_column(nullable=False)

    vat_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)

    movement_type: Mapped[str] = mapped_column("type", String(191), nullable=False)

    product_id: Mapped[str] = mapped_column(String(100), nullable=False)

    order_line_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    order_line_removed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @classmethod
    def from_domain(cls, movement: StockMovement) -> StockMovementModel:
        """A new row holding ``movement``. The movement must be valid."""
        model = cls()
        model.apply(movement)
        return model

    def apply(self, movement: StockMovement) -> None:
        """Copy every persisted field of ``movement`` onto this row."""
        self.quantity = movement.quantity
        self.complaint = movement.complaint
        self.reference = movement.reference
        self.currency = movement.currency
        self.retail_price = movement.minor_units(MoneyField.RETAIL_PRICE)
        self.total_retail_price = movement.minor_units(MoneyField.TOTAL_RETAIL_PRICE)
        self.price = movement.minor_units(MoneyField.PRICE)
        self.total_price = movement.minor_units(MoneyField.TOTAL_PRICE)
        self.discount = movement.minor_units(MoneyField.DISCOUNT)
        self.total_discount = movement.minor_units(MoneyField.TOTAL_DISCOUNT)
        self.vat_percentage = Decimal(movement.vat_percentage)
        self.movement_type = movement.type.value
        self.product_id = str(movement.product_id)
        self.order_line_id = (
            str(movement.order_line_id) if movement.order_line_id is not None else None
        )
        self.order_line_removed = movement.order_line_removed
        if movement.created_at is not None:
            self.created_at = movement.created_at
        if movement.updated_at is not None:
            self.updated_at = movement.updated_at

    def to_domain(
        self,
        product: Product,
        order_line: OrderLine | None = None,
    ) -> StockMovement:
        """
        Rebuild the domain movement.

        The caller supplies the product (and order line, if still present)
        since those entities live outside the stock kernel.
        """
        if str(product.id) != self.product_id:
            raise ProductMismatchError(self.product_id, product.id)

        movement = StockMovement()
        movement.id = self.id
        movement.quantity = self.quantity
        movement.complaint = self.complaint
        movement.reference = self.reference
        movement.retail_price = Money(amount=self.retail_price, currency=self.currency)
        movement.price = Money(amount=self.price, currency=self.currency)
        movement.vat_percentage = Decimal(self.vat_percentage)
        movement.type = self.movement_type
        movement.product = product
        movement.order_line = order_line
        movement.order_line_removed = self.order_line_removed
        movement.created_at = self.created_at
        movement.updated_at = self.updated_at
        return movement

    def __repr__(self) -> str:
        return (
            f"<StockMovement {self.id}: {self.movement_type} product={self.product_id} "
            f"qty={self.quantity} @ {self.price} {self.currency}>"
        )
