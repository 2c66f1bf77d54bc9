"""
References -- the external entities a stock movement points at.

Products, orders and order lines are owned by the webshop catalogue and order
system, not by the stock kernel. A movement only holds non-owning references
to them and reads the attributes declared here.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from stock_kernel.domain.values import Currency, Money


@runtime_checkable
class ProductPrice(Protocol):
    """One entry of a product's price list, in a single currency."""

    def unit_price_excl_vat(self, vat_percentage: Decimal | str) -> Money:
        """The list price per unit, with VAT at ``vat_percentage`` removed."""
        ...


@runtime_checkable
class Product(Protocol):
    id: Any
    number: str | None
    # None when the catalogue does not know
    is_variant_master: bool | None

    def find_price_by_currency(self, currency: Currency) -> ProductPrice | None:
        ...


@runtime_checkable
class Order(Protocol):
    id: Any
    external_id: Any
    created_date: datetime


@runtime_checkable
class OrderLine(Protocol):
    id: Any
    external_id: Any
    quantity: int
    # incl. VAT
    unit_price: Money
    unit_price_excl_vat: Money
    vat_pct: Decimal | str
    product: Product | None
    order: Order
    product_number: str | None
