"""Enumerations shared by the stock movement domain."""

from enum import Enum, unique


@unique
class MovementType(str, Enum):
    """What caused the stock level to change."""

    SALE = "sale"
    RETURN = "return"
    REGULATION = "regulation"
    DELIVERY = "delivery"

    @classmethod
    def choices(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


@unique
class MoneyField(str, Enum):
    """The monetary fields stored on a stock movement, all excl. VAT."""

    PRICE = "price"
    TOTAL_PRICE = "total_price"
    RETAIL_PRICE = "retail_price"
    TOTAL_RETAIL_PRICE = "total_retail_price"
    DISCOUNT = "discount"
    TOTAL_DISCOUNT = "total_discount"
