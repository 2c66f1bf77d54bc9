"""
Values -- Immutable, self-validating domain value objects.

Responsibility:
    Provides Currency and Money for every price on a stock movement, plus the
    VAT multiplier used to derive VAT-inclusive views. Amounts are integers in
    the currency's minor unit (øre, cents), matching how a webshop stores
    prices.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    No outward dependencies except stock_kernel.domain.currency and
    stock_kernel.exceptions.

Failure modes:
    - ValueError on construction with invalid currencies or decimal strings
    - TypeError when a float or other non-exact number is supplied
    - CurrencyMismatchError when arithmetic mixes different currencies
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from stock_kernel.domain.currency import CurrencyRegistry
from stock_kernel.exceptions import CurrencyMismatchError


@dataclass(frozen=True, slots=True)
class Currency:
    """
    ISO 4217 currency code value object.

    Validated and normalized (uppercased) on construction. Invalid codes are
    rejected immediately.
    """

    code: str

    def __post_init__(self) -> None:
        normalized = self.code.upper().strip() if isinstance(self.code, str) else ""
        if not CurrencyRegistry.is_valid(normalized):
            raise ValueError(f"Invalid ISO 4217 currency code: {self.code}")
        object.__setattr__(self, "code", normalized)

    @property
    def decimal_places(self) -> int:
        return CurrencyRegistry.get_decimal_places(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency({self.code!r})"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount in integer minor units, paired with its Currency.

    Guarantees:
        - Immutable and hashable
        - amount is always an int (never float, never Decimal)
        - Addition, subtraction and comparison refuse to mix currencies
        - Multiplying by a Decimal is exact and rounds once, half-up, back to
          the minor unit

    Non-goals:
        - Does NOT perform currency conversion
    """

    amount: int
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(
                f"Money amount must be an int of minor units, got {type(self.amount).__name__}"
            )
        if isinstance(self.currency, str):
            object.__setattr__(self, "currency", Currency(self.currency))
        elif not isinstance(self.currency, Currency):
            raise TypeError(f"currency must be Currency or str, got {type(self.currency)}")

    @classmethod
    def of(cls, amount: int, currency: str | Currency) -> Money:
        """Create Money from an amount in minor units."""
        return cls(amount=amount, currency=currency)

    @classmethod
    def zero(cls, currency: str | Currency) -> Money:
        return cls(amount=0, currency=currency)

    @classmethod
    def from_decimal(cls, amount: Decimal | str, currency: str | Currency) -> Money:
        """
        Create Money from an amount in major units.

        ``Money.from_decimal("99.95", "DKK")`` is 9995 øre. Sub-minor-unit
        fractions are rounded half-up.
        """
        if isinstance(amount, float):
            raise TypeError("Money cannot be built from float; pass Decimal or str")
        if isinstance(currency, str):
            currency = Currency(currency)
        try:
            major = Decimal(str(amount))
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {amount}") from e
        minor = major.scaleb(currency.decimal_places).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        return cls(amount=int(minor), currency=currency)

    def to_decimal(self) -> Decimal:
        """The amount in major units, e.g. Decimal("99.95") for 9995 øre."""
        return Decimal(self.amount).scaleb(-self.currency.decimal_places)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency.code, other.currency.code)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(amount=self.amount + other.amount, currency=self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(amount=self.amount - other.amount, currency=self.currency)

    def __neg__(self) -> Money:
        return Money(amount=-self.amount, currency=self.currency)

    def __abs__(self) -> Money:
        return Money(amount=abs(self.amount), currency=self.currency)

    def __mul__(self, factor: Decimal | int | str) -> Money:
        """Multiply by a scalar, rounding half-up to the minor unit."""
        if isinstance(factor, bool):
            return NotImplemented
        if isinstance(factor, int):
            return Money(amount=self.amount * factor, currency=self.currency)
        if isinstance(factor, str):
            factor = Decimal(factor)
        if not isinstance(factor, Decimal):
            return NotImplemented
        product = (Decimal(self.amount) * factor).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
        return Money(amount=int(product), currency=self.currency)

    def __rmul__(self, factor: Decimal | int | str) -> Money:
        return self.__mul__(factor)

    def __lt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount >= other.amount

    def __str__(self) -> str:
        return f"{self.to_decimal()} {self.currency.code}"

    def __repr__(self) -> str:
        return f"Money({self.amount!r}, {self.currency!r})"


def parse_vat_percentage(value: Decimal | str | int) -> Decimal:
    """
    Parse a VAT percentage into a Decimal.

    Floats are refused: ``25.0`` must be passed as ``"25.0"`` or
    ``Decimal("25.0")``.
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(
            f"VAT percentage must be Decimal, str or int, got {type(value).__name__}"
        )
    try:
        parsed = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid VAT percentage: {value!r}") from e
    if not parsed.is_finite():
        raise ValueError(f"Invalid VAT percentage: {value!r}")
    return parsed


def vat_multiplier(vat_percentage: Decimal | str | int) -> Decimal:
    """
    Multiplier that turns an excl. VAT amount into an incl. VAT amount.

    A VAT percentage of "25" gives Decimal("1.25").
    """
    return (Decimal(100) + parse_vat_percentage(vat_percentage)) / Decimal(100)
