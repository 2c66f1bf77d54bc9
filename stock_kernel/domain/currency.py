"""Currency -- ISO 4217 codes and their minor-unit exponents."""

from typing import ClassVar


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies a webshop can price in.

    Maps each code to its number of decimal places, which fixes how many
    minor units make one major unit.
    """

    _DECIMAL_PLACES: ClassVar[dict[str, int]] = {
        # Nordic shop currencies
        "DKK": 2,
        "SEK": 2,
        "NOK": 2,
        "ISK": 0,
        # Major currencies
        "EUR": 2,
        "USD": 2,
        "GBP": 2,
        "CHF": 2,
        "CAD": 2,
        "AUD": 2,
        "NZD": 2,
        "JPY": 0,
        "CNY": 2,
        "HKD": 2,
        "SGD": 2,
        # European neighbours
        "PLN": 2,
        "CZK": 2,
        "HUF": 2,
        "RON": 2,
        "BGN": 2,
        "TRY": 2,
        # Zero and three decimal currencies
        "KRW": 0,
        "CLP": 0,
        "KWD": 3,
        "BHD": 3,
        "OMR": 3,
        # Testing code
        "XTS": 2,
    }

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def _normalize(cls, code: str) -> str | None:
        if not code or not isinstance(code, str):
            return None
        return code.upper().strip()

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check if a currency code is a known ISO 4217 code."""
        return cls._normalize(code) in cls._DECIMAL_PLACES

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Minor-unit exponent for a currency; unknown codes fall back to 2."""
        return cls._DECIMAL_PLACES.get(cls._normalize(code), cls.DEFAULT_DECIMAL_PLACES)
