"""Currency -- ISO 4217 registry for the trade corridor and precision-derived rounding."""

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from resale_kernel.exceptions import InvalidCurrencyError


@dataclass(frozen=True)
class CurrencyInfo:
    """One registered currency: code, minor-unit digits, display name and symbol."""

    code: str
    decimal_places: int
    name: str
    symbol: str

    @property
    def quantum(self) -> Decimal:
        """Smallest representable unit, for Decimal.quantize()."""
        return Decimal(1).scaleb(-self.decimal_places)


def _normalize(code: object) -> str | None:
    if isinstance(code, str) and code.strip():
        return code.strip().upper()
    return None


class CurrencyRegistry:
    """
    Registry of the currencies the business buys and sells in.

    Decimal places follow ISO 4217.  PYG has no minor unit, which is why
    local-currency amounts always round to whole guaranies.
    """

    _REGISTERED: ClassVar[dict[str, CurrencyInfo]] = {
        info.code: info
        for info in (
            # purchase side
            CurrencyInfo("USD", 2, "US Dollar", "US$"),
            CurrencyInfo("EUR", 2, "Euro", "€"),
            CurrencyInfo("CNY", 2, "Chinese Yuan", "¥"),
            CurrencyInfo("GBP", 2, "Pound Sterling", "£"),
            # Mercosur and neighbours
            CurrencyInfo("PYG", 0, "Paraguayan Guarani", "G$"),
            CurrencyInfo("ARS", 2, "Argentine Peso", "AR$"),
            CurrencyInfo("BRL", 2, "Brazilian Real", "R$"),
            CurrencyInfo("UYU", 2, "Uruguayan Peso", "$U"),
            CurrencyInfo("BOB", 2, "Bolivian Boliviano", "Bs"),
            CurrencyInfo("CLP", 0, "Chilean Peso", "CLP$"),
            CurrencyInfo("PEN", 2, "Peruvian Sol", "S/"),
            CurrencyInfo("COP", 2, "Colombian Peso", "COL$"),
            CurrencyInfo("MXN", 2, "Mexican Peso", "MX$"),
        )
    }

    DEFAULT_DECIMAL_PLACES: ClassVar[int] = 2

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        key = _normalize(code)
        return cls._REGISTERED.get(key) if key else None

    @classmethod
    def is_valid(cls, code: str) -> bool:
        return cls.get_info(code) is not None

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """Minor-unit digits, or DEFAULT_DECIMAL_PLACES for an unknown code."""
        info = cls.get_info(code)
        return cls.DEFAULT_DECIMAL_PLACES if info is None else info.decimal_places

    @classmethod
    def get_symbol(cls, code: str) -> str:
        info = cls.get_info(code)
        return code if info is None else info.symbol

    @classmethod
    def validate(cls, code: str) -> str:
        """Return the uppercased code, or raise InvalidCurrencyError."""
        info = cls.get_info(code)
        if info is None:
            raise InvalidCurrencyError(str(code))
        return info.code

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._REGISTERED)
