"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Tuple

from apps.pricing.domain.exceptions import (
    AmbiguousDefaultCurrency,
    DefaultCurrencyNotConfigured,
    RateNotFound,
)


FALLBACK_CURRENCY_SYMBOL = "$"


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Currency:

    id: str
    code: str
    symbol: str
    name: str = ""
    is_default: bool = False


@dataclass(frozen=True)
class ExchangeRate:

    from_currency_id: str
    to_currency_id: str
    rate: Decimal
    id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "rate", to_decimal(self.rate))
        if not self.rate.is_finite() or self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")


@dataclass(frozen=True)
class CatalogItem:
    """A product or service whose price is stored in the home currency."""

    id: str
    name: str
    unit_price: Decimal
    vat_rate: Decimal = Decimal("0")
    kind: str = "product"

    def __post_init__(self):
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        object.__setattr__(self, "vat_rate", to_decimal(self.vat_rate))


@dataclass(frozen=True)
class LineItem:
    """
    One invoice or cart line, priced in the document currency.

    Numeric fields may be left as None while a form is partially filled;
    the calculator reads them as zero.
    """

    description: str = ""
    quantity: Any = None
    unit_price: Any = None
    vat_rate: Any = None


class CurrencyDirectory:
    """Read-only view over the known currencies."""

    def __init__(self, currencies):
        self._currencies = tuple(currencies)

    def __iter__(self):
        return iter(self._currencies)

    def __len__(self):
        return len(self._currencies)

    def get(self, currency_id) -> Optional[Currency]:
        return next((c for c in self._currencies if c.id == currency_id), None)

    def get_by_code(self, code: str) -> Optional[Currency]:
        code = code.upper()
        return next((c for c in self._currencies if c.code == code), None)

    def default_currency(self) -> Currency:
        defaults = [c for c in self._currencies if c.is_default]
        if not defaults:
            raise DefaultCurrencyNotConfigured("No currency is marked as default")
        if len(defaults) > 1:
            codes = ", ".join(c.code for c in defaults)
            raise AmbiguousDefaultCurrency(f"Several currencies are marked as default: {codes}")
        return defaults[0]

    def symbol_for(self, currency_id, fallback: str = FALLBACK_CURRENCY_SYMBOL) -> str:
        currency = self.get(currency_id)
        return currency.symbol if currency else fallback


@dataclass(frozen=True)
class PricingContext:
    """
    Snapshot of everything one pricing computation reads.

    Built once per document so every line sees the same rate table.
    """

    document_currency_id: str
    home_currency_id: str
    rates: Tuple[ExchangeRate, ...] = ()
    currencies: Tuple[Currency, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rates", tuple(self.rates))
        object.__setattr__(self, "currencies", tuple(self.currencies))

    @property
    def directory(self) -> CurrencyDirectory:
        return CurrencyDirectory(self.currencies)

    def symbol(self, fallback: str = FALLBACK_CURRENCY_SYMBOL) -> str:
        return self.directory.symbol_for(self.document_currency_id, fallback)


@dataclass(frozen=True)
class RateResolution:

    from_currency_id: Optional[str]
    to_currency_id: Optional[str]
    found: bool
    rate: Optional[Decimal] = None

    @classmethod
    def identity(cls, currency_id) -> "RateResolution":
        return cls(currency_id, currency_id, True, Decimal("1"))

    @classmethod
    def not_found(cls, from_currency_id, to_currency_id) -> "RateResolution":
        return cls(from_currency_id, to_currency_id, False)

    @property
    def factor(self) -> Decimal:
        if not self.found:
            raise RateNotFound(self.from_currency_id, self.to_currency_id)
        return self.rate


@dataclass(frozen=True)
class ConversionDegraded:
    """Notice that an amount was left unconverted for lack of a rate."""

    from_currency_id: Optional[str]
    to_currency_id: Optional[str]
    amount: Decimal

    @property
    def message(self) -> str:
        return self.describe()

    def describe(self, directory: Optional["CurrencyDirectory"] = None) -> str:
        source, target = self.from_currency_id, self.to_currency_id
        if directory is not None:
            source = getattr(directory.get(source), "code", source)
            target = getattr(directory.get(target), "code", target)
        return f"No exchange rate found from {source} to {target}. Using original price."


@dataclass(frozen=True)
class ConversionResult:

    amount: Decimal
    converted_amount: Decimal
    rate: Optional[Decimal] = None
    warning: Optional[ConversionDegraded] = field(default=None)

    @property
    def degraded(self) -> bool:
        return self.warning is not None
