"""
Data Transfer Objects for the application layer.
DTOs decouple internal domain models from external API contracts.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Optional


@dataclass
class ConversionResultDTO:
    """Result DTO for a single price conversion."""
    from_currency: str
    to_currency: str
    amount: Decimal
    converted_amount: Decimal
    rate: Optional[Decimal] = None
    degraded: bool = False
    warning: Optional[str] = None


@dataclass
class QuoteLineRequestDTO:
    """
    One requested invoice / cart line.

    Catalog-sourced lines carry catalog_kind and catalog_item_id; their
    unit_price, when given, is in the home currency. Free-form lines are
    already in the document currency.
    """
    description: str = ""
    quantity: Any = None
    unit_price: Any = None
    vat_rate: Any = None
    catalog_kind: Optional[str] = None
    catalog_item_id: Optional[str] = None

    @property
    def is_catalog_sourced(self) -> bool:
        return bool(self.catalog_kind and self.catalog_item_id)


@dataclass
class QuoteRequestDTO:
    """Request DTO for pricing a whole document."""
    document_currency_id: str
    lines: List[QuoteLineRequestDTO] = field(default_factory=list)
    home_currency_id: Optional[str] = None


@dataclass
class QuoteLineResultDTO:
    description: str
    quantity: Decimal
    unit_price: Decimal
    vat_rate: Decimal
    total: Decimal
    catalog_kind: Optional[str] = None
    catalog_item_id: Optional[str] = None
    degraded: bool = False


@dataclass
class QuoteResultDTO:
    """Result DTO for a priced document, full precision."""
    document_currency_id: str
    currency_code: str
    currency_symbol: str
    lines: List[QuoteLineResultDTO]
    total_amount: Decimal
    warnings: List[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)
