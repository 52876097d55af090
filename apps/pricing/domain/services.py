"""
Domain services - Core pricing logic.
Currency conversion over a directed rate table, VAT-inclusive line totals
and document totals. Every function here is pure over its arguments.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable

from apps.pricing.domain.exceptions import InvalidLineItem
from apps.pricing.domain.models import (
    CatalogItem,
    ConversionDegraded,
    ConversionResult,
    ExchangeRate,
    LineItem,
    RateResolution,
    to_decimal,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")


def _line_value(item: LineItem, field_name: str) -> Decimal:
    raw = getattr(item, field_name)
    if raw is None or raw == "":
        return ZERO
    try:
        value = to_decimal(raw)
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidLineItem(f"{field_name} is not a number: {raw!r}")
    if not value.is_finite():
        raise InvalidLineItem(f"{field_name} must be a finite number, got {raw!r}")
    if value < 0:
        raise InvalidLineItem(f"{field_name} must be non-negative, got {value}")
    return value


class PricingService:
    """
    Domain service for multi-currency document pricing.

    Conversion policy:
    1. Same currency on both sides -> factor 1, table not consulted
    2. First table entry matching (from, to) exactly -> its rate
    3. No entry -> amount kept as is, with a ConversionDegraded warning
    """

    @staticmethod
    def resolve_rate(
        from_currency_id,
        to_currency_id,
        rates: Iterable[ExchangeRate]
    ) -> RateResolution:
        """
        Find the multiplicative factor converting from_currency into to_currency.

        Reverse-direction entries are never inverted.
        """
        if from_currency_id is not None and from_currency_id == to_currency_id:
            return RateResolution.identity(from_currency_id)

        if from_currency_id is None or to_currency_id is None:
            return RateResolution.not_found(from_currency_id, to_currency_id)

        for entry in rates:
            if entry.from_currency_id == from_currency_id and entry.to_currency_id == to_currency_id:
                return RateResolution(from_currency_id, to_currency_id, True, entry.rate)

        return RateResolution.not_found(from_currency_id, to_currency_id)

    @staticmethod
    def convert_price(
        amount,
        from_currency_id,
        to_currency_id,
        rates: Iterable[ExchangeRate]
    ) -> ConversionResult:
        """
        Convert an amount between currencies.

        Args:
            amount: Amount in from_currency
            from_currency_id: Source currency id
            to_currency_id: Target currency id
            rates: Exchange rate snapshot

        Returns:
            ConversionResult; when no rate exists the amount comes back
            unchanged and ``warning`` is set. No rounding is applied.

        Example:
            >>> result = PricingService.convert_price(Decimal("10"), eur.id, bam.id, rates)
            >>> result.converted_amount
            Decimal('19.5583')
        """
        amount = to_decimal(amount)
        resolution = PricingService.resolve_rate(from_currency_id, to_currency_id, rates)

        if not resolution.found:
            warning = ConversionDegraded(from_currency_id, to_currency_id, amount)
            logger.warning(warning.message)
            return ConversionResult(amount=amount, converted_amount=amount, warning=warning)

        return ConversionResult(
            amount=amount,
            converted_amount=amount * resolution.rate,
            rate=resolution.rate,
        )

    @staticmethod
    def line_total(item: LineItem) -> Decimal:
        """
        quantity * unit_price * (1 + vat_rate).

        Missing fields count as zero. Negative, NaN or infinite values
        raise InvalidLineItem.
        """
        quantity = _line_value(item, "quantity")
        unit_price = _line_value(item, "unit_price")
        vat_rate = _line_value(item, "vat_rate")
        return quantity * unit_price * (ONE + vat_rate)

    @staticmethod
    def aggregate_total(items: Iterable[LineItem]) -> Decimal:
        return sum((PricingService.line_total(item) for item in items), ZERO)

    @staticmethod
    def project_catalog_price(
        item: CatalogItem,
        home_currency_id,
        document_currency_id,
        rates: Iterable[ExchangeRate]
    ) -> ConversionResult:
        """Express a catalog item's home-currency price in the document currency."""
        return PricingService.convert_price(
            item.unit_price,
            home_currency_id,
            document_currency_id,
            rates
        )
