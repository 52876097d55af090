"""
Quote use case: prices an invoice or a point-of-sale cart.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Tuple

from apps.pricing.application.dto import (
    QuoteLineRequestDTO,
    QuoteLineResultDTO,
    QuoteRequestDTO,
    QuoteResultDTO,
)
from apps.pricing.domain.exceptions import CatalogItemNotFound, UnknownCurrency
from apps.pricing.domain.interfaces import BasePricingSnapshotLoader
from apps.pricing.domain.models import (
    FALLBACK_CURRENCY_SYMBOL,
    CatalogItem,
    LineItem,
    PricingContext,
    to_decimal,
)
from apps.pricing.domain.services import PricingService

logger = logging.getLogger(__name__)


def _is_blank(value) -> bool:
    return value is None or value == ""


def _as_decimal(value) -> Decimal:
    return Decimal("0") if _is_blank(value) else to_decimal(value)


class QuoteService:
    """
    Prices a document from a single snapshot of currencies and rates.

    Steps:
    1. Load the pricing context once for the document currency
    2. Fetch every referenced catalog item, one query per catalog kind
    3. Project catalog prices into the document currency
    4. Compute line totals and the document total
    """

    def __init__(self, loader: BasePricingSnapshotLoader, fallback_symbol: str = FALLBACK_CURRENCY_SYMBOL):
        self.loader = loader
        self.fallback_symbol = fallback_symbol

    def build_quote(self, request: QuoteRequestDTO) -> QuoteResultDTO:
        context = self.loader.load_context(request.document_currency_id, request.home_currency_id)
        currency = context.directory.get(context.document_currency_id)
        if currency is None:
            raise UnknownCurrency(f"Currency {context.document_currency_id} not found")

        catalog = self._load_catalog(request.lines)

        lines: List[QuoteLineResultDTO] = []
        warnings: List[str] = []
        for line in request.lines:
            result, warning = self._price_line(line, context, catalog)
            lines.append(result)
            if warning and warning not in warnings:
                warnings.append(warning)

        total_amount = PricingService.aggregate_total(
            LineItem(r.description, r.quantity, r.unit_price, r.vat_rate) for r in lines
        )

        logger.info(
            "Quoted %d line(s) in %s: total=%s degraded=%s",
            len(lines), currency.code, total_amount, bool(warnings)
        )

        return QuoteResultDTO(
            document_currency_id=context.document_currency_id,
            currency_code=currency.code,
            currency_symbol=currency.symbol or self.fallback_symbol,
            lines=lines,
            total_amount=total_amount,
            warnings=warnings,
        )

    def _load_catalog(self, lines: List[QuoteLineRequestDTO]) -> Dict[Tuple[str, str], CatalogItem]:
        wanted: Dict[str, set] = {}
        for line in lines:
            if line.is_catalog_sourced:
                wanted.setdefault(line.catalog_kind, set()).add(str(line.catalog_item_id))

        catalog = {}
        for kind, item_ids in wanted.items():
            for item in self.loader.get_catalog_items(kind, item_ids):
                catalog[(kind, str(item.id))] = item

            missing = sorted(item_ids - {item_id for k, item_id in catalog if k == kind})
            if missing:
                raise CatalogItemNotFound(f"Unknown {kind}(s): {', '.join(missing)}")

        return catalog

    def _price_line(self, line: QuoteLineRequestDTO, context: PricingContext, catalog):
        warning = None
        vat_rate = line.vat_rate
        description = line.description

        if line.is_catalog_sourced:
            item = catalog[(line.catalog_kind, str(line.catalog_item_id))]
            base_price = item.unit_price if _is_blank(line.unit_price) else line.unit_price
            if _is_blank(vat_rate):
                vat_rate = item.vat_rate
            description = description or item.name

            conversion = PricingService.convert_price(
                base_price,
                context.home_currency_id,
                context.document_currency_id,
                context.rates
            )
            unit_price = conversion.converted_amount
            if conversion.degraded:
                warning = conversion.warning.describe(context.directory)
        else:
            unit_price = line.unit_price

        item = LineItem(description, line.quantity, unit_price, vat_rate)
        total = PricingService.line_total(item)

        return QuoteLineResultDTO(
            description=description,
            quantity=_as_decimal(line.quantity),
            unit_price=_as_decimal(unit_price),
            vat_rate=_as_decimal(vat_rate),
            total=total,
            catalog_kind=line.catalog_kind if line.is_catalog_sourced else None,
            catalog_item_id=str(line.catalog_item_id) if line.is_catalog_sourced else None,
            degraded=warning is not None,
        ), warning
