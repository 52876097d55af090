"""
Repository pattern implementation.
Abstracts database access to decouple domain logic from persistence.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from django.core.exceptions import ValidationError

from apps.pricing.domain import models as domain
from apps.pricing.domain.exceptions import UnknownCurrency
from apps.pricing.domain.interfaces import BasePricingSnapshotLoader
from apps.pricing.infrastructure.persistence.models import (
    CatalogKind,
    Currency,
    ExchangeRate,
    Product,
    Service,
)

logger = logging.getLogger(__name__)


def currency_to_domain(currency: Currency) -> domain.Currency:
    return domain.Currency(
        id=str(currency.id),
        code=currency.code,
        symbol=currency.symbol,
        name=currency.name,
        is_default=currency.is_default,
    )


def rate_to_domain(rate: ExchangeRate) -> domain.ExchangeRate:
    return domain.ExchangeRate(
        from_currency_id=str(rate.from_currency_id),
        to_currency_id=str(rate.to_currency_id),
        rate=rate.rate,
        id=str(rate.id),
    )


def product_to_domain(product: Product) -> domain.CatalogItem:
    return domain.CatalogItem(
        id=str(product.id),
        name=product.name,
        unit_price=product.price,
        vat_rate=product.vat_rate,
        kind=CatalogKind.PRODUCT,
    )


def service_to_domain(service: Service) -> domain.CatalogItem:
    return domain.CatalogItem(
        id=str(service.id),
        name=service.name,
        unit_price=service.default_price,
        vat_rate=service.vat_rate,
        kind=CatalogKind.SERVICE,
    )


class CurrencyRepository:
    """Repository for Currency aggregate."""

    @staticmethod
    def get_by_id(currency_id) -> Optional[Currency]:
        """Get currency by primary key."""
        try:
            return Currency.objects.get(pk=currency_id)
        except (Currency.DoesNotExist, ValidationError, ValueError):
            return None

    @staticmethod
    def get_by_code(code: str) -> Optional[Currency]:
        """Get currency by code."""
        try:
            return Currency.objects.get(code=code.upper())
        except Currency.DoesNotExist:
            return None

    @staticmethod
    def get_default() -> Optional[Currency]:
        return Currency.objects.filter(is_default=True).first()

    @staticmethod
    def get_all() -> List[Currency]:
        return list(Currency.objects.all())

    @staticmethod
    def create(code: str, name: str, symbol: str, is_default: bool = False) -> Currency:
        """Create a new currency."""
        return Currency.objects.create(
            code=code.upper(),
            name=name,
            symbol=symbol,
            is_default=is_default,
        )

    @staticmethod
    def make_default(currency: Currency) -> Currency:
        """Mark a currency as default; save() clears the flag elsewhere."""
        currency.is_default = True
        currency.save()
        return currency


class ExchangeRateRepository:
    """Repository for ExchangeRate aggregate."""

    @staticmethod
    def get_all() -> List[ExchangeRate]:
        return list(ExchangeRate.objects.select_related("from_currency", "to_currency"))

    @staticmethod
    def create(from_currency: Currency, to_currency: Currency, rate: Decimal) -> ExchangeRate:
        """Create a new exchange rate."""
        return ExchangeRate.objects.create(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
        )


class CatalogRepository:
    """Repository for products and services."""

    @staticmethod
    def get_products(item_ids: Iterable[str]) -> List[Product]:
        return list(Product.objects.filter(pk__in=list(item_ids)))

    @staticmethod
    def get_services(item_ids: Iterable[str]) -> List[Service]:
        return list(Service.objects.filter(pk__in=list(item_ids)))


class OrmPricingSnapshotLoader(BasePricingSnapshotLoader):
    """
    Loads a PricingContext from the database.

    Currencies and rates are read once per call, so a quote built from one
    context never mixes rate table versions.
    """

    def load_context(self, document_currency_id, home_currency_id=None) -> domain.PricingContext:
        currencies = tuple(currency_to_domain(c) for c in CurrencyRepository.get_all())
        rates = tuple(rate_to_domain(r) for r in ExchangeRateRepository.get_all())
        directory = domain.CurrencyDirectory(currencies)

        document_currency_id = str(document_currency_id)
        if directory.get(document_currency_id) is None:
            raise UnknownCurrency(f"Currency {document_currency_id} not found")

        if home_currency_id is None:
            home_currency_id = directory.default_currency().id
        else:
            home_currency_id = str(home_currency_id)
            if directory.get(home_currency_id) is None:
                raise UnknownCurrency(f"Currency {home_currency_id} not found")

        logger.debug(
            "Loaded pricing snapshot: %d currencies, %d rates, home=%s document=%s",
            len(currencies), len(rates), home_currency_id, document_currency_id
        )

        return domain.PricingContext(
            document_currency_id=document_currency_id,
            home_currency_id=home_currency_id,
            rates=rates,
            currencies=currencies,
        )

    def get_catalog_items(self, kind: str, item_ids: Iterable[str]) -> List[domain.CatalogItem]:
        item_ids = list(item_ids)
        try:
            if kind == CatalogKind.PRODUCT:
                return [product_to_domain(p) for p in CatalogRepository.get_products(item_ids)]
            if kind == CatalogKind.SERVICE:
                return [service_to_domain(s) for s in CatalogRepository.get_services(item_ids)]
        except ValidationError:
            # malformed UUIDs match nothing
            return []
        return []
