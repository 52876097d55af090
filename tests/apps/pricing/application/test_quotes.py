import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from apps.pricing.application.dto import QuoteLineRequestDTO, QuoteRequestDTO
from apps.pricing.application.quotes import QuoteService
from apps.pricing.domain.exceptions import CatalogItemNotFound, InvalidLineItem, UnknownCurrency
from apps.pricing.domain.interfaces import BasePricingSnapshotLoader
from apps.pricing.domain.models import CatalogItem, Currency, ExchangeRate, PricingContext


EUR = Currency(id="eur", code="EUR", symbol="€", is_default=True)
BAM = Currency(id="bam", code="BAM", symbol="KM")


class InMemoryLoader(BasePricingSnapshotLoader):
    """Snapshot loader backed by plain lists."""

    def __init__(self, currencies, rates, catalog):
        self.currencies = currencies
        self.rates = rates
        self.catalog = catalog
        self.context_loads = 0

    def load_context(self, document_currency_id, home_currency_id=None):
        self.context_loads += 1
        return PricingContext(
            document_currency_id=document_currency_id,
            home_currency_id=home_currency_id or EUR.id,
            rates=self.rates,
            currencies=self.currencies,
        )

    def get_catalog_items(self, kind, item_ids):
        return [i for i in self.catalog if i.kind == kind and i.id in set(item_ids)]


@pytest.fixture
def catalog():
    return [
        CatalogItem(id="svc-1", name="Consulting", unit_price=Decimal("10"), vat_rate=Decimal("0.17"), kind="service"),
        CatalogItem(id="prd-1", name="Cable", unit_price=Decimal("4"), vat_rate=Decimal("0"), kind="product"),
    ]


@pytest.fixture
def loader(catalog):
    return InMemoryLoader([EUR, BAM], [ExchangeRate(EUR.id, BAM.id, Decimal("1.95583"))], catalog)


class TestQuoteService:
    """Tests for pricing whole documents."""

    def test_catalog_line_converted_into_document_currency(self, loader):
        """
        Test that a service priced in EUR lands on a BAM invoice converted.
        """
        request = QuoteRequestDTO(
            document_currency_id=BAM.id,
            lines=[QuoteLineRequestDTO(quantity=3, catalog_kind="service", catalog_item_id="svc-1")],
        )

        quote = QuoteService(loader).build_quote(request)

        line = quote.lines[0]
        assert line.description == "Consulting"
        assert line.unit_price == Decimal("19.5583")
        assert line.vat_rate == Decimal("0.17")
        assert line.total == Decimal("68.649633")
        assert quote.total_amount == Decimal("68.649633")
        assert quote.currency_code == "BAM"
        assert quote.currency_symbol == "KM"
        assert not quote.degraded

    def test_custom_line_not_converted(self, loader):
        """
        Test that free-form lines are taken as already in the document currency.
        """
        request = QuoteRequestDTO(
            document_currency_id=BAM.id,
            lines=[QuoteLineRequestDTO(description="Setup", quantity=1, unit_price=Decimal("50"), vat_rate=Decimal("0.17"))],
        )

        quote = QuoteService(loader).build_quote(request)

        assert quote.lines[0].unit_price == Decimal("50")
        assert quote.total_amount == Decimal("58.50")

    def test_override_price_is_in_home_currency(self, loader):
        request = QuoteRequestDTO(
            document_currency_id=BAM.id,
            lines=[QuoteLineRequestDTO(quantity=1, unit_price=Decimal("20"), vat_rate=0,
                                       catalog_kind="service", catalog_item_id="svc-1")],
        )

        quote = QuoteService(loader).build_quote(request)

        assert quote.lines[0].unit_price == Decimal("39.1166")
        assert quote.lines[0].vat_rate == Decimal("0")

    def test_missing_rate_degrades_but_completes(self, catalog):
        """
        Test that a missing EUR -> BAM rate keeps the original price and warns.
        """
        loader = InMemoryLoader([EUR, BAM], [], catalog)
        request = QuoteRequestDTO(
            document_currency_id=BAM.id,
            lines=[
                QuoteLineRequestDTO(quantity=3, catalog_kind="service", catalog_item_id="svc-1"),
                QuoteLineRequestDTO(quantity=2, catalog_kind="product", catalog_item_id="prd-1"),
                QuoteLineRequestDTO(description="Custom", quantity=1, unit_price=Decimal("1")),
            ],
        )

        quote = QuoteService(loader).build_quote(request)

        assert quote.lines[0].unit_price == Decimal("10")
        assert quote.lines[0].total == Decimal("35.10")
        assert quote.lines[0].degraded
        assert quote.lines[1].degraded
        assert not quote.lines[2].degraded
        assert quote.total_amount == Decimal("44.10")
        # one message per currency pair
        assert quote.warnings == ["No exchange rate found from EUR to BAM. Using original price."]
        assert quote.degraded

    def test_same_currency_document(self, loader):
        request = QuoteRequestDTO(
            document_currency_id=EUR.id,
            lines=[QuoteLineRequestDTO(quantity=2, catalog_kind="product", catalog_item_id="prd-1")],
        )

        quote = QuoteService(loader).build_quote(request)

        assert quote.total_amount == Decimal("8")
        assert quote.currency_symbol == "€"

    def test_empty_document(self, loader):
        quote = QuoteService(loader).build_quote(QuoteRequestDTO(document_currency_id=BAM.id))

        assert quote.total_amount == Decimal("0")
        assert quote.lines == []

    def test_snapshot_loaded_once(self, loader):
        """
        Test that every line of a document is priced from the same snapshot.
        """
        lines = [QuoteLineRequestDTO(quantity=1, catalog_kind="service", catalog_item_id="svc-1") for _ in range(5)]

        QuoteService(loader).build_quote(QuoteRequestDTO(document_currency_id=BAM.id, lines=lines))

        assert loader.context_loads == 1

    def test_catalog_fetched_once_per_kind(self, catalog):
        loader = MagicMock(spec=BasePricingSnapshotLoader)
        loader.load_context.return_value = PricingContext(BAM.id, EUR.id, currencies=[EUR, BAM])
        loader.get_catalog_items.side_effect = lambda kind, ids: [i for i in catalog if i.kind == kind]
        lines = [
            QuoteLineRequestDTO(quantity=1, catalog_kind="service", catalog_item_id="svc-1"),
            QuoteLineRequestDTO(quantity=1, catalog_kind="service", catalog_item_id="svc-1"),
            QuoteLineRequestDTO(quantity=1, catalog_kind="product", catalog_item_id="prd-1"),
        ]

        QuoteService(loader).build_quote(QuoteRequestDTO(document_currency_id=BAM.id, lines=lines))

        assert loader.get_catalog_items.call_count == 2

    def test_unknown_catalog_item(self, loader):
        request = QuoteRequestDTO(
            document_currency_id=BAM.id,
            lines=[QuoteLineRequestDTO(quantity=1, catalog_kind="service", catalog_item_id="nope")],
        )

        with pytest.raises(CatalogItemNotFound) as exc:
            QuoteService(loader).build_quote(request)

        assert "nope" in str(exc.value)

    def test_unknown_document_currency(self, loader):
        with pytest.raises(UnknownCurrency):
            QuoteService(loader).build_quote(QuoteRequestDTO(document_currency_id="xxx"))

    def test_invalid_line_rejected(self, loader):
        request = QuoteRequestDTO(
            document_currency_id=BAM.id,
            lines=[QuoteLineRequestDTO(quantity=-1, unit_price=Decimal("5"))],
        )

        with pytest.raises(InvalidLineItem):
            QuoteService(loader).build_quote(request)

    def test_fallback_symbol(self, catalog):
        loader = InMemoryLoader([EUR, BAM], [], catalog)
        loader.currencies = [EUR, Currency(id="bam", code="BAM", symbol="")]
        quote = QuoteService(loader, fallback_symbol="¤").build_quote(QuoteRequestDTO(document_currency_id=BAM.id))

        assert quote.currency_symbol == "¤"
