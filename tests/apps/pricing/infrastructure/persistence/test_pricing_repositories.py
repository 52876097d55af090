import pytest
from decimal import Decimal

from django.db import IntegrityError, transaction

from apps.pricing.domain.exceptions import DefaultCurrencyNotConfigured, UnknownCurrency
from apps.pricing.infrastructure.persistence.models import Currency, ExchangeRate, Product, Service
from apps.pricing.infrastructure.persistence.repositories import (
    CurrencyRepository,
    ExchangeRateRepository,
    OrmPricingSnapshotLoader,
)


@pytest.fixture
def currencies(db):
    """Create test currencies, EUR being the default."""
    eur = Currency.objects.create(code="EUR", name="Euro", symbol="€", is_default=True)
    bam = Currency.objects.create(code="BAM", name="Convertible Mark", symbol="KM")
    usd = Currency.objects.create(code="USD", name="US Dollar", symbol="$")
    return {"EUR": eur, "BAM": bam, "USD": usd}


@pytest.mark.django_db
class TestCurrencyRepository:
    """Tests for CurrencyRepository."""

    def test_get_by_code_case_insensitive(self, currencies):
        assert CurrencyRepository.get_by_code("bam") == currencies["BAM"]

    def test_get_by_code_missing(self, currencies):
        assert CurrencyRepository.get_by_code("XXX") is None

    def test_get_by_id_with_malformed_id(self, currencies):
        assert CurrencyRepository.get_by_id("not-a-uuid") is None

    def test_get_default(self, currencies):
        assert CurrencyRepository.get_default() == currencies["EUR"]

    def test_create_uppercases_code(self):
        currency = CurrencyRepository.create("chf", "Swiss Franc", "CHF")

        assert currency.code == "CHF"
        assert not currency.is_default

    def test_make_default_clears_previous_default(self, currencies):
        """
        Test that only one currency stays default after switching.
        """
        CurrencyRepository.make_default(currencies["BAM"])

        assert list(Currency.objects.filter(is_default=True)) == [currencies["BAM"]]
        currencies["EUR"].refresh_from_db()
        assert not currencies["EUR"].is_default

    def test_database_rejects_second_default(self, currencies):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Currency.objects.filter(code="USD").update(is_default=True)


@pytest.mark.django_db
class TestExchangeRateRepository:
    """Tests for ExchangeRateRepository."""

    def test_create_and_list(self, currencies):
        ExchangeRateRepository.create(currencies["EUR"], currencies["BAM"], Decimal("1.95583"))

        rates = ExchangeRateRepository.get_all()

        assert len(rates) == 1
        assert rates[0].rate == Decimal("1.955830")

    def test_pair_is_unique(self, currencies):
        ExchangeRateRepository.create(currencies["EUR"], currencies["BAM"], Decimal("1.95583"))

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                ExchangeRateRepository.create(currencies["EUR"], currencies["BAM"], Decimal("2"))

    def test_rate_must_be_positive(self, currencies):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                ExchangeRateRepository.create(currencies["EUR"], currencies["BAM"], Decimal("0"))


@pytest.mark.django_db
class TestOrmPricingSnapshotLoader:
    """Tests for loading a pricing snapshot from the database."""

    def test_load_context_uses_default_as_home(self, currencies):
        ExchangeRate.objects.create(
            from_currency=currencies["EUR"], to_currency=currencies["BAM"], rate=Decimal("1.95583")
        )

        context = OrmPricingSnapshotLoader().load_context(currencies["BAM"].id)

        assert context.home_currency_id == str(currencies["EUR"].id)
        assert context.document_currency_id == str(currencies["BAM"].id)
        assert len(context.currencies) == 3
        assert context.rates[0].from_currency_id == str(currencies["EUR"].id)
        assert context.rates[0].rate == Decimal("1.95583")

    def test_load_context_with_explicit_home(self, currencies):
        context = OrmPricingSnapshotLoader().load_context(currencies["BAM"].id, currencies["USD"].id)

        assert context.home_currency_id == str(currencies["USD"].id)

    def test_unknown_document_currency(self, currencies):
        with pytest.raises(UnknownCurrency):
            OrmPricingSnapshotLoader().load_context("00000000-0000-0000-0000-000000000000")

    def test_unknown_home_currency(self, currencies):
        with pytest.raises(UnknownCurrency):
            OrmPricingSnapshotLoader().load_context(currencies["BAM"].id, "00000000-0000-0000-0000-000000000000")

    def test_no_default_currency(self, db):
        bam = Currency.objects.create(code="BAM", name="Convertible Mark", symbol="KM")

        with pytest.raises(DefaultCurrencyNotConfigured):
            OrmPricingSnapshotLoader().load_context(bam.id)

    def test_get_catalog_items(self, db):
        product = Product.objects.create(name="Cable", price=Decimal("4.00"), vat_rate=Decimal("0.17"), stock=3)
        service = Service.objects.create(name="Consulting", default_price=Decimal("10.00"))
        loader = OrmPricingSnapshotLoader()

        products = loader.get_catalog_items("product", [str(product.id)])
        services = loader.get_catalog_items("service", [str(service.id)])

        assert products[0].unit_price == Decimal("4.00")
        assert products[0].vat_rate == Decimal("0.17")
        assert products[0].kind == "product"
        assert services[0].name == "Consulting"
        assert services[0].kind == "service"
        assert loader.get_catalog_item("service", str(service.id)).id == str(service.id)

    def test_get_catalog_items_unknown_kind_or_id(self, db):
        loader = OrmPricingSnapshotLoader()

        assert loader.get_catalog_items("bundle", ["x"]) == []
        assert loader.get_catalog_items("product", ["not-a-uuid"]) == []
        assert loader.get_catalog_item("product", "00000000-0000-0000-0000-000000000000") is None
