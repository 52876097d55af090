import pytest
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError

from apps.pricing.infrastructure.persistence.models import Currency, ExchangeRate


@pytest.fixture
def currencies(db):
    eur = Currency.objects.create(code="EUR", name="Euro", symbol="€", is_default=True)
    bam = Currency.objects.create(code="BAM", name="Convertible Mark", symbol="KM")
    ExchangeRate.objects.create(from_currency=eur, to_currency=bam, rate=Decimal("1.95583"))
    return {"EUR": eur, "BAM": bam}


@pytest.mark.django_db
class TestConvertPriceCommand:

    def test_converts_from_default_currency(self, currencies):
        out = StringIO()

        call_command("convert_price", "--to", "BAM", "--amount", "10", stdout=out)

        assert "10 EUR = 19.5583" in out.getvalue()
        assert "BAM" in out.getvalue()

    def test_missing_rate_prints_warning(self, currencies):
        out = StringIO()

        call_command("convert_price", "--from", "BAM", "--to", "EUR", "--amount", "5", stdout=out)

        assert "No exchange rate found" in out.getvalue()
        assert "5 BAM = 5 EUR" in out.getvalue()

    def test_unknown_currency(self, currencies):
        with pytest.raises(CommandError):
            call_command("convert_price", "--to", "XXX", "--amount", "1")

    def test_invalid_amount(self, currencies):
        with pytest.raises(CommandError):
            call_command("convert_price", "--to", "BAM", "--amount", "ten")
