from decimal import Decimal, InvalidOperation
from django.core.management.base import BaseCommand, CommandError

from apps.pricing.domain.services import PricingService
from apps.pricing.infrastructure.persistence.repositories import (
    CurrencyRepository,
    OrmPricingSnapshotLoader,
)


class Command(BaseCommand):
    help = 'Convert an amount between two currencies using the stored exchange rates'

    def add_arguments(self, parser):
        parser.add_argument(
            '--from',
            dest='from_code',
            type=str,
            help='Source currency code (defaults to the default currency)'
        )
        parser.add_argument(
            '--to',
            dest='to_code',
            type=str,
            required=True,
            help='Target currency code'
        )
        parser.add_argument(
            '--amount',
            type=str,
            required=True,
            help='Amount to convert'
        )

    def handle(self, **options):
        try:
            amount = Decimal(options['amount'])
        except InvalidOperation:
            raise CommandError('Invalid amount. Must be a number')

        target = CurrencyRepository.get_by_code(options['to_code'])
        if target is None:
            raise CommandError(f"Currency {options['to_code'].upper()} not found")

        if options['from_code']:
            source = CurrencyRepository.get_by_code(options['from_code'])
        else:
            source = CurrencyRepository.get_default()
        if source is None:
            raise CommandError('Source currency not found and no default currency is configured')

        context = OrmPricingSnapshotLoader().load_context(target.id, home_currency_id=source.id)
        result = PricingService.convert_price(
            amount,
            context.home_currency_id,
            context.document_currency_id,
            context.rates
        )

        if result.degraded:
            self.stdout.write(self.style.WARNING(result.warning.describe(context.directory)))

        self.stdout.write(
            self.style.SUCCESS(
                f"{result.amount} {source.code} = {result.converted_amount} {target.code}"
            )
        )
