"""
Domain errors for the pricing bounded context.
"""


class PricingError(Exception):
    pass


class RateNotFound(PricingError):

    def __init__(self, from_currency_id, to_currency_id):
        self.from_currency_id = from_currency_id
        self.to_currency_id = to_currency_id
        super().__init__(f"No exchange rate from {from_currency_id} to {to_currency_id}")


class InvalidLineItem(PricingError):
    pass


class DefaultCurrencyNotConfigured(PricingError):
    pass


class AmbiguousDefaultCurrency(PricingError):
    pass


class UnknownCurrency(PricingError):
    pass


class CatalogItemNotFound(PricingError):
    pass
