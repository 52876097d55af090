"""
ViewSets for the pricing API v1.
Each ViewSet exposes standard CRUD operations via DRF router; conversion and
quoting delegate to the domain and application services.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.pricing.api.v1.serializers import (
    CurrencySerializer,
    ExchangeRateSerializer,
    ProductSerializer,
    QuoteRequestSerializer,
    QuoteResultSerializer,
    ServiceSerializer,
)
from apps.pricing.application.dto import ConversionResultDTO
from apps.pricing.application.quotes import QuoteService
from apps.pricing.domain.exceptions import (
    AmbiguousDefaultCurrency,
    CatalogItemNotFound,
    DefaultCurrencyNotConfigured,
    InvalidLineItem,
    PricingError,
    UnknownCurrency,
)
from apps.pricing.domain.services import PricingService
from apps.pricing.infrastructure.persistence.models import (
    Currency,
    ExchangeRate,
    Product,
    Service,
)
from apps.pricing.infrastructure.persistence.repositories import (
    CurrencyRepository,
    OrmPricingSnapshotLoader,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    UnknownCurrency: status.HTTP_404_NOT_FOUND,
    CatalogItemNotFound: status.HTTP_404_NOT_FOUND,
    DefaultCurrencyNotConfigured: status.HTTP_409_CONFLICT,
    AmbiguousDefaultCurrency: status.HTTP_409_CONFLICT,
    InvalidLineItem: status.HTTP_400_BAD_REQUEST,
}


def pricing_error_response(error: PricingError) -> Response:
    code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    return Response({"error": str(error)}, status=code)


@extend_schema(tags=['Currencies'])
class CurrencyViewSet(viewsets.ModelViewSet):

    queryset = Currency.objects.all()
    serializer_class = CurrencySerializer

    @extend_schema(request=None, description="Mark this currency as the default (home) currency")
    @action(detail=True, methods=['post'], url_path='make-default')
    def make_default(self, request, pk=None):
        currency = CurrencyRepository.make_default(self.get_object())
        logger.info("Default currency set to %s", currency.code)
        return Response(self.get_serializer(currency).data)


@extend_schema(tags=['Rates'])
class ExchangeRateViewSet(
    mixins.CreateModelMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):

    queryset = ExchangeRate.objects.select_related(
        "from_currency",
        "to_currency",
    ).all()
    serializer_class = ExchangeRateSerializer

    @extend_schema(
        parameters=[
            OpenApiParameter("from_currency", OpenApiTypes.STR, required=True, description="Source currency code (e.g. EUR)"),
            OpenApiParameter("to_currency", OpenApiTypes.STR, required=True, description="Target currency code (e.g. BAM)"),
            OpenApiParameter("amount", OpenApiTypes.DECIMAL, required=True, description="Amount to convert"),
        ],
        description="Convert an amount using the stored rate table. Missing rates degrade to the original amount."
    )
    @action(detail=False, methods=['get'], url_path='convert')
    def convert(self, request):
        from_code = request.query_params.get('from_currency')
        to_code = request.query_params.get('to_currency')
        amount_str = request.query_params.get('amount')

        if not all([from_code, to_code, amount_str]):
            return Response(
                {"error": "from_currency, to_currency, and amount are required"},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            amount = Decimal(amount_str)
        except InvalidOperation:
            return Response(
                {"error": "Invalid amount. Must be a number"},
                status=status.HTTP_400_BAD_REQUEST
            )

        if not amount.is_finite() or amount < 0:
            return Response(
                {"error": "Amount must be a non-negative number"},
                status=status.HTTP_400_BAD_REQUEST
            )

        source = CurrencyRepository.get_by_code(from_code)
        target = CurrencyRepository.get_by_code(to_code)
        if source is None or target is None:
            missing = from_code if source is None else to_code
            return Response(
                {"error": f"Currency {missing.upper()} not found"},
                status=status.HTTP_404_NOT_FOUND
            )

        context = OrmPricingSnapshotLoader().load_context(target.id, home_currency_id=source.id)
        result = PricingService.convert_price(
            amount,
            context.home_currency_id,
            context.document_currency_id,
            context.rates
        )

        dto = ConversionResultDTO(
            from_currency=source.code,
            to_currency=target.code,
            amount=result.amount,
            converted_amount=result.converted_amount,
            rate=result.rate,
            degraded=result.degraded,
            warning=result.warning.describe(context.directory) if result.degraded else None,
        )

        return Response({
            "from_currency": dto.from_currency,
            "to_currency": dto.to_currency,
            "amount": str(dto.amount),
            "rate": str(dto.rate) if dto.rate is not None else None,
            "converted_amount": str(dto.converted_amount),
            "degraded": dto.degraded,
            "warning": dto.warning,
        })


@extend_schema(tags=['Catalog'])
class ProductViewSet(viewsets.ModelViewSet):

    queryset = Product.objects.all()
    serializer_class = ProductSerializer


@extend_schema(tags=['Catalog'])
class ServiceViewSet(viewsets.ModelViewSet):

    queryset = Service.objects.all()
    serializer_class = ServiceSerializer


@extend_schema(tags=['Quotes'])
class QuoteViewSet(viewsets.ViewSet):

    @extend_schema(
        request=QuoteRequestSerializer,
        responses=QuoteResultSerializer,
        description=(
            "Price an invoice or point-of-sale cart in the given currency. "
            "Catalog prices are converted from the default currency; lines whose "
            "rate is missing keep their original price and are flagged as degraded."
        )
    )
    def create(self, request):
        serializer = QuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        service = QuoteService(OrmPricingSnapshotLoader(), settings.DEFAULT_CURRENCY_SYMBOL)
        try:
            quote = service.build_quote(serializer.to_dto())
        except PricingError as e:
            return pricing_error_response(e)

        return Response(QuoteResultSerializer(quote).data, status=status.HTTP_200_OK)
