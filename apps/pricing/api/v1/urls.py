from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.pricing.api.v1.views import (
    CurrencyViewSet,
    ExchangeRateViewSet,
    ProductViewSet,
    QuoteViewSet,
    ServiceViewSet,
)

router = DefaultRouter()
router.register(r'currencies', CurrencyViewSet, basename='currency')
router.register(r'rates', ExchangeRateViewSet, basename='exchange-rate')
router.register(r'products', ProductViewSet, basename='product')
router.register(r'services', ServiceViewSet, basename='service')
router.register(r'quotes', QuoteViewSet, basename='quote')

urlpatterns = [
    path('', include(router.urls)),
]
