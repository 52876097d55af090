"""
Django Admin configuration for the pricing app.
Currencies and exchange rates are maintained here by administrators.
"""

from django.contrib import admin
from django.utils.html import format_html

from apps.pricing.infrastructure.persistence.models import (
    Currency,
    ExchangeRate,
    Product,
    Service,
)


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    """Admin interface for Currency model."""

    list_display = ('code', 'name', 'symbol', 'get_default', 'created_at')
    list_filter = ('is_default',)
    search_fields = ('code', 'name')
    readonly_fields = ('id', 'created_at', 'updated_at')
    ordering = ('code',)
    actions = ['make_default']

    fieldsets = (
        ('Currency Information', {
            'fields': ('code', 'name', 'symbol', 'is_default')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_default(self, obj):
        if obj.is_default:
            return format_html('<span style="color: #2563eb; font-weight: bold;">(Default)</span>')
        return ''
    get_default.short_description = 'Default'

    @admin.action(description='Make selected currency the default')
    def make_default(self, request, queryset):
        if queryset.count() != 1:
            self.message_user(request, 'Select exactly one currency.', level='error')
            return
        currency = queryset.first()
        currency.is_default = True
        currency.save()
        self.message_user(request, f'{currency.code} is now the default currency.')


@admin.register(ExchangeRate)
class ExchangeRateAdmin(admin.ModelAdmin):
    """Admin interface for ExchangeRate model."""

    list_display = ('get_currency_pair', 'rate', 'created_at')
    list_filter = ('from_currency', 'to_currency')
    search_fields = ('from_currency__code', 'to_currency__code')
    readonly_fields = ('id', 'created_at', 'updated_at')
    ordering = ('from_currency__code', 'to_currency__code')

    fieldsets = (
        ('Exchange Rate', {
            'fields': ('from_currency', 'to_currency', 'rate')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def get_currency_pair(self, obj):
        """Display currency pair in format FROM/TO."""
        return f"{obj.from_currency.code}/{obj.to_currency.code}"
    get_currency_pair.short_description = 'Currency Pair'
    get_currency_pair.admin_order_field = 'from_currency__code'


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):

    list_display = ('name', 'price', 'vat_rate', 'stock')
    search_fields = ('name',)
    readonly_fields = ('id', 'created_at', 'updated_at')


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):

    list_display = ('name', 'default_price', 'vat_rate')
    search_fields = ('name',)
    readonly_fields = ('id', 'created_at', 'updated_at')
