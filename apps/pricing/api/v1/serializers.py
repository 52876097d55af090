"""
Serializers for the pricing bounded context.
Handles validation and transformation between API, application and ORM layers.
"""

from rest_framework import serializers

from apps.pricing.application.dto import QuoteLineRequestDTO, QuoteRequestDTO
from apps.pricing.infrastructure.persistence.models import (
    CatalogKind,
    Currency,
    ExchangeRate,
    Product,
    Service,
)


class CurrencySerializer(serializers.ModelSerializer):
    is_default = serializers.BooleanField(required=False)

    class Meta:
        model = Currency
        fields = ["id", "code", "name", "symbol", "is_default", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_code(self, value: str) -> str:
        return value.upper()


class ExchangeRateSerializer(serializers.ModelSerializer):
    from_currency = CurrencySerializer(read_only=True)
    to_currency = CurrencySerializer(read_only=True)
    from_currency_id = serializers.PrimaryKeyRelatedField(
        source="from_currency",
        queryset=Currency.objects.all(),
        write_only=True,
    )
    to_currency_id = serializers.PrimaryKeyRelatedField(
        source="to_currency",
        queryset=Currency.objects.all(),
        write_only=True,
    )

    class Meta:
        model = ExchangeRate
        fields = [
            "id",
            "from_currency",
            "to_currency",
            "from_currency_id",
            "to_currency_id",
            "rate",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
        validators = []

    def validate_rate(self, value):
        if value <= 0:
            raise serializers.ValidationError("Rate must be positive.")
        return value

    def validate(self, attrs):
        source = attrs.get("from_currency")
        target = attrs.get("to_currency")

        if source == target:
            raise serializers.ValidationError("from_currency and to_currency must be different.")

        existing = ExchangeRate.objects.filter(from_currency=source, to_currency=target)
        if self.instance:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError(
                f"A rate from {source.code} to {target.code} already exists. "
                f"Delete it before adding a new one."
            )

        return attrs


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "name", "description", "price", "vat_rate", "stock", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price must be non-negative.")
        return value

    def validate_vat_rate(self, value):
        if not 0 <= value <= 1:
            raise serializers.ValidationError("VAT rate must be between 0 and 1 (e.g., 0.17 for 17%).")
        return value


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = ["id", "name", "description", "default_price", "vat_rate", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_default_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price must be non-negative.")
        return value

    def validate_vat_rate(self, value):
        if not 0 <= value <= 1:
            raise serializers.ValidationError("VAT rate must be between 0 and 1 (e.g., 0.17 for 17%).")
        return value


class QuoteLineRequestSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=14, decimal_places=4, min_value=0)
    unit_price = serializers.DecimalField(
        max_digits=18, decimal_places=6, min_value=0, required=False, allow_null=True
    )
    vat_rate = serializers.DecimalField(
        max_digits=5, decimal_places=4, min_value=0, max_value=1, required=False, allow_null=True
    )
    catalog_kind = serializers.ChoiceField(choices=CatalogKind.choices, required=False, allow_null=True)
    catalog_item_id = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        kind = attrs.get("catalog_kind")
        item_id = attrs.get("catalog_item_id")

        if bool(kind) != bool(item_id):
            raise serializers.ValidationError("catalog_kind and catalog_item_id must be given together.")

        if not kind and attrs.get("unit_price") is None:
            raise serializers.ValidationError("unit_price is required for custom items.")

        return attrs


class QuoteRequestSerializer(serializers.Serializer):
    currency_id = serializers.UUIDField()
    home_currency_id = serializers.UUIDField(required=False, allow_null=True)
    items = QuoteLineRequestSerializer(many=True, allow_empty=True)

    def to_dto(self) -> QuoteRequestDTO:
        data = self.validated_data
        home = data.get("home_currency_id")
        return QuoteRequestDTO(
            document_currency_id=str(data["currency_id"]),
            home_currency_id=str(home) if home else None,
            lines=[
                QuoteLineRequestDTO(
                    description=item.get("description", ""),
                    quantity=item["quantity"],
                    unit_price=item.get("unit_price"),
                    vat_rate=item.get("vat_rate"),
                    catalog_kind=item.get("catalog_kind"),
                    catalog_item_id=str(item["catalog_item_id"]) if item.get("catalog_item_id") else None,
                )
                for item in data["items"]
            ],
        )


class QuoteLineResultSerializer(serializers.Serializer):
    description = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=None, decimal_places=None, coerce_to_string=True)
    unit_price = serializers.DecimalField(max_digits=None, decimal_places=None, coerce_to_string=True)
    vat_rate = serializers.DecimalField(max_digits=None, decimal_places=None, coerce_to_string=True)
    total = serializers.DecimalField(max_digits=None, decimal_places=None, coerce_to_string=True)
    catalog_kind = serializers.CharField(allow_null=True)
    catalog_item_id = serializers.CharField(allow_null=True)
    degraded = serializers.BooleanField()


class QuoteResultSerializer(serializers.Serializer):
    currency_id = serializers.CharField(source="document_currency_id")
    currency_code = serializers.CharField()
    currency_symbol = serializers.CharField()
    items = QuoteLineResultSerializer(source="lines", many=True)
    total_amount = serializers.DecimalField(max_digits=None, decimal_places=None, coerce_to_string=True)
    degraded = serializers.BooleanField()
    warnings = serializers.ListField(child=serializers.CharField())
