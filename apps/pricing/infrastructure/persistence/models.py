"""
Django ORM models for persistence.
Infrastructure layer: technical storage detail.
"""

import uuid
from django.db import models, transaction


class BaseModel(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Currency(BaseModel):

    code = models.CharField(max_length=3, unique=True)
    name = models.CharField(max_length=50, db_index=True)
    symbol = models.CharField(max_length=5)
    is_default = models.BooleanField(
        default=False,
        help_text="Catalog prices are stored in the default currency. Only one currency can be default.",
    )

    class Meta:
        verbose_name_plural = "currencies"
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(
                fields=["is_default"],
                condition=models.Q(is_default=True),
                name="single_default_currency",
            )
        ]

    def __str__(self):
        return f"{self.code} ({self.symbol})"

    def save(self, *args, **kwargs):
        with transaction.atomic():
            if self.is_default:
                Currency.objects.filter(is_default=True).exclude(pk=self.pk).update(is_default=False)
            super().save(*args, **kwargs)


class ExchangeRate(BaseModel):

    from_currency = models.ForeignKey(
        Currency,
        related_name="rates_from",
        on_delete=models.CASCADE,
    )
    to_currency = models.ForeignKey(
        Currency,
        related_name="rates_to",
        on_delete=models.CASCADE,
    )
    rate = models.DecimalField(
        decimal_places=6,
        max_digits=18,
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["from_currency", "to_currency"],
                name="unique_rate_per_pair",
            ),
            models.CheckConstraint(
                condition=models.Q(rate__gt=0),
                name="rate_positive",
            ),
        ]
        ordering = ["from_currency__code", "to_currency__code"]

    def __str__(self):
        return f"1 {self.from_currency.code} = {self.rate} {self.to_currency.code}"


class CatalogKind(models.TextChoices):

    PRODUCT = "product", "Product"
    SERVICE = "service", "Service"


class Product(BaseModel):

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(decimal_places=2, max_digits=14)
    vat_rate = models.DecimalField(
        decimal_places=4,
        max_digits=5,
        default=0,
        help_text="Fraction between 0 and 1, e.g. 0.17 for 17%.",
    )
    stock = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Service(BaseModel):

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    default_price = models.DecimalField(decimal_places=2, max_digits=14)
    vat_rate = models.DecimalField(
        decimal_places=4,
        max_digits=5,
        default=0,
        help_text="Fraction between 0 and 1, e.g. 0.17 for 17%.",
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
