# ORM models live in the infrastructure layer; Django discovers them here.
from apps.pricing.infrastructure.persistence.models import (  # noqa: F401
    BaseModel,
    CatalogKind,
    Currency,
    ExchangeRate,
    Product,
    Service,
)
