from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from apps.pricing.domain.models import CatalogItem, PricingContext


class BasePricingSnapshotLoader(ABC):
    @abstractmethod
    def load_context(self, document_currency_id, home_currency_id=None) -> PricingContext:
        pass

    @abstractmethod
    def get_catalog_items(self, kind: str, item_ids: Iterable[str]) -> List[CatalogItem]:
        pass

    def get_catalog_item(self, kind: str, item_id: str) -> Optional[CatalogItem]:
        items = self.get_catalog_items(kind, [item_id])
        return items[0] if items else None
