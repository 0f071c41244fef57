"""
Shared enums and constants used across the application.
"""

from enum import Enum


class SyncType(str, Enum):
    FULL = "full"
    INCREMENTAL = "incremental"


class SyncStatus(str, Enum):
    """Terminal status of a sync pass as written to the ledger"""
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"

    @classmethod
    def completed(cls):
        # Passes whose completion time may serve as the incremental watermark
        return (cls.SUCCESS, cls.PARTIAL)


class CatalogCollection(str, Enum):
    """Upstream collections served by the Loyverse API"""
    CATEGORIES = "categories"
    ITEMS = "items"
    VARIANTS = "variants"
    INVENTORY = "inventory"

    @property
    def endpoint(self) -> str:
        return f"/{self.value}"

    @property
    def response_key(self) -> str:
        # The inventory endpoint wraps its records under a different key
        if self is CatalogCollection.INVENTORY:
            return "inventory_levels"
        return self.value

    @property
    def supports_updated_since(self) -> bool:
        return self in (CatalogCollection.ITEMS, CatalogCollection.VARIANTS)

    @property
    def cache_key(self) -> str:
        return f"loyverse_{self.value}"
