# app/services/loyverse/catalog.py
"""
Typed view over a Loyverse fetcher.

Turns raw API dicts into read-only pydantic records so the reconciliation code
never touches untyped payloads.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

from app.core.config import Settings, get_settings
from app.core.enums import CatalogCollection
from app.schemas.loyverse import (
    LoyverseCategory,
    LoyverseItem,
    LoyverseVariant,
    LoyverseInventoryLevel,
)
from app.services.loyverse.cache import CachedFetcher, ResponseCache
from app.services.loyverse.client import LoyverseClient

logger = logging.getLogger(__name__)


class CatalogSource:

    def __init__(self, fetcher):
        self.fetcher = fetcher

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, use_cache: bool = True) -> "CatalogSource":
        """Build the live client, wrapped in the response cache when enabled"""
        settings = settings or get_settings()
        fetcher = LoyverseClient(
            api_token=settings.LOYVERSE_API_TOKEN,
            base_url=settings.LOYVERSE_BASE_URL,
            page_size=settings.LOYVERSE_PAGE_SIZE,
            timeout=settings.LOYVERSE_TIMEOUT_SECONDS,
        )
        if use_cache:
            fetcher = CachedFetcher(
                fetcher,
                ResponseCache(settings.CACHE_DIR),
                max_age_minutes=settings.CACHE_MAX_AGE_MINUTES,
            )
        return cls(fetcher)

    async def get_categories(self) -> List[LoyverseCategory]:
        records = await self.fetcher.fetch_all(CatalogCollection.CATEGORIES)
        return [LoyverseCategory.model_validate(r) for r in records]

    async def get_items(self) -> List[LoyverseItem]:
        records = await self.fetcher.fetch_all(CatalogCollection.ITEMS)
        return [LoyverseItem.model_validate(r) for r in records]

    async def get_variants(self) -> List[LoyverseVariant]:
        records = await self.fetcher.fetch_all(CatalogCollection.VARIANTS)
        return [LoyverseVariant.model_validate(r) for r in records]

    async def get_inventory_levels(self) -> List[LoyverseInventoryLevel]:
        records = await self.fetcher.fetch_all(CatalogCollection.INVENTORY)
        return [LoyverseInventoryLevel.model_validate(r) for r in records]

    async def get_items_updated_since(self, since: Union[datetime, str]) -> List[LoyverseItem]:
        records = await self.fetcher.fetch_updated_since(CatalogCollection.ITEMS, since)
        return [LoyverseItem.model_validate(r) for r in records]

    async def get_variants_updated_since(self, since: Union[datetime, str]) -> List[LoyverseVariant]:
        records = await self.fetcher.fetch_updated_since(CatalogCollection.VARIANTS, since)
        return [LoyverseVariant.model_validate(r) for r in records]
