# app/services/catalog_fetch.py
"""
Fetch the catalog collections a sync pass needs, either complete or as a delta
since the last completed pass.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Mapping, Set, Union

from app.schemas.loyverse import (
    LoyverseCategory,
    LoyverseItem,
    LoyverseVariant,
    LoyverseInventoryLevel,
)

logger = logging.getLogger(__name__)


@dataclass
class CatalogSnapshot:
    categories: List[LoyverseCategory] = field(default_factory=list)
    items: List[LoyverseItem] = field(default_factory=list)
    variants: List[LoyverseVariant] = field(default_factory=list)
    inventory_levels: List[LoyverseInventoryLevel] = field(default_factory=list)
    repaired_item_ids: List[str] = field(default_factory=list)


def missing_item_ids(variants: Iterable[LoyverseVariant], known_item_ids: Union[Set[str], Mapping]) -> Set[str]:
    """Item ids referenced by `variants` that are not in `known_item_ids`"""
    return {v.item_id for v in variants if v.item_id not in known_item_ids}


async def fetch_full_snapshot(source) -> CatalogSnapshot:
    """Every category, item, variant and inventory level, fetched one after another"""
    categories = await source.get_categories()
    logger.info(f"Found {len(categories)} categories")

    items = await source.get_items()
    logger.info(f"Found {len(items)} items")

    variants = await source.get_variants()
    logger.info(f"Found {len(variants)} variants")

    inventory_levels = await source.get_inventory_levels()
    logger.info(f"Found {len(inventory_levels)} inventory records")

    return CatalogSnapshot(
        categories=categories,
        items=items,
        variants=variants,
        inventory_levels=inventory_levels,
    )


async def fetch_delta_snapshot(source, watermark: Union[datetime, str]) -> CatalogSnapshot:
    """
    Items and variants updated at or after `watermark`, plus all categories and
    inventory levels (neither carries an update timestamp upstream).

    A variant may change while its item does not. Any item referenced by an
    updated variant but absent from the delta is recovered with a single full
    item fetch rather than per-item lookups.
    """
    categories = await source.get_categories()
    logger.info(f"Found {len(categories)} categories")

    items = list(await source.get_items_updated_since(watermark))
    logger.info(f"Found {len(items)} updated items")

    variants = await source.get_variants_updated_since(watermark)
    logger.info(f"Found {len(variants)} updated variants")

    needed = missing_item_ids(variants, {item.id for item in items})
    repaired: List[str] = []
    if needed:
        logger.info(f"Fetching {len(needed)} additional items...")
        all_items = await source.get_items()
        for item in all_items:
            if item.id in needed:
                items.append(item)
                repaired.append(item.id)
        unresolved = needed - set(repaired)
        if unresolved:
            logger.warning(f"{len(unresolved)} referenced items not found upstream")

    inventory_levels = await source.get_inventory_levels()
    logger.info(f"Found {len(inventory_levels)} inventory records")

    return CatalogSnapshot(
        categories=categories,
        items=items,
        variants=variants,
        inventory_levels=inventory_levels,
        repaired_item_ids=repaired,
    )
