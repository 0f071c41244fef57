# app/services/deletion_diff.py
"""
Work out which persisted products disappeared upstream and remove them.

Only full syncs call this: an incremental pass sees a subset of the catalog, so
"absent from this pass" says nothing about "deleted upstream".
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List

logger = logging.getLogger(__name__)


@dataclass
class DeletionOutcome:
    requested: int = 0
    deleted: int = 0


def compute_deletions(persisted_skus: Iterable[str], current_skus: Iterable[str]) -> List[str]:
    """persisted - current, in persisted order, without repeats"""
    current = {sku for sku in current_skus if sku}
    to_delete: List[str] = []
    seen = set()
    for sku in persisted_skus:
        if sku in current or sku in seen:
            continue
        seen.add(sku)
        to_delete.append(sku)
    return to_delete


async def reconcile_deletions(store, current_skus: Iterable[str]) -> DeletionOutcome:
    """
    Delete every stored SKU that the current pass did not produce.

    The deleted count comes from the store and may be lower than requested when
    rows vanished concurrently.
    """
    logger.info("Checking for products to remove...")
    existing_skus = await store.list_all_skus()
    current = {sku for sku in current_skus if sku}
    logger.info(f"Found {len(existing_skus)} existing products in the store, {len(current)} in Loyverse")

    skus_to_delete = compute_deletions(existing_skus, current)
    outcome = DeletionOutcome(requested=len(skus_to_delete))

    if not skus_to_delete:
        logger.info("No products to remove")
        return outcome

    logger.info(f"Removing {len(skus_to_delete)} products no longer in Loyverse...")
    logger.debug(f"Sample SKUs to delete: {skus_to_delete[:5]}")
    outcome.deleted = await store.delete_by_skus(skus_to_delete)
    logger.info(f"Removed {outcome.deleted} products")
    return outcome
