# app/services/catalog_join.py
"""
Join Loyverse items, variants, inventory levels and categories into flattened
product rows keyed by effective SKU.

Lookups are built fresh for every call and exposed read-only; nothing here keeps
state between sync passes. Unresolvable variants are soft failures: they are
reported in the JoinResult and left out of the output, never raised.
"""

import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from app.schemas.loyverse import (
    LoyverseCategory,
    LoyverseItem,
    LoyverseVariant,
    LoyverseInventoryLevel,
)
from app.schemas.product import FlattenedProduct

logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    products: List[FlattenedProduct] = field(default_factory=list)
    orphaned_variant_ids: List[str] = field(default_factory=list)
    duplicate_skus: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def skus(self) -> List[str]:
        """Effective SKUs that will be persisted (non-empty only)"""
        return [p.sku for p in self.products if p.sku]


def build_category_lookup(categories: Iterable[LoyverseCategory]) -> Mapping[str, str]:
    return MappingProxyType({category.id: category.name for category in categories})


def build_item_lookup(items: Iterable[LoyverseItem]) -> Mapping[str, LoyverseItem]:
    return MappingProxyType({item.id: item for item in items})


def aggregate_inventory(levels: Iterable[LoyverseInventoryLevel]) -> Mapping[str, float]:
    """
    Sum on-hand stock per variant across every store.
    Negative stock reported upstream is passed through, not clamped.
    """
    totals: Dict[str, float] = {}
    for level in levels:
        totals[level.variant_id] = totals.get(level.variant_id, 0) + level.in_stock
    return MappingProxyType(totals)


def effective_sku(variant: LoyverseVariant) -> str:
    return variant.sku or variant.variant_id


def compose_product_name(item_name: str, variant: LoyverseVariant) -> str:
    """'Shirt' + Red/Large -> 'Shirt (Red, Large)'; no options -> 'Shirt'"""
    options = variant.option_values
    if not options:
        return item_name
    return f"{item_name} ({', '.join(options)})"


def flatten_variant(
    variant: LoyverseVariant,
    item: LoyverseItem,
    quantity: float,
    category_name: Optional[str],
) -> FlattenedProduct:
    return FlattenedProduct(
        sku=effective_sku(variant),
        name=compose_product_name(item.item_name, variant),
        category=category_name,
        description=item.description or None,
        price=variant.default_price,
        qty=math.floor(quantity),
        image=None,  # Loyverse list endpoints don't expose image URLs
    )


def flatten_catalog(
    items: Iterable[LoyverseItem],
    variants: Iterable[LoyverseVariant],
    inventory_levels: Iterable[LoyverseInventoryLevel],
    categories: Iterable[LoyverseCategory],
) -> JoinResult:
    """
    Produce one FlattenedProduct per resolvable variant.

    When two variants share an effective SKU the later one wins; the product keeps
    the position of the first occurrence and the collision is reported.
    """
    category_names = build_category_lookup(categories)
    items_by_id = build_item_lookup(items)
    quantities = aggregate_inventory(inventory_levels)

    result = JoinResult()
    products_by_sku: Dict[str, FlattenedProduct] = {}

    for variant in variants:
        item = items_by_id.get(variant.item_id)
        if item is None:
            message = f"Item not found for variant {variant.variant_id} (item {variant.item_id})"
            logger.warning(message)
            result.orphaned_variant_ids.append(variant.variant_id)
            result.warnings.append(message)
            continue

        category_name = category_names.get(item.category_id) if item.category_id else None
        product = flatten_variant(
            variant,
            item,
            quantities.get(variant.variant_id, 0),
            category_name,
        )

        if not product.sku:
            message = f"Variant {variant.variant_id!r} has no usable SKU, skipping"
            logger.warning(message)
            result.warnings.append(message)
            continue

        if product.sku in products_by_sku:
            message = f"Duplicate SKU {product.sku}: variant {variant.variant_id} replaces an earlier variant"
            logger.warning(message)
            result.duplicate_skus.append(product.sku)
            result.warnings.append(message)

        products_by_sku[product.sku] = product

    result.products = list(products_by_sku.values())
    logger.info(
        f"Prepared {len(result.products)} products "
        f"({len(result.orphaned_variant_ids)} orphaned variants, {len(result.duplicate_skus)} duplicate SKUs)"
    )
    return result
