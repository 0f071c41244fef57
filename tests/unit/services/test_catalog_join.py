import pytest
from types import MappingProxyType

from app.schemas.loyverse import LoyverseInventoryLevel, LoyverseItem, LoyverseVariant
from app.services.catalog_join import (
    aggregate_inventory,
    build_item_lookup,
    compose_product_name,
    effective_sku,
    flatten_catalog,
)

"""
1. Inventory aggregation
"""

def test_aggregate_inventory_sums_across_stores():
    levels = [
        LoyverseInventoryLevel(variant_id="v1", store_id="s1", in_stock=3),
        LoyverseInventoryLevel(variant_id="v1", store_id="s2", in_stock=4),
        LoyverseInventoryLevel(variant_id="v2", store_id="s1", in_stock=0),
    ]
    totals = aggregate_inventory(levels)
    assert totals["v1"] == 7
    assert totals["v2"] == 0
    assert "v3" not in totals


def test_aggregate_inventory_keeps_negative_stock():
    levels = [
        LoyverseInventoryLevel(variant_id="v1", store_id="s1", in_stock=2),
        LoyverseInventoryLevel(variant_id="v1", store_id="s2", in_stock=-5),
    ]
    assert aggregate_inventory(levels)["v1"] == -3


def test_lookups_are_read_only():
    lookup = build_item_lookup([LoyverseItem(id="i1", item_name="Shirt")])
    assert isinstance(lookup, MappingProxyType)
    with pytest.raises(TypeError):
        lookup["i2"] = None

"""
2. Keys and names
"""

def test_effective_sku_prefers_variant_sku():
    assert effective_sku(LoyverseVariant(variant_id="v1", item_id="i1", sku="ABC")) == "ABC"


@pytest.mark.parametrize("sku", [None, ""])
def test_effective_sku_falls_back_to_variant_id(sku):
    assert effective_sku(LoyverseVariant(variant_id="v1", item_id="i1", sku=sku)) == "v1"


def test_compose_product_name_with_options():
    variant = LoyverseVariant(variant_id="v1", item_id="i1", option1_value="Red", option2_value="Large")
    assert compose_product_name("Shirt", variant) == "Shirt (Red, Large)"


def test_compose_product_name_without_options():
    variant = LoyverseVariant(variant_id="v1", item_id="i1")
    assert compose_product_name("Shirt", variant) == "Shirt"


def test_compose_product_name_skips_blank_options():
    variant = LoyverseVariant(variant_id="v1", item_id="i1", option1_value="", option3_value="XL")
    assert compose_product_name("Shirt", variant) == "Shirt (XL)"

"""
3. Full join
"""

def test_flatten_catalog_drops_orphans_and_their_inventory(
    sample_items, sample_variants, sample_inventory, sample_categories
):
    result = flatten_catalog(sample_items, sample_variants, sample_inventory, sample_categories)

    assert [p.sku for p in result.products] == ["SHIRT-RED-L", "CAP-1"]
    assert result.orphaned_variant_ids == ["var-3"]
    assert len(result.warnings) == 1
    assert "var-3" in result.warnings[0]
    assert "GHOST-1" not in result.skus

    shirt, cap = result.products
    assert shirt.name == "Shirt (Red, Large)"
    assert shirt.category == "Shirts"
    assert shirt.description == "Cotton shirt"
    assert shirt.price == 25.0
    assert shirt.qty == 7
    assert shirt.image is None

    # No inventory records at all means zero stock
    assert cap.qty == 0
    assert cap.description is None


def test_flatten_catalog_unknown_category_gives_no_category():
    items = [LoyverseItem(id="i1", item_name="Mug", category_id="gone")]
    variants = [LoyverseVariant(variant_id="v1", item_id="i1", sku="MUG")]
    result = flatten_catalog(items, variants, [], [])
    assert result.products[0].category is None
    assert result.warnings == []


def test_flatten_catalog_floors_fractional_stock():
    items = [LoyverseItem(id="i1", item_name="Flour")]
    variants = [LoyverseVariant(variant_id="v1", item_id="i1", sku="FLOUR")]
    levels = [
        LoyverseInventoryLevel(variant_id="v1", store_id="s1", in_stock=1.5),
        LoyverseInventoryLevel(variant_id="v1", store_id="s2", in_stock=1.25),
    ]
    assert flatten_catalog(items, variants, levels, []).products[0].qty == 2


def test_flatten_catalog_duplicate_sku_keeps_last_in_first_position():
    items = [LoyverseItem(id="i1", item_name="Shirt"), LoyverseItem(id="i2", item_name="Tee")]
    variants = [
        LoyverseVariant(variant_id="v1", item_id="i1", sku="DUP", default_price=10),
        LoyverseVariant(variant_id="v2", item_id="i1", sku="OTHER", default_price=5),
        LoyverseVariant(variant_id="v3", item_id="i2", sku="DUP", default_price=20),
    ]
    result = flatten_catalog(items, variants, [], [])

    assert [p.sku for p in result.products] == ["DUP", "OTHER"]
    assert result.products[0].name == "Tee"
    assert result.products[0].price == 20
    assert result.duplicate_skus == ["DUP"]
    assert any("Duplicate SKU DUP" in w for w in result.warnings)


def test_flatten_catalog_is_stateless_between_calls(sample_items, sample_variants, sample_categories):
    first = flatten_catalog(sample_items, sample_variants, [], sample_categories)
    second = flatten_catalog([], sample_variants, [], sample_categories)
    assert len(first.products) == 2
    # Items from the earlier call must not leak into this one
    assert second.products == []
    assert len(second.orphaned_variant_ids) == 3


def test_flatten_catalog_skips_variant_without_any_key():
    items = [LoyverseItem(id="i1", item_name="Mystery")]
    variants = [LoyverseVariant(variant_id="", item_id="i1", sku="")]
    result = flatten_catalog(items, variants, [], [])
    assert result.products == []
    assert len(result.warnings) == 1
