"""
Data Transfer Objects (DTOs) for Loyverse integration.

This module contains Pydantic models for the raw catalog records returned by the
Loyverse API. Records are read-only for the duration of a sync pass; unknown
fields are ignored so API additions never break parsing.
"""

from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Any
from datetime import datetime


class LoyverseRecord(BaseModel):
    """Base model with common configuration for Loyverse records"""
    model_config = ConfigDict(extra="ignore", frozen=True)


class LoyverseCategory(LoyverseRecord):
    id: str
    name: str
    color: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class LoyverseItem(LoyverseRecord):
    id: str
    item_name: str
    reference_id: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    # Flags are carried through untouched
    track_stock: bool = False
    sold_by_weight: bool = False
    is_composite: bool = False
    use_production: bool = False
    primary_supplier_id: Optional[str] = None
    tax_ids: List[str] = []
    modifiers_ids: List[str] = []
    form: Optional[str] = None
    color: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class LoyverseStoreVariant(LoyverseRecord):
    store_id: str
    pricing_type: Optional[str] = None
    price: Optional[float] = None
    available_for_sale: bool = True
    optimal_stock: Optional[float] = None
    low_stock: Optional[float] = None


class LoyverseVariant(LoyverseRecord):
    variant_id: str
    item_id: str
    sku: Optional[str] = None
    reference_variant_id: Optional[str] = None
    option1_name: Optional[str] = None
    option1_value: Optional[str] = None
    option2_name: Optional[str] = None
    option2_value: Optional[str] = None
    option3_name: Optional[str] = None
    option3_value: Optional[str] = None
    barcode: Optional[str] = None
    cost: Optional[float] = None
    purchase_cost: Optional[float] = None
    default_pricing_type: Optional[str] = None
    default_price: Optional[float] = None
    stores: List[LoyverseStoreVariant] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def option_values(self) -> List[str]:
        """Option values in option1 -> option3 order, skipping blanks"""
        values = (self.option1_value, self.option2_value, self.option3_value)
        return [value for value in values if value]


class LoyverseInventoryLevel(LoyverseRecord):
    variant_id: str
    store_id: str
    in_stock: float = 0
    cost: Optional[float] = None
    updated_at: Optional[Any] = None
