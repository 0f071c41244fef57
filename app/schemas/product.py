"""
Schemas for the denormalised product rows written to the store.
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict


class FlattenedProduct(BaseModel):
    """
    One persistable product: item + variant + aggregated inventory + category name.
    `sku` is the effective SKU (variant SKU, else the variant id).
    """
    model_config = ConfigDict(
        from_attributes=True,
        frozen=True
    )

    sku: str
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    qty: int = 0
    image: Optional[str] = None

    def to_row(self) -> Dict[str, Any]:
        """Column-keyed mapping for the products table"""
        return {
            "sku": self.sku,
            "name": self.name,
            "category": self.category,
            "desc": self.description,
            "price": self.price,
            "qty": self.qty,
            "image": self.image,
        }
