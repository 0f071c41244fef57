"""
Schema exports for the application.
"""

# Upstream catalog records
from .loyverse import (
    LoyverseCategory,
    LoyverseItem,
    LoyverseVariant,
    LoyverseStoreVariant,
    LoyverseInventoryLevel
)

# Product schemas
from .product import FlattenedProduct

# Sync schemas
from .sync import SyncResult, SyncRequest
