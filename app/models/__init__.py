from .product import Product
from .sync_log import SyncLog

# This ensures all models are registered with SQLAlchemy
__all__ = [
    'Product',
    'SyncLog',
]
