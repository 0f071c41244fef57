"""
Core module exports.
"""
from .enums import (
    CatalogCollection,
    SyncStatus,
    SyncType
)

from .exceptions import (
    BaseServiceError,
    ConfigurationError,
    PlatformServiceError,
    LoyverseServiceError,
    LoyverseAPIError,
    UnsupportedCollectionError,
    DatabaseError,
    StoreWriteError,
    SyncError,
    SyncInProgressError
)
