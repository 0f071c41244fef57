class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class ConfigurationError(BaseServiceError):
    """Raised when required configuration is missing."""
    pass

class PlatformServiceError(BaseServiceError):
    """Base exception for platform service errors."""
    pass

class LoyverseServiceError(PlatformServiceError):
    """Base exception for Loyverse-specific errors."""
    pass

class LoyverseAPIError(LoyverseServiceError):
    """Raised when Loyverse API calls fail."""
    pass

class UnsupportedCollectionError(LoyverseServiceError):
    """Raised when a collection does not support the requested fetch mode."""
    pass

class DatabaseError(BaseServiceError):
    """Exception raised for database-related errors."""
    pass

class StoreWriteError(DatabaseError):
    """Raised when an upsert or delete batch fails. Earlier batches stay committed."""

    def __init__(self, message: str, rows_written: int = 0):
        super().__init__(message)
        self.rows_written = rows_written

class SyncError(BaseServiceError):
    """Raised when catalog synchronization cannot proceed."""
    pass

class SyncInProgressError(SyncError):
    """Raised when a sync pass is requested while another one is running."""
    pass
