"""
Schemas describing the outcome of a sync pass and the trigger request.
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, field_validator

from app.core.enums import SyncType, SyncStatus


class SyncResult(BaseModel):
    """Mutable bookkeeping for one pass; frozen into a summary when the pass ends."""
    sync_type: SyncType
    products_synced: int = 0
    products_deleted: int = 0
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    status: Optional[SyncStatus] = None

    @property
    def failed(self) -> bool:
        return self.status == SyncStatus.FAILED

    def summary(self) -> Dict[str, Any]:
        return {
            "sync_type": self.sync_type.value,
            "status": self.status.value if self.status else None,
            "products_synced": self.products_synced,
            "products_deleted": self.products_deleted,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


class SyncRequest(BaseModel):
    """Options accepted by the trigger endpoint (query string or JSON body)"""
    type: str = "full"
    useCache: bool = True

    @field_validator('useCache', mode='before')
    @classmethod
    def parse_use_cache(cls, v):
        if v is None or v == '':
            return True
        if isinstance(v, str):
            return v.strip().lower() in ('true', '1', 'yes')
        return bool(v)
