# app/models/sync_log.py
from sqlalchemy import Column, BigInteger, Integer, Text, DateTime, Index
from sqlalchemy.dialects.postgresql import ARRAY
from app.database import Base

class SyncLog(Base):
    """
    Ledger of sync passes.
    Every pass, successful or not, appends exactly one row. The latest completed
    row's `completed_at` is the watermark for the next incremental pass.
    """
    __tablename__ = "sync_logs"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    sync_type = Column(Text, nullable=False)  # 'full' or 'incremental'
    products_synced = Column(Integer, default=0)
    errors = Column(ARRAY(Text), nullable=True)

    # --- Timestamps ---
    started_at = Column(DateTime(timezone=True), nullable=False, index=True)
    completed_at = Column(DateTime(timezone=True), nullable=False)

    status = Column(Text, nullable=False)  # success, partial, failed

    __table_args__ = (
        Index("ix_sync_logs_status_completed_at", "status", completed_at.desc()),
    )

    def __repr__(self):
        return (f"<SyncLog(id={self.id}, type='{self.sync_type}', synced={self.products_synced}, "
                f"status='{self.status}')>")
