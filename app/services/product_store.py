# app/services/product_store.py
"""
Product Store - persistence for flattened products and the sync ledger.

Writes are chunked and each chunk is committed before the next one starts, so a
failure part-way through leaves the earlier chunks in place. There is no
cross-chunk rollback.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import select, delete, func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import SyncStatus, SyncType
from app.core.exceptions import StoreWriteError, DatabaseError
from app.models.product import Product
from app.models.sync_log import SyncLog
from app.schemas.product import FlattenedProduct

logger = logging.getLogger(__name__)


def chunked(values: Sequence, size: int):
    for start in range(0, len(values), size):
        yield values[start:start + size]


class ProductStore:
    """Async persistence for the products table and sync_logs ledger."""

    UPSERT_BATCH_SIZE = 100
    DELETE_BATCH_SIZE = 100
    SKU_PAGE_SIZE = 1000

    def __init__(self, db: AsyncSession):
        self.db = db

    async def upsert_products(self, products: Iterable[FlattenedProduct]) -> int:
        """
        Insert or fully replace products keyed by SKU.

        Products with an empty SKU are skipped.

        Returns:
            Number of rows written

        Raises:
            StoreWriteError: carrying the number of rows committed before the failure
        """
        rows = [p.to_row() for p in products if p.sku]
        total_upserted = 0

        for index, chunk in enumerate(chunked(rows, self.UPSERT_BATCH_SIZE), 1):
            stmt = insert(Product.__table__).values(chunk)
            stmt = stmt.on_conflict_do_update(
                index_elements=["sku"],
                set_={
                    column: stmt.excluded[column]
                    for column in ("name", "category", "desc", "price", "qty", "image")
                },
            )
            try:
                await self.db.execute(stmt)
                await self.db.commit()
            except Exception as e:
                await self.db.rollback()
                logger.error(f"Error upserting products (batch {index}): {e}", exc_info=True)
                raise StoreWriteError(f"Error upserting products: {e}", rows_written=total_upserted) from e

            total_upserted += len(chunk)
            logger.debug(f"Upserted batch {index} ({len(chunk)} products)")

        return total_upserted

    async def list_all_skus(self) -> List[str]:
        """Every stored SKU, read in pages until a short page comes back"""
        all_skus: List[str] = []
        offset = 0

        try:
            while True:
                result = await self.db.execute(
                    select(Product.sku)
                    .order_by(Product.sku)
                    .offset(offset)
                    .limit(self.SKU_PAGE_SIZE)
                )
                page = list(result.scalars().all())
                all_skus.extend(page)
                if len(page) < self.SKU_PAGE_SIZE:
                    break
                offset += self.SKU_PAGE_SIZE
        except Exception as e:
            logger.error(f"Error fetching product SKUs: {e}", exc_info=True)
            raise DatabaseError(f"Error fetching product SKUs: {e}") from e

        logger.info(f"Fetched {len(all_skus)} total SKUs from the store")
        return all_skus

    async def delete_by_skus(self, skus: Sequence[str]) -> int:
        """
        Delete products by SKU in chunks.

        Returns:
            Rows actually deleted, which can be fewer than requested
        """
        if not skus:
            return 0

        total_deleted = 0
        for index, chunk in enumerate(chunked(list(skus), self.DELETE_BATCH_SIZE), 1):
            stmt = delete(Product).where(Product.sku.in_(chunk)).returning(Product.sku)
            try:
                result = await self.db.execute(stmt)
                deleted_count = len(result.scalars().all())
                await self.db.commit()
            except Exception as e:
                await self.db.rollback()
                logger.error(f"Error deleting products (batch {index}): {e}", exc_info=True)
                raise StoreWriteError(f"Error deleting products: {e}", rows_written=total_deleted) from e

            total_deleted += deleted_count
            logger.info(f"Deleted {deleted_count} products from chunk {index}")

        return total_deleted

    async def get_last_successful_sync_timestamp(self) -> Optional[datetime]:
        """Completion time of the most recent pass that finished without a hard error"""
        stmt = (
            select(SyncLog.completed_at)
            .where(SyncLog.status.in_([s.value for s in SyncStatus.completed()]))
            .order_by(SyncLog.completed_at.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def log_sync(
        self,
        sync_type: SyncType,
        products_synced: int,
        errors: List[str],
        started_at: datetime,
        status: SyncStatus,
    ) -> datetime:
        """Append a ledger row and return its completion timestamp"""
        completed_at = datetime.now(timezone.utc)
        entry = SyncLog(
            sync_type=SyncType(sync_type).value,
            products_synced=products_synced,
            errors=list(errors),
            started_at=started_at,
            completed_at=completed_at,
            status=SyncStatus(status).value,
        )
        try:
            self.db.add(entry)
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            raise DatabaseError(f"Error logging sync: {e}") from e

        return completed_at

    async def count_products(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Product))
        return result.scalar() or 0

    async def rollback(self) -> None:
        await self.db.rollback()
