# app/services/sync_service.py
"""
Inventory sync orchestration.

Drives one pass of either mode:

    full:        fetch all -> join -> upsert -> delete missing -> ledger
    incremental: watermark? -> fetch delta (+ item repair) -> join -> upsert -> ledger
                 (no watermark: run the full pass instead)

Every pass writes exactly one ledger entry, whatever happens. Hard errors raised by
any stage are caught here, once, and turned into a failed result; soft warnings
from the join travel in the result and mark the pass as partial.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.enums import SyncStatus, SyncType
from app.core.exceptions import StoreWriteError, SyncInProgressError
from app.schemas.sync import SyncResult
from app.services.catalog_fetch import CatalogSnapshot, fetch_delta_snapshot, fetch_full_snapshot
from app.services.catalog_join import flatten_catalog, JoinResult
from app.services.deletion_diff import reconcile_deletions
from app.services.loyverse.catalog import CatalogSource
from app.services.product_store import ProductStore

logger = logging.getLogger(__name__)

# One pass at a time per process
_sync_lock = asyncio.Lock()


class InventorySyncService:
    """Reconciles the Loyverse catalog into the products table."""

    def __init__(
        self,
        db: Optional[AsyncSession] = None,
        settings: Optional[Settings] = None,
        use_cache: bool = True,
        source: Optional[CatalogSource] = None,
        store: Optional[ProductStore] = None,
    ):
        self.settings = settings or get_settings()
        self.source = source or CatalogSource.from_settings(self.settings, use_cache=use_cache)
        if store is None:
            if db is None:
                raise ValueError("InventorySyncService needs a database session or a store")
            store = ProductStore(db)
        self.store = store

    # ------------------------------------------------------------------ #
    # Public entry points
    # ------------------------------------------------------------------ #

    async def full_sync(self) -> SyncResult:
        """Perform a full sync of all inventory data"""
        async with self._single_flight():
            return await self._run_full()

    async def incremental_sync(self) -> SyncResult:
        """Perform an incremental sync (only items/variants updated since the last completed sync)"""
        async with self._single_flight():
            try:
                watermark = await self.store.get_last_successful_sync_timestamp()
            except Exception as e:
                logger.error(f"Could not read the sync watermark: {e}", exc_info=True)
                return await self._run_pass(SyncType.INCREMENTAL, self._failing_stage(e))

            if watermark is None:
                logger.info("No previous sync found, performing full sync...")
                return await self._run_full()

            logger.info(f"Last sync was at: {watermark.isoformat() if isinstance(watermark, datetime) else watermark}")
            return await self._run_pass(
                SyncType.INCREMENTAL,
                lambda result: self._incremental_pipeline(result, watermark),
            )

    async def get_stats(self) -> Dict[str, Any]:
        """Current database statistics"""
        count = await self.store.count_products()
        last_sync = await self.store.get_last_successful_sync_timestamp()
        logger.info(f"Database Statistics: products={count}, last_successful_sync={last_sync}")
        return {
            "products": count,
            "last_successful_sync": last_sync.isoformat() if isinstance(last_sync, datetime) else last_sync,
        }

    @staticmethod
    def is_running() -> bool:
        return _sync_lock.locked()

    # ------------------------------------------------------------------ #
    # Pipelines
    # ------------------------------------------------------------------ #

    async def _run_full(self) -> SyncResult:
        return await self._run_pass(SyncType.FULL, self._full_pipeline)

    async def _full_pipeline(self, result: SyncResult) -> None:
        snapshot = await fetch_full_snapshot(self.source)
        joined = self._join(snapshot, result)
        await self._upsert(joined, result)

        try:
            outcome = await reconcile_deletions(self.store, joined.skus)
        except StoreWriteError as e:
            # Earlier delete batches are already committed
            result.products_deleted = e.rows_written
            raise
        result.products_deleted = outcome.deleted

    async def _incremental_pipeline(self, result: SyncResult, watermark: datetime) -> None:
        snapshot = await fetch_delta_snapshot(self.source, watermark)
        if snapshot.repaired_item_ids:
            logger.info(f"Recovered {len(snapshot.repaired_item_ids)} unchanged items for updated variants")
        joined = self._join(snapshot, result)
        await self._upsert(joined, result)

    def _join(self, snapshot: CatalogSnapshot, result: SyncResult) -> JoinResult:
        logger.info("Processing product data...")
        joined = flatten_catalog(
            snapshot.items,
            snapshot.variants,
            snapshot.inventory_levels,
            snapshot.categories,
        )
        result.warnings.extend(joined.warnings)
        return joined

    async def _upsert(self, joined: JoinResult, result: SyncResult) -> None:
        if not joined.products:
            logger.info("No products to sync")
            return

        logger.info(f"Syncing {len(joined.products)} products to the store...")
        try:
            result.products_synced = await self.store.upsert_products(joined.products)
        except StoreWriteError as e:
            # Committed batches stay committed; report them
            result.products_synced = e.rows_written
            raise
        logger.info(f"Synced {result.products_synced} products")

    # ------------------------------------------------------------------ #
    # Bookkeeping
    # ------------------------------------------------------------------ #

    async def _run_pass(
        self,
        sync_type: SyncType,
        pipeline: Callable[[SyncResult], Awaitable[None]],
    ) -> SyncResult:
        result = SyncResult(sync_type=sync_type, started_at=datetime.now(timezone.utc))
        logger.info(f"Starting {sync_type.value} sync...")

        try:
            await pipeline(result)
            result.status = SyncStatus.PARTIAL if result.warnings else SyncStatus.SUCCESS
            logger.info(f"{sync_type.value.capitalize()} sync completed ({result.status.value})")
        except Exception as e:
            error_message = str(e) or e.__class__.__name__
            result.errors.append(error_message)
            result.status = SyncStatus.FAILED
            logger.error(f"Error during {sync_type.value} sync: {error_message}", exc_info=True)

        result.completed_at = await self._record(result)
        return result

    async def _record(self, result: SyncResult) -> datetime:
        """Append the ledger entry. A failure here is logged, never raised."""
        if result.failed:
            try:
                await self.store.rollback()
            except Exception as e:
                logger.error(f"Error rolling back failed sync: {e}", exc_info=True)

        try:
            return await self.store.log_sync(
                result.sync_type,
                result.products_synced,
                result.errors,
                result.started_at,
                result.status,
            )
        except Exception as e:
            logger.error(f"Error logging sync: {e}", exc_info=True)
            return datetime.now(timezone.utc)

    @staticmethod
    def _failing_stage(error: Exception) -> Callable[[SyncResult], Awaitable[None]]:
        async def stage(result: SyncResult) -> None:
            raise error
        return stage

    def _single_flight(self):
        if _sync_lock.locked():
            raise SyncInProgressError("A sync is already running")
        return _sync_lock
