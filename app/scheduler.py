"""
Scheduled incremental syncs.
Runs inside the FastAPI process when SYNC_SCHEDULER_ENABLED is set.
"""

import logging
from datetime import datetime
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_EXECUTED, EVENT_JOB_ERROR

from app.core.config import get_settings, validate_config
from app.core.exceptions import ConfigurationError, SyncInProgressError
from app.database import get_session
from app.services.sync_service import InventorySyncService

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None


async def incremental_sync_task():
    """Task to run one incremental sync pass"""
    logger.info("=== SCHEDULED SYNC STARTING ===")
    settings = get_settings()

    try:
        validate_config(settings)
        async with get_session() as db:
            # Unattended runs always read live data
            sync_service = InventorySyncService(db, settings, use_cache=False)
            result = await sync_service.incremental_sync()
    except SyncInProgressError:
        logger.info("Skipping scheduled sync: another sync is still running")
        return
    except ConfigurationError as e:
        logger.error(f"Skipping scheduled sync: {e}")
        return

    if result.failed:
        logger.error(f"Scheduled sync failed: {'; '.join(result.errors)}")
    else:
        logger.info(
            f"Scheduled sync completed ({result.status.value}): "
            f"{result.products_synced} synced, {len(result.warnings)} warnings"
        )


def job_listener(event):
    """Listen to job events for logging"""
    if event.exception:
        logger.error(f"Job {event.job_id} crashed: {event.exception}")
    else:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now()}")


def create_scheduler() -> AsyncIOScheduler:
    """Create and configure the scheduler"""
    global scheduler

    if scheduler is not None:
        return scheduler

    settings = get_settings()
    scheduler = AsyncIOScheduler()
    scheduler.add_listener(job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    scheduler.add_job(
        incremental_sync_task,
        IntervalTrigger(minutes=settings.SYNC_INTERVAL_MINUTES),
        id="incremental_sync",
        name="Incremental Loyverse Sync",
        replace_existing=True,
        max_instances=1,  # Only one sync at a time
        coalesce=True,
    )
    logger.info(f"Scheduled incremental sync every {settings.SYNC_INTERVAL_MINUTES} minutes")

    return scheduler


async def start_scheduler():
    """Start the scheduler"""
    global scheduler

    if scheduler is None:
        scheduler = create_scheduler()

    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started successfully")
        for job in scheduler.get_jobs():
            logger.info(f"  - {job.name}: {job.trigger}")


async def stop_scheduler():
    """Stop the scheduler gracefully"""
    global scheduler

    if scheduler and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped successfully")
    scheduler = None
