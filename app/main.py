# app/main.py

import logging
import os
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.routes import health, sync
from app.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


def run_migrations() -> None:
    """Bring the schema up to date with alembic before serving requests"""
    logger.info("Running database migrations...")
    try:
        result = subprocess.run(['alembic', 'upgrade', 'head'], capture_output=True, text=True)
    except Exception as e:
        logger.error(f"Migration error: {e}")
        return

    if result.returncode == 0:
        logger.info("Migrations completed successfully")
        logger.debug(result.stdout)
    else:
        logger.error(f"Migration failed: {result.stderr}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    if settings.RUN_MIGRATIONS or os.getenv('RUN_MIGRATIONS', 'false').lower() == 'true':
        run_migrations()

    if settings.SYNC_SCHEDULER_ENABLED:
        await start_scheduler()
    else:
        logger.info("Scheduled sync is disabled. Set SYNC_SCHEDULER_ENABLED=true to enable")

    try:
        yield  # This is where the app runs
    finally:
        await stop_scheduler()


app = FastAPI(
    title="Loyverse Inventory Sync",
    lifespan=lifespan
)

app.include_router(health.router)
app.include_router(sync.router)
