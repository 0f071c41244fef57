# app/cli/run_sync.py
import asyncio
import logging
import sys
import click
from datetime import datetime

from app.core.config import get_settings, validate_config
from app.core.exceptions import ConfigurationError
from app.core.logging_config import configure_logging
from app.database import engine, get_session
from app.services.loyverse.cache import ResponseCache
from app.services.sync_service import InventorySyncService

logger = logging.getLogger(__name__)

@click.command()
@click.option('--type', 'sync_type', type=click.Choice(['full', 'incremental', 'stats']), default='full',
              show_default=True, help='Which pass to run')
@click.option('--no-cache', is_flag=True, help='Always download fresh data from Loyverse')
@click.option('--clear-cache', is_flag=True, help='Delete cached Loyverse responses before running')
def run_sync(sync_type, no_cache, clear_cache):
    """Sync the Loyverse catalog into the products table"""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    try:
        validate_config(settings)
    except ConfigurationError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    if clear_cache:
        removed = ResponseCache(settings.CACHE_DIR).clear_all()
        click.echo(f"Cleared {removed} cached responses")

    start_time = datetime.now()
    logger.info(f"Starting {sync_type} sync at {start_time}")

    try:
        ok = asyncio.run(run(sync_type, use_cache=not no_cache))
    except Exception as e:
        logger.exception("Error during sync")
        click.echo(f"Error during sync: {str(e)}", err=True)
        sys.exit(1)

    logger.info(f"Completed in {datetime.now() - start_time}")
    if not ok:
        sys.exit(1)

async def run(sync_type: str, use_cache: bool = True) -> bool:
    """Run one pass and print its summary. Returns False when the pass failed."""
    try:
        async with get_session() as session:
            sync_service = InventorySyncService(session, use_cache=use_cache)

            if sync_type == 'stats':
                stats = await sync_service.get_stats()
                click.echo("\nDatabase Statistics:")
                click.echo(f"Total products: {stats['products']}")
                click.echo(f"Last successful sync: {stats['last_successful_sync'] or 'Never'}")
                return True

            if sync_type == 'full':
                result = await sync_service.full_sync()
            else:
                result = await sync_service.incremental_sync()
    finally:
        await engine.dispose()

    click.echo(f"\n{result.sync_type.value.capitalize()} sync {result.status.value}")
    click.echo(f"Products synced: {result.products_synced}")
    click.echo(f"Products deleted: {result.products_deleted}")
    if result.warnings:
        click.echo(f"Warnings: {len(result.warnings)}")
        for warning in result.warnings:
            click.echo(f"  - {warning}")
    if result.errors:
        click.echo("Errors:")
        for error in result.errors:
            click.echo(f"  - {error}")

    return not result.failed

if __name__ == "__main__":
    run_sync()
