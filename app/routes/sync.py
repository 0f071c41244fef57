# app/routes/sync.py
"""
HTTP trigger for catalog syncs.

GET reads options from the query string, POST from a JSON body:
    type      full | incremental | stats   (default: full)
    useCache  reuse cached Loyverse downloads (default: true)
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings, validate_config
from app.core.exceptions import SyncInProgressError
from app.dependencies import get_db
from app.schemas.sync import SyncRequest
from app.services.sync_service import InventorySyncService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["sync"])

SYNC_TYPES = ("full", "incremental", "stats")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _read_options(request: Request) -> SyncRequest:
    if request.method == "POST":
        try:
            body = await request.json()
        except ValueError:
            body = {}
        return SyncRequest.model_validate(body if isinstance(body, dict) else {})
    return SyncRequest.model_validate(dict(request.query_params))


@router.api_route("/sync", methods=["GET", "POST"])
async def trigger_sync(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Run a full or incremental sync, or report database statistics"""
    try:
        options = await _read_options(request)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": f"Invalid sync options: {e.errors()}"})

    if options.type not in SYNC_TYPES:
        return JSONResponse(
            status_code=400,
            content={"error": 'Invalid sync type. Use "full", "incremental", or "stats"'},
        )

    logger.info(f"Sync triggered via {request.method} - type: {options.type}, useCache: {options.useCache}")

    try:
        validate_config(settings)
        sync_service = InventorySyncService(db, settings, use_cache=options.useCache)

        if options.type == "stats":
            stats = await sync_service.get_stats()
            return {
                "success": True,
                "type": "stats",
                "stats": stats,
                "timestamp": _timestamp(),
            }

        if options.type == "full":
            logger.info("=== Running Full Sync ===")
            result = await sync_service.full_sync()
        else:
            logger.info("=== Running Incremental Sync ===")
            result = await sync_service.incremental_sync()

    except SyncInProgressError as e:
        logger.warning(f"Sync rejected: {e}")
        return JSONResponse(
            status_code=409,
            content={"error": "Sync already running", "message": str(e), "timestamp": _timestamp()},
        )
    except Exception as e:
        logger.exception("Sync error")
        return JSONResponse(
            status_code=500,
            content={"error": "Sync failed", "message": str(e), "timestamp": _timestamp()},
        )

    logger.info("=== Sync Complete ===")
    logger.info(f"Products synced: {result.products_synced}")
    logger.info(f"Products deleted: {result.products_deleted}")
    for error in result.errors:
        logger.error(f"  - {error}")

    return {
        "success": not result.failed,
        "type": result.sync_type.value,
        "result": result.summary(),
        "timestamp": _timestamp(),
    }
