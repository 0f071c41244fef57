# app/core/logging_config.py
"""
Centralized logging configuration for the application.

This module configures logging levels to reduce noise from verbose libraries
while keeping important application logs visible.
"""

import logging
import os
from typing import Optional


def configure_logging(log_level: Optional[str] = None):
    """
    Configure logging for the application.

    Sets appropriate log levels for different modules:
    - App code: INFO (or DEBUG if LOG_LEVEL=DEBUG)
    - HTTP clients (httpx, httpcore): WARNING only
    - Database: WARNING only
    - Scheduler: WARNING only
    """

    # Explicit level wins, then the environment, then INFO
    log_level = (log_level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, log_level, logging.INFO)

    # Configure root logger
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    # Quiet noisy HTTP client loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Quiet database loggers
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)

    # Quiet scheduler loggers
    logging.getLogger("apscheduler").setLevel(logging.WARNING)

    # Keep app loggers at configured level
    logging.getLogger("app").setLevel(level)
    logging.getLogger("__main__").setLevel(level)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at level: {log_level}")
