"""Application lifespan management.

Startup: logging, then both database engines. Shutdown disposes the engines
and flushes the log queue.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from starter_server.core.settings import get_app_settings, get_db_settings, get_logging_settings
from starter_server.infra.database import close_database, init_database
from starter_server.infra.logging.config import setup_logging, shutdown

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown."""
    settings = get_app_settings()
    setup_logging(log_settings=get_logging_settings(), force=True)
    logger.info(
        "Application starting",
        extra={"service": settings.service_name, "environment": settings.environment},
    )

    await init_database(app, get_db_settings())
    try:
        yield
    finally:
        await close_database(app)
        logger.info("Application stopped", extra={"service": settings.service_name})
        shutdown()
