"""Database engine management with the psycopg3 async driver.

Two engines are owned by the host application and live on ``app.state``:

- ``auth_engine`` / ``auth_sessionmaker``: the authenticator connection that
  serves GraphQL requests under the visitor role.
- ``root_pg_pool``: the owner connection, shared with trusted resolvers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from starter_server.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from fastapi import FastAPI

    from starter_server.core.settings.postgres import PostgresSettings

logger = logging.getLogger(__name__)


def create_engine(url: str, db_settings: PostgresSettings) -> AsyncEngine:
    """Create an async engine with pool settings from configuration."""
    return create_async_engine(
        url,
        pool_size=db_settings.pool_size,
        max_overflow=db_settings.max_overflow,
        pool_recycle=db_settings.pool_recycle,
        pool_pre_ping=db_settings.pool_pre_ping,
        echo=db_settings.echo,
        # Bind parameters (e.g. login passwords) stay out of exception text and logs
        hide_parameters=True,
    )


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory used for per-request GraphQL sessions."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def init_database(app: FastAPI, db_settings: PostgresSettings) -> None:
    """Create both engines, verify connectivity and publish them on app.state.

    Raises:
        ConfigurationError: If either connection string is missing.
    """
    if not db_settings.is_configured:
        msg = "AUTH_DATABASE_URL and DATABASE_URL must both be set"
        raise ConfigurationError(msg)

    auth_engine = create_engine(db_settings.auth_dsn, db_settings)
    root_engine = create_engine(db_settings.owner_dsn, db_settings)

    try:
        for engine in (auth_engine, root_engine):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Failed to connect to database")
        await auth_engine.dispose()
        await root_engine.dispose()
        raise

    app.state.auth_engine = auth_engine
    app.state.auth_sessionmaker = create_sessionmaker(auth_engine)
    app.state.root_pg_pool = root_engine
    logger.info(
        "Database connections established",
        extra={"pool_size": db_settings.pool_size, "driver": "psycopg3"},
    )


async def close_database(app: FastAPI) -> None:
    """Dispose both engines. Safe to call when init_database never ran."""
    for attr in ("auth_engine", "root_pg_pool"):
        engine: AsyncEngine | None = getattr(app.state, attr, None)
        if engine is not None:
            await engine.dispose()
            setattr(app.state, attr, None)
    logger.info("Database connections closed")
