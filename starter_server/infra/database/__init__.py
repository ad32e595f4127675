"""Database engine lifecycle."""

from starter_server.infra.database.session import (
    close_database,
    create_engine,
    create_sessionmaker,
    init_database,
)

__all__ = ["close_database", "create_engine", "create_sessionmaker", "init_database"]
