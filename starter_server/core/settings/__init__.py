"""Modular Pydantic Settings v2 configuration.

Import settings via cached loaders:
    from starter_server.core.settings import get_graphql_settings

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables
    3. .env file
"""

from __future__ import annotations

from .app import AppSettings
from .graphql import GraphQLSettings
from .loader import (
    clear_all_caches,
    get_app_settings,
    get_db_settings,
    get_graphql_settings,
    get_logging_settings,
    get_session_settings,
)
from .logs import LoggingSettings
from .postgres import PostgresSettings
from .session import SessionSettings

__all__ = [
    "AppSettings",
    "GraphQLSettings",
    "LoggingSettings",
    "PostgresSettings",
    "SessionSettings",
    "clear_all_caches",
    "get_app_settings",
    "get_db_settings",
    "get_graphql_settings",
    "get_logging_settings",
    "get_session_settings",
]
