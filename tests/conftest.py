"""Pytest configuration and shared fixtures.

Organization:
    - Environment: settings isolated from the developer's shell
    - GraphQL Fixtures: options, fake sessions and contexts
    - Application Fixtures: FastAPI app with GraphQL installed and HTTP client
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Iterator
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from starter_server.core.settings import SessionSettings, clear_all_caches
from starter_server.features.graphql.context import GraphQLContext
from starter_server.features.graphql.options import EXTENDED_ERRORS_FULL, GraphQLOptions
from starter_server.features.graphql.plugins import resolve_plugins
from tests.fakes import FakeEngine, FakeSession, FakeSessionmaker

# Ensure tests run without external infrastructure
os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("SECRET", "test-secret")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")

DEFAULT_APPEND = ("SimplifyInflectorPlugin", "PrimaryKeyMutationsOnlyPlugin", "LoginPlugin")


# ============================================================================
# Environment
# ============================================================================


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Drop cached settings so monkeypatched env vars take effect."""
    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# GraphQL Fixtures
# ============================================================================


def make_options(**overrides: Any) -> GraphQLOptions:
    values: dict[str, Any] = {
        "append_plugins": resolve_plugins(DEFAULT_APPEND),
        "skip_plugins": ("NodePlugin",),
        "extended_errors": EXTENDED_ERRORS_FULL,
    }
    values.update(overrides)
    return GraphQLOptions(**values)


@pytest.fixture
def graphql_options() -> GraphQLOptions:
    """Options matching the production plugin list, with full extended errors."""
    return make_options()


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def sessionmaker(fake_session: FakeSession) -> FakeSessionmaker:
    """One forked session per operation; all share ``fake_session``'s rules and logs."""
    return FakeSessionmaker(fake_session)


@pytest.fixture
def root_pg_pool() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def login_calls() -> list[Any]:
    return []


@pytest.fixture
def graphql_context(
    sessionmaker: FakeSessionmaker,
    root_pg_pool: FakeEngine,
    login_calls: list[Any],
) -> GraphQLContext:
    """Context for executing the schema directly, without HTTP."""
    from starter_server.features.graphql.capabilities import AuthSuccess

    async def login(user: Any) -> AuthSuccess:
        login_calls.append(("login", user))
        return AuthSuccess()

    async def logout() -> AuthSuccess:
        login_calls.append(("logout", None))
        return AuthSuccess()

    return GraphQLContext(
        request=None,
        user=None,
        pg_settings={"role": "visitor", "jwt.claims.session_id": None},
        sessionmaker=sessionmaker,  # type: ignore[arg-type]
        root_pg_pool=root_pg_pool,  # type: ignore[arg-type]
        login=login,
        logout=logout,
        pagination_cap=50,
    )


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def graphql_app(
    graphql_options: GraphQLOptions,
    sessionmaker: FakeSessionmaker,
    root_pg_pool: FakeEngine,
) -> FastAPI:
    """FastAPI app with middleware and GraphQL installed; database replaced by fakes.

    No lifespan runs: the fakes are placed on app.state directly.
    """
    from starter_server.app.middleware import configure_middleware
    from starter_server.features.graphql.install import install_graphql
    from starter_server.infra.auth.session import SessionAuthenticator

    app = FastAPI()
    authenticator = SessionAuthenticator()
    configure_middleware(app, SessionSettings(secret="test-secret"), authenticator)
    install_graphql(app, graphql_options, authenticator)

    app.state.auth_sessionmaker = sessionmaker
    app.state.root_pg_pool = root_pg_pool
    return app


@pytest.fixture
async def client(graphql_app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client bound to the app; cookies persist across requests."""
    async with AsyncClient(transport=ASGITransport(app=graphql_app), base_url="http://test") as ac:
        yield ac


def connection_with_user(user: Any) -> SimpleNamespace:
    return SimpleNamespace(state=SimpleNamespace(user=user))
