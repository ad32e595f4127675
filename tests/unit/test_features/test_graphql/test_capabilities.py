"""Tests for the login/logout capabilities."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from starter_server.core.exceptions import SessionLoginError
from starter_server.features.graphql.capabilities import (
    AuthFailure,
    AuthSuccess,
    make_login,
    make_logout,
)
from tests.fakes import SESSION_ID


@pytest.fixture
def authenticator() -> MagicMock:
    mock = MagicMock()
    mock.login = AsyncMock()
    mock.logout = AsyncMock()
    return mock


@pytest.mark.asyncio
async def test_login_success(authenticator: MagicMock) -> None:
    connection = object()
    login = make_login(authenticator, connection)  # type: ignore[arg-type]

    result = await login({"session_id": SESSION_ID})

    assert isinstance(result, AuthSuccess)
    assert result.ok is True
    assert result.unwrap() is None
    authenticator.login.assert_awaited_once_with(connection, {"session_id": SESSION_ID})


@pytest.mark.asyncio
async def test_login_failure_is_a_value(authenticator: MagicMock) -> None:
    error = SessionLoginError("cookie store unavailable")
    authenticator.login.side_effect = error
    login = make_login(authenticator, object())  # type: ignore[arg-type]

    result = await login({"session_id": SESSION_ID})

    assert isinstance(result, AuthFailure)
    assert result.ok is False
    assert result.reason == "login_failed"
    assert result.error is error
    with pytest.raises(SessionLoginError):
        result.unwrap()


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(authenticator: MagicMock) -> None:
    authenticator.login.side_effect = RuntimeError("boom")
    login = make_login(authenticator, object())  # type: ignore[arg-type]

    with pytest.raises(RuntimeError):
        await login({"session_id": SESSION_ID})


@pytest.mark.asyncio
async def test_logout_always_succeeds(authenticator: MagicMock) -> None:
    connection = object()
    result = await make_logout(authenticator, connection)()  # type: ignore[arg-type]

    assert isinstance(result, AuthSuccess)
    authenticator.logout.assert_awaited_once_with(connection)


@pytest.mark.asyncio
async def test_capabilities_are_bound_to_their_connection(authenticator: MagicMock) -> None:
    first, second = object(), object()
    await make_login(authenticator, first)({"session_id": SESSION_ID})  # type: ignore[arg-type]
    await make_login(authenticator, second)({"session_id": SESSION_ID})  # type: ignore[arg-type]

    calls = [call.args[0] for call in authenticator.login.await_args_list]
    assert calls == [first, second]
