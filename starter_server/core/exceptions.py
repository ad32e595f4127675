"""Custom exception classes for the application."""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base application exception.

    All custom exceptions should inherit from this class.

    Attributes:
        detail: Human-readable error message.
        type: Error type identifier.
        extra: Additional context-specific information about the error.
    """

    def __init__(
        self,
        detail: str,
        type: str = "about:blank",
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.detail = detail
        self.type = type
        self.extra = extra or {}
        super().__init__(detail)


class ConfigurationError(AppException):
    """Raised when required configuration is missing or inconsistent."""

    def __init__(self, detail: str, extra: dict[str, Any] | None = None) -> None:
        super().__init__(detail, type="configuration-error", extra=extra)


class GraphQLAlreadyInstalledError(AppException):
    """Raised when the GraphQL endpoint is installed twice on one application."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"GraphQL is already installed on this application at {path}",
            type="graphql-already-installed",
            extra={"path": path},
        )


class UnknownPluginError(ConfigurationError):
    """Raised when a plugin name does not match any registered plugin."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown GraphQL plugin: {name}", extra={"plugin": name})


class SessionLoginError(AppException):
    """Raised by the session authenticator when a principal cannot be logged in."""

    def __init__(self, detail: str = "Failed to establish session") -> None:
        super().__init__(detail, type="session-login-failed")
