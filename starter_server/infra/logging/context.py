"""Request-scoped logging fields.

``RequestIDMiddleware`` binds ``request_id`` and ``SessionUserMiddleware``
binds ``session_id``; ``ContextInjectingFilter`` copies whatever is bound onto
each record, so GraphQL resolvers log with both ids without passing them
around. The mapping lives in a ContextVar and is replaced, never mutated, so
concurrent requests cannot see each other's ids.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextvars import ContextVar
from typing import Any

_EMPTY: Mapping[str, Any] = {}
_request_fields: ContextVar[Mapping[str, Any]] = ContextVar("starter_log_fields", default=_EMPTY)


def set_log_context(**fields: Any) -> None:
    """Bind fields for the rest of the current request."""
    _request_fields.set({**_request_fields.get(), **fields})


def get_log_context() -> dict[str, Any]:
    return dict(_request_fields.get())


def clear_log_context() -> None:
    _request_fields.set(_EMPTY)


def remove_from_log_context(*keys: str) -> None:
    """Unbind ``keys``; missing keys are ignored."""
    current = _request_fields.get()
    if any(key in current for key in keys):
        _request_fields.set({k: v for k, v in current.items() if k not in keys})


class ContextInjectingFilter(logging.Filter):
    """Attach bound request fields to every record passing the queue handler.

    Attributes already present on the record (e.g. from ``extra=``) win.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _request_fields.get().items():
            if key not in record.__dict__:
                record.__dict__[key] = value
        return True
