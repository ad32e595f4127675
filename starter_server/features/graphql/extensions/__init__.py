"""Strawberry schema extensions."""

from __future__ import annotations

from starter_server.features.graphql.extensions.complexity_limiter import (
    ComplexityConfig,
    ComplexityLimiter,
)
from starter_server.features.graphql.extensions.extended_errors import ExtendedErrorExtension
from starter_server.features.graphql.extensions.transaction import PgTransactionExtension

__all__ = ["ComplexityConfig", "ComplexityLimiter", "ExtendedErrorExtension", "PgTransactionExtension"]
