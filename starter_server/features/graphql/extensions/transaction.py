"""One database session and transaction per GraphQL operation.

The session is opened from the context's sessionmaker just before execution,
the request's pg settings are applied to it, and the transaction is committed
only when the operation produced no errors. Each operation gets its own
session, so overlapping operations on one WebSocket connection or in one
batched request never share a transaction.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from strawberry.extensions import SchemaExtension

from starter_server.features.graphql.context import bind_operation_session, reset_operation_session
from starter_server.features.graphql.pg_settings import apply_pg_settings

logger = logging.getLogger(__name__)

__all__ = ["PgTransactionExtension"]


class PgTransactionExtension(SchemaExtension):
    async def on_execute(self) -> AsyncIterator[None]:
        context = self.execution_context.context
        sessionmaker = getattr(context, "sessionmaker", None)
        if sessionmaker is None:
            yield
            return

        async with sessionmaker() as session:
            token = bind_operation_session(session)
            try:
                transaction = await session.begin()
                try:
                    await apply_pg_settings(session, context.pg_settings)
                    yield
                except BaseException:
                    await transaction.rollback()
                    raise

                result = self.execution_context.result
                if result is None or result.errors:
                    logger.debug(
                        "Rolling back GraphQL transaction",
                        extra={"operation_name": self.execution_context.operation_name},
                    )
                    await transaction.rollback()
                else:
                    await transaction.commit()
            finally:
                reset_operation_session(token)
