"""Apply the extended-error policy to every operation result.

Runs in ``on_operation`` like Strawberry's own ``MaskErrors`` extension, so
HTTP, batched HTTP and WebSocket responses all carry the same messages and
diagnostic fields.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import ClassVar

from strawberry.extensions import SchemaExtension

from starter_server.features.graphql.error_handler import ExtendedErrorPolicy

__all__ = ["ExtendedErrorExtension"]


class ExtendedErrorExtension(SchemaExtension):
    policy: ClassVar[ExtendedErrorPolicy] = ExtendedErrorPolicy()

    @classmethod
    def configure(cls, policy: ExtendedErrorPolicy) -> type[ExtendedErrorExtension]:
        """Return a subclass bound to ``policy``."""
        return type(cls.__name__, (cls,), {"policy": policy})

    def on_operation(self) -> Iterator[None]:
        yield
        result = self.execution_context.result
        errors = getattr(result, "errors", None)
        if errors:
            for error in errors:
                self.policy.apply(error)
