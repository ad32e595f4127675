"""Query depth and cost limiting extension for GraphQL operations.

Prevents expensive queries from overloading the database by calculating the
depth and cost of each operation before it runs. Cost is the number of fields
requested, multiplied by the page size of every enclosing list.

Usage:
    extensions = [
        ComplexityLimiter.configure(max_complexity=30000, max_depth=12),
        PgTransactionExtension,
    ]

Extensions are passed as classes so Strawberry creates one instance per
operation; ``configure`` returns a subclass carrying the limits.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from graphql import GraphQLError
from graphql.language import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    IntValueNode,
    OperationDefinitionNode,
    VariableNode,
)
from graphql.type import GraphQLList, GraphQLNonNull, GraphQLObjectType
from strawberry.extensions import SchemaExtension

from starter_server.core.settings.graphql import (
    DEFAULT_COST_LIMIT,
    DEFAULT_DEPTH_LIMIT,
    DEFAULT_PAGINATION_CAP,
)

logger = logging.getLogger(__name__)

__all__ = ["ComplexityConfig", "ComplexityLimiter"]


class ComplexityConfig:
    """Configuration for complexity calculation."""

    FIELD_COST = 1

    # Field-specific costs
    EXPENSIVE_FIELDS: ClassVar[dict[str, int]] = {
        "login": 10,  # Password hashing
    }


class ComplexityLimiter(SchemaExtension):
    """Limit GraphQL query depth and cost.

    The score is calculated before execution and operations exceeding a limit
    are rejected with DEPTH_LIMIT_EXCEEDED or COMPLEXITY_LIMIT_EXCEEDED.
    Introspection queries are exempt.

    Example cost calculation (default page size 50):
        query {
            users(first: 10) {   # 10 rows
                id               # +10
                username         # +10
            }
            currentUser {        # +1
                id               # +1
            }
        }
        # Cost: 10 + 10 + 10 + 1 + 1 = 32

    When ``expose_cost`` is set the result carries
    ``extensions.cost = {"complexity": ..., "depth": ..., "limit": ...}``.
    """

    max_complexity: ClassVar[int] = DEFAULT_COST_LIMIT
    max_depth: ClassVar[int] = DEFAULT_DEPTH_LIMIT
    default_list_size: ClassVar[int] = DEFAULT_PAGINATION_CAP
    expose_cost: ClassVar[bool] = False
    config: ClassVar[ComplexityConfig] = ComplexityConfig()

    def __init__(self, *, execution_context: Any = None) -> None:
        super().__init__(execution_context=execution_context)
        self.complexity: int | None = None
        self.depth: int | None = None

    @classmethod
    def configure(
        cls,
        *,
        max_complexity: int | None = None,
        max_depth: int | None = None,
        default_list_size: int | None = None,
        expose_cost: bool = False,
        config: ComplexityConfig | None = None,
    ) -> type[ComplexityLimiter]:
        """Return a subclass bound to the given limits."""
        return type(
            cls.__name__,
            (cls,),
            {
                "max_complexity": max_complexity or cls.max_complexity,
                "max_depth": max_depth or cls.max_depth,
                "default_list_size": default_list_size or cls.default_list_size,
                "expose_cost": expose_cost,
                "config": config or cls.config,
            },
        )

    def on_execute(self):  # type: ignore[no-untyped-def]
        """Check complexity before executing the operation.

        Raises:
            GraphQLError: If complexity or depth limit is exceeded
        """
        self._check()
        yield

    def get_results(self) -> dict[str, Any]:
        if not self.expose_cost or self.complexity is None:
            return {}
        return {
            "cost": {
                "complexity": self.complexity,
                "depth": self.depth,
                "limit": self.max_complexity,
            }
        }

    def _check(self) -> None:
        execution_context = self.execution_context
        operation = self._get_operation()
        if operation is None:
            return

        # Skip complexity checks for introspection queries
        if self._is_introspection_query(operation):
            return

        try:
            complexity_score, max_depth = self._calculate_complexity(operation)
        except Exception:
            # Don't fail the operation if complexity calculation has issues
            logger.exception(
                "Complexity calculation failed",
                extra={"operation_name": execution_context.operation_name},
            )
            return

        self.complexity = complexity_score
        self.depth = max_depth

        if max_depth > self.max_depth:
            logger.warning(
                "GraphQL query depth exceeded",
                extra={
                    "operation_name": execution_context.operation_name,
                    "max_depth": max_depth,
                    "limit": self.max_depth,
                },
            )
            raise GraphQLError(
                f"Query depth {max_depth} exceeds limit of {self.max_depth}",
                extensions={
                    "code": "DEPTH_LIMIT_EXCEEDED",
                    "max_depth": max_depth,
                    "limit": self.max_depth,
                },
            )

        if complexity_score > self.max_complexity:
            logger.warning(
                "GraphQL query complexity exceeded",
                extra={
                    "operation_name": execution_context.operation_name,
                    "complexity": complexity_score,
                    "limit": self.max_complexity,
                },
            )
            raise GraphQLError(
                f"Query complexity {complexity_score} exceeds limit of {self.max_complexity}",
                extensions={
                    "code": "COMPLEXITY_LIMIT_EXCEEDED",
                    "complexity": complexity_score,
                    "limit": self.max_complexity,
                },
            )

        logger.debug(
            "GraphQL query complexity",
            extra={
                "operation_name": execution_context.operation_name,
                "complexity": complexity_score,
                "depth": max_depth,
            },
        )

    def _get_operation(self) -> OperationDefinitionNode | None:
        document = self.execution_context.graphql_document
        if document is None:
            return None
        operations = [d for d in document.definitions if isinstance(d, OperationDefinitionNode)]
        name = self.execution_context.operation_name
        for operation in operations:
            if name is None or (operation.name and operation.name.value == name):
                return operation
        return None

    def _fragments(self) -> dict[str, FragmentDefinitionNode]:
        document = self.execution_context.graphql_document
        return {
            d.name.value: d
            for d in document.definitions
            if isinstance(d, FragmentDefinitionNode)
        }

    def _is_introspection_query(self, operation: OperationDefinitionNode) -> bool:
        """Check if every root field is an introspection field (``__schema``, ``__type``)."""
        return all(
            isinstance(selection, FieldNode) and selection.name.value.startswith("__")
            for selection in operation.selection_set.selections
        )

    def _calculate_complexity(self, operation: OperationDefinitionNode) -> tuple[int, int]:
        """Calculate complexity score and max depth for an operation."""
        schema = self.execution_context.schema._schema
        operation_type = schema.query_type

        if operation.operation.value == "mutation":
            operation_type = schema.mutation_type
        elif operation.operation.value == "subscription":
            operation_type = schema.subscription_type

        if not operation_type:
            return 0, 0

        return self._calculate_selection_set_complexity(
            operation.selection_set.selections,
            operation_type,
            depth=1,
            multiplier=1,
            fragments=self._fragments(),
        )

    def _calculate_selection_set_complexity(
        self,
        selections: Any,
        parent_type: GraphQLObjectType,
        depth: int,
        multiplier: int,
        fragments: dict[str, FragmentDefinitionNode],
    ) -> tuple[int, int]:
        total_complexity = 0
        max_depth = depth

        for selection in selections:
            if isinstance(selection, FieldNode):
                complexity, field_depth = self._calculate_field_complexity(
                    selection, parent_type, depth, multiplier, fragments
                )
            elif isinstance(selection, InlineFragmentNode):
                complexity, field_depth = self._calculate_selection_set_complexity(
                    selection.selection_set.selections, parent_type, depth, multiplier, fragments
                )
            elif isinstance(selection, FragmentSpreadNode):
                fragment = fragments.get(selection.name.value)
                if fragment is None:
                    continue
                complexity, field_depth = self._calculate_selection_set_complexity(
                    fragment.selection_set.selections, parent_type, depth, multiplier, fragments
                )
            else:
                continue
            total_complexity += complexity
            max_depth = max(max_depth, field_depth)

        return total_complexity, max_depth

    def _calculate_field_complexity(
        self,
        field: FieldNode,
        parent_type: GraphQLObjectType,
        depth: int,
        multiplier: int,
        fragments: dict[str, FragmentDefinitionNode],
    ) -> tuple[int, int]:
        field_name = field.name.value
        if field_name.startswith("__"):
            return 0, depth

        field_cost = self.config.EXPENSIVE_FIELDS.get(field_name, self.config.FIELD_COST)

        field_type = None
        if hasattr(parent_type, "fields") and field_name in parent_type.fields:
            field_type = parent_type.fields[field_name].type

        field_multiplier = multiplier
        if field_type is not None and isinstance(self._unwrap_non_null(field_type), GraphQLList):
            field_multiplier *= self._get_list_size(field)

        complexity = field_cost * field_multiplier

        max_depth = depth
        if field.selection_set:
            inner_type = self._get_inner_type(field_type) if field_type else None
            if inner_type is not None and hasattr(inner_type, "fields"):
                nested_complexity, nested_depth = self._calculate_selection_set_complexity(
                    field.selection_set.selections,
                    inner_type,
                    depth + 1,
                    field_multiplier,
                    fragments,
                )
                complexity += nested_complexity
                max_depth = max(max_depth, nested_depth)

        return complexity, max_depth

    def _get_list_size(self, field: FieldNode) -> int:
        """Page size from a literal or variable ``first`` argument, capped."""
        for arg in field.arguments or ():
            if arg.name.value != "first":
                continue
            value: Any = None
            if isinstance(arg.value, IntValueNode):
                value = arg.value.value
            elif isinstance(arg.value, VariableNode):
                variables = self.execution_context.variables or {}
                value = variables.get(arg.value.name.value)
            if value is not None:
                return max(0, min(int(value), self.default_list_size))
        return self.default_list_size

    @staticmethod
    def _unwrap_non_null(field_type: Any) -> Any:
        return field_type.of_type if isinstance(field_type, GraphQLNonNull) else field_type

    def _get_inner_type(self, field_type: Any) -> Any:
        """Unwrap List and NonNull wrappers."""
        while hasattr(field_type, "of_type"):
            field_type = field_type.of_type
        return field_type
