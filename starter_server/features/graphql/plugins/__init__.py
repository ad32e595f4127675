"""Schema plugins and the name registry used by configuration."""

from __future__ import annotations

from collections.abc import Iterable

from starter_server.core.exceptions import UnknownPluginError
from starter_server.features.graphql.plugins.base import PluginRef, SchemaPlugin, plugin_name
from starter_server.features.graphql.plugins.login import LoginPlugin
from starter_server.features.graphql.plugins.node import NodePlugin
from starter_server.features.graphql.plugins.primary_key_mutations_only import (
    PrimaryKeyMutationsOnlyPlugin,
)
from starter_server.features.graphql.plugins.simplify_inflector import SimplifyInflectorPlugin
from starter_server.features.graphql.plugins.users import UsersMutationPlugin, UsersQueryPlugin

__all__ = [
    "CORE_PLUGINS",
    "PLUGIN_REGISTRY",
    "LoginPlugin",
    "NodePlugin",
    "PluginRef",
    "PrimaryKeyMutationsOnlyPlugin",
    "SchemaPlugin",
    "SimplifyInflectorPlugin",
    "UsersMutationPlugin",
    "UsersQueryPlugin",
    "plugin_name",
    "resolve_plugin",
    "resolve_plugins",
    "select_plugins",
]

CORE_PLUGINS: tuple[type[SchemaPlugin], ...] = (
    NodePlugin,
    UsersQueryPlugin,
    UsersMutationPlugin,
)

PLUGIN_REGISTRY: dict[str, type[SchemaPlugin]] = {
    cls.name: cls
    for cls in (
        *CORE_PLUGINS,
        SimplifyInflectorPlugin,
        PrimaryKeyMutationsOnlyPlugin,
        LoginPlugin,
    )
}


def resolve_plugin(ref: PluginRef) -> SchemaPlugin:
    """Turn a name, class or instance into a plugin instance.

    Raises:
        UnknownPluginError: If a name is not registered.
    """
    if isinstance(ref, SchemaPlugin):
        return ref
    if isinstance(ref, str):
        cls = PLUGIN_REGISTRY.get(ref)
        if cls is None:
            raise UnknownPluginError(ref)
        return cls()
    return ref()


def resolve_plugins(refs: Iterable[PluginRef]) -> tuple[SchemaPlugin, ...]:
    return tuple(resolve_plugin(ref) for ref in refs)


def select_plugins(
    append: Iterable[PluginRef] = (),
    skip: Iterable[PluginRef] = (),
) -> list[SchemaPlugin]:
    """Core plugins then ``append``, minus anything named in ``skip``.

    A plugin appearing twice runs once, at its first position.
    """
    skipped = {plugin_name(ref) for ref in skip}
    selected: list[SchemaPlugin] = []
    seen: set[str] = set()
    for plugin in (*resolve_plugins(CORE_PLUGINS), *resolve_plugins(append)):
        if plugin.name in skipped or plugin.name in seen:
            continue
        seen.add(plugin.name)
        selected.append(plugin)
    return selected
