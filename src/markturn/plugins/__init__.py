#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/plugins/__init__.py
"""Plugin system for extending the rule table.

A plugin is any callable taking a ``RuleTable``. Plugins can be passed to
``HTMLToMarkdown.use`` directly, or registered by name in the global
``plugin_registry`` (and discovered from the ``markturn.plugins`` entry
point group) and then used by name.

Examples
--------
Use a built-in plugin by name:

    >>> from markturn import HTMLToMarkdown
    >>> HTMLToMarkdown().use("strikethrough").convert("<del>x</del>")
    '~~x~~'

Register a custom plugin:

    >>> from markturn.plugins import PluginMetadata, plugin_registry
    >>> def highlight(rules):
    ...     rules.add_rule("mark", "mark", lambda content, node, options, state: f"=={content}==")
    >>> plugin_registry.register(PluginMetadata(name="mark", description="==mark==", plugin=highlight))

"""

from __future__ import annotations

from ._builtin_metadata import (
    BUILTIN_PLUGINS,
    GFM_METADATA,
    HIGHLIGHTED_CODE_BLOCK_METADATA,
    STRIKETHROUGH_METADATA,
    TABLES_METADATA,
    TASK_LIST_ITEMS_METADATA,
)
from .gfm import gfm, highlighted_code_block, strikethrough, tables, task_list_items
from .metadata import Plugin, PluginMetadata
from .registry import ENTRY_POINT_GROUP, PluginRegistry, plugin_registry


def register_builtin_plugins() -> None:
    """Register the built-in plugins; called at import and after ``clear()``."""
    for metadata in BUILTIN_PLUGINS:
        plugin_registry.register(metadata)


register_builtin_plugins()

__all__ = [
    # Metadata
    "Plugin",
    "PluginMetadata",
    # Registry
    "ENTRY_POINT_GROUP",
    "PluginRegistry",
    "plugin_registry",
    "register_builtin_plugins",
    # Built-in plugins
    "gfm",
    "highlighted_code_block",
    "strikethrough",
    "tables",
    "task_list_items",
    # Built-in metadata
    "BUILTIN_PLUGINS",
    "GFM_METADATA",
    "HIGHLIGHTED_CODE_BLOCK_METADATA",
    "STRIKETHROUGH_METADATA",
    "TABLES_METADATA",
    "TASK_LIST_ITEMS_METADATA",
]
