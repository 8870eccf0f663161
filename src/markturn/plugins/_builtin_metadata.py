#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/plugins/_builtin_metadata.py
"""Metadata definitions for the built-in plugins.

These objects are registered when ``markturn.plugins`` is imported and are
also exported via entry points in pyproject.toml.
"""

from __future__ import annotations

from markturn.plugins.gfm import gfm, highlighted_code_block, strikethrough, tables, task_list_items
from markturn.plugins.metadata import PluginMetadata

GFM_METADATA = PluginMetadata(
    name="gfm",
    description="All GitHub Flavored Markdown rules: tables, strikethrough, task lists, highlighted code",
    plugin=gfm,
    tags=["gfm"],
    author="markturn",
)

TABLES_METADATA = PluginMetadata(
    name="tables",
    description="Convert tables with a header row to pipe tables, keep other tables as HTML",
    plugin=tables,
    tags=["gfm", "tables"],
    author="markturn",
)

STRIKETHROUGH_METADATA = PluginMetadata(
    name="strikethrough",
    description="Convert <del>, <s> and <strike> to ~~text~~",
    plugin=strikethrough,
    tags=["gfm", "inline"],
    author="markturn",
)

TASK_LIST_ITEMS_METADATA = PluginMetadata(
    name="task-list-items",
    description="Convert list item checkboxes to [ ] and [x]",
    plugin=task_list_items,
    tags=["gfm", "lists"],
    author="markturn",
)

HIGHLIGHTED_CODE_BLOCK_METADATA = PluginMetadata(
    name="highlighted-code-block",
    description="Convert GitHub highlight-source-* blocks to fenced code",
    plugin=highlighted_code_block,
    tags=["gfm", "code"],
    author="markturn",
)

BUILTIN_PLUGINS = (
    GFM_METADATA,
    TABLES_METADATA,
    STRIKETHROUGH_METADATA,
    TASK_LIST_ITEMS_METADATA,
    HIGHLIGHTED_CODE_BLOCK_METADATA,
)
