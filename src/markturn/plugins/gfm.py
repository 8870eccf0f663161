#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/plugins/gfm.py
"""GitHub Flavored Markdown rules.

Each function here is a plugin: it takes a ``RuleTable`` and registers rules
on it. ``gfm`` applies all of them.

Examples
--------
    >>> from markturn import HTMLToMarkdown
    >>> from markturn.plugins.gfm import gfm
    >>> converter = HTMLToMarkdown().use(gfm)
    >>> converter.convert("<p><del>old</del> new</p>")
    '~~old~~ new'

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

from markturn.nodes import Element
from markturn.options import ConversionOptions
from markturn.rules.commonmark import fence_for
from markturn.rules.table import RuleTable

if TYPE_CHECKING:
    from markturn.state import ConversionState

_HIGHLIGHT_CLASS = re.compile(r"highlight-(?:text|source)-([a-z0-9]+)")

_ALIGN_BORDERS = {"left": ":--", "right": "--:", "center": ":-:"}


# -----------------------------------------------------------------------------
# Strikethrough
# -----------------------------------------------------------------------------


def _strikethrough_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    if not content.strip():
        return content
    return f"~~{content}~~"


def strikethrough(rules: RuleTable) -> None:
    """Convert ``<del>``, ``<s>`` and ``<strike>`` to ``~~text~~``."""
    rules.add_rule("strikethrough", ("del", "s", "strike"), _strikethrough_replacement)


# -----------------------------------------------------------------------------
# Task list items
# -----------------------------------------------------------------------------


def _is_task_checkbox(node: Element, options: ConversionOptions) -> bool:
    parent = node.parent
    return (
        node.tag == "input"
        and str(node.get("type", "")).lower() == "checkbox"
        and isinstance(parent, Element)
        and parent.tag == "li"
    )


def _task_checkbox_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    marker = "[x]" if "checked" in node.attrs else "[ ]"
    return marker if state.next_text_starts_with_space(node) else f"{marker} "


def task_list_items(rules: RuleTable) -> None:
    """Convert checkboxes at the start of list items to ``[ ]`` / ``[x]``."""
    rules.add_rule("task-list-items", _is_task_checkbox, _task_checkbox_replacement)


# -----------------------------------------------------------------------------
# Highlighted code blocks
# -----------------------------------------------------------------------------


def _highlight_language(node: Element) -> Optional[str]:
    match = _HIGHLIGHT_CLASS.search(str(node.get("class", "")))
    return match.group(1) if match else None


def _is_highlighted_code_block(node: Element, options: ConversionOptions) -> bool:
    if node.tag != "div" or _highlight_language(node) is None:
        return False
    first = next((child for child in node.children if isinstance(child, Element)), None)
    return first is not None and first.tag == "pre"


def _highlighted_code_block_replacement(
    content: str, node: Element, options: ConversionOptions, state: ConversionState
) -> str:
    pre = node.find("pre")
    code = (pre.text_content if pre is not None else "").rstrip("\n")
    fence = fence_for(code, options.fence)
    return f"\n\n{fence}{_highlight_language(node)}\n{code}\n{fence}\n\n"


def highlighted_code_block(rules: RuleTable) -> None:
    """Convert GitHub's ``<div class="highlight-source-xxx"><pre>`` blocks to fenced code."""
    rules.add_rule(
        "highlighted-code-block",
        _is_highlighted_code_block,
        _highlighted_code_block_replacement,
        render_children=False,
    )


# -----------------------------------------------------------------------------
# Tables
# -----------------------------------------------------------------------------


def _cells(row: Element) -> list[Element]:
    return [child for child in row.children if isinstance(child, Element) and child.tag in ("th", "td")]


def _first_row(table: Element) -> Optional[Element]:
    for node in table.iter_descendants():
        if isinstance(node, Element) and node.tag == "table":
            # Rows of a nested table do not count
            return None
        if isinstance(node, Element) and node.tag == "tr":
            return node
    return None


def _first_element_child(node: Element) -> Optional[Element]:
    return next((child for child in node.children if isinstance(child, Element)), None)


def is_heading_row(row: Optional[Element]) -> bool:
    """True when ``row`` supplies the header line of a GFM table.

    That is any row inside ``<thead>``, or the first row of the table (or of
    its first ``<tbody>``) when every cell is a ``<th>``.
    """
    if row is None:
        return False
    parent = row.parent
    if not isinstance(parent, Element):
        return False
    if parent.tag == "thead":
        return True
    if _first_element_child(parent) is not row:
        return False

    in_first_body = False
    if parent.tag == "tbody":
        table = parent.parent
        in_first_body = isinstance(table, Element) and _first_element_child(table) is parent
    if parent.tag != "table" and not in_first_body:
        return False
    cells = _cells(row)
    return bool(cells) and all(cell.tag == "th" for cell in cells)


def _cell(content: str, node: Element) -> str:
    row = node.parent
    cells = _cells(row) if isinstance(row, Element) else [node]
    prefix = "| " if cells and cells[0] is node else " "
    return f"{prefix}{content} |"


def _table_cell_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    text = " ".join(content.split("\n")).strip().replace("|", "\\|")
    return _cell(text, node)


def _table_row_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    border = ""
    if is_heading_row(node):
        borders = []
        for cell in _cells(node):
            align = str(cell.get("align", "")).lower()
            borders.append(_cell(_ALIGN_BORDERS.get(align, "---"), cell))
        border = "\n" + "".join(borders)
    return f"\n{content}{border}"


def _is_gfm_table(node: Element, options: ConversionOptions) -> bool:
    return node.tag == "table" and is_heading_row(_first_row(node))


def _is_html_table(node: Element, options: ConversionOptions) -> bool:
    return node.tag == "table" and not is_heading_row(_first_row(node))


def _table_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    # Rows already end their own lines
    content = content.replace("\n\n", "\n")
    return f"\n\n{content}\n\n"


def _table_section_replacement(
    content: str, node: Element, options: ConversionOptions, state: ConversionState
) -> str:
    return content


def tables(rules: RuleTable) -> None:
    """Convert tables with a header row to GFM pipe tables.

    Tables without a header row have no GFM equivalent and are kept as HTML.
    """
    rules.keep(_is_html_table)
    rules.add_rule("table-cell", ("th", "td"), _table_cell_replacement)
    rules.add_rule("table-row", "tr", _table_row_replacement)
    rules.add_rule("table-section", ("thead", "tbody", "tfoot"), _table_section_replacement)
    rules.add_rule("table", _is_gfm_table, _table_replacement)


def gfm(rules: RuleTable) -> None:
    """Apply every GitHub Flavored Markdown plugin."""
    for plugin in (highlighted_code_block, strikethrough, tables, task_list_items):
        plugin(rules)


__all__ = [
    "gfm",
    "highlighted_code_block",
    "is_heading_row",
    "strikethrough",
    "tables",
    "task_list_items",
]
