#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Per-conversion mutable context handed to every rule."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from markturn.nodes import Comment, DocumentNode, Element, Text
from markturn.options import ConversionOptions
from markturn.references import ReferenceLinkCollector

_WHITESPACE_RUN = re.compile(r"[ \r\n\t]+")


@dataclass
class ConversionState:
    """Context for a single ``render`` call.

    A fresh state is created for every conversion and discarded afterwards,
    so concurrent conversions never share one.

    Parameters
    ----------
    options : ConversionOptions
        Options in effect for this conversion
    references : ReferenceLinkCollector
        Deferred link definitions
    normalized_text : dict[int, str]
        Whitespace-normalized text keyed by ``id()`` of each text node
    list_depth : int
        Number of ``<ul>``/``<ol>`` elements currently open
    indent_stack : list[str]
        Prefixes contributed by open list items and blockquotes
    preformatted_depth : int
        Number of preserved ``<pre>`` elements currently open
    code_depth : int
        Number of ``<code>`` elements (or code blocks) currently open
    list_item_prefixes : dict[int, str]
        Marker of every ``<li>`` of the lists entered so far, keyed by ``id()``
    blank_elements : set[int]
        ``id()`` of every element that renders to nothing

    """

    options: ConversionOptions
    references: ReferenceLinkCollector = field(default_factory=ReferenceLinkCollector)
    normalized_text: dict[int, str] = field(default_factory=dict)
    list_depth: int = 0
    indent_stack: list[str] = field(default_factory=list)
    preformatted_depth: int = 0
    code_depth: int = 0
    list_item_prefixes: dict[int, str] = field(default_factory=dict)
    blank_elements: set[int] = field(default_factory=set)

    @property
    def block_indent(self) -> str:
        return "".join(self.indent_stack)

    @property
    def in_preformatted(self) -> bool:
        return self.preformatted_depth > 0

    @property
    def in_code(self) -> bool:
        return self.code_depth > 0

    def text_of(self, node: Text) -> str:
        """Return the normalized text of ``node``.

        Text inside preserved ``<pre>``/``<code>`` is returned verbatim.
        """
        normalized = self.normalized_text.get(id(node))
        if normalized is not None:
            return normalized
        if self.options.preformatted_code and (self.in_preformatted or self.in_code):
            return node.data
        return _WHITESPACE_RUN.sub(" ", node.data)

    def is_empty_text(self, node: DocumentNode) -> bool:
        return isinstance(node, Comment) or (isinstance(node, Text) and not self.text_of(node))

    def has_following_content(self, node: DocumentNode) -> bool:
        """True when a non-empty sibling follows ``node``."""
        sibling = node.next_sibling
        while sibling is not None:
            if not self.is_empty_text(sibling):
                return True
            sibling = sibling.next_sibling
        return False

    def next_text_starts_with_space(self, node: DocumentNode) -> bool:
        sibling = node.next_sibling
        while sibling is not None and isinstance(sibling, Comment):
            sibling = sibling.next_sibling
        if isinstance(sibling, Text):
            return self.text_of(sibling).startswith(" ")
        if isinstance(sibling, Element):
            return sibling.is_block or sibling.tag == "br"
        return False


__all__ = ["ConversionState"]
