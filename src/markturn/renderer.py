#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/renderer.py
"""Markdown renderer for markturn document trees.

The renderer walks the tree depth-first with an explicit stack, so deeply
nested input never hits the interpreter's recursion limit. Each element is
classified by the rule table when it is entered; its children are rendered
and joined, then the rule's replacement turns the joined content into the
element's Markdown.

Joining collapses the newlines where two outputs meet: trailing newlines of
the left side and leading newlines of the right side are replaced by the
longer of the two runs, capped at one blank line. That is what keeps the
``"\\n\\n"`` padding of block rules from piling up.

Examples
--------
    >>> from markturn.nodes import parse_html
    >>> from markturn.options import ConversionOptions
    >>> from markturn.rules import RuleTable
    >>> renderer = MarkdownRenderer(RuleTable(), ConversionOptions())
    >>> renderer.render(parse_html("<p>Hello <em>there</em></p>"))
    'Hello _there_'

"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from markturn.exceptions import MalformedInputError
from markturn.nodes import Document, DocumentNode, Element, Text, validate_tree
from markturn.normalizer import collapse_whitespace, escape_markdown, escape_preformatted, flanking_whitespace
from markturn.options import ConversionOptions
from markturn.rules.base import Rule
from markturn.rules.commonmark import list_item_prefix, list_item_prefixes
from markturn.rules.table import RuleTable, find_blank_elements
from markturn.state import ConversionState

logger = logging.getLogger(__name__)


def join(output: str, replacement: str) -> str:
    """Concatenate two rendered fragments, merging the newlines between them.

    Examples
    --------
        >>> join("# Title\\n\\n", "\\n\\nHello")
        '# Title\\n\\nHello'
        >>> join("a\\n", "b")
        'a\\nb'

    """
    left = output.rstrip("\n")
    right = replacement.lstrip("\n")
    newlines = max(len(output) - len(left), len(replacement) - len(right))
    return left + "\n\n"[:newlines] + right


@dataclass
class _Frame:
    """One open element on the render stack."""

    node: Optional[Element]
    rule: Optional[Rule]
    children: list[DocumentNode]
    output: str = ""
    index: int = 0


def _line_prefix(stack: list[_Frame]) -> str:
    """Return what is already rendered on the current line, across open inline elements."""
    parts: list[str] = []
    for frame in reversed(stack):
        _, newline, tail = frame.output.rpartition("\n")
        parts.append(tail)
        if newline or frame.node is None or frame.node.is_block:
            break
    return "".join(reversed(parts))


class MarkdownRenderer:
    """Render document trees to Markdown with a rule table.

    Parameters
    ----------
    rules : RuleTable
        Rules consulted for every element
    options : ConversionOptions
        Conversion options

    """

    def __init__(self, rules: RuleTable, options: ConversionOptions):
        self.rules = rules
        self.options = options

    def render(self, node: Union[Document, Element, Text]) -> str:
        """Render ``node`` to a Markdown string.

        A ``Document`` renders its ``<body>`` when it has one and all of its
        children otherwise. An ``Element`` or ``Text`` renders itself.

        Raises
        ------
        MalformedInputError
            If the tree contains an element without a tag name, a text node
            whose data is not a string, or a child that is not a node

        """
        if isinstance(node, Document):
            body = node.body
            root: DocumentNode = body if body is not None else node
            children = list(root.children) if isinstance(root, (Document, Element)) else []
        elif isinstance(node, (Element, Text)):
            root = node
            children = [node]
        else:
            raise MalformedInputError(f"Cannot render object of type {type(node).__name__}", node=node)
        validate_tree(node)

        state = ConversionState(options=self.options)
        state.normalized_text = collapse_whitespace(root, self.options)
        state.blank_elements = find_blank_elements(root)
        logger.debug(f"Rendering {type(node).__name__} with {len(self.rules)} rules")

        output = self._walk(children, state)
        return self._post_process(output, state)

    def _walk(self, children: list[DocumentNode], state: ConversionState) -> str:
        stack: list[_Frame] = [_Frame(node=None, rule=None, children=children)]

        while True:
            frame = stack[-1]
            if frame.index < len(frame.children):
                child = frame.children[frame.index]
                frame.index += 1

                if isinstance(child, Text):
                    frame.output = join(frame.output, self._render_text(child, state, stack))
                elif isinstance(child, Element):
                    rule = self.rules.find_rule(child, self.options, blank=id(child) in state.blank_elements)
                    self._enter(child, state)
                    children = list(child.children) if rule.render_children else []
                    stack.append(_Frame(node=child, rule=rule, children=children))
                continue

            stack.pop()
            if frame.node is None or frame.rule is None:
                return frame.output

            replacement = self._replace(frame.node, frame.rule, frame.output, stack[-1].output, state)
            self._exit(frame.node, state)
            stack[-1].output = join(stack[-1].output, replacement)

    def _render_text(self, node: Text, state: ConversionState, stack: list[_Frame]) -> str:
        text = state.text_of(node)
        if state.in_code:
            return text
        line_prefix = _line_prefix(stack) if text.startswith(".") else ""
        if state.in_preformatted:
            return escape_preformatted(text, line_prefix)
        return escape_markdown(text, line_prefix)

    def _replace(
        self,
        node: Element,
        rule: Rule,
        content: str,
        preceding: str,
        state: ConversionState,
    ) -> str:
        leading = trailing = ""
        if not node.is_block and not (self.options.preformatted_code and node.is_code):
            leading, content, trailing = flanking_whitespace(content)
            if leading and preceding.endswith((" ", "\t")):
                leading = ""
            if trailing and state.next_text_starts_with_space(node):
                trailing = ""
        return leading + rule.replacement(content, node, self.options, state) + trailing

    def _enter(self, node: Element, state: ConversionState) -> None:
        tag = node.tag
        if tag in ("ul", "ol"):
            state.list_depth += 1
            state.list_item_prefixes.update(list_item_prefixes(node, self.options))
        elif tag == "li":
            prefix = state.list_item_prefixes.get(id(node))
            if prefix is None:
                prefix = state.list_item_prefixes[id(node)] = list_item_prefix(node, self.options)
            state.indent_stack.append(" " * len(prefix))
        elif tag == "blockquote":
            state.indent_stack.append("> ")
        elif tag == "code":
            state.code_depth += 1
        elif tag == "pre" and self.options.preformatted_code:
            state.preformatted_depth += 1

    def _exit(self, node: Element, state: ConversionState) -> None:
        tag = node.tag
        if tag in ("ul", "ol"):
            state.list_depth -= 1
        elif tag in ("li", "blockquote"):
            state.indent_stack.pop()
        elif tag == "code":
            state.code_depth -= 1
        elif tag == "pre" and self.options.preformatted_code:
            state.preformatted_depth -= 1

    def _post_process(self, output: str, state: ConversionState) -> str:
        output = re.sub(r"^[\t\r\n]+", "", output).rstrip()
        if state.references:
            definitions = state.references.flush()
            output = f"{output}\n\n{definitions}" if output else definitions
        return output


__all__ = ["MarkdownRenderer", "join"]
