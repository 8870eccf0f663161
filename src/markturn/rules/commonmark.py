#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/rules/commonmark.py
"""Built-in rules producing CommonMark output.

Block rules surround their output with blank lines (``"\\n\\n"``); the
renderer merges adjacent newline runs, so consecutive blocks end up separated
by exactly one blank line. List items end with a single newline instead,
which keeps items of the same list on consecutive lines.
"""

from __future__ import annotations

import re
import unicodedata
from typing import TYPE_CHECKING, Optional

from markturn.constants import (
    ALTERNATE_EM_DELIMITER,
    ALTERNATE_STRONG_DELIMITER,
    CODE_BLOCK_INDENT,
    CODE_LANGUAGE_PATTERNS,
    HEADING_TAGS,
    MIN_CODE_FENCE_LENGTH,
)
from markturn.nodes import Element, Text
from markturn.options import ConversionOptions
from markturn.rules.base import Rule

if TYPE_CHECKING:
    from markturn.state import ConversionState


def _significant_children(node: Element) -> list:
    children = []
    for child in node.children:
        if isinstance(child, Text):
            if child.data.strip():
                children.append(child)
        elif isinstance(child, Element):
            children.append(child)
    return children


def indent_lines(content: str, indent: str) -> str:
    """Indent every non-empty line after the first."""
    lines = content.split("\n")
    return "\n".join([lines[0]] + [f"{indent}{line}" if line else line for line in lines[1:]])


def clean_attribute(value: Optional[str]) -> str:
    return re.sub(r"(\n+\s*)+", "\n", value) if value else ""


# -----------------------------------------------------------------------------
# Blocks
# -----------------------------------------------------------------------------


def paragraph(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    return f"\n\n{content}\n\n"


def line_break(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    return f"{options.br}\n"


def display_width(text: str) -> int:
    """Count terminal columns: East Asian wide and fullwidth characters take two."""
    return sum(2 if unicodedata.east_asian_width(char) in ("W", "F") else 1 for char in text)


def heading(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    level = int(node.tag[1])
    text = " ".join(content.split())

    if options.heading_style == "setext" and level < 3:
        underline = ("=" if level == 1 else "-") * display_width(text)
        return f"\n\n{text}\n{underline}\n\n"
    return f"\n\n{'#' * level} {text}\n\n"


def blockquote(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    content = content.strip("\n")
    quoted = "\n".join(f"> {line}" if line.strip() else ">" for line in content.split("\n"))
    return f"\n\n{quoted}\n\n"


def list_block(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    parent = node.parent
    if isinstance(parent, Element) and parent.tag == "li":
        elements = [child for child in parent.children if isinstance(child, Element)]
        if elements and elements[-1] is node:
            return f"\n{content}"
    return f"\n\n{content}\n\n"


def _ordered_start(node: Element) -> int:
    start_attr = node.get("start")
    try:
        return int(start_attr) if start_attr is not None else 1
    except ValueError:
        return 1


def list_item_prefixes(node: Element, options: ConversionOptions) -> dict[int, str]:
    """Return the marker of every ``<li>`` child of ``node``, keyed by ``id()``."""
    items = [child for child in node.children if isinstance(child, Element) and child.tag == "li"]
    if node.tag == "ol":
        start = _ordered_start(node)
        return {id(item): f"{start + index}. " for index, item in enumerate(items)}
    return {id(item): f"{options.bullet_list_marker} " for item in items}


def list_item_prefix(node: Element, options: ConversionOptions) -> str:
    """Return the marker for ``node`` including its trailing space."""
    parent = node.parent
    if isinstance(parent, Element) and parent.tag == "ol":
        return list_item_prefixes(parent, options).get(id(node), f"{_ordered_start(parent)}. ")
    return f"{options.bullet_list_marker} "


def list_item(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    prefix = state.list_item_prefixes.get(id(node)) or list_item_prefix(node, options)
    content = re.sub(r"^\n+", "", content)
    content = re.sub(r"\n+$", "\n", content)
    # Nested blocks line up under the item text: 2 spaces for "* ", 3 for "1. "
    content = indent_lines(content, " " * len(prefix))
    needs_newline = state.has_following_content(node) and not content.endswith("\n")
    return prefix + content + ("\n" if needs_newline else "")


def _is_code_block(node: Element, options: ConversionOptions) -> bool:
    if node.tag != "pre":
        return False
    children = _significant_children(node)
    return len(children) == 1 and isinstance(children[0], Element) and children[0].tag == "code"


def _code_element(node: Element) -> Element:
    code = node.find("code")
    assert code is not None
    return code


def _code_text(node: Element) -> str:
    return re.sub(r"\n$", "", _code_element(node).text_content)


def code_language(node: Element) -> str:
    """Find a language hint on a ``<pre>`` or its ``<code>`` child.

    Checks ``language-xxx``, ``lang-xxx`` and ``brush: xxx`` classes and the
    ``data-lang`` attribute.
    """
    for element in (_code_element(node), node):
        if element.get("data-lang"):
            return str(element.get("data-lang"))
        class_attr = str(element.get("class", ""))
        for pattern in CODE_LANGUAGE_PATTERNS:
            if match := re.search(pattern, class_attr):
                return match.group(1)
    return ""


def indented_code_block(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    code = _code_text(node)
    indented = "\n".join(f"{CODE_BLOCK_INDENT}{line}" for line in code.split("\n"))
    return f"\n\n{indented}\n\n"


def fence_for(code: str, fence_char: str) -> str:
    """Return a fence longer than any run of ``fence_char`` in ``code``.

    A closing fence may be indented up to three spaces, so runs anywhere in
    the code count, not only those at column zero.
    """
    runs = re.findall(f"{re.escape(fence_char)}{{3,}}", code)
    longest = max((len(run) for run in runs), default=0)
    size = MIN_CODE_FENCE_LENGTH if longest < MIN_CODE_FENCE_LENGTH else longest + 1
    return fence_char * size


def fenced_code_block(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    code = _code_text(node)
    fence = fence_for(code, options.fence)
    language = code_language(node)
    return f"\n\n{fence}{language}\n{code}\n{fence}\n\n"


def preformatted(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    body = content.strip("\n")
    return f"\n\n{body}\n\n"


def horizontal_rule(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    return f"\n\n{' '.join([options.hr] * 3)}\n\n"


# -----------------------------------------------------------------------------
# Inline
# -----------------------------------------------------------------------------


def _contains_unescaped(content: str, delimiter: str) -> bool:
    index = content.find(delimiter)
    while index != -1:
        backslashes = 0
        cursor = index - 1
        while cursor >= 0 and content[cursor] == "\\":
            backslashes += 1
            cursor -= 1
        if backslashes % 2 == 0:
            return True
        index = content.find(delimiter, index + 1)
    return False


def choose_delimiter(content: str, node: Element, preferred: str, alternates: dict[str, str]) -> str:
    """Pick a delimiter that does not already occur in the wrapped text.

    The preferred delimiter collides when the element's source text contains
    it, or when the rendered content contains it unescaped (nested markup).
    The alternate is used unless it collides too.
    """

    def collides(delimiter: str) -> bool:
        return delimiter in node.text_content or _contains_unescaped(content, delimiter)

    if not collides(preferred):
        return preferred
    alternate = alternates[preferred]
    return alternate if not collides(alternate) else preferred


def emphasis(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    if not content.strip():
        return ""
    delimiter = choose_delimiter(content, node, options.em_delimiter, ALTERNATE_EM_DELIMITER)
    return f"{delimiter}{content}{delimiter}"


def strong(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    if not content.strip():
        return ""
    delimiter = choose_delimiter(content, node, options.strong_delimiter, ALTERNATE_STRONG_DELIMITER)
    return f"{delimiter}{content}{delimiter}"


def _is_inline_code(node: Element, options: ConversionOptions) -> bool:
    if node.tag != "code":
        return False
    parent = node.parent
    return not (isinstance(parent, Element) and _is_code_block(parent, options))


def inline_code(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    if not content:
        return ""
    content = re.sub(r"\r?\n|\r", " ", content)
    needs_padding = bool(re.search(r"^`|`$|^ .*?[^ ].* $", content))
    runs = set(re.findall(r"`+", content))
    delimiter = "`"
    while delimiter in runs:
        delimiter += "`"
    padding = " " if needs_padding else ""
    return f"{delimiter}{padding}{content}{padding}{delimiter}"


def escape_link_destination(href: str) -> str:
    href = href.replace("(", "\\(").replace(")", "\\)")
    return f"<{href}>" if " " in href else href


def _link_title(node: Element) -> Optional[str]:
    title = clean_attribute(node.get("title"))
    return title or None


def _title_suffix(title: Optional[str]) -> str:
    if not title:
        return ""
    escaped = title.replace('"', '\\"')
    return f' "{escaped}"'


def _is_inline_link(node: Element, options: ConversionOptions) -> bool:
    return options.link_style == "inlined" and node.tag == "a" and bool(node.get("href"))


def inline_link(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    href = escape_link_destination(str(node.get("href")))
    return f"[{content}]({href}{_title_suffix(_link_title(node))})"


def _is_reference_link(node: Element, options: ConversionOptions) -> bool:
    return options.link_style == "referenced" and node.tag == "a" and bool(node.get("href"))


def reference_label(text: str, url: str, title: Optional[str], options: ConversionOptions, state: ConversionState) -> str:
    """Register a definition and return the bracket suffix written after ``[text]``."""
    style = options.link_reference_style
    if style == "full" or not text.strip():
        return f"[{state.references.add_numbered(url, title)}]"

    label = state.references.add_reference(text, url, title)
    if label != text:
        return f"[{label}]"
    return "[]" if style == "collapsed" else ""


def reference_link(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    suffix = reference_label(content, str(node.get("href")), _link_title(node), options, state)
    return f"[{content}]{suffix}"


def image(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    src = str(node.get("src") or "")
    if not src:
        return ""
    alt = clean_attribute(node.get("alt")).replace("[", "\\[").replace("]", "\\]")
    title = _link_title(node)
    if options.link_style == "referenced":
        return f"![{alt}]{reference_label(alt, src, title, options, state)}"
    return f"![{alt}]({escape_link_destination(src)}{_title_suffix(title)})"


def _is_preformatted_block(node: Element, options: ConversionOptions) -> bool:
    return node.tag == "pre" and not _is_code_block(node, options)


def _is_indented_code_block(node: Element, options: ConversionOptions) -> bool:
    return options.code_block_style == "indented" and _is_code_block(node, options)


def _is_fenced_code_block(node: Element, options: ConversionOptions) -> bool:
    return options.code_block_style == "fenced" and _is_code_block(node, options)


COMMONMARK_RULES: tuple[Rule, ...] = (
    Rule("paragraph", "p", paragraph),
    Rule("line-break", "br", line_break),
    Rule("heading", HEADING_TAGS, heading),
    Rule("blockquote", "blockquote", blockquote),
    Rule("list", ("ul", "ol"), list_block),
    Rule("list-item", "li", list_item),
    Rule("indented-code-block", _is_indented_code_block, indented_code_block, render_children=False),
    Rule("fenced-code-block", _is_fenced_code_block, fenced_code_block, render_children=False),
    Rule("preformatted", _is_preformatted_block, preformatted),
    Rule("horizontal-rule", "hr", horizontal_rule),
    Rule("inline-link", _is_inline_link, inline_link),
    Rule("reference-link", _is_reference_link, reference_link),
    Rule("emphasis", ("em", "i"), emphasis),
    Rule("strong", ("strong", "b"), strong),
    Rule("code", _is_inline_code, inline_code),
    Rule("image", "img", image),
)

__all__ = [
    "COMMONMARK_RULES",
    "choose_delimiter",
    "code_language",
    "display_width",
    "escape_link_destination",
    "fence_for",
    "indent_lines",
    "list_item_prefix",
    "list_item_prefixes",
    "reference_label",
]
