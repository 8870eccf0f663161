#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the markturn library.

This module centralizes the style-choice tables, element classifications and
escape tables used across markturn. Everything here is read-only data.

Constants are organized by category:
1. Type Definitions - Literal types for every configurable dimension
2. Option Choice Tables - Ordered choices (first choice is the default)
3. Option Key Aliases - Alternate spellings accepted by the resolver
4. HTML Element Classification - Block, void and blank-meaningful elements
5. Markdown Escaping - Characters and patterns that need a backslash
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

HeadingStyle = Literal["atx", "setext"]
HorizontalRuleMarker = Literal["*", "-", "_"]
BulletListMarker = Literal["*", "-", "+"]
CodeBlockStyle = Literal["indented", "fenced"]
FenceChar = Literal["`", "~"]
EmDelimiter = Literal["_", "*"]
StrongDelimiter = Literal["**", "__"]
LinkStyle = Literal["inlined", "referenced"]
LinkReferenceStyle = Literal["full", "collapsed", "shortcut"]
LineBreakMarker = Literal["  ", "\\"]
RulePriorityPolicy = Literal["last_registered_wins", "first_registered_wins"]

# =============================================================================
# Option Choice Tables
# =============================================================================

# Order matters: index + 1 is the numeric selector, index 0 is the default.
OPTION_CHOICES: dict[str, tuple[object, ...]] = {
    "heading_style": ("atx", "setext"),
    "hr": ("*", "-", "_"),
    "bullet_list_marker": ("*", "-", "+"),
    "code_block_style": ("indented", "fenced"),
    "fence": ("`", "~"),
    "em_delimiter": ("_", "*"),
    "strong_delimiter": ("**", "__"),
    "link_style": ("inlined", "referenced"),
    "link_reference_style": ("full", "collapsed", "shortcut"),
    "preformatted_code": (False, True),
    "br": ("  ", "\\"),
}

DEFAULT_HEADING_STYLE: HeadingStyle = "atx"
DEFAULT_HR: HorizontalRuleMarker = "*"
DEFAULT_BULLET_LIST_MARKER: BulletListMarker = "*"
DEFAULT_CODE_BLOCK_STYLE: CodeBlockStyle = "indented"
DEFAULT_FENCE: FenceChar = "`"
DEFAULT_EM_DELIMITER: EmDelimiter = "_"
DEFAULT_STRONG_DELIMITER: StrongDelimiter = "**"
DEFAULT_LINK_STYLE: LinkStyle = "inlined"
DEFAULT_LINK_REFERENCE_STYLE: LinkReferenceStyle = "full"
DEFAULT_PREFORMATTED_CODE = False
DEFAULT_BR: LineBreakMarker = "  "

DEFAULT_RULE_PRIORITY: RulePriorityPolicy = "last_registered_wins"
RULE_PRIORITY_POLICIES: tuple[str, ...] = ("last_registered_wins", "first_registered_wins")

# Alternate delimiter used when content already contains the configured one
ALTERNATE_EM_DELIMITER = {"_": "*", "*": "_"}
ALTERNATE_STRONG_DELIMITER = {"**": "__", "__": "**"}

TRUTHY_STRINGS = frozenset({"true", "yes", "on"})
FALSY_STRINGS = frozenset({"false", "no", "off"})

# =============================================================================
# Option Key Aliases
# =============================================================================

# camelCase names and the long/short command-line names all resolve to the
# snake_case field name.
OPTION_KEY_ALIASES: dict[str, str] = {
    "headingStyle": "heading_style",
    "head": "heading_style",
    "t": "heading_style",
    "r": "hr",
    "bulletListMarker": "bullet_list_marker",
    "bullet": "bullet_list_marker",
    "b": "bullet_list_marker",
    "codeBlockStyle": "code_block_style",
    "code": "code_block_style",
    "c": "code_block_style",
    "f": "fence",
    "emDelimiter": "em_delimiter",
    "em": "em_delimiter",
    "e": "em_delimiter",
    "strongDelimiter": "strong_delimiter",
    "strong": "strong_delimiter",
    "s": "strong_delimiter",
    "linkStyle": "link_style",
    "link": "link_style",
    "l": "link_style",
    "linkReferenceStyle": "link_reference_style",
    "linkref": "link_reference_style",
    "u": "link_reference_style",
    "preformattedCode": "preformatted_code",
    "pre": "preformatted_code",
    "p": "preformatted_code",
}

# =============================================================================
# HTML Element Classification
# =============================================================================

BLOCK_ELEMENTS = frozenset(
    {
        "address",
        "article",
        "aside",
        "audio",
        "blockquote",
        "body",
        "canvas",
        "center",
        "dd",
        "dir",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "frameset",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hgroup",
        "hr",
        "html",
        "isindex",
        "li",
        "main",
        "menu",
        "nav",
        "noframes",
        "noscript",
        "ol",
        "output",
        "p",
        "pre",
        "section",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "tr",
        "ul",
    }
)

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "command",
        "embed",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Elements that still mean something with no text inside
MEANINGFUL_WHEN_BLANK_ELEMENTS = frozenset(
    {"a", "table", "thead", "tbody", "tfoot", "th", "td", "iframe", "script", "audio", "video"}
)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

REMOVED_ELEMENTS = ("script", "style", "template", "noscript")

# =============================================================================
# Markdown Escaping
# =============================================================================

# Escaped wherever they appear in text
MARKDOWN_INLINE_SPECIAL_CHARS = "\\*_`[]()~"

# Every character with Markdown meaning, for preformatted passthrough
MARKDOWN_SPECIAL_CHARS = "\\*_`[]()~#+->=!|"

MIN_CODE_FENCE_LENGTH = 3
CODE_BLOCK_INDENT = "    "

CODE_LANGUAGE_PATTERNS = (r"language-(\S+)", r"lang-(\S+)", r"brush:\s*(\w+)")
