"""markturn - rule-based HTML to Markdown conversion.

markturn walks an HTML document tree and maps each element onto Markdown
through an ordered table of rules. The output style is configurable (atx or
setext headings, fenced or indented code, inline or referenced links, and
so on), and plugins can add, shadow, keep or remove rules.

Key Features
------------
- CommonMark output with configurable markers and delimiters
- Lenient option resolution from mappings and config files
  (``.markturn.toml``, ``.markturn.yaml``, ``.markturn.json``, ``pyproject.toml``)
- Reference-style links with deferred, de-duplicated definitions
- GitHub Flavored Markdown plugin: tables, strikethrough, task lists
- Plugin discovery via the ``markturn.plugins`` entry point group
- No recursion: arbitrarily deep documents convert

Examples
--------
Basic conversion:

    >>> from markturn import html_to_markdown
    >>> html_to_markdown("<h1>Title</h1><p>Hello <b>world</b></p>")
    '# Title\\n\\nHello **world**'

Options and plugins:

    >>> from markturn import HTMLToMarkdown
    >>> converter = HTMLToMarkdown(headingStyle="setext", fence="~", code_block_style="fenced")
    >>> converter.use("gfm").convert("<h2>Notes</h2><p><s>draft</s></p>")
    'Notes\\n-----\\n\\n~~draft~~'

Options from a config file:

    >>> from markturn import load_options, HTMLToMarkdown
    >>> converter = HTMLToMarkdown(load_options())

See Also
--------
markturn.rules : Rule definitions and the rule table
markturn.plugins : Plugin registry and the GFM plugin

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.

import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "markturn requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "1.0.0"

from markturn.config import find_config_in_parents, load_config_file, load_options
from markturn.converter import HTMLToMarkdown, html_to_markdown
from markturn.exceptions import (
    ConfigError,
    ConversionError,
    MalformedInputError,
    MarkturnError,
    PluginError,
    RuleConflictError,
    ValidationError,
)
from markturn.nodes import Comment, Document, DocumentNode, Element, Text, from_soup, parse_html
from markturn.options import ConversionOptions, resolve_options
from markturn.plugins import PluginMetadata, plugin_registry
from markturn.references import ReferenceLink, ReferenceLinkCollector
from markturn.renderer import MarkdownRenderer
from markturn.rules import Rule, RuleTable
from markturn.state import ConversionState

__all__ = [
    "__version__",
    # Conversion
    "HTMLToMarkdown",
    "html_to_markdown",
    "MarkdownRenderer",
    "ConversionState",
    # Options
    "ConversionOptions",
    "resolve_options",
    "find_config_in_parents",
    "load_config_file",
    "load_options",
    # Document tree
    "Comment",
    "Document",
    "DocumentNode",
    "Element",
    "Text",
    "from_soup",
    "parse_html",
    # Rules and plugins
    "Rule",
    "RuleTable",
    "PluginMetadata",
    "plugin_registry",
    "ReferenceLink",
    "ReferenceLinkCollector",
    # Exceptions
    "MarkturnError",
    "ValidationError",
    "MalformedInputError",
    "ConversionError",
    "RuleConflictError",
    "PluginError",
    "ConfigError",
]
