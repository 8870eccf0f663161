#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/converter.py
"""HTML to Markdown conversion service.

``HTMLToMarkdown`` owns a rule table and a set of resolved options and turns
HTML strings, BeautifulSoup trees or markturn document nodes into Markdown.
``html_to_markdown`` is the one-shot function for callers who do not need to
keep a configured converter around.

Examples
--------
One-shot conversion:

    >>> from markturn import html_to_markdown
    >>> html_to_markdown("<h1>Title</h1><p>Hello <b>world</b></p>")
    '# Title\\n\\nHello **world**'

A configured converter with plugins:

    >>> from markturn import HTMLToMarkdown
    >>> converter = HTMLToMarkdown(code_block_style="fenced", bullet_list_marker="-").use("gfm").keep(["kbd"])
    >>> converter.convert("<p>Press <kbd>Ctrl</kbd></p>")
    'Press <kbd>Ctrl</kbd>'

"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import Any, Mapping, Optional, Union

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from bs4 import BeautifulSoup, Tag

from markturn.exceptions import ConversionError, MarkturnError, PluginError, ValidationError
from markturn.logging_utils import debug_timer
from markturn.nodes import Document, DocumentNode, Element, Text, from_soup, parse_html
from markturn.normalizer import escape_markdown
from markturn.options import ConversionOptions, resolve_options
from markturn.plugins import PluginMetadata, plugin_registry
from markturn.renderer import MarkdownRenderer
from markturn.rules.base import Replacement, RuleFilter
from markturn.rules.table import RuleTable

logger = logging.getLogger(__name__)

HTMLInput = Union[str, BeautifulSoup, Tag, DocumentNode]
PluginSpec = Union[str, PluginMetadata, Any]


class HTMLToMarkdown:
    """Convert HTML to Markdown with configurable rules.

    Parameters
    ----------
    options : ConversionOptions or Mapping, optional
        Base options. A mapping goes through ``resolve_options``, so it may use
        camelCase or command-line key spellings and numeric selectors.
    rules : RuleTable, optional
        Rule table to use; a fresh table with the CommonMark rules by default
    parser : str, default = "html.parser"
        BeautifulSoup tree builder used for string input
    **raw_options : Any
        Option overrides, resolved leniently on top of ``options``

    Notes
    -----
    ``use``, ``add_rule``, ``keep`` and ``remove`` modify the rule table. Do
    all registration before sharing a converter between threads; conversions
    themselves keep their state per call.

    """

    def __init__(
        self,
        options: Union[ConversionOptions, Mapping[str, Any], None] = None,
        rules: Optional[RuleTable] = None,
        parser: str = "html.parser",
        **raw_options: Any,
    ):
        self.options = resolve_options(options, **raw_options)
        self.rules = rules if rules is not None else RuleTable()
        self.parser = parser

    def use(self, plugin: Union[PluginSpec, Iterable[PluginSpec]]) -> Self:
        """Apply a plugin to this converter's rule table.

        Parameters
        ----------
        plugin : str, PluginMetadata, callable, or iterable of these
            A registered plugin name, plugin metadata, a callable taking the
            rule table, or a list of any of those

        Returns
        -------
        HTMLToMarkdown
            This converter, for chaining

        Raises
        ------
        PluginError
            If a name is not registered, the value is not a plugin, or the
            plugin raises

        """
        if isinstance(plugin, str):
            plugin_registry.get_plugin(plugin).apply(self.rules)
        elif isinstance(plugin, PluginMetadata):
            plugin.apply(self.rules)
        elif callable(plugin):
            name = getattr(plugin, "__name__", repr(plugin))
            PluginMetadata(name=name, description="", plugin=plugin).apply(self.rules)
        elif isinstance(plugin, Iterable):
            for item in plugin:
                self.use(item)
        else:
            raise PluginError(f"Cannot use {type(plugin).__name__} as a plugin")
        return self

    def add_rule(
        self,
        name: str,
        rule_filter: RuleFilter,
        replacement: Replacement,
        exclusive: bool = False,
        render_children: bool = True,
    ) -> Self:
        """Register a rule that takes precedence over the built-ins."""
        self.rules.add_rule(name, rule_filter, replacement, exclusive=exclusive, render_children=render_children)
        return self

    def keep(self, rule_filter: RuleFilter) -> Self:
        """Emit matching elements as HTML."""
        self.rules.keep(rule_filter)
        return self

    def remove(self, rule_filter: RuleFilter) -> Self:
        """Drop matching elements and their content."""
        self.rules.remove(rule_filter)
        return self

    def escape(self, text: str) -> str:
        """Escape Markdown syntax in ``text``."""
        return escape_markdown(text)

    def _to_node(self, html_input: HTMLInput) -> Union[Document, Element, Text]:
        if isinstance(html_input, str):
            return parse_html(html_input, parser=self.parser)
        if isinstance(html_input, (BeautifulSoup, Tag)):
            return from_soup(html_input)
        if isinstance(html_input, (Document, Element, Text)):
            return html_input
        raise ValidationError(
            f"{html_input!r} is not a string, a BeautifulSoup tree or a document node",
            parameter_name="html_input",
            parameter_value=html_input,
        )

    def convert(self, html_input: HTMLInput) -> str:
        """Convert HTML to Markdown.

        Parameters
        ----------
        html_input : str, BeautifulSoup, Tag or DocumentNode
            HTML source or an already-parsed tree

        Returns
        -------
        str
            Markdown text, with reference definitions appended when links are
            referenced

        Raises
        ------
        ValidationError
            If ``html_input`` has an unsupported type
        MalformedInputError
            If the tree is structurally invalid
        ConversionError
            If conversion fails for any other reason

        """
        stage = "parsing"
        try:
            with debug_timer(logger, "Parsing HTML"):
                node = self._to_node(html_input)

            stage = "rendering"
            with debug_timer(logger, "Rendering Markdown"):
                return MarkdownRenderer(self.rules, self.options).render(node)
        except MarkturnError:
            raise
        except Exception as e:
            raise ConversionError(
                f"HTML to Markdown conversion failed: {e!r}", conversion_stage=stage, original_error=e
            ) from e


def html_to_markdown(
    html_input: HTMLInput,
    options: Union[ConversionOptions, Mapping[str, Any], None] = None,
    plugins: Optional[Iterable[PluginSpec]] = None,
    **raw_options: Any,
) -> str:
    """Convert HTML to Markdown in one call.

    Parameters
    ----------
    html_input : str, BeautifulSoup, Tag or DocumentNode
        HTML source or an already-parsed tree
    options : ConversionOptions or Mapping, optional
        Base options
    plugins : iterable, optional
        Plugins to apply, by name or as callables
    **raw_options : Any
        Option overrides, resolved leniently

    Returns
    -------
    str
        The Markdown text

    Examples
    --------
        >>> html_to_markdown("<ul><li>a</li></ul>", bullet_list_marker="-")
        '- a'

    """
    converter = HTMLToMarkdown(options=options, **raw_options)
    if plugins is not None:
        converter.use(plugins)
    return converter.convert(html_input)


__all__ = ["HTMLToMarkdown", "HTMLInput", "html_to_markdown"]
