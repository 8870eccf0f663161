#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/rules/table.py
"""Ordered rule collection and element classification.

Lookup order for an element:

1. the blank rule, for elements with no meaningful content
2. plugin rules, in priority order
3. built-in rules
4. ``keep`` rules (emit the element's HTML)
5. ``remove`` rules (drop the element)
6. the fallback rule (keep the content, drop the tag)

The first match wins. The relative order of plugin rules depends on the
table's priority policy:

- ``"last_registered_wins"`` (default): each new rule goes to the front, so a
  later plugin shadows earlier plugins and built-ins
- ``"first_registered_wins"``: each new rule goes to the back of the plugin
  section, so earlier plugins keep precedence (plugins still beat built-ins)

Examples
--------
    >>> from markturn.rules import RuleTable
    >>> table = RuleTable()
    >>> rule = table.add_rule("mark", "mark", lambda content, node, options, state: f"=={content}==")
    >>> table.remove("aside")

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Iterator, Optional

from markturn.constants import (
    DEFAULT_RULE_PRIORITY,
    MEANINGFUL_WHEN_BLANK_ELEMENTS,
    REMOVED_ELEMENTS,
    RULE_PRIORITY_POLICIES,
)
from markturn.exceptions import RuleConflictError, ValidationError
from markturn.nodes import DocumentNode, Element, Text, _ParentMixin
from markturn.options import ConversionOptions
from markturn.rules.base import Replacement, Rule, RuleFilter
from markturn.rules.commonmark import COMMONMARK_RULES

if TYPE_CHECKING:
    from markturn.state import ConversionState

logger = logging.getLogger(__name__)


def is_blank(node: Element) -> bool:
    """True for elements that render to nothing.

    An element is blank when it is not void, is not an element that matters
    without text (links, table cells, media), contains only whitespace, and
    has no void or meaningful-when-blank descendants.
    """
    if node.is_void or node.tag in MEANINGFUL_WHEN_BLANK_ELEMENTS:
        return False
    if node.text_content.strip():
        return False
    for descendant in node.iter_descendants():
        if isinstance(descendant, Element) and (
            descendant.is_void or descendant.tag in MEANINGFUL_WHEN_BLANK_ELEMENTS
        ):
            return False
    return True


def find_blank_elements(root: DocumentNode) -> set[int]:
    """Return the ``id()`` of every blank element under ``root``, ``root`` included.

    Agrees with ``is_blank`` for each element but settles the whole tree in
    one post-order pass instead of walking every subtree again per element.
    """
    blank: set[int] = set()
    # id -> subtree holds non-whitespace text or an element that renders without text
    solid: dict[int, bool] = {}
    stack: list[tuple[DocumentNode, bool]] = [(root, True)]
    while stack:
        node, entering = stack.pop()
        if isinstance(node, Text):
            solid[id(node)] = bool(node.data.strip())
            continue
        if not isinstance(node, _ParentMixin):
            continue
        if entering:
            stack.append((node, False))
            stack.extend((child, True) for child in node.children)
            continue

        has_content = any([solid.pop(id(child), False) for child in node.children])
        if isinstance(node, Element):
            if node.is_void or node.tag in MEANINGFUL_WHEN_BLANK_ELEMENTS:
                has_content = True
            elif not has_content:
                blank.add(id(node))
        solid[id(node)] = has_content
    return blank


def blank_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    return "\n\n" if node.is_block else ""


def keep_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    return f"\n\n{node.outer_html()}\n\n" if node.is_block else node.outer_html()


def remove_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    return ""


def default_replacement(content: str, node: Element, options: ConversionOptions, state: ConversionState) -> str:
    return f"\n\n{content}\n\n" if node.is_block else content


# Children of a blank element are still walked so an inline element made of
# a single space keeps that space as flanking whitespace
BLANK_RULE = Rule("blank", lambda node, options: True, blank_replacement)
DEFAULT_RULE = Rule("default", lambda node, options: True, default_replacement)


class RuleTable:
    """Priority-ordered rules for converting elements.

    Parameters
    ----------
    rules : iterable of Rule, optional
        Built-in rules, defaults to the CommonMark set
    priority : {"last_registered_wins", "first_registered_wins"}, default "last_registered_wins"
        Ordering policy among registered (plugin) rules
    strict : bool, default False
        Raise ``RuleConflictError`` when two exclusive plugin rules claim the
        same tag names

    Notes
    -----
    Registration mutates shared state. Finish registering rules before
    running conversions from multiple threads.

    """

    def __init__(
        self,
        rules: Optional[Iterable[Rule]] = None,
        priority: str = DEFAULT_RULE_PRIORITY,
        strict: bool = False,
    ):
        if priority not in RULE_PRIORITY_POLICIES:
            raise ValidationError(
                f"Unknown rule priority policy {priority!r}. Expected one of {list(RULE_PRIORITY_POLICIES)!r}",
                parameter_name="priority",
                parameter_value=priority,
            )
        self.priority = priority
        self.strict = strict
        self._plugin_rules: list[Rule] = []
        self._builtin_rules: list[Rule] = list(COMMONMARK_RULES if rules is None else rules)
        self._keep_rules: list[Rule] = []
        self._remove_rules: list[Rule] = []
        for tag in REMOVED_ELEMENTS:
            self._remove_rules.append(Rule(f"remove-{tag}", tag, remove_replacement, render_children=False))

    def __iter__(self) -> Iterator[Rule]:
        yield from self._plugin_rules
        yield from self._builtin_rules

    def __len__(self) -> int:
        return len(self._plugin_rules) + len(self._builtin_rules)

    @property
    def plugin_rules(self) -> list[Rule]:
        return list(self._plugin_rules)

    @property
    def builtin_rules(self) -> list[Rule]:
        return list(self._builtin_rules)

    def _check_conflicts(self, rule: Rule) -> None:
        if not rule.exclusive:
            return
        for existing in self._plugin_rules:
            if not existing.exclusive:
                continue
            if rule.tags is None or existing.tags is None:
                overlap = None
            else:
                overlap = rule.tags & existing.tags
                if not overlap:
                    continue
            if self.strict:
                raise RuleConflictError(rule.name, existing.name, tags=overlap)
            logger.debug(f"Exclusive rule '{rule.name}' overlaps '{existing.name}', priority policy decides")

    def register_rule(self, rule: Rule) -> Rule:
        """Register a plugin rule.

        Parameters
        ----------
        rule : Rule
            Rule to add

        Returns
        -------
        Rule
            The registered rule

        Raises
        ------
        RuleConflictError
            In strict mode, when an exclusive rule overlaps another one

        """
        if not isinstance(rule, Rule):
            raise ValidationError(
                f"Expected a Rule, got {type(rule).__name__}", parameter_name="rule", parameter_value=rule
            )
        self._check_conflicts(rule)
        if self.priority == "last_registered_wins":
            self._plugin_rules.insert(0, rule)
        else:
            self._plugin_rules.append(rule)
        logger.debug(f"Registered rule: {rule.name}")
        return rule

    def add_rule(
        self,
        name: str,
        rule_filter: RuleFilter,
        replacement: Replacement,
        exclusive: bool = False,
        render_children: bool = True,
    ) -> Rule:
        """Build a ``Rule`` from its parts and register it."""
        return self.register_rule(
            Rule(name, rule_filter, replacement, exclusive=exclusive, render_children=render_children)
        )

    def keep(self, rule_filter: RuleFilter) -> None:
        """Emit matching elements as HTML instead of converting them."""
        self._keep_rules.insert(0, Rule("keep", rule_filter, keep_replacement, render_children=False))

    def remove(self, rule_filter: RuleFilter) -> None:
        """Drop matching elements together with their content."""
        self._remove_rules.insert(0, Rule("remove", rule_filter, remove_replacement, render_children=False))

    def find_rule(self, node: Element, options: ConversionOptions, blank: Optional[bool] = None) -> Rule:
        """Return the rule that converts ``node``.

        Never fails: elements nothing claims get the fallback rule. ``blank``
        lets the renderer pass blankness it already computed for the tree.
        """
        if is_blank(node) if blank is None else blank:
            return BLANK_RULE
        for group in (self._plugin_rules, self._builtin_rules, self._keep_rules, self._remove_rules):
            for rule in group:
                if rule.matches(node, options):
                    return rule
        return DEFAULT_RULE


__all__ = [
    "BLANK_RULE",
    "DEFAULT_RULE",
    "RuleTable",
    "blank_replacement",
    "default_replacement",
    "find_blank_elements",
    "is_blank",
    "keep_replacement",
    "remove_replacement",
]
