#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/rules/base.py
"""The Rule type: a filter over elements paired with a replacement function.

A filter is one of:

- a tag name (``"p"``)
- a collection of tag names (``("b", "strong")``)
- a predicate ``(element, options) -> bool``

A replacement receives the already-rendered Markdown of the element's
children and returns the Markdown for the element itself::

    def replacement(content, node, options, state) -> str

Examples
--------
    >>> from markturn.rules import Rule
    >>> mark = Rule("mark", "mark", lambda content, node, options, state: f"=={content}==")
    >>> mark.tags
    frozenset({'mark'})

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

from markturn.exceptions import ValidationError
from markturn.nodes import Element
from markturn.options import ConversionOptions

if TYPE_CHECKING:
    from markturn.state import ConversionState

FilterPredicate = Callable[[Element, ConversionOptions], bool]
RuleFilter = Union[str, Iterable[str], FilterPredicate]
Replacement = Callable[[str, Element, ConversionOptions, "ConversionState"], str]


@dataclass(frozen=True, eq=False)
class Rule:
    """A conversion rule.

    Parameters
    ----------
    name : str
        Identifier used in logs and conflict reports
    filter : str, iterable of str, or callable
        Which elements the rule applies to
    replacement : callable
        ``(content, node, options, state) -> str``
    exclusive : bool, default = False
        In a strict rule table, an exclusive rule may not share tag names
        with another exclusive plugin rule
    render_children : bool, default = True
        When False the walker skips the element's subtree and passes an
        empty ``content``; for rules that read the node directly

    """

    name: str
    filter: Any
    replacement: Replacement
    exclusive: bool = False
    render_children: bool = True
    _tags: Optional[frozenset[str]] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValidationError("Rule name cannot be empty", parameter_name="name", parameter_value=self.name)
        if not callable(self.replacement):
            raise ValidationError(
                f"Rule '{self.name}' replacement must be callable",
                parameter_name="replacement",
                parameter_value=self.replacement,
            )
        object.__setattr__(self, "_tags", _normalize_filter(self.name, self.filter))

    @property
    def tags(self) -> Optional[frozenset[str]]:
        """Tag names matched, or None for predicate filters."""
        return self._tags

    def matches(self, node: Element, options: ConversionOptions) -> bool:
        if self._tags is not None:
            return node.tag in self._tags
        return bool(self.filter(node, options))


def _normalize_filter(name: str, rule_filter: Any) -> Optional[frozenset[str]]:
    if isinstance(rule_filter, str):
        return frozenset({rule_filter.lower()})
    if callable(rule_filter):
        return None
    if isinstance(rule_filter, Iterable):
        tags = list(rule_filter)
        if tags and all(isinstance(tag, str) for tag in tags):
            return frozenset(tag.lower() for tag in tags)
    raise ValidationError(
        f"Rule '{name}' filter must be a tag name, a collection of tag names, or a predicate",
        parameter_name="filter",
        parameter_value=rule_filter,
    )


__all__ = ["Rule", "RuleFilter", "Replacement", "FilterPredicate"]
