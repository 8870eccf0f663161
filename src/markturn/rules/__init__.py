#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Conversion rules and the table that orders them."""

from markturn.rules.base import FilterPredicate, Replacement, Rule, RuleFilter
from markturn.rules.commonmark import COMMONMARK_RULES
from markturn.rules.table import BLANK_RULE, DEFAULT_RULE, RuleTable, find_blank_elements, is_blank

__all__ = [
    "BLANK_RULE",
    "COMMONMARK_RULES",
    "DEFAULT_RULE",
    "FilterPredicate",
    "Replacement",
    "Rule",
    "RuleFilter",
    "RuleTable",
    "find_blank_elements",
    "is_blank",
]
