#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/plugins/metadata.py
"""Metadata describing a rule plugin for registration and discovery."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

from markturn.exceptions import PluginError, ValidationError

if TYPE_CHECKING:
    from markturn.rules.table import RuleTable

logger = logging.getLogger(__name__)

Plugin = Callable[["RuleTable"], None]


@dataclass
class PluginMetadata:
    """Metadata for a plugin.

    Parameters
    ----------
    name : str
        Unique identifier for the plugin (e.g., "tables")
    description : str
        Human-readable description of what the plugin adds
    plugin : callable
        ``plugin(rule_table) -> None``; registers its rules on the table
    version : str, default = "1.0.0"
        Plugin version (semantic versioning)
    author : str, optional
        Plugin author or maintainer
    tags : list[str], default = empty list
        Tags for categorization (e.g., ["gfm", "tables"])

    Examples
    --------
        >>> from markturn.plugins.gfm import strikethrough
        >>> metadata = PluginMetadata(
        ...     name="strikethrough",
        ...     description="Convert <del> to ~~text~~",
        ...     plugin=strikethrough,
        ... )

    """

    name: str
    description: str
    plugin: Plugin
    version: str = "1.0.0"
    author: Optional[str] = None
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate metadata after initialization."""
        if not self.name:
            raise ValidationError("Plugin name cannot be empty", parameter_name="name", parameter_value=self.name)
        if not callable(self.plugin):
            raise ValidationError(
                f"Plugin '{self.name}' must be callable", parameter_name="plugin", parameter_value=self.plugin
            )

    def apply(self, rules: RuleTable) -> None:
        """Run the plugin against ``rules``.

        Raises
        ------
        PluginError
            If the plugin itself raises

        """
        try:
            self.plugin(rules)
        except PluginError:
            raise
        except Exception as e:
            raise PluginError(f"Plugin '{self.name}' failed: {e}", plugin_name=self.name, original_error=e) from e
        logger.debug(f"Applied plugin: {self.name}")


__all__ = ["Plugin", "PluginMetadata"]
