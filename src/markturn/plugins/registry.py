#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/markturn/plugins/registry.py
"""Plugin registry for named rule plugins.

Plugins can be used by name once registered:

    >>> from markturn import HTMLToMarkdown
    >>> HTMLToMarkdown().use("gfm").convert("<s>gone</s>")
    '~~gone~~'

Third-party packages register plugins through the ``markturn.plugins`` entry
point group; each entry point must load a ``PluginMetadata``:

.. code-block:: toml

    [project.entry-points."markturn.plugins"]
    footnotes = "markturn_footnotes:FOOTNOTES_METADATA"

Notes
-----
Import the global ``plugin_registry`` instance rather than instantiating
``PluginRegistry``. Both work because the class is a singleton.

"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Optional

from markturn.exceptions import PluginError
from markturn.plugins.metadata import PluginMetadata

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "markturn.plugins"


class PluginRegistry:
    """Registry for named plugins.

    Entry-point plugins are discovered on first lookup.

    Examples
    --------
        >>> from markturn.plugins import plugin_registry
        >>> plugin_registry.has_plugin("tables")
        True
        >>> plugin_registry.list_plugins(tags=["gfm"])
        ['gfm', 'highlighted-code-block', 'strikethrough', 'tables', 'task-list-items']

    """

    _instance: Optional[PluginRegistry] = None
    _plugins: dict[str, PluginMetadata]
    _initialized: bool

    def __new__(cls) -> PluginRegistry:
        """Create or return singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._plugins = {}
            cls._instance._initialized = False
        return cls._instance

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self._initialized = True
            self.discover_plugins()

    def register(self, metadata: PluginMetadata) -> None:
        """Register a plugin.

        Parameters
        ----------
        metadata : PluginMetadata
            Plugin metadata to register

        Notes
        -----
        A plugin registered under an existing name replaces it and a warning
        is logged.

        """
        existing = self._plugins.get(metadata.name)
        if existing is metadata:
            return
        if existing is not None:
            logger.warning(f"Plugin '{metadata.name}' already registered, overwriting")

        self._plugins[metadata.name] = metadata
        logger.debug(f"Registered plugin: {metadata.name}")

    def unregister(self, name: str) -> bool:
        """Unregister a plugin.

        Returns
        -------
        bool
            True if the plugin was unregistered, False if not found

        """
        if name in self._plugins:
            del self._plugins[name]
            logger.debug(f"Unregistered plugin: {name}")
            return True
        return False

    def get_plugin(self, name: str) -> PluginMetadata:
        """Get a plugin by name.

        Raises
        ------
        PluginError
            If no plugin is registered under ``name``

        """
        self._ensure_initialized()

        if name not in self._plugins:
            available = ", ".join(sorted(self._plugins)) or "none"
            raise PluginError(f"Plugin '{name}' not registered. Available plugins: {available}", plugin_name=name)

        return self._plugins[name]

    def has_plugin(self, name: str) -> bool:
        self._ensure_initialized()
        return name in self._plugins

    def list_plugins(self, tags: Optional[list[str]] = None) -> list[str]:
        """List registered plugin names, sorted alphabetically.

        Parameters
        ----------
        tags : list[str], optional
            Only return plugins carrying at least one of these tags

        """
        self._ensure_initialized()

        if tags is None:
            return sorted(self._plugins)

        return sorted(name for name, metadata in self._plugins.items() if any(tag in metadata.tags for tag in tags))

    def discover_plugins(self) -> int:
        """Discover and register plugins from the ``markturn.plugins`` entry points.

        Entry points that fail to load, or that do not load a
        ``PluginMetadata``, are skipped with a warning.

        Returns
        -------
        int
            Number of plugins discovered and registered

        """
        discovered_count = 0

        try:
            plugin_eps = importlib.metadata.entry_points().select(group=ENTRY_POINT_GROUP)

            for ep in plugin_eps:
                try:
                    metadata = ep.load()

                    if not isinstance(metadata, PluginMetadata):
                        logger.warning(f"Entry point '{ep.name}' did not return PluginMetadata, skipping")
                        continue

                    self.register(metadata)
                    discovered_count += 1
                    logger.debug(f"Discovered plugin from entry point: {ep.name}")

                except Exception as e:
                    logger.warning(f"Failed to load plugin entry point '{ep.name}': {e}")
                    continue

        except Exception as e:
            logger.warning(f"Failed to discover plugins: {e}")

        logger.info(f"Discovered {discovered_count} plugin(s) from entry points")
        return discovered_count

    def clear(self) -> None:
        """Remove every registered plugin, built-ins included.

        This is primarily useful for testing.

        """
        self._plugins.clear()
        self._initialized = False
        logger.debug("Cleared plugin registry")


# Global registry instance (preferred access pattern)
plugin_registry = PluginRegistry()

__all__ = ["ENTRY_POINT_GROUP", "PluginRegistry", "plugin_registry"]
