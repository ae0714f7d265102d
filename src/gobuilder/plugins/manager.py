"""Plugin manager -- discovery, loading, and lifecycle management.

This module contains :class:`PluginManager`, the central registry of
builders. It registers the built-in ``go`` builder, discovers third-party
builders registered as Python entry points, and applies enable/disable
filtering from the global configuration.

The entry-point group used for discovery is ``gobuilder.builders``.
Third-party packages register builders by declaring an entry point under
this group in their ``pyproject.toml``::

    [project.entry-points."gobuilder.builders"]
    tinygo = "gobuilder_tinygo.plugin:TinyGoBuilder"
"""

from __future__ import annotations

import importlib.metadata
import logging

from gobuilder.exceptions import PluginError
from gobuilder.models import GlobalConfig
from gobuilder.plugins.base import Plugin

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "gobuilder.builders"
"""The entry-point group name used for builder discovery."""

BUILTIN_BUILDER = "go"
"""Name under which the built-in builder is registered."""


class PluginManager:
    """Discovers, loads, and manages the lifecycle of gobuilder builders.

    The *enabled* and *disabled* lists in
    :class:`~gobuilder.models.PluginsConfig` (nested inside
    :class:`~gobuilder.models.GlobalConfig`) act as an explicit
    allowlist/blocklist for discovered entry points. When *enabled* is
    non-empty only those builders are loaded; otherwise every discovered
    builder that is **not** in *disabled* is loaded. The built-in builder
    is not subject to filtering.

    Example:
        Typical usage::

            manager = PluginManager()
            manager.register_builtins(global_config)
            manager.discover(global_config)
            builder = manager.get_plugin("go")
    """

    def __init__(self) -> None:
        self._plugins: dict[str, Plugin] = {}

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def register_builtins(self, config: GlobalConfig) -> None:
        """Load the built-in ``go`` builder."""
        from gobuilder.builder import Builder

        self.load_plugin(BUILTIN_BUILDER, Builder(), config)

    def discover(self, config: GlobalConfig) -> list[str]:
        """Discover and load builders via Python entry points.

        Entry points whose name is already registered (for example the
        built-in ``go`` builder declared by this package itself) are skipped.

        Args:
            config: The global configuration whose ``plugins.enabled`` and
                ``plugins.disabled`` lists control which builders are loaded.

        Returns:
            Names of the builders loaded by this call. Builders that fail to
            load are logged as warnings and skipped.
        """
        loaded_names: list[str] = []
        enabled_set = set(config.plugins.enabled)
        disabled_set = set(config.plugins.disabled)

        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            name = ep.name

            if name in self._plugins:
                logger.debug("Builder '%s' already registered, skipping", name)
                continue
            if enabled_set and name not in enabled_set:
                logger.debug("Builder '%s' not in enabled list, skipping", name)
                continue
            if name in disabled_set:
                logger.debug("Builder '%s' is disabled, skipping", name)
                continue

            try:
                plugin_cls = ep.load()
                plugin: Plugin = plugin_cls()
                self.load_plugin(name, plugin, config)
                loaded_names.append(name)
            except Exception as exc:
                logger.warning("Failed to load builder '%s': %s", name, exc)

        return loaded_names

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_plugin(self, name: str, plugin: Plugin, config: GlobalConfig) -> None:
        """Initialise *plugin* and register it under *name*.

        Raises:
            PluginError: If a builder with the same *name* is already loaded.
        """
        if name in self._plugins:
            raise PluginError(f"Builder '{name}' is already loaded")

        plugin.on_init(config)
        self._plugins[name] = plugin
        logger.info("Loaded builder '%s' v%s", name, plugin.version)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def get_plugin(self, name: str) -> Plugin:
        """Retrieve a loaded builder by its registered name.

        Raises:
            PluginError: If no builder with the given *name* is loaded.
        """
        try:
            return self._plugins[name]
        except KeyError:
            raise PluginError(f"Builder '{name}' is not loaded") from None

    def list_plugins(self) -> list[dict[str, str]]:
        """List loaded builders as ``name``/``version``/``description`` dicts."""
        return [
            {
                "name": name,
                "version": plugin.version,
                "description": plugin.description,
            }
            for name, plugin in self._plugins.items()
        ]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def cleanup(self) -> None:
        """Clean up all loaded builders and reset internal state.

        Exceptions from individual builders are logged and swallowed so
        that one builder's failure does not prevent the others from
        cleaning up.
        """
        for name, plugin in self._plugins.items():
            try:
                plugin.cleanup()
            except Exception as exc:
                logger.warning("Error cleaning up builder '%s': %s", name, exc)
        self._plugins.clear()
