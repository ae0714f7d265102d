"""Abstract base class and build context for gobuilder plugins.

Every builder must subclass :class:`Plugin` and implement :attr:`name`,
:meth:`config`, :meth:`config_set`, and :meth:`build_func`. ``on_init`` and
``cleanup`` are optional lifecycle hooks whose defaults are no-ops.

Builders are registered as entry points in the ``gobuilder.builders``
group and discovered at runtime by
:class:`~gobuilder.plugins.manager.PluginManager`.

Example:
    Minimal builder implementation::

        class CopyBuilder(Plugin):
            def __init__(self):
                self._config = BuildConfig()

            @property
            def name(self) -> str:
                return "copy"

            def config(self):
                return self._config

            def config_set(self, config):
                self._config = config

            def build_func(self):
                return lambda ctx, ui: Binary.for_config(self._config)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel

from gobuilder.models import (
    DEFAULT_TOOLCHAIN,
    Binary,
    ConfigOption,
    GlobalConfig,
    describe_options,
)
from gobuilder.terminal import UI


@dataclass
class BuildContext:
    """Context passed explicitly to a build function by the host.

    Attributes:
        toolchain: Executable invoked for the build (``go`` by default).
    """

    toolchain: str = DEFAULT_TOOLCHAIN


BuildFunc = Callable[[BuildContext, UI], Binary]
"""Signature of the callable returned by :meth:`Plugin.build_func`."""


class Plugin(ABC):
    """Base class for all gobuilder builders.

    The plugin lifecycle is:

    1. Instantiation -- the :class:`PluginManager` calls the no-arg constructor.
    2. :meth:`on_init` -- called once with the global configuration.
    3. :meth:`config` / :meth:`config_set` -- the host decodes the
       declarative input and hands it back for validation.
    4. :meth:`build_func` -- the host calls the returned function once
       per build.
    5. :meth:`cleanup` -- called once during shutdown.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the unique builder name used for discovery and selection."""
        ...

    @property
    def version(self) -> str:
        """Return the plugin version string. Defaults to ``"0.1.0"``."""
        return "0.1.0"

    @property
    def description(self) -> str:
        """Return a one-line description of the builder. Defaults to ``""``."""
        return ""

    def on_init(self, config: GlobalConfig) -> None:
        """Called once when the plugin is loaded by the :class:`PluginManager`."""

    @abstractmethod
    def config(self) -> BaseModel:
        """Return the configuration object the host decodes input into."""

    @abstractmethod
    def config_set(self, config: Any) -> None:
        """Validate *config* and adopt it for the next build.

        Raises:
            ConfigError: If the configuration is invalid.
            PluginError: If *config* is not something this builder accepts.
        """

    @abstractmethod
    def build_func(self) -> BuildFunc:
        """Return the function the host calls to run a build."""

    def documentation(self) -> list[ConfigOption]:
        """Describe the options accepted by this builder's configuration."""
        return describe_options(type(self.config()))

    def cleanup(self) -> None:
        """Called once during shutdown to release plugin resources."""
