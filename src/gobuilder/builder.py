"""The ``go`` builder -- validates a build config and runs ``go build`` once.

The host drives :class:`Builder` through the
:class:`~gobuilder.plugins.base.Plugin` contract:

1. :meth:`Builder.config` hands out the config object to decode into.
2. :meth:`Builder.config_set` validates the decoded config. The only rule
   is that ``source`` exists on disk.
3. :meth:`Builder.build_func` returns :meth:`Builder.build`, which the
   host calls with a :class:`~gobuilder.plugins.base.BuildContext` and a
   :class:`~gobuilder.terminal.UI`.

The build runs ``<toolchain> build -o <output_name> <source>`` in the
current working directory with the inherited environment. There is no
timeout and no retry. A failed invocation is reported to the UI and then
re-raised unchanged so the host can stop the pipeline.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from typing import Any

from gobuilder.config import decode_build_config
from gobuilder.exceptions import ConfigError, PluginError
from gobuilder.models import Binary, BuildConfig
from gobuilder.plugins.base import BuildContext, BuildFunc, Plugin
from gobuilder.terminal import UI, StepStatus

logger = logging.getLogger(__name__)


class Builder(Plugin):
    """Builder that compiles a Go package into a single binary.

    Args:
        config: Initial configuration. Defaults to ``BuildConfig()``.
    """

    def __init__(self, config: BuildConfig | None = None) -> None:
        self._config = config if config is not None else BuildConfig()

    @property
    def name(self) -> str:
        return "go"

    @property
    def description(self) -> str:
        return "Build a Go package with `go build` and report the binary location"

    def config(self) -> BuildConfig:
        return self._config

    def config_set(self, config: Any) -> None:
        """Validate *config* and adopt it for the next build.

        Args:
            config: A :class:`BuildConfig`, or a mapping that is decoded into
                one first.

        Raises:
            PluginError: If *config* is neither a ``BuildConfig`` nor a
                mapping.
            ConfigError: If the mapping cannot be decoded, or ``source``
                cannot be stat'ed. Every stat failure (missing path,
                permission denied, dangling symlink) produces the same
                message; the ``OSError`` is kept as ``__cause__``.
        """
        if isinstance(config, Mapping):
            config = decode_build_config(config)
        elif not isinstance(config, BuildConfig):
            raise PluginError("expected BuildConfig as parameter")

        try:
            os.stat(config.source)
        except OSError as exc:
            logger.debug("stat(%r) failed: %s", config.source, exc)
            raise ConfigError("source folder does not exist") from exc

        self._config = config

    def build_func(self) -> BuildFunc:
        return self.build

    def build(self, ctx: BuildContext, ui: UI) -> Binary:
        """Run the toolchain once and return the built binary's descriptor.

        Args:
            ctx: Build context naming the toolchain executable.
            ui: Progress reporter; the status opened from it is closed
                before this method returns or raises.

        Returns:
            A :class:`Binary` located at ``source`` joined with
            ``output_name``.

        Raises:
            subprocess.CalledProcessError: The toolchain exited non-zero.
            OSError: The toolchain could not be started.
        """
        status = ui.status()
        try:
            status.update("Building application")

            cfg = self._config
            argv = [ctx.toolchain, "build", "-o", cfg.output_name, cfg.source]
            logger.debug("Running %s", " ".join(argv))

            try:
                result = subprocess.run(argv, check=True, capture_output=True, text=True)
            except subprocess.CalledProcessError as exc:
                logger.debug("%s exited %d: %s", ctx.toolchain, exc.returncode, exc.stderr)
                status.step(StepStatus.ERROR, "build failed")
                raise
            except OSError as exc:
                logger.debug("Could not start %s: %s", ctx.toolchain, exc)
                status.step(StepStatus.ERROR, "build failed")
                raise

            if result.stderr:
                logger.debug("%s output: %s", ctx.toolchain, result.stderr)
            status.step(StepStatus.OK, "Application built successfully")
            return Binary.for_config(cfg)
        finally:
            status.close()
