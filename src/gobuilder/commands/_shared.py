"""Helpers shared by the built-in commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from gobuilder.exceptions import BuildError, GobuilderError
from gobuilder.models import GlobalConfig
from gobuilder.output import error, info
from gobuilder.plugins import Plugin, PluginManager

_STDERR_TAIL_LINES = 20


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Report a :class:`GobuilderError` on stderr and exit with its code."""
    try:
        yield
    except BuildError as exc:
        error(str(exc))
        for line in exc.stderr.splitlines()[-_STDERR_TAIL_LINES:]:
            info(f"  {line}")
        raise typer.Exit(code=exc.exit_code)
    except GobuilderError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)


def select_builder(
    manager: PluginManager, global_cfg: GlobalConfig, name: str
) -> Plugin:
    """Register built-in and discovered builders, then return the one named *name*."""
    manager.register_builtins(global_cfg)
    manager.discover(global_cfg)
    return manager.get_plugin(name)
