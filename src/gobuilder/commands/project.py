"""``init``, ``docs``, and ``plugins`` commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from gobuilder.commands._shared import exit_on_error, select_builder
from gobuilder.config import (
    PROJECT_CONFIG_FILENAMES,
    decode_build_config,
    find_project_config,
    load_global_config,
    write_project_config,
)
from gobuilder.exceptions import InvalidUsageError
from gobuilder.output import print_table, success, suggest, warning
from gobuilder.plugins import PluginManager
from gobuilder.plugins.manager import BUILTIN_BUILDER


def init_command(
    source: Optional[str] = typer.Option(
        None, "--source", "-s", help="Package to build. [default: ./]"
    ),
    output_name: Optional[str] = typer.Option(
        None, "--output-name", "-n", help="Binary file name. [default: app]"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing project config."
    ),
) -> None:
    """Write a project config in the current directory.

    A new config is written as gobuilder.json. With ``--force`` an existing
    config is overwritten in place, keeping its name and format.
    """
    path = Path.cwd() / PROJECT_CONFIG_FILENAMES[0]
    with exit_on_error():
        existing = find_project_config()
        if existing is not None:
            if not force:
                raise InvalidUsageError(
                    f"Project config already exists: {existing} (use --force to overwrite)"
                )
            warning(f"Overwriting {existing}")
            path = existing
        config = decode_build_config({"source": source, "output_name": output_name})
        write_project_config(path, config)

    success(f"Wrote {path}")
    suggest("Build it: gobuilder build")


def docs_command(
    builder_name: str = typer.Option(
        BUILTIN_BUILDER, "--builder", "-b", help="Registered builder to document."
    ),
) -> None:
    """List the build options a builder accepts."""
    manager = PluginManager()
    with exit_on_error():
        try:
            builder = select_builder(manager, load_global_config(), builder_name)
            options = builder.documentation()
        finally:
            manager.cleanup()

    rows = [
        [opt.name, opt.type, opt.default or "", opt.description] for opt in options
    ]
    print_table(
        ["Option", "Type", "Default", "Description"],
        rows,
        title=f"Options for builder '{builder_name}'",
    )


def plugins_command() -> None:
    """List the available builders."""
    manager = PluginManager()
    with exit_on_error():
        try:
            global_cfg = load_global_config()
            manager.register_builtins(global_cfg)
            manager.discover(global_cfg)
            plugins = manager.list_plugins()
        finally:
            manager.cleanup()

    rows = [[p["name"], p["version"], p["description"]] for p in plugins]
    print_table(["Name", "Version", "Description"], rows, title="Builders")
