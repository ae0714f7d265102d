"""``build`` and ``validate`` commands -- drive a builder the way the host does.

Both commands resolve the effective :class:`~gobuilder.models.BuildConfig`
(CLI flags > environment > project file > defaults) and hand it to the
selected builder's ``config_set``. ``build`` then calls the builder's build
function and prints the resulting :class:`~gobuilder.models.Binary` on
stdout, so a pipeline script can read the location with ``--json``::

    gobuilder --json build --source ./cmd/server -n server | jq -r .location
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional

import typer

from gobuilder.commands._shared import exit_on_error, select_builder
from gobuilder.config import load_global_config, resolve_build_config, resolve_toolchain
from gobuilder.exceptions import BuildError
from gobuilder.output import debug, format_response, get_output, success
from gobuilder.plugins import BuildContext, PluginManager
from gobuilder.plugins.manager import BUILTIN_BUILDER
from gobuilder.terminal import ConsoleUI

_SOURCE_OPTION = typer.Option(
    None, "--source", "-s", help="Package to build. [default: ./]"
)
_OUTPUT_NAME_OPTION = typer.Option(
    None, "--output-name", "-n", help="Binary file name. [default: app]"
)
_CONFIG_OPTION = typer.Option(
    None, "--config", "-c",
    help="Project config file. [default: ./gobuilder.json or ./gobuilder.yaml]",
)
_BUILDER_OPTION = typer.Option(
    BUILTIN_BUILDER, "--builder", "-b", help="Registered builder to use."
)


def build_command(
    source: Optional[str] = _SOURCE_OPTION,
    output_name: Optional[str] = _OUTPUT_NAME_OPTION,
    config_file: Optional[Path] = _CONFIG_OPTION,
    toolchain: Optional[str] = typer.Option(
        None, "--toolchain", help="Toolchain executable. [default: go]"
    ),
    builder_name: str = _BUILDER_OPTION,
) -> None:
    """Validate the configuration, build, and print the binary location.

    Exit codes: 3 when the configuration is invalid (the toolchain is never
    run), 4 when the toolchain fails or cannot be started.
    """
    manager = PluginManager()
    with exit_on_error():
        try:
            global_cfg = load_global_config()
            build_cfg = resolve_build_config(source, output_name, config_file)
            builder = select_builder(manager, global_cfg, builder_name)
            builder.config_set(build_cfg)

            ctx = BuildContext(toolchain=resolve_toolchain(global_cfg, toolchain))
            out = get_output()
            ui = ConsoleUI(console=out.stderr_console, quiet=out.is_quiet)
            debug(f"Building {build_cfg.source} with '{ctx.toolchain}' ({builder_name})")

            try:
                binary = builder.build_func()(ctx, ui)
            except subprocess.CalledProcessError as exc:
                raise BuildError(
                    f"{ctx.toolchain} build exited with status {exc.returncode}",
                    returncode=exc.returncode,
                    stderr=exc.stderr or "",
                ) from exc
            except OSError as exc:
                raise BuildError(f"Could not run {ctx.toolchain}: {exc}") from exc
        finally:
            manager.cleanup()

    format_response(binary.model_dump(mode="json"))


def validate_command(
    source: Optional[str] = _SOURCE_OPTION,
    output_name: Optional[str] = _OUTPUT_NAME_OPTION,
    config_file: Optional[Path] = _CONFIG_OPTION,
    builder_name: str = _BUILDER_OPTION,
) -> None:
    """Check the configuration without building and print the effective values."""
    manager = PluginManager()
    with exit_on_error():
        try:
            global_cfg = load_global_config()
            build_cfg = resolve_build_config(source, output_name, config_file)
            builder = select_builder(manager, global_cfg, builder_name)
            builder.config_set(build_cfg)
        finally:
            manager.cleanup()

    success("Configuration is valid.")
    format_response(build_cfg.model_dump(mode="json"))
