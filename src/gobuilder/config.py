"""Configuration decoding, config files, and precedence resolution.

This module handles everything between "the host has some declarative
input" and "the builder holds a :class:`~gobuilder.models.BuildConfig`":

* **Decode step** -- :func:`decode_build_config` applies the explicit
  ``BuildConfig`` schema to a raw mapping and turns schema violations into
  :class:`~gobuilder.exceptions.ConfigError`.
* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.gobuilder/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a single :class:`~gobuilder.models.GlobalConfig`
  JSON file storing the toolchain and plugin allow/deny lists.
* **Project config** -- ``gobuilder.json`` / ``gobuilder.yaml`` in the
  working directory (or an explicit path) whose ``build`` mapping holds
  the build options.
* **Precedence resolution** -- :func:`resolve_build_config` and
  :func:`resolve_toolchain` merge CLI flags, environment variables, and
  config files into the effective values.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from gobuilder.exceptions import ConfigError
from gobuilder.models import BuildConfig, GlobalConfig

_APP_NAME = "gobuilder"
_CONFIG_FILENAME = "config.json"
PROJECT_CONFIG_FILENAMES = ("gobuilder.json", "gobuilder.yaml", "gobuilder.yml")
"""Project config file names searched in the working directory, in order."""

_ENV_OUTPUT_NAME = "GOBUILDER_OUTPUT_NAME"
_ENV_SOURCE = "GOBUILDER_SOURCE"
_ENV_TOOLCHAIN = "GOBUILDER_TOOLCHAIN"


# --- Decode step ---


def decode_build_config(raw: Any) -> BuildConfig:
    """Decode declarative build input into a :class:`BuildConfig`.

    ``None`` decodes to the all-defaults config. Anything else must be a
    mapping whose keys are recognised option names.

    Args:
        raw: The ``build`` section as supplied by the host or read from a
            project file.

    Returns:
        The decoded configuration.

    Raises:
        ConfigError: If *raw* is not a mapping, names an unknown option, or
            holds a value of the wrong type.
    """
    if raw is None:
        return BuildConfig()
    if not isinstance(raw, Mapping):
        raise ConfigError(
            f"Build configuration must be a mapping, got {type(raw).__name__}"
        )
    try:
        return BuildConfig.model_validate(dict(raw))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid build configuration: {problems}") from exc


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/gobuilder/`` (default ``~/.config/gobuilder/``).
    On macOS/Windows: ``~/.gobuilder/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/gobuilder/`` (default ``~/.local/share/gobuilder/``).
    On macOS/Windows: ``~/.gobuilder/data/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "data"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed and the exception re-raised.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close in the except branch
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~gobuilder.models.GlobalConfig`, or a
        default instance if the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project config ---


def find_project_config(directory: Optional[Path] = None) -> Optional[Path]:
    """Return the first project config file present in *directory* (default: cwd)."""
    base = directory if directory is not None else Path.cwd()
    for filename in PROJECT_CONFIG_FILENAMES:
        candidate = base / filename
        if candidate.is_file():
            return candidate
    return None


def load_project_config(path: Optional[Path] = None) -> Optional[dict[str, Any]]:
    """Load a project config file.

    When *path* is given the file must exist. Otherwise the working directory
    is searched for :data:`PROJECT_CONFIG_FILENAMES` and ``None`` is returned
    when none is present.

    ``.yaml``/``.yml`` files are parsed with PyYAML, everything else as JSON.

    Raises:
        ConfigError: If an explicit *path* does not exist, or the file is
            unreadable, malformed, or not a mapping at the top level.
    """
    if path is None:
        path = find_project_config()
        if path is None:
            return None
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: top level must be a mapping")
    return data


def write_project_config(path: Path, config: BuildConfig) -> None:
    """Write *config* as the ``build`` section of a project file.

    The format follows the file suffix, as in :func:`load_project_config`.
    """
    data = {"build": config.model_dump(mode="json")}
    if path.suffix in (".yaml", ".yml"):
        text = yaml.safe_dump(data, default_flow_style=False, sort_keys=True)
    else:
        text = json.dumps(data, indent=2) + "\n"
    _atomic_write(path, text)


# --- Precedence resolution ---


def resolve_build_config(
    cli_source: Optional[str] = None,
    cli_output_name: Optional[str] = None,
    config_path: Optional[Path] = None,
) -> BuildConfig:
    """Resolve the effective build configuration.

    Precedence for each option (high to low):
        1. CLI flags (``cli_source``, ``cli_output_name``)
        2. Environment variables (``GOBUILDER_SOURCE``, ``GOBUILDER_OUTPUT_NAME``)
        3. The ``build`` section of the project config file
        4. Defaults

    Returns:
        The decoded :class:`BuildConfig`. Existence of ``source`` is not
        checked here.

    Raises:
        ConfigError: If the project file or the merged options are invalid.
    """
    project = load_project_config(config_path) or {}
    section = project.get("build")
    if section is not None and not isinstance(section, Mapping):
        raise ConfigError("Invalid project config: 'build' must be a mapping")
    merged: dict[str, Any] = dict(section or {})

    env_source = os.environ.get(_ENV_SOURCE)
    if env_source:
        merged["source"] = env_source
    env_output_name = os.environ.get(_ENV_OUTPUT_NAME)
    if env_output_name:
        merged["output_name"] = env_output_name

    if cli_source is not None:
        merged["source"] = cli_source
    if cli_output_name is not None:
        merged["output_name"] = cli_output_name

    return decode_build_config(merged)


def resolve_toolchain(
    global_config: GlobalConfig, cli_toolchain: Optional[str] = None
) -> str:
    """Resolve the toolchain executable: CLI flag, ``GOBUILDER_TOOLCHAIN``, global config."""
    if cli_toolchain:
        return cli_toolchain
    env_toolchain = os.environ.get(_ENV_TOOLCHAIN)
    if env_toolchain:
        return env_toolchain
    return global_config.toolchain
