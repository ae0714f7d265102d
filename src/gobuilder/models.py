"""Canonical Pydantic models shared across all gobuilder modules.

The models fall into two groups:

**Build models** -- exchanged with the host platform:
    :class:`BuildConfig` is the explicit schema for the declarative build
    input, and :class:`Binary` is the result handed to later pipeline
    stages.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`PluginsConfig` and :class:`GlobalConfig`.

:class:`ConfigOption` is a documentation record derived from the
``BuildConfig`` schema and rendered by ``gobuilder docs``.
"""

from __future__ import annotations

import posixpath
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


DEFAULT_OUTPUT_NAME = "app"
DEFAULT_SOURCE = "./"
DEFAULT_TOOLCHAIN = "go"


# --- Build models ---


class BuildConfig(BaseModel):
    """Declarative build configuration supplied by the host.

    Both options are optional. An empty string or ``null`` means "unset" and
    decodes to the default, and assignment re-runs validation so clearing a
    field after construction falls back to the default as well.

    Unknown option names are rejected so typos in a project file surface as
    configuration errors instead of being silently ignored.

    The existence of ``source`` is **not** checked here; that is the job of
    :meth:`~gobuilder.builder.Builder.config_set`, which runs at validation
    time rather than at decode time.

    Example::

        BuildConfig(source="./cmd/server", output_name="server")
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    output_name: str = Field(
        default=DEFAULT_OUTPUT_NAME,
        description="File name of the compiled binary, passed to the toolchain as -o",
    )
    source: str = Field(
        default=DEFAULT_SOURCE,
        description="Path to the package to build; must exist at validation time",
    )

    @field_validator("output_name", "source", mode="before")
    @classmethod
    def _empty_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value


class Binary(BaseModel):
    """Descriptor of a built artifact, returned to the host after a successful build.

    Attributes:
        location: Path of the binary, formed by joining the configured
            ``source`` and ``output_name`` with forward slashes and
            lexically cleaning the result.
    """

    location: str

    @classmethod
    def for_config(cls, config: BuildConfig) -> Binary:
        """Return the descriptor for a binary built from *config*."""
        return cls(location=join_location(config.source, config.output_name))


def join_location(*elements: str) -> str:
    """Join path elements with ``/`` and clean the result lexically.

    Empty elements are ignored and every element is treated as relative to
    the previous one, so an absolute ``output_name`` does not discard the
    ``source`` prefix::

        >>> join_location("./testapp", "myapp")
        'testapp/myapp'
        >>> join_location("./", "app")
        'app'

    Returns:
        The cleaned path, or ``""`` if every element is empty.
    """
    parts = [e for e in elements if e]
    if not parts:
        return ""
    cleaned = posixpath.normpath("/".join(parts))
    # normpath keeps exactly two leading slashes (POSIX allows them to be special)
    if cleaned.startswith("//"):
        cleaned = cleaned[1:]
    return cleaned


class ConfigOption(BaseModel):
    """One documented build option, as shown by ``gobuilder docs``."""

    name: str
    type: str
    default: Optional[str] = None
    description: str = ""


def describe_options(model: type[BaseModel]) -> list[ConfigOption]:
    """Enumerate the options recognised by *model* in declaration order."""
    options: list[ConfigOption] = []
    for name, field in model.model_fields.items():
        annotation = field.annotation
        type_name = getattr(annotation, "__name__", None) or str(annotation)
        default = None if field.is_required() else str(field.default)
        options.append(
            ConfigOption(
                name=name,
                type=type_name,
                default=default,
                description=field.description or "",
            )
        )
    return options


# --- Configuration models ---


class PluginsConfig(BaseModel):
    """Explicit builder allow/deny lists stored in :class:`GlobalConfig`."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """User-level settings loaded from ``config.json`` in the config directory.

    Read by :func:`~gobuilder.config.load_global_config` and written by
    :func:`~gobuilder.config.save_global_config`. Every field has a default,
    so a missing file is equivalent to ``GlobalConfig()``.
    """

    toolchain: str = Field(
        default=DEFAULT_TOOLCHAIN, description="Toolchain executable to invoke"
    )
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
