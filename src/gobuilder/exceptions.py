"""Exception hierarchy for gobuilder.

All exceptions inherit from :class:`GobuilderError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`gobuilder.exit_codes`.
The top-level error handler in :func:`gobuilder.app.main` catches
``GobuilderError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

The builder itself only raises :class:`ConfigError` and
:class:`PluginError`. Toolchain failures leave
:meth:`~gobuilder.builder.Builder.build` as the original
:class:`subprocess.CalledProcessError` or :class:`OSError`; the CLI host
wraps them in :class:`BuildError` for exit-code mapping.

Subclass hierarchy::

    GobuilderError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ConfigError         (exit 3)
    +-- BuildError          (exit 4)
    +-- PluginError         (exit 10)
"""

from __future__ import annotations

from typing import Optional

from gobuilder.exit_codes import (
    EXIT_BUILD_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
)


class GobuilderError(Exception):
    """Base exception for all gobuilder errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`gobuilder.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(GobuilderError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(GobuilderError):
    """Raised when the build configuration cannot be decoded or fails validation."""

    exit_code = EXIT_CONFIG_ERROR


class BuildError(GobuilderError):
    """Raised by the CLI host when the toolchain invocation fails.

    Args:
        message: Human-readable error description.
        returncode: The toolchain's exit status, or ``None`` when the
            process could not be started.
        stderr: Captured toolchain stderr, if any.
    """

    exit_code = EXIT_BUILD_FAILURE

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class PluginError(GobuilderError):
    """Raised when a builder plugin fails to load or is handed the wrong input."""

    exit_code = EXIT_PLUGIN_ERROR
