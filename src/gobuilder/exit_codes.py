"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~gobuilder.exceptions.GobuilderError` subclass.
CI scripts and pipeline wrappers can inspect the exit code to tell a bad
configuration apart from a failed compile without parsing stderr.

Example::

    $ gobuilder build --source ./missing
    $ echo $?
    3   # EXIT_CONFIG_ERROR -- the source folder does not exist
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONFIG_ERROR = 3
"""The build configuration is invalid; the build was not attempted."""

EXIT_BUILD_FAILURE = 4
"""The toolchain could not be started or exited non-zero."""

EXIT_PLUGIN_ERROR = 10
"""A builder plugin failed to load or violated the plugin contract."""

EXIT_INTERRUPTED = 130
"""The process was interrupted with Ctrl-C."""
