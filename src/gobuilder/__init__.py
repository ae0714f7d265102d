"""gobuilder -- a builder plugin that runs ``go build`` for a deployment pipeline.

The host platform hands the plugin a declarative build configuration, the
plugin validates it, runs the toolchain once, and reports back where the
binary was written so later stages (deploy, release) can pick it up.

Typical workflow::

    gobuilder init                          # write gobuilder.json
    gobuilder build --source ./cmd/server   # build and print the Binary

Modules:
    app: Typer application acting as a local host for the builder.
    builder: The ``go`` builder plugin.
    models: Pydantic models for build configuration and results.
    config: Config decoding, config files, and precedence resolution.
    terminal: Progress reporter (``UI``/``Status``) backed by Rich.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
