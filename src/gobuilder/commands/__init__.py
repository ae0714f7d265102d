"""Built-in CLI sub-commands for gobuilder.

Each module in this package defines Typer command functions that are
registered on the root :data:`~gobuilder.app.app` by :func:`~gobuilder.app.main`.

Modules:
    build: ``build`` and ``validate`` -- run the builder as a local host.
    project: ``init``, ``docs``, and ``plugins`` -- project setup and
        introspection.
"""
