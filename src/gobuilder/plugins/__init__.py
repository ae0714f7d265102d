"""Builder plugin contract, discovery, and lifecycle.

The host drives builders through an explicit interface instead of
inspecting function signatures: every builder subclasses :class:`Plugin`
and exposes a build function with the fixed signature
``build(ctx: BuildContext, ui: UI) -> Binary``.

Third-party packages can register additional builders by declaring an
entry point in the ``gobuilder.builders`` group. At runtime
:class:`PluginManager` registers the built-in ``go`` builder and loads
those entry points.

Key classes:

* :class:`Plugin` -- Abstract base class that all builders must extend.
* :class:`BuildContext` -- Explicit context handed to the build function.
* :class:`PluginManager` -- Discovers, loads, and manages builders.

Example:
    Typical usage from the CLI host::

        from gobuilder.plugins import BuildContext, PluginManager

        manager = PluginManager()
        manager.register_builtins(global_config)
        builder = manager.get_plugin("go")
        builder.config_set({"source": "./cmd/server"})
        binary = builder.build_func()(BuildContext(), ui)
"""

from gobuilder.plugins.base import BuildContext, BuildFunc, Plugin
from gobuilder.plugins.manager import PluginManager

__all__ = ["BuildContext", "BuildFunc", "Plugin", "PluginManager"]
