"""uniplugger -- discover plugin modules by glob pattern and instantiate them.

A host describes where its plugins live with one or more glob patterns;
:class:`PluginRegistry` resolves them to Python files, imports each file,
instantiates its default export, and exposes the instances as a typed,
ordered collection::

    from uniplugger import PluginRegistry

    registry: PluginRegistry[Datastore] = PluginRegistry(
        ["./plugins/*.py", "./contrib/plugins/*.py"]
    )
    await registry.discover()
    registry.file_names   # absolute paths, in load order
    registry.plugins      # instances, index-aligned with file_names

Modules:
    registry: The run-once discovery lifecycle.
    resolver: Glob and folder resolution to absolute module paths.
    loader: Importing a module file and instantiating its default export.
    validation: Checking the registry's source spec.
    models: Enums and the Pydantic discovery config model.
    config: JSON/YAML config files and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: The ``uniplugger`` command.
"""

__version__ = "0.3.0"

from uniplugger.exceptions import (  # noqa: E402
    DiscoveryAlreadyRunError,
    InvalidInputError,
    ModuleLoadError,
    NoMatchError,
    NotADirectoryError_,
    PathNotFoundError,
    UnipluggerError,
)
from uniplugger.loader import FunctionLoader, Loader, ModuleLoader  # noqa: E402
from uniplugger.models import (  # noqa: E402
    DiscoveryConfig,
    DiscoveryState,
    EmptyMatchPolicy,
    ResolverMode,
)
from uniplugger.registry import PluginRegistry  # noqa: E402
from uniplugger.resolver import PathResolver, list_folder, resolve_globs  # noqa: E402

__all__ = [
    "DiscoveryAlreadyRunError",
    "DiscoveryConfig",
    "DiscoveryState",
    "EmptyMatchPolicy",
    "FunctionLoader",
    "InvalidInputError",
    "Loader",
    "ModuleLoadError",
    "ModuleLoader",
    "NoMatchError",
    "NotADirectoryError_",
    "PathNotFoundError",
    "PathResolver",
    "PluginRegistry",
    "ResolverMode",
    "UnipluggerError",
    "list_folder",
    "resolve_globs",
]
