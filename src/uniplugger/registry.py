"""Plugin registry -- the one-shot discovery lifecycle.

:class:`PluginRegistry` holds a source spec (one glob pattern or a list of
them), and on :meth:`~PluginRegistry.discover` resolves the spec to module
files and loads each file into a plugin instance. The registry is generic
over the plugin type so hosts get a typed collection::

    class Datastore(Protocol):
        name: str

    registry: PluginRegistry[Datastore] = PluginRegistry("./plugins/*.py")
    await registry.discover()
    for path, plugin in zip(registry.file_names, registry.plugins):
        print(path, plugin.name)

The type parameter documents the expected capabilities; it is not checked
at runtime.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from typing import Any, Generic, Optional, TypeVar

from uniplugger.exceptions import DiscoveryAlreadyRunError, ModuleLoadError
from uniplugger.loader import Loader, ModuleLoader
from uniplugger.models import DiscoveryState
from uniplugger.resolver import PathResolver
from uniplugger.validation import SourceSpec, as_pattern_list, validate_source_spec

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PluginRegistry(Generic[T]):
    """Discovers plugin modules by pattern and holds their instances.

    Args:
        source_spec: A glob pattern, or a list/tuple of patterns (folders
            when *resolver* is in folder mode).
        resolver: Path resolver to use. Defaults to a glob-mode
            :class:`~uniplugger.resolver.PathResolver` for ``.py`` files.
        loader: Loader turning each path into an instance. Defaults to
            :class:`~uniplugger.loader.ModuleLoader`.

    Raises:
        InvalidInputError: If *source_spec* is not a string or a sequence
            of strings. Raised before any filesystem access.
    """

    def __init__(
        self,
        source_spec: Any,
        *,
        resolver: Optional[PathResolver] = None,
        loader: Optional[Loader[T]] = None,
    ) -> None:
        self._source_spec: SourceSpec = validate_source_spec(source_spec)
        self._resolver = resolver if resolver is not None else PathResolver()
        self._loader: Loader[T] = loader if loader is not None else ModuleLoader()
        self._state = DiscoveryState.NOT_DISCOVERED
        self._file_names: tuple[str, ...] = ()
        self._plugins: tuple[T, ...] = ()

    @property
    def source_spec(self) -> SourceSpec:
        """The validated pattern or tuple of patterns."""
        return self._source_spec

    @property
    def discovery_state(self) -> DiscoveryState:
        return self._state

    @property
    def file_names(self) -> tuple[str, ...]:
        """Absolute paths of the loaded plugin files, in load order."""
        return self._file_names

    @property
    def plugins(self) -> tuple[T, ...]:
        """Plugin instances; ``plugins[i]`` was loaded from ``file_names[i]``."""
        return self._plugins

    async def discover(self) -> None:
        """Resolve the source spec and instantiate every matching plugin.

        The registry is marked as discovered on entry, before any work
        starts. A second call, including one made while the first is still
        awaiting, raises :class:`DiscoveryAlreadyRunError`. A failed
        discovery is not retried: construct a new registry instead.

        Files are loaded one after another in resolution order. Nothing is
        published unless every file loads.

        Raises:
            DiscoveryAlreadyRunError: If called more than once.
            PathNotFoundError: Folder mode, the folder is missing.
            NotADirectoryError_: Folder mode, the location is a file.
            NoMatchError: An entry matched nothing under the ``error``
                empty-match policy.
            ModuleLoadError: A resolved file could not be loaded; carries
                the offending path.
        """
        if self._state is DiscoveryState.DISCOVERED:
            raise DiscoveryAlreadyRunError()
        self._state = DiscoveryState.DISCOVERED

        patterns = as_pattern_list(self._source_spec)
        file_names = await asyncio.to_thread(self._resolver.resolve, patterns)
        logger.debug("Resolved %d plugin file(s) from %r", len(file_names), patterns)

        plugins: list[T] = []
        for path in file_names:
            plugins.append(self._load(path))
            # Yield between loads so other tasks can run
            await asyncio.sleep(0)

        self._file_names = tuple(file_names)
        self._plugins = tuple(plugins)
        logger.info("Discovered %d plugin(s)", len(self._plugins))

    def discover_sync(self) -> None:
        """Run :meth:`discover` to completion on a fresh event loop.

        For hosts without a running loop; it cannot be called from inside
        one.
        """
        asyncio.run(self.discover())

    def _load(self, path: str) -> T:
        try:
            return self._loader.load(path)
        except ModuleLoadError:
            raise
        except Exception as exc:
            raise ModuleLoadError(path, f"{type(exc).__name__}: {exc}") from exc

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[T]:
        return iter(self._plugins)

    def __repr__(self) -> str:
        return (
            f"PluginRegistry(source_spec={self._source_spec!r}, "
            f"state={self._state.value}, plugins={len(self._plugins)})"
        )
