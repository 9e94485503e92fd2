"""Loaders turn a resolved plugin file into a plugin instance.

:class:`Loader` is the capability the registry depends on. The default
:class:`ModuleLoader` imports a Python source file by path and instantiates
its *default export*, the class bound to a module-level ``default`` name::

    # plugins/alpha.py
    class AlphaDatastore:
        name = "Alpha"

    default = AlphaDatastore

Hosts that locate or build plugins differently can pass any callable to
:class:`FunctionLoader`, or subclass :class:`Loader` directly.
"""

from __future__ import annotations

import hashlib
import importlib.machinery
import importlib.util
import logging
import os
import re
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from types import ModuleType
from typing import Any, Generic, TypeVar

from uniplugger.exceptions import ModuleLoadError
from uniplugger.models import DEFAULT_EXPORT_NAME

logger = logging.getLogger(__name__)

T = TypeVar("T")

MODULE_NAME_PREFIX = "uniplugger_plugin_"
"""Prefix of the ``sys.modules`` key given to each imported plugin file."""


class Loader(ABC, Generic[T]):
    """Produces one plugin instance from one resolved file path."""

    @abstractmethod
    def load(self, path: str) -> T:
        """Load the plugin at *path* and return its instance.

        Raises:
            ModuleLoadError: If the plugin cannot be produced.
        """
        ...


class FunctionLoader(Loader[T]):
    """Adapts a plain ``Callable[[str], T]`` to the :class:`Loader` interface.

    Exceptions raised by *func* are wrapped in :class:`ModuleLoadError`.
    """

    def __init__(self, func: Callable[[str], T]) -> None:
        self._func = func

    def load(self, path: str) -> T:
        try:
            return self._func(path)
        except ModuleLoadError:
            raise
        except Exception as exc:
            raise ModuleLoadError(path, f"{type(exc).__name__}: {exc}") from exc


def module_name_for(path: str) -> str:
    """Return a ``sys.modules`` key unique to the absolute *path*.

    Two plugin files sharing a stem in different folders get distinct
    names, so neither replaces the other in ``sys.modules``.
    """
    absolute = os.path.abspath(path)
    stem = os.path.splitext(os.path.basename(absolute))[0]
    safe_stem = re.sub(r"\W", "_", stem)
    digest = hashlib.sha256(absolute.encode("utf-8")).hexdigest()[:10]
    return f"{MODULE_NAME_PREFIX}{safe_stem}_{digest}"


class ModuleLoader(Loader[Any]):
    """Imports a Python file by path and instantiates its default export.

    Args:
        export_name: Module attribute holding the plugin class.
            Defaults to ``"default"``.
        instantiate: When false, the exported class itself is returned
            instead of an instance of it.
    """

    def __init__(
        self, export_name: str = DEFAULT_EXPORT_NAME, instantiate: bool = True
    ) -> None:
        self.export_name = export_name
        self.instantiate = instantiate

    def load(self, path: str) -> Any:
        """Import *path*, read its default export and call it with no arguments.

        With ``instantiate=False`` the class is returned uncalled.

        Raises:
            ModuleLoadError: If the file cannot be imported, has no default
                export, the export is not a class, or its constructor
                raises.
        """
        module = self.import_module(path)
        try:
            instance = self._instantiate(path, module)
        except ModuleLoadError:
            # Don't leave a half-usable plugin module behind
            sys.modules.pop(module.__name__, None)
            raise

        logger.debug("Loaded %r from %s", instance, path)
        return instance

    def _instantiate(self, path: str, module: ModuleType) -> Any:
        plugin_class = getattr(module, self.export_name, None)
        if plugin_class is None:
            raise ModuleLoadError(path, f"module has no '{self.export_name}' export")
        if not isinstance(plugin_class, type):
            raise ModuleLoadError(
                path,
                f"'{self.export_name}' export is not a class "
                f"(got {type(plugin_class).__name__})",
            )
        if not self.instantiate:
            return plugin_class

        try:
            return plugin_class()
        except Exception as exc:
            raise ModuleLoadError(
                path,
                f"{plugin_class.__name__}() raised {type(exc).__name__}: {exc}",
            ) from exc

    def import_module(self, path: str) -> ModuleType:
        """Execute the source file at *path* as a fresh module.

        The module is registered in ``sys.modules`` while it executes (so
        dataclasses and relative lookups inside it work) and removed again
        if execution fails.

        Raises:
            ModuleLoadError: If no import spec can be built or the module
                body raises.
        """
        module_name = module_name_for(path)
        # Explicit loader: suffixes other than .py are still Python source
        loader = importlib.machinery.SourceFileLoader(module_name, path)
        spec = importlib.util.spec_from_file_location(module_name, path, loader=loader)
        if spec is None or spec.loader is None:
            raise ModuleLoadError(path, "not an importable Python module")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            sys.modules.pop(module_name, None)
            raise ModuleLoadError(path, f"{type(exc).__name__}: {exc}") from exc

        return module
