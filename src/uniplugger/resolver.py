"""Resolve plugin locations into an ordered list of module files.

Two modes are supported, selected by :class:`~uniplugger.models.ResolverMode`:

* **Glob mode** (default) -- each entry is a glob pattern such as
  ``./plugins/*.py`` or ``plugins/**/*.py``. Matches for one pattern are
  sorted so the output is stable across filesystems.
* **Folder mode** -- each entry is a directory whose immediate children are
  listed (non-recursive).

In both modes only regular files with a recognised extension are kept,
relative entries are anchored at the working directory (or an explicit
``base_dir``), and a path emitted by an earlier entry is never emitted
again. The result is a list of absolute paths in first-match order.
"""

from __future__ import annotations

import glob
import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Optional

from uniplugger.exceptions import NoMatchError, NotADirectoryError_, PathNotFoundError
from uniplugger.models import DEFAULT_EXTENSIONS, EmptyMatchPolicy, ResolverMode

logger = logging.getLogger(__name__)


def _absolute(entry: str, base_dir: Optional[str]) -> str:
    """Anchor *entry* at *base_dir* (or the cwd) unless it is already absolute."""
    entry = os.path.expanduser(entry)
    if not os.path.isabs(entry) and base_dir is not None:
        entry = os.path.join(base_dir, entry)
    return os.path.abspath(entry)


def _anchored_pattern(pattern: str, base_dir: Optional[str]) -> str:
    """Anchor a relative glob *pattern* at *base_dir* (or the cwd).

    The anchor is escaped so brackets or wildcards in the directory name
    are matched literally.
    """
    pattern = os.path.expanduser(pattern)
    if os.path.isabs(pattern):
        return pattern
    root = os.path.abspath(base_dir) if base_dir is not None else os.getcwd()
    return os.path.join(glob.escape(root), pattern)


def _is_module_file(path: str, extensions: Sequence[str]) -> bool:
    return os.path.isfile(path) and os.path.splitext(path)[1].lower() in extensions


def _check_empty(entry: str, count: int, empty_policy: EmptyMatchPolicy) -> None:
    if count:
        return
    if empty_policy == EmptyMatchPolicy.ERROR:
        raise NoMatchError(entry)
    logger.info("'%s' did not match any plugin modules", entry)


def resolve_globs(
    patterns: Iterable[str],
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    empty_policy: EmptyMatchPolicy = EmptyMatchPolicy.ALLOW,
    base_dir: Optional[str] = None,
) -> list[str]:
    """Expand glob *patterns* into de-duplicated absolute module paths.

    ``**`` matches any number of directories. Patterns are processed in the
    order given; a file matched by an earlier pattern is skipped when a
    later one matches it again.

    Args:
        patterns: Glob patterns, relative or absolute.
        extensions: Recognised module suffixes (with leading dot).
        empty_policy: Whether a pattern with no module matches is an error.
        base_dir: Anchor for relative patterns. Defaults to the cwd.

    Returns:
        Absolute file paths in first-match order.

    Raises:
        NoMatchError: If a pattern matches nothing and *empty_policy* is
            :attr:`~uniplugger.models.EmptyMatchPolicy.ERROR`.
    """
    seen: set[str] = set()
    resolved: list[str] = []

    for pattern in patterns:
        absolute_pattern = _anchored_pattern(pattern, base_dir)
        matches = [
            os.path.abspath(match)
            for match in sorted(glob.glob(absolute_pattern, recursive=True))
            if _is_module_file(match, extensions)
        ]
        logger.debug("Pattern '%s' matched %d module(s)", pattern, len(matches))
        _check_empty(pattern, len(matches), empty_policy)

        for match in matches:
            if match in seen:
                continue
            seen.add(match)
            resolved.append(match)

    return resolved


def list_folder(
    folder: str,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    base_dir: Optional[str] = None,
) -> list[str]:
    """List module files directly inside *folder* (non-recursive).

    Args:
        folder: Directory to scan, relative or absolute.
        extensions: Recognised module suffixes (with leading dot).
        base_dir: Anchor for a relative *folder*. Defaults to the cwd.

    Returns:
        Sorted absolute paths of the matching files.

    Raises:
        PathNotFoundError: If *folder* does not exist.
        NotADirectoryError_: If *folder* exists but is not a directory.
    """
    path = Path(_absolute(folder, base_dir))
    if not path.exists():
        raise PathNotFoundError(str(path))
    if not path.is_dir():
        raise NotADirectoryError_(str(path))

    return sorted(
        str(child)
        for child in path.iterdir()
        if _is_module_file(str(child), extensions)
    )


class PathResolver:
    """Configured resolver used by :class:`~uniplugger.registry.PluginRegistry`.

    Args:
        extensions: Recognised module suffixes. Defaults to ``(".py",)``.
        mode: Glob or folder interpretation of the source spec.
        empty_policy: Whether an entry contributing no modules is an error.
        base_dir: Anchor for relative entries. ``None`` means the working
            directory at the time :meth:`resolve` runs.
    """

    def __init__(
        self,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
        mode: ResolverMode = ResolverMode.GLOB,
        empty_policy: EmptyMatchPolicy = EmptyMatchPolicy.ALLOW,
        base_dir: Optional[str] = None,
    ) -> None:
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.mode = ResolverMode(mode)
        self.empty_policy = EmptyMatchPolicy(empty_policy)
        self.base_dir = base_dir

    def resolve(self, entries: Iterable[str]) -> list[str]:
        """Resolve *entries* according to :attr:`mode`.

        Returns:
            De-duplicated absolute module paths in first-match order.
        """
        if self.mode == ResolverMode.GLOB:
            return resolve_globs(
                entries,
                extensions=self.extensions,
                empty_policy=self.empty_policy,
                base_dir=self.base_dir,
            )

        seen: set[str] = set()
        resolved: list[str] = []
        for folder in entries:
            files = list_folder(folder, extensions=self.extensions, base_dir=self.base_dir)
            logger.debug("Folder '%s' holds %d module(s)", folder, len(files))
            _check_empty(folder, len(files), self.empty_policy)
            for path in files:
                if path not in seen:
                    seen.add(path)
                    resolved.append(path)
        return resolved

    def __repr__(self) -> str:
        return (
            f"PathResolver(mode={self.mode.value!r}, extensions={self.extensions!r}, "
            f"empty_policy={self.empty_policy.value!r})"
        )
