"""Exception hierarchy for uniplugger.

All exceptions inherit from :class:`UnipluggerError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`uniplugger.exit_codes`.
Library callers catch the specific subclasses; the ``uniplugger`` command in
:func:`uniplugger.app.main` catches ``UnipluggerError`` and exits with the
matching code.

Subclass hierarchy::

    UnipluggerError               (exit 1)
    +-- InvalidInputError         (exit 2)
    +-- PathNotFoundError         (exit 4)
    +-- NotADirectoryError_       (exit 4)
    +-- NoMatchError              (exit 4)
    +-- DiscoveryAlreadyRunError  (exit 5)
    +-- ModuleLoadError           (exit 10)
    +-- ConfigError               (exit 1)
"""

from __future__ import annotations

from uniplugger.exit_codes import (
    EXIT_DISCOVERY_STATE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MODULE_LOAD_ERROR,
    EXIT_PATH_ERROR,
)


class UnipluggerError(Exception):
    """Base exception for all uniplugger errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`uniplugger.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidInputError(UnipluggerError):
    """Raised when a registry is constructed with something other than a pattern or list of patterns."""

    exit_code = EXIT_INVALID_USAGE


class PathNotFoundError(UnipluggerError):
    """Raised in folder mode when the plugin folder does not exist."""

    exit_code = EXIT_PATH_ERROR

    def __init__(self, path: str):
        super().__init__(f"Plugin folder '{path}' doesn't exist")
        self.path = path


class NotADirectoryError_(UnipluggerError):
    """Raised in folder mode when the plugin location is a file.

    Named with a trailing underscore to avoid shadowing the built-in
    ``NotADirectoryError``.
    """

    exit_code = EXIT_PATH_ERROR

    def __init__(self, path: str):
        super().__init__(f"'{path}' does not appear to be a folder")
        self.path = path


class NoMatchError(UnipluggerError):
    """Raised when a pattern matches no module files and empty matches are not allowed."""

    exit_code = EXIT_PATH_ERROR

    def __init__(self, pattern: str):
        super().__init__(f"Pattern '{pattern}' did not match any plugin modules")
        self.pattern = pattern


class DiscoveryAlreadyRunError(UnipluggerError):
    """Raised when ``discover()`` is called more than once on the same registry."""

    exit_code = EXIT_DISCOVERY_STATE_ERROR

    def __init__(self) -> None:
        super().__init__(
            "discover() has already been called. "
            "You cannot discover plugins more than once per registry"
        )


class ModuleLoadError(UnipluggerError):
    """Raised when a resolved plugin file cannot be imported or instantiated.

    The original exception, if any, is chained as ``__cause__``.

    Attributes:
        path: Absolute path of the offending plugin file.
        reason: Short description of what went wrong.
    """

    exit_code = EXIT_MODULE_LOAD_ERROR

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to load plugin '{path}': {reason}")
        self.path = path
        self.reason = reason


class ConfigError(UnipluggerError):
    """Raised for configuration problems (unreadable file, invalid JSON/YAML, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE
