"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~uniplugger.exceptions.UnipluggerError` subclass.
Shell wrappers and CI scripts can inspect the exit code of the
``uniplugger`` command to tell a bad pattern from a broken plugin without
parsing stderr.

Example::

    $ uniplugger discover './plugins/*.py'
    $ echo $?
    10   # EXIT_MODULE_LOAD_ERROR -- a plugin module failed to import
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or malformed patterns."""

EXIT_PATH_ERROR = 4
"""A plugin location was missing, was not a directory, or matched nothing."""

EXIT_DISCOVERY_STATE_ERROR = 5
"""Discovery was requested twice on the same registry."""

EXIT_MODULE_LOAD_ERROR = 10
"""A plugin module failed to import, export, or instantiate."""
