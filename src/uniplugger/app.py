"""Typer application and CLI entry point for uniplugger.

The ``uniplugger`` command is a small host around
:class:`~uniplugger.registry.PluginRegistry`: it supplies glob patterns
(from arguments or a config file) and reports what was resolved and
instantiated. It is handy for checking a plugin layout before wiring it
into an application::

    uniplugger resolve './plugins/*.py'
    uniplugger discover './plugins/*.py' './contrib/**/*.py' --strict
    uniplugger --json discover --folder ./plugins

:class:`~uniplugger.exceptions.UnipluggerError` failures are reported on
stderr and the process exits with the error's ``exit_code``.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Any, Optional

import typer

from uniplugger import __version__
from uniplugger.exceptions import UnipluggerError
from uniplugger.exit_codes import EXIT_GENERIC_FAILURE
from uniplugger.models import DiscoveryConfig, EmptyMatchPolicy, ResolverMode


app = typer.Typer(
    name="uniplugger",
    help="Discover and instantiate plugin modules from glob patterns.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"uniplugger {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and logging."
    ),
) -> None:
    """Install the global output manager and logging level from CLI flags."""
    from uniplugger.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    )

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _effective_config(
    patterns: Optional[list[str]],
    folder: bool,
    extensions: Optional[list[str]],
    strict: bool,
    export_name: Optional[str],
    config_path: Optional[str],
) -> DiscoveryConfig:
    from uniplugger.config import resolve_config

    return resolve_config(
        cli_patterns=patterns,
        cli_mode=ResolverMode.FOLDER if folder else None,
        cli_extensions=extensions,
        cli_empty_policy=EmptyMatchPolicy.ERROR if strict else None,
        cli_export_name=export_name,
        config_path=config_path,
    )


def _fail(exc: UnipluggerError) -> None:
    from uniplugger.output import error

    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def _class_name(plugin: Any) -> str:
    # instantiate=false in the config yields the classes themselves
    return plugin.__name__ if isinstance(plugin, type) else type(plugin).__name__


def _describe(plugin: Any) -> str:
    name = getattr(plugin, "name", None)
    return str(name) if name is not None else "-"


_PATTERNS_ARG = typer.Argument(
    None, help="Glob patterns (or folders with --folder). Defaults to the config file."
)
_FOLDER_OPT = typer.Option(
    False, "--folder", help="Treat each argument as a folder to list (non-recursive)."
)
_EXT_OPT = typer.Option(
    None, "--ext", "-e", help="Recognised module extension (repeatable). Default: .py"
)
_STRICT_OPT = typer.Option(
    False, "--strict", help="Fail when a pattern or folder yields no modules."
)
_CONFIG_OPT = typer.Option(
    None, "--config", "-c", help="Path to a uniplugger JSON/YAML config file."
)


@app.command("resolve")
def resolve_command(
    patterns: Optional[list[str]] = _PATTERNS_ARG,
    folder: bool = _FOLDER_OPT,
    extensions: Optional[list[str]] = _EXT_OPT,
    strict: bool = _STRICT_OPT,
    config_path: Optional[str] = _CONFIG_OPT,
) -> None:
    """List the plugin files the patterns resolve to, without loading them.

    Example::

        uniplugger resolve './plugins/*.py' './more/*.py'
    """
    from uniplugger.output import debug, get_output, suggest
    from uniplugger.resolver import PathResolver

    try:
        config = _effective_config(patterns, folder, extensions, strict, None, config_path)
        debug(f"Resolving {config.patterns} in {config.mode.value} mode")
        resolver = PathResolver(
            extensions=config.extensions,
            mode=config.mode,
            empty_policy=config.empty_policy,
        )
        paths = resolver.resolve(config.patterns)
    except UnipluggerError as exc:
        _fail(exc)
        return

    get_output().print_paths(paths)
    if not paths:
        suggest("No plugin modules matched. Check the patterns and --ext values.")


@app.command("discover")
def discover_command(
    patterns: Optional[list[str]] = _PATTERNS_ARG,
    folder: bool = _FOLDER_OPT,
    extensions: Optional[list[str]] = _EXT_OPT,
    strict: bool = _STRICT_OPT,
    export_name: Optional[str] = typer.Option(
        None, "--export", help="Module attribute holding the plugin class. Default: default"
    ),
    config_path: Optional[str] = _CONFIG_OPT,
) -> None:
    """Load and instantiate every plugin the patterns resolve to.

    Prints one row per plugin with its file, class and ``name`` attribute.

    Example::

        uniplugger discover './plugins/*.py'
    """
    from uniplugger.config import build_registry
    from uniplugger.output import get_output, success, suggest

    try:
        config = _effective_config(
            patterns, folder, extensions, strict, export_name, config_path
        )
        registry = build_registry(config)
        asyncio.run(registry.discover())
    except UnipluggerError as exc:
        _fail(exc)
        return

    rows = [
        [str(index), path, _class_name(plugin), _describe(plugin)]
        for index, (path, plugin) in enumerate(zip(registry.file_names, registry.plugins))
    ]
    get_output().print_plugins(rows, title=f"Plugins ({len(rows)})")
    if rows:
        success(f"Discovered {len(rows)} plugin(s)")
    else:
        suggest("No plugin modules matched. Check the patterns and --ext values.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Entry point for the ``uniplugger`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from uniplugger.output import error

        if isinstance(exc, UnipluggerError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {type(exc).__name__}: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
