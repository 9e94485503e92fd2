"""Shared test fixtures for uniplugger.

Provides the fixture plugin folders, a helper for writing throwaway plugin
modules into ``tmp_path``, isolation of ``sys.modules`` from plugins
imported during a test, and the global output reset.
"""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from typing import Callable

import pytest

from uniplugger.loader import MODULE_NAME_PREFIX
from uniplugger.output import OutputFormat, OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"
PLUGINS_DIR = FIXTURES_DIR / "plugins"
OTHER_PLUGINS_DIR = FIXTURES_DIR / "other_plugins"


# ---------------------------------------------------------------------------
# Global state isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once CliRunner restores the streams.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _forget_imported_plugins() -> None:
    """Drop plugin modules imported during a test from ``sys.modules``."""
    yield
    for name in [n for n in sys.modules if n.startswith(MODULE_NAME_PREFIX)]:
        del sys.modules[name]


# ---------------------------------------------------------------------------
# Plugin folders
# ---------------------------------------------------------------------------


@pytest.fixture
def plugins_dir() -> Path:
    """Folder holding the Alpha, Beta and Gamma plugins plus a non-module file."""
    return PLUGINS_DIR


@pytest.fixture
def other_plugins_dir() -> Path:
    """Folder holding the single Delta plugin."""
    return OTHER_PLUGINS_DIR


@pytest.fixture
def write_plugin(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes a plugin module under ``tmp_path``.

    Usage::

        path = write_plugin("alpha.py", '''
            class Alpha:
                name = "Alpha"
            default = Alpha
        ''')
    """

    def _write(relative: str, source: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Output / CLI
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
