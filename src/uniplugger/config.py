"""Discovery configuration files and precedence resolution.

A project can pin where its plugins live in a ``uniplugger.json``,
``uniplugger.yaml`` or ``uniplugger.yml`` file in the working directory::

    # uniplugger.yaml
    patterns:
      - ./plugins/*.py
      - ./contrib/**/*.py
    empty_policy: error

:func:`resolve_config` merges, from highest to lowest precedence, CLI
arguments, an explicit ``--config`` file, the project file, and the model
defaults. :func:`build_registry` turns the result into a ready
:class:`~uniplugger.registry.PluginRegistry`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from uniplugger.exceptions import ConfigError
from uniplugger.loader import ModuleLoader
from uniplugger.models import DiscoveryConfig, EmptyMatchPolicy, ResolverMode
from uniplugger.registry import PluginRegistry
from uniplugger.resolver import PathResolver

PROJECT_CONFIG_FILENAMES = ("uniplugger.json", "uniplugger.yaml", "uniplugger.yml")


def _parse_content(content: str, hint: str = "") -> Any:
    """Parse *content* as JSON, or as YAML when hinted or when JSON fails."""
    if hint != "yaml":
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise ConfigError(f"Invalid JSON: {exc}") from exc
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML: {exc}") from exc


def load_config_file(path: str | Path) -> DiscoveryConfig:
    """Load a :class:`~uniplugger.models.DiscoveryConfig` from a JSON or YAML file.

    The format is chosen by extension (``.json``, ``.yaml``, ``.yml``) and
    falls back to trying JSON then YAML. An empty file yields the defaults.

    Raises:
        ConfigError: If the file is missing, unreadable, unparsable, or
            fails validation.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigError(f"Config file not found: {file_path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {file_path}: {exc}") from exc

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    data = _parse_content(content, hint=hint) if content.strip() else {}
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Config file {file_path} must contain a mapping (got {type(data).__name__})"
        )

    try:
        return DiscoveryConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config at {file_path}: {exc}") from exc


def find_project_config(directory: Optional[Path] = None) -> Optional[Path]:
    """Return the first project config file found in *directory* (default cwd)."""
    base = directory or Path.cwd()
    for name in PROJECT_CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_project_config() -> Optional[DiscoveryConfig]:
    """Load the project config from the working directory, if there is one.

    Raises:
        ConfigError: If the file exists but is invalid.
    """
    path = find_project_config()
    if path is None:
        return None
    return load_config_file(path)


def resolve_config(
    cli_patterns: Optional[list[str]] = None,
    cli_mode: Optional[ResolverMode] = None,
    cli_extensions: Optional[list[str]] = None,
    cli_empty_policy: Optional[EmptyMatchPolicy] = None,
    cli_export_name: Optional[str] = None,
    config_path: Optional[str] = None,
) -> DiscoveryConfig:
    """Build the effective configuration.

    Precedence (highest first):

        1. CLI arguments (any ``cli_*`` value that is not ``None``/empty)
        2. Explicit config file (*config_path*)
        3. Project config in the working directory
        4. Defaults

    Raises:
        ConfigError: If a config file is invalid or the merged values fail
            validation.
    """
    if config_path is not None:
        base = load_config_file(config_path)
    else:
        base = load_project_config() or DiscoveryConfig()

    overrides: dict[str, Any] = {}
    if cli_patterns:
        overrides["patterns"] = list(cli_patterns)
    if cli_mode is not None:
        overrides["mode"] = cli_mode
    if cli_extensions:
        overrides["extensions"] = list(cli_extensions)
    if cli_empty_policy is not None:
        overrides["empty_policy"] = cli_empty_policy
    if cli_export_name is not None:
        overrides["export_name"] = cli_export_name

    if not overrides:
        return base
    try:
        return DiscoveryConfig.model_validate({**base.model_dump(), **overrides})
    except ValidationError as exc:
        raise ConfigError(f"Invalid options: {exc}") from exc


def build_registry(
    config: DiscoveryConfig, base_dir: Optional[str] = None
) -> PluginRegistry[Any]:
    """Create a :class:`~uniplugger.registry.PluginRegistry` wired from *config*."""
    resolver = PathResolver(
        extensions=config.extensions,
        mode=config.mode,
        empty_policy=config.empty_policy,
        base_dir=base_dir,
    )
    loader = ModuleLoader(export_name=config.export_name, instantiate=config.instantiate)
    return PluginRegistry(list(config.patterns), resolver=resolver, loader=loader)
