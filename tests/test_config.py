"""Tests for uniplugger.config and the DiscoveryConfig model."""

from __future__ import annotations

import asyncio
import json
import textwrap
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from uniplugger.config import (
    build_registry,
    find_project_config,
    load_config_file,
    load_project_config,
    resolve_config,
)
from uniplugger.exceptions import ConfigError
from uniplugger.models import DiscoveryConfig, EmptyMatchPolicy, ResolverMode
from uniplugger.registry import PluginRegistry


def _write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# DiscoveryConfig model
# ---------------------------------------------------------------------------


class TestDiscoveryConfig:
    def test_defaults(self) -> None:
        config = DiscoveryConfig()
        assert config.patterns == []
        assert config.mode == ResolverMode.GLOB
        assert config.extensions == [".py"]
        assert config.empty_policy == EmptyMatchPolicy.ALLOW
        assert config.export_name == "default"
        assert config.instantiate is True

    def test_extensions_normalised(self) -> None:
        config = DiscoveryConfig(extensions=["py", ".PLUGIN", " .mod "])
        assert config.extensions == [".py", ".plugin", ".mod"]

    def test_empty_extension_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DiscoveryConfig(extensions=[""])

    def test_no_extensions_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DiscoveryConfig(extensions=[])

    def test_export_name_must_be_identifier(self) -> None:
        with pytest.raises(ValidationError):
            DiscoveryConfig(export_name="not valid")

    def test_string_enums(self) -> None:
        config = DiscoveryConfig(mode="folder", empty_policy="error")
        assert config.mode == ResolverMode.FOLDER
        assert config.empty_policy == EmptyMatchPolicy.ERROR


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


class TestLoadConfigFile:
    def test_json(self, tmp_path: Path) -> None:
        path = _write_json(
            tmp_path / "uniplugger.json",
            {"patterns": ["./plugins/*.py"], "empty_policy": "error"},
        )
        config = load_config_file(path)
        assert config.patterns == ["./plugins/*.py"]
        assert config.empty_policy == EmptyMatchPolicy.ERROR

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "uniplugger.yaml"
        path.write_text(
            textwrap.dedent("""\
                patterns:
                  - ./plugins/*.py
                  - ./contrib/**/*.py
                mode: glob
                export_name: PLUGIN_CLASS
            """),
            encoding="utf-8",
        )
        config = load_config_file(path)
        assert config.patterns == ["./plugins/*.py", "./contrib/**/*.py"]
        assert config.export_name == "PLUGIN_CLASS"

    def test_unknown_extension_falls_back_to_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "plugins.conf"
        path.write_text("patterns: ['a/*.py']\n", encoding="utf-8")
        assert load_config_file(path).patterns == ["a/*.py"]

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "uniplugger.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config_file(path) == DiscoveryConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "uniplugger.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config_file(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "uniplugger.json", ["a", "b"])
        with pytest.raises(ConfigError, match="mapping"):
            load_config_file(path)

    def test_validation_failure(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "uniplugger.json", {"mode": "sideways"})
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config_file(path)


class TestProjectConfig:
    def test_none_when_absent(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert find_project_config() is None
        assert load_project_config() is None

    def test_json_preferred_over_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(tmp_path / "uniplugger.json", {"patterns": ["json/*.py"]})
        (tmp_path / "uniplugger.yaml").write_text("patterns: ['yaml/*.py']\n")
        monkeypatch.chdir(tmp_path)
        assert find_project_config() == tmp_path / "uniplugger.json"
        assert load_project_config().patterns == ["json/*.py"]

    def test_yml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "uniplugger.yml").write_text("patterns: ['yml/*.py']\n")
        monkeypatch.chdir(tmp_path)
        assert load_project_config().patterns == ["yml/*.py"]


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults_without_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert resolve_config() == DiscoveryConfig()

    def test_project_config_used(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(tmp_path / "uniplugger.json", {"patterns": ["project/*.py"]})
        monkeypatch.chdir(tmp_path)
        assert resolve_config().patterns == ["project/*.py"]

    def test_explicit_file_beats_project(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(tmp_path / "uniplugger.json", {"patterns": ["project/*.py"]})
        explicit = _write_json(tmp_path / "other.json", {"patterns": ["explicit/*.py"]})
        monkeypatch.chdir(tmp_path)
        assert resolve_config(config_path=str(explicit)).patterns == ["explicit/*.py"]

    def test_cli_beats_files(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(
            tmp_path / "uniplugger.json",
            {"patterns": ["project/*.py"], "extensions": [".plugin"], "empty_policy": "error"},
        )
        monkeypatch.chdir(tmp_path)
        config = resolve_config(
            cli_patterns=["cli/*.py"],
            cli_mode=ResolverMode.FOLDER,
            cli_export_name="Plugin",
        )
        assert config.patterns == ["cli/*.py"]
        assert config.mode == ResolverMode.FOLDER
        assert config.export_name == "Plugin"
        # untouched values come from the file
        assert config.extensions == [".plugin"]
        assert config.empty_policy == EmptyMatchPolicy.ERROR

    def test_invalid_cli_values(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ConfigError, match="Invalid options"):
            resolve_config(cli_export_name="1bad")


# ---------------------------------------------------------------------------
# build_registry
# ---------------------------------------------------------------------------


class TestBuildRegistry:
    def test_wires_patterns(self, plugins_dir: Path) -> None:
        registry = build_registry(DiscoveryConfig(patterns=[str(plugins_dir / "*.py")]))
        assert isinstance(registry, PluginRegistry)
        asyncio.run(registry.discover())
        assert sorted(p.name for p in registry.plugins) == ["Alpha", "Beta", "Gamma"]

    def test_folder_mode_and_base_dir(self, plugins_dir: Path) -> None:
        registry = build_registry(
            DiscoveryConfig(patterns=["plugins"], mode="folder"),
            base_dir=str(plugins_dir.parent),
        )
        asyncio.run(registry.discover())
        assert len(registry.file_names) == 3

    def test_custom_export_name(self, write_plugin) -> None:
        path = write_plugin("x.py", "class X:\n    name = 'X'\n\nPlugin = X\n")
        registry = build_registry(
            DiscoveryConfig(patterns=[str(path)], export_name="Plugin")
        )
        asyncio.run(registry.discover())
        assert registry.plugins[0].name == "X"

    def test_instantiate_false_collects_classes(self, plugins_dir: Path) -> None:
        registry = build_registry(
            DiscoveryConfig(patterns=[str(plugins_dir / "*.py")], instantiate=False)
        )
        asyncio.run(registry.discover())
        assert all(isinstance(p, type) for p in registry.plugins)
        assert [p.__name__ for p in registry.plugins] == [
            "AlphaDatastore",
            "BetaDatastore",
            "GammaDatastore",
        ]
