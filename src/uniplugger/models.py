"""Pydantic models and enums shared across uniplugger modules.

* :class:`ResolverMode` -- whether plugin locations are glob patterns or
  plain folders.
* :class:`EmptyMatchPolicy` -- what to do when a location yields no module
  files.
* :class:`DiscoveryState` -- the two states of a
  :class:`~uniplugger.registry.PluginRegistry`.
* :class:`DiscoveryConfig` -- everything needed to build a registry, loaded
  from ``uniplugger.json`` / ``uniplugger.yaml`` or assembled from CLI flags.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field, field_validator


class ResolverMode(str, enum.Enum):
    """How the entries of a registry's source spec are interpreted."""

    GLOB = "glob"
    FOLDER = "folder"


class EmptyMatchPolicy(str, enum.Enum):
    """Behaviour when a pattern or folder contributes no module files.

    ``ALLOW`` treats it as an empty contribution. ``ERROR`` raises
    :class:`~uniplugger.exceptions.NoMatchError`.
    """

    ALLOW = "allow"
    ERROR = "error"


class DiscoveryState(enum.Enum):
    """Run-once lifecycle state of a plugin registry."""

    NOT_DISCOVERED = "not_discovered"
    DISCOVERED = "discovered"


DEFAULT_EXTENSIONS = (".py",)
"""File suffixes recognised as plugin modules."""

DEFAULT_EXPORT_NAME = "default"
"""Module attribute holding a plugin module's default export."""


class DiscoveryConfig(BaseModel):
    """Settings for one discovery run.

    Example::

        DiscoveryConfig(
            patterns=["./plugins/*.py", "./vendor/plugins/**/*.py"],
            empty_policy="error",
        )
    """

    patterns: list[str] = Field(
        default_factory=list, description="Glob patterns or folders to search"
    )
    mode: ResolverMode = Field(
        default=ResolverMode.GLOB, description="Interpret patterns as globs or folders"
    )
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        description="File suffixes recognised as plugin modules",
    )
    empty_policy: EmptyMatchPolicy = Field(
        default=EmptyMatchPolicy.ALLOW,
        description="allow: zero matches is fine; error: zero matches raises",
    )
    export_name: str = Field(
        default=DEFAULT_EXPORT_NAME,
        description="Module attribute holding the plugin class",
    )
    instantiate: bool = Field(
        default=True,
        description="Call the exported class; false collects the classes themselves",
    )

    @field_validator("extensions")
    @classmethod
    def _normalise_extensions(cls, value: list[str]) -> list[str]:
        normalised: list[str] = []
        for ext in value:
            ext = ext.strip()
            if not ext:
                raise ValueError("extensions must not contain empty strings")
            if not ext.startswith("."):
                ext = "." + ext
            normalised.append(ext.lower())
        if not normalised:
            raise ValueError("at least one extension is required")
        return normalised

    @field_validator("export_name")
    @classmethod
    def _check_export_name(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"'{value}' is not a valid Python identifier")
        return value
