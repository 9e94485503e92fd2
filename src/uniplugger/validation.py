"""Validation of the source spec passed to :class:`~uniplugger.registry.PluginRegistry`."""

from __future__ import annotations

from typing import Any, Union

from uniplugger.exceptions import InvalidInputError

SourceSpec = Union[str, tuple[str, ...]]
"""A single pattern, or an ordered tuple of patterns."""


def validate_source_spec(value: Any) -> SourceSpec:
    """Check that *value* is a pattern string or a list/tuple of pattern strings.

    Never touches the filesystem. Lists are copied into a tuple so the
    registry's spec cannot be mutated by the caller afterwards.

    Args:
        value: The constructor argument supplied by the host.

    Returns:
        *value* unchanged when it is a ``str``, otherwise a tuple of its
        elements.

    Raises:
        InvalidInputError: If *value* is anything else, or if any element
            of a list/tuple is not a ``str``.
    """
    if isinstance(value, str):
        return value

    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            if not isinstance(item, str):
                raise InvalidInputError(
                    f"Pattern at index {index} must be a string, "
                    f"got {type(item).__name__}: {item!r}"
                )
        return tuple(value)

    raise InvalidInputError(
        "Please provide a pattern string or a list of pattern strings "
        f"where the plugins are to reside (got {type(value).__name__}: {value!r})"
    )


def as_pattern_list(spec: SourceSpec) -> list[str]:
    """Return *spec* as a list of patterns, preserving order."""
    if isinstance(spec, str):
        return [spec]
    return list(spec)
