"""
Loader Configuration Schema.

This module provides the declarative plugin list a loader is built from.

Key features:
- Immutable PluginSpec records (identifier + opaque options)
- LoaderConfig holding the ordered spec sequence
- Validation of raw dictionaries (e.g. parsed TOML) into specs
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ValidationError(ConfigError):
    """Raised when a configuration entry is malformed."""

    pass


@dataclass(frozen=True)
class PluginSpec:
    """
    A plugin to load.

    Attributes:
        identifier: Value handed to the resolver (import path, file, entry point)
        options: Opaque registration options, interpreted only by the plugin
    """

    identifier: str
    options: Mapping[str, Any] | None = None

    def __post_init__(self):
        if not isinstance(self.identifier, str) or not self.identifier:
            raise ValidationError(
                f"Plugin identifier must be a non-empty string, got {self.identifier!r}"
            )
        if self.options is not None:
            if not isinstance(self.options, Mapping):
                raise ValidationError(
                    f"Options for '{self.identifier}' must be a mapping, "
                    f"got {type(self.options).__name__}"
                )
            # Detached, read-only copy of the caller's mapping
            object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def registration_options(self) -> dict[str, Any] | None:
        """Return a fresh, mutable copy of the options for register()."""
        if self.options is None:
            return None
        return dict(self.options)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"identifier": self.identifier}
        if self.options is not None:
            data["options"] = dict(self.options)
        return data


def parse_spec(entry: Any, index: int | None = None) -> PluginSpec:
    """
    Build a PluginSpec from a spec, a mapping or a bare identifier string.

    ``package`` is accepted as an alias of ``identifier``.

    Args:
        entry: Raw configuration entry
        index: Position in the plugin list (for error messages)

    Returns:
        PluginSpec instance

    Raises:
        ValidationError: If the entry is malformed
    """
    where = f"plugins[{index}]" if index is not None else "plugin entry"

    if isinstance(entry, PluginSpec):
        return entry

    if isinstance(entry, str):
        return PluginSpec(entry)

    if not isinstance(entry, Mapping):
        raise ValidationError(f"{where}: expected a table, got {type(entry).__name__}")

    if "identifier" in entry and "package" in entry:
        raise ValidationError(f"{where}: use either 'identifier' or 'package', not both")

    identifier = entry.get("identifier", entry.get("package"))
    if identifier is None:
        raise ValidationError(f"{where}: missing required field 'identifier'")

    unknown = set(entry) - {"identifier", "package", "options"}
    if unknown:
        raise ValidationError(f"{where}: unknown field(s) {', '.join(sorted(unknown))}")

    try:
        return PluginSpec(identifier, entry.get("options"))
    except ValidationError as e:
        raise ValidationError(f"{where}: {e}") from e


@dataclass(frozen=True)
class LoaderConfig:
    """
    Ordered list of plugins a loader manages.

    The order of ``plugins`` is the load order.
    """

    plugins: tuple[PluginSpec, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(
            self,
            "plugins",
            tuple(parse_spec(entry, i) for i, entry in enumerate(self.plugins)),
        )

    @classmethod
    def from_specs(cls, specs: Iterable[Any]) -> "LoaderConfig":
        return cls(tuple(specs))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LoaderConfig":
        """
        Build a configuration from a parsed document.

        Args:
            data: Mapping with a ``plugins`` list

        Raises:
            ValidationError: If the document is malformed
        """
        if not isinstance(data, Mapping):
            raise ValidationError(f"Configuration must be a table, got {type(data).__name__}")

        plugins = data.get("plugins", [])
        if not isinstance(plugins, list | tuple):
            raise ValidationError("'plugins' must be an array of tables")

        return cls(tuple(plugins))

    def to_dict(self) -> dict[str, Any]:
        return {"plugins": [spec.to_dict() for spec in self.plugins]}
