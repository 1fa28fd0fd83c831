"""
Plugin Contract.

This module defines the capability set every plugin must satisfy.

Key features:
- Structural Plugin protocol (name, version, async register)
- Optional async deregister teardown
- Exception types plugins raise from their lifecycle methods
- PluginBase convenience class for plugins that want defaults
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


class PluginError(Exception):
    """Base exception for plugin-related errors."""

    pass


class RegistrationError(PluginError):
    """Raised by a plugin that cannot initialize with the given options."""

    pass


class DeregistrationError(PluginError):
    """Raised by a plugin whose teardown failed."""

    pass


class PluginContractError(PluginError):
    """Raised when an instantiated object does not satisfy the Plugin contract."""

    pass


@runtime_checkable
class Plugin(Protocol):
    """
    Capability set of a plugin.

    Attributes:
        name: Registry key, non-empty and unique among loaded plugins
        version: Informational version string

    A plugin may also define ``async def deregister(self) -> None``. Plugins
    without it have no teardown requirement.
    """

    name: str
    version: str

    async def register(self, options: Mapping[str, Any] | None = None) -> None: ...


class PluginBase:
    """
    Optional base class for plugins.

    Stores registration options in ``state`` and provides a no-op teardown.
    Subclasses set ``name`` and ``version`` as class attributes.
    """

    name: str = ""
    version: str = "0.0.0"

    def __init__(self):
        self.state: dict[str, Any] = {}

    async def register(self, options: Mapping[str, Any] | None = None) -> None:
        if options:
            self.state.update(options)

    async def deregister(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, version={self.version!r})"


def has_deregister(plugin: Any) -> bool:
    """Check whether a plugin instance exposes a callable deregister()."""
    return callable(getattr(plugin, "deregister", None))


def check_plugin(plugin: Any) -> None:
    """
    Verify that an instantiated object satisfies the Plugin contract.

    Args:
        plugin: Object produced by a resolved factory

    Raises:
        PluginContractError: If name, version or register is missing or invalid
    """
    name = getattr(plugin, "name", None)
    if not isinstance(name, str) or not name:
        raise PluginContractError(
            f"{type(plugin).__name__} must expose a non-empty string 'name', got {name!r}"
        )

    version = getattr(plugin, "version", None)
    if not isinstance(version, str):
        raise PluginContractError(
            f"Plugin '{name}' must expose a string 'version', got {version!r}"
        )

    if not callable(getattr(plugin, "register", None)):
        raise PluginContractError(f"Plugin '{name}' does not define register()")
