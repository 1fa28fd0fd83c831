"""
Plugin Module Resolution.

This module turns plugin identifiers into constructible plugin factories.

Key features:
- importlib integration for dotted paths and .py files
- Export normalization (explicit attribute, ``default``, ``Plugin``)
- Module caching for file-based plugins
- Entry point, static mapping and chained resolution strategies
"""

import importlib
import importlib.util
import logging
import sys
from collections.abc import Callable, Iterable, Mapping
from importlib.metadata import entry_points
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol

from plugkit.plugin.contract import PluginError

logger = logging.getLogger(__name__)

PluginFactory = Callable[[], Any]

# Module attributes checked, in order, when the identifier names no attribute
EXPORT_NAMES = ("default", "Plugin")

DEFAULT_ENTRY_POINT_GROUP = "plugkit.plugins"


class ResolutionError(PluginError):
    """Raised when a plugin identifier cannot be resolved to a factory."""

    def __init__(self, identifier: str, reason: str):
        super().__init__(f"Cannot resolve plugin '{identifier}': {reason}")
        self.identifier = identifier
        self.reason = reason


class Resolver(Protocol):
    """Strategy that resolves an identifier to a plugin factory."""

    async def resolve(self, identifier: str) -> PluginFactory: ...


def normalize_export(identifier: str, target: Any, attribute: str | None = None) -> PluginFactory:
    """
    Normalize a module's export shape to a single plugin factory.

    Args:
        identifier: Identifier being resolved (for error messages)
        target: Loaded module or object
        attribute: Explicit attribute name, if the identifier named one

    Returns:
        Callable producing a plugin instance with no arguments

    Raises:
        ResolutionError: If no constructible export is found
    """
    if attribute is not None:
        try:
            factory = getattr(target, attribute)
        except AttributeError as e:
            raise ResolutionError(identifier, f"no attribute '{attribute}'") from e
    elif isinstance(target, ModuleType):
        factory = None
        for export_name in EXPORT_NAMES:
            factory = getattr(target, export_name, None)
            if factory is not None:
                break
        if factory is None:
            raise ResolutionError(
                identifier,
                f"module '{target.__name__}' exports neither {' nor '.join(EXPORT_NAMES)}",
            )
    else:
        factory = target

    if not callable(factory):
        raise ResolutionError(identifier, f"export {factory!r} is not constructible")

    return factory


# Module cache: resolved file path -> module
_module_cache: dict[Path, ModuleType] = {}


def _module_name_for(path: Path) -> str:
    return f"plugkit_plugin_{path.stem}_{abs(hash(path)):x}"


def load_file_module(identifier: str, path: Path) -> ModuleType:
    """
    Load a plugin module from a .py file.

    Args:
        identifier: Identifier being resolved (for error messages)
        path: Path to the Python source file

    Returns:
        Loaded module

    Raises:
        ResolutionError: If the file is missing or fails to execute
    """
    path = path.resolve()

    if not path.exists():
        raise ResolutionError(identifier, f"file not found: {path}")

    if path in _module_cache:
        return _module_cache[path]

    module_name = _module_name_for(path)
    try:
        spec = importlib.util.spec_from_file_location(module_name, path)

        if spec is None or spec.loader is None:
            raise ResolutionError(identifier, f"cannot create module spec for {path}")

        module = importlib.util.module_from_spec(spec)

        # Add to sys.modules before execution
        sys.modules[module_name] = module
        spec.loader.exec_module(module)

        _module_cache[path] = module
        return module

    except ResolutionError:
        raise
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise ResolutionError(identifier, f"failed to load {path}: {e}") from e


def clear_cache() -> None:
    """Drop all cached file-based plugin modules."""
    for path in list(_module_cache):
        del _module_cache[path]
        sys.modules.pop(_module_name_for(path), None)


class ModuleResolver:
    """
    Resolve identifiers through importlib.

    Accepted identifiers:
        ``package.module`` or ``package.module:Attribute`` (import path)
        ``path/to/plugin.py`` or ``path/to/plugin.py:Attribute`` (source file)

    Relative file paths are resolved against ``base_dir`` (default: cwd).
    """

    def __init__(self, base_dir: Path | None = None):
        self.base_dir = base_dir

    def _split(self, identifier: str) -> tuple[str, str | None]:
        # Windows drive letters ("C:\...") are not attribute separators
        target, sep, attribute = identifier.rpartition(":")
        if not sep or not attribute or "/" in attribute or "\\" in attribute:
            return identifier, None
        return target, attribute

    async def resolve(self, identifier: str) -> PluginFactory:
        if not identifier:
            raise ResolutionError(identifier, "empty identifier")

        target, attribute = self._split(identifier)

        if target.endswith(".py"):
            path = Path(target)
            if not path.is_absolute() and self.base_dir is not None:
                path = self.base_dir / path
            module = load_file_module(identifier, path)
        else:
            try:
                module = importlib.import_module(target)
            except ImportError as e:
                raise ResolutionError(identifier, str(e)) from e
            except Exception as e:
                raise ResolutionError(identifier, f"import failed: {e}") from e

        logger.debug("Resolved module %s for plugin '%s'", module.__name__, identifier)
        return normalize_export(identifier, module, attribute)


class EntryPointResolver:
    """Resolve identifiers as names of installed entry points in a group."""

    def __init__(self, group: str = DEFAULT_ENTRY_POINT_GROUP):
        self.group = group

    async def resolve(self, identifier: str) -> PluginFactory:
        matches = entry_points(group=self.group, name=identifier)
        if not matches:
            raise ResolutionError(
                identifier, f"no entry point named '{identifier}' in group '{self.group}'"
            )

        entry_point = next(iter(matches))
        try:
            target = entry_point.load()
        except Exception as e:
            raise ResolutionError(identifier, f"failed to load entry point: {e}") from e

        return normalize_export(identifier, target)


class StaticResolver:
    """Resolve identifiers from an in-memory mapping of factories or modules."""

    def __init__(self, factories: Mapping[str, Any] | None = None):
        self._factories: dict[str, Any] = dict(factories or {})

    def add(self, identifier: str, factory: Any) -> None:
        self._factories[identifier] = factory

    async def resolve(self, identifier: str) -> PluginFactory:
        if identifier not in self._factories:
            raise ResolutionError(identifier, "not registered with this resolver")
        return normalize_export(identifier, self._factories[identifier])


class ChainResolver:
    """Try several resolvers in order and return the first success."""

    def __init__(self, resolvers: Iterable[Resolver]):
        self.resolvers = list(resolvers)
        if not self.resolvers:
            raise ValueError("ChainResolver needs at least one resolver")

    async def resolve(self, identifier: str) -> PluginFactory:
        last_error: ResolutionError | None = None
        for resolver in self.resolvers:
            try:
                return await resolver.resolve(identifier)
            except ResolutionError as e:
                logger.debug("%s could not resolve '%s': %s", type(resolver).__name__, identifier, e.reason)
                last_error = e
        assert last_error is not None
        raise last_error
