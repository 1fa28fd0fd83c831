"""
Plugin Loader.

This module provides plugin lifecycle management.

Key features:
- Sequential, ordered loading of configured plugin specs
- Registry of live plugin instances keyed by plugin name
- Per-plugin state tracking
- loaded / error / unloaded lifecycle notifications
- Single and bulk unload with deregister() teardown

Every load failure is both notified on the ``error`` channel and re-raised
to the caller. Two plugins declaring the same name overwrite each other in
the registry: the later load wins.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from plugkit.config.schema import LoaderConfig, PluginSpec, parse_spec
from plugkit.core.event_bus import EventBus, LifecycleEvent
from plugkit.plugin.contract import check_plugin, has_deregister
from plugkit.plugin.resolver import ModuleResolver, Resolver

logger = logging.getLogger(__name__)


class PluginState(Enum):
    """Plugin state enumeration."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    REGISTERED = "registered"
    LOAD_FAILED = "load_failed"
    UNLOADING = "unloading"


@dataclass(frozen=True)
class LoadFailure:
    """
    Payload of the ``error`` channel.

    Attributes:
        identifier: Identifier of the spec that failed to load
        error: The exception that caused the failure
    """

    identifier: str
    error: BaseException


class PluginLoader:
    """
    Plugin lifecycle manager.

    Resolves, instantiates and registers the configured plugins in order and
    keeps the resulting instances until they are unloaded.

    Example:
        loader = PluginLoader([{"identifier": "plugkit.plugins.logger",
                                "options": {"level": "info"}}])
        loader.on("error", lambda failure: print(failure.identifier))
        await loader.load_plugins()
        loader.get_plugin("logger").log("hello")
    """

    def __init__(
        self,
        config: LoaderConfig | Iterable[PluginSpec | Mapping[str, Any] | str] = (),
        resolver: Resolver | None = None,
        event_bus: EventBus | None = None,
    ):
        """
        Initialize PluginLoader.

        Args:
            config: LoaderConfig or an iterable of specs / spec mappings
            resolver: Resolution strategy (default: ModuleResolver)
            event_bus: Observer registry (default: a new EventBus)
        """
        if not isinstance(config, LoaderConfig):
            config = LoaderConfig.from_specs(config)

        self._specs: tuple[PluginSpec, ...] = config.plugins
        self.resolver: Resolver = resolver if resolver is not None else ModuleResolver()
        self.events = event_bus if event_bus is not None else EventBus()

        self._plugins: dict[str, Any] = {}
        self._states: dict[str, PluginState] = {}
        # plugin name -> identifier of the spec it was loaded from
        self._sources: dict[str, str] = {}

    @property
    def specs(self) -> tuple[PluginSpec, ...]:
        """Configured specs in load order."""
        return self._specs

    def _set_state(self, name: str, state: PluginState) -> None:
        """Record a state under both the plugin name and its spec identifier."""
        self._states[name] = state
        self._states[self._sources[name]] = state

    # Subscriptions
    def on(
        self,
        event: LifecycleEvent | str,
        callback: Callable[[Any], Any] | None = None,
        *,
        priority: int = 0,
    ):
        """
        Subscribe an observer to a lifecycle channel.

        Can be called directly or used as a decorator:

            @loader.on("loaded")
            def announce(plugin):
                print(f"Plugin loaded: {plugin.name}")
        """
        if callback is None:

            def decorator(func: Callable[[Any], Any]) -> Callable[[Any], Any]:
                self.events.subscribe(event, func, priority)
                return func

            return decorator

        self.events.subscribe(event, callback, priority)
        return callback

    def off(self, event: LifecycleEvent | str, callback: Callable[[Any], Any]) -> bool:
        """Unsubscribe an observer. Returns True if it was subscribed."""
        return self.events.unsubscribe(event, callback)

    # Loading
    async def load_plugins(self) -> None:
        """
        Load every configured spec, in order, one at a time.

        Raises:
            Exception: The first load failure; later specs are not attempted
        """
        for spec in self._specs:
            await self.load_plugin(spec)

    async def load_plugin(self, spec: PluginSpec | Mapping[str, Any] | str) -> Any:
        """
        Resolve, instantiate and register a single plugin.

        Args:
            spec: Plugin spec (or a mapping / identifier accepted by parse_spec)

        Returns:
            The registered plugin instance

        Raises:
            ResolutionError: If the identifier cannot be resolved
            PluginContractError: If the instance does not satisfy the contract
            Exception: Whatever the plugin's constructor or register() raised
        """
        spec = parse_spec(spec)
        identifier = spec.identifier
        self._states[identifier] = PluginState.LOADING

        try:
            factory = await self.resolver.resolve(identifier)
            plugin = factory()
            check_plugin(plugin)
            await plugin.register(spec.registration_options())
        except Exception as e:
            # An earlier instance from this identifier stays registered
            if identifier in self._sources.values():
                self._states[identifier] = PluginState.REGISTERED
            else:
                self._states[identifier] = PluginState.LOAD_FAILED
            logger.error("Failed to load plugin '%s': %s", identifier, e)
            self.events.emit(LifecycleEvent.ERROR, LoadFailure(identifier, e))
            raise

        name = plugin.name
        if name in self._plugins:
            logger.warning(
                "Plugin '%s' from '%s' replaces the instance already registered under that name",
                name,
                identifier,
            )
            previous = self._sources[name]
            if previous != identifier:
                self._states[previous] = PluginState.UNLOADED

        self._plugins[name] = plugin
        self._sources[name] = identifier
        self._set_state(name, PluginState.REGISTERED)
        logger.info("Loaded plugin '%s' v%s", name, plugin.version)

        self.events.emit(LifecycleEvent.LOADED, plugin)
        return plugin

    # Unloading
    async def unload_plugin(self, name: str) -> None:
        """
        Unload a registered plugin.

        Unknown names are ignored. If deregister() fails the plugin stays
        registered and the exception propagates.

        Args:
            name: Name of plugin to unload
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            return

        self._set_state(name, PluginState.UNLOADING)

        if has_deregister(plugin):
            try:
                await plugin.deregister()
            except Exception:
                self._set_state(name, PluginState.REGISTERED)
                logger.error("Failed to deregister plugin '%s'", name)
                raise

        del self._plugins[name]
        self._set_state(name, PluginState.UNLOADED)
        del self._sources[name]
        logger.info("Unloaded plugin '%s'", name)

        self.events.emit(LifecycleEvent.UNLOADED, plugin)

    async def unload_plugins(self) -> None:
        """
        Deregister every plugin, in registry order, then clear the registry.

        The first failing deregister() aborts the pass and propagates; the
        registry is left as it was. No ``unloaded`` events are emitted.
        """
        for name, plugin in list(self._plugins.items()):
            if has_deregister(plugin):
                self._set_state(name, PluginState.UNLOADING)
                try:
                    await plugin.deregister()
                except Exception:
                    self._set_state(name, PluginState.REGISTERED)
                    logger.error("Failed to deregister plugin '%s', aborting unload", name)
                    raise

        for name in self._plugins:
            self._set_state(name, PluginState.UNLOADED)
        count = len(self._plugins)
        self._plugins.clear()
        self._sources.clear()
        logger.info("Unloaded %d plugin(s)", count)

    # Queries
    def get_plugin(self, name: str) -> Any | None:
        """
        Get a registered plugin.

        Args:
            name: Plugin name

        Returns:
            Plugin instance, or None if not registered
        """
        return self._plugins.get(name)

    def list_plugins(self) -> list[Any]:
        """Snapshot of registered plugin instances, in registration order."""
        return list(self._plugins.values())

    def state(self, key: str) -> PluginState:
        """
        Get the lifecycle state of a spec identifier or plugin name.

        An identifier whose instance is still registered reports REGISTERED,
        even after a later load of the same identifier failed.

        Returns:
            PluginState, UNLOADED for keys the loader has never seen
        """
        return self._states.get(key, PluginState.UNLOADED)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    async def __aenter__(self) -> "PluginLoader":
        await self.load_plugins()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.unload_plugins()
