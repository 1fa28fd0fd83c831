"""
plugkit - Minimal runtime plugin manager.

Resolves a declarative list of plugins, registers them in order, and tracks
the live instances until they are unloaded.

Example:
    import plugkit

    loader = plugkit.PluginLoader([
        {"identifier": "plugkit.plugins.logger", "options": {"level": "info"}},
    ])
    loader.on("loaded", lambda plugin: print(f"Plugin loaded: {plugin.name}"))
    await loader.load_plugins()
"""

__version__ = "0.1.0"

from plugkit.config import ConfigError, LoaderConfig, PluginSpec, dump_config, load_config
from plugkit.core.event_bus import EventBus, LifecycleEvent, SubscriptionError
from plugkit.plugin.contract import (
    DeregistrationError,
    Plugin,
    PluginBase,
    PluginContractError,
    PluginError,
    RegistrationError,
)
from plugkit.plugin.manager import LoadFailure, PluginLoader, PluginState
from plugkit.plugin.resolver import (
    ChainResolver,
    EntryPointResolver,
    ModuleResolver,
    ResolutionError,
    Resolver,
    StaticResolver,
)

__all__ = [
    "__version__",
    "ChainResolver",
    "ConfigError",
    "DeregistrationError",
    "EntryPointResolver",
    "EventBus",
    "LifecycleEvent",
    "LoadFailure",
    "LoaderConfig",
    "ModuleResolver",
    "Plugin",
    "PluginBase",
    "PluginContractError",
    "PluginError",
    "PluginLoader",
    "PluginSpec",
    "PluginState",
    "RegistrationError",
    "ResolutionError",
    "Resolver",
    "StaticResolver",
    "SubscriptionError",
    "dump_config",
    "load_config",
]
