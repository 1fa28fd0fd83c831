"""
Logger plugin.

Reference plugin shipped with plugkit. Registration options are merged into
the plugin state; ``level`` selects the level ``log()`` writes at.

    [[plugins]]
    identifier = "plugkit.plugins.logger"

    [plugins.options]
    level = "info"
"""

import logging
from collections.abc import Mapping
from typing import Any

from plugkit.plugin.contract import PluginBase, RegistrationError

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class LoggerPlugin(PluginBase):
    """Write messages to a named logger at a configured level."""

    name = "logger"
    version = "1.0.0"

    def __init__(self):
        super().__init__()
        self.state["level"] = "info"
        self.messages: list[str] = []
        self._logger: logging.Logger | None = None

    async def register(self, options: Mapping[str, Any] | None = None) -> None:
        options = dict(options or {})

        level = options.get("level", self.state["level"])
        if not isinstance(level, str) or level.lower() not in LEVELS:
            raise RegistrationError(
                f"Invalid log level {level!r}. Expected one of: {', '.join(LEVELS)}"
            )
        options["level"] = level.lower()

        await super().register(options)
        self._logger = logging.getLogger(self.state.get("logger_name", f"plugkit.{self.name}"))

    async def deregister(self) -> None:
        self._logger = None
        self.messages.clear()

    @property
    def level(self) -> str:
        return self.state["level"]

    def log(self, message: str) -> None:
        """Log a message at the configured level."""
        if self._logger is None:
            raise RuntimeError(f"Plugin '{self.name}' is not registered")

        self.messages.append(message)
        self._logger.log(LEVELS[self.level], message)


default = LoggerPlugin
