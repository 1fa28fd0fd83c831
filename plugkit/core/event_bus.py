"""
Event Bus - Lifecycle notification channels for a plugin loader.

This module implements:
1. LifecycleEvent: the three named channels (loaded, error, unloaded)
2. EventBus: per-instance observer registry with synchronous dispatch

Dispatch guarantees:
- Priority-based execution (higher priority = earlier execution)
- Registration order as tie-breaker
- Observers subscribed at emission time all run before emit() returns
"""

import inspect
import logging
import warnings
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class EventBusError(Exception):
    """Base exception for event bus errors."""

    pass


class SubscriptionError(EventBusError):
    """Raised when observer subscription fails."""

    pass


class LifecycleEvent(Enum):
    """Lifecycle channels an observer can subscribe to."""

    LOADED = "loaded"
    ERROR = "error"
    UNLOADED = "unloaded"


@dataclass
class Handler:
    """
    Represents a subscribed observer.

    Attributes:
        callback: Observer taking the event payload
        priority: Higher priority executes first
        registration_order: Tie-breaker for same priority (lower = earlier)
    """

    callback: Callable[[Any], Any]
    priority: int
    registration_order: int

    def __call__(self, payload: Any) -> None:
        self.callback(payload)


def _coerce_event(event: "LifecycleEvent | str") -> LifecycleEvent:
    if isinstance(event, LifecycleEvent):
        return event
    try:
        return LifecycleEvent(event)
    except ValueError as e:
        known = ", ".join(member.value for member in LifecycleEvent)
        raise SubscriptionError(
            f"Unknown lifecycle event {event!r}. Expected one of: {known}"
        ) from e


class EventBus:
    """
    Observer registry for lifecycle events.

    Each loader owns its own bus; there is no global instance.
    """

    def __init__(self):
        self._routes: dict[LifecycleEvent, list[Handler]] = {
            event: [] for event in LifecycleEvent
        }
        self._registration_counter = 0

    def _next_registration_order(self) -> int:
        order = self._registration_counter
        self._registration_counter += 1
        return order

    def subscribe(
        self, event: LifecycleEvent | str, callback: Callable[[Any], Any], priority: int = 0
    ) -> None:
        """
        Subscribe an observer to a lifecycle channel.

        Args:
            event: Channel to subscribe to
            callback: Observer taking a single payload argument
            priority: Execution priority (higher = earlier)

        Raises:
            SubscriptionError: If the channel is unknown, or callback is not a
                synchronous callable
        """
        channel = _coerce_event(event)
        if not callable(callback):
            raise SubscriptionError(f"Observer for '{channel.value}' must be callable")
        if inspect.iscoroutinefunction(callback):
            raise SubscriptionError(
                f"Observer for '{channel.value}' must be synchronous, got coroutine function "
                f"{getattr(callback, '__qualname__', callback)!r}"
            )

        self._routes[channel].append(
            Handler(
                callback=callback,
                priority=priority,
                registration_order=self._next_registration_order(),
            )
        )

    def unsubscribe(self, event: LifecycleEvent | str, callback: Callable[[Any], Any]) -> bool:
        """
        Remove every subscription of ``callback`` on a channel.

        Returns:
            True if at least one subscription was removed
        """
        channel = _coerce_event(event)
        handlers = self._routes[channel]
        remaining = [h for h in handlers if h.callback != callback]
        self._routes[channel] = remaining
        return len(remaining) != len(handlers)

    def subscribers(self, event: LifecycleEvent | str) -> list[Callable[[Any], Any]]:
        """List observers of a channel in dispatch order."""
        return [h.callback for h in self._sorted(_coerce_event(event))]

    def clear(self) -> None:
        """Remove all subscriptions."""
        for handlers in self._routes.values():
            handlers.clear()

    def _sorted(self, channel: LifecycleEvent) -> list[Handler]:
        return sorted(self._routes[channel], key=lambda h: (-h.priority, h.registration_order))

    def emit(self, event: LifecycleEvent | str, payload: Any) -> None:
        """
        Deliver a payload to every observer of a channel.

        Observers run synchronously in priority order. A failing observer does
        not stop delivery to the others.
        """
        channel = _coerce_event(event)

        for handler in self._sorted(channel):
            try:
                handler(payload)
            except Exception as e:
                logger.exception("Observer for '%s' failed", channel.value)
                warnings.warn(
                    f"Observer failed for '{channel.value}': {e}",
                    RuntimeWarning,
                    stacklevel=2,
                )
