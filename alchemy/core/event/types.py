"""
Core event types for the Alchemy EventBus.

Priority Levels
---------------
- CRITICAL (0): runs first. Use for state that other listeners read.
- HIGH (10): follow-up bookkeeping that must see CRITICAL effects.
- NORMAL (50): notifications and projections.
- LOW (100): logging and analytics.

All tiers run sequentially in priority order after the publishing
transaction has committed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

# Payloads should be JSON-serializable for best observability
EventPayload = dict[str, Any]


class ListenerPriority(Enum):
    """Priority levels for event listeners (lower value runs earlier)."""

    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100


CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]


@dataclass(slots=True, frozen=True)
class EventListener:
    """
    Represents a registered event listener.

    Attributes
    ----------
    callback:
        Async or sync callable invoked with the event payload.
    priority:
        ListenerPriority determining execution order.
    identifier:
        Unique string identifier for deduplication and unsubscription.
    once:
        If True, the listener is removed before its first execution.
    """

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False

    @classmethod
    def from_callback(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority,
        identifier: Optional[str],
        once: bool,
    ) -> EventListener:
        """
        Create an EventListener, deriving the identifier from the callback
        when none is given.

        >>> EventListener.from_callback("quest.claimed", on_claim,
        ...     ListenerPriority.NORMAL, None, False).identifier
        'mymodule.on_claim@quest.claimed'
        """
        if identifier is None:
            module = getattr(callback, "__module__", "unknown")
            qualname = getattr(
                callback, "__qualname__", getattr(callback, "__name__", "callback")
            )
            identifier = f"{module}.{qualname}@{event_name}"

        return cls(
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )
