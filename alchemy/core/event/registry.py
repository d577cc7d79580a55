"""
ListenerRegistry: storage and lookup for EventBus listeners.

Exact event names and wildcard patterns are stored separately. Lookups
return listeners sorted by (priority, identifier) so execution order is
deterministic, and one-shot listeners are pruned in the same step that
returns them.

Not thread-safe: designed for single-threaded asyncio usage where dict
mutations are atomic between awaits.
"""

from __future__ import annotations

from alchemy.core.event.router import EventRouter
from alchemy.core.event.types import EventListener


def _sort_key(listener: EventListener) -> tuple[int, str]:
    return (listener.priority.value, listener.identifier)


class ListenerRegistry:
    """Registry for event listeners (exact and wildcard)."""

    def __init__(self, router: EventRouter | None = None) -> None:
        self._router = router or EventRouter()
        self._listeners: dict[str, list[EventListener]] = {}
        self._wildcard_listeners: list[tuple[str, EventListener]] = []

    def add_listener(
        self,
        event_name: str,
        listener: EventListener,
        *,
        allow_duplicates: bool,
    ) -> bool:
        """
        Register a listener for an event or wildcard pattern.

        Returns:
            False if the same (event_name, identifier) was already
            registered and duplicates are not allowed, True otherwise.
        """
        if "*" in event_name:
            if not allow_duplicates and any(
                existing.identifier == listener.identifier
                for pattern, existing in self._wildcard_listeners
                if pattern == event_name
            ):
                return False
            self._wildcard_listeners.append((event_name, listener))
            self._wildcard_listeners.sort(key=lambda pl: _sort_key(pl[1]))
            return True

        listeners = self._listeners.setdefault(event_name, [])
        if not allow_duplicates and any(
            existing.identifier == listener.identifier for existing in listeners
        ):
            return False

        listeners.append(listener)
        listeners.sort(key=_sort_key)
        return True

    def remove_listener(self, event_name: str, identifier: str) -> bool:
        removed = False

        if event_name in self._listeners:
            original_count = len(self._listeners[event_name])
            self._listeners[event_name] = [
                lst for lst in self._listeners[event_name] if lst.identifier != identifier
            ]
            removed = len(self._listeners[event_name]) < original_count
            if not self._listeners[event_name]:
                del self._listeners[event_name]

        original_wc_count = len(self._wildcard_listeners)
        self._wildcard_listeners = [
            (pattern, lst)
            for pattern, lst in self._wildcard_listeners
            if not (pattern == event_name and lst.identifier == identifier)
        ]
        return removed or len(self._wildcard_listeners) < original_wc_count

    def clear_all(self) -> int:
        """Remove all listeners and return the previous total count."""
        total = self.get_total_listener_count()
        self._listeners.clear()
        self._wildcard_listeners.clear()
        return total

    def extract_listeners_for_event(self, event_name: str) -> list[EventListener]:
        """
        Collect every listener for an event and prune once=True listeners.

        Returns:
            Exact and matching wildcard listeners sorted by
            (priority, identifier).
        """
        result: list[EventListener] = []

        kept_exact: list[EventListener] = []
        for listener in self._listeners.get(event_name, []):
            result.append(listener)
            if not listener.once:
                kept_exact.append(listener)

        if kept_exact:
            self._listeners[event_name] = kept_exact
        elif event_name in self._listeners:
            del self._listeners[event_name]

        kept_wildcards: list[tuple[str, EventListener]] = []
        for pattern, listener in self._wildcard_listeners:
            if self._router.matches(event_name, pattern):
                result.append(listener)
                if not listener.once:
                    kept_wildcards.append((pattern, listener))
            else:
                kept_wildcards.append((pattern, listener))
        self._wildcard_listeners = kept_wildcards

        result.sort(key=_sort_key)
        return result

    def get_listener_count_for_event(self, event_name: str) -> int:
        exact = len(self._listeners.get(event_name, []))
        wildcard = sum(
            1
            for pattern, _ in self._wildcard_listeners
            if self._router.matches(event_name, pattern)
        )
        return exact + wildcard

    def get_total_listener_count(self) -> int:
        return sum(len(lst) for lst in self._listeners.values()) + len(
            self._wildcard_listeners
        )

    def get_all_event_keys(self) -> list[str]:
        keys = set(self._listeners.keys())
        keys.update(pattern for pattern, _ in self._wildcard_listeners)
        return sorted(keys)
