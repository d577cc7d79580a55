"""
Alchemy EventBus: in-process async publish/subscribe.

Purpose
-------
Decouple side effects (notifications, analytics, projections) from the
services that cause them. Services publish only after their unit of work
has committed, so a listener never observes state that may still roll back.

Responsibilities
----------------
- Register/unregister listeners with priorities (exact or wildcard names)
- Publish events to all matching listeners in (priority, identifier) order
- Isolate listener failures: one failing listener never blocks the others
  and never propagates to the publisher
- Count published events and listener failures for introspection

Design Notes
------------
- Instance-based so tests can build a fresh bus per case
- Sync and async callbacks are both supported; sync callbacks run inline
- Designed for single-threaded asyncio usage
"""

from __future__ import annotations

import inspect
from collections import Counter
from typing import Any, Optional

from alchemy.core.event.context import apply_event_log_context
from alchemy.core.event.registry import ListenerRegistry
from alchemy.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from alchemy.core.logging.logger import get_logger

logger = get_logger(__name__)


class EventBus:
    """
    In-process EventBus.

    Examples
    --------
    >>> bus = EventBus()
    >>> bus.subscribe("rewards.*", on_rewards_event)
    >>> await bus.publish("rewards.redeemed", {"user_id": "u1", "points_spent": 500})
    """

    def __init__(self, registry: Optional[ListenerRegistry] = None) -> None:
        self._registry = registry or ListenerRegistry()
        self._published: Counter[str] = Counter()
        self._errors: Counter[str] = Counter()

    @staticmethod
    def _validate_callback_signature(callback: CallbackType) -> None:
        """
        Ensure callback accepts exactly one parameter.

        Raises:
            ValueError: If the callback signature is invalid
        """
        try:
            sig = inspect.signature(callback)
        except (TypeError, ValueError):
            # Built-ins may not expose a signature; trust the caller
            return

        params = list(sig.parameters.values())
        if len(params) != 1:
            callback_name = getattr(callback, "__qualname__", None) or getattr(
                callback, "__name__", repr(callback)
            )
            raise ValueError(
                f"Event listener must accept exactly 1 parameter (EventPayload), "
                f"got {len(params)} parameters for '{callback_name}'"
            )

    # ------------------------------------------------------------------ #
    # Subscription API
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
        allow_duplicates: bool = False,
    ) -> str:
        """
        Subscribe a callback to an event name or wildcard pattern.

        Returns:
            The listener identifier (for unsubscribing later)

        Raises:
            ValueError: If the callback does not take exactly one argument
        """
        self._validate_callback_signature(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )

        added = self._registry.add_listener(
            event_name=event_name,
            listener=listener,
            allow_duplicates=allow_duplicates,
        )

        if added:
            logger.debug(
                "EventBus: subscribed listener",
                extra={
                    "event_name": event_name,
                    "listener_id": listener.identifier,
                    "priority": listener.priority.name,
                    "once": listener.once,
                },
            )
        else:
            logger.warning(
                "EventBus: duplicate listener prevented",
                extra={
                    "event_name": event_name,
                    "listener_id": listener.identifier,
                },
            )

        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        removed = self._registry.remove_listener(
            event_name=event_name, identifier=identifier
        )
        logger.debug(
            "EventBus: unsubscribe",
            extra={
                "event_name": event_name,
                "listener_id": identifier,
                "removed": removed,
            },
        )
        return removed

    def clear(self) -> int:
        """Remove every listener and return how many were registered."""
        count = self._registry.clear_all()
        logger.info("EventBus: cleared all listeners", extra={"cleared_count": count})
        return count

    # ------------------------------------------------------------------ #
    # Publish
    # ------------------------------------------------------------------ #

    async def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Publish an event to all subscribed listeners.

        Returns:
            Results of the listeners that completed, in execution order.
            Failed listeners contribute nothing.
        """
        self._published[event_name] += 1
        apply_event_log_context(event_name, data)

        listeners = self._registry.extract_listeners_for_event(event_name)

        logger.debug(
            "EventBus: publishing event",
            extra={
                "event_name": event_name,
                "payload_keys": list(data.keys()),
                "listener_count": len(listeners),
            },
        )

        results: list[Any] = []
        for listener in listeners:
            try:
                result = listener.callback(data)
                if inspect.isawaitable(result):
                    result = await result
                results.append(result)
            except Exception as exc:
                self._errors[event_name] += 1
                logger.error(
                    "EventBus listener failed",
                    extra={
                        "event_name": event_name,
                        "listener_id": listener.identifier,
                        "priority": listener.priority.name,
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )

        return results

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        """
        Count listeners; with an event name, count those that would receive
        it (exact and wildcard).
        """
        if event_name:
            return self._registry.get_listener_count_for_event(event_name)
        return self._registry.get_total_listener_count()

    def get_all_events(self) -> list[str]:
        return self._registry.get_all_event_keys()

    def get_metrics_summary(self) -> dict[str, Any]:
        total_published = sum(self._published.values())
        total_errors = sum(self._errors.values())
        return {
            "total_events_published": total_published,
            "events_by_type": dict(self._published),
            "total_errors": total_errors,
            "errors_by_event": dict(self._errors),
            "total_listeners": self._registry.get_total_listener_count(),
        }
