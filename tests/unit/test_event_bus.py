"""
Unit tests for the EventBus.

Tests subscription, wildcard routing, priority ordering, one-shot listeners
and listener isolation.
"""

import pytest

from alchemy.core.event import EventBus, ListenerPriority
from alchemy.core.event.router import EventRouter


@pytest.fixture
def bus():
    return EventBus()


@pytest.mark.unit
class TestEventRouter:
    """Test wildcard pattern matching."""

    @pytest.mark.parametrize(
        "event_name,pattern,expected",
        [
            ("rewards.redeemed", "rewards.redeemed", True),
            ("rewards.redeemed", "rewards.*", True),
            ("quest.claimed", "rewards.*", False),
            ("quest.claimed", "*", True),
            ("player.leveled_up", "*.leveled_up", True),
            ("rewards.points_added", "rewards.*_added", True),
            ("ab", "ab*b", False),
        ],
    )
    def test_matches(self, event_name, pattern, expected):
        """Prefix, suffix and middle pieces must all fit the event name."""
        assert EventRouter().matches(event_name, pattern) is expected


@pytest.mark.unit
class TestSubscribe:
    """Test listener registration."""

    def test_callback_must_take_one_argument(self, bus):
        """Listeners receive exactly one payload argument."""

        def bad_listener(event, extra):
            return None

        with pytest.raises(ValueError):
            bus.subscribe("quest.claimed", bad_listener)

    def test_duplicate_identifier_ignored(self, bus):
        """Subscribing the same callback twice registers it once."""

        def on_claim(event):
            return None

        first = bus.subscribe("quest.claimed", on_claim)
        second = bus.subscribe("quest.claimed", on_claim)

        assert first == second
        assert bus.get_listener_count("quest.claimed") == 1

    def test_unsubscribe_removes_listener(self, bus):
        """Unsubscribed listeners no longer count."""
        identifier = bus.subscribe("quest.claimed", lambda event: None, identifier="x")

        assert bus.unsubscribe("quest.claimed", identifier) is True
        assert bus.get_listener_count() == 0
        assert bus.unsubscribe("quest.claimed", identifier) is False

    def test_clear_returns_count(self, bus):
        """clear() drops every listener and reports how many there were."""
        bus.subscribe("quest.claimed", lambda event: None, identifier="a")
        bus.subscribe("rewards.*", lambda event: None, identifier="b")

        assert bus.clear() == 2
        assert bus.get_all_events() == []


@pytest.mark.unit
class TestPublish:
    """Test event delivery."""

    async def test_exact_and_wildcard_listeners_receive_payload(self, bus):
        """Both an exact and a matching wildcard listener see the event."""
        # Arrange
        seen = []
        bus.subscribe("rewards.redeemed", lambda event: seen.append(("exact", event)), identifier="exact")
        bus.subscribe("rewards.*", lambda event: seen.append(("wild", event)), identifier="wild")
        bus.subscribe("quest.*", lambda event: seen.append(("other", event)), identifier="other")

        # Act
        await bus.publish("rewards.redeemed", {"user_id": "u-1"})

        # Assert
        assert sorted(tag for tag, _ in seen) == ["exact", "wild"]
        assert all(event == {"user_id": "u-1"} for _, event in seen)

    async def test_priority_order(self, bus):
        """Lower priority values run first regardless of subscription order."""
        order = []
        bus.subscribe("quest.claimed", lambda e: order.append("low"), identifier="low",
                      priority=ListenerPriority.LOW)
        bus.subscribe("quest.claimed", lambda e: order.append("critical"), identifier="critical",
                      priority=ListenerPriority.CRITICAL)
        bus.subscribe("quest.claimed", lambda e: order.append("normal"), identifier="normal")

        await bus.publish("quest.claimed", {})

        assert order == ["critical", "normal", "low"]

    async def test_async_listener_awaited(self, bus):
        """Coroutine listeners are awaited and their results returned."""

        async def on_claim(event):
            return event["xp_gained"] * 2

        bus.subscribe("quest.claimed", on_claim)

        results = await bus.publish("quest.claimed", {"xp_gained": 50})

        assert results == [100]

    async def test_once_listener_runs_once(self, bus):
        """A once=True listener is removed after its first delivery."""
        calls = []
        bus.subscribe("player.leveled_up", lambda e: calls.append(e), identifier="once", once=True)

        await bus.publish("player.leveled_up", {"new_level": 3})
        await bus.publish("player.leveled_up", {"new_level": 4})

        assert calls == [{"new_level": 3}]
        assert bus.get_listener_count("player.leveled_up") == 0

    async def test_failing_listener_isolated(self, bus):
        """One listener raising does not stop the others or the publisher."""
        # Arrange
        delivered = []

        def broken(event):
            raise RuntimeError("listener failure")

        bus.subscribe("rewards.redeemed", broken, priority=ListenerPriority.HIGH)
        bus.subscribe("rewards.redeemed", lambda e: delivered.append(e) or "ok", identifier="ok")

        # Act
        results = await bus.publish("rewards.redeemed", {"reward_id": "r-1"})

        # Assert
        assert results == ["ok"]
        assert delivered == [{"reward_id": "r-1"}]
        metrics = bus.get_metrics_summary()
        assert metrics["total_errors"] == 1
        assert metrics["errors_by_event"] == {"rewards.redeemed": 1}

    async def test_publish_without_listeners(self, bus):
        """Publishing with nobody listening is counted and returns nothing."""
        results = await bus.publish("quest.claimed", {})

        assert results == []
        assert bus.get_metrics_summary()["events_by_type"] == {"quest.claimed": 1}
