"""
Unit tests for the logging subsystem.

Tests ambient log context, record enrichment, JSON output and the queue
listener lifecycle.
"""

import json
import logging

import pytest

from alchemy.core.logging.logger import (
    ContextFilter,
    JSONFormatter,
    LogContext,
    get_log_context,
    get_logging_health,
    set_log_context,
    setup_logging,
    shutdown_logging,
)


def _make_record(**extra):
    record = logging.LogRecord(
        name="alchemy.modules.quests.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Quest claimed: %s",
        args=("brew-1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestLogContext:
    """Test ambient context scoping."""

    def test_context_set_and_restored(self):
        """Fields apply inside the block and are gone afterwards."""
        before = get_log_context()

        with LogContext(user_id="player-1", operation="claim_quest"):
            inside = get_log_context()

        assert inside["user_id"] == "player-1"
        assert inside["operation"] == "claim_quest"
        assert inside["correlation_id"]
        assert get_log_context() == before

    async def test_async_context(self):
        """LogContext also works with async with."""
        async with LogContext(user_id="player-2", correlation_id="req-42"):
            context = get_log_context()

        assert context["correlation_id"] == "req-42"

    def test_set_log_context_merges_fields(self):
        """Fields added inside a block extend the context and vanish with it."""
        with LogContext(user_id="player-3", operation="dispatch"):
            set_log_context(event_name="quest.claimed")
            inside = get_log_context()

        assert inside["event_name"] == "quest.claimed"
        assert inside["user_id"] == "player-3"
        assert "event_name" not in get_log_context()


@pytest.mark.unit
class TestRecordEnrichment:
    """Test ContextFilter and JSONFormatter."""

    def test_filter_adds_context_fields(self):
        """Records pick up user, operation and correlation from the context."""
        record = _make_record()

        with LogContext(user_id="player-1", operation="redeem_reward", correlation_id="abc123"):
            ContextFilter().filter(record)

        assert record.user_id == "player-1"
        assert record.operation == "redeem_reward"
        assert record.correlation_id == "abc123"
        assert record.component == "alchemy"

    def test_explicit_extra_wins(self):
        """A user_id passed in extra is not overwritten by the context."""
        record = _make_record(user_id="explicit")

        with LogContext(user_id="ambient"):
            ContextFilter().filter(record)

        assert record.user_id == "explicit"

    def test_json_output(self):
        """The JSON formatter renders the message, context and extra fields."""
        # Arrange
        record = _make_record(quest_id="brew-1", xp_gained=100)
        with LogContext(user_id="player-1", operation="claim_quest"):
            ContextFilter().filter(record)

        # Act
        payload = json.loads(JSONFormatter().format(record))

        # Assert
        assert payload["message"] == "Quest claimed: brew-1"
        assert payload["level"] == "INFO"
        assert payload["user_id"] == "player-1"
        assert payload["operation"] == "claim_quest"
        assert payload["extra"] == {"quest_id": "brew-1", "xp_gained": 100}


@pytest.mark.unit
class TestLoggingLifecycle:
    """Test setup_logging and shutdown_logging."""

    def test_setup_and_shutdown(self):
        """Setup installs the queue handler once; shutdown removes it."""
        try:
            # Act
            setup_logging()
            setup_logging()
            logging.getLogger("alchemy.test").warning("queued record")
            health = get_logging_health()

            # Assert
            assert health.initialized is True
            assert health.queue_max_size > 0
            assert health.records_enqueued >= 1
            queue_handlers = [
                h for h in logging.getLogger().handlers
                if h is getattr(logging.getLogger(), "_alchemy_queue_handler", None)
            ]
            assert len(queue_handlers) == 1
        finally:
            shutdown_logging()

        assert get_logging_health().initialized is False
