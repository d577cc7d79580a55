"""Apply event metadata to the logging context while listeners run."""

from __future__ import annotations

from typing import Any

from alchemy.core.logging.logger import get_logger, set_log_context

logger = get_logger(__name__)


def apply_event_log_context(event_name: str, payload: dict[str, Any]) -> None:
    """
    Enrich subsequent log records with the event name and payload keys.

    Only keys are recorded, never values. Failures are logged at debug level
    and never break dispatch.
    """
    try:
        set_log_context(event_name=event_name, event_keys=list(payload.keys()))
    except Exception as exc:
        logger.debug(
            "Failed to apply event log context",
            extra={
                "event_name": event_name,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
