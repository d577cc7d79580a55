"""
Alchemy Logging

Purpose
-------
One logging stack for the engine. Records are handed to a bounded queue by
the root logger and written by a background listener thread, so services
never block the event loop on console or file I/O.

What a record carries
---------------------
- user_id and operation, taken from the ambient LogContext unless the
  call site passes them in `extra`
- correlation_id, shared by every record of one player operation
- component, the top-level package of the emitting logger
- any other `extra={...}` fields, rendered under "extra" in JSON output

Output
------
Plain text on the console in development, JSON in production or when
LOG_JSON is set. LOG_TO_FILE adds a JSON file under LOGS_DIR that rotates
at midnight UTC.

Dependencies
------------
- alchemy.core.config.config.Config
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from alchemy.core.config.config import Config

_log_context: ContextVar[Dict[str, Any]] = ContextVar("alchemy_log_context", default={})

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "alchemy.json.log"
QUEUE_MAX_SIZE = 10_000


def _log_level() -> int:
    return getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO)


def _use_json() -> bool:
    if Config.LOG_JSON is None:
        return Config.is_production()
    return bool(Config.LOG_JSON)


# ============================================================================
# Queue Health
# ============================================================================


@dataclass(slots=True)
class _QueueCounters:
    enqueued: int = 0
    dropped: int = 0
    handler_errors: int = 0


@dataclass(frozen=True, slots=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_enqueued: int
    records_dropped: int
    listener_errors: int


_counters = _QueueCounters()
_log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
_listener: Optional[QueueListener] = None


# ============================================================================
# Filters & Formatters
# ============================================================================


class ContextFilter(logging.Filter):
    """Copy the ambient LogContext onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get({})

        # Explicit extra={...} wins over the ambient context
        if not hasattr(record, "user_id"):
            record.user_id = context.get("user_id", "N/A")
        if not hasattr(record, "operation"):
            record.operation = context.get("operation", "N/A")

        record.correlation_id = context.get("correlation_id", "N/A")
        record.component = record.name.split(".", 1)[0]
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record; unknown attributes go under "extra"."""

    RESERVED = frozenset(
        vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
        | {"message", "asctime"}
    )
    CONTEXT_FIELDS = ("user_id", "operation", "correlation_id", "component")

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for field in self.CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value not in (None, "N/A"):
                payload[field] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self.RESERVED
            and key not in self.CONTEXT_FIELDS
            and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, ensure_ascii=False, default=str)


# ============================================================================
# Queue Handler & Listener
# ============================================================================


class AlchemyQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _counters.enqueued += 1
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _counters.dropped += 1
            sys.stderr.write("Alchemy logging queue full; dropping log record.\n")


class AlchemyQueueListener(QueueListener):
    def handleError(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _counters.handler_errors += 1
        sys.stderr.write("Alchemy logging handler error while processing record.\n")


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if _use_json():
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler() -> logging.Handler:
    logs_dir = Path(Config.LOGS_DIR).resolve()
    logs_dir.mkdir(parents=True, exist_ok=True)

    handler = TimedRotatingFileHandler(
        filename=str(logs_dir / LOG_FILE_NAME),
        when="midnight",
        backupCount=1,
        encoding="utf-8",
        utc=True,
    )
    handler.setFormatter(JSONFormatter())
    return handler


# ============================================================================
# Lifecycle
# ============================================================================


def setup_logging() -> None:
    """Install the queue handler on the root logger. Safe to call twice."""
    global _counters, _log_queue, _listener

    root = logging.getLogger()
    if getattr(root, "_alchemy_logging_initialized", False):
        return

    level = _log_level()
    root.setLevel(level)
    _counters = _QueueCounters()

    handlers: List[logging.Handler] = [_console_handler()]
    if Config.LOG_TO_FILE:
        handlers.append(_file_handler())
    for handler in handlers:
        handler.setLevel(level)

    _log_queue = queue.Queue(QUEUE_MAX_SIZE)
    _listener = AlchemyQueueListener(_log_queue, *handlers, respect_handler_level=True)
    _listener.start()

    queue_handler = AlchemyQueueHandler(_log_queue)
    queue_handler.setLevel(level)
    # Handler filters see records propagated from child loggers
    queue_handler.addFilter(ContextFilter())
    root.addHandler(queue_handler)

    for noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root._alchemy_logging_initialized = True  # type: ignore[attr-defined]
    root._alchemy_queue_handler = queue_handler  # type: ignore[attr-defined]

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": Config.ENVIRONMENT,
            "log_level": logging.getLevelName(level),
            "json": _use_json(),
            "to_file": bool(Config.LOG_TO_FILE),
        },
    )


def shutdown_logging() -> None:
    """Drain the queue, stop the listener and close its handlers."""
    global _log_queue, _listener

    root = logging.getLogger()
    if not getattr(root, "_alchemy_logging_initialized", False):
        return

    logging.getLogger(__name__).info("Shutting down logging")

    queue_handler = getattr(root, "_alchemy_queue_handler", None)
    if queue_handler is not None:
        root.removeHandler(queue_handler)
        queue_handler.close()

    if _listener is not None:
        _listener.stop()
        for handler in _listener.handlers:
            handler.close()
        _listener = None

    root._alchemy_logging_initialized = False  # type: ignore[attr-defined]
    root._alchemy_queue_handler = None  # type: ignore[attr-defined]
    _log_queue = None


def get_logging_health() -> LoggingHealth:
    return LoggingHealth(
        initialized=bool(getattr(logging.getLogger(), "_alchemy_logging_initialized", False)),
        queue_size=_log_queue.qsize() if _log_queue is not None else 0,
        queue_max_size=_log_queue.maxsize if _log_queue is not None else 0,
        records_enqueued=_counters.enqueued,
        records_dropped=_counters.dropped,
        listener_errors=_counters.handler_errors,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


class LogContext:
    """
    Scope user_id, operation and a correlation id to a block of code.

    >>> with LogContext(user_id="u-1", operation="claim_quest"):
    ...     log.info("Quest claimed")
    """

    def __init__(
        self,
        user_id: Optional[str] = None,
        operation: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context: Dict[str, Any] = {
            "user_id": str(user_id) if user_id is not None else "N/A",
            "operation": operation or "N/A",
            "correlation_id": correlation_id or uuid.uuid4().hex[:8],
            **extra,
        }
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def get_log_context() -> Dict[str, Any]:
    return dict(_log_context.get({}))


def set_log_context(**fields: Any) -> None:
    """Merge fields into the current task's log context."""
    _log_context.set({**_log_context.get({}), **fields})


setup_logging()
