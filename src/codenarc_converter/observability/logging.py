"""
codenarc-converter — structured run logging

File: src/codenarc_converter/observability/logging.py
Last updated: 2026-10-19

Purpose
- Write one JSON object per log record to ``<log_dir>/<run_id>/converter.jsonl``.
- Route structlog component events (parser, merger) into the same sink.

Functional requirements
- Emitting threads never block on file I/O; records pass through a bounded queue and are
  dropped (and counted) when it is full.
- Fields bound with ``correlation_scope`` become top-level keys of every record in scope.
- ``source_file`` and ``rule`` passed as event fields are promoted to top-level keys; any
  other event fields are nested under ``fields``.
"""

from __future__ import annotations

import atexit
import json
import logging
import logging.handlers
import queue
import threading
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Final

import structlog

from codenarc_converter.constants import DEFAULT_LOG_DIR

_DEFAULT_LOGGER_NAME: Final[str] = "codenarc_converter"
_DEFAULT_LOG_FILENAME: Final[str] = "converter.jsonl"
_PROMOTED_FIELDS: Final[frozenset[str]] = frozenset({"run_id", "source_file", "rule"})
_RECORD_ATTRIBUTES: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {
    "asctime",
    "correlation",
    "message",
}

_active_lock = threading.Lock()
_active_handle: StructuredLoggingHandle | None = None


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Settings for one run's JSON-lines log."""

    run_id: str
    base_log_dir: Path | str = Path(DEFAULT_LOG_DIR)
    logger_name: str = _DEFAULT_LOGGER_NAME
    level: int | str = "INFO"
    queue_size: int = 4096
    log_filename: str = _DEFAULT_LOG_FILENAME
    log_to_console: bool = False


class _CorrelatingQueueHandler(logging.handlers.QueueHandler):
    """Snapshot the emitting context's correlation fields; never block on a full queue."""

    def __init__(self, log_queue: queue.Queue[logging.LogRecord]) -> None:
        super().__init__(log_queue)
        self.pending = log_queue
        self.dropped = 0
        self._dropped_lock = threading.Lock()

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        record.correlation = structlog.contextvars.get_contextvars()
        return super().prepare(record)

    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            with self._dropped_lock:
                self.dropped += 1


class _JsonLineFormatter(logging.Formatter):
    def __init__(self, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=UTC)
        event: dict[str, object] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": self._run_id,
        }
        correlation = getattr(record, "correlation", None)
        if isinstance(correlation, Mapping):
            event.update(correlation)

        fields: dict[str, object] = {}
        for key, value in vars(record).items():
            if key in _RECORD_ATTRIBUTES or key.startswith("_"):
                continue
            if key in _PROMOTED_FIELDS:
                event[key] = value
            else:
                fields[key] = value
        if fields:
            event["fields"] = fields

        return json.dumps(
            event, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
        )


class StructuredLoggingHandle:
    """A live run log; ``shutdown`` drains the queue and closes the sinks."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        run_id: str,
        log_path: Path,
        queue_handler: _CorrelatingQueueHandler,
        listener: logging.handlers.QueueListener,
        sinks: tuple[logging.Handler, ...],
    ) -> None:
        self.logger = logger
        self.run_id = run_id
        self.log_path = log_path
        self._queue_handler = queue_handler
        self._listener = listener
        self._sinks = sinks
        self._lock = threading.Lock()
        self._closed = False

    @property
    def dropped_records(self) -> int:
        return self._queue_handler.dropped

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    def shutdown(self, *, timeout_seconds: float = 2.0) -> None:
        with self._lock:
            if self._closed:
                return
            # The listener's stop sentinel needs a free queue slot.
            deadline = time.monotonic() + timeout_seconds
            while self._queue_handler.pending.unfinished_tasks and time.monotonic() < deadline:
                time.sleep(0.01)
            self._listener.stop()

            self.logger.removeHandler(self._queue_handler)
            self._queue_handler.close()
            for sink in self._sinks:
                sink.close()
            structlog.reset_defaults()
            self._closed = True


def setup_structured_logging(config: LoggingConfig) -> StructuredLoggingHandle:
    """Start a queue-backed JSON-lines log for ``config.run_id`` and route structlog into it."""

    global _active_handle

    run_id = config.run_id.strip()
    if not run_id:
        raise ValueError("run_id must not be empty")
    if config.queue_size < 1:
        raise ValueError("queue_size must be >= 1")
    filename = config.log_filename.strip()
    if not filename or Path(filename).name != filename:
        raise ValueError(f"log_filename must be a bare file name, got {config.log_filename!r}")
    logger_name = config.logger_name.strip()
    if not logger_name:
        raise ValueError("logger_name must not be empty")
    level = _level_number(config.level)

    shutdown_logging()

    log_path = Path(config.base_log_dir) / run_id / filename
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = _JsonLineFormatter(run_id)
    sinks: list[logging.Handler] = [logging.FileHandler(log_path, encoding="utf-8")]
    if config.log_to_console:
        sinks.append(logging.StreamHandler())
    for sink in sinks:
        sink.setFormatter(formatter)

    logger = logging.getLogger(logger_name)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()
    logger.setLevel(level)
    logger.propagate = False

    log_queue: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=config.queue_size)
    queue_handler = _CorrelatingQueueHandler(log_queue)
    listener = logging.handlers.QueueListener(log_queue, *sinks)
    listener.start()
    logger.addHandler(queue_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handle = StructuredLoggingHandle(
        logger=logger,
        run_id=run_id,
        log_path=log_path,
        queue_handler=queue_handler,
        listener=listener,
        sinks=tuple(sinks),
    )
    with _active_lock:
        _active_handle = handle
    atexit.unregister(shutdown_logging)
    atexit.register(shutdown_logging)
    return handle


def setup_logging(
    observability: Mapping[str, object] | None = None,
    *,
    run_id: str,
    log_dir: Path | str | None = None,
    logger_name: str = _DEFAULT_LOGGER_NAME,
    level: int | str | None = None,
) -> StructuredLoggingHandle:
    """Start the run log from an ``[observability]`` config section.

    ``log_dir`` and ``level`` override the section (``--verbose`` passes ``DEBUG``).
    """

    section = dict(observability or {})
    if log_dir is None:
        log_dir = str(section.get("log_dir", DEFAULT_LOG_DIR))
    if level is None:
        level = str(section.get("log_level", "INFO"))
    return setup_structured_logging(
        LoggingConfig(
            run_id=run_id,
            base_log_dir=log_dir,
            logger_name=logger_name,
            level=level,
            log_to_console=bool(section.get("log_to_console", False)),
        )
    )


def shutdown_logging(handle: StructuredLoggingHandle | None = None) -> None:
    """Shut down ``handle``, or the active run log when no handle is given."""

    global _active_handle
    with _active_lock:
        target = handle if handle is not None else _active_handle
        if target is _active_handle:
            _active_handle = None
    if target is not None:
        target.shutdown()


def get_active_logging_handle() -> StructuredLoggingHandle | None:
    with _active_lock:
        return _active_handle


@contextmanager
def correlation_scope(**fields: str | None) -> Iterator[None]:
    """Bind correlation fields (``run_id``, ``source_file``, ``rule``) to records in scope."""

    bound = {key: value.strip() for key, value in fields.items() if value and value.strip()}
    with structlog.contextvars.bound_contextvars(**bound):
        yield


def _level_number(level: int | str) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelNamesMapping().get(level.strip().upper())
    if number is None:
        raise ValueError(f"unsupported logging level {level!r}")
    return number


__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "correlation_scope",
    "get_active_logging_handle",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
