"""
Tracing Sinks.

Handlers and formatters materialized by ``Tracing.init``. Formatting stays
inside ``logging.Formatter`` subclasses; the handlers only decide where the
rendered bytes go and how writes are serialized.

Key Components:
    - SharedWriter: Mutex-guarded buffered file shared by the file sink and
      the crash hook.
    - SharedFileHandler: File sink; one lock/write/flush/unlock per event.
    - CompactFormatter: Single-line rendering for standard output.
    - PrettyFormatter: Multi-line decorated rendering for the log file.
"""

from __future__ import annotations

import logging
import sys
import threading
from pathlib import Path
from typing import Any, Final

# Attributes every LogRecord carries; anything else arrived through ``extra``
_RECORD_ATTRS: Final[frozenset[str]] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

_DATE_FORMAT: Final[str] = "%Y-%m-%dT%H:%M:%S"


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    """
    Extract the structured key-value fields attached to a record.

    Args:
        record: Log record, possibly carrying ``extra`` attributes.

    Returns:
        Mapping of field name to value, in insertion order.
    """
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


# FORMATTERS
class CompactFormatter(logging.Formatter):
    """Single-line ``timestamp LEVEL target: message key=value`` rendering."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s.%(msecs)03d %(levelname)5s %(name)s: %(message)s",
            datefmt=_DATE_FORMAT,
        )

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        fields = record_fields(record)
        if not fields:
            return formatted

        rendered = " ".join(f"{k}={v}" for k, v in fields.items())
        # Keep exception text (if any) after the fields line
        head, sep, tail = formatted.partition("\n")
        return f"{head} {rendered}{sep}{tail}"


class PrettyFormatter(logging.Formatter):
    """
    Multi-line decorated rendering used by the file sink.

    Layout::

          2024-05-01T10:00:00.123  INFO utility.jobs: message
            with key: value
            at path/to/module.py:42
            on MainThread

    Exception information, when present, follows indented below the location.
    """

    INDENT: Final[str] = "    "

    def __init__(self) -> None:
        super().__init__(datefmt=_DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        timestamp = f"{self.formatTime(record, self.datefmt)}.{int(record.msecs):03d}"

        lines = [f"  {timestamp} {record.levelname:>5} {record.name}: {record.message}"]
        for key, value in record_fields(record).items():
            lines.append(f"{self.INDENT}with {key}: {value}")
        lines.append(f"{self.INDENT}at {record.pathname}:{record.lineno}")
        lines.append(f"{self.INDENT}on {record.threadName}")

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            lines.extend(f"{self.INDENT}{line}" for line in record.exc_text.splitlines())
        if record.stack_info:
            lines.extend(f"{self.INDENT}{line}" for line in record.stack_info.splitlines())

        return "\n".join(lines)


# SHARED WRITER
class SharedWriter:
    """
    Buffered log file behind a non-reentrant mutex.

    Created once per ``init`` and shared by two owners: the file sink and
    the crash hook. The file is created (truncated) on construction.

    Attributes:
        path (Path): Location of the log file.
        lock (threading.Lock): Mutual-exclusion handle for every write.
    """

    def __init__(self, path: Path) -> None:
        """
        Creates the file, truncating any existing content.

        Args:
            path: Destination file. Its parent directory must already exist.

        Raises:
            OSError: If the file cannot be created.
        """
        self.path = Path(path)
        self.lock = threading.Lock()
        self._fh = open(self.path, "wb")

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def write(self, data: bytes) -> None:
        """Blocking acquire, write all bytes, flush, release."""
        with self.lock:
            self.write_locked(data)

    def write_locked(self, data: bytes) -> None:
        """Write and flush; the caller must hold ``lock``."""
        self._fh.write(data)
        self._fh.flush()

    def try_acquire(self) -> bool:
        """Acquire ``lock`` without blocking. Returns False if it is held."""
        return self.lock.acquire(blocking=False)

    def release(self) -> None:
        self.lock.release()

    def flush(self) -> None:
        with self.lock:
            if not self._fh.closed:
                self._fh.flush()

    def close(self) -> None:
        with self.lock:
            self._fh.close()


# HANDLERS
class SharedFileHandler(logging.Handler):
    """
    File sink writing through a SharedWriter.

    Each event is rendered first, then written and flushed while holding the
    writer lock, so a single event is never interleaved with another thread's
    output or with a crash report.
    """

    terminator = "\n"

    def __init__(self, writer: SharedWriter, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.writer = writer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            if not msg.endswith(self.terminator):
                msg += self.terminator
            self.writer.write(msg.encode("utf-8", errors="replace"))
        except RecursionError:  # pragma: no cover
            raise
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        # Events are flushed on write; the writer is owned jointly with the crash hook
        if not self.writer.closed:
            self.writer.flush()


def make_stdout_handler(level: int = logging.NOTSET) -> logging.StreamHandler:
    """
    Builds the standard-output sink.

    Writes are not synchronized beyond the handler's own lock; no ANSI
    colors are emitted whatever the terminal.

    Args:
        level: Minimum level accepted by the handler.

    Returns:
        Configured ``logging.StreamHandler`` bound to ``sys.stdout``.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(CompactFormatter())
    return handler


def make_file_handler(writer: SharedWriter, level: int = logging.NOTSET) -> SharedFileHandler:
    """Builds the file sink around an already created SharedWriter."""
    handler = SharedFileHandler(writer, level)
    handler.setFormatter(PrettyFormatter())
    return handler
