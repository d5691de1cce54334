"""
Crash Hook Integration.

Extends (never replaces) the interpreter's uncaught-exception reporting so
that a crashing program leaves its stack in the log file. Both entry points
are chained: ``sys.excepthook`` for the main thread and
``threading.excepthook`` for worker threads.

The hook only ever *tries* to take the log file lock. A thread that dies
while it is in the middle of writing a log event still holds that lock, and
blocking on it would hang the process.
"""

from __future__ import annotations

import logging
import sys
import threading
import traceback
from types import TracebackType
from typing import Callable

from ..constants import LOGGER_NAME
from .sinks import SharedWriter

logger = logging.getLogger(LOGGER_NAME)

BACKTRACE_HEADER = "Stack backtrace:"

ExceptHook = Callable[[type[BaseException], BaseException, TracebackType | None], None]


def format_backtrace(tb: TracebackType | None) -> str:
    """
    Render every frame of a traceback, whatever ``sys.tracebacklimit`` says.

    Args:
        tb: Traceback of the uncaught exception. When None (exception never
            raised), the current call stack is rendered instead.

    Returns:
        Formatted frames, one ``File "...", line N, in func`` block each.
    """
    if tb is None:
        frames = traceback.StackSummary.extract(
            traceback.walk_stack(sys._getframe(1)), limit=sys.maxsize
        )
        frames.reverse()
    else:
        frames = traceback.StackSummary.extract(traceback.walk_tb(tb), limit=sys.maxsize)
    return "".join(frames.format())


def format_crash_report(
    where: str,
    exc_type: type[BaseException],
    exc_value: BaseException | None,
    tb: TracebackType | None,
) -> str:
    """
    Build the text appended to the log file for an uncaught exception.

    Layout: ``<where> panicked at <file>:<line>:`` and the exception line(s),
    a blank line, ``Stack backtrace:``, then the frames.
    """
    summary = "".join(traceback.format_exception_only(exc_type, exc_value)).rstrip("\n")

    location = ""
    if tb is not None:
        last = tb
        while last.tb_next is not None:
            last = last.tb_next
        location = f" at {last.tb_frame.f_code.co_filename}:{last.tb_lineno}"

    return (
        f"{where} panicked{location}:\n{summary}\n\n"
        f"{BACKTRACE_HEADER}\n{format_backtrace(tb)}"
    )


def write_crash_report(
    writer: SharedWriter,
    where: str,
    exc_type: type[BaseException],
    exc_value: BaseException | None,
    tb: TracebackType | None,
) -> bool:
    """
    Append a crash report to the log file if its lock is free right now.

    Args:
        writer: Shared log file writer.
        where: Human readable origin, e.g. ``thread 'MainThread'``.
        exc_type: Exception class.
        exc_value: Exception instance.
        tb: Traceback of the exception.

    Returns:
        True if the report was written, False if the lock was busy.
    """
    if not writer.try_acquire():
        return False
    try:
        if writer.closed:
            return False
        report = format_crash_report(where, exc_type, exc_value, tb)
        writer.write_locked(report.encode("utf-8", errors="replace"))
        return True
    finally:
        writer.release()


def install_crash_hook(writer: SharedWriter) -> None:
    """
    Chain crash reporting into ``sys.excepthook`` and ``threading.excepthook``.

    The hooks in place right now are captured and always called after the
    report attempt, so test runners, debuggers and other tooling keep working.

    Args:
        writer: Shared log file writer, also used by the file sink.
    """
    previous_hook: ExceptHook = sys.excepthook
    previous_thread_hook = threading.excepthook

    def _excepthook(
        exc_type: type[BaseException],
        exc_value: BaseException,
        tb: TracebackType | None,
    ) -> None:
        where = f"thread '{threading.current_thread().name}'"
        write_crash_report(writer, where, exc_type, exc_value, tb)
        previous_hook(exc_type, exc_value, tb)

    def _thread_excepthook(args: threading.ExceptHookArgs) -> None:
        # Threads ending through SystemExit are not crashes
        if not issubclass(args.exc_type, SystemExit):
            name = args.thread.name if args.thread is not None else "<unknown>"
            write_crash_report(
                writer, f"thread '{name}'", args.exc_type, args.exc_value, args.exc_traceback
            )
        previous_thread_hook(args)

    sys.excepthook = _excepthook
    threading.excepthook = _thread_excepthook
    logger.debug("Crash hook chained to %s", writer.path)
