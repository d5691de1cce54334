"""
Tracing Setup Package.

Convenient, one-shot setup of process-wide logging with independently
toggleable sinks (stdout, log file, profiler), a minimum level filter, and
crash reporting into the log file.

Available Components:

- Tracing: Immutable builder; ``init()`` installs the configuration.
- TracingDefer: Shutdown guard returned by ``init()``.
- span: Context manager recording a profiler span around a block.
- SharedWriter: Lock-guarded log file shared by the file sink and crash hook.
- PROFILER_AVAILABLE: Whether the OpenTelemetry profiler stack is importable.

Example:
    >>> from utility import tracing
    >>> guard = tracing.stdout().with_file("log.txt").init()
"""

from ..constants import TRACE
from .builder import Tracing, empty, file, stdout, tracy
from .crash_hook import BACKTRACE_HEADER, install_crash_hook
from .profiler import PROFILER_AVAILABLE, ProfilerHandler, TracingDefer, span
from .sinks import CompactFormatter, PrettyFormatter, SharedFileHandler, SharedWriter

__all__ = [
    "Tracing",
    "TracingDefer",
    "TRACE",
    "PROFILER_AVAILABLE",
    "BACKTRACE_HEADER",
    "span",
    "empty",
    "stdout",
    "file",
    "tracy",
    "install_crash_hook",
    "CompactFormatter",
    "PrettyFormatter",
    "SharedFileHandler",
    "SharedWriter",
    "ProfilerHandler",
]
