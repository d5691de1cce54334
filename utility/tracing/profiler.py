"""
Profiler Integration.

Forwards spans and log events to an OpenTelemetry collector running on the
local machine. The integration is a runtime feature flag: OpenTelemetry is an
optional dependency (``pip install utility[tracy]``) and
``PROFILER_AVAILABLE`` reports whether it can be used. Requesting the
profiler without it is an initialization error, never a silent no-op.

Key Components:
    - Profiler: Owns the tracer provider and its exporter connection.
    - ProfilerHandler: Logging sink recording events on the current span.
    - span: Context manager opening a profiler span around a block.
    - TracingDefer: Shutdown guard delaying start and exit so the collector
      can complete its handshake and drain the last spans.
"""

from __future__ import annotations

import logging
import time
import weakref
from contextlib import contextmanager
from typing import Any, Iterator

from ..constants import DEFAULT_SETTLE_SECONDS, LOGGER_NAME, TRACE
from ..exceptions import ProfilerUnavailableError
from .sinks import record_fields

try:  # pragma: no cover - optional dependency probing
    from opentelemetry import trace as _otel_trace
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except ImportError:  # pragma: no cover - OpenTelemetry not installed
    _otel_trace = None
    TracerProvider = None
    BatchSpanProcessor = None

PROFILER_AVAILABLE: bool = _otel_trace is not None and TracerProvider is not None

logger = logging.getLogger(LOGGER_NAME)

# Profiler started by the last successful init, cleared on shutdown
_active: Profiler | None = None

_ATTRIBUTE_TYPES = (bool, str, bytes, int, float)


def _attributes(fields: dict[str, Any]) -> dict[str, Any]:
    """Coerce arbitrary field values into OpenTelemetry attribute values."""
    return {k: v if isinstance(v, _ATTRIBUTE_TYPES) else str(v) for k, v in fields.items()}


def _otlp_exporter(endpoint: str) -> Any:
    """
    Builds the OTLP/HTTP span exporter pointed at the local collector.

    Raises:
        ProfilerUnavailableError: If the OTLP exporter package is missing.
    """
    try:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    except ImportError as e:
        raise ProfilerUnavailableError(
            "Profiler requested but opentelemetry-exporter-otlp-proto-http is not installed"
        ) from e
    return OTLPSpanExporter(endpoint=endpoint)


def require_profiler() -> None:
    """
    Fail fast when the profiler stack is not importable.

    Raises:
        ProfilerUnavailableError: If OpenTelemetry API/SDK are missing.
    """
    if not PROFILER_AVAILABLE:
        raise ProfilerUnavailableError(
            "Profiler requested but OpenTelemetry is not installed "
            "(install the 'tracy' extra)"
        )


class Profiler:
    """
    Connection to the profiler collector.

    Attributes:
        endpoint (str): Collector endpoint the exporter sends to.
        provider (TracerProvider): SDK provider owning the span processor.
        tracer (Tracer): Tracer used by ``span`` and ``ProfilerHandler``.
    """

    def __init__(self, endpoint: str) -> None:
        require_profiler()
        self.endpoint = endpoint
        self.provider = TracerProvider()
        self.provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(endpoint)))
        self.tracer = self.provider.get_tracer(LOGGER_NAME)

    @classmethod
    def start(cls, endpoint: str) -> Profiler:
        """Create the profiler and make it the target of ``span``."""
        global _active
        profiler = cls(endpoint)
        _active = profiler
        return profiler

    def shutdown(self) -> None:
        """Flush pending spans and close the exporter connection."""
        global _active
        if _active is self:
            _active = None
        self.provider.force_flush()
        self.provider.shutdown()


def active_profiler() -> Profiler | None:
    return _active


@contextmanager
def span(name: str, **fields: Any) -> Iterator[Any]:
    """
    Run a block inside a named span.

    Enter and exit are logged at TRACE level. When the profiler is running the
    block is also recorded as an OpenTelemetry span carrying ``fields`` as
    attributes; otherwise the span object yielded is None.

    Args:
        name: Span name.
        **fields: Key-value fields attached to the span.

    Example:
        >>> with span("load", path="data.bin"):
        ...     logger.info("loading")
    """
    logger.log(TRACE, "enter %s", name, extra={"span": name})
    try:
        profiler = _active
        if profiler is None:
            yield None
        else:
            with profiler.tracer.start_as_current_span(
                name, attributes=_attributes(fields)
            ) as current:
                yield current
    finally:
        logger.log(TRACE, "exit %s", name, extra={"span": name})


class ProfilerHandler(logging.Handler):
    """
    Profiler sink: every record becomes an event on the current span.

    Records emitted outside any span get an instant span of their own, named
    after the logger, so no event is lost by the profiler view.
    """

    def __init__(self, profiler: Profiler, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.profiler = profiler

    def emit(self, record: logging.LogRecord) -> None:
        # The SDK logs its own export failures; feeding them back would loop
        if record.name.startswith("opentelemetry"):
            return
        try:
            attributes = _attributes(
                {"level": record.levelname, "target": record.name, **record_fields(record)}
            )
            message = record.getMessage()
            current = _otel_trace.get_current_span()
            if current.is_recording():
                current.add_event(message, attributes=attributes)
            else:
                with self.profiler.tracer.start_as_current_span(record.name) as instant:
                    instant.add_event(message, attributes=attributes)
        except RecursionError:  # pragma: no cover
            raise
        except Exception:
            self.handleError(record)


# SHUTDOWN GUARD
def _drain(profiler: Profiler, settle_seconds: float) -> None:
    """Sleep so the collector can drain the last spans, then disconnect."""
    logger.debug("Waiting %.2fs for the profiler to drain", settle_seconds)
    time.sleep(settle_seconds)
    profiler.shutdown()


class TracingDefer:
    """
    Shutdown guard returned by ``Tracing.init``.

    When the profiler is enabled the guard is *active*: creating it sleeps for
    the connection-settle duration so the collector finishes its handshake
    before the first span, and closing it sleeps again so the collector can
    drain the last spans before the process exits. Without the profiler the
    guard is *inert* and both steps are no-ops.

    The release also runs when an active guard is garbage collected or, at
    the latest, at interpreter exit; it happens exactly once.

    Keep it alive for the whole program, ideally as a context manager::

        with Tracing.tracy().init():
            main()

    Attributes:
        settle_seconds (float): Connection-settle duration.
    """

    def __init__(
        self,
        profiler: Profiler | None = None,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
    ) -> None:
        self._profiler = profiler
        self.settle_seconds = settle_seconds
        self._closed = False
        self._finalizer: weakref.finalize | None = None

        if self.active:
            logger.debug("Waiting %.2fs for the profiler connection", settle_seconds)
            time.sleep(settle_seconds)
            self._finalizer = weakref.finalize(self, _drain, profiler, settle_seconds)

    @property
    def active(self) -> bool:
        return self._profiler is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the guard: sleep, then flush and disconnect. Idempotent."""
        if self._closed:
            return
        self._closed = True

        if self._finalizer is not None:
            self._finalizer()

    def __enter__(self) -> TracingDefer:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def __repr__(self) -> str:
        state = "active" if self.active else "inert"
        return f"TracingDefer({state}, closed={self._closed})"
