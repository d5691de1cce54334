"""
Tracing Setup Builder.

Composes the process-wide logging configuration from a declarative
``TracingConfig``. The builder is an immutable value: every ``with_*`` call
returns a new builder and ``init`` is the single terminal step.

Sink composition (only enabled sinks are materialized), attached to the root
logger in this order:

    1. stdout    compact single-line events, no ANSI colors
    2. profiler  events recorded on OpenTelemetry spans
    3. file      pretty multi-line events, lock/write/flush per event
    4. level     root logger and every sink drop records below ``min_level``

Example:
    >>> from utility.tracing import Tracing
    >>> guard = Tracing.stdout().with_file("app.log").with_level("DEBUG").init()
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar

from ..config import TracingConfig, level_value, normalize_level
from ..constants import LOGGER_NAME
from ..exceptions import TracingInitError
from .crash_hook import install_crash_hook
from .profiler import Profiler, ProfilerHandler, TracingDefer, require_profiler
from .sinks import SharedWriter, make_file_handler, make_stdout_handler

logger = logging.getLogger(LOGGER_NAME)


class Tracing:
    """
    Builder for the process-wide tracing setup.

    ``Tracing()`` is equivalent to ``Tracing.stdout()``; ``Tracing.empty()``
    starts with no sink at all. Two builders are equal when they would install
    the same configuration, whatever order the sinks were added in.

    The class keeps pseudo-singleton state (``_installed``) so a second
    ``init`` in the same process fails instead of stacking handlers.

    Class Attributes:
        _installed (bool): A subscriber has been installed in this process.
        _handlers (list[logging.Handler]): Handlers attached by the last init.
        _install_lock (threading.Lock): Serializes concurrent ``init`` calls.

    Attributes:
        config (TracingConfig): Frozen configuration this builder installs.
    """

    _installed: ClassVar[bool] = False
    _handlers: ClassVar[list[logging.Handler]] = []
    _install_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, config: TracingConfig | None = None) -> None:
        self._config = config if config is not None else TracingConfig(stdout_enabled=True)

    # CONSTRUCTORS
    @classmethod
    def empty(cls) -> Tracing:
        """Builder with no sink enabled."""
        return cls(TracingConfig())

    @classmethod
    def stdout(cls) -> Tracing:
        """Short form of ``Tracing.empty().with_stdout()``."""
        return cls.empty().with_stdout()

    @classmethod
    def file(cls, path: str | Path) -> Tracing:
        """Short form of ``Tracing.empty().with_file(path)``."""
        return cls.empty().with_file(path)

    @classmethod
    def tracy(cls) -> Tracing:
        """Short form of ``Tracing.empty().with_tracy()``."""
        return cls.empty().with_tracy()

    # MUTATORS
    def with_stdout(self) -> Tracing:
        """Enable logging to standard output."""
        return self._update(stdout_enabled=True)

    def with_file(self, path: str | Path) -> Tracing:
        """Enable logging to ``path``; the file is truncated at init."""
        return self._update(file_path=path)

    def with_tracy(self) -> Tracing:
        """
        Enable the profiler sink.

        Raises:
            ProfilerUnavailableError: If OpenTelemetry is not installed.
        """
        require_profiler()
        return self._update(tracy_enabled=True)

    def with_level(self, level: str | int) -> Tracing:
        """
        Drop events strictly below ``level``.

        Args:
            level: TRACE, DEBUG, INFO, WARN or ERROR (case-insensitive, WARNING
                accepted) or the matching numeric ``logging`` level.

        Raises:
            UtilityConfigError: If the level is not supported.
        """
        return self._update(min_level=normalize_level(level))

    def with_settle(self, seconds: float) -> Tracing:
        """Override the profiler connection-settle duration."""
        return self._update(settle_seconds=seconds)

    def _update(self, **changes: Any) -> Tracing:
        data = self._config.model_dump()
        data.update(changes)
        return Tracing(TracingConfig.model_validate(data))

    # INSPECTION
    @property
    def config(self) -> TracingConfig:
        return self._config

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tracing):
            return NotImplemented
        return self._config == other._config

    def __hash__(self) -> int:
        return hash(self._config)

    def __repr__(self) -> str:
        cfg = self._config
        return (
            f"Tracing(stdout={cfg.stdout_enabled}, file={cfg.file_path}, "
            f"tracy={cfg.tracy_enabled}, level={cfg.min_level})"
        )

    # TERMINAL
    def init(self) -> TracingDefer:
        """
        Install the composite configuration process-wide.

        Must be called once, before any work starts. When the file sink is
        enabled the crash hooks are chained so uncaught exceptions land in the
        log file with their full stack.

        Returns:
            Shutdown guard; keep it alive for the lifetime of the program.

        Raises:
            TracingInitError: If a configuration was already installed or the
                log file cannot be created.
            ProfilerUnavailableError: If the profiler is requested without
                OpenTelemetry installed.
        """
        cfg = self._config
        min_level = level_value(cfg.min_level)

        with Tracing._install_lock:
            if Tracing._installed:
                raise TracingInitError(
                    "failed to set global tracing subscriber: already installed in this process"
                )

            writer: SharedWriter | None = None
            if cfg.file_path is not None:
                try:
                    writer = SharedWriter(cfg.file_path)
                except OSError as e:
                    raise TracingInitError(f"failed to create log file {cfg.file_path}") from e

            profiler: Profiler | None = None
            if cfg.tracy_enabled:
                try:
                    profiler = Profiler.start(cfg.profiler_endpoint)
                except Exception:
                    if writer is not None:
                        writer.close()
                    raise

            handlers: list[logging.Handler] = []
            if cfg.stdout_enabled:
                handlers.append(make_stdout_handler(min_level))
            if profiler is not None:
                handlers.append(ProfilerHandler(profiler, min_level))
            if writer is not None:
                handlers.append(make_file_handler(writer, min_level))
            if not cfg.has_sinks:
                # Keeps logging.lastResort from printing to stderr
                handlers.append(logging.NullHandler())

            root = logging.getLogger()
            root.setLevel(min_level)
            for handler in handlers:
                root.addHandler(handler)

            if writer is not None:
                install_crash_hook(writer)

            Tracing._handlers = handlers
            Tracing._installed = True

        logger.debug("Tracing initialized: %r", self)
        return TracingDefer(profiler, cfg.settle_seconds)

    @classmethod
    def is_installed(cls) -> bool:
        """True once ``init`` has succeeded in this process."""
        return cls._installed


# SHORTCUTS
def empty() -> Tracing:
    return Tracing.empty()


def stdout() -> Tracing:
    return Tracing.stdout()


def file(path: str | Path) -> Tracing:
    return Tracing.file(path)


def tracy() -> Tracing:
    return Tracing.tracy()
