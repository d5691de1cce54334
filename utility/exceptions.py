"""
Utility Exception Hierarchy.

UtilityError (base, Exception)
├── UtilityConfigError(UtilityError, ValueError)     ← builder / reader input validation
├── TracingInitError(UtilityError, RuntimeError)     ← one-shot tracing bootstrap failures
│   └── ProfilerUnavailableError(TracingInitError)   ← profiler requested but SDK missing
└── TelegramError(UtilityError)                      ← Bot API send failures

UtilityConfigError multi-inherits from ValueError so callers can keep
using ``except ValueError`` around argument validation.
"""


class UtilityError(Exception):
    """Base exception for all utility errors."""


class UtilityConfigError(UtilityError, ValueError):
    """Invalid configuration or constructor argument (compatible with ValueError)."""


class TracingInitError(UtilityError, RuntimeError):
    """Tracing could not be initialized (log file, global registration, hooks)."""


class ProfilerUnavailableError(TracingInitError):
    """Profiler sink requested but OpenTelemetry is not installed."""


class TelegramError(UtilityError):
    """Telegram message could not be delivered."""
