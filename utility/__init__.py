"""
utility: Collection of Often Used Utilities.

Every module is usable on its own and only pulls in its own dependencies:

- ``utility.tracing``   one-shot logging setup (stdout, file, profiler sinks)
- ``utility.measure``   throughput-measuring stream wrapper
- ``utility.repl``      interactive command loop over a typer application
- ``utility.telegram``  Telegram message sender

The names below are re-exported lazily (PEP 562), so ``import utility`` does
not import typer, requests or OpenTelemetry until the matching name is used:

    from utility import Tracing, MeasuringReader
"""

from importlib import import_module
from importlib.metadata import version as _pkg_version
from typing import Any

__version__ = _pkg_version("utility")

__all__ = [
    "__version__",
    # Gated modules
    "config",
    "measure",
    "repl",
    "telegram",
    "tracing",
    # Tracing
    "Tracing",
    "TracingDefer",
    "TracingConfig",
    "span",
    "TRACE",
    # Measure
    "MeasuringReader",
    "Average",
    # REPL
    "ControlFlow",
    # Telegram
    "Telegram",
    # Errors
    "UtilityError",
    "UtilityConfigError",
    "TracingInitError",
    "ProfilerUnavailableError",
    "TelegramError",
]

# LAZY IMPORTS MAPPING
_PKG = "utility"
_TRACING_MOD = f"{_PKG}.tracing"
_ERRORS_MOD = f"{_PKG}.exceptions"

_LAZY_IMPORTS: dict[str, str] = {
    "Tracing": _TRACING_MOD,
    "TracingDefer": _TRACING_MOD,
    "span": _TRACING_MOD,
    "TRACE": f"{_PKG}.constants",
    "TracingConfig": f"{_PKG}.config",
    "MeasuringReader": f"{_PKG}.measure",
    "Average": f"{_PKG}.measure",
    "ControlFlow": f"{_PKG}.repl",
    "Telegram": f"{_PKG}.telegram",
    "UtilityError": _ERRORS_MOD,
    "UtilityConfigError": _ERRORS_MOD,
    "TracingInitError": _ERRORS_MOD,
    "ProfilerUnavailableError": _ERRORS_MOD,
    "TelegramError": _ERRORS_MOD,
}

# Submodules resolved on attribute access; importing one binds it on the
# package, so ``utility.repl`` is always the module and ``utility.repl.repl``
# the loop
_LAZY_SUBMODULES: frozenset[str] = frozenset({"config", "measure", "repl", "telegram", "tracing"})


# LAZY LOADER FUNCTION
def __getattr__(name: str) -> Any:
    """
    Import a public component on first access.

    Args:
        name: Public name listed in ``__all__``.

    Returns:
        The requested object.

    Raises:
        AttributeError: If name is not part of the public API.
    """
    if name in _LAZY_SUBMODULES:
        return import_module(f"{_PKG}.{name}")

    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(_LAZY_IMPORTS[name])
    attr = getattr(module, name)

    # Cache on module for future access
    globals()[name] = attr
    return attr


def __dir__() -> list[str]:
    return sorted(__all__)
