"""
Semantic Type Definitions & Validation Primitives.

Annotated pydantic types shared by the configuration schemas, plus the
bridge between semantic level names and numeric ``logging`` levels.

Core Responsibilities:
    * Path sanitization: Resolves paths to absolute forms with home directory
      expansion (~), without touching the disk
    * Level vocabulary: TRACE, DEBUG, INFO, WARN, ERROR and their numeric values
    * Boundary enforcement: Non-negative durations for settle timings
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Final, Literal

from pydantic import AfterValidator, Field, PlainSerializer

from ..constants import TRACE
from ..exceptions import UtilityConfigError


# VALIDATORS
def _sanitize_path(v: str | Path) -> Path:
    """
    Resolve path to absolute form without disk side-effects.

    Args:
        v: Path object or string to sanitize

    Returns:
        Absolute Path with home directory expanded
    """
    return Path(v).expanduser().resolve()


# GENERIC PRIMITIVES
NonNegativeFloat = Annotated[float, Field(ge=0.0)]

# FILESYSTEM
ValidatedPath = Annotated[
    Path,
    AfterValidator(_sanitize_path),
    PlainSerializer(lambda v: str(v), when_used="json", return_type=str),
]

# LEVELS
LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARN", "ERROR"]

LEVEL_VALUES: Final[dict[str, int]] = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_LEVEL_ALIASES: Final[dict[str, str]] = {"WARNING": "WARN"}


def normalize_level(level: str | int) -> LogLevel:
    """
    Map a level name or numeric ``logging`` level onto the LogLevel vocabulary.

    Names are case-insensitive and ``WARNING`` is accepted for ``WARN``.

    Args:
        level: Level name (``"warn"``, ``"INFO"``) or numeric value (``logging.DEBUG``)

    Returns:
        Canonical upper-case level name

    Raises:
        UtilityConfigError: If the level is not one of the supported levels.
    """
    if isinstance(level, int) and not isinstance(level, bool):
        for name, value in LEVEL_VALUES.items():
            if value == level:
                return name  # type: ignore[return-value]
        raise UtilityConfigError(f"Unsupported numeric log level: {level}")

    if isinstance(level, str):
        name = level.strip().upper()
        name = _LEVEL_ALIASES.get(name, name)
        if name in LEVEL_VALUES:
            return name  # type: ignore[return-value]

    raise UtilityConfigError(
        f"Unsupported log level {level!r}; expected one of {', '.join(LEVEL_VALUES)}"
    )


def level_value(level: LogLevel) -> int:
    """Numeric ``logging`` value of a canonical level name."""
    return LEVEL_VALUES[level]
