"""
Configuration Package Initialization.

Flat public API for the configuration schema and its semantic types.
"""

from .tracing_config import TracingConfig
from .types import (
    LEVEL_VALUES,
    LogLevel,
    NonNegativeFloat,
    ValidatedPath,
    level_value,
    normalize_level,
)

__all__ = [
    "TracingConfig",
    "LogLevel",
    "LEVEL_VALUES",
    "NonNegativeFloat",
    "ValidatedPath",
    "level_value",
    "normalize_level",
]
