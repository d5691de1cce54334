"""
Tracing Manifest.

Declarative schema for the tracing bootstrap. Each sink is independently
toggleable; the schema is frozen so a builder can only move forward by
producing a new, updated copy.

Attributes:
    stdout_enabled: Emit compact single-line events on standard output.
    file_path: Emit pretty multi-line events into this file (truncated at init).
    tracy_enabled: Forward spans and events to the profiler.
    min_level: Drop events strictly below this level.
    settle_seconds: Profiler connection-settle duration.
    profiler_endpoint: OTLP/HTTP endpoint of the local collector.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import DEFAULT_PROFILER_ENDPOINT, DEFAULT_SETTLE_SECONDS
from .types import LogLevel, NonNegativeFloat, ValidatedPath, normalize_level


# TRACING CONFIGURATION
class TracingConfig(BaseModel):
    """
    Declarative manifest for sink composition and level filtering.

    Frozen after creation; the ``Tracing`` builder re-validates a dumped and
    updated copy for every change.

    Attributes:
        stdout_enabled: Compact events on stdout, no ANSI colors.
        file_path: Validated absolute path of the log file, or None.
        tracy_enabled: Profiler sink requested.
        min_level: Minimum level (TRACE, DEBUG, INFO, WARN, ERROR).
        settle_seconds: Sleep applied on guard creation and close when the
            profiler is enabled.
        profiler_endpoint: Collector endpoint used by the OTLP exporter.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
    )

    # Sinks
    stdout_enabled: bool = Field(default=False, description="Log to standard output")
    file_path: ValidatedPath | None = Field(default=None, description="Log file path")
    tracy_enabled: bool = Field(default=False, description="Forward spans to the profiler")

    # Filtering
    min_level: LogLevel = Field(default="INFO")

    # Profiler connection
    settle_seconds: NonNegativeFloat = Field(default=DEFAULT_SETTLE_SECONDS)
    profiler_endpoint: str = Field(default=DEFAULT_PROFILER_ENDPOINT)

    @field_validator("min_level", mode="before")
    @classmethod
    def coerce_level(cls, v: Any) -> Any:
        """
        Accept case-insensitive names, ``WARNING`` and numeric logging levels.

        Args:
            v: Raw level value.

        Returns:
            Canonical upper-case level name.
        """
        return normalize_level(v)

    @property
    def has_sinks(self) -> bool:
        """True when at least one sink is enabled."""
        return self.stdout_enabled or self.file_path is not None or self.tracy_enabled
