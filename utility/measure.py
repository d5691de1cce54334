"""
Read Throughput Measurement.

Wraps a binary stream and transparently forwards reads while keeping track of
the bytes read, a smoothed transfer rate, the completion percentage and the
estimated time remaining.

The rate is an exponential moving average. A new sample is only folded in once
the current window covers at least ``UPDATE_RATE`` seconds, since very short
windows give unstable instantaneous rates.

Example:
    >>> with open("data.bin", "rb") as f:
    ...     reader = MeasuringReader.with_size_hint(f, os.path.getsize("data.bin"))
    ...     for chunk in iter(lambda: reader.read(8192), b""):
    ...         print(f"{reader.percentage():.1f}% {reader.avg().megabytes_per_second():.2f} MB/s")
"""

from __future__ import annotations

import io
import math
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Final

from .exceptions import UtilityConfigError

# Smoothing factor
ALPHA: Final[float] = 0.5

# Minimum window length (seconds) before the moving average is updated
UPDATE_RATE: Final[float] = 0.010


@dataclass(frozen=True)
class Average:
    """Smoothed throughput; kilo and mega are decimal (SI) units."""

    value: float

    def bytes_per_second(self) -> float:
        return self.value

    def kilobytes_per_second(self) -> float:
        return self.value / 1_000.0

    def megabytes_per_second(self) -> float:
        return self.value / 1_000_000.0


class MeasuringReader(io.RawIOBase):
    """
    Read-only stream wrapper measuring what flows through it.

    Only ``readinto`` is implemented; ``read``, ``readall``, ``readline`` and
    iteration come from ``io.RawIOBase`` and all go through it. Errors from the
    wrapped stream propagate unchanged and leave the statistics untouched.

    Not thread-safe; wrap externally if it has to be shared.

    Attributes:
        inner: Wrapped binary stream.
        size_hint (int | None): Expected total size in bytes, if known.
    """

    def __init__(
        self,
        inner: Any,
        size_hint: int | None = None,
        *,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        """
        Args:
            inner: Object with ``readinto(b)`` or ``read(n)`` returning bytes.
            size_hint: Expected total byte count, or None if unknown.
            clock: Monotonic time source in seconds.

        Raises:
            UtilityConfigError: If ``size_hint`` is negative.
        """
        super().__init__()
        if size_hint is not None and size_hint < 0:
            raise UtilityConfigError(f"size_hint must be non-negative, got {size_hint}")

        self.inner = inner
        self.size_hint = size_hint
        self._clock = clock
        self._total = 0
        self._avg = 0.0
        self._window_start = clock()
        self._window_bytes = 0

    @classmethod
    def with_size_hint(
        cls,
        inner: Any,
        size_hint: int,
        *,
        clock: Callable[[], float] = time.perf_counter,
    ) -> MeasuringReader:
        """Wrap ``inner`` and record the expected total byte count."""
        return cls(inner, size_hint, clock=clock)

    # io.RawIOBase
    def readable(self) -> bool:
        return True

    def readinto(self, b: Any) -> int | None:
        if hasattr(self.inner, "readinto"):
            n = self.inner.readinto(b)
        else:
            data = self.inner.read(len(b))
            if data is None:
                return None
            n = len(data)
            memoryview(b).cast("B")[:n] = data

        # Non-blocking stream without data: nothing was read
        if n is None:
            return None

        self._update(n)
        return n

    def close(self) -> None:
        if not self.closed:
            try:
                close = getattr(self.inner, "close", None)
                if close is not None:
                    close()
            finally:
                super().close()

    def _update(self, n: int) -> None:
        now = self._clock()
        elapsed = now - self._window_start
        self._window_bytes += n

        if elapsed >= UPDATE_RATE:
            speed = self._window_bytes / elapsed
            self._avg = ALPHA * speed + (1.0 - ALPHA) * self._avg
            self._window_start = now
            self._window_bytes = 0

        self._total += n

    # STATISTICS
    def total(self) -> int:
        """Bytes read successfully so far."""
        return self._total

    def avg(self) -> Average:
        return Average(self._avg)

    def time_remaining(self) -> timedelta | None:
        """
        Estimated time until ``size_hint`` bytes have been read.

        Returns:
            ``(size_hint - total) / avg`` seconds, or None when there is no
            size hint, more than ``size_hint`` bytes were read, or the rate
            does not yield a finite duration (e.g. no rate sample yet).
        """
        if self.size_hint is None or self._total > self.size_hint:
            return None
        if self._avg <= 0.0:
            return None

        seconds = (self.size_hint - self._total) / self._avg
        if not math.isfinite(seconds) or seconds < 0:
            return None
        try:
            return timedelta(seconds=seconds)
        except OverflowError:
            return None

    def percentage(self) -> float | None:
        """
        Share of ``size_hint`` read so far, in percent.

        Not clamped: a stream delivering more than its hint reports over 100.
        None without a size hint. A hint of zero bytes reports 100 while
        nothing has been read and None once bytes exceed it.
        """
        if self.size_hint is None:
            return None
        if self.size_hint == 0:
            return 100.0 if self._total == 0 else None
        return (self._total / self.size_hint) * 100.0

    def __repr__(self) -> str:
        return (
            f"MeasuringReader(total={self._total}, size_hint={self.size_hint}, "
            f"avg={self._avg:.1f} B/s)"
        )
