"""
Package-wide Constants.

Single source of truth for values shared across the gated modules.

Module Attributes:
    LOGGER_NAME: Logger identity used by every module of the package.
    TRACE: Numeric level registered with ``logging`` for TRACE events.
    DEFAULT_SETTLE_SECONDS: Profiler connection-settle duration.
    DEFAULT_PROFILER_ENDPOINT: OTLP/HTTP endpoint of the local collector.
    TELEGRAM_API_BASE: Telegram Bot API root (HTTPS only).
    HTTP_TIMEOUT: Timeout in seconds for outgoing HTTP requests.
"""

import logging
from typing import Final

# Logger identity used by all modules of the package
LOGGER_NAME: Final[str] = "utility"

# TRACE sits below DEBUG, like the finest level of span-oriented frameworks
TRACE: Final[int] = 5
logging.addLevelName(TRACE, "TRACE")

# PROFILER
DEFAULT_SETTLE_SECONDS: Final[float] = 1.0
DEFAULT_PROFILER_ENDPOINT: Final[str] = "http://localhost:4318/v1/traces"

# TELEGRAM
TELEGRAM_API_BASE: Final[str] = "https://api.telegram.org"
HTTP_TIMEOUT: Final[float] = 10.0
