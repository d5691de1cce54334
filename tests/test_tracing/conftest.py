"""
Shared fixtures for the tracing test suite.

``Tracing.init`` mutates process-wide state (root handlers, root level, crash
hooks, the installed flag). Every test starts from a clean slate and leaves
one behind.
"""

import logging
import sys
import threading

import pytest

from utility.tracing import SharedFileHandler, Tracing
from utility.tracing import profiler as profiler_module


@pytest.fixture(autouse=True)
def reset_tracing(monkeypatch):
    """Undo everything a test's ``init`` installed."""
    root = logging.getLogger()
    original_level = root.level

    # Re-set to the current value so monkeypatch restores it on teardown
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)

    yield

    for handler in Tracing._handlers:
        root.removeHandler(handler)
        if isinstance(handler, SharedFileHandler) and not handler.writer.closed:
            handler.writer.close()
        handler.close()

    Tracing._handlers = []
    Tracing._installed = False
    profiler_module._active = None
    root.setLevel(original_level)


@pytest.fixture
def log():
    """Application logger used to emit test events."""
    return logging.getLogger("tests.app")
