"""
Test Suite for the Tracing Builder.

Tests constructors, chainable mutators, immutability, equality and
level normalization. Nothing here calls ``init``.
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from utility.config import TracingConfig
from utility.exceptions import ProfilerUnavailableError, UtilityConfigError
from utility.tracing import Tracing, empty, file, stdout


# TRACING: CONSTRUCTORS
@pytest.mark.unit
def test_default_is_stdout():
    """Test Tracing() is equivalent to Tracing.stdout()."""
    assert Tracing() == Tracing.stdout()
    assert Tracing().config.stdout_enabled is True


@pytest.mark.unit
def test_empty_has_no_sinks():
    """Test Tracing.empty() enables nothing and keeps INFO as minimum level."""
    cfg = Tracing.empty().config

    assert cfg.stdout_enabled is False
    assert cfg.file_path is None
    assert cfg.tracy_enabled is False
    assert cfg.min_level == "INFO"
    assert cfg.has_sinks is False


@pytest.mark.unit
def test_file_constructor_resolves_path(tmp_path):
    """Test Tracing.file() stores an absolute path."""
    target = tmp_path / "t.log"

    cfg = Tracing.file(target).config

    assert cfg.file_path == target.resolve()
    assert cfg.file_path.is_absolute()
    assert cfg.stdout_enabled is False


@pytest.mark.unit
def test_file_constructor_accepts_string(tmp_path):
    """Test Tracing.file() accepts plain strings."""
    cfg = Tracing.file(str(tmp_path / "t.log")).config

    assert isinstance(cfg.file_path, Path)


@pytest.mark.unit
def test_module_shortcuts_match_classmethods(tmp_path):
    """Test module-level shortcuts build the same builders."""
    assert stdout() == Tracing.stdout()
    assert empty() == Tracing.empty()
    assert file(tmp_path / "a.log") == Tracing.file(tmp_path / "a.log")


# TRACING: MUTATORS
@pytest.mark.unit
def test_mutators_return_new_builder():
    """Test mutators leave the original builder untouched."""
    base = Tracing.empty()

    changed = base.with_stdout()

    assert changed is not base
    assert base.config.stdout_enabled is False
    assert changed.config.stdout_enabled is True


@pytest.mark.unit
def test_composition_is_order_independent(tmp_path):
    """Test sink order does not change the resulting configuration."""
    path = tmp_path / "t.log"

    a = Tracing.empty().with_stdout().with_file(path)
    b = Tracing.empty().with_file(path).with_stdout()

    assert a == b
    assert hash(a) == hash(b)


@pytest.mark.unit
def test_with_file_replaces_previous_path(tmp_path):
    """Test calling with_file twice keeps the last path."""
    cfg = Tracing.file(tmp_path / "a.log").with_file(tmp_path / "b.log").config

    assert cfg.file_path.name == "b.log"


@pytest.mark.unit
@pytest.mark.parametrize(
    "level, expected",
    [
        ("trace", "TRACE"),
        ("DEBUG", "DEBUG"),
        ("Info", "INFO"),
        ("WARN", "WARN"),
        ("WARNING", "WARN"),
        ("error", "ERROR"),
        (logging.DEBUG, "DEBUG"),
        (logging.WARNING, "WARN"),
        (5, "TRACE"),
    ],
)
def test_with_level_normalizes(level, expected):
    """Test with_level accepts names, aliases and numeric levels."""
    assert Tracing.stdout().with_level(level).config.min_level == expected


@pytest.mark.unit
@pytest.mark.parametrize("level", ["VERBOSE", "CRITICAL", 42, ""])
def test_with_level_rejects_unknown(level):
    """Test with_level raises UtilityConfigError for unsupported levels."""
    with pytest.raises(UtilityConfigError):
        Tracing.stdout().with_level(level)


@pytest.mark.unit
def test_with_level_error_is_value_error():
    """Test level errors stay catchable as ValueError."""
    with pytest.raises(ValueError):
        Tracing.stdout().with_level("nope")


@pytest.mark.unit
def test_with_settle_rejects_negative():
    """Test the settle duration must be non-negative."""
    with pytest.raises(ValidationError):
        Tracing.stdout().with_settle(-1.0)


@pytest.mark.unit
def test_with_settle_sets_duration():
    """Test with_settle overrides the default one second."""
    assert Tracing.stdout().config.settle_seconds == 1.0
    assert Tracing.stdout().with_settle(0.25).config.settle_seconds == 0.25


@pytest.mark.unit
def test_with_tracy_without_opentelemetry(monkeypatch):
    """Test enabling the profiler fails fast when OpenTelemetry is missing."""
    monkeypatch.setattr("utility.tracing.profiler.PROFILER_AVAILABLE", False)

    with pytest.raises(ProfilerUnavailableError):
        Tracing.empty().with_tracy()


@pytest.mark.unit
def test_with_tracy_with_opentelemetry(monkeypatch):
    """Test with_tracy sets the flag when the profiler stack is importable."""
    monkeypatch.setattr("utility.tracing.profiler.PROFILER_AVAILABLE", True)

    assert Tracing.tracy().config.tracy_enabled is True


# TRACING: INSPECTION
@pytest.mark.unit
def test_config_is_frozen():
    """Test the configuration cannot be mutated in place."""
    cfg = Tracing.stdout().config

    with pytest.raises(ValidationError):
        cfg.stdout_enabled = False


@pytest.mark.unit
def test_builder_not_equal_to_other_types():
    """Test builders only compare equal to builders."""
    assert Tracing.stdout() != TracingConfig(stdout_enabled=True)


@pytest.mark.unit
def test_repr_lists_sinks(tmp_path):
    """Test repr shows the enabled sinks and level."""
    text = repr(Tracing.stdout().with_file(tmp_path / "x.log").with_level("WARN"))

    assert "stdout=True" in text
    assert "x.log" in text
    assert "level=WARN" in text


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
