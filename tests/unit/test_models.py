"""Tests for core event models."""

import dataclasses
import logging

import pytest

from logrouter.core.models import LogEvent, LogLevel

pytestmark = [pytest.mark.core, pytest.mark.tier(0)]


class TestLogLevel:
    """Tests for LogLevel ordering, abbreviations and parsing."""

    @pytest.mark.tra("Core.LogLevel.Ordering")
    def test_levels_are_ordered_by_severity(self) -> None:
        """TRACE < DEBUG < INFORMATION < WARNING < ERROR < FATAL."""
        assert (
            LogLevel.TRACE
            < LogLevel.DEBUG
            < LogLevel.INFORMATION
            < LogLevel.WARNING
            < LogLevel.ERROR
            < LogLevel.FATAL
        )

    @pytest.mark.tra("Core.LogLevel.Abbreviation")
    def test_abbreviations_are_four_uppercase_characters(self) -> None:
        for level in LogLevel:
            assert len(level.abbreviation) == 4
            assert level.abbreviation.isupper()
        assert LogLevel.INFORMATION.abbreviation == "INFO"
        assert LogLevel.ERROR.abbreviation == "EROR"
        assert LogLevel.FATAL.abbreviation == "FATL"

    @pytest.mark.tra("Core.LogLevel.Parse")
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("information", LogLevel.INFORMATION),
            ("Info", LogLevel.INFORMATION),
            (" WARNING ", LogLevel.WARNING),
            ("warn", LogLevel.WARNING),
            ("verbose", LogLevel.TRACE),
            ("critical", LogLevel.FATAL),
            (4, LogLevel.ERROR),
            (LogLevel.DEBUG, LogLevel.DEBUG),
        ],
    )
    def test_parse_accepts_names_and_aliases(
        self, raw: str | int | LogLevel, expected: LogLevel
    ) -> None:
        assert LogLevel.parse(raw) is expected

    @pytest.mark.tra("Core.LogLevel.Parse.Invalid")
    @pytest.mark.parametrize("raw", ["loud", "", None, True])
    def test_parse_rejects_unknown_values(self, raw: object) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            LogLevel.parse(raw)  # type: ignore[arg-type]

    @pytest.mark.tra("Core.LogLevel.FromStdlib")
    @pytest.mark.parametrize(
        ("levelno", "expected"),
        [
            (5, LogLevel.TRACE),
            (logging.DEBUG, LogLevel.DEBUG),
            (logging.INFO, LogLevel.INFORMATION),
            (logging.WARNING, LogLevel.WARNING),
            (logging.ERROR, LogLevel.ERROR),
            (logging.CRITICAL, LogLevel.FATAL),
        ],
    )
    def test_from_stdlib_maps_numeric_levels(self, levelno: int, expected: LogLevel) -> None:
        assert LogLevel.from_stdlib(levelno) is expected


class TestLogEvent:
    """Tests for LogEvent."""

    @pytest.mark.tra("Core.LogEvent.Immutable")
    def test_event_is_frozen(self) -> None:
        event = LogEvent(
            timestamp=1.0,
            level=LogLevel.INFORMATION,
            source_context="Worker",
            message_template="foo",
        )
        with pytest.raises(dataclasses.FrozenInstanceError):
            event.level = LogLevel.ERROR  # type: ignore[misc]

    @pytest.mark.tra("Core.LogEvent.Create")
    def test_create_stamps_current_time_and_copies_mappings(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("logrouter.core.models.time.time", lambda: 1702300000.0)
        properties = {"foobar": 1}

        event = LogEvent.create(
            LogLevel.INFORMATION, "Worker", "foo", properties=properties
        )
        properties["late"] = True

        assert event.timestamp == 1702300000.0
        assert event.properties == {"foobar": 1}
        assert event.args == {}
        assert event.exception is None

    def test_local_time_is_naive_local_datetime(self) -> None:
        event = LogEvent.create(LogLevel.INFORMATION, "Worker", "foo")
        assert event.local_time.tzinfo is None

    @pytest.mark.tra("Core.LogEvent.ReadOnlyMappings")
    def test_mappings_are_read_only(self) -> None:
        event = LogEvent.create(
            LogLevel.INFORMATION, "Worker", "foo", args={"n": 1}, properties={"foobar": 1}
        )

        with pytest.raises(TypeError):
            event.properties["foobar"] = 2  # type: ignore[index]
        with pytest.raises(TypeError):
            event.args["n"] = 2  # type: ignore[index]
        assert event.properties == {"foobar": 1}

    def test_direct_construction_copies_mappings(self) -> None:
        properties = {"foobar": 1}
        event = LogEvent(
            timestamp=1.0,
            level=LogLevel.INFORMATION,
            source_context="Worker",
            message_template="foo",
            properties=properties,
        )
        properties["late"] = True

        assert event.properties == {"foobar": 1}
        with pytest.raises(TypeError):
            event.properties["late"] = True  # type: ignore[index]
