"""Tests for build event records and event logs."""

import json
from datetime import datetime, timezone

import pytest

from buildfacts_mcp.analysis import ProjectItem
from buildfacts_mcp.errors import BuildFactsError, EventFormatError
from buildfacts_mcp.events import BuildEvent, EventKind, parse_event, read_event_log


class TestEventKind:
    """Tests for EventKind enum."""

    def test_kind_values(self):
        """Test kind values match engine event names."""
        assert EventKind.BUILD_STARTED.value == "BuildStarted"
        assert EventKind.PROJECT_FINISHED.value == "ProjectFinished"
        assert EventKind.MESSAGE.value == "Message"
        assert len(EventKind) == 13

    def test_kind_is_string(self):
        """Test kind is string enum."""
        assert isinstance(EventKind.STATUS, str)
        assert EventKind.STATUS == "Status"


class TestBuildEventFromDict:
    """Tests for decoding events."""

    def test_project_started(self):
        """Test project started with properties and items."""
        event = BuildEvent.from_dict(
            {
                "kind": "ProjectStarted",
                "timestamp": "2024-01-01T12:00:00",
                "projectFile": "/repo/App/App.csproj",
                "properties": {"TargetFramework": "net6.0", "WarningLevel": 4},
                "items": [{"itemType": "Compile", "itemSpec": "Program.cs"}],
            }
        )

        assert event.kind == EventKind.PROJECT_STARTED
        assert event.timestamp == datetime(2024, 1, 1, 12, 0, 0)
        assert event.project_file == "/repo/App/App.csproj"
        assert event.properties == {"TargetFramework": "net6.0", "WarningLevel": "4"}
        assert event.items == [ProjectItem("Compile", "Program.cs")]

    def test_command_line_message(self):
        """Test compiler command line message."""
        event = parse_event({"kind": "Message", "taskName": "Csc", "commandLine": "csc a.cs"})

        assert event.is_command_line
        assert event.task_name == "Csc"
        assert event.command_line == "csc a.cs"

    def test_plain_message(self):
        """Test message without a command line."""
        event = parse_event({"kind": "Warning", "message": "careful", "code": "CS0168", "line": 3})

        assert not event.is_command_line
        assert event.code == "CS0168"
        assert event.line == 3

    def test_unknown_kind(self):
        """Test unknown kinds are rejected."""
        with pytest.raises(EventFormatError, match="Unknown event kind"):
            parse_event({"kind": "ProjectEvaluated"})

    def test_missing_kind(self):
        """Test events without a kind are rejected."""
        with pytest.raises(EventFormatError):
            parse_event({"message": "hi"})

    def test_malformed_item(self):
        """Test item without itemSpec is rejected."""
        with pytest.raises(EventFormatError, match="Malformed ProjectStarted"):
            parse_event({"kind": "ProjectStarted", "items": [{"itemType": "Compile"}]})

    def test_utc_timestamp(self):
        """Test a trailing Z is read as UTC."""
        event = parse_event({"kind": "BuildStarted", "timestamp": "2024-01-01T12:00:00Z"})

        assert event.timestamp == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def test_malformed_timestamp(self):
        """Test invalid timestamp is rejected."""
        with pytest.raises(EventFormatError):
            parse_event({"kind": "BuildStarted", "timestamp": "yesterday"})

    def test_not_an_object(self):
        """Test non-dict payloads are rejected."""
        with pytest.raises(EventFormatError):
            parse_event(["BuildStarted"])

    def test_error_hierarchy(self):
        """Test format errors are ValueErrors and BuildFactsErrors."""
        assert issubclass(EventFormatError, ValueError)
        assert issubclass(EventFormatError, BuildFactsError)


class TestBuildEventToDict:
    """Tests for encoding events."""

    def test_to_dict_minimal(self):
        """Test unset fields are omitted."""
        assert BuildEvent(EventKind.TARGET_STARTED, target_name="Build").to_dict() == {
            "kind": "TargetStarted",
            "targetName": "Build",
        }

    def test_to_dict_full(self):
        """Test encoded event decodes back to an equal event."""
        event = BuildEvent(
            EventKind.PROJECT_STARTED,
            timestamp=datetime(2024, 1, 1, 12, 0, 0),
            project_file="/repo/App/App.csproj",
            properties={"TargetFramework": "net6.0"},
            items=[ProjectItem("PackageReference", "Serilog", {"Version": "3.1.1"})],
        )

        assert BuildEvent.from_dict(event.to_dict()) == event


class TestReadEventLog:
    """Tests for JSON Lines event logs."""

    def test_read_log(self, tmp_path, sample_event_dicts):
        """Test events are read in order and blank lines skipped."""
        log = tmp_path / "build.jsonl"
        lines = [json.dumps(d) for d in sample_event_dicts]
        lines.insert(2, "")
        log.write_text("\n".join(lines) + "\n", encoding="utf-8")

        events = list(read_event_log(log))

        assert len(events) == len(sample_event_dicts)
        assert events[0].kind == EventKind.BUILD_STARTED
        assert events[-1].kind == EventKind.BUILD_FINISHED

    def test_invalid_json_line(self, tmp_path):
        """Test invalid JSON reports the line number."""
        log = tmp_path / "build.jsonl"
        log.write_text('{"kind": "BuildStarted"}\n{not json\n', encoding="utf-8")

        with pytest.raises(EventFormatError, match=":2: invalid JSON"):
            list(read_event_log(log))

    def test_invalid_event_line(self, tmp_path):
        """Test undecodable events report the line number."""
        log = tmp_path / "build.jsonl"
        log.write_text('{"kind": "Bogus"}\n', encoding="utf-8")

        with pytest.raises(EventFormatError, match=":1: Unknown event kind"):
            list(read_event_log(log))

    def test_missing_file(self, tmp_path):
        """Test unreadable log raises EventFormatError."""
        with pytest.raises(EventFormatError, match="Cannot read event log"):
            list(read_event_log(tmp_path / "missing.jsonl"))
