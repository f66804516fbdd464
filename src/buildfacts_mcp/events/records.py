"""Build event records.

One record type covers the whole MSBuild logger event surface; ``kind``
says which fields are meaningful:

- BuildStarted / BuildFinished: succeeded
- ProjectStarted: project_file, properties, items
- ProjectFinished: project_file, succeeded
- TargetStarted / TargetFinished: target_name
- TaskStarted / TaskFinished: task_name
- Message / Warning / Error: message, command_line, code, file, line, column
- Custom / Status: message, properties, items
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from ..analysis.items import ProjectItem
from ..errors import EventFormatError


class EventKind(str, Enum):
    """Build engine event kinds."""

    BUILD_STARTED = "BuildStarted"
    BUILD_FINISHED = "BuildFinished"
    PROJECT_STARTED = "ProjectStarted"
    PROJECT_FINISHED = "ProjectFinished"
    TARGET_STARTED = "TargetStarted"
    TARGET_FINISHED = "TargetFinished"
    TASK_STARTED = "TaskStarted"
    TASK_FINISHED = "TaskFinished"
    MESSAGE = "Message"
    WARNING = "Warning"
    ERROR = "Error"
    CUSTOM = "Custom"
    STATUS = "Status"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp, accepting a trailing "Z" for UTC."""
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass
class BuildEvent:
    """A single event raised by the build engine."""

    kind: EventKind
    timestamp: datetime | None = None
    message: str | None = None
    project_file: str | None = None
    target_name: str | None = None
    task_name: str | None = None
    succeeded: bool | None = None
    properties: dict[str, str] = field(default_factory=dict)
    items: list[ProjectItem] = field(default_factory=list)
    command_line: str | None = None
    code: str | None = None
    file: str | None = None
    line: int | None = None
    column: int | None = None

    @property
    def is_command_line(self) -> bool:
        """Whether this message carries a task's command line."""
        return self.command_line is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildEvent:
        """Decode an event from its JSON form.

        Raises:
            EventFormatError: If the kind is missing/unknown or a field is malformed
        """
        try:
            kind = EventKind(data.get("kind"))
        except ValueError as e:
            raise EventFormatError(f"Unknown event kind: {data.get('kind')!r}") from e

        try:
            timestamp = data.get("timestamp")
            properties = data.get("properties") or {}
            return cls(
                kind=kind,
                timestamp=parse_timestamp(timestamp) if timestamp else None,
                message=data.get("message"),
                project_file=data.get("projectFile"),
                target_name=data.get("targetName"),
                task_name=data.get("taskName"),
                succeeded=data.get("succeeded"),
                properties={str(k): str(v) for k, v in properties.items()},
                items=[ProjectItem.from_dict(item) for item in data.get("items") or []],
                command_line=data.get("commandLine"),
                code=data.get("code"),
                file=data.get("file"),
                line=data.get("line"),
                column=data.get("column"),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise EventFormatError(f"Malformed {kind.value} event: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"kind": self.kind.value}
        if self.timestamp is not None:
            result["timestamp"] = self.timestamp.isoformat()
        optional = {
            "message": self.message,
            "projectFile": self.project_file,
            "targetName": self.target_name,
            "taskName": self.task_name,
            "succeeded": self.succeeded,
            "commandLine": self.command_line,
            "code": self.code,
            "file": self.file,
            "line": self.line,
            "column": self.column,
        }
        result.update({key: value for key, value in optional.items() if value is not None})
        if self.properties:
            result["properties"] = dict(self.properties)
        if self.items:
            result["items"] = [item.to_dict() for item in self.items]
        return result


def parse_event(data: dict[str, Any]) -> BuildEvent:
    """Parse a build event from dict."""
    if not isinstance(data, dict):
        raise EventFormatError(f"Event must be an object, got {type(data).__name__}")
    return BuildEvent.from_dict(data)
