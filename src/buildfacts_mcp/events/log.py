"""JSON Lines build event logs."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

from ..errors import EventFormatError
from .records import BuildEvent, parse_event

logger = logging.getLogger(__name__)


def read_event_log(path: str | Path) -> Iterator[BuildEvent]:
    """Read build events from a JSON Lines file.

    Each non-blank line holds one event object.

    Args:
        path: Path to the event log

    Yields:
        Events in file order

    Raises:
        EventFormatError: If the file cannot be read or a line is malformed
    """
    log_path = Path(path)
    try:
        handle = log_path.open(encoding="utf-8")
    except OSError as e:
        raise EventFormatError(f"Cannot read event log {log_path}: {e}") from e

    with handle:
        count = 0
        for line_number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
                event = parse_event(data)
            except json.JSONDecodeError as e:
                raise EventFormatError(f"{log_path}:{line_number}: invalid JSON: {e.msg}") from e
            except EventFormatError as e:
                raise EventFormatError(f"{log_path}:{line_number}: {e}") from e
            count += 1
            yield event

    logger.debug(f"Read {count} events from {log_path}")
