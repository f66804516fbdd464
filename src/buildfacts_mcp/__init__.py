"""Build facts extraction from MSBuild event streams, served over MCP."""

from .analysis import BuildSnapshot, ProjectItem
from .commandline import CommandLineArgument, parse_command_line
from .events import BuildEvent, EventKind, EventProcessor

__version__ = "0.1.0"

__all__ = [
    "BuildEvent",
    "BuildSnapshot",
    "CommandLineArgument",
    "EventKind",
    "EventProcessor",
    "ProjectItem",
    "parse_command_line",
]
