"""Build event aggregation.

Turns the build engine's event stream into per-target-framework snapshots:
- Event records decoded from JSON objects or JSON Lines logs
- Arena-based build tree built in arrival order
- Project builds grouped by target framework moniker
"""

from .log import read_event_log
from .processor import EventProcessor
from .records import BuildEvent, EventKind, parse_event
from .tree import BuildTree, NodeKind, TreeNode

__all__ = [
    "BuildEvent",
    "EventKind",
    "parse_event",
    "read_event_log",
    "BuildTree",
    "NodeKind",
    "TreeNode",
    "EventProcessor",
]
