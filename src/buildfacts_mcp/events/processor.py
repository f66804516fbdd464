"""Build event processor.

Consumes the build engine's event stream in arrival order, builds a tree of
build/project/target/task nodes, and after the build groups every build of
the project of interest by target framework moniker:

    events -> observers (pass-through)
           -> BuildTree (started pushes, finished pops)
           -> get_results(): one BuildSnapshot per moniker

A multi-targeted project shows up once per target framework (plus an outer
dispatching build without a moniker); nested MSBuild tasks may build the
same project again. Only the moniker decides which snapshot a node feeds.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..analysis.result import BuildSnapshot
from ..config import AnalyzerConfig, get_config
from ..utils.paths import normalize_path
from .records import BuildEvent, EventKind
from .tree import BuildTree, NodeKind, TreeNode

logger = logging.getLogger(__name__)

TARGET_FRAMEWORK_MONIKER = "TargetFrameworkMoniker"

EventObserver = Callable[[BuildEvent], None]


class EventProcessor:
    """Aggregates build events for one project file.

    Not thread-safe: feed events from a single source, in order.
    """

    def __init__(
        self,
        project_file_path: str,
        analyze: bool = True,
        observers: Iterable[EventObserver] | None = None,
        config: AnalyzerConfig | None = None,
    ):
        """Initialize event processor.

        Args:
            project_file_path: Project whose builds are collected
            analyze: Build the tree (results are empty when False)
            observers: Callbacks receiving every event before processing
            config: Analyzer config (process-wide config if not provided)
        """
        self._project_file_path = normalize_path(project_file_path)
        self._config = config or get_config()
        self._observers: list[EventObserver] = list(observers or [])
        self._tree: BuildTree | None = BuildTree() if analyze else None
        self._stack: list[int] = []
        self._build_finished = False
        self._handlers: dict[EventKind, Callable[[BuildEvent], None]] = {
            EventKind.BUILD_STARTED: self._build_started,
            EventKind.BUILD_FINISHED: self._build_finished_event,
            EventKind.PROJECT_STARTED: self._project_started,
            EventKind.PROJECT_FINISHED: self._node_finished,
            EventKind.TARGET_STARTED: self._target_started,
            EventKind.TARGET_FINISHED: self._node_finished,
            EventKind.TASK_STARTED: self._task_started,
            EventKind.TASK_FINISHED: self._node_finished,
            EventKind.MESSAGE: self._message_raised,
            EventKind.WARNING: self._message_raised,
            EventKind.ERROR: self._message_raised,
            EventKind.CUSTOM: self._data_raised,
            EventKind.STATUS: self._data_raised,
        }

    @property
    def project_file_path(self) -> str:
        return self._project_file_path

    @property
    def tree(self) -> BuildTree | None:
        """Build tree (None when tree construction is disabled)."""
        return self._tree

    @property
    def build_finished(self) -> bool:
        """Whether a BuildFinished event has been seen."""
        return self._build_finished

    def add_observer(self, observer: EventObserver) -> None:
        """Register an observer for raw events."""
        self._observers.append(observer)

    def process(self, event: BuildEvent) -> None:
        """Forward an event to observers, then add it to the tree."""
        for observer in self._observers:
            try:
                observer(event)
            except Exception:
                logger.exception("Event observer error")

        if self._tree is None:
            return
        self._handlers[event.kind](event)

    def process_all(self, events: Iterable[BuildEvent]) -> None:
        for event in events:
            self.process(event)

    # ============== Tree construction ==============

    def _current(self) -> int:
        """Innermost open node, creating the build root on demand."""
        if not self._stack:
            root = self._tree.root
            if root is None:
                root = self._tree.add(NodeKind.BUILD, name="Build")
            self._stack.append(root.index)
        return self._stack[-1]

    def _push(self, kind: NodeKind, **fields) -> TreeNode:
        node = self._tree.add(kind, self._current(), **fields)
        self._stack.append(node.index)
        return node

    def _build_started(self, event: BuildEvent) -> None:
        self._current()

    def _build_finished_event(self, event: BuildEvent) -> None:
        self._current()
        root = self._tree.root
        root.finished = True
        root.succeeded = event.succeeded
        self._build_finished = True
        if len(self._stack) > 1:
            logger.debug(f"Build finished with {len(self._stack) - 1} nodes still open")
        self._stack = [root.index]

    def _project_started(self, event: BuildEvent) -> None:
        project_file = event.project_file or ""
        node = self._push(
            NodeKind.PROJECT,
            name=project_file.replace("\\", "/").rsplit("/", 1)[-1],
            project_file=project_file,
        )
        self._tree.set_properties(node.index, event.properties)
        self._tree.add_items(node.index, event.items)
        logger.debug(f"Project started: {project_file}")

    def _target_started(self, event: BuildEvent) -> None:
        self._push(NodeKind.TARGET, name=event.target_name or "")

    def _task_started(self, event: BuildEvent) -> None:
        self._push(NodeKind.TASK, name=event.task_name or "")

    def _node_finished(self, event: BuildEvent) -> None:
        # Engine guarantees pairing; the root itself is never popped
        if len(self._stack) <= 1:
            logger.debug(f"Ignoring unbalanced {event.kind.value} event")
            return
        node = self._tree.node(self._stack.pop())
        node.finished = True
        node.succeeded = event.succeeded

    def _message_raised(self, event: BuildEvent) -> None:
        if event.is_command_line:
            task = self._tree.enclosing(self._current(), NodeKind.TASK)
            self._tree.add(
                NodeKind.COMMAND_LINE,
                self._current(),
                name=event.task_name or (task.name if task else ""),
                value=event.command_line,
            )
        else:
            self._tree.add(
                NodeKind.MESSAGE,
                self._current(),
                name=event.kind.value,
                value=event.message,
            )

    def _data_raised(self, event: BuildEvent) -> None:
        if not event.properties and not event.items:
            return
        project = self._tree.enclosing(self._current(), NodeKind.PROJECT)
        if project is None:
            logger.debug(f"Dropping {event.kind.value} data outside of any project")
            return
        self._tree.set_properties(project.index, event.properties)
        self._tree.add_items(project.index, event.items)

    # ============== Results ==============

    def get_results(self) -> list[BuildSnapshot]:
        """Group the project's builds by target framework moniker.

        Returns:
            One snapshot per moniker, in discovery order
        """
        if self._tree is None:
            return []

        snapshots: dict[str, BuildSnapshot] = {}
        self._tree.visit(NodeKind.PROJECT, lambda node: self._visit_project(node, snapshots))
        logger.info(
            f"Collected {len(snapshots)} target framework builds for {self._project_file_path}"
        )
        return list(snapshots.values())

    def _visit_project(self, node: TreeNode, snapshots: dict[str, BuildSnapshot]) -> None:
        # Nested MSBuild tasks may have spawned builds of other projects
        if not node.project_file or normalize_path(node.project_file) != self._project_file_path:
            return
        if not node.finished:
            return

        tfm = (self._tree.get_property(node.index, TARGET_FRAMEWORK_MONIKER) or "").strip()
        if not tfm:
            return

        snapshot = snapshots.get(tfm)
        if snapshot is None:
            snapshot = BuildSnapshot(
                self._project_file_path,
                tfm,
                compiler_executables=self._config.compiler_executables,
            )
            snapshot.succeeded = bool(node.succeeded)
            snapshots[tfm] = snapshot
        else:
            snapshot.succeeded = snapshot.succeeded and bool(node.succeeded)

        snapshot.record_properties(self._tree.properties(node.index))
        for item_type, items in self._tree.item_groups(node.index).items():
            snapshot.record_items(item_type, items)

        for command_line in self._compiler_invocations(node):
            snapshot.record_compiler_invocation(
                command_line.value,
                self._is_core_compile(command_line, node),
            )

    def _compiler_invocations(self, project: TreeNode) -> list[TreeNode]:
        """Compiler command lines of a project build, excluding nested projects."""
        return [
            node
            for node in self._tree.walk(project.index, stop=lambda n: n.kind == NodeKind.PROJECT)
            if node.kind == NodeKind.COMMAND_LINE and self._config.is_compiler_task(node.name)
        ]

    def _is_core_compile(self, command_line: TreeNode, project: TreeNode) -> bool:
        target = self._config.core_compile_target.lower()
        for ancestor in self._tree.ancestors(command_line.index):
            if ancestor.index == project.index:
                return False
            if ancestor.kind == NodeKind.TARGET and ancestor.name.lower() == target:
                return True
        return False
