"""In-memory build tree.

Nodes live in a flat arena and refer to each other by index, so the tree
has no reference cycles and can be dropped in one piece after a pass:

    Build
    └── Project (Foo.csproj)
        ├── Properties (folder) -> NameValue nodes
        ├── Items (folder) -> one folder per item type -> Item nodes
        └── Target (CoreCompile)
            └── Task (Csc)
                └── CommandLine
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from ..analysis.items import ProjectItem

PROPERTIES_FOLDER = "Properties"
ITEMS_FOLDER = "Items"


class NodeKind(str, Enum):
    """Build tree node kinds."""

    BUILD = "build"
    PROJECT = "project"
    TARGET = "target"
    TASK = "task"
    FOLDER = "folder"
    NAME_VALUE = "nameValue"
    ITEM = "item"
    MESSAGE = "message"
    COMMAND_LINE = "commandLine"


@dataclass
class TreeNode:
    """One node of the build tree.

    ``name`` holds the project file name, target/task name, folder name,
    property name or message severity; ``value`` holds a property value,
    message text or command line.
    """

    index: int
    kind: NodeKind
    name: str = ""
    value: str | None = None
    parent: int | None = None
    children: list[int] = field(default_factory=list)
    project_file: str | None = None
    item: ProjectItem | None = None
    finished: bool = False
    succeeded: bool | None = None


class BuildTree:
    """Arena of tree nodes indexed by position."""

    def __init__(self):
        self._nodes: list[TreeNode] = []

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> TreeNode | None:
        return self._nodes[0] if self._nodes else None

    def node(self, index: int) -> TreeNode:
        return self._nodes[index]

    def add(self, kind: NodeKind, parent: int | None = None, **fields) -> TreeNode:
        """Create a node and attach it to its parent."""
        node = TreeNode(index=len(self._nodes), kind=kind, parent=parent, **fields)
        self._nodes.append(node)
        if parent is not None:
            self._nodes[parent].children.append(node.index)
        return node

    def children(self, index: int) -> Iterator[TreeNode]:
        for child in self._nodes[index].children:
            yield self._nodes[child]

    def find_child(
        self,
        index: int,
        kind: NodeKind,
        name: str | None = None,
    ) -> TreeNode | None:
        """Find the first child of a kind, optionally by case-insensitive name."""
        folded = name.lower() if name is not None else None
        for child in self.children(index):
            if child.kind != kind:
                continue
            if folded is None or child.name.lower() == folded:
                return child
        return None

    def ancestors(self, index: int) -> Iterator[TreeNode]:
        """Yield the parent chain of a node, innermost first."""
        parent = self._nodes[index].parent
        while parent is not None:
            node = self._nodes[parent]
            yield node
            parent = node.parent

    def walk(self, index: int = 0, stop: Callable[[TreeNode], bool] | None = None) -> Iterator[TreeNode]:
        """Pre-order walk below a node.

        Args:
            index: Node to start from (not yielded itself)
            stop: Predicate for descendants whose subtrees are skipped;
                  matching nodes are still yielded
        """
        if not self._nodes:
            return
        pending = list(reversed(self._nodes[index].children))
        while pending:
            node = self._nodes[pending.pop()]
            yield node
            if stop is None or not stop(node):
                pending.extend(reversed(node.children))

    def visit(self, kind: NodeKind, visitor: Callable[[TreeNode], None]) -> None:
        """Call visitor for every node of a kind, in pre-order."""
        root = self.root
        if root is None:
            return
        if root.kind == kind:
            visitor(root)
        for node in self.walk(root.index):
            if node.kind == kind:
                visitor(node)

    def enclosing(self, index: int, kind: NodeKind) -> TreeNode | None:
        """Nearest node of a kind at or above the given node."""
        node = self._nodes[index]
        if node.kind == kind:
            return node
        for ancestor in self.ancestors(index):
            if ancestor.kind == kind:
                return ancestor
        return None

    def properties(self, index: int) -> dict[str, str]:
        """Name/value pairs of a node's Properties folder."""
        folder = self.find_child(index, NodeKind.FOLDER, PROPERTIES_FOLDER)
        if folder is None:
            return {}
        return {
            child.name: child.value or ""
            for child in self.children(folder.index)
            if child.kind == NodeKind.NAME_VALUE
        }

    def get_property(self, index: int, name: str) -> str | None:
        folder = self.find_child(index, NodeKind.FOLDER, PROPERTIES_FOLDER)
        if folder is None:
            return None
        node = self.find_child(folder.index, NodeKind.NAME_VALUE, name)
        return node.value if node else None

    def set_properties(self, index: int, properties: dict[str, str]) -> None:
        """Add or overwrite name/value nodes under a node's Properties folder."""
        if not properties:
            return
        folder = self._folder(index, PROPERTIES_FOLDER)
        existing = {
            child.name.lower(): child
            for child in self.children(folder.index)
            if child.kind == NodeKind.NAME_VALUE
        }
        for name, value in properties.items():
            node = existing.get(name.lower())
            if node is not None:
                node.value = value
            else:
                existing[name.lower()] = self.add(NodeKind.NAME_VALUE, folder.index, name=name, value=value)

    def item_groups(self, index: int) -> dict[str, list[ProjectItem]]:
        """Items of a node's Items folder, grouped by item type."""
        folder = self.find_child(index, NodeKind.FOLDER, ITEMS_FOLDER)
        if folder is None:
            return {}
        groups: dict[str, list[ProjectItem]] = {}
        for type_folder in self.children(folder.index):
            groups[type_folder.name] = [
                child.item for child in self.children(type_folder.index) if child.item is not None
            ]
        return groups

    def add_items(self, index: int, items: list[ProjectItem]) -> None:
        """Append items under per-type folders of a node's Items folder."""
        if not items:
            return
        folder = self._folder(index, ITEMS_FOLDER)
        for item in items:
            type_folder = self._folder(folder.index, item.item_type)
            self.add(NodeKind.ITEM, type_folder.index, name=item.item_spec, item=item)

    def _folder(self, index: int, name: str) -> TreeNode:
        folder = self.find_child(index, NodeKind.FOLDER, name)
        if folder is None:
            folder = self.add(NodeKind.FOLDER, index, name=name)
        return folder
