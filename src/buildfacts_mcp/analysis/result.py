"""Per-target-framework build snapshot.

A BuildSnapshot accumulates what one target framework build of a project
reported (properties, items, the compiler command line) and derives the
facts callers actually query: source files, references, package references.
"""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from ..commandline import CommandLineArgument, parse_command_line
from ..config import DEFAULT_COMPILER_EXECUTABLES
from ..utils.paths import project_directory, project_guid_from_path, resolve_project_path
from .frameworks import get_target_frameworks
from .items import ProjectItem

logger = logging.getLogger(__name__)

# Well-known property and item names
TARGET_FRAMEWORK = "TargetFramework"
TARGET_FRAMEWORK_IDENTIFIER = "TargetFrameworkIdentifier"
TARGET_FRAMEWORK_VERSION = "TargetFrameworkVersion"
PROJECT_GUID = "ProjectGuid"
PROJECT_REFERENCE = "ProjectReference"
PACKAGE_REFERENCE = "PackageReference"

# Host verb in "dotnet exec csc.dll ..."
DOTNET_HOST = "dotnet"
DOTNET_EXEC = "exec"


class BuildSnapshot:
    """Properties, items and compiler arguments of one target framework build.

    Property names and item types are case-insensitive. Derived views are
    computed on each access.
    """

    def __init__(
        self,
        project_file_path: str,
        target_framework_moniker: str | None = None,
        compiler_executables: Iterable[str] = DEFAULT_COMPILER_EXECUTABLES,
    ):
        """Initialize snapshot.

        Args:
            project_file_path: Normalized absolute path to the project file
            target_framework_moniker: Moniker this build was grouped under
            compiler_executables: Compiler binaries excluded from source files
        """
        self._project_file_path = project_file_path
        self._target_framework_moniker = target_framework_moniker
        self._compiler_executables = frozenset(name.lower() for name in compiler_executables)
        self._properties: dict[str, tuple[str, str]] = {}  # folded name -> (name, value)
        self._items: dict[str, tuple[str, list[ProjectItem]]] = {}  # folded type -> (type, items)
        self._compiler_arguments: list[CommandLineArgument] | None = None
        self.succeeded = False

    @property
    def project_file_path(self) -> str:
        """Full normalized path to the project file."""
        return self._project_file_path

    @property
    def project_directory(self) -> str:
        return project_directory(self._project_file_path)

    @property
    def target_framework_moniker(self) -> str | None:
        """Full moniker, e.g. ".NETCoreApp,Version=v6.0"."""
        return self._target_framework_moniker

    @property
    def properties(self) -> dict[str, str]:
        return {name: value for name, value in self._properties.values()}

    @property
    def items(self) -> dict[str, list[ProjectItem]]:
        return {item_type: list(items) for item_type, items in self._items.values()}

    @property
    def compiler_arguments(self) -> list[CommandLineArgument]:
        """Classified compiler arguments (empty if none were captured)."""
        return list(self._compiler_arguments or [])

    def get_property(self, name: str) -> str | None:
        """Get a property value, or None if it was not reported."""
        entry = self._properties.get(name.lower())
        return entry[1] if entry else None

    def get_items(self, item_type: str) -> list[ProjectItem]:
        entry = self._items.get(item_type.lower())
        return list(entry[1]) if entry else []

    @property
    def project_guid(self) -> uuid.UUID:
        """Project GUID.

        Uses the ProjectGuid property when it parses, otherwise a GUID hashed
        from the project path so it is repeatable.
        """
        value = self.get_property(PROJECT_GUID)
        if value:
            try:
                return uuid.UUID(value.strip())
            except ValueError:
                logger.debug(f"Ignoring unparsable ProjectGuid {value!r}")
        return project_guid_from_path(self._project_file_path)

    @property
    def target_framework(self) -> str | None:
        """Short target framework name, e.g. "net6.0"."""
        frameworks = get_target_frameworks(
            None,  # only one framework per snapshot
            [self.get_property(TARGET_FRAMEWORK)],
            [(self.get_property(TARGET_FRAMEWORK_IDENTIFIER), self.get_property(TARGET_FRAMEWORK_VERSION))],
        )
        return frameworks[0] if frameworks else None

    @property
    def source_files(self) -> list[str]:
        """Absolute paths of the positional compiler arguments."""
        args = self._compiler_arguments
        if not args:
            return []

        program = os.path.basename((args[0].value or "").replace("\\", "/")).lower()
        is_dotnet_host = os.path.splitext(program)[0] == DOTNET_HOST

        sources: list[str] = []
        for index, arg in enumerate(args[1:], start=1):
            if not arg.is_positional or not arg.value:
                continue
            if os.path.basename(arg.value.replace("\\", "/")).lower() in self._compiler_executables:
                continue
            if index == 1 and is_dotnet_host and arg.value.lower() == DOTNET_EXEC:
                continue
            sources.append(resolve_project_path(self._project_file_path, arg.value))
        return sources

    @property
    def references(self) -> list[str]:
        """Raw values of /reference: switches."""
        return [
            arg.value
            for arg in self._compiler_arguments or []
            if arg.switch == "reference" and arg.value is not None
        ]

    @property
    def project_references(self) -> list[str]:
        """Absolute paths of ProjectReference items."""
        return [
            resolve_project_path(self._project_file_path, item.item_spec)
            for item in self.get_items(PROJECT_REFERENCE)
        ]

    @property
    def package_references(self) -> dict[str, Mapping[str, str]]:
        """PackageReference metadata keyed by package id (first one wins).

        Metadata maps are read-only and their names case-insensitive.
        """
        packages: dict[str, Mapping[str, str]] = {}
        for item in self.get_items(PACKAGE_REFERENCE):
            if item.item_spec not in packages:
                packages[item.item_spec] = item.metadata
        return packages

    def record_properties(self, properties: Mapping[str, str] | Iterable[tuple[str, str]]) -> None:
        """Insert or overwrite properties."""
        pairs = properties.items() if isinstance(properties, Mapping) else properties
        for name, value in pairs:
            self._properties[name.lower()] = (name, value)

    def record_items(self, item_type: str, items: Iterable[ProjectItem]) -> None:
        """Replace the items of one type with a freshly reported group."""
        self._items[item_type.lower()] = (item_type, list(items))

    def record_compiler_invocation(self, command_line: str | None, core_compile: bool) -> None:
        """Store the classified compiler arguments.

        The first invocation is kept unless a later one comes from the core
        compile phase, which always wins.

        Args:
            command_line: Command line text as logged by the compiler task
            core_compile: Whether the call ran inside the core compile target
        """
        if not command_line or not command_line.strip():
            return
        if self._compiler_arguments is not None and not core_compile:
            logger.debug(f"Ignoring extra compiler invocation for {self._project_file_path}")
            return
        self._compiler_arguments = parse_command_line(command_line)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "projectFilePath": self._project_file_path,
            "projectGuid": str(self.project_guid),
            "targetFrameworkMoniker": self._target_framework_moniker,
            "targetFramework": self.target_framework,
            "succeeded": self.succeeded,
            "sourceFiles": self.source_files,
            "references": self.references,
            "projectReferences": self.project_references,
            "packageReferences": {
                package: dict(metadata) for package, metadata in self.package_references.items()
            },
            "compilerArguments": [arg.to_dict() for arg in self.compiler_arguments],
            "properties": self.properties,
            "items": {
                item_type: [item.to_dict() for item in items]
                for item_type, items in self.items.items()
            },
        }

    def __repr__(self) -> str:
        return (
            f"BuildSnapshot({self._project_file_path!r}, "
            f"target_framework_moniker={self._target_framework_moniker!r})"
        )
