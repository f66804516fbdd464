"""Build snapshot aggregation.

Provides the per-target-framework view of a project build:
- Case-insensitive property and item maps
- Compiler arguments from the authoritative compiler invocation
- Source files, references, project and package references
"""

from .frameworks import (
    get_target_framework_moniker,
    get_target_frameworks,
    parse_target_framework_moniker,
)
from .items import ItemMetadata, ProjectItem
from .result import BuildSnapshot

__all__ = [
    "BuildSnapshot",
    "ItemMetadata",
    "ProjectItem",
    "get_target_framework_moniker",
    "get_target_frameworks",
    "parse_target_framework_moniker",
]
