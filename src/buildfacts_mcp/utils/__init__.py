"""Utility modules for buildfacts-mcp."""

from .paths import (
    normalize_path,
    project_directory,
    project_guid_from_path,
    resolve_project_path,
)

__all__ = [
    "normalize_path",
    "project_directory",
    "project_guid_from_path",
    "resolve_project_path",
]
