"""Project path utilities.

MSBuild reports project files with whatever separators the build host uses,
so every path is normalized before it is compared or used as an identity:
- Backslashes converted to the OS separator
- Made absolute, with ``.``/``..`` segments collapsed
- Case folded where the platform is case-insensitive
"""

from __future__ import annotations

import os
import uuid


def normalize_path(path: str) -> str:
    """Normalize a file path for consistent comparison.

    Args:
        path: Absolute or relative file path (any separator style)

    Returns:
        Absolute, OS-canonical path
    """
    if os.sep != "\\":
        path = path.replace("\\", os.sep)
    return os.path.normcase(os.path.normpath(os.path.abspath(path)))


def project_directory(project_file_path: str) -> str:
    """Directory that relative paths in a project are resolved against."""
    return os.path.dirname(project_file_path)


def resolve_project_path(project_file_path: str, relative_path: str) -> str:
    """Resolve a path from the command line or an item relative to the project."""
    if os.sep != "\\":
        relative_path = relative_path.replace("\\", os.sep)
    return normalize_path(os.path.join(project_directory(project_file_path), relative_path))


def project_guid_from_path(project_file_path: str) -> uuid.UUID:
    """Derive a repeatable project GUID from the normalized project path.

    Name-based (SHA-1) UUID in the URL namespace, so the same path always
    yields the same identifier across runs and platforms.
    """
    return uuid.uuid5(uuid.NAMESPACE_URL, project_file_path)
