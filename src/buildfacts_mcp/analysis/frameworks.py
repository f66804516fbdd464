"""Target framework moniker resolution.

Builds short framework names (net48, netstandard2.0, net6.0) from the
properties MSBuild reports for a project build.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Final

# Long identifier -> short framework name
FRAMEWORK_IDENTIFIERS: Final[dict[str, str]] = {
    ".netframework": "net",
    ".netstandard": "netstandard",
    ".netcoreapp": "netcoreapp",
    ".netportable": "portable",
    "silverlight": "sl",
    "windowsphone": "wp",
    "windowsphoneapp": "wpa",
    ".netcore": "netcore",
    "tizen": "tizen",
}

# e.g. ".NETCoreApp,Version=v6.0" or ".NETFramework,Version=v4.8,Profile=Client"
MONIKER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\s*(?P<identifier>[^,]+?)\s*,\s*Version\s*=\s*(?P<version>[^,]+?)\s*(?:,.*)?$",
    re.IGNORECASE,
)


def get_target_framework_moniker(identifier: str, version: str) -> str:
    """Combine a framework identifier and version into a short name.

    Args:
        identifier: TargetFrameworkIdentifier, e.g. ".NETFramework"
        version: TargetFrameworkVersion, e.g. "v4.7.2"

    Returns:
        Short framework name, e.g. "net472"
    """
    identifier = identifier.strip()
    version = version.strip().lstrip("vV")
    short = FRAMEWORK_IDENTIFIERS.get(identifier.lower(), identifier.lower())

    if short == "net":
        return f"net{version.replace('.', '')}"

    if short == "netcoreapp":
        major = version.split(".", 1)[0]
        if major.isdigit() and int(major) >= 5:
            return f"net{version}"

    return f"{short}{version}"


def parse_target_framework_moniker(moniker: str) -> str | None:
    """Convert a full moniker (".NETCoreApp,Version=v6.0") to a short name."""
    match = MONIKER_PATTERN.match(moniker or "")
    if not match:
        return None
    return get_target_framework_moniker(match.group("identifier"), match.group("version"))


def get_target_frameworks(
    target_frameworks_values: Iterable[str | None] | None,
    target_framework_values: Iterable[str | None] | None,
    identifier_and_version_values: Iterable[tuple[str | None, str | None]] | None,
) -> list[str]:
    """Collect candidate target frameworks in priority order.

    TargetFrameworks (semicolon lists) and TargetFramework values win; only if
    neither yields anything are identifier/version pairs combined.

    Returns:
        Distinct short framework names, first occurrence first
    """
    frameworks: list[str] = []

    for value in target_frameworks_values or ():
        if value:
            frameworks.extend(v.strip() for v in value.split(";") if v.strip())
    for value in target_framework_values or ():
        if value and value.strip():
            frameworks.append(value.strip())

    if not frameworks:
        for identifier, version in identifier_and_version_values or ():
            if identifier and version and identifier.strip() and version.strip():
                frameworks.append(get_target_framework_moniker(identifier, version))

    return list(dict.fromkeys(frameworks))
