"""MSBuild project items."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any


class ItemMetadata(Mapping[str, str]):
    """Read-only metadata map with case-insensitive names.

    Names keep the casing they were last reported with.
    """

    def __init__(self, values: Mapping[str, str] | Iterable[tuple[str, str]] | None = None):
        self._values: dict[str, tuple[str, str]] = {}  # folded name -> (name, value)
        pairs = values.items() if isinstance(values, Mapping) else values or ()
        for name, value in pairs:
            self._values[name.lower()] = (name, value)

    def __getitem__(self, name: str) -> str:
        if not isinstance(name, str):
            raise KeyError(name)
        return self._values[name.lower()][1]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._values.values())

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ItemMetadata({dict(self)!r})"


@dataclass(frozen=True)
class ProjectItem:
    """An MSBuild item (e.g. Compile, PackageReference) with its metadata."""

    item_type: str
    item_spec: str
    metadata: Mapping[str, str] = field(default_factory=ItemMetadata, hash=False)

    def __post_init__(self):
        if not isinstance(self.metadata, ItemMetadata):
            object.__setattr__(self, "metadata", ItemMetadata(self.metadata))

    def get_metadata(self, name: str) -> str | None:
        """Get a metadata value by case-insensitive name."""
        return self.metadata.get(name)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectItem":
        metadata = data.get("metadata") or {}
        return cls(
            item_type=str(data["itemType"]),
            item_spec=str(data["itemSpec"]),
            metadata={str(k): str(v) for k, v in metadata.items()},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "itemType": self.item_type,
            "itemSpec": self.item_spec,
        }
        if self.metadata:
            result["metadata"] = dict(self.metadata)
        return result
