"""Index of GCP records grouped by point name."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from gcp_editor.points.gcp_point import GcpPoint


@dataclass(frozen=True)
class GroupedIndex:
    """Immutable mapping from GCP name to the records sharing that name.

    One physical point usually appears in several images, so the same name
    shows up on several records. The index is always rebuilt from a full point
    list; ``with_group`` is the only way to change it and returns a new index.

    Attributes:
        groups: Mapping from name to records, in first-appearance order.
    """

    groups: dict[str, tuple[GcpPoint, ...]] = field(default_factory=dict, hash=False)

    @classmethod
    def build(cls, points: Iterable[GcpPoint]) -> GroupedIndex:
        """Group points by name, keeping input order within each group."""
        grouped: dict[str, list[GcpPoint]] = {}
        for point in points:
            grouped.setdefault(point.name, []).append(point)
        return cls(groups={name: tuple(members) for name, members in grouped.items()})

    @property
    def names(self) -> list[str]:
        return list(self.groups)

    def __getitem__(self, name: str) -> tuple[GcpPoint, ...]:
        return self.groups[name]

    def __contains__(self, name: object) -> bool:
        return name in self.groups

    def __iter__(self) -> Iterator[str]:
        return iter(self.groups)

    def __len__(self) -> int:
        return len(self.groups)

    def get(self, name: str) -> tuple[GcpPoint, ...]:
        """Return the records for name, or an empty tuple."""
        return self.groups.get(name, ())

    def image_names(self, name: str) -> list[str]:
        """Return the image names already associated with a GCP."""
        return [p.image_name for p in self.get(name) if p.image_name is not None]

    def all_points(self) -> list[GcpPoint]:
        return [point for members in self.groups.values() for point in members]

    def with_group(self, name: str, points: Iterable[GcpPoint]) -> GroupedIndex:
        """Return a copy with the group for name replaced by points.

        An empty replacement removes the group.
        """
        groups = dict(self.groups)
        members = tuple(points)
        if members:
            groups[name] = members
        else:
            groups.pop(name, None)
        return GroupedIndex(groups=groups)

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            name: [point.to_dict() for point in members]
            for name, members in self.groups.items()
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict[str, list[dict[str, Any]]]) -> GroupedIndex:
        """Create an index from its dict form.

        The dict key is authoritative: a record stored under a key keeps that
        key as its name.

        Raises:
            ValueError: If data is not a mapping of lists.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Grouped index must be a dict, got {type(data).__name__}")
        groups: dict[str, tuple[GcpPoint, ...]] = {}
        for name, members in data.items():
            if not isinstance(members, list):
                raise ValueError(
                    f"Group '{name}' must be a list, got {type(members).__name__}"
                )
            points = []
            for member in members:
                point = GcpPoint.from_dict(member)
                point.rename(name)
                points.append(point)
            groups[name.strip()] = tuple(points)
        return cls(groups=groups)

    @classmethod
    def from_json(cls, json_str: str) -> GroupedIndex:
        return cls.from_dict(json.loads(json_str))
