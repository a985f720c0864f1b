"""
Key/value persistence for an editing session.

The importer and exporter never touch storage. Callers hand a store to
``save_session``/``load_session`` to keep points, groups and CRS between
invocations.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from gcp_editor.points import GcpPoint, GroupedIndex

logger = logging.getLogger(__name__)

POINTS_KEY = "gcpPoints"
GROUPS_KEY = "groupedImages"
CRS_KEY = "crs"

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(Protocol):
    """Protocol for byte-valued key/value storage."""

    def get(self, key: str) -> bytes | None:
        """Return the value for key, or None if unset."""
        ...

    def set(self, key: str, value: bytes) -> None:
        """Store value under key."""
        ...


class MemoryStore:
    """In-process store backed by a dict."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)


class DirectoryStore:
    """Store keeping one file per key inside a directory.

    Args:
        root: Directory holding the files; created on first write.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.root / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self._path(key).write_bytes(value)


@dataclass
class Session:
    """Points, grouping and CRS held between edits."""

    points: list[GcpPoint] = field(default_factory=list)
    groups: GroupedIndex = field(default_factory=GroupedIndex)
    crs: str | None = None

    def find(self, point_id: str) -> GcpPoint:
        """Return the point with the given id.

        Raises:
            KeyError: If no point has that id.
        """
        for point in self.points:
            if point.id == point_id:
                return point
        raise KeyError(f"No GCP point with id '{point_id}'")


def save_session(
    store: KeyValueStore,
    points: Iterable[GcpPoint],
    groups: GroupedIndex,
    crs: str | None = None,
) -> None:
    """Write points, groups and CRS to the store as JSON."""
    point_list = list(points)
    store.set(POINTS_KEY, json.dumps([p.to_dict() for p in point_list]).encode("utf-8"))
    store.set(GROUPS_KEY, groups.to_json(indent=None).encode("utf-8"))
    store.set(CRS_KEY, json.dumps(crs).encode("utf-8"))
    logger.debug(f"Saved session with {len(point_list)} points and {len(groups)} groups")


def _load_json(store: KeyValueStore, key: str):
    raw = store.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Stored value for '{key}' is not valid JSON: {e}") from e


def load_session(store: KeyValueStore) -> Session:
    """Read a session back from the store.

    Missing keys give empty defaults.

    Raises:
        ValueError: If a stored value is corrupt.
    """
    points_data = _load_json(store, POINTS_KEY) or []
    groups_data = _load_json(store, GROUPS_KEY)
    crs = _load_json(store, CRS_KEY)

    if not isinstance(points_data, list):
        raise ValueError(f"Stored '{POINTS_KEY}' must be a list")
    try:
        points = [GcpPoint.from_dict(item) for item in points_data]
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Stored '{POINTS_KEY}' is invalid: {e}") from e
    try:
        groups = GroupedIndex.from_dict(groups_data) if groups_data else GroupedIndex()
    except (KeyError, TypeError, AttributeError, ValueError) as e:
        raise ValueError(f"Stored '{GROUPS_KEY}' is invalid: {e}") from e

    return Session(points=points, groups=groups, crs=crs)
