"""Coordinate reference system lookup for GCP file headers."""

from __future__ import annotations

from dataclasses import dataclass

from pyproj import CRS
from pyproj.exceptions import CRSError


@dataclass(frozen=True)
class CrsInfo:
    """Summary of a CRS declaration.

    Attributes:
        definition: The definition as written in the file (e.g. a PROJ string).
        name: Human-readable CRS name reported by PROJ.
        is_geographic: True for lat/lon systems, False for projected ones.
    """

    definition: str
    name: str
    is_geographic: bool


def describe_crs(definition: str) -> CrsInfo:
    """Resolve a CRS definition such as ``+proj=longlat +datum=WGS84``.

    Raises:
        ValueError: If PROJ cannot interpret the definition.
    """
    try:
        crs = CRS.from_user_input(definition.strip())
    except CRSError as e:
        raise ValueError(f"Invalid CRS definition '{definition}': {e}") from e
    return CrsInfo(definition=definition.strip(), name=crs.name, is_geographic=crs.is_geographic)
