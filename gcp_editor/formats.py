"""
GCP file formats.

Every supported file layout is a member of ``GcpFormat``. Parsing and
serialization rules hang off the member's ``layout`` so the importer and
exporter never branch on format names themselves.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

CRS_LINE_PREFIX = "+proj"

PIXEL_MAPPED_FIELDS = ("x", "y", "z", "pixelX", "pixelY", "imageName", "name")
LAT_LNG_FIELDS = ("name", "lat", "lng")


class PointSchema(Enum):
    """Field schema a format carries."""

    PIXEL_MAPPED = "pixel_mapped"
    """x, y, z world coordinates plus a pixel location in a named image."""

    LAT_LNG = "lat_lng"
    """Name plus latitude/longitude only."""


@dataclass(frozen=True)
class FormatLayout:
    """Delimiter and field rules for one file format.

    Attributes:
        delimiter: Field separator on import, or None for runs of whitespace.
        schema: Which fields each row carries.
        has_crs_header: Whether the first line may be a ``+proj`` CRS declaration.
        export_delimiter: Separator written between fields on export.
        use_csv_reader: Split rows with the ``csv`` module instead of str.split.
    """

    delimiter: str | None
    schema: PointSchema
    has_crs_header: bool
    export_delimiter: str
    use_csv_reader: bool = False

    @property
    def fields(self) -> tuple[str, ...]:
        if self.schema is PointSchema.PIXEL_MAPPED:
            return PIXEL_MAPPED_FIELDS
        return LAT_LNG_FIELDS

    @property
    def field_count(self) -> int:
        return len(self.fields)


class GcpFormat(Enum):
    """Supported GCP import/export formats."""

    CSV_7FIELD = "csv-7field"
    """Comma-separated x,y,z,pixelX,pixelY,imageName,name rows."""

    TEXT_WHITESPACE_7FIELD = "text-whitespace-7field"
    """Whitespace-separated 7-field rows with an optional +proj CRS first line."""

    CSV_3FIELD = "csv-3field"
    """Comma-separated name,lat,lng rows read with the csv module."""

    TEXT_3FIELD = "text-3field"
    """Comma-separated name,lat,lng rows, one per line."""

    @property
    def layout(self) -> FormatLayout:
        return _LAYOUTS[self]

    @classmethod
    def parse(cls, value: str | GcpFormat) -> GcpFormat:
        """Parse a format name or alias into a GcpFormat.

        Args:
            value: Format value (e.g. "csv-7field") or a short alias
                such as "csv", "txt" or "latlng".

        Returns:
            Matching GcpFormat member.

        Raises:
            ValueError: If value names no known format.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key in _ALIASES:
            return _ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            valid = [f.value for f in cls]
            raise ValueError(
                f"Invalid format '{value}'. Must be one of: {', '.join(valid)}"
            ) from None

    @classmethod
    def from_filename(cls, path: str | Path) -> GcpFormat:
        """Guess the import format from a file extension.

        Raises:
            ValueError: If the extension is not .csv or .txt.
        """
        suffix = Path(path).suffix.lower()
        if suffix == ".csv":
            return cls.CSV_7FIELD
        if suffix == ".txt":
            return cls.TEXT_WHITESPACE_7FIELD
        raise ValueError(
            f"Cannot infer GCP format from '{path}'; pass the format explicitly"
        )


_LAYOUTS: dict[GcpFormat, FormatLayout] = {
    GcpFormat.CSV_7FIELD: FormatLayout(
        delimiter=",",
        schema=PointSchema.PIXEL_MAPPED,
        has_crs_header=False,
        export_delimiter=",",
    ),
    GcpFormat.TEXT_WHITESPACE_7FIELD: FormatLayout(
        delimiter=None,
        schema=PointSchema.PIXEL_MAPPED,
        has_crs_header=True,
        export_delimiter="\t",
    ),
    GcpFormat.CSV_3FIELD: FormatLayout(
        delimiter=",",
        schema=PointSchema.LAT_LNG,
        has_crs_header=False,
        export_delimiter=", ",
        use_csv_reader=True,
    ),
    GcpFormat.TEXT_3FIELD: FormatLayout(
        delimiter=",",
        schema=PointSchema.LAT_LNG,
        has_crs_header=False,
        export_delimiter=", ",
    ),
}

_ALIASES: dict[str, GcpFormat] = {
    "csv": GcpFormat.CSV_7FIELD,
    "txt": GcpFormat.TEXT_WHITESPACE_7FIELD,
    "text": GcpFormat.TEXT_WHITESPACE_7FIELD,
    "latlng-csv": GcpFormat.CSV_3FIELD,
    "latlng": GcpFormat.TEXT_3FIELD,
}


def is_crs_line(line: str) -> bool:
    """Return True if line is a PROJ-string CRS declaration."""
    return line.strip().startswith(CRS_LINE_PREFIX)


def format_number(value: float | None) -> str:
    """Serialize a number without locale or float noise.

    Integral values drop the fractional part (1.0 -> "1"); everything else
    uses the shortest representation that parses back to the same float.
    None serializes as an empty string.

    Raises:
        ValueError: If value is NaN or infinite.
    """
    if value is None:
        return ""
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Cannot serialize non-finite number: {value}")
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)
