"""
GCP file exporter.

Serializes GcpPoint records back to the flat delimited text the importer reads.
The exporter only produces bytes; delivering them (writing a file, answering an
HTTP request) is up to the caller, helped by ``export_filename`` and
``build_download``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from gcp_editor.errors import SerializationError
from gcp_editor.formats import GcpFormat, PointSchema, format_number
from gcp_editor.points import GcpPoint

logger = logging.getLogger(__name__)

CONTENT_TYPE = "text/plain"
DEFAULT_FILENAME_PREFIX = "gcp_points"


def _coerce_points(points: Any) -> list[GcpPoint]:
    if not isinstance(points, (list, tuple)):
        raise SerializationError(
            f"GCP points must be a list, got {type(points).__name__}"
        )
    if not points:
        raise SerializationError("Invalid GCP points format: no points to export")

    coerced: list[GcpPoint] = []
    for i, point in enumerate(points):
        if isinstance(point, GcpPoint):
            coerced.append(point)
        elif isinstance(point, Mapping):
            try:
                coerced.append(GcpPoint.from_dict(dict(point)))
            except (KeyError, TypeError, ValueError) as e:
                raise SerializationError(f"GCP point at index {i} is invalid: {e}") from e
        else:
            raise SerializationError(
                f"GCP point at index {i} must be a GcpPoint or dict, "
                f"got {type(point).__name__}"
            )
    return coerced


def _row(point: GcpPoint, fmt: GcpFormat) -> str:
    layout = fmt.layout
    if layout.schema is PointSchema.LAT_LNG:
        fields = [point.name, format_number(point.lat), format_number(point.lng)]
    else:
        fields = [
            format_number(point.x),
            format_number(point.y),
            format_number(point.z),
            format_number(point.pixel_x),
            format_number(point.pixel_y),
            point.image_name or "",
            point.name,
        ]
    return layout.export_delimiter.join(fields)


def export_text(points: Sequence[GcpPoint | Mapping[str, Any]], fmt: GcpFormat | str) -> str:
    """Serialize points to GCP file text.

    Args:
        points: Points in output order, as GcpPoint or dicts in
            ``GcpPoint.to_dict`` form.
        fmt: Target format.

    Returns:
        One row per point joined with newlines, no header, no trailing newline.

    Raises:
        SerializationError: If points is not a non-empty list of convertible
            records, or a coordinate cannot be serialized.
        ValueError: If fmt is unknown.
    """
    fmt = GcpFormat.parse(fmt)
    records = _coerce_points(points)
    try:
        rows = [_row(point, fmt) for point in records]
    except ValueError as e:
        raise SerializationError(str(e)) from e
    logger.info(f"Exported {len(rows)} GCP points as {fmt.value}")
    return "\n".join(rows)


def export_points(points: Sequence[GcpPoint | Mapping[str, Any]], fmt: GcpFormat | str) -> bytes:
    """Serialize points to UTF-8 encoded GCP file content."""
    return export_text(points, fmt).encode("utf-8")


def export_filename(now: datetime | None = None, prefix: str = DEFAULT_FILENAME_PREFIX) -> str:
    """Build a download filename embedding a compact UTC timestamp.

    The timestamp is ISO-8601 with separators stripped and millisecond
    precision, e.g. ``gcp_points_20250114093005123.txt``.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    stamp = now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"
    return f"{prefix}_{stamp}.txt"


@dataclass(frozen=True)
class ExportDownload:
    """An exported file ready to hand to a browser or HTTP client."""

    filename: str
    body: bytes
    content_type: str = CONTENT_TYPE

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": self.content_type,
            "Content-Disposition": f"attachment; filename={self.filename}",
        }


def build_download(
    points: Sequence[GcpPoint | Mapping[str, Any]],
    fmt: GcpFormat | str,
    now: datetime | None = None,
    prefix: str = DEFAULT_FILENAME_PREFIX,
) -> ExportDownload:
    """Export points and pair the content with a timestamped filename."""
    return ExportDownload(
        filename=export_filename(now, prefix=prefix),
        body=export_points(points, fmt),
    )
