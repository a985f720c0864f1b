"""
GCP file importer.

Turns the raw text of a CSV or whitespace-delimited GCP file into GcpPoint
records and a name-grouped index. Bad rows are dropped and counted, never
fatal; only a wrong input type raises.

Example:
    >>> result = import_points("1,2,0,100,200,img1.jpg,A", GcpFormat.CSV_7FIELD)
    >>> result.groups.names
    ['A']
"""

from __future__ import annotations

import csv
import logging
import math
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from gcp_editor.errors import EmptyInputError
from gcp_editor.formats import FormatLayout, GcpFormat, PointSchema, is_crs_line
from gcp_editor.points import GcpPoint, GroupedIndex

logger = logging.getLogger(__name__)


class ImportStatus(Enum):
    """Outcome of an import, so callers can tell "nothing" from "all bad"."""

    OK = "ok"
    EMPTY_INPUT = "empty_input"
    NO_VALID_ROWS = "no_valid_rows"


@dataclass(frozen=True)
class MalformedRow:
    """A dropped input line.

    Attributes:
        line_number: 1-based line number in the original text.
        line: The raw line as read.
        reason: Why the row was dropped.
    """

    line_number: int
    line: str
    reason: str


@dataclass
class ImportResult:
    """Points, grouping and diagnostics from one import."""

    points: list[GcpPoint] = field(default_factory=list)
    groups: GroupedIndex = field(default_factory=GroupedIndex)
    crs: str | None = None
    malformed_rows: list[MalformedRow] = field(default_factory=list)
    status: ImportStatus = ImportStatus.EMPTY_INPUT

    @property
    def skipped(self) -> int:
        return len(self.malformed_rows)

    @property
    def is_empty(self) -> bool:
        return not self.points


class _RowError(ValueError):
    pass


def _default_id() -> str:
    return uuid.uuid4().hex


def _decode(raw: str | bytes | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8-sig")
    if isinstance(raw, str):
        return raw.removeprefix("\ufeff")
    raise TypeError(f"GCP input must be str or bytes, got {type(raw).__name__}")


def _split_row(line: str, layout: FormatLayout) -> list[str]:
    if layout.delimiter is None:
        # Exported rows are tab-delimited: empty fields and spaced names stay put.
        if "\t" in line:
            parts = line.split("\t")
            if len(parts) >= layout.field_count:
                return parts
        return line.split()
    if layout.use_csv_reader:
        try:
            return next(csv.reader([line], skipinitialspace=True))
        except (csv.Error, StopIteration) as e:
            raise _RowError(f"unreadable CSV row: {e}") from e
    return line.split(layout.delimiter)


def _required_number(text: str, field_name: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise _RowError(f"{field_name} is not a number: {text.strip()!r}") from None
    if not math.isfinite(value):
        raise _RowError(f"{field_name} is not finite: {text.strip()!r}")
    return value


def _optional_number(text: str, field_name: str) -> float | None:
    if not text.strip():
        return None
    return _required_number(text, field_name)


def _parse_row(parts: list[str], layout: FormatLayout, point_id: Callable[[], str]) -> GcpPoint:
    if len(parts) < layout.field_count:
        raise _RowError(f"expected {layout.field_count} fields, got {len(parts)}")

    if layout.schema is PointSchema.LAT_LNG:
        name, lat, lng = parts[:3]
        lat_value = _required_number(lat, "lat")
        lng_value = _required_number(lng, "lng")
        return GcpPoint(id=point_id(), name=name, x=lng_value, y=lat_value)

    x, y, z, pixel_x, pixel_y, image_name, name = parts[:7]
    x_value = _required_number(x, "x")
    y_value = _required_number(y, "y")
    z_value = _optional_number(z, "z")
    pixel_x_value = _optional_number(pixel_x, "pixelX")
    pixel_y_value = _optional_number(pixel_y, "pixelY")
    return GcpPoint(
        id=point_id(),
        name=name,
        x=x_value,
        y=y_value,
        z=0.0 if z_value is None else z_value,
        pixel_x=pixel_x_value,
        pixel_y=pixel_y_value,
        image_name=image_name.strip() or None,
    )


def import_points(
    raw: str | bytes | None,
    fmt: GcpFormat | str,
    *,
    id_factory: Callable[[], str] | None = None,
) -> ImportResult:
    """Parse GCP file content into points and a grouped index.

    Args:
        raw: File content. Bytes are decoded as UTF-8 (a BOM is dropped).
        fmt: Format of the content, as a GcpFormat or its name.
        id_factory: Callable returning a fresh point id (default: uuid4 hex).

    Returns:
        ImportResult. Empty or whitespace-only input yields status EMPTY_INPUT;
        input where every row was dropped yields NO_VALID_ROWS.

    Raises:
        TypeError: If raw is not str, bytes or None.
        ValueError: If fmt is unknown or id_factory repeats an id.
    """
    fmt = GcpFormat.parse(fmt)
    layout = fmt.layout
    text = _decode(raw)

    numbered = [
        (number, line)
        for number, line in enumerate(text.splitlines(), start=1)
        if line.strip()
    ]
    if not numbered:
        logger.warning("Nothing to import: GCP input is empty")
        return ImportResult(status=ImportStatus.EMPTY_INPUT)

    crs = None
    if layout.has_crs_header and is_crs_line(numbered[0][1]):
        crs = numbered[0][1].strip()
        numbered = numbered[1:]
        logger.debug(f"Found CRS header: {crs}")

    make_id = id_factory or _default_id
    seen_ids: set[str] = set()

    def point_id() -> str:
        new_id = str(make_id())
        if new_id in seen_ids:
            raise ValueError(f"id_factory returned duplicate id '{new_id}'")
        seen_ids.add(new_id)
        return new_id

    points: list[GcpPoint] = []
    malformed: list[MalformedRow] = []
    for number, line in numbered:
        try:
            point = _parse_row(_split_row(line, layout), layout, point_id)
        except _RowError as e:
            malformed.append(MalformedRow(line_number=number, line=line, reason=str(e)))
            logger.debug(f"Skipping line {number}: {e}")
            continue
        points.append(point)

    groups = GroupedIndex.build(points)

    if not points:
        status = ImportStatus.NO_VALID_ROWS
        logger.warning(f"No valid GCP rows found ({len(malformed)} malformed)")
    else:
        status = ImportStatus.OK
        logger.info(
            f"Imported {len(points)} GCP points in {len(groups)} groups "
            f"from {fmt.value} ({len(malformed)} rows skipped)"
        )

    return ImportResult(
        points=points,
        groups=groups,
        crs=crs,
        malformed_rows=malformed,
        status=status,
    )


def read_gcp_file(path: str | Path | None) -> str:
    """Read a user-selected GCP file, refusing to go on without content.

    Call this before ``import_points`` from a user-triggered path so that an
    absent or empty file is reported instead of importing nothing.

    Raises:
        EmptyInputError: If no path is given, the file does not exist, or it
            is empty after trimming.
    """
    if path is None or str(path) == "":
        raise EmptyInputError("Please select a GCP file first")
    file_path = Path(path)
    if not file_path.is_file():
        raise EmptyInputError(f"GCP file not found: {file_path}")
    text = file_path.read_bytes().decode("utf-8-sig")
    if not text.strip():
        raise EmptyInputError(f"GCP file is empty: {file_path}")
    return text
