"""Ground control point record."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from gcp_editor.types import Degrees, Meters, PixelsFloat


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class GcpPoint:
    """A ground control point, optionally tied to a pixel in one image.

    Records are mutable: the editing surface moves and renames them in place.
    ``id`` does not take part in equality, so two imports of the same file
    compare equal even though their ids differ.

    Attributes:
        id: Opaque identifier, unique within one import batch.
        name: Label of the physical point; the grouping key.
        x: Easting / longitude. None only for records awaiting manual entry.
        y: Northing / latitude. None only for records awaiting manual entry.
        z: Elevation, 0.0 when unknown.
        pixel_x: Pixel column in ``image_name``, if known.
        pixel_y: Pixel row in ``image_name``, if known.
        image_name: File name of the image the pixel location refers to.
    """

    id: str = field(compare=False)
    name: str
    x: float | None
    y: float | None
    z: Meters = 0.0
    pixel_x: PixelsFloat | None = None
    pixel_y: PixelsFloat | None = None
    image_name: str | None = None

    def __post_init__(self) -> None:
        self.name = self.name.strip()

    @property
    def lat(self) -> Degrees | None:
        """Latitude alias for ``y`` in the lat/lng schema."""
        return self.y

    @lat.setter
    def lat(self, value: float | None) -> None:
        self.y = value

    @property
    def lng(self) -> Degrees | None:
        """Longitude alias for ``x`` in the lat/lng schema."""
        return self.x

    @lng.setter
    def lng(self, value: float | None) -> None:
        self.x = value

    @property
    def has_position(self) -> bool:
        return (
            self.x is not None
            and self.y is not None
            and math.isfinite(self.x)
            and math.isfinite(self.y)
        )

    def move_to(self, lat: float, lng: float) -> None:
        """Set a new position, as reported when a map marker is released.

        Raises:
            ValueError: If either coordinate is not a finite number.
        """
        lat, lng = float(lat), float(lng)
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise ValueError(f"Position must be finite, got ({lat}, {lng})")
        self.lat = lat
        self.lng = lng

    def rename(self, name: str) -> None:
        self.name = name.strip()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict using the editor's camelCase keys."""
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "pixelX": self.pixel_x,
            "pixelY": self.pixel_y,
            "imageName": self.image_name,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GcpPoint:
        """Create a GcpPoint from a dict.

        Accepts the camelCase keys written by ``to_dict``, their snake_case
        equivalents, and ``lat``/``lng`` in place of ``y``/``x``.

        Raises:
            KeyError: If ``id`` is missing.
            ValueError: If a numeric field cannot be converted.
        """
        x = data.get("x", data.get("lng"))
        y = data.get("y", data.get("lat"))
        z = _optional_float(data.get("z"))
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            x=_optional_float(x),
            y=_optional_float(y),
            z=0.0 if z is None else z,
            pixel_x=_optional_float(data.get("pixelX", data.get("pixel_x"))),
            pixel_y=_optional_float(data.get("pixelY", data.get("pixel_y"))),
            image_name=_optional_str(data.get("imageName", data.get("image_name"))),
        )
