"""
Unit type annotations for GCP coordinates.

NewType aliases that document which coordinate space a value lives in.
They are erased at runtime, so a plain float is accepted everywhere.

Usage Example:
    >>> from gcp_editor.types import Degrees, PixelsFloat
    >>>
    >>> def place(lat: Degrees, lng: Degrees, u: PixelsFloat) -> None:
    ...     pass
"""

from typing import NewType

Degrees = NewType("Degrees", float)
"""Geographic angle in degrees (latitude, longitude)"""

Meters = NewType("Meters", float)
"""Projected distance or position in meters (easting, northing, elevation)"""

PixelsFloat = NewType("PixelsFloat", float)
"""Floating-point image coordinates in pixels (subpixel column/row)"""
