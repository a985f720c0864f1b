"""
GCP Editor Package.

Import, group, tag and export Ground Control Points (GCPs): reference points
that tie photographs to real-world coordinates.

Example Usage:
    >>> from gcp_editor import GcpFormat, import_points, export_text
    >>>
    >>> result = import_points(
    ...     "1.0,2.0,0,100,200,img1.jpg,PointA", GcpFormat.CSV_7FIELD
    ... )
    >>> result.groups.names
    ['PointA']
    >>> export_text(result.points, GcpFormat.TEXT_WHITESPACE_7FIELD)
    '1\\t2\\t0\\t100\\t200\\timg1.jpg\\tPointA'

Available Classes:
    - GcpPoint: One ground control point record
    - GroupedIndex: Records grouped by GCP name
    - GcpFormat: Supported import/export formats
    - ImportResult / ImportStatus: Importer output
    - ImageSelection / DefaultCoordinatePolicy: Image-to-GCP tagging
"""

from gcp_editor.errors import EmptyInputError, GcpEditorError, SerializationError
from gcp_editor.exporter import build_download, export_filename, export_points, export_text
from gcp_editor.formats import GcpFormat
from gcp_editor.importer import ImportResult, ImportStatus, import_points, read_gcp_file
from gcp_editor.matcher import (
    DefaultCoordinatePolicy,
    ImageSelection,
    match_images,
    merge_group_points,
    save_selection,
)
from gcp_editor.points import GcpPoint, GroupedIndex

__all__ = [
    # Data model
    "GcpPoint",
    "GroupedIndex",
    "GcpFormat",
    # Import / export
    "ImportResult",
    "ImportStatus",
    "import_points",
    "read_gcp_file",
    "export_points",
    "export_text",
    "export_filename",
    "build_download",
    # Image tagging
    "DefaultCoordinatePolicy",
    "ImageSelection",
    "match_images",
    "merge_group_points",
    "save_selection",
    # Errors
    "GcpEditorError",
    "EmptyInputError",
    "SerializationError",
]

__version__ = "0.1.0"
