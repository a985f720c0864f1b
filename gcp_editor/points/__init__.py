"""GCP point records and the name-grouped index."""

from gcp_editor.points.gcp_point import GcpPoint
from gcp_editor.points.grouped_index import GroupedIndex

__all__ = ["GcpPoint", "GroupedIndex"]
