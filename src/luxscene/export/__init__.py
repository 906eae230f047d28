"""Export pipeline - manifest assembly, loose-file and archive writers."""
from .pipeline import ExportOptions, export_graph
from .serializer import EXTENSIONS, serialize_scene
from .writers import export_archived_scene, export_scene

__all__ = [
    "ExportOptions",
    "export_graph",
    "EXTENSIONS",
    "serialize_scene",
    "export_archived_scene",
    "export_scene",
]
