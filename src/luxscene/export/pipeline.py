"""Export pipeline - serialize a graph and write it as loose files or one archive."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..graph import SceneGraph
from ..mesh_streams import configure_in_memory_meshes
from .serializer import serialize_scene
from .writers import ExportMapping, export_archived_scene, export_scene

logger = logging.getLogger(__name__)


@dataclass
class ExportOptions:
    """
    Configuration for one export run.

    When ``archive`` is set and the graph has no mesh collector, mesh
    payloads are buffered in memory so they land in the archive next to
    the scene files that reference them.
    """
    base_path: Union[str, Path]
    split: bool = True
    archive: Optional[Union[str, Path]] = None  # zip destination; loose files when None


def export_graph(graph: SceneGraph, options: ExportOptions) -> ExportMapping:
    """Serialize ``graph`` and write it according to ``options``."""
    if options.archive is not None and graph.config.mesh_collector is None:
        logger.debug("Buffering meshes in memory for archive %s", options.archive)
        configure_in_memory_meshes(graph)
    exported = serialize_scene(graph, options.base_path, split=options.split)
    if options.archive is not None:
        return export_archived_scene(exported, options.archive)
    return export_scene(exported)
