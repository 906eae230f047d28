"""
Scene Serializer - assembles compiled blocks into an export mapping.

The manifest always exists and carries the render settings followed by
the world block. In split mode volumes, materials and geometry move to
companion files that the manifest pulls in with ``Include``; in inline
mode their text sits in the manifest at the same position. Lights always
stay in the manifest.

Manifest layout::

    # <path>
    # generated <timestamp> by luxscene v<version>
    Include "header.lxs"
    Renderer / Accelerator / Sampler / SurfaceIntegrator /
    VolumeIntegrator / PixelFilter / Film / LookAt + Camera
    WorldBegin
    Include "partial.lxs"
    volumes, materials (textures first), geometry
    lights
    WorldEnd
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .. import __version__
from ..bodies import ExportEntry, TextBody, to_entry
from ..graph import SceneGraph
from ..scene_compiler import SceneCompiler
from ..scene_compiler.compiler import SETTINGS_STATEMENTS
from ..scene_compiler.formatting import quote

logger = logging.getLogger(__name__)

MANIFEST = "manifest"
MATERIALS = "materials"
GEOMETRY = "geometry"
VOLUMES = "volumes"

EXTENSIONS = {
    MANIFEST: ".lxs",
    MATERIALS: ".lxm",
    GEOMETRY: ".lxo",
    VOLUMES: ".lxv",
}

# World block order of the sections that can be split out.
SPLIT_SECTIONS = (VOLUMES, MATERIALS, GEOMETRY)
RESERVED_IDS = frozenset(EXTENSIONS)


def header(path: str, comments: tuple[str, ...] = (), now: Optional[datetime] = None) -> str:
    """Comment block naming the file, its generation time and the package version."""
    now = now or datetime.now()
    lines = [
        f"# {path}",
        f"# generated {now.isoformat(timespec='seconds')} by luxscene v{__version__}",
    ]
    for comment in comments:
        lines.extend(f"# {line}" for line in str(comment).splitlines() or [""])
    return "\n".join(lines) + "\n"


def include(path: str) -> str:
    return f"Include {quote(path)}"


def export_paths(base_path: Union[str, Path]) -> dict[str, str]:
    """Destination path per logical file, derived from the base output name."""
    base = str(base_path)
    return {file_id: base + extension for file_id, extension in EXTENSIONS.items()}


def serialize_scene(
    graph: SceneGraph,
    base_path: Union[str, Path],
    split: bool = True,
) -> dict[str, ExportEntry]:
    """
    Compile ``graph`` into an export mapping.

    Args:
        graph: Scene graph to compile; it is not modified
        base_path: Output name without extension, e.g. ``out/scene``
        split: Move volumes, materials and geometry into companion files

    Returns:
        Mapping of logical id (manifest, materials, geometry, volumes and
        one entry per collected mesh) to :class:`ExportEntry`. Companion
        entries of empty sections have a None body.
    """
    paths = export_paths(base_path)
    compiled = SceneCompiler(graph).compile()
    now = datetime.now()

    manifest = [header(paths[MANIFEST], tuple(graph.comments), now)]
    manifest.extend(include(path) + "\n" for path in graph.includes.headers)
    manifest.extend(compiled.settings[group] for group in SETTINGS_STATEMENTS if compiled.settings[group])
    manifest.append("WorldBegin\n")
    manifest.extend(include(path) + "\n" for path in graph.includes.partials)

    companions: dict[str, ExportEntry] = {}
    for section in SPLIT_SECTIONS:
        body = getattr(compiled, section)
        if not split:
            if body:
                manifest.append(body)
            continue
        path = paths[section]
        if body is None:
            companions[section] = ExportEntry(path=path, body=None)
            continue
        companions[section] = ExportEntry(path=path, body=TextBody(header(path, now=now) + "\n" + body))
        manifest.append(include(Path(path).name) + "\n")

    if compiled.lights:
        manifest.append(compiled.lights)
    manifest.append("WorldEnd\n")

    exported = {MANIFEST: ExportEntry(path=paths[MANIFEST], body=TextBody("\n".join(manifest)))}
    for section in (MATERIALS, GEOMETRY, VOLUMES):
        if section in companions:
            exported[section] = companions[section]
    exported.update(collect_meshes(graph))
    return exported


def collect_meshes(graph: SceneGraph) -> dict[str, ExportEntry]:
    """Entries from the graph's mesh collector, minus ids reserved for scene files."""
    collector = graph.config.mesh_collector
    if collector is None:
        return {}
    meshes = {}
    for mesh_id, value in collector(graph).items():
        if mesh_id in RESERVED_IDS:
            logger.warning("Mesh id %r collides with a scene file entry; mesh not exported", mesh_id)
            continue
        meshes[mesh_id] = to_entry(value)
    return meshes
