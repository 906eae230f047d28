"""
Mesh streamers - write destinations for mesh payloads.

The compiler asks the graph's configured streamer for a sink per mesh
(keyed by a ``<group>/<id>`` mesh id and the destination path) and
writes the PLY payload into it. Two streamers ship with the package:

- :func:`file_mesh_stream` opens the destination file directly
- :class:`MeshRegistry` keeps payloads in memory so they can be folded
  into the export mapping (and, for instance, archived) afterwards

A registry is owned by whoever configured it. Each mesh id may be written
once, and :meth:`MeshRegistry.collect` refuses to run while any buffer is
still open, so readers only ever see finished payloads.
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Optional

from .bodies import Body, ExportEntry
from .exceptions import ValidationError

if TYPE_CHECKING:
    from .graph import SceneGraph

logger = logging.getLogger(__name__)


def mesh_key(group: str, entity_id: str) -> str:
    """Mesh id of an entity's payload. Entity ids are only unique within a group."""
    return f"{group}/{entity_id}"


def file_mesh_stream(mesh_id: str, path: str) -> BinaryIO:
    """Open ``path`` for binary writing, creating parent directories."""
    logger.info("Writing mesh %s: %s", mesh_id, path)
    target = Path(path)
    if target.parent != Path("."):
        target.parent.mkdir(parents=True, exist_ok=True)
    return open(target, "wb")


class MeshBuffer(Body):
    """In-memory sink for one mesh. Readable only after it has been closed."""

    def __init__(self, registry: "MeshRegistry", mesh_id: str, path: str):
        self.mesh_id = mesh_id
        self.path = path
        self._registry = registry
        self._buffer: Optional[io.BytesIO] = io.BytesIO()
        self._data: Optional[bytes] = None

    @property
    def closed(self) -> bool:
        return self._buffer is None

    def write(self, data: bytes) -> int:
        if self._buffer is None:
            raise ValueError(f"Mesh buffer {self.mesh_id!r} is closed")
        return self._buffer.write(data)

    def close(self) -> None:
        if self._buffer is None:
            return
        self._data = self._buffer.getvalue()
        self._buffer.close()
        self._buffer = None
        self._registry._release(self.mesh_id)

    def __enter__(self) -> "MeshBuffer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def as_bytes(self) -> bytes:
        if self._data is None:
            raise ValidationError(f"Mesh {self.mesh_id!r} is still being written")
        return self._data


class MeshRegistry:
    """
    Single-writer store of in-memory mesh payloads.

    Usage:
        registry = configure_in_memory_meshes(graph)
        exported = serialize_scene(graph, "out/scene")   # meshes included
    """

    def __init__(self) -> None:
        self._buffers: dict[str, MeshBuffer] = {}
        self._open: set[str] = set()

    def stream(self, mesh_id: str, path: str) -> MeshBuffer:
        """Mesh streamer: hand out a fresh buffer for ``mesh_id``."""
        if mesh_id in self._buffers:
            raise ValidationError(
                f"Mesh {mesh_id!r} was already written to this registry",
                field="mesh_id",
            )
        buffer = MeshBuffer(self, mesh_id, path)
        self._buffers[mesh_id] = buffer
        self._open.add(mesh_id)
        logger.debug("Buffering mesh %s (%s)", mesh_id, path)
        return buffer

    def collect(self, graph: Optional["SceneGraph"] = None) -> dict[str, ExportEntry]:
        """Mesh collector: return all finished payloads keyed by mesh id."""
        if self._open:
            raise ValidationError(
                "Cannot collect meshes while writers are open: " + ", ".join(sorted(self._open))
            )
        return {
            mesh_id: ExportEntry(path=buffer.path, body=buffer)
            for mesh_id, buffer in self._buffers.items()
        }

    def __contains__(self, mesh_id: str) -> bool:
        return mesh_id in self._buffers

    def __len__(self) -> int:
        return len(self._buffers)

    def _release(self, mesh_id: str) -> None:
        self._open.discard(mesh_id)


def configure_in_memory_meshes(graph: "SceneGraph") -> MeshRegistry:
    """Route the graph's mesh output into a new :class:`MeshRegistry` and return it."""
    registry = MeshRegistry()
    graph.config.mesh_streamer = registry.stream
    graph.config.mesh_collector = registry.collect
    return registry
