"""
Scene graph - named groups of entities accumulated before compilation.

The graph has two kinds of slots:

- singleton groups (renderer, sampler, integrator, ...) hold at most one
  entity; setting one replaces the previous entity wholesale
- multi groups (lights, materials, geometry, ...) hold an ordered
  id -> entity mapping; re-inserting an existing id replaces that
  entity in place, a new id is appended

Besides the groups the graph carries free-form comments, include
directives and its export configuration (mesh streaming/collection).
A graph is owned by the code building the scene; the compiler only
reads it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, BinaryIO, Callable, Iterable, Mapping, Optional

from .exceptions import ValidationError
from .geometry import Mesh, Transform
from .mesh_streams import file_mesh_stream
from .values import TaggedValue

logger = logging.getLogger(__name__)

SINGLETON_GROUPS = (
    "renderer",
    "accelerator",
    "sampler",
    "integrator",
    "volume_integrator",
    "filter",
    "film",
    "camera",
)
MULTI_GROUPS = (
    "lights",
    "light_groups",
    "materials",
    "geometry",
    "volumes",
    "textures",
)

MeshStreamer = Callable[[str, str], BinaryIO]
MeshCollector = Callable[["SceneGraph"], Mapping[str, Any]]


@dataclass(frozen=True)
class EntityMeta:
    """Reserved entity fields that drive compilation but are never emitted as parameters."""

    type: str
    transform: Optional[Transform] = None
    material: Optional[str] = None
    mesh: Optional[Mesh] = field(default=None, compare=False)
    mesh_path: Optional[str] = None
    dependencies: tuple[str, ...] = ()
    interior: Optional[str] = None
    exterior: Optional[str] = None
    light_group: Optional[str] = None
    look_at: Optional[tuple[tuple[float, float, float], ...]] = None
    value_type: Optional[str] = None


@dataclass(frozen=True)
class Entity:
    """A renderer statement in waiting: a variant type, metadata and tagged parameters."""

    meta: EntityMeta
    params: Mapping[str, TaggedValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", MappingProxyType(dict(self.params)))

    @property
    def type(self) -> str:
        return self.meta.type

    @property
    def dependencies(self) -> tuple[str, ...]:
        return self.meta.dependencies

    def merged(self, params: Mapping[str, TaggedValue]) -> "Entity":
        """Return a copy with ``params`` layered over the current parameters."""
        return Entity(self.meta, {**self.params, **params})

    def with_meta(self, **changes: Any) -> "Entity":
        return Entity(replace(self.meta, **changes), self.params)


@dataclass
class Includes:
    headers: list[str] = field(default_factory=list)
    partials: list[str] = field(default_factory=list)


@dataclass
class SceneConfig:
    """Export-time collaborators attached to a graph."""

    mesh_streamer: MeshStreamer = file_mesh_stream
    mesh_collector: Optional[MeshCollector] = None


class SceneGraph:
    """
    Mutable, exclusively-owned accumulator for a scene description.

    Usage:
        graph = SceneGraph()
        graph.set_singleton("camera", camera_entity)
        graph.upsert("materials", "floor", matte_entity)
    """

    def __init__(self, config: Optional[SceneConfig] = None):
        self.comments: list[str] = []
        self.includes = Includes()
        self.config = config or SceneConfig()
        self._singletons: dict[str, Entity] = {}
        self._groups: dict[str, dict[str, Entity]] = {name: {} for name in MULTI_GROUPS}

    # =========================================================================
    # Singleton groups
    # =========================================================================

    def set_singleton(self, group: str, entity: Entity) -> None:
        """Replace the sole entity of a singleton group. No merge with the previous entity."""
        self._check_group(group, SINGLETON_GROUPS)
        logger.debug("Setting %s to %s", group, entity.type)
        self._singletons[group] = entity

    def singleton(self, group: str) -> Optional[Entity]:
        self._check_group(group, SINGLETON_GROUPS)
        return self._singletons.get(group)

    # =========================================================================
    # Multi groups
    # =========================================================================

    def upsert(self, group: str, entity_id: str, entity: Entity) -> None:
        """
        Insert or replace an entity in a multi group.

        Replacing keeps the id's original position; a new id is appended.
        """
        entities = self._multi(group)
        if not isinstance(entity_id, str) or not entity_id:
            raise ValidationError(field="id", allowed="a non-empty string")
        logger.debug(
            "%s %s/%s (%s)",
            "Replacing" if entity_id in entities else "Adding",
            group,
            entity_id,
            entity.type,
        )
        entities[entity_id] = entity

    def batch_upsert(self, group: str, items: Iterable[tuple[str, Entity]]) -> None:
        """Apply :meth:`upsert` left to right; later items win on id collision."""
        for entity_id, entity in items:
            self.upsert(group, entity_id, entity)

    def group(self, group: str) -> Mapping[str, Entity]:
        """Read-only view of a multi group in insertion order."""
        return MappingProxyType(self._multi(group))

    def get(self, group: str, entity_id: str) -> Optional[Entity]:
        return self._multi(group).get(entity_id)

    def contains(self, group: str, entity_id: str) -> bool:
        return entity_id in self._multi(group)

    # =========================================================================
    # Comments and includes
    # =========================================================================

    def add_comment(self, text: str) -> None:
        self.comments.append(text)

    def include_header(self, path: str) -> None:
        """Include a file before the render settings."""
        self.includes.headers.append(path)

    def include_partial(self, path: str) -> None:
        """Include a file at the start of the world block."""
        self.includes.partials.append(path)

    def _multi(self, group: str) -> dict[str, Entity]:
        self._check_group(group, MULTI_GROUPS)
        return self._groups[group]

    @staticmethod
    def _check_group(group: str, allowed: tuple[str, ...]) -> None:
        if group not in allowed:
            raise ValidationError(f"Unknown group {group!r}", field="group", allowed=allowed)
