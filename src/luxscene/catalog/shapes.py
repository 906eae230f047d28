"""
Shape constructors for the geometry group.

Mesh-backed shapes (``mesh`` and the synthesized ``plane``) carry their
payload as metadata; the compiler streams it through the graph's mesh
streamer and references the written file. ``plymesh`` points at a PLY
file that already exists.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from ..exceptions import SceneReferenceError, ValidationError
from ..geometry import Mesh, plane_mesh
from ..graph import Entity, EntityMeta
from ..values import float_value
from .config import check_unknown, to_params, to_transform, vec3, with_defaults

logger = logging.getLogger(__name__)


class ShapeType(str, Enum):
    MESH = "mesh"
    PLYMESH = "plymesh"
    SPHERE = "sphere"
    DISK = "disk"
    CYLINDER = "cylinder"
    PLANE = "plane"


SHAPE_PARAMS: dict[ShapeType, dict[str, str]] = {
    ShapeType.MESH: {"smooth": "bool"},
    ShapeType.PLYMESH: {"filename": "string", "smooth": "bool"},
    ShapeType.SPHERE: {"radius": "float"},
    ShapeType.DISK: {"radius": "float", "innerradius": "float", "height": "float"},
    ShapeType.CYLINDER: {"radius": "float", "zmin": "float", "zmax": "float", "phimax": "float"},
    ShapeType.PLANE: {"smooth": "bool"},
}

NON_NEGATIVE = ("radius", "innerradius", "phimax")

_STRUCTURAL = ("material", "interior", "exterior", "transform")


def _as_shape_type(type: Any) -> ShapeType:
    try:
        return ShapeType(type)
    except ValueError:
        raise SceneReferenceError(f"Unknown shape type {type!r}", kind=str(type)) from None


class ShapesMixin:
    """Geometry constructors for :class:`~luxscene.catalog.builder.SceneBuilder`."""

    def mesh(self, shape_id: str, mesh: Mesh, path: Optional[str] = None, **options: Any) -> Entity:
        """
        Shape backed by an in-memory mesh, exported as ``path`` (default ``<id><ext>``).

        Options: smooth, material, interior, exterior, transform.
        """
        if not isinstance(mesh, Mesh):
            raise ValidationError(field="mesh", allowed="a Mesh")
        return self._shape(
            shape_id,
            ShapeType.MESH,
            {},
            options,
            mesh=mesh,
            mesh_path=path or f"{shape_id}{self.config.mesh_extension}",
        )

    def ply_mesh(self, shape_id: str, filename: str, **options: Any) -> Entity:
        """Shape referencing an existing PLY file."""
        return self._shape(shape_id, ShapeType.PLYMESH, {}, {"filename": filename, **options})

    def sphere(self, shape_id: str, radius: float = 1.0, **options: Any) -> Entity:
        return self._shape(shape_id, ShapeType.SPHERE, {}, {"radius": radius, **options})

    def disk(self, shape_id: str, radius: float = 1.0, **options: Any) -> Entity:
        return self._shape(shape_id, ShapeType.DISK, {}, {"radius": radius, **options})

    def cylinder(
        self,
        shape_id: str,
        radius: float = 1.0,
        zmin: float = -1.0,
        zmax: float = 1.0,
        phimax: Optional[float] = None,
        **options: Any,
    ) -> Entity:
        """Cylinder along z. ``phimax`` (full sweep when omitted) follows the builder's angle unit."""
        if phimax is not None:
            phimax = self.config.degrees(float_value("phimax", phimax).value)
        return self._shape(
            shape_id,
            ShapeType.CYLINDER,
            {},
            {"radius": radius, "zmin": zmin, "zmax": zmax, "phimax": phimax, **options},
        )

    def plane(
        self,
        shape_id: str,
        center: Sequence[float] = (0.0, 0.0, 0.0),
        normal: Sequence[float] = (0.0, 0.0, 1.0),
        size: Any = 1.0,
        path: Optional[str] = None,
        **options: Any,
    ) -> Entity:
        """Quad synthesized from a center point, normal and size, exported as a mesh."""
        mesh = plane_mesh(vec3("center", center), vec3("normal", normal), size)
        return self._shape(
            shape_id,
            ShapeType.PLANE,
            {},
            options,
            mesh=mesh,
            mesh_path=path or f"{shape_id}{self.config.mesh_extension}",
        )

    def add_shape(self, shape_id: str, type: Any, **options: Any) -> Entity:
        """
        Build a shape by type name.

        Raises:
            SceneReferenceError: If ``type`` is not a known shape type.
        """
        shape_type = _as_shape_type(type)
        return _SHAPE_CONSTRUCTORS[shape_type](self, shape_id, **options)

    def add_shapes(self, shapes: Iterable[dict[str, Any]]) -> list[str]:
        """Build a batch of shapes; unknown types are logged and skipped."""
        added = []
        for spec in shapes:
            options = dict(spec)
            shape_id = options.pop("id", None)
            shape_type = options.pop("type", None)
            try:
                self.add_shape(shape_id, shape_type, **options)
            except SceneReferenceError as exc:
                logger.warning("Skipping shape %r: %s", shape_id, exc)
                continue
            added.append(shape_id)
        return added

    def _shape(
        self,
        shape_id: str,
        shape_type: ShapeType,
        defaults: dict[str, Any],
        options: dict[str, Any],
        **meta: Any,
    ) -> Entity:
        spec = SHAPE_PARAMS[shape_type]
        check_unknown(options, spec, _STRUCTURAL)
        opts = with_defaults(defaults, options)
        params = to_params(opts, spec, NON_NEGATIVE)
        grammar_type = "plymesh" if "mesh" in meta else shape_type.value
        entity = Entity(
            EntityMeta(
                type=grammar_type,
                material=opts.get("material"),
                interior=opts.get("interior"),
                exterior=opts.get("exterior"),
                transform=to_transform(self.config, opts.get("transform")),
                **meta,
            ),
            params,
        )
        self.graph.upsert("geometry", shape_id, entity)
        return entity


_SHAPE_CONSTRUCTORS = {
    ShapeType.MESH: ShapesMixin.mesh,
    ShapeType.PLYMESH: ShapesMixin.ply_mesh,
    ShapeType.SPHERE: ShapesMixin.sphere,
    ShapeType.DISK: ShapesMixin.disk,
    ShapeType.CYLINDER: ShapesMixin.cylinder,
    ShapeType.PLANE: ShapesMixin.plane,
}
