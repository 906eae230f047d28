"""
Light constructors.

Every light belongs to a light group (the builder's default group unless
``group`` is given). Area lights carry an emitting mesh, either supplied
directly or synthesized as a quad from ``center``, ``normal`` and
``size``. A hidden area light is assigned the shared null material so the
emitter itself is invisible to camera rays.
"""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from ..exceptions import SceneReferenceError, ValidationError
from ..geometry import Mesh, disk_mesh, plane_mesh
from ..graph import Entity, EntityMeta
from ..resolver import ensure_hidden_material
from ..values import float_value
from .config import check_unknown, to_params, to_transform, vec3, with_defaults

logger = logging.getLogger(__name__)


class LightType(str, Enum):
    AREA = "area"
    POINT = "point"
    SPOT = "spot"
    SUN = "sun"
    SKY = "sky"
    SUNSKY = "sunsky"
    INFINITE = "infinite"


COMMON_LIGHT_PARAMS = {"L": "color", "gain": "float", "power": "float", "efficacy": "float", "importance": "float"}

LIGHT_PARAMS: dict[LightType, dict[str, str]] = {
    LightType.AREA: {**COMMON_LIGHT_PARAMS, "nsamples": "int"},
    LightType.POINT: {**COMMON_LIGHT_PARAMS, "from": "point"},
    LightType.SPOT: {
        **COMMON_LIGHT_PARAMS,
        "from": "point",
        "to": "point",
        "coneangle": "float",
        "conedelta": "float",
    },
    LightType.SUN: {"gain": "float", "importance": "float", "sundir": "vector", "turbidity": "float", "relsize": "float"},
    LightType.SKY: {"gain": "float", "importance": "float", "sundir": "vector", "turbidity": "float"},
    LightType.SUNSKY: {
        "gain": "float",
        "importance": "float",
        "sundir": "vector",
        "turbidity": "float",
        "relsize": "float",
    },
    LightType.INFINITE: {"L": "color", "gain": "float", "importance": "float", "mapname": "string", "gamma": "float"},
}

NON_NEGATIVE = ("gain", "power", "efficacy", "importance", "nsamples", "turbidity", "relsize", "coneangle", "conedelta")

_STRUCTURAL = ("group", "interior", "exterior", "transform")


def _as_light_type(type: Any) -> LightType:
    try:
        return LightType(type)
    except ValueError:
        raise SceneReferenceError(f"Unknown light type {type!r}", kind=str(type)) from None


class LightsMixin:
    """Light and light group constructors for :class:`~luxscene.catalog.builder.SceneBuilder`."""

    def light_group(self, group_id: str, gain: float = 1.0) -> Entity:
        """Declare a light group; its gain multiplies the gain of every member light."""
        params = to_params({"gain": gain}, {"gain": "float"}, ["gain"])
        entity = Entity(EntityMeta(type="lightgroup"), params)
        self.graph.upsert("light_groups", group_id, entity)
        return entity

    def area_light(
        self,
        light_id: str,
        mesh: Optional[Mesh] = None,
        center: Optional[Sequence[float]] = None,
        normal: Sequence[float] = (0.0, 0.0, -1.0),
        size: Any = 1.0,
        path: Optional[str] = None,
        hidden: bool = False,
        emitter: str = "quad",
        **options: Any,
    ) -> Entity:
        """
        Area light emitting from a mesh.

        Args:
            light_id: Id in the lights group
            mesh: Emitting mesh; synthesized from center/normal/size when omitted
            center: Center of the synthesized quad
            normal: Emission direction of the synthesized quad
            size: Edge length (or (width, height)) of a quad, diameter of a disk
            path: Destination of the mesh payload, defaults to ``<id>_light<ext>``
            hidden: Hide the emitter from camera rays
            emitter: Synthesized emitter shape, "quad" or "disk"
            **options: L, gain, power, efficacy, importance, nsamples, group,
                interior, exterior, transform
        """
        if mesh is None:
            if center is None:
                raise ValidationError(field="mesh", allowed="a mesh or a center point")
            if emitter == "disk":
                radius = float_value("size", size).value / 2.0
                mesh = disk_mesh(vec3("center", center), vec3("normal", normal), radius)
            elif emitter == "quad":
                mesh = plane_mesh(vec3("center", center), vec3("normal", normal), size)
            else:
                raise ValidationError(field="emitter", allowed=("quad", "disk"))
        elif not isinstance(mesh, Mesh):
            raise ValidationError(field="mesh", allowed="a Mesh")
        material = None
        if hidden:
            material = ensure_hidden_material(self.graph, self.config.hidden_material_id)
        return self._light(
            light_id,
            LightType.AREA,
            {"L": (1.0, 1.0, 1.0), "gain": 1.0},
            options,
            material=material,
            mesh=mesh,
            mesh_path=path or f"{light_id}_light{self.config.mesh_extension}",
        )

    def point_light(self, light_id: str, position: Sequence[float] = (0.0, 0.0, 0.0), **options: Any) -> Entity:
        return self._light(light_id, LightType.POINT, {"L": (1.0, 1.0, 1.0), "gain": 1.0}, {"from": position, **options})

    def spot_light(
        self,
        light_id: str,
        position: Sequence[float] = (0.0, 0.0, 0.0),
        target: Sequence[float] = (0.0, 0.0, -1.0),
        cone_angle: Optional[float] = None,
        cone_delta: Optional[float] = None,
        **options: Any,
    ) -> Entity:
        """
        Spot light. ``cone_angle`` is the full opening angle; the grammar takes half of it.

        Both angles follow the builder's angle unit and default to 60 and 5 degrees.
        """
        for raw in ("coneangle", "conedelta"):
            if raw in options:
                raise ValidationError(field=raw, allowed="cone_angle and cone_delta instead")
        cone = 60.0 if cone_angle is None else self.config.degrees(float_value("cone_angle", cone_angle).value)
        delta = 5.0 if cone_delta is None else self.config.degrees(float_value("cone_delta", cone_delta).value)
        return self._light(
            light_id,
            LightType.SPOT,
            {"L": (1.0, 1.0, 1.0), "gain": 1.0},
            {"from": position, "to": target, "coneangle": cone / 2.0, "conedelta": delta, **options},
        )

    def sun_light(self, light_id: str, **options: Any) -> Entity:
        return self._sky_light(light_id, LightType.SUN, {"gain": 1.0, "turbidity": 2.2, "relsize": 1.0}, options)

    def sky_light(self, light_id: str, **options: Any) -> Entity:
        return self._sky_light(light_id, LightType.SKY, {"gain": 1.0, "turbidity": 2.2}, options)

    def sunsky_light(self, light_id: str, **options: Any) -> Entity:
        return self._sky_light(light_id, LightType.SUNSKY, {"gain": 1.0, "turbidity": 2.2, "relsize": 1.0}, options)

    def infinite_light(self, light_id: str, **options: Any) -> Entity:
        return self._light(light_id, LightType.INFINITE, {"L": (1.0, 1.0, 1.0), "gain": 1.0}, options)

    def add_light(self, light_id: str, type: Any, **options: Any) -> Entity:
        """
        Build a light by type name.

        Raises:
            SceneReferenceError: If ``type`` is not a known light type.
        """
        light_type = _as_light_type(type)
        return _LIGHT_CONSTRUCTORS[light_type](self, light_id, **options)

    def add_lights(self, lights: Iterable[dict[str, Any]]) -> list[str]:
        """
        Build a batch of lights from dicts with ``id`` and ``type`` keys.

        Unknown types are logged and skipped; the rest of the batch is
        still processed. Returns the ids that were added.
        """
        added = []
        for spec in lights:
            options = dict(spec)
            light_id = options.pop("id", None)
            light_type = options.pop("type", None)
            try:
                self.add_light(light_id, light_type, **options)
            except SceneReferenceError as exc:
                logger.warning("Skipping light %r: %s", light_id, exc)
                continue
            added.append(light_id)
        return added

    def _sky_light(self, light_id: str, light_type: LightType, defaults: dict[str, Any], options: dict[str, Any]) -> Entity:
        options = dict(options)
        elevation = options.pop("elevation", None)
        azimuth = options.pop("azimuth", None)
        if elevation is not None or azimuth is not None:
            if "sundir" in options:
                raise ValidationError(field="sundir", allowed="either sundir or elevation/azimuth")
            el = self.config.radians(float_value("elevation", elevation or 0.0).value)
            az = self.config.radians(float_value("azimuth", azimuth or 0.0).value)
            options["sundir"] = (math.cos(el) * math.sin(az), math.cos(el) * math.cos(az), math.sin(el))
        defaults = {"sundir": (0.0, 0.0, 1.0), **defaults}
        return self._light(light_id, light_type, defaults, options)

    def _light(
        self,
        light_id: str,
        light_type: LightType,
        defaults: dict[str, Any],
        options: dict[str, Any],
        **meta: Any,
    ) -> Entity:
        spec = LIGHT_PARAMS[light_type]
        check_unknown(options, spec, _STRUCTURAL)
        opts = with_defaults(defaults, options)
        params = to_params(opts, spec, NON_NEGATIVE)
        entity = Entity(
            EntityMeta(
                type=light_type.value,
                light_group=opts.get("group", self.config.default_light_group),
                transform=to_transform(self.config, opts.get("transform")),
                interior=opts.get("interior"),
                exterior=opts.get("exterior"),
                **meta,
            ),
            params,
        )
        self.graph.upsert("lights", light_id, entity)
        return entity


_LIGHT_CONSTRUCTORS = {
    LightType.AREA: LightsMixin.area_light,
    LightType.POINT: LightsMixin.point_light,
    LightType.SPOT: LightsMixin.spot_light,
    LightType.SUN: LightsMixin.sun_light,
    LightType.SKY: LightsMixin.sky_light,
    LightType.SUNSKY: LightsMixin.sunsky_light,
    LightType.INFINITE: LightsMixin.infinite_light,
}
