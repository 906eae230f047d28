"""
Scene Compiler - turns a scene graph into renderer statement blocks.

Each group compiles independently to a text block; the serializer decides
whether the blocks land in one file or several. Compilation reads the
graph and never modifies it. The only side effect is mesh streaming:
every geometry or area light entity carrying a mesh writes its PLY
payload through the graph's configured mesh streamer.

Block layout:
- settings: one statement per singleton group (Renderer, Sampler, ...)
- materials: textures first, then MakeNamedMaterial in dependency order
- volumes: MakeNamedVolume per volume
- geometry: AttributeBegin/AttributeEnd per shape
- lights: AttributeBegin/AttributeEnd per light, tagged with its LightGroup
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..exceptions import ValidationError
from ..graph import Entity, SceneGraph
from ..mesh_streams import mesh_key
from ..resolver import dependency_order
from ..values import FloatValue, float_value, str_value
from .formatting import format_numbers, format_param, format_transform, quote

logger = logging.getLogger(__name__)

# Statement keyword per singleton group, in manifest order.
SETTINGS_STATEMENTS = {
    "renderer": "Renderer",
    "accelerator": "Accelerator",
    "sampler": "Sampler",
    "integrator": "SurfaceIntegrator",
    "volume_integrator": "VolumeIntegrator",
    "filter": "PixelFilter",
    "film": "Film",
    "camera": "Camera",
}

# Groups whose entities may carry a mesh payload.
MESH_GROUPS = ("geometry", "lights")


@dataclass
class CompiledScene:
    """Text blocks per section; ``None`` marks an empty section."""
    settings: dict[str, Optional[str]] = field(default_factory=dict)
    materials: Optional[str] = None
    volumes: Optional[str] = None
    geometry: Optional[str] = None
    lights: Optional[str] = None


def statement(keyword: str, *args: str, params: Optional[dict] = None) -> str:
    """A statement line followed by one indented line per parameter."""
    head = " ".join([keyword, *(quote(a) for a in args)])
    lines = [head]
    for name, value in (params or {}).items():
        lines.append(format_param(name, value))
    return "\n".join(lines)


def join_blocks(blocks: list[str]) -> Optional[str]:
    if not blocks:
        return None
    return "\n\n".join(blocks) + "\n"


class SceneCompiler:
    """
    Compiles a :class:`SceneGraph` into renderer statements.

    Usage:
        compiler = SceneCompiler(graph)
        scene = compiler.compile()
        print(scene.materials)
    """

    def __init__(self, graph: SceneGraph):
        self.graph = graph
        self._sections: dict[str, Callable[[], Optional[str]]] = {
            "materials": self.compile_materials,
            "volumes": self.compile_volumes,
            "geometry": self.compile_geometry,
            "lights": self.compile_lights,
        }

    def compile(self) -> CompiledScene:
        """
        Compile every section.

        Materials are resolved before geometry and lights so that an
        ordering error surfaces before any mesh payload is streamed.
        """
        scene = CompiledScene()
        scene.settings = {group: self.compile_setting(group) for group in SETTINGS_STATEMENTS}
        scene.materials = self.compile_materials()
        scene.volumes = self.compile_volumes()
        scene.geometry = self.compile_geometry()
        scene.lights = self.compile_lights()
        return scene

    def compile_group(self, group: str) -> Optional[str]:
        """Compile a single singleton group or world section by name."""
        if group in SETTINGS_STATEMENTS:
            return self.compile_setting(group)
        if group not in self._sections:
            raise KeyError(f"No compiled section for group {group!r}")
        return self._sections[group]()

    # =========================================================================
    # Render settings
    # =========================================================================

    def compile_setting(self, group: str) -> Optional[str]:
        entity = self.graph.singleton(group)
        if entity is None:
            return None
        lines = []
        if group == "camera":
            if entity.meta.look_at is not None:
                lines.append("LookAt " + "  ".join(format_numbers(v) for v in entity.meta.look_at))
            if entity.meta.exterior:
                lines.append(statement("Exterior", entity.meta.exterior))
        lines.append(statement(SETTINGS_STATEMENTS[group], entity.type, params=dict(entity.params)))
        return "\n".join(lines) + "\n"

    # =========================================================================
    # World sections
    # =========================================================================

    def compile_materials(self) -> Optional[str]:
        blocks = []
        textures = self.graph.group("textures")
        for texture_id in dependency_order(textures, kind="texture"):
            entity = textures[texture_id]
            blocks.append(
                statement("Texture", texture_id, entity.meta.value_type or "color", entity.type, params=dict(entity.params))
            )

        materials = self.graph.group("materials")
        for material_id in dependency_order(materials, kind="material"):
            entity = materials[material_id]
            params = {"type": str_value("type", entity.type), **entity.params}
            blocks.append(statement("MakeNamedMaterial", material_id, params=params))
        return join_blocks(blocks)

    def compile_volumes(self) -> Optional[str]:
        blocks = [
            statement("MakeNamedVolume", volume_id, entity.type, params=dict(entity.params))
            for volume_id, entity in self.graph.group("volumes").items()
        ]
        return join_blocks(blocks)

    def compile_geometry(self) -> Optional[str]:
        self.check_mesh_paths()
        blocks = []
        for shape_id, entity in self.graph.group("geometry").items():
            lines = [f"AttributeBegin # {quote(shape_id)}"]
            lines.extend(self._placement(entity))
            lines.append(self._shape("geometry", shape_id, entity))
            lines.append("AttributeEnd")
            blocks.append("\n".join(lines))
        return join_blocks(blocks)

    def compile_lights(self) -> Optional[str]:
        self.check_mesh_paths()
        blocks = []
        for light_id, entity in self.graph.group("lights").items():
            lines = [f"AttributeBegin # {quote(light_id)}"]
            if entity.meta.light_group:
                lines.append(statement("LightGroup", entity.meta.light_group))
            lines.extend(self._placement(entity))
            params = self._light_params(entity)
            if entity.type == "area":
                lines.append(statement("AreaLightSource", "area", params=params))
                lines.append(self._shape("lights", light_id, entity))
            else:
                lines.append(statement("LightSource", entity.type, params=params))
            lines.append("AttributeEnd")
            blocks.append("\n".join(lines))
        return join_blocks(blocks)

    def check_mesh_paths(self) -> None:
        """
        Reject mesh-carrying entities that would write the same file.

        Raises:
            ValidationError: If two meshes share a destination path.
        """
        owners: dict[str, str] = {}
        for group in MESH_GROUPS:
            for entity_id, entity in self.graph.group(group).items():
                if entity.meta.mesh is None:
                    continue
                key = mesh_key(group, entity_id)
                owner = owners.setdefault(entity.meta.mesh_path, key)
                if owner != key:
                    raise ValidationError(
                        f"Meshes {owner!r} and {key!r} both write {entity.meta.mesh_path!r}",
                        field="path",
                    )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _placement(self, entity: Entity) -> list[str]:
        lines = []
        if entity.meta.transform is not None:
            lines.extend(format_transform(entity.meta.transform))
        if entity.meta.material:
            lines.append(statement("NamedMaterial", entity.meta.material))
        if entity.meta.interior:
            lines.append(statement("Interior", entity.meta.interior))
        if entity.meta.exterior:
            lines.append(statement("Exterior", entity.meta.exterior))
        return lines

    def _shape(self, group: str, entity_id: str, entity: Entity) -> str:
        params = dict(entity.params)
        if entity.meta.mesh is not None:
            self._stream_mesh(mesh_key(group, entity_id), entity)
            params = {"filename": str_value("filename", entity.meta.mesh_path), **params}
            return statement("Shape", "plymesh", params=params)
        return statement("Shape", entity.type, params=params)

    def _stream_mesh(self, mesh_id: str, entity: Entity) -> None:
        logger.debug("Streaming mesh %s to %s", mesh_id, entity.meta.mesh_path)
        with self.graph.config.mesh_streamer(mesh_id, entity.meta.mesh_path) as sink:
            sink.write(entity.meta.mesh.to_ply())

    def _light_params(self, entity: Entity) -> dict:
        """Light parameters with the light group's gain folded into ``gain``."""
        params = dict(entity.params)
        group = self.graph.get("light_groups", entity.meta.light_group) if entity.meta.light_group else None
        if group is None:
            return params
        group_gain = group.params.get("gain")
        if isinstance(group_gain, FloatValue) and group_gain.value != 1.0:
            own = params.get("gain")
            base = own.value if isinstance(own, FloatValue) else 1.0
            params["gain"] = float_value("gain", base * group_gain.value)
        return params
