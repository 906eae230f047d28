"""
Declarative scene descriptions.

A description is a plain dict (usually loaded from YAML with
:func:`~luxscene.utils.config.load_config`) with one key per group::

    config: {angle_unit: degrees}
    film: {width: 640, height: 480}
    tonemap: {type: reinhard, burn: 6}
    camera: {eye: [0, -5, 1], target: [0, 0, 0.5], fov: 45}
    textures:
      - {id: wood, type: imagemap, filename: wood.png}
    materials:
      - {id: floor, type: matte, Kd: {texture: wood}}
    shapes:
      - {id: ground, type: plane, size: 10, material: floor}
    lights:
      - {id: key, type: area, center: [0, 0, 3], gain: 5}

``{texture: <id>}`` anywhere in an option value marks a texture reference,
``{hsv: [h, s, v]}`` is converted to an RGB color, and a ``mesh`` mapping
with vertices/faces/normals becomes a mesh.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .catalog import BuilderConfig, SceneBuilder
from .colors import hsv_to_rgb
from .exceptions import ValidationError
from .geometry import Mesh
from .graph import SceneGraph
from .utils.schema_validator import validate_description
from .values import texture

logger = logging.getLogger(__name__)

# Singleton sections and the builder method that handles each, in application order.
SETTINGS_SECTIONS = (
    "renderer",
    "accelerator",
    "sampler",
    "integrator",
    "volume_integrator",
    "filter",
    "film",
    "tonemap",
    "camera",
)


def _resolve(value: Any) -> Any:
    if isinstance(value, dict):
        if set(value) == {"texture"}:
            return texture(value["texture"])
        if set(value) == {"hsv"}:
            return hsv_to_rgb(value["hsv"])
        return {k: _resolve(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve(v) for v in value]
    return value


def _with_mesh(item: dict[str, Any]) -> dict[str, Any]:
    mesh = item.get("mesh")
    if isinstance(mesh, dict):
        item = {**item, "mesh": Mesh(mesh["vertices"], mesh["faces"], mesh.get("normals"))}
    return item


def _options(item: dict[str, Any]) -> dict[str, Any]:
    options = {k: _resolve(v) for k, v in item.items()}
    # Transforms and meshes are not texture-bearing; keep them as given.
    for key in ("transform", "mesh"):
        if key in item:
            options[key] = item[key]
    return _with_mesh(options)


def build_scene(
    description: dict[str, Any],
    config: Optional[BuilderConfig] = None,
    graph: Optional[SceneGraph] = None,
) -> SceneGraph:
    """
    Build a scene graph from a declarative description.

    Args:
        description: Scene description dict
        config: Builder settings; overrides the description's ``config`` section
        graph: Graph to populate (a new one when omitted)

    Returns:
        The populated graph

    Raises:
        ValidationError: If the description does not match the schema or an
            entity fails validation.
    """
    report = validate_description(description)
    if not report["valid"]:
        raise ValidationError(
            "Invalid scene description: " + "; ".join(report["errors"]),
            field="description",
        )

    if config is None:
        config = BuilderConfig(**description.get("config", {}))
    builder = SceneBuilder(graph=graph, config=config)

    for comment in description.get("comments", []):
        builder.add_comment(comment)
    includes = description.get("includes", {})
    for path in includes.get("headers", []):
        builder.include_header(path)
    for path in includes.get("partials", []):
        builder.include_partial(path)

    for section in SETTINGS_SECTIONS:
        if section in description:
            getattr(builder, section)(**_options(description[section]))

    for item in description.get("light_groups", []):
        builder.light_group(item["id"], item.get("gain", 1.0))
    for item in description.get("textures", []):
        options = _options(item)
        builder.texture(options.pop("id"), **options)
    for item in description.get("volumes", []):
        options = _options(item)
        builder.volume(options.pop("id"), **options)
    for item in description.get("materials", []):
        options = _options(item)
        builder.material(options.pop("id"), **options)

    shapes = [_options(item) for item in description.get("shapes", [])]
    lights = [_options(item) for item in description.get("lights", [])]
    added_shapes = builder.add_shapes(shapes)
    added_lights = builder.add_lights(lights)
    logger.debug(
        "Built scene with %d/%d shapes and %d/%d lights",
        len(added_shapes), len(shapes), len(added_lights), len(lights),
    )
    return builder.graph
