"""Builder configuration and shared option handling for the entity catalog."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

import numpy as np

from ..exceptions import ValidationError
from ..geometry import Transform
from ..values import (
    FloatValue,
    IntValue,
    TaggedValue,
    bool_value,
    color_or_texture,
    color_value,
    float_or_texture,
    float_value,
    floats_value,
    int_value,
    points_value,
    str_value,
    strings_value,
    tex_ref_value,
)

ANGLE_UNITS = ("degrees", "radians")


@dataclass(frozen=True)
class BuilderConfig:
    """Settings threaded through every entity constructor of a :class:`SceneBuilder`."""

    angle_unit: str = "degrees"
    hidden_material_id: str = "__hidden__"
    default_light_group: str = "default"
    mesh_extension: str = ".ply"

    def __post_init__(self) -> None:
        if self.angle_unit not in ANGLE_UNITS:
            raise ValidationError(field="angle_unit", allowed=ANGLE_UNITS)

    def degrees(self, angle: float) -> float:
        """Convert a caller-supplied angle to the degrees the grammar expects."""
        if self.angle_unit == "radians":
            return math.degrees(angle)
        return float(angle)

    def radians(self, angle: float) -> float:
        if self.angle_unit == "radians":
            return float(angle)
        return math.radians(angle)


# Converters from raw option values to tagged values, keyed by kind.
_CONVERTERS: dict[str, Callable[[str, Any], TaggedValue]] = {
    "int": int_value,
    "float": float_value,
    "bool": bool_value,
    "string": str_value,
    "color": color_value,
    "floats": floats_value,
    "strings": strings_value,
    "texture": tex_ref_value,
    "color|texture": color_or_texture,
    "float|texture": float_or_texture,
    "point": lambda name, raw: points_value(name, [raw]),
    "vector": lambda name, raw: points_value(name, [raw], role="vector"),
}

ParamSpec = Mapping[str, str]


def with_defaults(defaults: Mapping[str, Any], options: Mapping[str, Any]) -> dict[str, Any]:
    """Merge caller options over defaults. Options set to None drop the default."""
    merged = {**defaults, **options}
    return {k: v for k, v in merged.items() if v is not None}


def check_option(field: str, value: Any, allowed: Iterable[str]) -> str:
    allowed = tuple(allowed)
    if value not in allowed:
        raise ValidationError(field=field, allowed=allowed)
    return value


def check_unknown(options: Mapping[str, Any], spec: ParamSpec, extra: Iterable[str] = ()) -> None:
    known = set(spec) | set(extra)
    unknown = sorted(set(options) - known)
    if unknown:
        raise ValidationError(
            f"Unknown option(s) {', '.join(unknown)}",
            field=unknown[0],
            allowed=sorted(known),
        )


def to_params(
    options: Mapping[str, Any],
    spec: ParamSpec,
    non_negative: Iterable[str] = (),
) -> dict[str, TaggedValue]:
    """
    Convert options to tagged parameters according to ``spec``.

    Args:
        options: Merged caller options (None values already dropped)
        spec: Parameter name -> value kind
        non_negative: Parameter names that must be numbers >= 0

    Returns:
        Parameter name -> tagged value, in ``spec`` order
    """
    non_negative = set(non_negative)
    params: dict[str, TaggedValue] = {}
    for name, kind in spec.items():
        if name not in options:
            continue
        value = _CONVERTERS[kind](name, options[name])
        if name in non_negative and isinstance(value, (IntValue, FloatValue)) and value.value < 0:
            raise ValidationError(field=name, allowed="a non-negative number")
        params[name] = value
    return params


def vec3(field: str, raw: Any) -> tuple[float, float, float]:
    return points_value(field, [raw]).value[0]


def to_transform(config: BuilderConfig, raw: Any) -> Optional[Transform]:
    """
    Accept a Transform, a 4x4 matrix (nested or 16 flat numbers) or a dict with
    ``translate``, ``rotate`` (x, y, z angles), ``axis_rotation`` (angle, axis)
    and ``scale`` keys. Angles follow the builder's angle unit.
    """
    if raw is None or isinstance(raw, Transform):
        return raw
    if isinstance(raw, Mapping):
        unknown = set(raw) - {"translate", "rotate", "axis_rotation", "scale"}
        if unknown:
            raise ValidationError(field="transform", allowed="translate, rotate, axis_rotation, scale")
        rotate = raw.get("rotate")
        axis_rotation = raw.get("axis_rotation")
        scale = raw.get("scale")
        if scale is not None and not isinstance(scale, (Sequence, np.ndarray)):
            scale = (scale, scale, scale)
        return Transform(
            translate=vec3("translate", raw["translate"]) if raw.get("translate") is not None else None,
            rotate=tuple(config.degrees(a) for a in vec3("rotate", rotate)) if rotate is not None else None,
            axis_rotation=(
                (config.degrees(float_value("axis_rotation", axis_rotation[0]).value),
                 vec3("axis_rotation", axis_rotation[1]))
                if axis_rotation is not None else None
            ),
            scale=vec3("scale", scale) if scale is not None else None,
        )
    try:
        flat = np.asarray(raw, dtype=float).ravel()
    except (TypeError, ValueError) as exc:
        raise ValidationError(field="transform", allowed="a 4x4 matrix") from exc
    matrix = floats_value("transform", flat).value
    if len(matrix) != 16:
        raise ValidationError(field="transform", allowed="a 4x4 matrix")
    return Transform(matrix=matrix)
