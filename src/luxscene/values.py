"""
Tagged values - the closed set of parameter kinds stored on scene entities.

Every renderer parameter held by an entity is one of the frozen
dataclasses below. The tag selects how the compiler writes the value;
nothing else in the package inspects it. Construction goes through the
``*_value`` functions, which validate the raw input and raise
:class:`ValidationError` naming the parameter on a shape mismatch. There
is no cross-tag coercion: a caller asking for a color gets a color or an
error, never a float.
"""

from __future__ import annotations

import numbers
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

import numpy as np

from .exceptions import ValidationError

Color = tuple[float, float, float]
Point3 = tuple[float, float, float]


@dataclass(frozen=True)
class TaggedValue:
    """Base class for all parameter values."""

    kind: ClassVar[str] = ""
    grammar_type: ClassVar[str] = ""


@dataclass(frozen=True)
class IntValue(TaggedValue):
    value: int
    kind: ClassVar[str] = "int"
    grammar_type: ClassVar[str] = "integer"


@dataclass(frozen=True)
class FloatValue(TaggedValue):
    value: float
    kind: ClassVar[str] = "float"
    grammar_type: ClassVar[str] = "float"


@dataclass(frozen=True)
class BoolValue(TaggedValue):
    value: bool
    kind: ClassVar[str] = "bool"
    grammar_type: ClassVar[str] = "bool"


@dataclass(frozen=True)
class StrValue(TaggedValue):
    value: str
    kind: ClassVar[str] = "string"
    grammar_type: ClassVar[str] = "string"


@dataclass(frozen=True)
class ColorValue(TaggedValue):
    value: Color
    kind: ClassVar[str] = "color"
    grammar_type: ClassVar[str] = "color"


@dataclass(frozen=True)
class FloatVecValue(TaggedValue):
    value: tuple[float, ...]
    kind: ClassVar[str] = "floats"
    grammar_type: ClassVar[str] = "float"


@dataclass(frozen=True)
class PointVecValue(TaggedValue):
    """Sequence of 3D points; ``role`` selects point, vector or normal syntax."""

    value: tuple[Point3, ...]
    role: str = "point"
    kind: ClassVar[str] = "points"

    @property
    def grammar_type(self) -> str:  # type: ignore[override]
        return self.role


@dataclass(frozen=True)
class StrVecValue(TaggedValue):
    value: tuple[str, ...]
    kind: ClassVar[str] = "strings"
    grammar_type: ClassVar[str] = "string"


@dataclass(frozen=True)
class LogColorValue(TaggedValue):
    """A color given as transmitted color at a reference depth.

    The compiler turns it into absorption coefficients; see
    :func:`luxscene.scene_compiler.formatting.absorption`.
    """

    value: Color
    scale: float = 1.0
    depth: float = 1.0
    kind: ClassVar[str] = "logcolor"
    grammar_type: ClassVar[str] = "color"


@dataclass(frozen=True)
class TexRefValue(TaggedValue):
    """Reference to a named texture."""

    value: str
    kind: ClassVar[str] = "texture"
    grammar_type: ClassVar[str] = "texture"


def _is_real(x: Any) -> bool:
    return isinstance(x, numbers.Real) and not isinstance(x, (bool, np.bool_))


def _is_int(x: Any) -> bool:
    return isinstance(x, numbers.Integral) and not isinstance(x, (bool, np.bool_))


def _real_triple(name: str, raw: Any, shape: str) -> tuple[float, float, float]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, (Sequence, np.ndarray)):
        raise ValidationError(field=name, allowed=shape)
    items = list(raw)
    if len(items) != 3 or not all(_is_real(x) for x in items):
        raise ValidationError(field=name, allowed=shape)
    return (float(items[0]), float(items[1]), float(items[2]))


def int_value(name: str, raw: Any) -> IntValue:
    if not _is_int(raw):
        raise ValidationError(field=name, allowed="an integer")
    return IntValue(int(raw))


def float_value(name: str, raw: Any) -> FloatValue:
    if not _is_real(raw):
        raise ValidationError(field=name, allowed="a number")
    return FloatValue(float(raw))


def bool_value(name: str, raw: Any) -> BoolValue:
    if not isinstance(raw, (bool, np.bool_)):
        raise ValidationError(field=name, allowed="a boolean")
    return BoolValue(bool(raw))


def str_value(name: str, raw: Any) -> StrValue:
    if not isinstance(raw, str):
        raise ValidationError(field=name, allowed="a string")
    return StrValue(raw)


def color_value(name: str, raw: Any) -> ColorValue:
    return ColorValue(_real_triple(name, raw, "a color of 3 numbers"))


def floats_value(name: str, raw: Any) -> FloatVecValue:
    if isinstance(raw, np.ndarray):
        raw = raw.ravel().tolist()
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ValidationError(field=name, allowed="a sequence of numbers")
    if not all(_is_real(x) for x in raw):
        raise ValidationError(field=name, allowed="a sequence of numbers")
    return FloatVecValue(tuple(float(x) for x in raw))


POINT_ROLES = ("point", "vector", "normal")


def points_value(name: str, raw: Any, role: str = "point") -> PointVecValue:
    if role not in POINT_ROLES:
        raise ValidationError(field=f"{name}.role", allowed=POINT_ROLES)
    if isinstance(raw, np.ndarray):
        if raw.ndim != 2 or raw.shape[1] != 3:
            raise ValidationError(field=name, allowed="an (N, 3) array of points")
        raw = raw.tolist()
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise ValidationError(field=name, allowed="a sequence of 3D points")
    return PointVecValue(tuple(_real_triple(name, p, "a sequence of 3D points") for p in raw), role)


def strings_value(name: str, raw: Any) -> StrVecValue:
    if isinstance(raw, str) or not isinstance(raw, Sequence):
        raise ValidationError(field=name, allowed="a sequence of strings")
    if not all(isinstance(s, str) for s in raw):
        raise ValidationError(field=name, allowed="a sequence of strings")
    return StrVecValue(tuple(raw))


def log_color_value(name: str, raw: Any, scale: float = 1.0, depth: float = 1.0) -> LogColorValue:
    color = _real_triple(name, raw, "a color of 3 numbers")
    if not _is_real(scale):
        raise ValidationError(field=f"{name}.scale", allowed="a number")
    if not _is_real(depth) or depth <= 0:
        raise ValidationError(field=f"{name}.depth", allowed="a positive number")
    return LogColorValue(color, float(scale), float(depth))


def tex_ref_value(name: str, raw: Any) -> TexRefValue:
    if isinstance(raw, TexRefValue):
        return raw
    if not isinstance(raw, str) or not raw:
        raise ValidationError(field=name, allowed="a texture id")
    return TexRefValue(raw)


def texture(texture_id: str) -> TexRefValue:
    """Mark a parameter value as a reference to the texture ``texture_id``."""
    return tex_ref_value("texture", texture_id)


_CONSTRUCTORS: dict[str, Callable[[str, Any], TaggedValue]] = {
    "int": int_value,
    "float": float_value,
    "bool": bool_value,
    "string": str_value,
    "color": color_value,
    "floats": floats_value,
    "points": points_value,
    "strings": strings_value,
    "texture": tex_ref_value,
}


def tagged(kind: str, name: str, raw: Any) -> TaggedValue:
    """Build a tagged value of ``kind`` for parameter ``name``.

    Log colors take extra arguments and are built with
    :func:`log_color_value` directly.
    """
    try:
        constructor = _CONSTRUCTORS[kind]
    except KeyError:
        raise ValidationError(
            f"Unknown value kind {kind!r} for {name!r}",
            field=name,
            allowed=sorted(_CONSTRUCTORS),
        ) from None
    return constructor(name, raw)


def color_or_texture(name: str, raw: Any) -> TaggedValue:
    """Accept either an explicit texture reference or a color triple."""
    if isinstance(raw, TexRefValue):
        return raw
    return color_value(name, raw)


def float_or_texture(name: str, raw: Any) -> TaggedValue:
    """Accept either an explicit texture reference or a number."""
    if isinstance(raw, TexRefValue):
        return raw
    return float_value(name, raw)
