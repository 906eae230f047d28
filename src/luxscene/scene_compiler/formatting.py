"""
Literal syntax for tagged values.

This is the only place that inspects a value's tag. A parameter line
looks like::

    "float fov" [60]
    "bool usevariance" ["false"]
    "texture Kd" ["wood"]
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from ..geometry import Transform
from ..values import (
    BoolValue,
    ColorValue,
    FloatValue,
    FloatVecValue,
    IntValue,
    LogColorValue,
    PointVecValue,
    StrValue,
    StrVecValue,
    TaggedValue,
    TexRefValue,
)

# Smallest transmitted color component used when deriving absorption.
MIN_TRANSMISSION = 1e-6


def format_number(x: float) -> str:
    if isinstance(x, int):
        return str(x)
    if x == 0:
        return "0"
    if float(x).is_integer() and abs(x) < 1e15:
        return str(int(x))
    return format(x, ".9g")


def format_numbers(xs: Iterable[float]) -> str:
    return " ".join(format_number(x) for x in xs)


def quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def absorption(value: LogColorValue) -> tuple[float, float, float]:
    """
    Absorption coefficients for a color transmitted after ``depth`` units.

    Beer-Lambert: transmission = exp(-sigma * depth), so
    sigma = -ln(color) / depth, then multiplied by ``scale``.
    """
    return tuple(
        -math.log(min(max(c, MIN_TRANSMISSION), 1.0)) / value.depth * value.scale + 0.0
        for c in value.value
    )


def format_value(value: TaggedValue) -> str:
    """Bracketed literal for a tagged value."""
    if isinstance(value, BoolValue):
        return '["true"]' if value.value else '["false"]'
    if isinstance(value, (IntValue, FloatValue)):
        return f"[{format_number(value.value)}]"
    if isinstance(value, (StrValue, TexRefValue)):
        return f"[{quote(value.value)}]"
    if isinstance(value, LogColorValue):
        return f"[{format_numbers(absorption(value))}]"
    if isinstance(value, ColorValue):
        return f"[{format_numbers(value.value)}]"
    if isinstance(value, FloatVecValue):
        return f"[{format_numbers(value.value)}]"
    if isinstance(value, PointVecValue):
        return f"[{' '.join(format_numbers(p) for p in value.value)}]"
    if isinstance(value, StrVecValue):
        return f"[{' '.join(quote(s) for s in value.value)}]"
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def format_param(name: str, value: TaggedValue) -> str:
    return f"\t{quote(value.grammar_type + ' ' + name)} {format_value(value)}"


def format_transform(transform: Transform) -> list[str]:
    """Coordinate-system statements reproducing ``transform``."""
    if transform.matrix is not None:
        # The grammar reads matrices column by column.
        columns = np.array(transform.matrix, dtype=float).reshape(4, 4).T.ravel()
        return [f"Transform [{format_numbers(float(x) for x in columns)}]"]

    lines = []
    if transform.translate is not None:
        lines.append(f"Translate {format_numbers(transform.translate)}")
    if transform.rotate is not None:
        for angle, axis in zip(transform.rotate, ("1 0 0", "0 1 0", "0 0 1")):
            if angle:
                lines.append(f"Rotate {format_number(angle)} {axis}")
    if transform.axis_rotation is not None:
        angle, axis = transform.axis_rotation
        lines.append(f"Rotate {format_number(angle)} {format_numbers(axis)}")
    if transform.scale is not None:
        lines.append(f"Scale {format_numbers(transform.scale)}")
    return lines
