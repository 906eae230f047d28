"""Color conversions."""

import colorsys
from typing import Sequence


def hsv_to_rgb(hsv: Sequence[float]) -> tuple[float, float, float]:
    """Convert an HSV triple (all components in 0..1) to RGB."""
    h, s, v = hsv
    return colorsys.hsv_to_rgb(h % 1.0, s, v)
