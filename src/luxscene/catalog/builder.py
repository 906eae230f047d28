"""
Scene Builder - typed entity constructors over a scene graph.

The builder validates caller options against each variant's parameter
table and enumerated option sets, converts them to tagged values and
inserts the resulting entities into its graph. Angle units and the
hidden-material id come from an explicit :class:`BuilderConfig`, so two
builders with different settings can work side by side.
"""

from __future__ import annotations

from typing import Optional

from ..graph import SceneGraph
from .config import BuilderConfig
from .lights import LightsMixin
from .materials import MaterialsMixin
from .settings import RenderSettingsMixin
from .shapes import ShapesMixin
from .textures import TexturesMixin
from .volumes import VolumesMixin


class SceneBuilder(
    RenderSettingsMixin,
    LightsMixin,
    ShapesMixin,
    MaterialsMixin,
    VolumesMixin,
    TexturesMixin,
):
    """
    Accumulates a scene through typed constructors.

    Usage:
        builder = SceneBuilder(config=BuilderConfig(angle_unit="degrees"))
        builder.film(width=1280, height=720)
        builder.camera(eye=(0, -5, 1), target=(0, 0, 0.5), fov=45)
        builder.material_matte("floor", Kd=(0.6, 0.6, 0.6))
        builder.plane("ground", size=10, material="floor")
        builder.area_light("key", center=(0, 0, 3), size=1, gain=5)
        graph = builder.graph
    """

    def __init__(self, graph: Optional[SceneGraph] = None, config: Optional[BuilderConfig] = None):
        self.graph = graph if graph is not None else SceneGraph()
        self.config = config or BuilderConfig()

    def add_comment(self, text: str) -> None:
        self.graph.add_comment(text)

    def include_header(self, path: str) -> None:
        self.graph.include_header(path)

    def include_partial(self, path: str) -> None:
        self.graph.include_partial(path)
