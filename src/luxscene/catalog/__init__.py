"""Entity catalog - typed constructors that populate a scene graph."""
from .builder import SceneBuilder
from .config import BuilderConfig
from .lights import LightType
from .materials import MaterialType
from .shapes import ShapeType

__all__ = ["SceneBuilder", "BuilderConfig", "LightType", "MaterialType", "ShapeType"]
