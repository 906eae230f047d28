"""
Texture constructors.

Textures come in a color and a float flavour. Scale, mix and
checkerboard textures combine operand textures; operands given as
``texture("id")`` become dependencies and are emitted first.
"""

from __future__ import annotations

from typing import Any

from .. import presets
from ..exceptions import ValidationError
from ..graph import Entity, EntityMeta
from ..values import TexRefValue
from .config import check_option, check_unknown, to_params, with_defaults

TEXTURE_TYPES = ("constant", "imagemap", "checkerboard", "scale", "mix", "blackbody")

_IMAGEMAP = {
    "filename": "string",
    "gamma": "float",
    "gain": "float",
    "filtertype": "string",
    "wrap": "string",
    "uscale": "float",
    "vscale": "float",
    "udelta": "float",
    "vdelta": "float",
}


def _operand(value_type: str) -> str:
    return "color|texture" if value_type == "color" else "float|texture"


def _texture_params(type: str, value_type: str) -> dict[str, str]:
    operand = _operand(value_type)
    return {
        "constant": {"value": operand},
        "imagemap": _IMAGEMAP,
        "checkerboard": {"tex1": operand, "tex2": operand, "dimension": "int", "uscale": "float", "vscale": "float"},
        "scale": {"tex1": operand, "tex2": operand},
        "mix": {"tex1": operand, "tex2": operand, "amount": "float|texture"},
        "blackbody": {"temperature": "float"},
    }[type]


TEXTURE_DEFAULTS: dict[str, dict[str, Any]] = {
    "imagemap": {"gamma": 2.2, "gain": 1.0, "filtertype": "bilinear", "wrap": "repeat"},
    "checkerboard": {"dimension": 2},
    "mix": {"amount": 0.5},
    "blackbody": {"temperature": 6500.0},
}


class TexturesMixin:
    """Texture constructors for :class:`~luxscene.catalog.builder.SceneBuilder`."""

    def texture(self, texture_id: str, type: str, value_type: str = "color", **options: Any) -> Entity:
        """
        Build a texture.

        Args:
            texture_id: Id referenced through ``texture(texture_id)``
            type: constant, imagemap, checkerboard, scale, mix or blackbody
            value_type: "color" or "float"
            **options: Variant parameters
        """
        check_option("type", type, TEXTURE_TYPES)
        check_option("value_type", value_type, presets.TEXTURE_VALUE_TYPES)
        if type == "blackbody" and value_type != "color":
            raise ValidationError(field="value_type", allowed="color for blackbody textures")
        if type == "imagemap" and not options.get("filename"):
            raise ValidationError(field="filename", allowed="an image path")
        if "wrap" in options:
            check_option("wrap", options["wrap"], ("repeat", "black", "white", "clamp"))

        spec = _texture_params(type, value_type)
        check_unknown(options, spec)
        params = to_params(with_defaults(TEXTURE_DEFAULTS.get(type, {}), options), spec, ["temperature"])
        dependencies = tuple(v.value for v in params.values() if isinstance(v, TexRefValue))
        entity = Entity(EntityMeta(type=type, value_type=value_type, dependencies=dependencies), params)
        self.graph.upsert("textures", texture_id, entity)
        return entity
