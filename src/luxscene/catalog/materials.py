"""
Material constructors.

Each variant declares its parameters in ``MATERIAL_PARAMS``; colors and
scalar channels accept either literal values or ``texture("id")``
references. Materials that name other materials (mix, glossy coating)
record those names as dependencies so the compiler can order them.
Every material accepts ``alpha``; values below 1 are composited through
:func:`luxscene.resolver.insert_material`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .. import presets
from ..exceptions import ValidationError
from ..graph import Entity, EntityMeta
from ..resolver import insert_material
from ..values import FloatValue
from .config import check_option, check_unknown, to_params, with_defaults


class MaterialType(str, Enum):
    NULL = "null"
    MATTE = "matte"
    MATTE_TRANSLUCENT = "mattetranslucent"
    GLOSSY = "glossy"
    GLOSSY_TRANSLUCENT = "glossytranslucent"
    GLOSSY_COATING = "glossycoating"
    GLASS = "glass"
    GLASS2 = "glass2"
    ROUGH_GLASS = "roughglass"
    ARCH_GLASS = "archglass"
    METAL = "metal"
    METAL2 = "metal2"
    MIRROR = "mirror"
    VELVET = "velvet"
    CARPAINT = "carpaint"
    MIX = "mix"


_ROUGHNESS = {"uroughness": "float|texture", "vroughness": "float|texture"}
_GLASS = {"Kr": "color|texture", "Kt": "color|texture", "index": "float|texture", "cauchyb": "float|texture"}

MATERIAL_PARAMS: dict[MaterialType, dict[str, str]] = {
    MaterialType.NULL: {},
    MaterialType.MATTE: {"Kd": "color|texture", "sigma": "float|texture"},
    MaterialType.MATTE_TRANSLUCENT: {
        "Kr": "color|texture",
        "Kt": "color|texture",
        "sigma": "float|texture",
        "energyconserving": "bool",
    },
    MaterialType.GLOSSY: {
        "Kd": "color|texture",
        "Ks": "color|texture",
        "Ka": "color|texture",
        **_ROUGHNESS,
        "d": "float|texture",
        "index": "float|texture",
        "multibounce": "bool",
    },
    MaterialType.GLOSSY_TRANSLUCENT: {
        "Kd": "color|texture",
        "Kt": "color|texture",
        "Ks": "color|texture",
        **_ROUGHNESS,
        "index": "float|texture",
        "multibounce": "bool",
    },
    MaterialType.GLOSSY_COATING: {
        "basematerial": "string",
        "Ks": "color|texture",
        "Ka": "color|texture",
        **_ROUGHNESS,
        "d": "float|texture",
        "index": "float|texture",
        "multibounce": "bool",
    },
    MaterialType.GLASS: {**_GLASS, "architectural": "bool", "film": "float|texture", "filmindex": "float|texture"},
    MaterialType.GLASS2: {"architectural": "bool", "dispersion": "bool"},
    MaterialType.ROUGH_GLASS: {**_GLASS, **_ROUGHNESS, "dispersion": "bool"},
    MaterialType.ARCH_GLASS: {**_GLASS, "architectural": "bool"},
    MaterialType.METAL: {"name": "string", **_ROUGHNESS},
    MaterialType.METAL2: {"fresnel": "texture", **_ROUGHNESS},
    MaterialType.MIRROR: {"Kr": "color|texture", "film": "float|texture", "filmindex": "float|texture"},
    MaterialType.VELVET: {
        "Kd": "color|texture",
        "p1": "float",
        "p2": "float",
        "p3": "float",
        "thickness": "float",
    },
    MaterialType.CARPAINT: {"name": "string", "Kd": "color|texture"},
    MaterialType.MIX: {"namedmaterial1": "string", "namedmaterial2": "string", "amount": "float|texture"},
}

MATERIAL_DEFAULTS: dict[MaterialType, dict[str, Any]] = {
    MaterialType.MATTE: {"Kd": (0.8, 0.8, 0.8), "sigma": 0.0},
    MaterialType.MATTE_TRANSLUCENT: {"Kr": (0.5, 0.5, 0.5), "Kt": (0.5, 0.5, 0.5)},
    MaterialType.GLOSSY: {"Kd": (0.5, 0.5, 0.5), "Ks": (0.04, 0.04, 0.04), "uroughness": 0.1, "vroughness": 0.1},
    MaterialType.GLOSSY_TRANSLUCENT: {"Kd": (0.5, 0.5, 0.5), "Kt": (0.5, 0.5, 0.5)},
    MaterialType.GLOSSY_COATING: {"Ks": (0.04, 0.04, 0.04), "uroughness": 0.1, "vroughness": 0.1},
    MaterialType.GLASS: {"Kr": (1.0, 1.0, 1.0), "Kt": (1.0, 1.0, 1.0), "index": 1.5},
    MaterialType.ROUGH_GLASS: {"Kr": (1.0, 1.0, 1.0), "Kt": (1.0, 1.0, 1.0), "index": 1.5},
    MaterialType.ARCH_GLASS: {"Kr": (1.0, 1.0, 1.0), "Kt": (1.0, 1.0, 1.0), "index": 1.5},
    MaterialType.METAL: {"name": "aluminium", "uroughness": 0.001, "vroughness": 0.001},
    MaterialType.MIRROR: {"Kr": (1.0, 1.0, 1.0)},
    MaterialType.CARPAINT: {"name": "ford f8"},
    MaterialType.MIX: {"amount": 0.5},
}

_DEPENDENCY_FIELDS = ("basematerial", "namedmaterial1", "namedmaterial2")

# Variants that are written with another variant's grammar name.
_GRAMMAR_TYPE = {MaterialType.ARCH_GLASS: "glass"}


class MaterialsMixin:
    """Material constructors for :class:`~luxscene.catalog.builder.SceneBuilder`."""

    def material(self, material_id: str, type: Any, alpha: float = 1.0, bumpmap: Any = None, **options: Any) -> Entity:
        """
        Build any material variant.

        Args:
            material_id: Public material id
            type: Material variant name (see :class:`MaterialType`)
            alpha: Opacity; below 1 the material is composited with the hidden material
            bumpmap: Optional ``texture("id")`` used as bump map
            **options: Variant parameters (Kd, Ks, index, ...)

        Returns:
            The material entity as requested (before any alpha compositing)
        """
        try:
            material_type = MaterialType(type)
        except ValueError:
            raise ValidationError(field="type", allowed=[t.value for t in MaterialType]) from None

        spec = MATERIAL_PARAMS[material_type]
        check_unknown(options, spec)
        opts = with_defaults(MATERIAL_DEFAULTS.get(material_type, {}), options)
        if material_type == MaterialType.ARCH_GLASS:
            opts["architectural"] = True
        if isinstance(opts.get("index"), str):
            opts["index"] = presets.IOR.get(opts["index"], opts["index"])
            if isinstance(opts["index"], str):
                raise ValidationError(field="index", allowed=sorted(presets.IOR))
        if material_type == MaterialType.METAL:
            check_option("name", opts.get("name"), presets.METALS)
        if material_type == MaterialType.CARPAINT:
            check_option("name", opts.get("name"), presets.CARPAINTS)
        for required in _DEPENDENCY_FIELDS:
            if required in spec and not opts.get(required):
                raise ValidationError(field=required, allowed="a material id")

        params = to_params(opts, spec)
        amount = params.get("amount")
        if isinstance(amount, FloatValue) and not 0.0 <= amount.value <= 1.0:
            raise ValidationError(field="amount", allowed="a number in [0, 1]")
        if bumpmap is not None:
            params.update(to_params({"bumpmap": bumpmap}, {"bumpmap": "texture"}))

        dependencies = tuple(opts[f] for f in _DEPENDENCY_FIELDS if f in spec)
        entity = Entity(
            EntityMeta(type=_GRAMMAR_TYPE.get(material_type, material_type.value), dependencies=dependencies),
            params,
        )
        insert_material(self.graph, material_id, entity, alpha, self.config.hidden_material_id)
        return entity

    def material_null(self, material_id: str) -> Entity:
        return self.material(material_id, MaterialType.NULL)

    def material_matte(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.MATTE, **options)

    def material_matte_translucent(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.MATTE_TRANSLUCENT, **options)

    def material_glossy(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.GLOSSY, **options)

    def material_glossy_translucent(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.GLOSSY_TRANSLUCENT, **options)

    def material_glossy_coating(self, material_id: str, base: str, **options: Any) -> Entity:
        """Glossy coat over the material ``base``."""
        return self.material(material_id, MaterialType.GLOSSY_COATING, basematerial=base, **options)

    def material_glass(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.GLASS, **options)

    def material_glass2(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.GLASS2, **options)

    def material_rough_glass(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.ROUGH_GLASS, **options)

    def material_arch_glass(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.ARCH_GLASS, **options)

    def material_metal(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.METAL, **options)

    def material_metal2(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.METAL2, **options)

    def material_mirror(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.MIRROR, **options)

    def material_velvet(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.VELVET, **options)

    def material_carpaint(self, material_id: str, **options: Any) -> Entity:
        return self.material(material_id, MaterialType.CARPAINT, **options)

    def material_mix(self, material_id: str, first: str, second: str, amount: Any = 0.5, **options: Any) -> Entity:
        """Blend ``first`` (amount 0) and ``second`` (amount 1)."""
        return self.material(
            material_id,
            MaterialType.MIX,
            namedmaterial1=first,
            namedmaterial2=second,
            amount=amount,
            **options,
        )
