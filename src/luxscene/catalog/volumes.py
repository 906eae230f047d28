"""Participating media constructors."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .. import presets
from ..exceptions import ValidationError
from ..graph import Entity, EntityMeta
from ..values import log_color_value
from .config import check_option, to_params

# Absorption is written as "absorption" for clear media and "sigma_a" otherwise.
_ABSORPTION_PARAM = {"clear": "absorption", "homogeneous": "sigma_a"}


class VolumesMixin:
    """Volume constructors for :class:`~luxscene.catalog.builder.SceneBuilder`."""

    def volume(
        self,
        volume_id: str,
        type: str = "clear",
        fresnel: Any = 1.5,
        absorption: Sequence[float] = (1.0, 1.0, 1.0),
        absorption_scale: float = 1.0,
        absorption_depth: float = 1.0,
        scattering: Optional[Sequence[float]] = None,
        asymmetry: Optional[Sequence[float]] = None,
    ) -> Entity:
        """
        Named volume referenced by shapes and lights through ``interior``/``exterior``.

        Args:
            volume_id: Id in the volumes group
            type: "clear" or "homogeneous"
            fresnel: Index of refraction, or a preset name from ``presets.IOR``
            absorption: Color transmitted after ``absorption_depth`` units
            absorption_scale: Multiplier applied to the derived absorption
            absorption_depth: Reference depth for ``absorption``
            scattering: Scattering color (homogeneous only)
            asymmetry: Phase function asymmetry per channel (homogeneous only)
        """
        check_option("type", type, presets.VOLUME_TYPES)
        if isinstance(fresnel, str):
            if fresnel not in presets.IOR:
                raise ValidationError(field="fresnel", allowed=sorted(presets.IOR))
            fresnel = presets.IOR[fresnel]
        if type == "clear" and (scattering is not None or asymmetry is not None):
            raise ValidationError(field="scattering", allowed="only with homogeneous volumes")

        params = to_params({"fresnel": fresnel}, {"fresnel": "float"}, ["fresnel"])
        absorption_param = _ABSORPTION_PARAM[type]
        params[absorption_param] = log_color_value(absorption_param, absorption, absorption_scale, absorption_depth)
        params.update(
            to_params(
                {k: v for k, v in (("sigma_s", scattering), ("g", asymmetry)) if v is not None},
                {"sigma_s": "color", "g": "color"},
            )
        )
        entity = Entity(EntityMeta(type=type), params)
        self.graph.upsert("volumes", volume_id, entity)
        return entity
