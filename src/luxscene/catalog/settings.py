"""
Render settings constructors - renderer, accelerator, sampler, integrators,
filter, film (plus tonemapping) and camera.

All of these live in singleton groups: each call replaces the previous
entity wholesale. Tonemapping is the exception; it merges its parameters
into the current film entity.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .. import presets
from ..exceptions import ValidationError
from ..graph import Entity, EntityMeta
from ..values import float_value, str_value
from .config import check_option, check_unknown, to_params, vec3, with_defaults

SAMPLER_PARAMS: dict[str, dict[str, str]] = {
    "metropolis": {
        "largemutationprob": "float",
        "maxconsecrejects": "int",
        "mutationrange": "float",
        "usevariance": "bool",
        "noiseaware": "bool",
    },
    "lowdiscrepancy": {"pixelsampler": "string", "pixelsamples": "int", "noiseaware": "bool"},
    "random": {"pixelsampler": "string", "pixelsamples": "int"},
    "sobol": {"noiseaware": "bool"},
    "erpt": {"chainlength": "int", "pixelsampler": "string"},
}

SAMPLER_DEFAULTS: dict[str, dict[str, Any]] = {
    "metropolis": {"largemutationprob": 0.4, "maxconsecrejects": 512, "usevariance": False},
    "lowdiscrepancy": {"pixelsampler": "hilbert", "pixelsamples": 4},
    "random": {"pixelsampler": "vegas", "pixelsamples": 4},
    "sobol": {},
    "erpt": {"chainlength": 512},
}

INTEGRATOR_PARAMS: dict[str, dict[str, str]] = {
    "bidirectional": {
        "eyedepth": "int",
        "lightdepth": "int",
        "lightraycount": "int",
        "lightstrategy": "string",
        "eyerrthreshold": "float",
        "lightrrthreshold": "float",
    },
    "path": {
        "maxdepth": "int",
        "lightstrategy": "string",
        "includeenvironment": "bool",
        "rrstrategy": "string",
        "rrcontinueprob": "float",
        "shadowraycount": "int",
    },
    "directlighting": {"maxdepth": "int", "lightstrategy": "string", "shadowraycount": "int"},
    "distributedpath": {
        "lightstrategy": "string",
        "directsamples": "int",
        "diffusereflectdepth": "int",
        "diffuserefractdepth": "int",
        "glossyreflectdepth": "int",
        "glossyrefractdepth": "int",
        "specularreflectdepth": "int",
        "specularrefractdepth": "int",
    },
    "exphotonmap": {
        "renderingmode": "string",
        "lightstrategy": "string",
        "maxdepth": "int",
        "maxphotondepth": "int",
        "directphotons": "int",
        "causticphotons": "int",
        "indirectphotons": "int",
        "radiancephotons": "int",
    },
    "sppm": {
        "maxeyedepth": "int",
        "maxphotondepth": "int",
        "photonperpass": "int",
        "startradius": "float",
        "alpha": "float",
        "lookupaccel": "string",
    },
}

INTEGRATOR_DEFAULTS: dict[str, dict[str, Any]] = {
    "bidirectional": {"eyedepth": 48, "lightdepth": 48, "lightstrategy": "auto"},
    "path": {"maxdepth": 16, "lightstrategy": "auto", "includeenvironment": True},
    "directlighting": {"maxdepth": 8, "lightstrategy": "auto"},
    "distributedpath": {"lightstrategy": "auto", "directsamples": 1},
    "exphotonmap": {"renderingmode": "directlighting", "lightstrategy": "auto", "maxdepth": 5},
    "sppm": {"maxeyedepth": 48, "maxphotondepth": 16, "photonperpass": 1000000},
}

ACCELERATOR_PARAMS: dict[str, dict[str, str]] = {
    "qbvh": {"maxprimsperleaf": "int", "fullsweepthreshold": "int", "skipfactor": "int"},
    "bvh": {},
    "kdtree": {
        "intersectcost": "int",
        "traversalcost": "int",
        "emptybonus": "float",
        "maxprims": "int",
        "maxdepth": "int",
    },
    "none": {},
}

FILTER_PARAMS: dict[str, dict[str, str]] = {
    "box": {},
    "gaussian": {"alpha": "float"},
    "mitchell": {"B": "float", "C": "float", "supersample": "bool"},
    "sinc": {"tau": "float"},
    "triangle": {},
}

FILM_PARAMS = {
    "xresolution": "int",
    "yresolution": "int",
    "gamma": "float",
    "filename": "string",
    "write_png": "bool",
    "write_exr": "bool",
    "write_tga": "bool",
    "write_resume_flm": "bool",
    "restart_resume_flm": "bool",
    "premultiplyalpha": "bool",
    "haltspp": "int",
    "halttime": "int",
    "displayinterval": "int",
    "writeinterval": "int",
    "outlierrejection_k": "int",
    "cameraresponse": "string",
}

TONEMAP_PARAMS: dict[str, dict[str, str]] = {
    "linear": {
        "linear_sensitivity": "float",
        "linear_exposure": "float",
        "linear_fstop": "float",
        "linear_gamma": "float",
    },
    "reinhard": {"reinhard_prescale": "float", "reinhard_postscale": "float", "reinhard_burn": "float"},
    "contrast": {"contrast_ywa": "float"},
    "autolinear": {},
    "maxwhite": {},
}

CAMERA_PARAMS = {
    "fov": "float",
    "lensradius": "float",
    "focaldistance": "float",
    "autofocus": "bool",
    "screenwindow": "floats",
    "hither": "float",
    "yon": "float",
    "shutteropen": "float",
    "shutterclose": "float",
}


def _numeric_fields(spec: dict[str, str]) -> list[str]:
    return [name for name, kind in spec.items() if kind in ("int", "float")]


class RenderSettingsMixin:
    """Singleton render settings for :class:`~luxscene.catalog.builder.SceneBuilder`."""

    def renderer(self, type: str = "sampler", config: Optional[Sequence[str]] = None) -> Entity:
        check_option("renderer", type, presets.RENDERERS)
        params = {}
        if config is not None:
            if type != "slg":
                raise ValidationError(field="config", allowed="only with the slg renderer")
            params = to_params({"config": list(config)}, {"config": "strings"})
        return self._set("renderer", Entity(EntityMeta(type=type), params))

    def accelerator(self, type: str = "qbvh", **options: Any) -> Entity:
        check_option("accelerator", type, presets.ACCELERATORS)
        spec = ACCELERATOR_PARAMS[type]
        check_unknown(options, spec)
        params = to_params(with_defaults({}, options), spec, _numeric_fields(spec))
        return self._set("accelerator", Entity(EntityMeta(type=type), params))

    def sampler(self, type: str = "metropolis", **options: Any) -> Entity:
        check_option("sampler", type, presets.SAMPLERS)
        spec = SAMPLER_PARAMS[type]
        check_unknown(options, spec)
        opts = with_defaults(SAMPLER_DEFAULTS[type], options)
        if "pixelsampler" in opts:
            check_option("pixelsampler", opts["pixelsampler"], presets.PIXEL_SAMPLERS)
        params = to_params(opts, spec, _numeric_fields(spec))
        if "largemutationprob" in params and params["largemutationprob"].value > 1.0:
            raise ValidationError(field="largemutationprob", allowed="a number in [0, 1]")
        return self._set("sampler", Entity(EntityMeta(type=type), params))

    def integrator(self, type: str = "bidirectional", **options: Any) -> Entity:
        """Surface integrator. Depths, counts and thresholds must be non-negative."""
        check_option("integrator", type, presets.SURFACE_INTEGRATORS)
        spec = INTEGRATOR_PARAMS[type]
        check_unknown(options, spec)
        opts = with_defaults(INTEGRATOR_DEFAULTS[type], options)
        if "lightstrategy" in opts:
            check_option("lightstrategy", opts["lightstrategy"], presets.LIGHT_STRATEGIES)
        if "rrstrategy" in opts:
            check_option("rrstrategy", opts["rrstrategy"], presets.RR_STRATEGIES)
        if "renderingmode" in opts:
            check_option("renderingmode", opts["renderingmode"], ("directlighting", "path"))
        params = to_params(opts, spec, _numeric_fields(spec))
        return self._set("integrator", Entity(EntityMeta(type=type), params))

    def volume_integrator(self, type: str = "multi", stepsize: float = 1.0) -> Entity:
        check_option("volume_integrator", type, presets.VOLUME_INTEGRATORS)
        params = to_params({"stepsize": stepsize}, {"stepsize": "float"}, ["stepsize"])
        return self._set("volume_integrator", Entity(EntityMeta(type=type), params))

    def filter(self, type: str = "mitchell", xwidth: float = 1.5, ywidth: float = 1.5, **options: Any) -> Entity:
        check_option("filter", type, presets.FILTERS)
        spec = FILTER_PARAMS[type]
        check_unknown(options, spec)
        params = to_params(
            {"xwidth": xwidth, "ywidth": ywidth, **with_defaults({}, options)},
            {"xwidth": "float", "ywidth": "float", **spec},
            ["xwidth", "ywidth"],
        )
        return self._set("filter", Entity(EntityMeta(type=type), params))

    def film(
        self,
        width: int = 1280,
        height: int = 720,
        outputs: Sequence[str] = ("png",),
        **options: Any,
    ) -> Entity:
        """
        Fleximage film. Replaces any previous film, including merged tonemap settings.

        Args:
            width: Horizontal resolution in pixels
            height: Vertical resolution in pixels
            outputs: Image formats to write (png, exr, tga, flm)
            **options: Further film parameters (gamma, filename, haltspp, ...)
        """
        check_unknown(options, FILM_PARAMS)
        opts = with_defaults({"gamma": 2.2, "filename": "luxscene"}, options)
        for fmt in outputs:
            check_option("outputs", fmt, presets.FILM_OUTPUTS)
            opts["write_resume_flm" if fmt == "flm" else f"write_{fmt}"] = True
        if "cameraresponse" in opts:
            check_option("cameraresponse", opts["cameraresponse"], presets.CAMERA_RESPONSES)
        opts["xresolution"] = width
        opts["yresolution"] = height
        params = to_params(opts, FILM_PARAMS, _numeric_fields(FILM_PARAMS))
        if params["xresolution"].value == 0 or params["yresolution"].value == 0:
            raise ValidationError(field="xresolution", allowed="a positive resolution")
        return self._set("film", Entity(EntityMeta(type="fleximage"), params))

    def tonemap(self, type: str = "linear", **options: Any) -> Entity:
        """
        Merge tonemapping settings into the current film.

        Options are given without the kernel prefix, e.g.
        ``tonemap("reinhard", burn=6.0)``. Overlapping keys from an earlier
        call are overwritten, disjoint ones are kept.
        """
        check_option("tonemap", type, presets.TONEMAPS)
        spec = TONEMAP_PARAMS[type]
        prefixed = {f"{type}_{k}": v for k, v in options.items()}
        check_unknown(prefixed, spec)
        params = to_params(with_defaults({}, prefixed), spec)
        params["tonemapkernel"] = str_value("tonemapkernel", type)
        film = self.graph.singleton("film") or Entity(EntityMeta(type="fleximage"))
        return self._set("film", film.merged(params))

    def camera(
        self,
        type: str = "perspective",
        eye: Sequence[float] = (0.0, -10.0, 0.0),
        target: Sequence[float] = (0.0, 0.0, 0.0),
        up: Sequence[float] = (0.0, 0.0, 1.0),
        exterior: Optional[str] = None,
        **options: Any,
    ) -> Entity:
        """Camera placed with a look-at triple. ``fov`` follows the builder's angle unit."""
        check_option("camera", type, presets.CAMERAS)
        check_unknown(options, CAMERA_PARAMS)
        opts = with_defaults({"fov": 60.0} if type == "perspective" else {}, options)
        if options.get("fov") is not None:
            opts["fov"] = self.config.degrees(float_value("fov", options["fov"]).value)
        params = to_params(opts, CAMERA_PARAMS, ["fov", "lensradius", "focaldistance", "hither", "yon"])
        look_at = (vec3("eye", eye), vec3("target", target), vec3("up", up))
        return self._set("camera", Entity(EntityMeta(type=type, look_at=look_at, exterior=exterior), params))

    def _set(self, group: str, entity: Entity) -> Entity:
        self.graph.set_singleton(group, entity)
        return entity
