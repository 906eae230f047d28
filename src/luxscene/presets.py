"""
Static preset tables: enumerated option sets, refraction indices and
named renderer presets. Read-only lookups for the entity catalog.
"""

from types import MappingProxyType

RENDERERS = frozenset({"sampler", "hybrid", "slg"})
SAMPLERS = frozenset({"metropolis", "lowdiscrepancy", "random", "sobol", "erpt"})
PIXEL_SAMPLERS = frozenset({"linear", "tile", "random", "vegas", "lowdiscrepancy", "hilbert"})
SURFACE_INTEGRATORS = frozenset(
    {"bidirectional", "path", "directlighting", "distributedpath", "exphotonmap", "sppm"}
)
LIGHT_STRATEGIES = frozenset(
    {"auto", "one", "all", "importance", "powerimp", "allpowerimp", "logpowerimp"}
)
RR_STRATEGIES = frozenset({"efficiency", "probability", "none"})
ACCELERATORS = frozenset({"qbvh", "bvh", "kdtree", "none"})
VOLUME_INTEGRATORS = frozenset({"single", "emission", "multi"})
FILTERS = frozenset({"box", "gaussian", "mitchell", "sinc", "triangle"})
CAMERAS = frozenset({"perspective", "orthographic", "realistic", "environment"})
TONEMAPS = frozenset({"linear", "reinhard", "contrast", "autolinear", "maxwhite"})
FILM_OUTPUTS = frozenset({"png", "exr", "tga", "flm"})
TEXTURE_VALUE_TYPES = frozenset({"color", "float"})
VOLUME_TYPES = frozenset({"clear", "homogeneous"})

CAMERA_RESPONSES = frozenset(
    {
        "Advantix_100CD",
        "Advantix_200CD",
        "Agfacolor_Futura_100CD",
        "Agfachrome_CTPrecisa_100CD",
        "Ektachrome_100CD",
        "Fujifilm_FP2900Z_CD",
        "Kodachrome_64CD",
        "Polaroid_690CD",
    }
)

METALS = frozenset({"amorphous carbon", "silver", "gold", "copper", "aluminium"})
CARPAINTS = frozenset(
    {"ford f8", "polaris silber", "opel titan", "bmw339", "2k acrylack", "white", "blue", "blue matte"}
)

IOR = MappingProxyType(
    {
        "air": 1.0003,
        "water": 1.333,
        "ice": 1.31,
        "glass": 1.5,
        "crown-glass": 1.52,
        "flint-glass": 1.62,
        "acrylic": 1.49,
        "polycarbonate": 1.584,
        "sapphire": 1.77,
        "diamond": 2.417,
    }
)
