import logging
import math
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT / "src"))

from luxscene import presets  # noqa: E402
from luxscene.catalog import BuilderConfig, LightType, SceneBuilder, ShapeType  # noqa: E402
from luxscene.catalog.lights import _LIGHT_CONSTRUCTORS  # noqa: E402
from luxscene.catalog.shapes import _SHAPE_CONSTRUCTORS  # noqa: E402
from luxscene.exceptions import SceneReferenceError, ValidationError  # noqa: E402
from luxscene.geometry import Mesh, Transform  # noqa: E402
from luxscene.values import texture  # noqa: E402


@pytest.fixture
def builder() -> SceneBuilder:
    return SceneBuilder()


def test_builder_config_rejects_unknown_angle_unit():
    with pytest.raises(ValidationError) as excinfo:
        BuilderConfig(angle_unit="grads")

    assert excinfo.value.field == "angle_unit"


def test_integrator_light_strategy_must_be_known(builder: SceneBuilder):
    with pytest.raises(ValidationError) as excinfo:
        builder.integrator("path", lightstrategy="brightest")

    assert excinfo.value.field == "lightstrategy"
    assert set(excinfo.value.allowed) == set(presets.LIGHT_STRATEGIES)


def test_integrator_depths_must_be_non_negative(builder: SceneBuilder):
    with pytest.raises(ValidationError) as excinfo:
        builder.integrator("bidirectional", eyedepth=-1)

    assert excinfo.value.field == "eyedepth"


def test_unknown_options_are_rejected(builder: SceneBuilder):
    with pytest.raises(ValidationError) as excinfo:
        builder.sampler("metropolis", pixelsamples=4)

    assert excinfo.value.field == "pixelsamples"


def test_sampler_defaults_and_overrides(builder: SceneBuilder):
    sampler = builder.sampler("metropolis", largemutationprob=0.2)

    assert sampler.params["largemutationprob"].value == 0.2
    assert sampler.params["maxconsecrejects"].value == 512
    assert builder.graph.singleton("sampler") is sampler


def test_none_option_drops_a_default(builder: SceneBuilder):
    sampler = builder.sampler("metropolis", maxconsecrejects=None)

    assert "maxconsecrejects" not in sampler.params


def test_tonemap_merges_into_film(builder: SceneBuilder):
    builder.film(width=640, height=480)
    builder.tonemap("reinhard", burn=6.0)
    film = builder.tonemap("reinhard", burn=3.0, prescale=1.5)

    assert film.params["xresolution"].value == 640
    assert film.params["reinhard_burn"].value == 3.0
    assert film.params["reinhard_prescale"].value == 1.5
    assert film.params["tonemapkernel"].value == "reinhard"
    assert builder.graph.singleton("film") is film


def test_film_replaces_previous_tonemap_settings(builder: SceneBuilder):
    builder.film()
    builder.tonemap("reinhard", burn=6.0)
    film = builder.film(width=320, height=240)

    assert "reinhard_burn" not in film.params
    assert film.params["yresolution"].value == 240


def test_film_outputs_map_to_write_flags(builder: SceneBuilder):
    film = builder.film(outputs=("exr", "flm"))

    assert film.params["write_exr"].value is True
    assert film.params["write_resume_flm"].value is True

    with pytest.raises(ValidationError):
        builder.film(outputs=("gif",))


def test_camera_fov_follows_angle_unit():
    builder = SceneBuilder(config=BuilderConfig(angle_unit="radians"))
    camera = builder.camera(fov=math.pi / 2)

    assert camera.params["fov"].value == pytest.approx(90.0)
    assert camera.meta.look_at == ((0.0, -10.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, 1.0))


def test_spot_cone_angle_is_halved(builder: SceneBuilder):
    spot = builder.spot_light("spot", position=(0, 0, 5), target=(0, 0, 0), cone_angle=60)

    assert spot.params["coneangle"].value == 30.0
    assert spot.params["from"].value == ((0.0, 0.0, 5.0),)


def test_spot_default_angles_ignore_angle_unit():
    degrees = SceneBuilder().spot_light("spot")
    radians = SceneBuilder(config=BuilderConfig(angle_unit="radians")).spot_light("spot")

    for spot in (degrees, radians):
        assert spot.params["coneangle"].value == 30.0
        assert spot.params["conedelta"].value == 5.0


def test_spot_angles_follow_angle_unit():
    builder = SceneBuilder(config=BuilderConfig(angle_unit="radians"))
    spot = builder.spot_light("spot", cone_angle=math.pi / 2, cone_delta=math.pi / 36)

    assert spot.params["coneangle"].value == pytest.approx(45.0)
    assert spot.params["conedelta"].value == pytest.approx(5.0)


def test_spot_rejects_grammar_cone_options(builder: SceneBuilder):
    for name in ("coneangle", "conedelta"):
        with pytest.raises(ValidationError) as excinfo:
            builder.spot_light("spot", **{name: 10})

        assert excinfo.value.field == name
    assert builder.graph.get("lights", "spot") is None


def test_sun_direction_from_elevation_and_azimuth():
    degrees = SceneBuilder().sun_light("sun", elevation=90, azimuth=0)
    radians = SceneBuilder(config=BuilderConfig(angle_unit="radians")).sun_light(
        "sun", elevation=math.pi / 2, azimuth=0
    )

    for light in (degrees, radians):
        assert light.params["sundir"].grammar_type == "vector"
        assert light.params["sundir"].value[0] == pytest.approx((0.0, 0.0, 1.0))


def test_lights_join_the_default_group(builder: SceneBuilder):
    light = builder.point_light("fill")
    grouped = builder.point_light("rim", group="back")

    assert light.meta.light_group == "default"
    assert grouped.meta.light_group == "back"


def test_hidden_area_light_uses_null_material(builder: SceneBuilder):
    light = builder.area_light("key", center=(0, 0, 3), size=2.0, hidden=True)

    assert light.meta.material == "__hidden__"
    assert builder.graph.get("materials", "__hidden__").type == "null"
    assert light.meta.mesh_path == "key_light.ply"
    assert len(light.meta.mesh.vertices) == 4


def test_area_light_disk_emitter(builder: SceneBuilder):
    light = builder.area_light("key", center=(0, 0, 3), size=2.0, emitter="disk")

    assert len(light.meta.mesh.faces) == 32

    with pytest.raises(ValidationError):
        builder.area_light("bad", center=(0, 0, 3), emitter="star")


def test_area_light_needs_mesh_or_center(builder: SceneBuilder):
    with pytest.raises(ValidationError) as excinfo:
        builder.area_light("key")

    assert excinfo.value.field == "mesh"


def test_every_light_type_is_constructible(builder: SceneBuilder):
    for light_type in LightType:
        options = {"center": (0, 0, 1)} if light_type is LightType.AREA else {}
        builder.add_light(f"light_{light_type.value}", light_type.value, **options)

    assert len(builder.graph.group("lights")) == len(LightType)


def test_add_light_rejects_unknown_type(builder: SceneBuilder):
    with pytest.raises(SceneReferenceError):
        builder.add_light("beam", "laser")


def test_light_batch_skips_unknown_types(builder: SceneBuilder, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING):
        added = builder.add_lights(
            [
                {"id": "fill", "type": "point", "position": (1, 1, 1)},
                {"id": "beam", "type": "laser"},
                {"id": "sky", "type": "sky"},
            ]
        )

    assert added == ["fill", "sky"]
    assert list(builder.graph.group("lights")) == ["fill", "sky"]
    assert any("Skipping light 'beam'" in record.getMessage() for record in caplog.records)


def test_shape_batch_skips_unknown_types(builder: SceneBuilder, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING):
        added = builder.add_shapes(
            [
                {"id": "ball", "type": "sphere", "radius": 0.5},
                {"id": "donut", "type": "torus"},
            ]
        )

    assert added == ["ball"]
    assert any("Skipping shape 'donut'" in record.getMessage() for record in caplog.records)


def test_every_shape_type_is_constructible(builder: SceneBuilder):
    options = {
        ShapeType.MESH: {"mesh": Mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 2)])},
        ShapeType.PLYMESH: {"filename": "statue.ply"},
    }
    for shape_type in ShapeType:
        builder.add_shape(f"shape_{shape_type.value}", shape_type.value, **options.get(shape_type, {}))

    assert len(builder.graph.group("geometry")) == len(ShapeType)


def test_constructor_tables_cover_every_type():
    assert set(_SHAPE_CONSTRUCTORS) == set(ShapeType)
    assert set(_LIGHT_CONSTRUCTORS) == set(LightType)


def test_plane_is_exported_as_mesh(builder: SceneBuilder):
    plane = builder.plane("ground", size=10, material="floor", transform={"translate": (0, 0, -1), "scale": 2})

    assert plane.type == "plymesh"
    assert plane.meta.material == "floor"
    assert plane.meta.transform == Transform(translate=(0.0, 0.0, -1.0), scale=(2.0, 2.0, 2.0))


def test_transform_accepts_a_flat_matrix(builder: SceneBuilder):
    matrix = [1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1, 0, 0, 0, 0, 1]
    sphere = builder.sphere("ball", transform=matrix)

    assert sphere.meta.transform.is_matrix

    with pytest.raises(ValidationError):
        builder.sphere("bad", transform=[1, 0, 0])


def test_material_type_must_be_known(builder: SceneBuilder):
    with pytest.raises(ValidationError) as excinfo:
        builder.material("m", "plastic")

    assert excinfo.value.field == "type"


def test_material_presets(builder: SceneBuilder):
    glass = builder.material_glass("glass", index="diamond")
    assert glass.params["index"].value == presets.IOR["diamond"]

    with pytest.raises(ValidationError):
        builder.material_metal("metal", name="unobtainium")
    with pytest.raises(ValidationError):
        builder.material_glass("glass", index="plasma")


def test_dependent_materials_record_dependencies(builder: SceneBuilder):
    builder.material_matte("base")
    coat = builder.material_glossy_coating("coat", base="base")
    mix = builder.material_mix("blend", "base", "coat", amount=0.25)

    assert coat.dependencies == ("base",)
    assert mix.dependencies == ("base", "coat")

    with pytest.raises(ValidationError) as excinfo:
        builder.material("orphan", "glossycoating")
    assert excinfo.value.field == "basematerial"

    with pytest.raises(ValidationError):
        builder.material_mix("over", "base", "coat", amount=1.5)


def test_material_accepts_texture_channels(builder: SceneBuilder):
    builder.texture("wood", "imagemap", filename="wood.png")
    matte = builder.material_matte("floor", Kd=texture("wood"), bumpmap=texture("bumps"))

    assert matte.params["Kd"] == texture("wood")
    assert matte.params["bumpmap"].value == "bumps"


def test_texture_operands_become_dependencies(builder: SceneBuilder):
    builder.texture("a", "constant", value=(1, 0, 0))
    builder.texture("b", "checkerboard", tex1=(0, 0, 0), tex2=(1, 1, 1))
    mixed = builder.texture("ab", "mix", tex1=texture("a"), tex2=texture("b"))

    assert mixed.dependencies == ("a", "b")
    assert mixed.meta.value_type == "color"

    with pytest.raises(ValidationError):
        builder.texture("photo", "imagemap")


def test_volume_absorption_and_fresnel_preset(builder: SceneBuilder):
    water = builder.volume("water", fresnel="water", absorption=(0.8, 0.9, 1.0), absorption_depth=2.0)

    assert water.params["fresnel"].value == presets.IOR["water"]
    assert water.params["absorption"].depth == 2.0

    murky = builder.volume("murky", type="homogeneous", scattering=(0.1, 0.1, 0.1))
    assert "sigma_a" in murky.params
    assert "sigma_s" in murky.params

    with pytest.raises(ValidationError):
        builder.volume("bad", scattering=(0.1, 0.1, 0.1))
