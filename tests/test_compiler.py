import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT / "src"))

from luxscene.catalog import SceneBuilder  # noqa: E402
from luxscene.geometry import Transform, rotation_matrix, scale_matrix, translation_matrix  # noqa: E402
from luxscene.mesh_streams import configure_in_memory_meshes  # noqa: E402
from luxscene.scene_compiler import SceneCompiler  # noqa: E402
from luxscene.scene_compiler.formatting import format_transform  # noqa: E402
from luxscene.values import texture  # noqa: E402


@pytest.fixture
def builder() -> SceneBuilder:
    builder = SceneBuilder()
    configure_in_memory_meshes(builder.graph)
    return builder


def test_matrix_transform_is_written_column_major():
    transform = Transform(matrix=tuple(float(i) for i in range(16)))

    assert format_transform(transform) == ["Transform [0 4 8 12 1 5 9 13 2 6 10 14 3 7 11 15]"]


def test_composed_transform_statement_order():
    transform = Transform(
        translate=(1.0, 2.0, 3.0),
        rotate=(90.0, 0.0, 45.0),
        axis_rotation=(30.0, (1.0, 1.0, 0.0)),
        scale=(2.0, 2.0, 2.0),
    )

    assert format_transform(transform) == [
        "Translate 1 2 3",
        "Rotate 90 1 0 0",
        "Rotate 45 0 0 1",
        "Rotate 30 1 1 0",
        "Scale 2 2 2",
    ]


def test_composed_transform_matches_its_matrix():
    transform = Transform(translate=(1.0, 0.0, 0.0), rotate=(0.0, 0.0, 90.0), scale=(2.0, 1.0, 1.0))
    expected = translation_matrix((1, 0, 0)) @ rotation_matrix(90, (0, 0, 1)) @ scale_matrix((2, 1, 1))

    np.testing.assert_allclose(transform.as_matrix(), expected, atol=1e-12)
    np.testing.assert_allclose(transform.as_matrix() @ [1, 0, 0, 1], [1, 2, 0, 1], atol=1e-12)


def test_settings_blocks(builder: SceneBuilder):
    builder.sampler("lowdiscrepancy", pixelsamples=16)
    builder.camera(eye=(0, -5, 1), target=(0, 0, 0), fov=45, exterior="fog")
    compiler = SceneCompiler(builder.graph)

    assert compiler.compile_group("sampler") == (
        'Sampler "lowdiscrepancy"\n'
        '\t"string pixelsampler" ["hilbert"]\n'
        '\t"integer pixelsamples" [16]\n'
    )
    camera = compiler.compile_group("camera").splitlines()
    assert camera[0] == "LookAt 0 -5 1  0 0 0  0 0 1"
    assert camera[1] == 'Exterior "fog"'
    assert camera[2] == 'Camera "perspective"'
    assert '\t"float fov" [45]' in camera
    assert compiler.compile_group("renderer") is None


def test_materials_emit_textures_first(builder: SceneBuilder):
    builder.material_matte("floor", Kd=texture("wood"))
    builder.texture("wood", "scale", tex1=texture("grain"), tex2=(0.8, 0.6, 0.4))
    builder.texture("grain", "imagemap", filename="grain.png")

    text = SceneCompiler(builder.graph).compile_materials()

    grain = text.index('Texture "grain" "color" "imagemap"')
    wood = text.index('Texture "wood" "color" "scale"')
    floor = text.index('MakeNamedMaterial "floor"')
    assert grain < wood < floor
    assert '\t"string type" ["matte"]' in text
    assert '\t"texture Kd" ["wood"]' in text


def test_geometry_block_layout(builder: SceneBuilder):
    builder.sphere(
        "ball",
        radius=0.5,
        material="chrome",
        interior="glass_volume",
        transform={"translate": (0, 0, 1)},
    )

    text = SceneCompiler(builder.graph).compile_geometry()

    assert text.splitlines() == [
        'AttributeBegin # "ball"',
        "Translate 0 0 1",
        'NamedMaterial "chrome"',
        'Interior "glass_volume"',
        'Shape "sphere"',
        '\t"float radius" [0.5]',
        "AttributeEnd",
    ]


def test_mesh_shapes_stream_ply_payloads(builder: SceneBuilder):
    registry = configure_in_memory_meshes(builder.graph)
    builder.plane("ground", size=10, path="meshes/ground.ply")

    text = SceneCompiler(builder.graph).compile_geometry()
    entries = registry.collect()

    assert 'Shape "plymesh"' in text
    assert '\t"string filename" ["meshes/ground.ply"]' in text
    assert entries["geometry/ground"].path == "meshes/ground.ply"
    payload = entries["geometry/ground"].body.as_bytes()
    assert payload.startswith(b"ply\nformat binary_little_endian 1.0\nelement vertex 4\n")
    assert b"element face 2\n" in payload


def test_area_light_block(builder: SceneBuilder):
    builder.light_group("key_group", gain=2.0)
    builder.area_light("key", center=(0, 0, 3), gain=3.0, group="key_group", hidden=True)

    lines = SceneCompiler(builder.graph).compile_lights().splitlines()

    assert lines[0] == 'AttributeBegin # "key"'
    assert lines[1] == 'LightGroup "key_group"'
    assert lines[2] == 'NamedMaterial "__hidden__"'
    assert lines[3] == 'AreaLightSource "area"'
    assert '\t"float gain" [6]' in lines
    assert 'Shape "plymesh"' in lines
    assert '\t"string filename" ["key_light.ply"]' in lines
    assert lines[-1] == "AttributeEnd"


def test_light_without_declared_group_keeps_its_gain(builder: SceneBuilder):
    builder.point_light("fill", position=(1, 2, 3), gain=0.5)

    lines = SceneCompiler(builder.graph).compile_lights().splitlines()

    assert 'LightGroup "default"' in lines
    assert 'LightSource "point"' in lines
    assert '\t"point from" [1 2 3]' in lines
    assert '\t"float gain" [0.5]' in lines


def test_area_light_inside_a_volume(builder: SceneBuilder):
    builder.volume("fog", type="homogeneous")
    builder.area_light("lamp", center=(0, 0, 3), exterior="fog")

    lines = SceneCompiler(builder.graph).compile_lights().splitlines()

    assert lines.index('Exterior "fog"') < lines.index('AreaLightSource "area"')
    assert not any(line.startswith("Interior") for line in lines)


def test_volumes_block(builder: SceneBuilder):
    builder.volume("water", fresnel=1.333)

    text = SceneCompiler(builder.graph).compile_volumes()

    assert text.startswith('MakeNamedVolume "water" "clear"\n\t"float fresnel" [1.333]\n')
    assert '\t"color absorption" [0 0 0]' in text


def test_empty_sections_compile_to_none():
    scene = SceneCompiler(SceneBuilder().graph).compile()

    assert scene.materials is None
    assert scene.geometry is None
    assert scene.volumes is None
    assert scene.lights is None
    assert all(block is None for block in scene.settings.values())


def test_compilation_does_not_modify_the_graph(builder: SceneBuilder):
    builder.light_group("g", gain=4.0)
    builder.point_light("fill", group="g", gain=1.5)
    builder.material_glass("window", alpha=0.5)
    builder.sphere("ball")
    graph = builder.graph
    before = {
        group: list(graph.group(group).items())
        for group in ("lights", "light_groups", "materials", "geometry", "volumes", "textures")
    }

    SceneCompiler(graph).compile()

    after = {group: list(graph.group(group).items()) for group in before}
    assert after == before
    assert graph.get("lights", "fill").params["gain"].value == 1.5


def test_unknown_section_raises_key_error():
    with pytest.raises(KeyError):
        SceneCompiler(SceneBuilder().graph).compile_group("cameras")
