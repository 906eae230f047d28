import logging
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT / "src"))

from luxscene.catalog import SceneBuilder  # noqa: E402
from luxscene.exceptions import ValidationError  # noqa: E402
from luxscene.graph import Entity, EntityMeta, SceneGraph  # noqa: E402
from luxscene.mesh_streams import configure_in_memory_meshes  # noqa: E402
from luxscene.resolver import (  # noqa: E402
    dependency_order,
    ensure_hidden_material,
    insert_material,
    internal_material_id,
)
from luxscene.scene_compiler import SceneCompiler  # noqa: E402
from luxscene.values import texture  # noqa: E402


def _material(*dependencies: str) -> Entity:
    return Entity(EntityMeta(type="mix" if dependencies else "matte", dependencies=dependencies))


def _emission_order(text: str) -> list[str]:
    return [line.split('"')[1] for line in text.splitlines() if line.startswith("MakeNamedMaterial")]


def test_alpha_material_becomes_mix_of_hidden_and_internal():
    builder = SceneBuilder()
    builder.material_glass("window", alpha=0.4)

    materials = builder.graph.group("materials")
    public = materials["window"]
    internal = internal_material_id("window")

    assert public.type == "mix"
    assert set(public.dependencies) == {"__hidden__", internal}
    assert len(public.dependencies) == 2
    assert public.params["amount"].value == pytest.approx(0.4)
    assert materials[internal].type == "glass"
    assert materials["__hidden__"].type == "null"


def test_reinserting_alpha_material_is_idempotent():
    builder = SceneBuilder()
    builder.material_glass("window", alpha=0.4)
    builder.material_glass("window", alpha=0.7)
    builder.material_matte("frame", alpha=0.5)

    materials = builder.graph.group("materials")
    assert list(materials) == ["__window__opaque", "__hidden__", "window", "__frame__opaque", "frame"]
    assert materials["window"].params["amount"].value == pytest.approx(0.7)


def test_opaque_material_is_stored_directly():
    graph = SceneGraph()
    insert_material(graph, "floor", _material(), alpha=1.0)

    assert list(graph.group("materials")) == ["floor"]


@pytest.mark.parametrize("alpha", [-0.1, 1.5, True, "0.5"])
def test_alpha_must_be_in_unit_range(alpha):
    with pytest.raises(ValidationError) as excinfo:
        insert_material(SceneGraph(), "floor", _material(), alpha=alpha)

    assert excinfo.value.field == "alpha"


def test_hidden_material_is_created_once():
    graph = SceneGraph()
    ensure_hidden_material(graph)
    hidden = graph.get("materials", "__hidden__")
    ensure_hidden_material(graph)

    assert graph.get("materials", "__hidden__") is hidden


def test_internal_material_is_emitted_before_mix():
    builder = SceneBuilder()
    builder.material_glass("window", alpha=0.4)

    order = _emission_order(SceneCompiler(builder.graph).compile_materials())

    assert order.index("__window__opaque") < order.index("window")
    assert order.index("__hidden__") < order.index("window")


def test_dependency_order_handles_deep_chains():
    entities = {
        "top": _material("middle", "leaf"),
        "middle": _material("base", "leaf"),
        "leaf": _material(),
        "base": _material(),
        "loner": _material(),
    }

    order = dependency_order(entities)

    assert sorted(order) == sorted(entities)
    for name, entity in entities.items():
        for dependency in entity.dependencies:
            assert order.index(dependency) < order.index(name)
    assert order == ["base", "leaf", "middle", "top", "loner"]


def test_dependency_order_keeps_insertion_order_when_unconstrained():
    entities = {name: _material() for name in ("c", "a", "b")}

    assert dependency_order(entities) == ["c", "a", "b"]


def test_cycle_is_rejected():
    entities = {"a": _material("b"), "b": _material("a")}

    with pytest.raises(ValidationError) as excinfo:
        dependency_order(entities)

    assert "a -> b -> a" in str(excinfo.value)


def test_unknown_dependency_is_logged_and_ignored(caplog: pytest.LogCaptureFixture):
    entities = {"coat": _material("external_base")}

    with caplog.at_level(logging.WARNING):
        order = dependency_order(entities)

    assert order == ["coat"]
    assert any("external_base" in record.getMessage() for record in caplog.records)


def test_cycle_aborts_compilation_before_meshes_are_streamed():
    builder = SceneBuilder()
    registry = configure_in_memory_meshes(builder.graph)
    builder.plane("ground", size=4)
    builder.graph.upsert("materials", "a", _material("b"))
    builder.graph.upsert("materials", "b", _material("a"))

    with pytest.raises(ValidationError):
        SceneCompiler(builder.graph).compile()

    assert len(registry) == 0


def test_texture_cycle_is_rejected_at_compile_time():
    builder = SceneBuilder()
    builder.texture("a", "mix", tex1=texture("b"), tex2=(1, 1, 1))
    builder.texture("b", "mix", tex1=texture("a"), tex2=(0, 0, 0))
    builder.material_matte("floor", Kd=texture("a"))

    with pytest.raises(ValidationError) as excinfo:
        SceneCompiler(builder.graph).compile_materials()

    assert "textures: a -> b -> a" in str(excinfo.value)


def test_coating_over_mix_is_emitted_after_its_whole_chain():
    builder = SceneBuilder()
    builder.material_glossy_coating("coat", base="blend")
    builder.material_mix("blend", "base", "accent", amount=0.3)
    builder.material_matte("base")
    builder.material_metal("accent")

    order = _emission_order(SceneCompiler(builder.graph).compile_materials())

    materials = builder.graph.group("materials")
    assert sorted(order) == sorted(materials)
    for name in order:
        for dependency in materials[name].dependencies:
            assert order.index(dependency) < order.index(name)
    assert order == ["base", "accent", "blend", "coat"]
