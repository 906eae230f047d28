import logging
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(PROJECT_ROOT / "src"))

from luxscene.catalog import SceneBuilder  # noqa: E402
from luxscene.exceptions import ValidationError  # noqa: E402
from luxscene.graph import MULTI_GROUPS, SINGLETON_GROUPS, Entity, EntityMeta, SceneGraph  # noqa: E402
from luxscene.values import float_value  # noqa: E402


def _entity(type_: str, **params: float) -> Entity:
    return Entity(EntityMeta(type=type_), {k: float_value(k, v) for k, v in params.items()})


@pytest.fixture
def graph() -> SceneGraph:
    return SceneGraph()


def test_group_layout():
    assert SINGLETON_GROUPS == (
        "renderer",
        "accelerator",
        "sampler",
        "integrator",
        "volume_integrator",
        "filter",
        "film",
        "camera",
    )
    assert set(MULTI_GROUPS) == {"lights", "light_groups", "materials", "geometry", "volumes", "textures"}


@pytest.mark.parametrize("group", SINGLETON_GROUPS)
def test_singleton_replace_does_not_merge(graph: SceneGraph, group: str):
    graph.set_singleton(group, _entity("first", a=1.0))
    graph.set_singleton(group, _entity("second", b=2.0))

    current = graph.singleton(group)
    assert current.type == "second"
    assert dict(current.params) == {"b": float_value("b", 2.0)}


def test_upsert_keeps_position_of_replaced_id(graph: SceneGraph):
    graph.upsert("materials", "a", _entity("matte"))
    graph.upsert("materials", "b", _entity("matte"))
    graph.upsert("materials", "c", _entity("matte"))
    graph.upsert("materials", "a", _entity("glossy"))
    graph.upsert("materials", "d", _entity("matte"))

    assert list(graph.group("materials")) == ["a", "b", "c", "d"]
    assert graph.get("materials", "a").type == "glossy"


def test_batch_upsert_later_items_win(graph: SceneGraph):
    graph.batch_upsert(
        "geometry",
        [("x", _entity("sphere", radius=1.0)), ("y", _entity("disk")), ("x", _entity("sphere", radius=2.0))],
    )

    assert list(graph.group("geometry")) == ["x", "y"]
    assert graph.get("geometry", "x").params["radius"].value == 2.0


def test_lights_scenario_replacing_sun_keeps_first_position():
    builder = SceneBuilder()
    builder.sun_light("sun", turbidity=2.0)
    builder.point_light("fill", position=(1, 1, 1))
    builder.point_light("sun", position=(0, 0, 10), gain=4.0)

    lights = builder.graph.group("lights")
    assert len(lights) == 2
    assert list(lights) == ["sun", "fill"]
    assert lights["sun"].type == "point"
    assert lights["sun"].params["gain"].value == 4.0


def test_unknown_groups_are_rejected(graph: SceneGraph):
    with pytest.raises(ValidationError) as excinfo:
        graph.upsert("cameras", "main", _entity("perspective"))
    assert excinfo.value.field == "group"

    with pytest.raises(ValidationError):
        graph.set_singleton("lights", _entity("point"))


def test_ids_must_be_non_empty_strings(graph: SceneGraph):
    with pytest.raises(ValidationError):
        graph.upsert("lights", "", _entity("point"))


def test_group_views_and_params_are_read_only(graph: SceneGraph):
    entity = _entity("matte", sigma=0.5)
    graph.upsert("materials", "m", entity)

    with pytest.raises(TypeError):
        graph.group("materials")["other"] = entity
    with pytest.raises(TypeError):
        entity.params["sigma"] = float_value("sigma", 1.0)


def test_merged_layers_new_params_over_old():
    entity = _entity("fleximage", gamma=2.2, xresolution=640.0)
    merged = entity.merged({"gamma": float_value("gamma", 1.0)})

    assert merged.params["gamma"].value == 1.0
    assert merged.params["xresolution"].value == 640.0
    assert entity.params["gamma"].value == 2.2


def test_replacement_is_logged_at_debug(graph: SceneGraph, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.DEBUG, logger="luxscene.graph"):
        graph.upsert("lights", "key", _entity("point"))
        graph.upsert("lights", "key", _entity("spot"))

    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Adding lights/key") for message in messages)
    assert any(message.startswith("Replacing lights/key") for message in messages)


def test_comments_and_includes_keep_order(graph: SceneGraph):
    graph.add_comment("first")
    graph.add_comment("second")
    graph.include_header("base.lxs")
    graph.include_partial("props.lxo")

    assert graph.comments == ["first", "second"]
    assert graph.includes.headers == ["base.lxs"]
    assert graph.includes.partials == ["props.lxo"]
