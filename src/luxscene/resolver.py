"""
Material dependency tracking and alpha compositing.

Materials (and textures) may reference each other by name: a mix
material names two sub-materials, a glossy coating names its base
material. Those references are recorded in the entity's ``dependencies``
metadata and :func:`dependency_order` turns a group into an emission
order in which every entity follows everything it depends on.

Partially transparent materials are expressed through a mix with an
invisible null material. :func:`insert_material` keeps the public id
stable: the caller's material moves to a derived internal id and the
public id becomes the mix.
"""

from __future__ import annotations

import logging
from typing import Mapping

from .exceptions import ValidationError
from .graph import Entity, EntityMeta, SceneGraph
from .values import float_value, str_value

logger = logging.getLogger(__name__)

DEFAULT_HIDDEN_MATERIAL = "__hidden__"

_VISITING = 1
_DONE = 2


def internal_material_id(material_id: str) -> str:
    """Id under which the opaque part of an alpha-blended material is stored."""
    return f"__{material_id}__opaque"


def mix_entity(first: str, second: str, amount: float) -> Entity:
    """Mix material blending ``first`` (amount 0) into ``second`` (amount 1)."""
    if not 0.0 <= amount <= 1.0:
        raise ValidationError(field="amount", allowed="a number in [0, 1]")
    return Entity(
        EntityMeta(type="mix", dependencies=(first, second)),
        {
            "namedmaterial1": str_value("namedmaterial1", first),
            "namedmaterial2": str_value("namedmaterial2", second),
            "amount": float_value("amount", amount),
        },
    )


def ensure_hidden_material(graph: SceneGraph, hidden_id: str = DEFAULT_HIDDEN_MATERIAL) -> str:
    """Insert the invisible null material once; later calls leave it untouched."""
    if not graph.contains("materials", hidden_id):
        graph.upsert("materials", hidden_id, Entity(EntityMeta(type="null")))
    return hidden_id


def insert_material(
    graph: SceneGraph,
    material_id: str,
    entity: Entity,
    alpha: float = 1.0,
    hidden_id: str = DEFAULT_HIDDEN_MATERIAL,
) -> None:
    """
    Insert a material, compositing it with the hidden material when ``alpha < 1``.

    Args:
        graph: Graph to insert into
        material_id: Public material id referenced by shapes and other materials
        entity: The opaque material
        alpha: Opacity in [0, 1]
        hidden_id: Id of the shared null material
    """
    if isinstance(alpha, bool) or not isinstance(alpha, (int, float)) or not 0.0 <= alpha <= 1.0:
        raise ValidationError(field="alpha", allowed="a number in [0, 1]")

    if alpha >= 1.0:
        graph.upsert("materials", material_id, entity)
        return

    internal_id = internal_material_id(material_id)
    graph.upsert("materials", internal_id, entity)
    ensure_hidden_material(graph, hidden_id)
    graph.upsert("materials", material_id, mix_entity(hidden_id, internal_id, float(alpha)))
    logger.debug("Composited %s with alpha %.3f via %s", material_id, alpha, internal_id)


def dependency_order(entities: Mapping[str, Entity], kind: str = "material") -> list[str]:
    """
    Return entity ids so that each id comes after all of its dependencies.

    Insertion order is kept wherever the dependencies allow it. References
    to ids outside ``entities`` are logged and ignored (they may come
    from included files).

    Raises:
        ValidationError: If the dependencies contain a cycle.
    """
    order: list[str] = []
    state: dict[str, int] = {}

    for root in entities:
        if state.get(root) == _DONE:
            continue
        state[root] = _VISITING
        stack = [(root, iter(entities[root].dependencies))]
        while stack:
            node, pending = stack[-1]
            for dep in pending:
                if dep not in entities:
                    logger.warning("%s %r references unknown %s %r", kind.capitalize(), node, kind, dep)
                    continue
                status = state.get(dep)
                if status == _VISITING:
                    cycle = [n for n, _ in stack]
                    cycle = cycle[cycle.index(dep):] + [dep]
                    raise ValidationError(
                        f"Dependency cycle between {kind}s: " + " -> ".join(cycle),
                        field="dependencies",
                    )
                if status is None:
                    state[dep] = _VISITING
                    stack.append((dep, iter(entities[dep].dependencies)))
                    break
            else:
                stack.pop()
                state[node] = _DONE
                order.append(node)
    return order
