"""
Serialization of an ``ExtractionGraph``.

``graph_to_dict`` produces the JSON-compatible shape consumed by the
visualization layer; children are emitted as id lists, never as nested
objects. ``graph_from_dict`` rebuilds an id-level graph from that shape so
re-serializing reproduces structurally equal output.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from componentgraph.builder import ExtractionGraph
from componentgraph.traversal import count_descendant
from core.id_contract import (
    KIND_COMPONENT,
    KIND_EFFECT,
    KIND_PROP,
    KIND_STATE,
    make_setter_id,
    parse_entity_id,
)
from extraction.models import ComponentEntity, EffectEntity, PropEntity, StateEntity

logger = logging.getLogger(__name__)

COMPONENT_LIST_KEY = "componentList"


def graph_to_dict(graph: ExtractionGraph) -> Dict[str, Any]:
    """Render the graph as a JSON-compatible dict."""
    return {COMPONENT_LIST_KEY: [component.to_dict() for component in graph.component_list]}


def graph_to_json(graph: ExtractionGraph, indent: Optional[int] = None) -> str:
    return json.dumps(graph_to_dict(graph), indent=indent, ensure_ascii=False)


def _expect(payload: Any, key: str, kind: type, ctx: str) -> Any:
    if not isinstance(payload, dict) or key not in payload:
        raise ValueError(f"{ctx}: missing '{key}'")
    value = payload[key]
    if not isinstance(value, kind):
        raise ValueError(f"{ctx}: '{key}' must be {kind.__name__}")
    return value


def _expect_id(payload: Any, expected_kind: str, ctx: str) -> str:
    entity_id = _expect(payload, "id", str, ctx)
    parsed = parse_entity_id(entity_id)
    if parsed["kind"] != expected_kind or parsed["is_setter"]:
        raise ValueError(f"{ctx}: expected a {expected_kind} id, got {entity_id}")
    return entity_id


def _id_list(payload: Dict[str, Any], key: str, ctx: str) -> List[str]:
    values = _expect(payload, key, list, ctx)
    for value in values:
        if not isinstance(value, str):
            raise ValueError(f"{ctx}: '{key}' must contain id strings")
        parse_entity_id(value)
    return list(values)


def _component_from_dict(payload: Dict[str, Any]) -> ComponentEntity:
    component_id = _expect_id(payload, KIND_COMPONENT, "component")
    ctx = f"component {component_id}"
    component = ComponentEntity(
        id=component_id,
        name=_expect(payload, "name", str, ctx),
        children=_id_list(payload, "children", ctx),
        false_children=_id_list(payload, "falseChildren", ctx),
    )
    for prop in _expect(payload, "props", list, ctx):
        component.props.append(
            PropEntity(
                id=_expect_id(prop, KIND_PROP, ctx),
                name=_expect(prop, "name", str, ctx),
                references=_id_list(prop, "references", ctx),
            )
        )
    for state in _expect(payload, "states", list, ctx):
        state_id = _expect_id(state, KIND_STATE, ctx)
        component.states.append(
            StateEntity(
                id=state_id,
                name=_expect(state, "name", str, ctx),
                setter_id=make_setter_id(state_id),
            )
        )
    for effect in _expect(payload, "effects", list, ctx):
        component.effects.append(
            EffectEntity(
                id=_expect_id(effect, KIND_EFFECT, ctx),
                dependency_ids=_id_list(effect, "dependencyIds", ctx),
                handling_target_ids=_id_list(effect, "handlingTargetIds", ctx),
            )
        )
    return component


def graph_from_dict(payload: Dict[str, Any]) -> ExtractionGraph:
    """Rebuild an id-level graph from ``graph_to_dict`` output.

    Raises:
        ValueError: If the payload does not follow the serialized shape.
    """
    components = _expect(payload, COMPONENT_LIST_KEY, list, "graph")
    return ExtractionGraph(_component_from_dict(c) for c in components)


def format_trace(graph: ExtractionGraph) -> str:
    """Human-readable dump of every component and its entities."""
    lines = [f"ExtractionGraph: {len(graph)} components"]
    for component in graph.component_list:
        lines.append(
            f"{component.id} {component.name} "
            f"[{component.file_path or '?'}] "
            f"props={len(component.props)} states={len(component.states)} "
            f"effects={len(component.effects)} children={len(component.children)} "
            f"falseChildren={len(component.false_children)} "
            f"descendants={count_descendant(graph, component)}"
        )
        for prop in component.props:
            refs = ", ".join(prop.references) or "-"
            lines.append(f"    prop {prop.id} {prop.name} <- {refs}")
        for state in component.states:
            lines.append(f"    state {state.id} {state.name} (setter {state.setter_id})")
        for effect in component.effects:
            deps = ", ".join(effect.dependency_ids) or "-"
            targets = ", ".join(effect.handling_target_ids) or "-"
            lines.append(f"    effect {effect.id} deps: {deps} -> handles: {targets}")
        for child in graph.children_of(component):
            lines.append(f"    child {child.id} {child.name}")
        for child in graph.false_children_of(component):
            lines.append(f"    false child {child.id} {child.name}")
    return "\n".join(lines)
