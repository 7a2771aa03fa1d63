"""
Data models for extracted UI components and their hook entities.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _append_unique(values: List[str], value: str) -> bool:
    if value in values:
        return False
    values.append(value)
    return True


@dataclass
class PropEntity:
    """A destructured prop of a component.

    Attributes:
        id: ``prop-<n>``
        name: Prop name as the parent passes it (the destructuring key).
        references: Ids of state/prop values or ``setter-state-<n>``
            callbacks bound to this prop at parent call sites.
    """

    id: str
    name: str
    references: List[str] = field(default_factory=list)

    def add_reference(self, entity_id: str) -> bool:
        return _append_unique(self.references, entity_id)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "references": list(self.references)}


@dataclass
class StateEntity:
    """A state cell declared through a state hook.

    Attributes:
        id: ``state-<n>``
        name: Value binding name.
        setter_id: ``setter-state-<n>``, the reference used for setter edges.
    """

    id: str
    name: str
    setter_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class EffectEntity:
    """An effect hook call.

    Attributes:
        id: ``effect-<n>``
        dependency_ids: State/prop ids from the dependency list, in order.
        handling_target_ids: Setter ids and prop-callback ids invoked by the
            effect body.
    """

    id: str
    dependency_ids: List[str] = field(default_factory=list)
    handling_target_ids: List[str] = field(default_factory=list)

    def add_dependency(self, entity_id: str) -> bool:
        return _append_unique(self.dependency_ids, entity_id)

    def add_handling_target(self, entity_id: str) -> bool:
        return _append_unique(self.handling_target_ids, entity_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "dependencyIds": list(self.dependency_ids),
            "handlingTargetIds": list(self.handling_target_ids),
        }


@dataclass
class ComponentEntity:
    """A recognized UI component.

    ``children`` and ``false_children`` hold component ids, never object
    references; the two lists are kept disjoint, with direct nesting
    winning over an indirect reference.
    """

    id: str
    name: str
    file_path: str = ""
    line: Optional[int] = None
    props: List[PropEntity] = field(default_factory=list)
    states: List[StateEntity] = field(default_factory=list)
    effects: List[EffectEntity] = field(default_factory=list)
    children: List[str] = field(default_factory=list)
    false_children: List[str] = field(default_factory=list)

    def add_child(self, component_id: str) -> bool:
        if component_id in self.false_children:
            self.false_children.remove(component_id)
        return _append_unique(self.children, component_id)

    def add_false_child(self, component_id: str) -> bool:
        if component_id in self.children:
            return False
        return _append_unique(self.false_children, component_id)

    def prop_by_name(self, name: str) -> Optional[PropEntity]:
        for prop in self.props:
            if prop.name == name:
                return prop
        return None

    def entity_ids(self) -> List[str]:
        """Ids of this component and every entity it owns."""
        ids = [self.id]
        ids.extend(p.id for p in self.props)
        ids.extend(s.id for s in self.states)
        ids.extend(e.id for e in self.effects)
        return ids

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the serialized graph shape (children as id lists)."""
        return {
            "id": self.id,
            "name": self.name,
            "children": list(self.children),
            "falseChildren": list(self.false_children),
            "props": [p.to_dict() for p in self.props],
            "states": [s.to_dict() for s in self.states],
            "effects": [e.to_dict() for e in self.effects],
        }


DIAGNOSTIC_KINDS = (
    "parse_failure",
    "syntax_errors",
    "ambiguous_binding",
    "duplicate_file",
    "file_failure",
)


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal finding from an extraction run, keyed by file path."""

    kind: str
    path: str
    message: str

    def __post_init__(self):
        if self.kind not in DIAGNOSTIC_KINDS:
            raise ValueError(f"Unknown diagnostic kind: {self.kind}")

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "path": self.path, "message": self.message}
