"""
Graph assembly.

Turns per-file recognition results into id-bearing entities, registers
them in the project-wide name table, and runs reference resolution once
every file has been added. Ids are allocated in the order files are added
and, inside a file, in declaration order: component, then its props,
states and effects.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from core.config_loader import ExtractorConfig
from core.id_contract import (
    KIND_COMPONENT,
    KIND_EFFECT,
    KIND_PROP,
    KIND_STATE,
    IdAllocator,
    make_setter_id,
)
from extraction.models import (
    ComponentEntity,
    Diagnostic,
    EffectEntity,
    PropEntity,
    StateEntity,
)
from extraction.recognizer import ComponentSkeleton, FileSkeleton
from extraction.resolver import ComponentRegistry, ReferenceResolver

logger = logging.getLogger(__name__)


class ExtractionGraph:
    """Arena of components addressed by id, in discovery order."""

    def __init__(self, components: Iterable[ComponentEntity] = ()):
        self._components: Dict[str, ComponentEntity] = {}
        for component in components:
            self.add_component(component)

    def add_component(self, component: ComponentEntity) -> None:
        if component.id in self._components:
            raise ValueError(f"Duplicate component id: {component.id}")
        self._components[component.id] = component

    @property
    def component_list(self) -> List[ComponentEntity]:
        return list(self._components.values())

    def get(self, component_id: str) -> Optional[ComponentEntity]:
        return self._components.get(component_id)

    def __getitem__(self, component_id: str) -> ComponentEntity:
        return self._components[component_id]

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._components

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[ComponentEntity]:
        return iter(list(self._components.values()))

    def children_of(self, component: ComponentEntity) -> List[ComponentEntity]:
        return [self._components[c] for c in component.children if c in self._components]

    def false_children_of(self, component: ComponentEntity) -> List[ComponentEntity]:
        return [self._components[c] for c in component.false_children if c in self._components]

    def find_by_name(self, name: str) -> List[ComponentEntity]:
        return [c for c in self._components.values() if c.name == name]

    def entity_ids(self) -> List[str]:
        """Every component/prop/state/effect id in the graph."""
        ids: List[str] = []
        for component in self._components.values():
            ids.extend(component.entity_ids())
        return ids


class GraphBuilder:
    """Builds one ``ExtractionGraph`` from file skeletons added in input order."""

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()
        self._allocator = IdAllocator()
        self._registry = ComponentRegistry()
        self._graph = ExtractionGraph()
        self._pending: List[Tuple[ComponentEntity, ComponentSkeleton, str]] = []
        self._diagnostics: List[Diagnostic] = []
        self._built = False

    def _materialize(self, skeleton: ComponentSkeleton, path: str) -> ComponentEntity:
        component = ComponentEntity(
            id=self._allocator.next_id(KIND_COMPONENT),
            name=skeleton.name,
            file_path=path,
            line=skeleton.line,
        )
        for prop in skeleton.props:
            component.props.append(PropEntity(id=self._allocator.next_id(KIND_PROP), name=prop.name))
        for state in skeleton.states:
            state_id = self._allocator.next_id(KIND_STATE)
            component.states.append(
                StateEntity(id=state_id, name=state.name, setter_id=make_setter_id(state_id))
            )
        for _ in skeleton.effects:
            component.effects.append(EffectEntity(id=self._allocator.next_id(KIND_EFFECT)))
        return component

    def add_file(self, skeleton: FileSkeleton) -> List[ComponentEntity]:
        """Allocate ids for a file's components and register them."""
        if self._built:
            raise RuntimeError("Cannot add files after the graph has been built")

        self._registry.register_file(skeleton.path, skeleton.imports)
        added = []
        for component_skeleton in skeleton.components:
            component = self._materialize(component_skeleton, skeleton.path)
            self._graph.add_component(component)
            self._registry.register(component, skeleton.path, component_skeleton.is_default_export)
            self._pending.append((component, component_skeleton, skeleton.path))
            added.append(component)
        logger.debug("Added %d components from %s", len(added), skeleton.path)
        return added

    def build(self) -> Tuple[ExtractionGraph, List[Diagnostic]]:
        """Resolve references across all added files and return the graph.

        Calling ``build`` again returns the same graph without re-resolving.
        """
        if self._built:
            return self._graph, list(self._diagnostics)

        resolver = ReferenceResolver(self._registry, self.config)
        for component, skeleton, path in self._pending:
            resolver.resolve_component(component, skeleton, path)

        self._diagnostics = list(resolver.diagnostics)
        # Syntax nodes are only needed during resolution
        self._pending = []
        self._built = True
        logger.info(
            "Built graph: %d components, %d props, %d states, %d effects",
            len(self._graph),
            self._allocator.allocated(KIND_PROP),
            self._allocator.allocated(KIND_STATE),
            self._allocator.allocated(KIND_EFFECT),
        )
        return self._graph, list(self._diagnostics)
