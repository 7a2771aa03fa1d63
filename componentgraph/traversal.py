"""
Read-only queries over a built ``ExtractionGraph``.

The component relation may have several parents per node and may contain
cycles, so every traversal carries an explicit visited set.
Only ``children`` edges are followed; ``false_children`` are structural
annotations and never part of a descendant walk.
"""

from typing import Callable, List, Optional, Set

from componentgraph.builder import ExtractionGraph
from extraction.models import ComponentEntity

VisitFn = Callable[[ComponentEntity], None]


def _ignore(_component: ComponentEntity) -> None:
    return None


def visit_descendant(
    graph: ExtractionGraph,
    component: ComponentEntity,
    visit_fn: VisitFn,
    visited: Optional[Set[str]] = None,
) -> Set[str]:
    """Apply ``visit_fn`` once to every component reachable via ``children``.

    The start component is not visited unless a cycle leads back to it.
    Components already in ``visited`` are neither re-entered nor re-emitted;
    passing the same set across calls shares that state.

    Returns:
        The visited id set (the one passed in, if any).
    """
    if visited is None:
        visited = set()

    stack = list(reversed(component.children))
    while stack:
        component_id = stack.pop()
        if component_id in visited:
            continue
        child = graph.get(component_id)
        if child is None:
            continue
        visited.add(component_id)
        visit_fn(child)
        stack.extend(reversed(child.children))
    return visited


def count_descendant(graph: ExtractionGraph, component: ComponentEntity) -> int:
    """Number of distinct components reachable via ``children``."""
    return len(visit_descendant(graph, component, _ignore))


def sorted_children(graph: ExtractionGraph, component: ComponentEntity) -> List[ComponentEntity]:
    """Children ordered by descending subtree size; ties keep discovery order."""
    children = graph.children_of(component)
    sizes = {child.id: count_descendant(graph, child) for child in children}
    return sorted(children, key=lambda child: -sizes[child.id])


def find_roots(graph: ExtractionGraph) -> List[ComponentEntity]:
    """Components that are not a ``children`` descendant of any component.

    A component only reachable through a cycle with no entry from outside
    the cycle would otherwise belong to no root; the first such component
    in discovery order is promoted to a root so every component is covered.
    Roots are returned in discovery order.
    """
    components = graph.component_list
    visited: Set[str] = set()
    for component in components:
        if component.id in visited:
            continue
        visit_descendant(graph, component, _ignore, visited)

    root_ids = {c.id for c in components if c.id not in visited}

    reached: Set[str] = set(root_ids)
    for component in components:
        if component.id in root_ids:
            visit_descendant(graph, component, _ignore, reached)

    for component in components:
        if component.id in reached:
            continue
        root_ids.add(component.id)
        reached.add(component.id)
        visit_descendant(graph, component, _ignore, reached)

    return [c for c in components if c.id in root_ids]
