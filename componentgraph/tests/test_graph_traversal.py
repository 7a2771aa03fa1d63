"""
Unit tests for graph traversal: descendant walks, subtree counts, child
ordering and root discovery.
"""

import unittest

from componentgraph.builder import ExtractionGraph
from componentgraph.traversal import (
    count_descendant,
    find_roots,
    sorted_children,
    visit_descendant,
)
from extraction.models import ComponentEntity


def _graph(edges, false_edges=None):
    """Build a graph from ``{name: [child names]}``; ids follow dict order."""
    names = list(edges)
    ids = {name: f"component-{i}" for i, name in enumerate(names)}
    components = []
    for name in names:
        component = ComponentEntity(id=ids[name], name=name)
        for child in edges[name]:
            component.add_child(ids[child])
        for target in (false_edges or {}).get(name, []):
            component.add_false_child(ids[target])
        components.append(component)
    return ExtractionGraph(components)


def _names(components):
    return [c.name for c in components]


class TestVisitDescendant(unittest.TestCase):
    def test_visits_each_reachable_component_once(self):
        graph = _graph({"App": ["A", "B"], "A": ["C"], "B": ["C"], "C": []})
        seen = []
        visit_descendant(graph, graph.find_by_name("App")[0], seen.append)
        self.assertEqual(_names(seen), ["A", "C", "B"])

    def test_start_component_excluded_without_cycle(self):
        graph = _graph({"App": ["A"], "A": []})
        seen = []
        visit_descendant(graph, graph.find_by_name("App")[0], seen.append)
        self.assertNotIn("App", _names(seen))

    def test_cycle_terminates_and_reaches_start(self):
        graph = _graph({"A": ["B"], "B": ["C"], "C": ["A"]})
        seen = []
        visit_descendant(graph, graph.find_by_name("A")[0], seen.append)
        self.assertEqual(_names(seen), ["B", "C", "A"])

    def test_self_loop(self):
        graph = _graph({"Tree": ["Tree"]})
        self.assertEqual(count_descendant(graph, graph.find_by_name("Tree")[0]), 1)

    def test_shared_visited_set(self):
        graph = _graph({"A": ["C"], "B": ["C"], "C": []})
        visited = set()
        first, second = [], []
        visit_descendant(graph, graph.find_by_name("A")[0], first.append, visited)
        visit_descendant(graph, graph.find_by_name("B")[0], second.append, visited)
        self.assertEqual(_names(first), ["C"])
        self.assertEqual(second, [])

    def test_false_children_not_followed(self):
        graph = _graph({"App": [], "Lazy": []}, false_edges={"App": ["Lazy"]})
        self.assertEqual(count_descendant(graph, graph.find_by_name("App")[0]), 0)


class TestSortedChildren(unittest.TestCase):
    def test_descending_by_subtree_size_stable(self):
        graph = _graph(
            {
                "App": ["Small", "Big", "Tie"],
                "Small": [],
                "Big": ["X", "Y"],
                "Tie": [],
                "X": [],
                "Y": [],
            }
        )
        ordered = sorted_children(graph, graph.find_by_name("App")[0])
        self.assertEqual(_names(ordered), ["Big", "Small", "Tie"])


class TestFindRoots(unittest.TestCase):
    def test_roots_in_discovery_order(self):
        graph = _graph({"Leaf": [], "App": ["Mid"], "Mid": ["Leaf"], "Solo": []})
        self.assertEqual(_names(find_roots(graph)), ["App", "Solo"])

    def test_every_component_reachable_from_a_root(self):
        graph = _graph({"A": ["B"], "B": ["A"], "C": ["D"], "D": [], "E": ["E"]})
        roots = find_roots(graph)
        covered = set()
        for root in roots:
            covered.add(root.id)
            visit_descendant(graph, root, lambda c: covered.add(c.id))
        self.assertEqual(covered, {c.id for c in graph})
        self.assertEqual(_names(roots), ["A", "C", "E"])

    def test_cycle_entered_from_outside_adds_no_root(self):
        graph = _graph({"App": ["A"], "A": ["B"], "B": ["A"]})
        self.assertEqual(_names(find_roots(graph)), ["App"])

    def test_empty_graph(self):
        self.assertEqual(find_roots(ExtractionGraph()), [])


if __name__ == "__main__":
    unittest.main()
