"""
Unit tests for graph assembly and id allocation.
"""

import unittest

from componentgraph.builder import ExtractionGraph, GraphBuilder
from core.config_loader import ExtractorConfig
from core.id_contract import parse_entity_id
from extraction.models import ComponentEntity
from extraction.parser import parse_source
from extraction.recognizer import recognize_components

FILE_A = """
function Header({ title, subtitle }) {
  const [open, setOpen] = useState(false);
  useEffect(() => setOpen(true), [title]);
  return <h1>{title}</h1>;
}
"""

FILE_B = """
function Body({ text }) {
  const [n] = useState(0);
  return <p>{text}</p>;
}
"""


def _skeleton(path, source, config=None):
    config = config or ExtractorConfig()
    return recognize_components(parse_source(path, source), path, config)


class TestExtractionGraph(unittest.TestCase):
    def test_duplicate_component_id_rejected(self):
        graph = ExtractionGraph([ComponentEntity(id="component-0", name="A")])
        with self.assertRaises(ValueError):
            graph.add_component(ComponentEntity(id="component-0", name="B"))

    def test_lookup_helpers(self):
        a = ComponentEntity(id="component-0", name="A", children=["component-1", "component-9"])
        b = ComponentEntity(id="component-1", name="B")
        graph = ExtractionGraph([a, b])
        self.assertIn("component-1", graph)
        self.assertEqual(graph["component-1"], b)
        self.assertIsNone(graph.get("component-9"))
        self.assertEqual(graph.children_of(a), [b])
        self.assertEqual(len(graph), 2)


class TestGraphBuilder(unittest.TestCase):
    def test_ids_follow_file_then_declaration_order(self):
        builder = GraphBuilder()
        builder.add_file(_skeleton("A.jsx", FILE_A))
        builder.add_file(_skeleton("B.jsx", FILE_B))
        graph, _ = builder.build()

        header, body = graph.component_list
        self.assertEqual((header.id, body.id), ("component-0", "component-1"))
        self.assertEqual([p.id for p in header.props], ["prop-0", "prop-1"])
        self.assertEqual([p.id for p in body.props], ["prop-2"])
        self.assertEqual([s.id for s in header.states], ["state-0"])
        self.assertEqual([s.id for s in body.states], ["state-1"])
        self.assertEqual(header.states[0].setter_id, "setter-state-0")
        self.assertEqual([e.id for e in header.effects], ["effect-0"])
        self.assertEqual(header.file_path, "A.jsx")
        self.assertEqual(header.line, 2)

    def test_ids_unique_across_kinds(self):
        builder = GraphBuilder()
        builder.add_file(_skeleton("A.jsx", FILE_A))
        builder.add_file(_skeleton("B.jsx", FILE_B))
        graph, _ = builder.build()
        ids = graph.entity_ids()
        self.assertEqual(len(ids), len(set(ids)))
        for entity_id in ids:
            parse_entity_id(entity_id)

    def test_build_is_idempotent_and_closes_builder(self):
        builder = GraphBuilder()
        builder.add_file(_skeleton("A.jsx", FILE_A))
        first, _ = builder.build()
        second, _ = builder.build()
        self.assertIs(first, second)
        self.assertEqual(first.component_list[0].effects[0].dependency_ids, ["prop-0"])
        with self.assertRaises(RuntimeError):
            builder.add_file(_skeleton("B.jsx", FILE_B))


if __name__ == "__main__":
    unittest.main()
