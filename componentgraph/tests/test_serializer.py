"""
Unit tests for graph serialization.
"""

import json
import unittest

from componentgraph.hook_extractor import HookExtractor
from componentgraph.serializer import (
    COMPONENT_LIST_KEY,
    format_trace,
    graph_from_dict,
    graph_to_dict,
    graph_to_json,
)

SOURCE = """
function Child({ value, onChange }) { return <input value={value} />; }
function Parent() {
  const [text, setText] = useState("");
  useEffect(() => { setText("ready"); }, [text]);
  return <div><Child value={text} onChange={setText} /></div>;
}
"""


def _extract():
    extractor = HookExtractor()
    extractor.set_project([{"source": "App.jsx", "content": SOURCE}])
    return extractor.graph


class TestGraphToDict(unittest.TestCase):
    def test_shape(self):
        payload = graph_to_dict(_extract())
        components = payload[COMPONENT_LIST_KEY]
        self.assertEqual([c["name"] for c in components], ["Child", "Parent"])

        parent = components[1]
        self.assertEqual(
            sorted(parent),
            ["children", "effects", "falseChildren", "id", "name", "props", "states"],
        )
        self.assertEqual(parent["children"], ["component-0"])
        self.assertEqual(parent["states"], [{"id": "state-0", "name": "text"}])
        self.assertEqual(
            parent["effects"],
            [
                {
                    "id": "effect-0",
                    "dependencyIds": ["state-0"],
                    "handlingTargetIds": ["setter-state-0"],
                }
            ],
        )
        child_props = {p["name"]: p["references"] for p in components[0]["props"]}
        self.assertEqual(child_props, {"value": ["state-0"], "onChange": ["setter-state-0"]})

    def test_json_is_plain_data(self):
        text = graph_to_json(_extract(), indent=2)
        self.assertEqual(json.loads(text), graph_to_dict(_extract()))


class TestGraphFromDict(unittest.TestCase):
    def test_round_trip_is_structurally_equal(self):
        payload = graph_to_dict(_extract())
        rebuilt = graph_from_dict(json.loads(json.dumps(payload)))
        self.assertEqual(graph_to_dict(rebuilt), payload)
        parent = rebuilt.find_by_name("Parent")[0]
        self.assertEqual(parent.states[0].setter_id, "setter-state-0")

    def test_rejects_malformed_payload(self):
        with self.assertRaises(ValueError):
            graph_from_dict({})
        with self.assertRaises(ValueError):
            graph_from_dict({COMPONENT_LIST_KEY: [{"id": "prop-0", "name": "X"}]})
        with self.assertRaises(ValueError):
            graph_from_dict(
                {
                    COMPONENT_LIST_KEY: [
                        {
                            "id": "component-0",
                            "name": "X",
                            "children": ["not-an-id"],
                            "falseChildren": [],
                            "props": [],
                            "states": [],
                            "effects": [],
                        }
                    ]
                }
            )


class TestFormatTrace(unittest.TestCase):
    def test_trace_mentions_every_component(self):
        trace = format_trace(_extract())
        self.assertIn("component-0 Child", trace)
        self.assertIn("component-1 Parent", trace)
        self.assertIn("child component-0 Child", trace)
        self.assertIn("setter-state-0", trace)


if __name__ == "__main__":
    unittest.main()
