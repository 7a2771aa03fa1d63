"""
Integration tests for HookExtractor: full runs over in-memory projects.
"""

import io
import unittest
from unittest import mock

from componentgraph.hook_extractor import (
    ExtractionInProgressError,
    HookExtractor,
    extract_project,
    recognize_file,
)
from core.config_loader import ExtractorConfig
from core.structured_logging import get_source
from extraction.project import ProjectInputError, ProjectModel, SourceFile

APP_FILES = [
    {
        "source": "src/App.jsx",
        "content": """
import Sidebar from './Sidebar';
import { Card } from './Card';

export default function App() {
  const [user, setUser] = useState(null);
  const [theme, setTheme] = useState("light");
  useEffect(() => { setTheme(user ? "dark" : "light"); }, [user]);
  return (
    <main>
      <Sidebar user={user} onLogout={() => setUser(null)} />
      <Card title={theme} />
    </main>
  );
}
""",
    },
    {
        "source": "src/Sidebar.jsx",
        "content": """
export default function Sidebar({ user, onLogout }) {
  useEffect(() => { if (!user) onLogout(); }, [user]);
  return <aside><Card title={user} /></aside>;
}
""",
    },
    {
        "source": "src/Card.tsx",
        "content": """
type CardProps = { title: string };
export function Card({ title }: CardProps) {
  const [hover, setHover] = useState<boolean>(false);
  return <div onMouseEnter={() => setHover(true)}>{title}</div>;
}
""",
    },
]


class TestHookExtractor(unittest.TestCase):
    def test_full_project(self):
        extractor = HookExtractor()
        graph = extractor.set_project(APP_FILES)

        self.assertEqual([c.name for c in extractor.component_list], ["App", "Sidebar", "Card"])
        app, sidebar, card = extractor.component_list
        self.assertEqual(app.children, [sidebar.id, card.id])
        self.assertEqual(card.states[0].name, "hover")
        self.assertEqual(card.props[0].references, [app.states[1].id, sidebar.props[0].id])
        self.assertEqual(sidebar.prop_by_name("onLogout").references, [app.states[0].setter_id])
        self.assertEqual(sidebar.effects[0].handling_target_ids, [sidebar.prop_by_name("onLogout").id])
        self.assertEqual([r.name for r in extractor.find_roots()], ["App"])
        self.assertEqual(extractor.count_descendant(app), 2)
        self.assertEqual([c.name for c in extractor.sorted_children(app)], ["Sidebar", "Card"])
        self.assertIs(graph, extractor.graph)
        self.assertEqual(extractor.stats.files_processed, 3)
        self.assertEqual(extractor.stats.components_extracted, 3)
        self.assertEqual(extractor.diagnostics, [])

    def test_repeated_runs_are_identical(self):
        serial = HookExtractor(ExtractorConfig(max_workers=1))
        parallel = HookExtractor(ExtractorConfig(max_workers=4))
        serial.set_project(APP_FILES)
        parallel.set_project(APP_FILES)
        first = parallel.to_dict()
        parallel.set_project(APP_FILES)
        self.assertEqual(serial.to_dict(), first)
        self.assertEqual(parallel.to_dict(), first)

    def test_visit_descendant(self):
        extractor = HookExtractor()
        extractor.set_project(APP_FILES)
        seen = []
        extractor.visit_descendant(extractor.component_list[0], lambda c: seen.append(c.name))
        self.assertEqual(seen, ["Sidebar", "Card"])

    def test_empty_project(self):
        extractor = HookExtractor()
        extractor.set_project([])
        self.assertEqual(extractor.component_list, [])
        self.assertEqual(extractor.find_roots(), [])
        self.assertEqual(extractor.to_dict(), {"componentList": []})

    def test_set_project_replaces_previous_graph(self):
        extractor = HookExtractor()
        extractor.set_project(APP_FILES)
        extractor.set_project([{"source": "Only.jsx", "content": "function Only() { return <b />; }"}])
        self.assertEqual([c.id for c in extractor.component_list], ["component-0"])
        self.assertEqual(extractor.project.paths(), ["Only.jsx"])

    def test_malformed_record_raises_and_keeps_previous_graph(self):
        extractor = HookExtractor()
        extractor.set_project(APP_FILES)
        with self.assertRaises(ProjectInputError):
            extractor.set_project([{"source": "Bad.jsx", "content": 42}])
        self.assertEqual(len(extractor.component_list), 3)

    def test_concurrent_set_project_rejected(self):
        extractor = HookExtractor()
        self.assertTrue(extractor._run_lock.acquire(blocking=False))
        try:
            with self.assertRaises(ExtractionInProgressError):
                extractor.set_project(APP_FILES)
        finally:
            extractor._run_lock.release()
        extractor.set_project(APP_FILES)
        self.assertEqual(len(extractor.component_list), 3)

    def test_to_json_and_print(self):
        extractor = HookExtractor()
        extractor.set_project(APP_FILES)
        self.assertIn('"componentList"', extractor.to_json())
        stream = io.StringIO()
        trace = extractor.print(stream)
        self.assertEqual(stream.getvalue(), trace + "\n")
        self.assertIn("App", trace)


class TestFailureHandling(unittest.TestCase):
    def test_unparseable_file_is_skipped(self):
        project = ProjectModel(
            [
                SourceFile("Bad.jsx", "const s = '\ud800';"),
                SourceFile("Good.jsx", "function Good() { return <p />; }"),
            ]
        )
        result = extract_project(project)
        self.assertEqual([c.name for c in result.graph.component_list], ["Good"])
        self.assertEqual([(d.kind, d.path) for d in result.diagnostics], [("parse_failure", "Bad.jsx")])
        self.assertEqual(result.stats.files_failed, 1)
        self.assertEqual(result.stats.files_processed, 1)

    def test_syntax_errors_are_best_effort_by_default(self):
        source = "function Ok() { return <p />; }\nfunction Broken( { return <div>; }\n"
        result = extract_project(ProjectModel([SourceFile("Mixed.jsx", source)]))
        self.assertIn("Ok", [c.name for c in result.graph.component_list])
        self.assertIn("syntax_errors", [d.kind for d in result.diagnostics])
        self.assertGreater(result.stats.parse_errors, 0)

    def test_syntax_errors_skip_file_when_configured(self):
        source = "function Broken( { return <div>; }\n"
        config = ExtractorConfig(skip_files_with_syntax_errors=True)
        result = extract_project(ProjectModel([SourceFile("Broken.jsx", source)]), config)
        self.assertEqual(len(result.graph), 0)
        self.assertEqual([d.kind for d in result.diagnostics], ["parse_failure"])

    def test_unexpected_error_becomes_file_failure(self):
        with mock.patch(
            "componentgraph.hook_extractor.recognize_components",
            side_effect=RuntimeError("boom"),
        ):
            result = recognize_file(SourceFile("App.jsx", "function A() {}"), ExtractorConfig())
        self.assertIsNone(result.skeleton)
        self.assertEqual(result.diagnostics[0].kind, "file_failure")
        self.assertIn("boom", result.diagnostics[0].message)

    def test_recognition_runs_under_source_context(self):
        seen = []

        def _capture(tree, path, config):
            seen.append(get_source())
            raise RuntimeError("stop")

        with mock.patch("componentgraph.hook_extractor.recognize_components", side_effect=_capture):
            recognize_file(SourceFile("src/App.jsx", "function A() {}"), ExtractorConfig())
        self.assertEqual(seen, ["src/App.jsx"])
        self.assertEqual(get_source(), "-")

    def test_duplicate_paths_reported(self):
        extractor = HookExtractor()
        extractor.set_project(
            [
                {"source": "A.jsx", "content": "function A() { return <p />; }"},
                {"source": "A.jsx", "content": "function B() { return <p />; }"},
            ]
        )
        self.assertEqual([c.name for c in extractor.component_list], ["A"])
        self.assertEqual([d.kind for d in extractor.diagnostics], ["duplicate_file"])


if __name__ == "__main__":
    unittest.main()
