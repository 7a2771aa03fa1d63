"""
Unit tests for the project model and source discovery.
"""

import os
import tempfile
import unittest

from extraction.project import (
    ProjectInputError,
    ProjectModel,
    SourceFile,
    discover_source_files,
    normalize_source_path,
)


class TestProjectModel(unittest.TestCase):
    def test_from_files_keeps_order(self):
        project = ProjectModel.from_files(
            [
                {"source": "b/B.jsx", "content": "b"},
                {"source": "./a/A.jsx", "content": "a"},
            ]
        )
        self.assertEqual(project.paths(), ["b/B.jsx", "a/A.jsx"])
        self.assertEqual(len(project), 2)
        self.assertTrue(project)

    def test_duplicate_paths_keep_first(self):
        project = ProjectModel(
            [SourceFile("App.jsx", "first"), SourceFile("App.jsx", "second")]
        )
        self.assertEqual([f.content for f in project], ["first"])
        self.assertEqual(project.duplicate_paths, ("App.jsx",))

    def test_empty_project_is_falsy(self):
        self.assertFalse(ProjectModel())
        self.assertFalse(ProjectModel.from_files([]))

    def test_missing_content_raises(self):
        with self.assertRaises(ProjectInputError):
            ProjectModel.from_files([{"source": "App.jsx"}])

    def test_missing_source_raises(self):
        with self.assertRaises(ProjectInputError):
            ProjectModel.from_files([{"content": "x"}])

    def test_non_mapping_record_raises(self):
        with self.assertRaises(ProjectInputError):
            ProjectModel.from_files(["App.jsx"])

    def test_non_iterable_files_raise(self):
        for files in (None, "App.jsx", 42, {"source": "App.jsx", "content": "x"}):
            with self.subTest(files=files):
                with self.assertRaises(ProjectInputError):
                    ProjectModel.from_files(files)

    def test_normalize_source_path(self):
        self.assertEqual(normalize_source_path("./src/App.jsx"), "src/App.jsx")
        self.assertEqual(normalize_source_path("src\\App.jsx"), "src/App.jsx")


class TestDiscoverSourceFiles(unittest.TestCase):
    def _write(self, root, relative, content="export default function A() {}"):
        path = os.path.join(root, *relative.split("/"))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)

    def test_discovers_sources_sorted(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            self._write(tmpdir, "src/b.tsx")
            self._write(tmpdir, "src/a.jsx")
            self._write(tmpdir, "src/styles.css")
            self._write(tmpdir, "src/types.d.ts")
            self._write(tmpdir, "node_modules/lib/index.js")
            self._write(tmpdir, ".cache/x.js")

            records = discover_source_files(tmpdir)

        self.assertEqual([r["source"] for r in records], ["src/a.jsx", "src/b.tsx"])
        self.assertEqual(records[0]["content"], "export default function A() {}")

    def test_missing_directory_raises(self):
        with self.assertRaises(FileNotFoundError):
            discover_source_files("/definitely/not/here")


if __name__ == "__main__":
    unittest.main()
