"""
High-level orchestrator for component graph extraction.

``HookExtractor.set_project`` runs one full extraction over an in-memory
project: per-file recognition (parallel, no shared state), then a single
join, then id allocation and cross-file reference resolution.
"""

import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, TextIO, Union

from componentgraph.builder import ExtractionGraph, GraphBuilder
from componentgraph.serializer import format_trace, graph_to_dict, graph_to_json
from componentgraph.traversal import (
    VisitFn,
    count_descendant,
    find_roots,
    sorted_children,
    visit_descendant,
)
from core.config_loader import ExtractorConfig
from core.structured_logging import phase_scope, source_scope, with_current_context
from extraction.models import ComponentEntity, Diagnostic
from extraction.parser import ParseFailure, count_error_nodes, parse_source
from extraction.project import ProjectModel, SourceFile
from extraction.recognizer import FileSkeleton, recognize_components

logger = logging.getLogger(__name__)


class ExtractionInProgressError(RuntimeError):
    """Raised when ``set_project`` is called while a run is in flight."""


class ExtractionStats:
    """Statistics for an extraction run."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.components_extracted = 0
        self.parse_errors = 0
        self.ambiguous_bindings = 0

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "components_extracted": self.components_extracted,
            "parse_errors": self.parse_errors,
            "ambiguous_bindings": self.ambiguous_bindings,
        }

    def __str__(self) -> str:
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, components={self.components_extracted}, "
            f"parse_errors={self.parse_errors}, ambiguous={self.ambiguous_bindings})"
        )


@dataclass
class FileRecognitionResult:
    """Outcome of recognizing one file."""

    path: str
    skeleton: Optional[FileSkeleton] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)
    parse_error_count: int = 0


@dataclass
class ExtractionResult:
    graph: ExtractionGraph
    diagnostics: List[Diagnostic]
    stats: ExtractionStats


def recognize_file(source_file: SourceFile, config: ExtractorConfig) -> FileRecognitionResult:
    """Parse and recognize one file; failures become diagnostics."""
    result = FileRecognitionResult(path=source_file.path)
    with source_scope(source_file.path):
        try:
            tree = parse_source(source_file.path, source_file.content)
            error_count = count_error_nodes(tree) if tree.root_node.has_error else 0
            result.parse_error_count = error_count

            if error_count:
                if config.skip_files_with_syntax_errors:
                    raise ParseFailure(source_file.path, f"{error_count} syntax error nodes")
                logger.warning(
                    "File %s contains syntax errors (%d error nodes); extracting best-effort",
                    source_file.path,
                    error_count,
                )
                result.diagnostics.append(
                    Diagnostic("syntax_errors", source_file.path, f"{error_count} syntax error nodes")
                )

            result.skeleton = recognize_components(tree, source_file.path, config)

        except ParseFailure as e:
            logger.warning("Skipping %s: %s", source_file.path, e.reason)
            result.diagnostics.append(Diagnostic("parse_failure", source_file.path, e.reason))
        except Exception as e:
            logger.error("Unexpected error recognizing %s: %s", source_file.path, e, exc_info=True)
            result.diagnostics.append(Diagnostic("file_failure", source_file.path, str(e)))

    return result


def _recognize_all(project: ProjectModel, config: ExtractorConfig) -> List[FileRecognitionResult]:
    files = list(project)
    workers = min(config.max_workers, len(files))
    if workers <= 1:
        return [recognize_file(f, config) for f in files]

    logger.debug("Recognizing %d files with %d workers", len(files), workers)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="recognize") as pool:
        futures = [pool.submit(with_current_context(recognize_file), f, config) for f in files]
        # Join point: results are consumed in input order
        return [future.result() for future in futures]


def extract_project(
    project: ProjectModel,
    config: Optional[ExtractorConfig] = None,
) -> ExtractionResult:
    """Run one complete extraction over ``project``."""
    config = config or ExtractorConfig()
    stats = ExtractionStats()
    diagnostics: List[Diagnostic] = [
        Diagnostic("duplicate_file", path, "duplicate path skipped; first occurrence kept")
        for path in project.duplicate_paths
    ]

    if not project:
        logger.warning("Project has no source files; returning an empty graph")
        return ExtractionResult(ExtractionGraph(), diagnostics, stats)

    logger.info("Extracting components from %d files", len(project))

    with phase_scope("recognize"):
        results = _recognize_all(project, config)

    builder = GraphBuilder(config)
    with phase_scope("assemble"):
        for result in results:
            diagnostics.extend(result.diagnostics)
            stats.parse_errors += result.parse_error_count
            if result.skeleton is None:
                stats.files_failed += 1
                continue
            stats.files_processed += 1
            stats.components_extracted += len(builder.add_file(result.skeleton))

    with phase_scope("resolve"):
        graph, resolve_diagnostics = builder.build()

    diagnostics.extend(resolve_diagnostics)
    stats.ambiguous_bindings = sum(1 for d in resolve_diagnostics if d.kind == "ambiguous_binding")
    logger.info("Extraction complete: %s", stats)
    return ExtractionResult(graph, diagnostics, stats)


class HookExtractor:
    """Stateful facade: holds the graph of the most recent run.

    Example:
        >>> extractor = HookExtractor()
        >>> extractor.set_project([{"source": "App.jsx", "content": src}])
        >>> [c.name for c in extractor.component_list]
    """

    def __init__(self, config: Optional[ExtractorConfig] = None):
        self.config = config or ExtractorConfig()
        self._run_lock = threading.Lock()
        self._project = ProjectModel()
        self._graph = ExtractionGraph()
        self.diagnostics: List[Diagnostic] = []
        self.stats = ExtractionStats()

    def set_project(
        self,
        files: Union[ProjectModel, Iterable[Mapping[str, Any]]],
    ) -> ExtractionGraph:
        """Replace the project and rebuild the graph from scratch.

        Raises:
            ExtractionInProgressError: If another run is still in flight.
            ProjectInputError: If a file record is malformed.
        """
        if not self._run_lock.acquire(blocking=False):
            raise ExtractionInProgressError("An extraction run is already in progress")
        try:
            project = files if isinstance(files, ProjectModel) else ProjectModel.from_files(files)
            result = extract_project(project, self.config)
            self._project = project
            self._graph = result.graph
            self.diagnostics = result.diagnostics
            self.stats = result.stats
            return self._graph
        finally:
            self._run_lock.release()

    @property
    def project(self) -> ProjectModel:
        return self._project

    @property
    def graph(self) -> ExtractionGraph:
        return self._graph

    @property
    def component_list(self) -> List[ComponentEntity]:
        return self._graph.component_list

    def visit_descendant(self, component: ComponentEntity, visit_fn: VisitFn) -> None:
        visit_descendant(self._graph, component, visit_fn)

    def count_descendant(self, component: ComponentEntity) -> int:
        return count_descendant(self._graph, component)

    def sorted_children(self, component: ComponentEntity) -> List[ComponentEntity]:
        return sorted_children(self._graph, component)

    def find_roots(self) -> List[ComponentEntity]:
        return find_roots(self._graph)

    def to_dict(self) -> Dict[str, Any]:
        return graph_to_dict(self._graph)

    def to_json(self, indent: Optional[int] = None) -> str:
        return graph_to_json(self._graph, indent=indent)

    def print(self, stream: Optional[TextIO] = None) -> str:
        """Write the diagnostic trace to ``stream`` (stdout) and return it."""
        trace = format_trace(self._graph)
        out = stream if stream is not None else sys.stdout
        out.write(trace + "\n")
        return trace
