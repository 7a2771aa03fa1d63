"""
Layer 2: Component Graph

Assembles recognized components into one cross-file graph and exposes
traversal and serialization over it.
"""

from componentgraph.builder import ExtractionGraph, GraphBuilder
from componentgraph.traversal import (
    count_descendant,
    find_roots,
    sorted_children,
    visit_descendant,
)
from componentgraph.serializer import (
    format_trace,
    graph_from_dict,
    graph_to_dict,
    graph_to_json,
)
from componentgraph.hook_extractor import (
    ExtractionInProgressError,
    ExtractionResult,
    ExtractionStats,
    HookExtractor,
    extract_project,
    recognize_file,
)

__all__ = [
    "ExtractionGraph",
    "GraphBuilder",
    "count_descendant",
    "find_roots",
    "sorted_children",
    "visit_descendant",
    "format_trace",
    "graph_from_dict",
    "graph_to_dict",
    "graph_to_json",
    "ExtractionInProgressError",
    "ExtractionResult",
    "ExtractionStats",
    "HookExtractor",
    "extract_project",
    "recognize_file",
]
