"""
Layer 1: Extraction Engine

Tree-sitter-based JavaScript/TypeScript component recognizer.
Finds UI components and their props, state hooks and effect hooks, and
resolves the references between them.
"""

from extraction.models import (
    ComponentEntity,
    Diagnostic,
    EffectEntity,
    PropEntity,
    StateEntity,
)
from extraction.parser import (
    ParseFailure,
    count_error_nodes,
    create_parser,
    grammar_for_path,
    parse_bytes,
    parse_source,
)
from extraction.project import (
    ProjectInputError,
    ProjectModel,
    SourceFile,
    discover_source_files,
)
from extraction.syntax import NodeKind, SyntaxNode
from extraction.recognizer import FileSkeleton, recognize_components
from extraction.resolver import ComponentRegistry, ComponentScope, ReferenceResolver

__all__ = [
    # Data models
    "ComponentEntity",
    "Diagnostic",
    "EffectEntity",
    "PropEntity",
    "StateEntity",
    # Project model
    "ProjectInputError",
    "ProjectModel",
    "SourceFile",
    "discover_source_files",
    # Low-level parsing
    "ParseFailure",
    "count_error_nodes",
    "create_parser",
    "grammar_for_path",
    "parse_bytes",
    "parse_source",
    # Syntax adapter
    "NodeKind",
    "SyntaxNode",
    # Recognition and resolution
    "FileSkeleton",
    "recognize_components",
    "ComponentRegistry",
    "ComponentScope",
    "ReferenceResolver",
]
