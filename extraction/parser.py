"""
Tree-sitter parser initialization and source parsing utilities.

This module picks a JavaScript/TypeScript grammar for a source path and
parses in-memory text into a tree-sitter ``Tree``.
"""

import logging
import posixpath
from typing import Dict

import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser, Tree

from extraction.config import DEFAULT_GRAMMAR, ERROR_NODE_TYPES, GRAMMAR_BY_EXTENSION

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constants
LANGUAGES: Dict[str, Language] = {
    "javascript": Language(tsjs.language()),
    "typescript": Language(tsts.language_typescript()),
    "tsx": Language(tsts.language_tsx()),
}


class ParseFailure(Exception):
    """Raised when source text cannot be turned into a usable syntax tree."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def grammar_for_path(path: str) -> str:
    """Return the grammar name used for ``path``.

    Example:
        >>> grammar_for_path("src/App.tsx")
        'tsx'
    """
    ext = posixpath.splitext(path)[1].lower()
    return GRAMMAR_BY_EXTENSION.get(ext, DEFAULT_GRAMMAR)


def create_parser(grammar: str = DEFAULT_GRAMMAR) -> Parser:
    """Create a tree-sitter parser for the named grammar.

    Raises:
        ValueError: If the grammar is unknown.
    """
    language = LANGUAGES.get(grammar)
    if language is None:
        raise ValueError(f"Unknown grammar: {grammar}")
    parser = Parser(language)
    logger.debug("Created tree-sitter %s parser", grammar)
    return parser


def parse_bytes(source: bytes, grammar: str = DEFAULT_GRAMMAR) -> Tree:
    """Parse raw bytes of JavaScript/TypeScript source.

    Raises:
        TypeError: If source is not bytes.
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser(grammar)
    tree = parser.parse(source)

    if tree.root_node.has_error:
        logger.debug("Parsed tree contains syntax errors")

    logger.debug("Parsed %d bytes of %s code", len(source), grammar)
    return tree


def parse_source(path: str, content: str) -> Tree:
    """Parse one source file's text, choosing the grammar from its path.

    Raises:
        ParseFailure: If the text cannot be encoded or parsed.
    """
    if not isinstance(content, str):
        raise ParseFailure(path, f"content must be text, got {type(content).__name__}")
    try:
        source_bytes = content.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise ParseFailure(path, f"content is not encodable as UTF-8: {exc}") from exc

    grammar = grammar_for_path(path)
    try:
        tree = parse_bytes(source_bytes, grammar)
    except (ValueError, TypeError) as exc:
        raise ParseFailure(path, str(exc)) from exc

    if tree.root_node is None:
        raise ParseFailure(path, "parser produced no root node")
    return tree


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a parsed tree."""
    count = 0
    stack: list[Node] = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type in ERROR_NODE_TYPES or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count
