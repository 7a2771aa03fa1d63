"""
Configuration constants for component/hook extraction.

Defines the tree-sitter node type strings used by the syntax adapter and
the grammar chosen for each source file extension.
"""

from typing import Dict, Set

# Function-like definitions (JavaScript + TypeScript grammars)
FUNCTION_TYPES: Set[str] = {
    "function_declaration",
    "function_expression",
    "function",  # older tree-sitter-javascript name for function expressions
    "arrow_function",
    "generator_function_declaration",
    "method_definition",
}

CALL_TYPES: Set[str] = {
    "call_expression",
}

MARKUP_ELEMENT_TYPES: Set[str] = {
    "jsx_element",
    "jsx_self_closing_element",
}

IDENTIFIER_TYPES: Set[str] = {
    "identifier",
    "shorthand_property_identifier",
}

DESTRUCTURING_TYPES: Set[str] = {
    "object_pattern",
    "array_pattern",
}

# Any node of these types counts as "returns/contains markup"
MARKUP_TYPES: Set[str] = MARKUP_ELEMENT_TYPES | {"jsx_fragment"}

# Top-level statement shapes
EXPORT_STATEMENT: str = "export_statement"
VARIABLE_DECLARATION_TYPES: Set[str] = {
    "lexical_declaration",
    "variable_declaration",
}
VARIABLE_DECLARATOR: str = "variable_declarator"
IMPORT_STATEMENT: str = "import_statement"

# TypeScript wraps patterns in these parameter nodes
TS_PARAMETER_TYPES: Set[str] = {
    "required_parameter",
    "optional_parameter",
}

# Object pattern members
SHORTHAND_PROP_PATTERN: str = "shorthand_property_identifier_pattern"
PAIR_PATTERN: str = "pair_pattern"
ASSIGNMENT_PROP_PATTERN: str = "object_assignment_pattern"
REST_PATTERN: str = "rest_pattern"

# Identifiers that introduce a binding inside a pattern
BINDING_IDENTIFIER_TYPES: Set[str] = {
    "identifier",
    SHORTHAND_PROP_PATTERN,
}
ASSIGNMENT_PATTERN_TYPES: Set[str] = {
    "assignment_pattern",
    ASSIGNMENT_PROP_PATTERN,
}

# Function forms whose name is bound in the enclosing scope
FUNCTION_DECLARATION_TYPES: Set[str] = {
    "function_declaration",
    "generator_function_declaration",
}

# Wrapping expressions that are transparent for value resolution
TRANSPARENT_EXPRESSIONS: Set[str] = {
    "parenthesized_expression",
    "as_expression",
    "non_null_expression",
    "satisfies_expression",
}

MEMBER_EXPRESSION: str = "member_expression"
ERROR_NODE_TYPES: Set[str] = {"ERROR"}

CREATE_ELEMENT_NAMES: Set[str] = {"createElement"}

# Grammar selection by extension; anything else falls back to JavaScript
GRAMMAR_BY_EXTENSION: Dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
}
DEFAULT_GRAMMAR: str = "javascript"

# Source extensions picked up by directory discovery (CLI only)
SOURCE_EXTENSIONS: Set[str] = set(GRAMMAR_BY_EXTENSION)

# Directories never descended into by discovery
EXCLUDED_DIRS: Set[str] = {
    "node_modules",
    "bower_components",
    "dist",
    "build",
    "out",
    "coverage",
    "__pycache__",
}

# Extensions tried when resolving a relative import specifier
IMPORT_RESOLUTION_SUFFIXES: tuple = (
    "",
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".mjs",
    ".cjs",
)
