"""
Syntax adapter over tree-sitter JavaScript/TypeScript trees.

Recognition and resolution code only sees ``SyntaxNode`` objects and
matches on the small closed ``NodeKind`` set below, never on grammar
specific node classes. Grammar node type names live in
``extraction.config``.
"""

import enum
import logging
from typing import Callable, Iterator, List, Optional, Tuple

from tree_sitter import Node

from extraction.config import (
    CALL_TYPES,
    DESTRUCTURING_TYPES,
    FUNCTION_TYPES,
    IDENTIFIER_TYPES,
    MARKUP_ELEMENT_TYPES,
    MARKUP_TYPES,
    MEMBER_EXPRESSION,
    TRANSPARENT_EXPRESSIONS,
    VARIABLE_DECLARATOR,
)

logger = logging.getLogger(__name__)


class NodeKind(enum.Enum):
    """Node categories the extractor reasons about."""

    FUNCTION = "function"
    CALL = "call"
    MARKUP_ELEMENT = "markup_element"
    IDENTIFIER = "identifier"
    DESTRUCTURING_PATTERN = "destructuring_pattern"
    OTHER = "other"


def _classify(node_type: str) -> NodeKind:
    if node_type in FUNCTION_TYPES:
        return NodeKind.FUNCTION
    if node_type in CALL_TYPES:
        return NodeKind.CALL
    if node_type in MARKUP_ELEMENT_TYPES:
        return NodeKind.MARKUP_ELEMENT
    if node_type in IDENTIFIER_TYPES:
        return NodeKind.IDENTIFIER
    if node_type in DESTRUCTURING_TYPES:
        return NodeKind.DESTRUCTURING_PATTERN
    return NodeKind.OTHER


class SyntaxNode:
    """Thin wrapper around a tree-sitter ``Node``."""

    __slots__ = ("_node", "kind")

    def __init__(self, node: Node):
        self._node = node
        self.kind = _classify(node.type)

    # -- basic accessors ---------------------------------------------------

    @property
    def type(self) -> str:
        return self._node.type

    @property
    def text(self) -> str:
        raw = self._node.text
        return raw.decode("utf-8", errors="replace") if raw else ""

    @property
    def line(self) -> int:
        """1-indexed start line."""
        return self._node.start_point.row + 1

    @property
    def node_id(self) -> int:
        return self._node.id

    @property
    def is_named(self) -> bool:
        return self._node.is_named

    @property
    def parent(self) -> Optional["SyntaxNode"]:
        parent = self._node.parent
        return SyntaxNode(parent) if parent is not None else None

    @property
    def children(self) -> List["SyntaxNode"]:
        return [SyntaxNode(child) for child in self._node.children]

    @property
    def named_children(self) -> List["SyntaxNode"]:
        """Named children without comments."""
        return [
            SyntaxNode(child)
            for child in self._node.named_children
            if child.type != "comment"
        ]

    def has_token(self, token: str) -> bool:
        """True if an anonymous child token (e.g. ``default``) is present."""
        return any(not c.is_named and c.type == token for c in self._node.children)

    def field(self, name: str) -> Optional["SyntaxNode"]:
        child = self._node.child_by_field_name(name)
        return SyntaxNode(child) if child is not None else None

    def first_child_of_type(self, *types: str) -> Optional["SyntaxNode"]:
        for child in self._node.named_children:
            if child.type in types:
                return SyntaxNode(child)
        return None

    def walk(
        self,
        stop_at: Optional[Callable[["SyntaxNode"], bool]] = None,
    ) -> Iterator["SyntaxNode"]:
        """Pre-order walk over named descendants, including ``self``.

        Nodes for which ``stop_at`` returns True are yielded but not
        descended into. The root is always descended into.
        """
        stack = [self]
        while stack:
            current = stack.pop()
            yield current
            if current is not self and stop_at is not None and stop_at(current):
                continue
            stack.extend(reversed(current.named_children))

    def contains_markup(self) -> bool:
        return any(n.type in MARKUP_TYPES for n in self.walk())

    def unwrap(self) -> "SyntaxNode":
        """Strip parentheses and type-only wrappers around an expression."""
        current = self
        while current.type in TRANSPARENT_EXPRESSIONS:
            inner = current.named_children
            if not inner:
                break
            current = inner[0]
        return current

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SyntaxNode) and self._node.id == other._node.id

    def __hash__(self) -> int:
        return hash(self._node.id)

    def __repr__(self) -> str:
        return f"SyntaxNode({self.type}@{self.line})"

    # -- function definitions ----------------------------------------------

    def function_name(self) -> Optional[str]:
        name = self.field("name")
        return name.text if name is not None else None

    def parameters(self) -> List["SyntaxNode"]:
        """Parameter nodes of a function, in declaration order."""
        single = self.field("parameter")
        if single is not None:
            return [single]
        params = self.field("parameters")
        if params is None:
            return []
        return params.named_children

    def body(self) -> Optional["SyntaxNode"]:
        return self.field("body")

    # -- calls -------------------------------------------------------------

    def callee(self) -> Optional["SyntaxNode"]:
        target = self.field("function")
        return target.unwrap() if target is not None else None

    def callee_name(self) -> Optional[str]:
        """Last segment of the call target: ``React.useState`` -> ``useState``."""
        target = self.callee()
        if target is None:
            return None
        if target.kind is NodeKind.IDENTIFIER:
            return target.text
        if target.type == MEMBER_EXPRESSION:
            prop = target.field("property")
            return prop.text if prop is not None else None
        return None

    def call_arguments(self) -> List["SyntaxNode"]:
        args = self.field("arguments")
        if args is None:
            return []
        return args.named_children

    # -- expressions -------------------------------------------------------

    def root_identifier(self) -> Optional["SyntaxNode"]:
        """Leftmost identifier of ``a``, ``a.b.c`` or ``a?.b``; else None."""
        current = self.unwrap()
        while current.type == MEMBER_EXPRESSION:
            obj = current.field("object")
            if obj is None:
                return None
            current = obj.unwrap()
        if current.kind is NodeKind.IDENTIFIER:
            return current
        return None

    def is_declaration_name(self) -> bool:
        """True if this identifier is the name being declared by its parent."""
        parent = self.parent
        if parent is None:
            return False
        if parent.type == VARIABLE_DECLARATOR or parent.kind is NodeKind.FUNCTION:
            name = parent.field("name")
            return name is not None and name == self
        return parent.type in ("import_specifier", "import_clause", "namespace_import")

    # -- markup ------------------------------------------------------------

    def _opening(self) -> Optional["SyntaxNode"]:
        if self.type == "jsx_self_closing_element":
            return self
        if self.type == "jsx_element":
            opening = self.field("open_tag")
            if opening is None:
                opening = self.first_child_of_type("jsx_opening_element")
            return opening
        return None

    def markup_name_node(self) -> Optional["SyntaxNode"]:
        opening = self._opening()
        if opening is None:
            return None
        return opening.field("name")

    def markup_name(self) -> Optional[str]:
        name = self.markup_name_node()
        return name.text if name is not None else None

    def markup_attributes(self) -> List[Tuple[str, Optional["SyntaxNode"]]]:
        """``(name, value)`` pairs of a markup element's attributes.

        Spread attributes are skipped; a bare boolean attribute has value None.
        """
        opening = self._opening()
        if opening is None:
            return []
        attributes = []
        for child in opening.named_children:
            if child.type != "jsx_attribute":
                continue
            parts = child.named_children
            if not parts:
                continue
            value = parts[1] if len(parts) > 1 else None
            attributes.append((parts[0].text, value))
        return attributes

    def markup_body(self) -> List["SyntaxNode"]:
        """Children rendered between the opening and closing tags."""
        if self.type != "jsx_element":
            return []
        return [
            child
            for child in self.named_children
            if child.type not in ("jsx_opening_element", "jsx_closing_element")
        ]

    def expression_value(self) -> Optional["SyntaxNode"]:
        """Inner expression of a ``{...}`` markup expression container."""
        if self.type != "jsx_expression":
            return self.unwrap()
        inner = self.named_children
        return inner[0].unwrap() if inner else None
