"""
Component and hook recognition.

Walks one file's syntax tree, finds top-level (or exported) function
definitions that behave as UI components, and records each component's
destructured props, state hook calls and effect hook calls. The output is
a ``FileSkeleton`` with no ids; ids are allocated later, in file order,
by the graph builder so per-file recognition can run in parallel.
"""

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from tree_sitter import Tree

from core.config_loader import ExtractorConfig
from extraction.config import (
    ASSIGNMENT_PROP_PATTERN,
    EXPORT_STATEMENT,
    IMPORT_STATEMENT,
    PAIR_PATTERN,
    REST_PATTERN,
    SHORTHAND_PROP_PATTERN,
    TS_PARAMETER_TYPES,
    VARIABLE_DECLARATION_TYPES,
)
from extraction.syntax import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)


@dataclass
class PropDeclaration:
    """A destructured prop field: ``name`` as passed, ``binding`` as used locally."""

    name: str
    binding: Optional[str]


@dataclass
class StateDeclaration:
    """A state hook call. ``binding`` is None for ``[, setX]`` patterns."""

    name: str
    binding: Optional[str]
    setter_binding: Optional[str]
    line: int


@dataclass
class EffectDeclaration:
    callback: Optional[SyntaxNode]
    dependency_list: Optional[SyntaxNode]
    line: int


@dataclass
class ComponentSkeleton:
    """A recognized component before id allocation."""

    name: str
    function: SyntaxNode
    line: int
    props: List[PropDeclaration] = field(default_factory=list)
    states: List[StateDeclaration] = field(default_factory=list)
    effects: List[EffectDeclaration] = field(default_factory=list)
    is_default_export: bool = False
    returns_markup: bool = False


@dataclass
class ImportBinding:
    """``import {imported as local} from source``; default imports use ``"default"``."""

    local_name: str
    imported_name: str
    source: str


@dataclass
class FileSkeleton:
    """Recognition result for one source file."""

    path: str
    tree: Optional[Tree] = None
    components: List[ComponentSkeleton] = field(default_factory=list)
    imports: Dict[str, ImportBinding] = field(default_factory=dict)


@dataclass
class _Candidate:
    name: Optional[str]
    function: SyntaxNode
    exported_default: bool = False


def _is_nested_function(node: SyntaxNode) -> bool:
    return node.kind is NodeKind.FUNCTION


def _unwrap_component_function(
    value: Optional[SyntaxNode],
    config: ExtractorConfig,
) -> Optional[SyntaxNode]:
    """Return the function behind ``value``, looking through memo/forwardRef."""
    while value is not None:
        value = value.unwrap()
        if value.kind is NodeKind.FUNCTION:
            return value
        if value.kind is NodeKind.CALL and value.callee_name() in config.component_wrappers:
            args = value.call_arguments()
            value = args[0] if args else None
            continue
        return None
    return None


def _unwrap_wrapped_identifier(
    value: SyntaxNode,
    config: ExtractorConfig,
) -> Optional[str]:
    """Name behind ``App`` or ``memo(App)`` in ``export default ...``."""
    current: Optional[SyntaxNode] = value.unwrap()
    while current is not None and current.kind is NodeKind.CALL:
        if current.callee_name() not in config.component_wrappers:
            return None
        args = current.call_arguments()
        current = args[0].unwrap() if args else None
    if current is not None and current.kind is NodeKind.IDENTIFIER:
        return current.text
    return None


def _candidates_from_declaration(
    declaration: SyntaxNode,
    config: ExtractorConfig,
    exported_default: bool = False,
) -> List[_Candidate]:
    """Collect function candidates from a declaration statement."""
    if declaration.kind is NodeKind.FUNCTION:
        return [_Candidate(declaration.function_name(), declaration, exported_default)]

    candidates = []
    if declaration.type in VARIABLE_DECLARATION_TYPES:
        for declarator in declaration.named_children:
            name_node = declarator.field("name")
            if name_node is None or name_node.kind is not NodeKind.IDENTIFIER:
                continue
            function = _unwrap_component_function(declarator.field("value"), config)
            if function is not None:
                candidates.append(_Candidate(name_node.text, function, exported_default))
    return candidates


def _parse_import(statement: SyntaxNode) -> List[ImportBinding]:
    source_node = statement.field("source")
    if source_node is None:
        return []
    source = source_node.text.strip("'\"`")
    clause = statement.first_child_of_type("import_clause")
    if clause is None:
        return []

    bindings = []
    for part in clause.named_children:
        if part.type == "identifier":
            bindings.append(ImportBinding(part.text, "default", source))
        elif part.type == "named_imports":
            for spec in part.named_children:
                if spec.type != "import_specifier":
                    continue
                name = spec.field("name")
                alias = spec.field("alias")
                if name is None:
                    continue
                local = alias.text if alias is not None else name.text
                bindings.append(ImportBinding(local, name.text, source))
    return bindings


def _first_parameter_pattern(function: SyntaxNode) -> Optional[SyntaxNode]:
    params = function.parameters()
    if not params:
        return None
    param = params[0]
    if param.type in TS_PARAMETER_TYPES:
        pattern = param.field("pattern")
        if pattern is None:
            return None
        param = pattern
    if param.type == "assignment_pattern":
        left = param.field("left")
        if left is None:
            return None
        param = left
    return param


def extract_props(function: SyntaxNode) -> List[PropDeclaration]:
    """Destructured fields of the first parameter, in declaration order.

    A plain ``props`` parameter yields nothing; whole-object access is not
    modeled field by field.
    """
    pattern = _first_parameter_pattern(function)
    if pattern is None or pattern.type != "object_pattern":
        return []

    props = []
    for member in pattern.named_children:
        if member.type == SHORTHAND_PROP_PATTERN:
            props.append(PropDeclaration(member.text, member.text))
        elif member.type == ASSIGNMENT_PROP_PATTERN:
            left = member.field("left")
            if left is not None and left.kind is not NodeKind.DESTRUCTURING_PATTERN:
                props.append(PropDeclaration(left.text, left.text))
        elif member.type == PAIR_PATTERN:
            key = member.field("key")
            if key is None or key.type == "computed_property_name":
                continue
            value = member.field("value")
            binding = None
            if value is not None:
                if value.type == "assignment_pattern":
                    value = value.field("left")
                if value is not None and value.kind is NodeKind.IDENTIFIER:
                    binding = value.text
            props.append(PropDeclaration(key.text.strip("'\""), binding))
        elif member.type == REST_PATTERN:
            continue
    return props


def _array_pattern_slots(pattern: SyntaxNode) -> Dict[int, SyntaxNode]:
    """Elements of an array pattern keyed by position; holes are absent."""
    slots: Dict[int, SyntaxNode] = {}
    index = 0
    for child in pattern.children:
        if child.type == ",":
            index += 1
        elif child.is_named and child.type != "comment":
            slots[index] = child
    return slots


def _identifier_text(node: Optional[SyntaxNode]) -> Optional[str]:
    if node is None or node.kind is not NodeKind.IDENTIFIER:
        return None
    return node.text


def _state_display_name(setter: str) -> str:
    """``setPicked`` -> ``picked``; other setter names are used as-is."""
    if setter.startswith("set") and setter[3:4].isupper():
        return setter[3].lower() + setter[4:]
    return setter


def _state_from_declarator(
    declarator: SyntaxNode,
    config: ExtractorConfig,
) -> Optional[StateDeclaration]:
    pattern = declarator.field("name")
    value = declarator.field("value")
    if pattern is None or value is None or pattern.type != "array_pattern":
        return None
    value = value.unwrap()
    if value.kind is not NodeKind.CALL or value.callee_name() not in config.state_hooks:
        return None

    slots = _array_pattern_slots(pattern)
    binding = _identifier_text(slots.get(0))
    setter = _identifier_text(slots.get(1))
    if binding is None and setter is None:
        return None
    # [, setX] still declares a state cell; it is named after its setter
    name = binding if binding is not None else _state_display_name(setter)
    return StateDeclaration(name, binding, setter, declarator.line)


def _effect_from_call(call: SyntaxNode) -> Optional[EffectDeclaration]:
    args = call.call_arguments()
    if not args:
        return None
    callback = args[0].unwrap()
    if callback.kind is not NodeKind.FUNCTION:
        callback = None
    dependency_list = None
    if len(args) > 1 and args[1].unwrap().type == "array":
        dependency_list = args[1].unwrap()
    return EffectDeclaration(callback, dependency_list, call.line)


def extract_hooks(
    function: SyntaxNode,
    config: ExtractorConfig,
) -> Tuple[List[StateDeclaration], List[EffectDeclaration]]:
    """Return ``(states, effects)`` declared directly in a component body.

    Nested functions are not searched; hooks may only be called at the
    component's own level.
    """
    states: List[StateDeclaration] = []
    effects: List[EffectDeclaration] = []
    body = function.body()
    if body is None:
        return states, effects

    for node in body.walk(stop_at=_is_nested_function):
        if node is not body and node.kind is NodeKind.FUNCTION:
            continue
        if node.type == "variable_declarator":
            state = _state_from_declarator(node, config)
            if state is not None:
                states.append(state)
        elif node.kind is NodeKind.CALL and node.callee_name() in config.effect_hooks:
            effect = _effect_from_call(node)
            if effect is not None:
                effects.append(effect)
    return states, effects


def is_component(name: Optional[str], function: SyntaxNode) -> bool:
    """Markup-returning functions are components; otherwise fall back to a
    capitalized name."""
    if function.contains_markup():
        return True
    return bool(name) and name[0].isupper()


def recognize_components(
    tree: Tree,
    path: str,
    config: ExtractorConfig,
) -> FileSkeleton:
    """Recognize components, props, states and effects in one parsed file."""
    root = SyntaxNode(tree.root_node)
    skeleton = FileSkeleton(path=path, tree=tree)
    candidates: List[_Candidate] = []
    default_export_name: Optional[str] = None

    for statement in root.named_children:
        if statement.type == IMPORT_STATEMENT:
            for binding in _parse_import(statement):
                skeleton.imports[binding.local_name] = binding
        elif statement.type == EXPORT_STATEMENT:
            is_default = statement.has_token("default")
            declaration = statement.field("declaration")
            value = statement.field("value")
            if declaration is not None:
                candidates.extend(_candidates_from_declaration(declaration, config, is_default))
            elif value is not None and is_default:
                exported = _unwrap_wrapped_identifier(value, config)
                if exported is not None:
                    default_export_name = exported
                    continue
                function = _unwrap_component_function(value, config)
                if function is not None:
                    candidates.append(_Candidate(function.function_name(), function, True))
        else:
            candidates.extend(_candidates_from_declaration(statement, config))

    for candidate in candidates:
        name = candidate.name
        if not name and candidate.exported_default:
            name = posixpath.splitext(posixpath.basename(path))[0]
        if not name or not is_component(name, candidate.function):
            continue

        states, effects = extract_hooks(candidate.function, config)
        component = ComponentSkeleton(
            name=name,
            function=candidate.function,
            line=candidate.function.line,
            props=extract_props(candidate.function),
            states=states,
            effects=effects,
            is_default_export=candidate.exported_default or name == default_export_name,
            returns_markup=candidate.function.contains_markup(),
        )
        skeleton.components.append(component)
        logger.debug(
            "Recognized component %s at %s:%d (%d props, %d states, %d effects)",
            name,
            path,
            component.line,
            len(component.props),
            len(component.states),
            len(component.effects),
        )

    logger.debug("Recognized %d components in %s", len(skeleton.components), path)
    return skeleton
