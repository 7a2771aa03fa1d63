"""
Reference resolution inside component bodies.

Connects effect dependency lists and effect bodies to in-scope state/prop
ids, and resolves every place a component refers to another component:
markup nesting becomes a child edge with prop bindings; any other mention
(a value, an alias, an argument) becomes a false-child edge.

Classification policy: only a markup element whose tag names a known
component counts as direct nesting. ``createElement(X, ...)`` counts as
nesting only when ``ExtractorConfig.create_element_is_child`` is set.
"""

import logging
import posixpath
from typing import Dict, List, Optional, Set, Tuple

from core.config_loader import ExtractorConfig
from core.id_contract import is_setter_id
from extraction.config import (
    ASSIGNMENT_PATTERN_TYPES,
    BINDING_IDENTIFIER_TYPES,
    CREATE_ELEMENT_NAMES,
    FUNCTION_DECLARATION_TYPES,
    IMPORT_RESOLUTION_SUFFIXES,
    PAIR_PATTERN,
    REST_PATTERN,
    TS_PARAMETER_TYPES,
    VARIABLE_DECLARATOR,
)
from extraction.models import ComponentEntity, Diagnostic, EffectEntity
from extraction.recognizer import (
    ComponentSkeleton,
    EffectDeclaration,
    ImportBinding,
)
from extraction.syntax import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)


class ComponentScope:
    """Local binding names of one component mapped to entity ids.

    Props are bound first and states second, so a state declared in the
    body shadows a prop binding of the same name.
    """

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._callables: Dict[str, str] = {}

    @classmethod
    def for_component(
        cls,
        entity: ComponentEntity,
        skeleton: ComponentSkeleton,
    ) -> "ComponentScope":
        scope = cls()
        for prop, declaration in zip(entity.props, skeleton.props):
            if declaration.binding:
                scope._values[declaration.binding] = prop.id
                scope._callables[declaration.binding] = prop.id
        for state, declaration in zip(entity.states, skeleton.states):
            if declaration.binding:
                scope._values[declaration.binding] = state.id
                scope._callables.pop(declaration.binding, None)
            if declaration.setter_binding:
                scope._values[declaration.setter_binding] = state.setter_id
                scope._callables[declaration.setter_binding] = state.setter_id
        return scope

    def lookup(self, name: str) -> Optional[str]:
        """State, prop or setter id bound to ``name``."""
        return self._values.get(name)

    def lookup_readable(self, name: str) -> Optional[str]:
        """State or prop id bound to ``name``; setters are not readable values."""
        entity_id = self._values.get(name)
        if entity_id is None or is_setter_id(entity_id):
            return None
        return entity_id

    def lookup_callable(self, name: str) -> Optional[str]:
        """Setter id or prop-callback id invoked as ``name(...)``."""
        return self._callables.get(name)


def pattern_names(pattern: Optional[SyntaxNode]) -> List[str]:
    """Names bound by a parameter or declarator pattern.

    ``{a: b = 1, ...rest}`` binds ``b`` and ``rest``; keys and default
    values bind nothing.
    """
    names: List[str] = []
    stack = [pattern]
    while stack:
        node = stack.pop()
        if node is None:
            continue
        if node.type in BINDING_IDENTIFIER_TYPES:
            names.append(node.text)
        elif node.kind is NodeKind.DESTRUCTURING_PATTERN or node.type == REST_PATTERN:
            stack.extend(node.named_children)
        elif node.type == PAIR_PATTERN:
            stack.append(node.field("value"))
        elif node.type in ASSIGNMENT_PATTERN_TYPES:
            stack.append(node.field("left"))
        elif node.type in TS_PARAMETER_TYPES:
            stack.append(node.field("pattern"))
    return names


class LexicalBindings:
    """Names each function inside one component binds locally.

    Used to tell whether an identifier refers to a component-level
    binding (or a project component) or to a nearer local one.
    Declarations are attributed to their nearest enclosing function;
    block scopes inside a function are not told apart.
    """

    def __init__(self, component_function: SyntaxNode):
        self.component_function = component_function
        self._cache: Dict[int, Set[str]] = {}

    def bound_names(self, function: SyntaxNode) -> Set[str]:
        cached = self._cache.get(function.node_id)
        if cached is not None:
            return cached

        names: Set[str] = set()
        for param in function.parameters():
            names.update(pattern_names(param))
        body = function.body()
        if body is not None and body.kind is not NodeKind.FUNCTION:
            for node in body.walk(stop_at=_is_function):
                if node.kind is NodeKind.FUNCTION:
                    if node.type in FUNCTION_DECLARATION_TYPES:
                        names.update(pattern_names(node.field("name")))
                elif node.type == VARIABLE_DECLARATOR:
                    names.update(pattern_names(node.field("name")))
                elif node.type == "class_declaration":
                    names.update(pattern_names(node.field("name")))
                elif node.type == "for_in_statement" and node.field("kind") is not None:
                    names.update(pattern_names(node.field("left")))
                elif node.type == "catch_clause":
                    names.update(pattern_names(node.field("parameter")))

        self._cache[function.node_id] = names
        return names

    def is_shadowed(self, node: SyntaxNode, name: str, include_component: bool = True) -> bool:
        """True if a function enclosing ``node`` rebinds ``name``.

        With ``include_component`` False only functions nested inside the
        component count; the component's own bindings are what
        ``ComponentScope`` models.
        """
        current = node.parent
        while current is not None:
            if current.kind is NodeKind.FUNCTION:
                if current == self.component_function:
                    return include_component and name in self.bound_names(current)
                if name in self.bound_names(current):
                    return True
            current = current.parent
        return False


def _is_function(node: SyntaxNode) -> bool:
    return node.kind is NodeKind.FUNCTION


def invoked_targets(
    function: SyntaxNode,
    scope: ComponentScope,
    bindings: Optional[LexicalBindings] = None,
) -> List[str]:
    """Setter/prop-callback ids called anywhere inside ``function``.

    Calls through a name rebound by a nested function or declaration are
    skipped when ``bindings`` is given.
    """
    targets: List[str] = []
    for node in function.walk():
        if node.kind is not NodeKind.CALL:
            continue
        callee = node.callee()
        if callee is None or callee.kind is not NodeKind.IDENTIFIER:
            continue
        target = scope.lookup_callable(callee.text)
        if target is None or target in targets:
            continue
        if bindings is not None and bindings.is_shadowed(callee, callee.text, include_component=False):
            continue
        targets.append(target)
    return targets


class ComponentRegistry:
    """Project-wide name table used to resolve component references.

    Ambiguity policy for a name used in file F:
    1. a component declared in F;
    2. the component imported into F (relative specifiers are matched to
       declaring files, default imports to the file's default export);
    3. the only project-wide match;
    4. otherwise the most recently declared match, reported as ambiguous.
    """

    def __init__(self):
        self._by_name: Dict[str, List[ComponentEntity]] = {}
        self._by_file: Dict[str, Dict[str, ComponentEntity]] = {}
        self._default_by_file: Dict[str, ComponentEntity] = {}
        self._imports: Dict[str, Dict[str, ImportBinding]] = {}

    def register_file(self, path: str, imports: Dict[str, ImportBinding]) -> None:
        self._imports[path] = dict(imports)
        self._by_file.setdefault(path, {})

    def register(self, component: ComponentEntity, path: str, is_default: bool = False) -> None:
        self._by_name.setdefault(component.name, []).append(component)
        self._by_file.setdefault(path, {})[component.name] = component
        if is_default:
            self._default_by_file[path] = component

    def _module_paths(self, specifier: str, from_path: str) -> List[str]:
        if not specifier.startswith("."):
            return []
        base = posixpath.normpath(posixpath.join(posixpath.dirname(from_path), specifier))
        candidates = []
        for suffix in IMPORT_RESOLUTION_SUFFIXES:
            candidates.append(base + suffix)
        for suffix in IMPORT_RESOLUTION_SUFFIXES[1:]:
            candidates.append(f"{base}/index{suffix}")
        return [c for c in candidates if c in self._by_file]

    def _resolve_import(self, binding: ImportBinding, from_path: str) -> Optional[ComponentEntity]:
        for module_path in self._module_paths(binding.source, from_path):
            if binding.imported_name == "default":
                found = self._default_by_file.get(module_path)
            else:
                found = self._by_file[module_path].get(binding.imported_name)
            if found is not None:
                return found
        return None

    def resolve(self, name: str, from_path: str) -> Tuple[Optional[ComponentEntity], bool]:
        """Resolve ``name`` as seen from ``from_path``.

        Returns ``(component, ambiguous)``; ``component`` is None when the
        name is not a known component.
        """
        local = self._by_file.get(from_path, {}).get(name)
        if local is not None:
            return local, False

        lookup_name = name
        binding = self._imports.get(from_path, {}).get(name)
        if binding is not None:
            imported = self._resolve_import(binding, from_path)
            if imported is not None:
                return imported, False
            if binding.imported_name != "default":
                lookup_name = binding.imported_name

        matches = self._by_name.get(lookup_name, [])
        if not matches:
            return None, False
        if len(matches) == 1:
            return matches[0], False
        return matches[-1], True


def _is_component_tag(name_node: Optional[SyntaxNode]) -> bool:
    return (
        name_node is not None
        and name_node.kind is NodeKind.IDENTIFIER
        and name_node.text[:1].isupper()
    )


class ReferenceResolver:
    """Resolves effects and component references for registered components."""

    def __init__(self, registry: ComponentRegistry, config: ExtractorConfig):
        self.registry = registry
        self.config = config
        self.diagnostics: List[Diagnostic] = []
        self._reported: Set[Tuple[str, str]] = set()

    def resolve_component(
        self,
        entity: ComponentEntity,
        skeleton: ComponentSkeleton,
        path: str,
    ) -> None:
        scope = ComponentScope.for_component(entity, skeleton)
        bindings = LexicalBindings(skeleton.function)
        for effect, declaration in zip(entity.effects, skeleton.effects):
            self.resolve_effect(effect, declaration, scope, bindings)
        self.resolve_call_sites(entity, skeleton, scope, path, bindings)

    # -- effects -------------------------------------------------------------

    def resolve_effect(
        self,
        effect: EffectEntity,
        declaration: EffectDeclaration,
        scope: ComponentScope,
        bindings: Optional[LexicalBindings] = None,
    ) -> None:
        if declaration.dependency_list is not None:
            for element in declaration.dependency_list.named_children:
                identifier = element.root_identifier()
                if identifier is None:
                    continue
                dependency = scope.lookup_readable(identifier.text)
                if dependency is None:
                    logger.debug(
                        "Dropping unresolved dependency '%s' of %s", identifier.text, effect.id
                    )
                    continue
                effect.add_dependency(dependency)

        if declaration.callback is not None:
            body = declaration.callback.body()
            if body is not None:
                for target in invoked_targets(body, scope, bindings):
                    effect.add_handling_target(target)

    # -- component references ------------------------------------------------

    def _lookup_component(self, name: str, path: str) -> Optional[ComponentEntity]:
        component, ambiguous = self.registry.resolve(name, path)
        if ambiguous and (path, name) not in self._reported:
            self._reported.add((path, name))
            message = f"'{name}' matches several components; bound to {component.id}"
            logger.info("Ambiguous binding in %s: %s", path, message)
            self.diagnostics.append(Diagnostic("ambiguous_binding", path, message))
        return component

    def _lookup_in_scope(
        self,
        name_node: Optional[SyntaxNode],
        path: str,
        bindings: LexicalBindings,
    ) -> Optional[ComponentEntity]:
        """Component a capitalized reference names, unless a local binding hides it."""
        if not _is_component_tag(name_node):
            return None
        if bindings.is_shadowed(name_node, name_node.text):
            logger.debug("'%s' in %s is a local binding, not a component", name_node.text, path)
            return None
        return self._lookup_component(name_node.text, path)

    def _bound_values(
        self,
        value: Optional[SyntaxNode],
        scope: ComponentScope,
        bindings: LexicalBindings,
    ) -> List[str]:
        """Ids a prop value expression refers to."""
        if value is None:
            return []
        expression = value.expression_value()
        if expression is None:
            return []
        if expression.kind is NodeKind.FUNCTION:
            body = expression.body()
            return invoked_targets(body, scope, bindings) if body is not None else []
        identifier = expression.root_identifier()
        if identifier is None:
            return []
        if bindings.is_shadowed(identifier, identifier.text, include_component=False):
            return []
        entity_id = scope.lookup(identifier.text)
        return [entity_id] if entity_id is not None else []

    def _bind_props(
        self,
        child: ComponentEntity,
        arguments: List[Tuple[str, Optional[SyntaxNode]]],
        scope: ComponentScope,
        bindings: LexicalBindings,
    ) -> None:
        for name, value in arguments:
            prop = child.prop_by_name(name)
            if prop is None:
                continue
            for entity_id in self._bound_values(value, scope, bindings):
                prop.add_reference(entity_id)

    def _object_arguments(self, node: Optional[SyntaxNode]) -> List[Tuple[str, Optional[SyntaxNode]]]:
        if node is None or node.unwrap().type != "object":
            return []
        arguments = []
        for member in node.unwrap().named_children:
            if member.type == "pair":
                key = member.field("key")
                if key is not None:
                    arguments.append((key.text.strip("'\""), member.field("value")))
            elif member.type == "shorthand_property_identifier":
                arguments.append((member.text, member))
        return arguments

    def resolve_call_sites(
        self,
        entity: ComponentEntity,
        skeleton: ComponentSkeleton,
        scope: ComponentScope,
        path: str,
        bindings: Optional[LexicalBindings] = None,
    ) -> None:
        body = skeleton.function.body()
        if body is None:
            return
        if bindings is None:
            bindings = LexicalBindings(skeleton.function)

        stack: List[SyntaxNode] = [body]
        while stack:
            node = stack.pop()

            if node.kind is NodeKind.MARKUP_ELEMENT:
                name_node = node.markup_name_node()
                if _is_component_tag(name_node):
                    child = self._lookup_in_scope(name_node, path, bindings)
                    if child is not None:
                        entity.add_child(child.id)
                        self._bind_props(child, node.markup_attributes(), scope, bindings)
                elif name_node is not None:
                    stack.append(name_node)
                pending = [value for _, value in node.markup_attributes() if value is not None]
                pending.extend(node.markup_body())
                stack.extend(reversed(pending))
                continue

            if node.kind is NodeKind.CALL and node.callee_name() in CREATE_ELEMENT_NAMES:
                args = node.call_arguments()
                target = args[0].unwrap() if args else None
                child = self._lookup_in_scope(target, path, bindings)
                if child is not None:
                    if self.config.create_element_is_child:
                        entity.add_child(child.id)
                        props = self._object_arguments(args[1] if len(args) > 1 else None)
                        self._bind_props(child, props, scope, bindings)
                    elif child.id != entity.id:
                        entity.add_false_child(child.id)
                    stack.extend(reversed(args[1:]))
                    continue

            if node.kind is NodeKind.IDENTIFIER:
                if node.text[:1].isupper() and not node.is_declaration_name():
                    referenced = self._lookup_in_scope(node, path, bindings)
                    if referenced is not None and referenced.id != entity.id:
                        entity.add_false_child(referenced.id)
                continue

            stack.extend(reversed(node.named_children))
