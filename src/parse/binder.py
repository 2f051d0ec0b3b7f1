"""Bind a tree-sitter syntax tree into an immutable per-module symbol table.

The binder records what the analyzer needs to resolve decorator references:

- classes (anywhere outside function bodies), their bases and members
- module-level functions and assignments (the module acts as a type)
- string constants bound at module or class level
- every decorator call whose callee matches one of the configured names

Members are collected from direct statements of a class body (including
statements nested in ``if``/``try``/``with`` blocks) plus ``self.<name>``
assignments inside its methods.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from parse.ast_imports import ImportBinding, extract_import_bindings
from parse.treesitter_tree import (
    dotted_name,
    literal_string_value,
    make_span,
    named_children,
    node_text,
    parse_source,
    unwrap_parentheses,
    walk_scope,
)
from semantic.symbols import (
    Declaration,
    FieldSymbol,
    MemberSymbol,
    MethodSymbol,
    PropertySymbol,
    Span,
    TypeRef,
    TypeSymbol,
    annotation_head,
)

if TYPE_CHECKING:
    from tree_sitter import Node, Tree

logger = logging.getLogger(__name__)

DEFAULT_DECORATORS = ("case_source", "test_case_source")

# Statement children that hold further statements of the same scope.
_NESTED_BLOCK_TYPES = frozenset(
    {
        "block",
        "else_clause",
        "elif_clause",
        "except_clause",
        "except_group_clause",
        "finally_clause",
    }
)

_VALUE_TYPES = {
    "list": "list",
    "list_comprehension": "list",
    "tuple": "tuple",
    "set": "set",
    "set_comprehension": "set",
    "dictionary": "dict",
    "dictionary_comprehension": "dict",
    "generator_expression": "Generator",
    "string": "str",
    "concatenated_string": "str",
    "integer": "int",
    "float": "float",
    "true": "bool",
    "false": "bool",
    "none": "None",
    "lambda": "function",
}

# Builtin functions whose result type is worth knowing.
_CALL_RESULT_TYPES = {
    "sorted": "list",
    "iter": "Iterator",
    "len": "int",
    "repr": "str",
    "format": "str",
}

_PROPERTY_DECORATORS = frozenset({"property", "cached_property"})
_PROPERTY_ACCESSORS = frozenset({"setter", "getter", "deleter"})


@dataclass(frozen=True)
class Argument:
    """One argument of a decorator call."""

    node: Node
    keyword: str | None = None
    is_unpacked: bool = False


@dataclass(frozen=True)
class DecoratorUsage:
    """One occurrence of a case-source decorator on a function."""

    node: Node
    callee: str
    span: Span
    arguments: tuple[Argument, ...]
    enclosing_type: TypeSymbol
    function_name: str

    @property
    def path(self) -> str:
        return self.span.path


@dataclass(frozen=True)
class BoundModule:
    path: str
    module: str
    module_type: TypeSymbol
    types: Mapping[str, TypeSymbol]
    constants: Mapping[str, str]
    imports: Mapping[str, ImportBinding]
    star_imports: tuple[str, ...]
    usages: tuple[DecoratorUsage, ...]
    tree: Tree


@dataclass
class _TypeDraft:
    name: str
    qualified_name: str
    declarations: list[Declaration] = field(default_factory=list)


@dataclass
class _PendingUsage:
    node: Node
    callee: str
    arguments: tuple[Argument, ...]
    scope: str
    function_name: str


def _decorator_expression(decorator: Node) -> Node | None:
    children = named_children(decorator)
    return children[0] if children else None


def _decorator_name(decorator: Node) -> str | None:
    """Dotted name of a decorator, ignoring call arguments."""
    expression = _decorator_expression(decorator)
    if expression is None:
        return None
    if expression.type == "call":
        expression = expression.child_by_field_name("function")
    return dotted_name(expression)


def _last_segment(name: str) -> str:
    return name.rsplit(".", 1)[-1]


def _infer_value_type(value: Node | None) -> TypeRef:
    if value is None:
        return TypeRef.unknown()
    value = unwrap_parentheses(value)
    if value.type in _VALUE_TYPES:
        return TypeRef.named(_VALUE_TYPES[value.type])
    if value.type == "call":
        callee = dotted_name(value.child_by_field_name("function"))
        if callee is None:
            return TypeRef.unknown()
        return TypeRef.named(_CALL_RESULT_TYPES.get(callee, callee))
    return TypeRef.unknown()


def _count_parameters(
    parameters: Node | None, drop_receiver: bool
) -> tuple[int, int, str | None]:
    """Return (declared, required, receiver name) for a parameter list.

    Variadic parameters are not counted.
    """
    regular: list[tuple[str, bool]] = []
    if parameters is not None:
        for child in named_children(parameters):
            if child.type == "identifier":
                regular.append((node_text(child), False))
            elif child.type == "typed_parameter":
                inner = named_children(child)
                if inner and inner[0].type == "identifier":
                    regular.append((node_text(inner[0]), False))
            elif child.type in ("default_parameter", "typed_default_parameter"):
                regular.append((node_text(child.child_by_field_name("name")), True))

    receiver = None
    if drop_receiver and regular:
        receiver = regular.pop(0)[0]

    required = sum(1 for _, has_default in regular if not has_default)
    return len(regular), required, receiver


def _collect_arguments(argument_list: Node | None) -> tuple[Argument, ...]:
    if argument_list is None:
        return ()
    if argument_list.type != "argument_list":
        # f(x for x in xs) passes the generator expression itself
        return (Argument(node=argument_list),)

    arguments: list[Argument] = []
    for child in named_children(argument_list):
        if child.type == "keyword_argument":
            name = child.child_by_field_name("name")
            value = child.child_by_field_name("value")
            if value is None:
                continue
            arguments.append(Argument(node=value, keyword=node_text(name)))
        elif child.type in ("list_splat", "dictionary_splat"):
            arguments.append(Argument(node=child, is_unpacked=True))
        else:
            arguments.append(Argument(node=child))
    return tuple(arguments)


class _ModuleBinder:
    def __init__(
        self,
        relative_path: str,
        module_name: str,
        decorators: frozenset[str],
    ) -> None:
        self.relative_path = relative_path
        self.module_name = module_name
        self.decorators = decorators
        self.drafts: dict[str, _TypeDraft] = {}
        self.constants: dict[str, str] = {}
        self.pending: list[_PendingUsage] = []

    def bind(
        self,
        tree: Tree,
        imports: Mapping[str, ImportBinding],
        star_imports: tuple[str, ...],
    ) -> BoundModule:
        root = tree.root_node
        members = self._bind_statements(root, self.module_name, in_class=False)

        module_type = TypeSymbol(
            name=_last_segment(self.module_name),
            qualified_name=self.module_name,
            module=self.module_name,
            kind="module",
            declarations=(
                Declaration(span=make_span(self.relative_path, root), members=tuple(members)),
            ),
        )
        types = {
            qualified_name: TypeSymbol(
                name=draft.name,
                qualified_name=qualified_name,
                module=self.module_name,
                kind="class",
                declarations=tuple(draft.declarations),
            )
            for qualified_name, draft in self.drafts.items()
        }

        usages = []
        for pending in self.pending:
            enclosing = types.get(pending.scope, module_type)
            usages.append(
                DecoratorUsage(
                    node=pending.node,
                    callee=pending.callee,
                    span=make_span(self.relative_path, pending.node),
                    arguments=pending.arguments,
                    enclosing_type=enclosing,
                    function_name=pending.function_name,
                )
            )

        return BoundModule(
            path=self.relative_path,
            module=self.module_name,
            module_type=module_type,
            types=types,
            constants=dict(self.constants),
            imports=dict(imports),
            star_imports=star_imports,
            usages=tuple(usages),
            tree=tree,
        )

    def _bind_statements(
        self,
        container: Node,
        scope: str,
        in_class: bool,
        is_dataclass: bool = False,
    ) -> list[MemberSymbol]:
        members: list[MemberSymbol] = []
        instance_fields: list[FieldSymbol] = []

        for statement in named_children(container):
            kind = statement.type
            if kind == "expression_statement":
                for child in named_children(statement):
                    if child.type == "assignment":
                        members.extend(
                            self._bind_assignment(child, scope, in_class, is_dataclass)
                        )
            elif kind == "function_definition":
                member, fields = self._bind_function(statement, (), scope, in_class)
                members.append(member)
                instance_fields.extend(fields)
            elif kind == "class_definition":
                self._bind_class(statement, (), scope)
            elif kind == "decorated_definition":
                decorators = tuple(
                    child for child in named_children(statement) if child.type == "decorator"
                )
                definition = statement.child_by_field_name("definition")
                if definition is None:
                    continue
                if definition.type == "function_definition":
                    member, fields = self._bind_function(
                        definition, decorators, scope, in_class
                    )
                    members.append(member)
                    instance_fields.extend(fields)
                    self._record_usages(decorators, scope, member.name)
                elif definition.type == "class_definition":
                    self._bind_class(definition, decorators, scope)
            elif kind == "block":
                members.extend(self._bind_statements(statement, scope, in_class, is_dataclass))
            else:
                for child in named_children(statement):
                    if child.type in _NESTED_BLOCK_TYPES:
                        members.extend(
                            self._bind_statements(child, scope, in_class, is_dataclass)
                        )

        known = {member.name for member in members}
        for instance_field in instance_fields:
            if instance_field.name not in known:
                known.add(instance_field.name)
                members.append(instance_field)
        return members

    def _bind_assignment(
        self,
        node: Node,
        scope: str,
        in_class: bool,
        is_dataclass: bool,
    ) -> list[FieldSymbol]:
        annotation = node.child_by_field_name("type")
        value = node.child_by_field_name("right")
        targets = [node.child_by_field_name("left")]
        # a = b = value
        while value is not None and value.type == "assignment":
            targets.append(value.child_by_field_name("left"))
            value = value.child_by_field_name("right")

        if annotation is not None:
            annotation_text = node_text(annotation)
            type_ref = TypeRef.from_annotation(annotation_text)
            is_class_var = annotation_head(annotation_text) == "ClassVar"
        else:
            type_ref = _infer_value_type(value)
            is_class_var = False

        if not in_class or is_class_var:
            is_static = True
        elif annotation is not None and (value is None or is_dataclass):
            is_static = False
        else:
            is_static = True

        constant = literal_string_value(value) if value is not None else None

        fields: list[FieldSymbol] = []
        for target in targets:
            if target is None:
                continue
            if target.type == "identifier":
                names = [(target, type_ref)]
            elif target.type in ("pattern_list", "tuple_pattern", "list_pattern"):
                names = [
                    (child, TypeRef.unknown())
                    for child in named_children(target)
                    if child.type == "identifier"
                ]
            else:
                continue

            for name_node, name_type in names:
                name = node_text(name_node)
                fields.append(
                    FieldSymbol(
                        name=name,
                        owner=scope,
                        span=make_span(self.relative_path, name_node),
                        is_static=is_static,
                        type=name_type,
                        has_default=value is not None,
                    )
                )
                if constant is not None and name_type is type_ref:
                    self.constants[f"{scope}.{name}"] = constant
        return fields

    def _bind_function(
        self,
        node: Node,
        decorators: tuple[Node, ...],
        scope: str,
        in_class: bool,
    ) -> tuple[MemberSymbol, list[FieldSymbol]]:
        name = node_text(node.child_by_field_name("name"))
        decorator_names = tuple(
            decorator_name
            for decorator_name in (_decorator_name(decorator) for decorator in decorators)
            if decorator_name is not None
        )
        short_names = {_last_segment(decorator_name) for decorator_name in decorator_names}
        is_property = bool(short_names & _PROPERTY_DECORATORS) or any(
            "." in decorator_name and _last_segment(decorator_name) in _PROPERTY_ACCESSORS
            for decorator_name in decorator_names
        )
        is_static_method = "staticmethod" in short_names
        is_class_method = "classmethod" in short_names
        is_async = any(child.type == "async" for child in node.children)

        parameter_count, required_count, receiver = _count_parameters(
            node.child_by_field_name("parameters"),
            drop_receiver=in_class and not is_static_method,
        )
        span = make_span(self.relative_path, node.child_by_field_name("name") or node)
        return_type = self._return_type(node, is_async)

        symbol: MemberSymbol
        if in_class and is_property:
            symbol = PropertySymbol(
                name=name,
                owner=scope,
                span=span,
                type=return_type,
                is_static=is_class_method,
            )
        else:
            symbol = MethodSymbol(
                name=name,
                owner=scope,
                span=span,
                is_static=not in_class or is_static_method or is_class_method,
                return_type=return_type,
                parameter_count=parameter_count,
                required_parameter_count=required_count,
            )

        fields: list[FieldSymbol] = []
        if in_class and receiver is not None and not is_class_method:
            fields = self._bind_instance_attributes(node, receiver, scope)
        return symbol, fields

    def _return_type(self, node: Node, is_async: bool) -> TypeRef:
        body = node.child_by_field_name("body")
        has_yield = body is not None and any(
            child.type == "yield" for child in walk_scope(body)
        )
        if is_async:
            return TypeRef.named("AsyncGenerator" if has_yield else "Coroutine")

        annotation = node.child_by_field_name("return_type")
        if annotation is not None:
            return TypeRef.from_annotation(node_text(annotation))
        if has_yield:
            return TypeRef.named("Generator")
        return TypeRef.unknown()

    def _bind_instance_attributes(
        self, node: Node, receiver: str, scope: str
    ) -> list[FieldSymbol]:
        body = node.child_by_field_name("body")
        if body is None:
            return []

        fields: list[FieldSymbol] = []
        seen: set[str] = set()
        for child in walk_scope(body):
            if child.type != "assignment":
                continue
            left = child.child_by_field_name("left")
            if left is None or left.type != "attribute":
                continue
            target = left.child_by_field_name("object")
            attribute = left.child_by_field_name("attribute")
            if target is None or attribute is None:
                continue
            if target.type != "identifier" or node_text(target) != receiver:
                continue

            name = node_text(attribute)
            if name in seen:
                continue
            seen.add(name)

            annotation = child.child_by_field_name("type")
            if annotation is not None:
                type_ref = TypeRef.from_annotation(node_text(annotation))
            else:
                type_ref = _infer_value_type(child.child_by_field_name("right"))
            fields.append(
                FieldSymbol(
                    name=name,
                    owner=scope,
                    span=make_span(self.relative_path, left),
                    is_static=False,
                    type=type_ref,
                )
            )
        return fields

    def _bind_class(self, node: Node, decorators: tuple[Node, ...], scope: str) -> None:
        name = node_text(node.child_by_field_name("name"))
        qualified_name = f"{scope}.{name}"

        bases: list[str] = []
        superclasses = node.child_by_field_name("superclasses")
        if superclasses is not None:
            for child in named_children(superclasses):
                if child.type == "keyword_argument":
                    continue
                if child.type in ("subscript", "generic_type"):
                    child = child.child_by_field_name("value") or named_children(child)[0]
                base = dotted_name(child)
                if base is not None:
                    bases.append(base)

        is_dataclass = any(
            _last_segment(decorator_name) == "dataclass"
            for decorator_name in (_decorator_name(decorator) for decorator in decorators)
            if decorator_name is not None
        )

        body = node.child_by_field_name("body")
        members = (
            self._bind_statements(body, qualified_name, in_class=True, is_dataclass=is_dataclass)
            if body is not None
            else []
        )

        draft = self.drafts.setdefault(qualified_name, _TypeDraft(name, qualified_name))
        draft.declarations.append(
            Declaration(
                span=make_span(self.relative_path, node),
                members=tuple(members),
                bases=tuple(bases),
                is_dataclass=is_dataclass,
            )
        )
        if len(draft.declarations) > 1:
            logger.debug(
                "%s declared %d times in %s",
                qualified_name,
                len(draft.declarations),
                self.relative_path,
            )

    def _record_usages(
        self, decorators: tuple[Node, ...], scope: str, function_name: str
    ) -> None:
        for decorator in decorators:
            expression = _decorator_expression(decorator)
            if expression is None or expression.type != "call":
                continue
            callee = dotted_name(expression.child_by_field_name("function"))
            if callee is None or _last_segment(callee) not in self.decorators:
                continue
            self.pending.append(
                _PendingUsage(
                    node=expression,
                    callee=callee,
                    arguments=_collect_arguments(expression.child_by_field_name("arguments")),
                    scope=scope,
                    function_name=function_name,
                )
            )


def bind_module(
    source_bytes: bytes,
    relative_path: str,
    module_name: str,
    decorators: tuple[str, ...] = DEFAULT_DECORATORS,
) -> BoundModule:
    """Parse and bind one module.

    Args:
        source_bytes: Raw file content.
        relative_path: Path relative to the project root, used in spans.
        module_name: Dotted module name.
        decorators: Decorator names (last dotted segment) to record usages for.

    Returns:
        The immutable bound module.
    """
    tree = parse_source(source_bytes)
    source = source_bytes.decode("utf-8", errors="replace")
    is_package = relative_path.endswith("__init__.py")
    imports, star_imports = extract_import_bindings(
        source, module_name, filename=relative_path, is_package=is_package
    )

    binder = _ModuleBinder(relative_path, module_name, frozenset(decorators))
    bound = binder.bind(tree, imports, tuple(star_imports))
    logger.debug(
        "bound %s: %d types, %d usages", module_name, len(bound.types), len(bound.usages)
    )
    return bound


__all__ = [
    "DEFAULT_DECORATORS",
    "Argument",
    "BoundModule",
    "DecoratorUsage",
    "bind_module",
]
