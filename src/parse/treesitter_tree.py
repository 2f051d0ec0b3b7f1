"""Tree-sitter parsing and node helpers shared by the binder and analyzer."""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_python import language as get_python_language

from semantic.symbols import Span

if TYPE_CHECKING:
    from collections.abc import Iterator

_PARSER: Parser | None = None

# Node types that open a new runtime scope; statements inside them are not
# members of the enclosing class or module.
SCOPE_NODE_TYPES = frozenset({"function_definition", "class_definition", "lambda"})

STRING_NODE_TYPES = frozenset({"string", "concatenated_string"})


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with Python language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_python_language())
        _PARSER = Parser(lang)

    return _PARSER


def parse_source(source_bytes: bytes) -> Tree:
    return _get_parser().parse(source_bytes)


def node_text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf8", errors="ignore")


def make_span(relative_path: str, node: Node) -> Span:
    return Span(
        path=relative_path,
        start_line=node.start_point[0] + 1,
        start_col=node.start_point[1] + 1,
        end_line=node.end_point[0] + 1,
        end_col=node.end_point[1] + 1,
    )


def named_children(node: Node) -> list[Node]:
    """Named children without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def unwrap_parentheses(node: Node) -> Node:
    while node.type == "parenthesized_expression":
        inner = named_children(node)
        if len(inner) != 1:
            break
        node = inner[0]
    return node


def is_string_literal(node: Node) -> bool:
    """True for a plain (non f-string) string literal, possibly concatenated."""
    node = unwrap_parentheses(node)
    if node.type not in STRING_NODE_TYPES:
        return False
    return not any(child.type == "interpolation" for child in walk(node))


def dotted_name(node: Node | None) -> str | None:
    """Return ``a.b.c`` for identifier/attribute chains, otherwise None."""
    if node is None:
        return None
    node = unwrap_parentheses(node)
    if node.type == "identifier":
        return node_text(node)
    if node.type == "attribute":
        base = dotted_name(node.child_by_field_name("object"))
        attribute = node.child_by_field_name("attribute")
        if base is None or attribute is None:
            return None
        return f"{base}.{node_text(attribute)}"
    return None


def literal_string_value(node: Node) -> str | None:
    """Evaluate string literals and `+` concatenations of string literals."""
    node = unwrap_parentheses(node)
    if node.type in STRING_NODE_TYPES:
        if not is_string_literal(node):
            return None
        try:
            value = ast.literal_eval(f"({node_text(node)})")
        except (ValueError, SyntaxError):
            return None
        return value if isinstance(value, str) else None

    if node.type == "binary_operator":
        operator = node.child_by_field_name("operator")
        if operator is None or node_text(operator) != "+":
            return None
        left = node.child_by_field_name("left")
        right = node.child_by_field_name("right")
        if left is None or right is None:
            return None
        left_value = literal_string_value(left)
        right_value = literal_string_value(right)
        if left_value is None or right_value is None:
            return None
        return left_value + right_value

    return None


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal of ``node`` and its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def walk_scope(node: Node) -> Iterator[Node]:
    """Pre-order traversal that does not enter nested functions or classes."""
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        if current.type in SCOPE_NODE_TYPES:
            continue
        stack.extend(reversed(current.children))


__all__ = [
    "dotted_name",
    "is_string_literal",
    "literal_string_value",
    "make_span",
    "named_children",
    "node_text",
    "parse_source",
    "unwrap_parentheses",
    "walk",
    "walk_scope",
]
