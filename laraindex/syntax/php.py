"""Tree-sitter backed PHP parse trees and node helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import tree_sitter_php as tsphp
from tree_sitter import Language, Node, Parser, Tree

from ..models import SiteHandle

PHP_LANGUAGE = Language(tsphp.language_php())

CALL_TYPES = {
    "function_call_expression",
    "scoped_call_expression",
    "member_call_expression",
    "nullsafe_member_call_expression",
}
CLOSURE_TYPES = {
    "anonymous_function",
    "anonymous_function_creation_expression",
    "arrow_function",
}
STRING_TYPES = {"string", "encapsed_string"}
_LITERAL_PARTS = {"string_content", "string_value", "escape_sequence"}


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="ignore")


def string_value(node: Optional[Node]) -> Optional[str]:
    """Return the contents of a literal string node.

    Interpolated strings (``"users.{$id}"``) and non-string nodes yield
    ``None``: only literal arguments are resolved.
    """
    if node is None or node.type not in STRING_TYPES:
        return None
    for child in node.named_children:
        if child.type not in _LITERAL_PARTS:
            return None
    raw = node_text(node)
    start = 0
    while start < len(raw) and raw[start] not in "'\"":
        start += 1
    if start >= len(raw):
        return None
    quote = raw[start]
    body = raw[start + 1 :]
    if body.endswith(quote):
        body = body[:-1]
    if quote == "'":
        return body.replace("\\'", "'").replace("\\\\", "\\")
    return body.replace('\\"', '"').replace("\\$", "$").replace("\\\\", "\\")


def class_constant_name(node: Optional[Node]) -> Optional[str]:
    """``UserController::class`` -> ``UserController``."""
    if node is None or node.type != "class_constant_access_expression":
        return None
    text = node_text(node)
    if not text.endswith("::class"):
        return None
    return text[: -len("::class")].strip()


def is_closure(node: Optional[Node]) -> bool:
    return node is not None and node.type in CLOSURE_TYPES


def closure_body(node: Node) -> Optional[Node]:
    return node.child_by_field_name("body")


@dataclass(frozen=True)
class Argument:
    value: Node
    name: Optional[str] = None


@dataclass(frozen=True)
class CallSite:
    """A classified call expression.

    ``kind`` is ``function``, ``static`` or ``method``. ``target`` is the
    scope text of a static call or the receiver text of a method call.
    """

    node: Node
    kind: str
    name: str
    target: Optional[str]
    target_node: Optional[Node]
    arguments: Tuple[Argument, ...]

    def argument(self, index: int, name: Optional[str] = None) -> Optional[Node]:
        """Return a named argument when present, else the ``index``-th positional one."""
        if name is not None:
            for argument in self.arguments:
                if argument.name == name:
                    return argument.value
        positional = [argument.value for argument in self.arguments if argument.name is None]
        if 0 <= index < len(positional):
            return positional[index]
        return None

    @property
    def bare_target(self) -> Optional[str]:
        """Static scope without namespace qualification (``\\Foo\\Route`` -> ``Route``)."""
        if self.target is None:
            return None
        return self.target.rsplit("\\", 1)[-1]


def call_site(node: Optional[Node]) -> Optional[CallSite]:
    if node is None or node.type not in CALL_TYPES:
        return None
    if node.type == "function_call_expression":
        function = node.child_by_field_name("function")
        name = node_text(function).rsplit("\\", 1)[-1]
        kind, target_node = "function", None
    elif node.type == "scoped_call_expression":
        name = node_text(node.child_by_field_name("name"))
        kind, target_node = "static", node.child_by_field_name("scope")
    else:
        name = node_text(node.child_by_field_name("name"))
        kind, target_node = "method", node.child_by_field_name("object")
    if not name:
        return None
    return CallSite(
        node=node,
        kind=kind,
        name=name,
        target=node_text(target_node) if target_node is not None else None,
        target_node=target_node,
        arguments=_arguments(node.child_by_field_name("arguments")),
    )


def _arguments(node: Optional[Node]) -> Tuple[Argument, ...]:
    if node is None:
        return ()
    result: List[Argument] = []
    for child in node.named_children:
        if child.type != "argument" or not child.named_children:
            continue
        name_node = child.child_by_field_name("name")
        result.append(
            Argument(
                value=child.named_children[-1],
                name=node_text(name_node) if name_node is not None else None,
            )
        )
    return tuple(result)


def call_chain(node: Node) -> List[CallSite]:
    """Return the fluent chain ending at ``node``, outermost receiver first."""
    chain: List[CallSite] = []
    current: Optional[Node] = node
    while current is not None:
        site = call_site(current)
        if site is None:
            break
        chain.append(site)
        if site.kind != "method":
            break
        current = site.target_node
    chain.reverse()
    return chain


def array_entries(node: Optional[Node]) -> List[Tuple[Optional[Node], Node]]:
    """Return ``(key, value)`` pairs of an array literal; ``key`` is ``None`` for list items."""
    if node is None or node.type != "array_creation_expression":
        return []
    entries: List[Tuple[Optional[Node], Node]] = []
    for child in node.named_children:
        if child.type != "array_element_initializer":
            continue
        named = child.named_children
        if not named:
            continue
        keyed = any(part.type == "=>" for part in child.children)
        if keyed and len(named) >= 2:
            entries.append((named[0], named[-1]))
        else:
            entries.append((None, named[-1]))
    return entries


def keyed_entries(node: Optional[Node]) -> List[Tuple[str, Node]]:
    """Array entries whose key is a literal string."""
    result: List[Tuple[str, Node]] = []
    for key, value in array_entries(node):
        literal = string_value(key)
        if literal is not None:
            result.append((literal, value))
    return result


def string_list(node: Optional[Node]) -> List[str]:
    """Literal strings of a scalar-or-list argument (``'auth'`` or ``['auth', 'web']``)."""
    literal = string_value(node)
    if literal is not None:
        return [literal]
    values: List[str] = []
    for key, value in array_entries(node):
        if key is not None:
            continue
        item = string_value(value)
        if item is not None:
            values.append(item)
    return values


def enclosing_call(literal: Node) -> Optional[Tuple[CallSite, int, Optional[str]]]:
    """Return ``(call, positional index, argument name)`` when ``literal`` is a call argument."""
    argument = literal.parent
    if argument is None or argument.type != "argument":
        return None
    arguments = argument.parent
    if arguments is None or arguments.type != "arguments":
        return None
    site = call_site(arguments.parent)
    if site is None:
        return None
    name_node = argument.child_by_field_name("name")
    index = 0
    for child in arguments.named_children:
        if child.type != "argument":
            continue
        if child.id == argument.id:
            break
        if child.child_by_field_name("name") is None:
            index += 1
    return site, index, node_text(name_node) if name_node is not None else None


def array_position(literal: Node) -> Optional[Tuple[Node, bool, int]]:
    """Return ``(array, is_key, element index)`` when ``literal`` sits inside an array literal."""
    element = literal.parent
    if element is None or element.type != "array_element_initializer":
        return None
    array = element.parent
    if array is None or array.type != "array_creation_expression":
        return None
    named = element.named_children
    keyed = any(part.type == "=>" for part in element.children)
    is_key = keyed and len(named) >= 2 and named[0].id == literal.id
    index = 0
    for child in array.named_children:
        if child.type != "array_element_initializer":
            continue
        if child.id == element.id:
            break
        index += 1
    return array, is_key, index


def iter_nodes(root: Node, types: set) -> Iterator[Node]:
    """Yield nodes of the given types in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in types:
            yield node
        stack.extend(reversed(node.children))


def iter_string_literals(root: Node) -> Iterator[Node]:
    """Yield literal string nodes in document order."""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in STRING_TYPES:
            if string_value(node) is not None:
                yield node
            continue
        stack.extend(reversed(node.children))


def returned_expression(root: Node) -> Optional[Node]:
    """The expression of the first top-level ``return`` statement."""
    for child in root.named_children:
        if child.type == "return_statement" and child.named_children:
            return child.named_children[0]
    return None


@dataclass(frozen=True)
class PhpDocument:
    """A parsed PHP (or Blade) file."""

    path: str
    text: str
    tree: Tree

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def site(self, node: Node) -> SiteHandle:
        return SiteHandle(
            path=self.path,
            line=node.start_point[0],
            offset=node.start_byte,
            end=node.end_byte,
        )


class PhpParser:
    """Parses PHP and Blade sources with the tree-sitter PHP grammar."""

    def parse(self, text: str, path: str) -> PhpDocument:
        parser = Parser(PHP_LANGUAGE)
        tree = parser.parse(text.encode("utf-8"))
        return PhpDocument(path=path, text=text, tree=tree)


__all__ = [
    "Argument",
    "CallSite",
    "PHP_LANGUAGE",
    "PhpDocument",
    "PhpParser",
    "array_entries",
    "array_position",
    "call_chain",
    "call_site",
    "class_constant_name",
    "closure_body",
    "enclosing_call",
    "is_closure",
    "iter_nodes",
    "iter_string_literals",
    "keyed_entries",
    "node_text",
    "returned_expression",
    "string_list",
    "string_value",
]
