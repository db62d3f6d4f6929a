"""Java syntax helpers built on tree-sitter.

Provides MethodSignature and ParsedMethod plus the lookups the splicer
needs: primary type, methods by name, declaring type. All byte offsets
refer to the UTF-8 encoded source that was parsed.
"""

from __future__ import annotations

import functools
import logging
import textwrap
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import tree_sitter_java
from tree_sitter import Language, Node, Parser, Tree

from mend.exceptions import MethodNotFoundError, SpliceError

logger = logging.getLogger(__name__)

JAVA_LANGUAGE = Language(tree_sitter_java.language())

TYPE_DECLARATIONS: frozenset[str] = frozenset({
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "record_declaration",
})

# Wraps a bare method so it parses as a class member.
_SNIPPET_HEADER = "class MendSnippet {\n"
_SNIPPET_FOOTER = "\n}\n"


@functools.lru_cache(maxsize=1)
def _parser() -> Parser:
    return Parser(JAVA_LANGUAGE)


def parse_source(source: str | bytes) -> tuple[Tree, bytes]:
    """Parse Java source, returning the tree and the bytes it was built from."""
    data = source.encode("utf-8") if isinstance(source, str) else source
    return _parser().parse(data), data


def node_text(node: Node, data: bytes) -> str:
    return data[node.start_byte:node.end_byte].decode("utf-8")


def normalize_type(type_text: str) -> str:
    """Drop all whitespace so ``Map<K, V>`` equals ``Map<K,V>``."""
    return "".join(type_text.split())


@dataclass(frozen=True)
class MethodSignature:
    """Return type, name and ordered ``(type, name)`` parameters of a method.

    Two signatures match when return type, name and parameter type
    sequence are equal. Parameter names are not compared.
    """

    return_type: str
    name: str
    parameters: tuple[tuple[str, str], ...] = ()

    @property
    def parameter_types(self) -> tuple[str, ...]:
        return tuple(normalize_type(t) for t, _ in self.parameters)

    def matches(self, other: MethodSignature) -> bool:
        return (
            normalize_type(self.return_type) == normalize_type(other.return_type)
            and self.name == other.name
            and self.parameter_types == other.parameter_types
        )

    def accepts(self, parameter_types: Sequence[str]) -> bool:
        """Check the parameter type sequence against plain type names."""
        return self.parameter_types == tuple(normalize_type(t) for t in parameter_types)

    def __str__(self) -> str:
        params = ", ".join(f"{t} {n}" for t, n in self.parameters)
        return f"{self.return_type} {self.name}({params})"


@dataclass(frozen=True)
class ParsedMethod:
    """A method split into signature, body, and full declaration text.

    ``declaration`` is dedented so that its first line starts at column 0.
    """

    signature: MethodSignature
    body: str
    declaration: str


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


def _parameter(node: Node, data: bytes) -> tuple[str, str]:
    if node.type == "formal_parameter":
        type_node = node.child_by_field_name("type")
        name_node = node.child_by_field_name("name")
        dims = node.child_by_field_name("dimensions")
        if type_node is None or name_node is None:
            raise SpliceError(f"Invalid parameter: {node_text(node, data)!r}")
        type_text = node_text(type_node, data)
        if dims is not None:
            type_text += node_text(dims, data)
        return type_text, node_text(name_node, data)

    # spread_parameter: [modifiers] type '...' variable_declarator
    type_node = None
    name_node = None
    for child in node.named_children:
        if child.type == "modifiers":
            continue
        if child.type == "variable_declarator":
            name_node = child.child_by_field_name("name")
        elif type_node is None:
            type_node = child
    if type_node is None or name_node is None:
        raise SpliceError(f"Invalid parameter: {node_text(node, data)!r}")
    return node_text(type_node, data) + "...", node_text(name_node, data)


def signature_of(node: Node, data: bytes) -> MethodSignature:
    """Build the signature of a ``method_declaration`` node.

    Raises:
        SpliceError: If return type, name or parameter list is missing, or
            a parameter does not yield exactly a type and a name.
    """
    type_node = node.child_by_field_name("type")
    name_node = node.child_by_field_name("name")
    params_node = node.child_by_field_name("parameters")
    if type_node is None or name_node is None or params_node is None:
        raise SpliceError(
            f"Incomplete method signature: {node_text(node, data)[:80]!r}"
        )

    return_type = node_text(type_node, data)
    dims = node.child_by_field_name("dimensions")
    if dims is not None:
        return_type += node_text(dims, data)

    parameters = tuple(
        _parameter(child, data)
        for child in params_node.named_children
        if child.type in ("formal_parameter", "spread_parameter")
    )
    return MethodSignature(
        return_type=return_type,
        name=node_text(name_node, data),
        parameters=parameters,
    )


# ---------------------------------------------------------------------------
# Tree navigation
# ---------------------------------------------------------------------------


def _walk(node: Node) -> Iterator[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


def top_level_types(tree: Tree) -> list[Node]:
    return [n for n in tree.root_node.named_children if n.type in TYPE_DECLARATIONS]


def is_public(node: Node) -> bool:
    for child in node.children:
        if child.type == "modifiers":
            return any(c.type == "public" for c in child.children)
    return False


def primary_type(tree: Tree) -> Node | None:
    """The first public top-level type, else the first top-level type."""
    types = top_level_types(tree)
    for node in types:
        if is_public(node):
            return node
    return types[0] if types else None


def type_name(node: Node, data: bytes) -> str:
    name_node = node.child_by_field_name("name")
    return node_text(name_node, data) if name_node is not None else ""


def type_members(type_node: Node) -> list[Node]:
    """Named member nodes of a type body (enum constants excluded)."""
    body = type_node.child_by_field_name("body")
    if body is None:
        return []
    if body.type == "enum_body":
        for child in body.named_children:
            if child.type == "enum_body_declarations":
                return list(child.named_children)
        return []
    return list(body.named_children)


def method_name_of(node: Node, data: bytes) -> str:
    name_node = node.child_by_field_name("name")
    return node_text(name_node, data) if name_node is not None else ""


def methods_named(type_node: Node, name: str, data: bytes) -> list[Node]:
    """Direct method members of a type with the given name."""
    return [
        m for m in type_members(type_node)
        if m.type == "method_declaration" and method_name_of(m, data) == name
    ]


def find_method_nodes(root: Node, data: bytes, name: str | None = None) -> list[Node]:
    """All method declarations under ``root`` in source order."""
    return [
        n for n in _walk(root)
        if n.type == "method_declaration"
        and (name is None or method_name_of(n, data) == name)
    ]


def line_indent(data: bytes, pos: int) -> str:
    """Leading whitespace of the line containing byte offset ``pos``."""
    line_start = data.rfind(b"\n", 0, pos) + 1
    line = data[line_start:pos]
    return line[: len(line) - len(line.lstrip())].decode("utf-8")


def line_ending(data: bytes, pos: int) -> str:
    """Line terminator of the line break nearest to byte offset ``pos``.

    Looks back from ``pos`` first, then forward. Defaults to LF.
    """
    newline = data.rfind(b"\n", 0, pos)
    if newline == -1:
        newline = data.find(b"\n", pos)
    if newline > 0 and data[newline - 1:newline] == b"\r":
        return "\r\n"
    return "\n"


def declaration_text(node: Node, data: bytes) -> str:
    """Dedented source of a declaration, including its own indentation context."""
    line_start = data.rfind(b"\n", 0, node.start_byte) + 1
    prefix = data[line_start:node.start_byte]
    if prefix.strip():
        prefix = b""
    return textwrap.dedent((prefix + data[node.start_byte:node.end_byte]).decode("utf-8"))


def _parsed(node: Node, data: bytes) -> ParsedMethod:
    body = node.child_by_field_name("body")
    if body is None:
        raise SpliceError(f"Method '{method_name_of(node, data)}' has no body")
    return ParsedMethod(
        signature=signature_of(node, data),
        body=node_text(body, data),
        declaration=declaration_text(node, data),
    )


# ---------------------------------------------------------------------------
# Public lookups
# ---------------------------------------------------------------------------


def parse_method(text: str, name: str | None = None) -> ParsedMethod:
    """Parse a free-form method blob into signature, body and declaration.

    The blob may be a bare method or a type containing it. When ``name`` is
    given, the first method with that name is used; otherwise the first
    method found.

    Raises:
        SpliceError: If the blob is unparseable or the method is incomplete.
        MethodNotFoundError: If the blob parses but holds no matching method.
    """
    text = textwrap.dedent(text).strip()
    if not text:
        raise SpliceError("Unparseable method: empty text")

    parsed_cleanly = False
    for candidate in (text, _SNIPPET_HEADER + text + _SNIPPET_FOOTER):
        tree, data = parse_source(candidate)
        if tree.root_node.has_error:
            continue
        parsed_cleanly = True
        nodes = find_method_nodes(tree.root_node, data, name)
        if nodes:
            return _parsed(nodes[0], data)

    if parsed_cleanly:
        raise MethodNotFoundError(name or "<any>", "suggested code")
    raise SpliceError("Unparseable method")


def find_method(
    source: str,
    name: str,
    parameter_types: Sequence[str] | None = None,
) -> ParsedMethod:
    """Locate a method in a whole source file by name.

    Among overloads, the one whose parameter types equal
    ``parameter_types`` wins; without a match the first is used.

    Raises:
        MethodNotFoundError: If no method has that name.
    """
    tree, data = parse_source(source)
    nodes = find_method_nodes(tree.root_node, data, name)
    if not nodes:
        raise MethodNotFoundError(name)
    if parameter_types is not None:
        for node in nodes:
            if signature_of(node, data).accepts(parameter_types):
                return _parsed(node, data)
        logger.debug(
            "No overload of %s takes (%s); using the first declaration",
            name, ", ".join(parameter_types),
        )
    return _parsed(nodes[0], data)


def find_declaring_type(source: str, method_name: str) -> str:
    """Source text of the innermost type declaring ``method_name``.

    Raises:
        MethodNotFoundError: If no method has that name.
    """
    tree, data = parse_source(source)
    nodes = find_method_nodes(tree.root_node, data, method_name)
    if not nodes:
        raise MethodNotFoundError(method_name)
    parent = nodes[0].parent
    while parent is not None and parent.type not in TYPE_DECLARATIONS:
        parent = parent.parent
    if parent is None:
        raise MethodNotFoundError(method_name, "any type declaration")
    return declaration_text(parent, data)
