"""Method splicing: replace one method declaration inside a Java file.

The splice happens on bytes. Everything outside the replaced span keeps
its exact original bytes, including line endings and comments, and the
new text uses the line terminator found next to it. The result is
reparsed before it is returned, and files are only rewritten after the
whole splice succeeded in memory.
"""

from __future__ import annotations

import enum
import logging
import os
from pathlib import Path

from tree_sitter import Node

from mend.exceptions import SignatureMismatchError, SpliceError
from mend.splice.parser import (
    ParsedMethod,
    line_ending,
    line_indent,
    methods_named,
    parse_method,
    parse_source,
    primary_type,
    signature_of,
    type_name,
)

logger = logging.getLogger(__name__)

_MEMBER_INDENT = "    "


class SplicePolicy(str, enum.Enum):
    """How the replacement enters the primary type.

    - ``IN_PLACE``: replace only the matching declaration; siblings stay.
      A method with no same-named original is appended to the type.
    - ``REPLACE_MEMBERS``: drop every member of the primary type and keep
      the replacement as its single member.
    """

    IN_PLACE = "in_place"
    REPLACE_MEMBERS = "replace_members"


def _reindent(declaration: str, indent: str, newline: str = "\n") -> str:
    lines = declaration.splitlines()
    out = lines[:1]
    out.extend(indent + line if line.strip() else "" for line in lines[1:])
    return newline.join(out)


def _select_target(
    type_node: Node, replacement: ParsedMethod, data: bytes
) -> Node | None:
    """Find the declaration the replacement stands in for.

    Raises:
        SignatureMismatchError: If same-named methods exist but none has
            the replacement's signature.
    """
    candidates = methods_named(type_node, replacement.signature.name, data)
    if not candidates:
        return None
    signatures = [signature_of(node, data) for node in candidates]
    for node, signature in zip(candidates, signatures):
        if signature.matches(replacement.signature):
            return node
    raise SignatureMismatchError(
        [str(s) for s in signatures], str(replacement.signature)
    )


def _replace_span(data: bytes, node: Node, declaration: str) -> bytes:
    newline = line_ending(data, node.start_byte)
    text = _reindent(declaration, line_indent(data, node.start_byte), newline)
    return data[:node.start_byte] + text.encode("utf-8") + data[node.end_byte:]


def _append_member(data: bytes, type_node: Node, declaration: str) -> bytes:
    body = type_node.child_by_field_name("body")
    if body is None:
        raise SpliceError(f"Type '{type_name(type_node, data)}' has no body")
    close = body.children[-1]
    type_indent = line_indent(data, type_node.start_byte)
    member_indent = type_indent + _MEMBER_INDENT
    newline = line_ending(data, close.start_byte)
    text = member_indent + _reindent(declaration, member_indent, newline)

    line_start = data.rfind(b"\n", 0, close.start_byte) + 1
    if not data[line_start:close.start_byte].strip():
        insertion = (newline + text + newline).encode("utf-8")
        return data[:line_start] + insertion + data[line_start:]
    insertion = (newline + text + newline + type_indent).encode("utf-8")
    return data[:close.start_byte] + insertion + data[close.start_byte:]


def _replace_members(data: bytes, type_node: Node, declaration: str) -> bytes:
    body = type_node.child_by_field_name("body")
    if body is None or body.type == "enum_body":
        raise SpliceError(
            f"Cannot replace the members of '{type_name(type_node, data)}'"
        )
    open_brace, close_brace = body.children[0], body.children[-1]
    type_indent = line_indent(data, type_node.start_byte)
    member_indent = type_indent + _MEMBER_INDENT
    newline = line_ending(data, open_brace.end_byte)
    inner = (
        newline + member_indent + _reindent(declaration, member_indent, newline)
        + newline + type_indent
    )
    return (
        data[:open_brace.end_byte]
        + inner.encode("utf-8")
        + data[close_brace.start_byte:]
    )


def splice(
    source: str,
    new_method_text: str,
    *,
    method_name: str | None = None,
    policy: SplicePolicy = SplicePolicy.IN_PLACE,
) -> str:
    """Splice a method into the primary type of ``source``.

    Args:
        source: Full contents of the target file.
        new_method_text: Free-form method text (bare method or a type
            containing it).
        method_name: Method to take from ``new_method_text`` when it holds
            more than one. Defaults to the first method.
        policy: How the replacement enters the primary type.

    Returns:
        The new file contents.

    Raises:
        SpliceError: If either text cannot be parsed, or the result does not.
        SignatureMismatchError: If the replacement's signature differs from
            every same-named method in the primary type.
    """
    replacement = parse_method(new_method_text, name=method_name)
    logger.debug("Parsed replacement signature: %s", replacement.signature)

    tree, data = parse_source(source)
    if tree.root_node.has_error:
        raise SpliceError("Target source has syntax errors")
    target_type = primary_type(tree)
    if target_type is None:
        raise SpliceError("No type declaration found in target source")

    target = _select_target(target_type, replacement, data)

    if policy == SplicePolicy.REPLACE_MEMBERS:
        updated = _replace_members(data, target_type, replacement.declaration)
    elif target is not None:
        updated = _replace_span(data, target, replacement.declaration)
    else:
        logger.info(
            "No method '%s' in %s; appending it",
            replacement.signature.name, type_name(target_type, data),
        )
        updated = _append_member(data, target_type, replacement.declaration)

    check, _ = parse_source(updated)
    if check.root_node.has_error:
        raise SpliceError("Splice produced unparseable source")
    return updated.decode("utf-8")


def splice_file(
    path: str | os.PathLike[str],
    new_method_text: str,
    *,
    method_name: str | None = None,
    policy: SplicePolicy = SplicePolicy.IN_PLACE,
) -> None:
    """Splice a method into a file, rewriting it only on success.

    Raises:
        SpliceError: On read, parse, signature or write failure. The file is
            untouched unless the final write itself fails.
    """
    path = Path(path)
    try:
        source = path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpliceError(f"Cannot read {path}: {exc}") from exc

    updated = splice(source, new_method_text, method_name=method_name, policy=policy)

    try:
        path.write_bytes(updated.encode("utf-8"))
    except OSError as exc:
        raise SpliceError(f"Cannot write {path}: {exc}") from exc
    logger.info("Method replacement succeeded for file: %s", path)
