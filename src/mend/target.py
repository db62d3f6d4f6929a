"""Target descriptor parsing and validation.

A target is a (file path, method reference) pair such as
``com/example/Foo.java`` and ``com.example.Foo#bar(int, String)``.
Validation is purely syntactic and happens before any external tool runs.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from mend.exceptions import TargetFormatError, TargetNotFoundError

logger = logging.getLogger(__name__)

SOURCE_EXTENSION = ".java"

_TARGET_FILE_PATTERN = re.compile(r"([a-zA-Z_0-9]+/)*[a-zA-Z_0-9]+\.java")
_TARGET_METHOD_PATTERN = re.compile(
    r"(?P<owner>[a-zA-Z_0-9]+(\.[a-zA-Z_0-9]+)*)"
    r"#(?P<name>[a-zA-Z_0-9]+)"
    r"\((?P<params>[^)]*)\)"
)
_COMMA_WITHOUT_SPACE = re.compile(r",(?! )")


@dataclass(frozen=True)
class TargetDescriptor:
    """The method to repair and the file that declares it.

    Attributes:
        root_path: Absolute project root (source root).
        relative_file_path: Slash-separated path of the file under the root.
        owner_type_name: Fully-qualified name of the declaring type.
        method_name: Simple name of the method.
        parameter_types: Ordered parameter type names, possibly empty.
    """

    root_path: str
    relative_file_path: str
    owner_type_name: str
    method_name: str
    parameter_types: tuple[str, ...] = ()

    @property
    def method_reference(self) -> str:
        """Render as ``owner#name(T1, T2)``."""
        return (
            f"{self.owner_type_name}#{self.method_name}"
            f"({', '.join(self.parameter_types)})"
        )

    @property
    def absolute_path(self) -> Path:
        """The target file resolved against the project root."""
        return Path(self.root_path, *self.relative_file_path.split("/"))


def ensure_whitespace_after_commas(text: str) -> str:
    """Insert a single space after every comma not already followed by one.

    Idempotent: normalizing an already-normalized string returns it unchanged.
    """
    return _COMMA_WITHOUT_SPACE.sub(", ", text)


def is_valid_file_path(file_path: str) -> bool:
    """Check a relative file path against the ``a/b/C.java`` grammar."""
    return _TARGET_FILE_PATTERN.fullmatch(file_path) is not None


def is_valid_method_reference(method_ref: str) -> bool:
    """Check a method reference against ``pkg.Type#name(Types)`` after normalization."""
    normalized = ensure_whitespace_after_commas(method_ref)
    return _TARGET_METHOD_PATTERN.fullmatch(normalized) is not None


def split_parameter_types(params: str) -> tuple[str, ...]:
    """Split a raw parameter-type list on top-level commas.

    Commas nested inside generic brackets (``Map<K, V>``) do not split.
    """
    if not params.strip():
        return ()
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in params:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    parts.append("".join(current).strip())
    return tuple(parts)


def parse_method_reference(method_ref: str) -> tuple[str, str, tuple[str, ...]]:
    """Parse ``owner#name(params)`` into its three components.

    Raises:
        TargetFormatError: If the reference does not match the grammar.
    """
    normalized = ensure_whitespace_after_commas(method_ref.strip())
    match = _TARGET_METHOD_PATTERN.fullmatch(normalized)
    if match is None:
        raise TargetFormatError("method", method_ref)
    return (
        match.group("owner"),
        match.group("name"),
        split_parameter_types(match.group("params")),
    )


def parse_target(
    root: str | os.PathLike[str],
    file_path: str,
    method_ref: str,
    *,
    must_exist: bool = True,
) -> TargetDescriptor:
    """Validate caller input and build a TargetDescriptor.

    Args:
        root: Project root directory.
        file_path: Target file relative to the root, e.g. ``com/example/Foo.java``.
        method_ref: Target method, e.g. ``com.example.Foo#bar(int, String)``.
        must_exist: Require the resolved file to exist.

    Returns:
        The immutable descriptor.

    Raises:
        TargetFormatError: If either half is malformed, or the resolved file
            escapes the root.
        TargetNotFoundError: If ``must_exist`` and the file is missing.
    """
    if not is_valid_file_path(file_path):
        logger.error("Formatting error: target file %r is malformed.", file_path)
        raise TargetFormatError("file", file_path)

    try:
        owner, name, parameter_types = parse_method_reference(method_ref)
    except TargetFormatError:
        logger.error("Formatting error: target method %r is malformed.", method_ref)
        raise

    root_path = os.path.abspath(os.fspath(root))
    resolved = os.path.abspath(os.path.join(root_path, *file_path.split("/")))
    if os.path.commonpath([resolved, root_path]) != root_path:
        raise TargetFormatError(
            "file", file_path, reason=f"resolves outside of root {root_path}"
        )
    if must_exist and not os.path.isfile(resolved):
        raise TargetNotFoundError(resolved)

    descriptor = TargetDescriptor(
        root_path=root_path,
        relative_file_path=file_path,
        owner_type_name=owner,
        method_name=name,
        parameter_types=parameter_types,
    )
    logger.debug("Parsed target %s in %s", descriptor.method_reference, resolved)
    return descriptor
