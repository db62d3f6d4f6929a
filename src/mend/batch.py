"""Batch repair over every public method in a source tree.

Each ``.java`` file under the directory is parsed, and every public
method of every public top-level type becomes a target. Projects laid out
as ``src/main/java`` get that prefix stripped and used as the source root.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from mend.exceptions import MendError, TargetFormatError
from mend.splice.parser import (
    is_public,
    node_text,
    parse_source,
    signature_of,
    top_level_types,
    type_members,
    type_name,
)
from mend.target import SOURCE_EXTENSION

logger = logging.getLogger(__name__)

# A standard Maven/Gradle project structure.
JAVA_SOURCE_DIR = "src/main/java"


@dataclass(frozen=True)
class BatchTarget:
    """One method to repair.

    Attributes:
        root: Source root the file path is relative to.
        file_path: Slash-separated path under ``root``.
        method_reference: ``pkg.Type#name(T1, T2)``.
    """

    root: str
    file_path: str
    method_reference: str


@dataclass
class BatchReport:
    """Outcome of a batch run."""

    succeeded: list[BatchTarget] = field(default_factory=list)
    failed: list[tuple[BatchTarget, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


def _package_name(tree, data: bytes) -> str:
    for node in tree.root_node.named_children:
        if node.type == "package_declaration":
            for child in node.named_children:
                if child.type in ("scoped_identifier", "identifier"):
                    return node_text(child, data)
    return ""


def method_references(source: str) -> list[str]:
    """References for every public method of every public top-level type."""
    tree, data = parse_source(source)
    package = _package_name(tree, data)
    prefix = f"{package}." if package else ""

    references = []
    for type_node in top_level_types(tree):
        if not is_public(type_node):
            continue
        owner = prefix + type_name(type_node, data)
        for member in type_members(type_node):
            if member.type != "method_declaration" or not is_public(member):
                continue
            signature = signature_of(member, data)
            reference = f"{owner}#{signature.name}({', '.join(signature.parameter_types)})"
            logger.debug("Fully qualified method reference: %s", reference)
            references.append(reference)
    return references


def relative_source_path(file_path: Path, root: str) -> tuple[str, str]:
    """Split an absolute file path into (source root, relative path).

    Raises:
        TargetFormatError: If ``root`` is not a prefix of the file path.
    """
    absolute = os.path.abspath(file_path)
    root = os.path.abspath(root)
    if os.path.commonpath([absolute, root]) != root:
        raise TargetFormatError(
            "file",
            absolute,
            reason=f"is not under the project root {root}",
        )
    relative = Path(os.path.relpath(absolute, root)).as_posix()
    if relative.startswith(JAVA_SOURCE_DIR + "/"):
        relative = relative[len(JAVA_SOURCE_DIR) + 1:]
        root = os.path.join(root, *JAVA_SOURCE_DIR.split("/"))
    return root, relative


def iter_targets(directory: str | os.PathLike[str], root: str) -> Iterator[BatchTarget]:
    """Yield a BatchTarget for every public method under ``directory``.

    Files are visited in sorted order.

    Raises:
        TargetFormatError: If a file lies outside ``root``.
    """
    logger.info("Iterating over Java files in %s", directory)
    for path in sorted(Path(directory).rglob(f"*{SOURCE_EXTENSION}")):
        if not path.is_file():
            continue
        source_root, relative = relative_source_path(path, root)
        logger.info("Processing Java file: %s", path)
        source = path.read_bytes().decode("utf-8")
        for reference in method_references(source):
            yield BatchTarget(root=source_root, file_path=relative, method_reference=reference)
    logger.info("Completed iterating over Java files in %s", directory)


def run_batch(
    directory: str | os.PathLike[str],
    root: str,
    repair_fn: Callable[[str, str, str], object],
) -> BatchReport:
    """Repair every target under ``directory``.

    A failing target is logged and recorded; the batch moves on.

    Args:
        directory: Directory to walk.
        root: Project root every file must be under.
        repair_fn: Called as ``repair_fn(root, file_path, method_reference)``.
    """
    report = BatchReport()
    for target in iter_targets(directory, root):
        try:
            repair_fn(target.root, target.file_path, target.method_reference)
        except MendError as exc:
            logger.error("Repair failed for %s: %s", target.method_reference, exc)
            report.failed.append((target, str(exc)))
            continue
        report.succeeded.append(target)
    logger.info(
        "Batch finished: %d succeeded, %d failed",
        len(report.succeeded), len(report.failed),
    )
    return report
