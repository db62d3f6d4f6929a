"""Copy a corrected method from the working copy back into the project."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from mend.exceptions import MendError, MethodNotFoundError, PromotionError
from mend.splice import SplicePolicy, find_method, splice_file

if TYPE_CHECKING:
    from mend.target import TargetDescriptor

logger = logging.getLogger(__name__)


def promote(
    working_file: str | os.PathLike[str],
    original_file: str | os.PathLike[str],
    descriptor: TargetDescriptor,
) -> bool:
    """Splice the target method from ``working_file`` into ``original_file``.

    The overload whose parameter types match the descriptor is used when
    there is one. Nothing is written when the method is unchanged apart
    from whitespace.

    Returns:
        True if the original file was rewritten.

    Raises:
        PromotionError: On any failure; the original file is left as it was.
    """
    name = descriptor.method_name
    try:
        working_source = Path(working_file).read_bytes().decode("utf-8")
        original_source = Path(original_file).read_bytes().decode("utf-8")

        corrected = find_method(working_source, name, descriptor.parameter_types)
        try:
            current = find_method(original_source, name, descriptor.parameter_types)
        except MethodNotFoundError:
            current = None

        if current is not None and current.declaration.split() == corrected.declaration.split():
            logger.info("No changes to promote for %s", descriptor.method_reference)
            return False

        splice_file(
            original_file,
            corrected.declaration,
            method_name=name,
            policy=SplicePolicy.IN_PLACE,
        )
    except (MendError, OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to promote %s: %s", descriptor.method_reference, exc)
        raise PromotionError(
            f"Failed to promote {descriptor.method_reference} into {original_file}: {exc}"
        ) from exc

    logger.info("Promoted %s into %s", descriptor.method_reference, original_file)
    return True
