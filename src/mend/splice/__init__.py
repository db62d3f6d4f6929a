"""Method splicing engine.

Parses free-form method text into a signature and body, locates the
matching declaration in a Java file, and replaces it in place.
"""

from mend.splice.parser import (
    MethodSignature,
    ParsedMethod,
    find_declaring_type,
    find_method,
    parse_method,
)
from mend.splice.splicer import SplicePolicy, splice, splice_file

__all__ = [
    "MethodSignature",
    "ParsedMethod",
    "SplicePolicy",
    "find_declaring_type",
    "find_method",
    "parse_method",
    "splice",
    "splice_file",
]
