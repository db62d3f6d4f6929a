"""Adapters for the external minimizer and verifier."""

from mend.tools.minimizer import SpeciminMinimizer
from mend.tools.protocols import Minimizer, Verifier
from mend.tools.verifier import CheckerVerifier, extract_error

__all__ = [
    "Minimizer",
    "Verifier",
    "SpeciminMinimizer",
    "CheckerVerifier",
    "extract_error",
]
