"""Data models shared across Mend."""

from mend.models.config import MendConfig
from mend.models.diagnostics import Diagnostics, DiagnosticsStatus

__all__ = [
    "MendConfig",
    "Diagnostics",
    "DiagnosticsStatus",
]
