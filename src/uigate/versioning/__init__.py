"""Version history, diffing and patching."""

from .diff import DiffEngine, diff_units
from .patcher import FALLBACK_MESSAGE, apply_patch
from .store import VersionStore

__all__ = [
    "DiffEngine",
    "diff_units",
    "FALLBACK_MESSAGE",
    "apply_patch",
    "VersionStore",
]
