"""
Diff Engine
Set-based line diff between two versions of markup.

Presence-based, not count-aware: a unit that appears twice in the old code
and once in the new one is not reported as removed.
"""

import re
from typing import Iterable

from ..core.logging_config import get_logger
from ..models.version import DiffResult, PatchResult
from .patcher import apply_patch

logger = get_logger(__name__)

DEFAULT_PREVIEW_LIMIT = 10

_BETWEEN_TAGS = re.compile(r"(?<=>)\s*(?=<)")
_TAG_OPEN = re.compile(r"<(\w+)")


def diff_units(code: str) -> list[str]:
    """Stripped non-blank lines, split further between adjacent tags."""
    units = []
    for line in code.split("\n"):
        for piece in _BETWEEN_TAGS.split(line):
            piece = piece.strip()
            if piece:
                units.append(piece)
    return units


def _ordered_difference(units: Iterable[str], exclude: set[str]) -> list[str]:
    return list(dict.fromkeys(u for u in units if u not in exclude))


class DiffEngine:
    def __init__(self, preview_limit: int = DEFAULT_PREVIEW_LIMIT):
        self.preview_limit = preview_limit

    def diff(self, old_code: str, new_code: str) -> DiffResult:
        """
        Compare two markup strings.

        Args:
            old_code: Previous version's markup
            new_code: Candidate markup

        Returns:
            DiffResult with previews capped to the preview limit and a summary
            computed from the full counts
        """
        old_units = diff_units(old_code)
        new_units = diff_units(new_code)

        added = _ordered_difference(new_units, set(old_units))
        removed = _ordered_difference(old_units, set(new_units))

        old_tags = set(_TAG_OPEN.findall(old_code))
        changed = added + removed
        modified = [
            tag
            for tag in dict.fromkeys(_TAG_OPEN.findall(new_code))
            if tag in old_tags and any(re.search(rf"<{tag}\b", unit) for unit in changed)
        ]

        result = DiffResult(
            added=added[: self.preview_limit],
            removed=removed[: self.preview_limit],
            modified=modified,
            summary=f"Added {len(added)} lines, removed {len(removed)} lines, modified {len(modified)} components",
        )
        logger.debug("diff_computed", added=len(added), removed=len(removed), modified=len(modified))
        return result

    def patch(self, old_code: str, new_code: str) -> PatchResult:
        """Best-effort structural patch; see ``apply_patch``."""
        return apply_patch(old_code, new_code)
