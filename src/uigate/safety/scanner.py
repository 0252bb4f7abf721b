"""
Security Scanner
Signature scans over raw user input and over emitted markup.
"""

import bisect
import re
from typing import Iterable

from ..core.logging_config import get_logger
from ..models.violations import Location, SecurityReport, Violation, ViolationCategory
from .patterns import (
    DANGEROUS_PROP_PATTERNS,
    INJECTION_PATTERNS,
    INLINE_STYLE_PATTERN,
    KEYWORD_PATTERNS,
)

logger = get_logger(__name__)


class _Positions:
    """Offset -> line/column lookup for one text."""

    def __init__(self, text: str):
        self._starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

    def __call__(self, offset: int) -> Location:
        line = bisect.bisect_right(self._starts, offset) - 1
        return Location(line=line + 1, column=offset - self._starts[line])


class SecurityScanner:
    """
    Pattern scans that never raise; callers decide what a non-empty result means.

    Input scan: every injection signature that matches, in table order.
    Markup scan: forbidden keywords, inline style objects, dangerous props.
    """

    def scan_input(self, text: str) -> list[Violation]:
        position = _Positions(text)
        violations = []
        for signature in INJECTION_PATTERNS:
            match = signature.pattern.search(text)
            if match:
                violations.append(
                    Violation(
                        category=ViolationCategory.PATTERN_MATCH,
                        message=f'Detected potential prompt injection: "{match.group()}"',
                        location=position(match.start()),
                        snippet=match.group(),
                    )
                )
        return violations

    def scan_markup(self, code: str) -> list[Violation]:
        position = _Positions(code)
        violations = []

        for signature in KEYWORD_PATTERNS:
            match = signature.pattern.search(code)
            if match:
                violations.append(
                    Violation(
                        category=ViolationCategory.PATTERN_MATCH,
                        message=f'Found forbidden keyword: "{signature.name}"',
                        location=position(match.start()),
                        snippet=match.group(),
                    )
                )

        match = INLINE_STYLE_PATTERN.search(code)
        if match:
            violations.append(
                Violation(
                    category=ViolationCategory.INLINE_STYLE,
                    message="Inline styles detected (not allowed)",
                    location=position(match.start()),
                    snippet=match.group(),
                )
            )

        for signature in DANGEROUS_PROP_PATTERNS:
            match = signature.pattern.search(code)
            if match:
                violations.append(
                    Violation(
                        category=ViolationCategory.INLINE_HANDLER,
                        message=f'Dangerous prop detected: "{signature.name}"',
                        location=position(match.start()),
                        snippet=match.group(),
                    )
                )
        return violations

    def check(self, user_input: str, code: str) -> SecurityReport:
        """Union of both scans; ``safe`` iff nothing matched."""
        violations = self.scan_input(user_input) + self.scan_markup(code)
        report = SecurityReport.from_violations(violations)
        if not report.safe:
            logger.warning(
                "security_scan_flagged",
                violations=len(violations),
                categories=sorted({v.category.value for v in violations}),
            )
        return report


def summarize(violations: Iterable[Violation]) -> str:
    """One-line summary for rejection messages."""
    messages = [v.message for v in violations]
    if not messages:
        return "No violations"
    head = "; ".join(messages[:3])
    return head if len(messages) <= 3 else f"{head}; and {len(messages) - 3} more"
