"""Safety gate: content signatures and syntax-tree whitelist enforcement."""

from .patterns import FORBIDDEN_KEYWORDS, INJECTION_PATTERNS, first_injection
from .scanner import SecurityScanner, summarize
from .structural import StructuralValidator

__all__ = [
    "FORBIDDEN_KEYWORDS",
    "INJECTION_PATTERNS",
    "first_injection",
    "SecurityScanner",
    "summarize",
    "StructuralValidator",
]
