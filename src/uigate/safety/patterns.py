"""
Security Signatures
Ordered pattern tables shared by the intent classifier and the scanner.
"""

import re
from typing import NamedTuple


class Signature(NamedTuple):
    name: str
    pattern: re.Pattern[str]


# Checked in this order; the classifier reports the first hit
INJECTION_PATTERNS: tuple[Signature, ...] = tuple(
    Signature(name, re.compile(regex, re.IGNORECASE))
    for name, regex in (
        ("ignore previous instructions", r"ignore\s+previous\s+instructions"),
        ("execute command", r"execute\s+command"),
        ("run code", r"run\s+code"),
        ("bypass security", r"bypass\s+security"),
        ("override restrictions", r"override\s+restrictions"),
        ("disable validation", r"disable\s+validation"),
        ("jailbreak", r"jailbreak"),
        ("system prompt", r"system\s+prompt"),
        ("administrator mode", r"administrator\s+mode"),
        ("god mode", r"god\s+mode"),
        ("script tag", r"<\s*script\b"),
    )
)

FORBIDDEN_KEYWORDS: tuple[str, ...] = (
    # evaluation
    "eval",
    "Function(",
    # DOM mutation
    "dangerouslySetInnerHTML",
    "innerHTML",
    "appendChild",
    "insertAdjacentHTML",
    "document.write",
    "onclick=",
    "onload=",
    # network
    "fetch(",
    "axios",
    "XMLHttpRequest",
    # timers
    "setTimeout",
    "setInterval",
    "setImmediate",
    # module loading
    "require(",
    # prototype access
    "constructor",
    "prototype",
    "__proto__",
    # host globals
    "window.",
    "global.",
    "process.",
    # filesystem and process
    "child_process",
    "fs.",
    "path.",
    "os.",
)

DANGEROUS_PROPS: tuple[str, ...] = ("dangerouslySetInnerHTML", "onClick", "onChange")

INLINE_STYLE_PATTERN = re.compile(r"style\s*=\s*\{", re.IGNORECASE)


def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Case-insensitive pattern with a word boundary on each word-character edge."""
    regex = re.escape(keyword)
    if re.match(r"\w", keyword):
        regex = r"\b" + regex
    if re.search(r"\w$", keyword):
        regex = regex + r"\b"
    return re.compile(regex, re.IGNORECASE)


KEYWORD_PATTERNS: tuple[Signature, ...] = tuple(Signature(k, keyword_pattern(k)) for k in FORBIDDEN_KEYWORDS)

DANGEROUS_PROP_PATTERNS: tuple[Signature, ...] = tuple(
    Signature(prop, re.compile(rf"\b{prop}\s*=", re.IGNORECASE)) for prop in DANGEROUS_PROPS
)


def first_injection(text: str) -> Signature | None:
    """First injection signature found in text, in table order."""
    for signature in INJECTION_PATTERNS:
        if signature.pattern.search(text):
            return signature
    return None
