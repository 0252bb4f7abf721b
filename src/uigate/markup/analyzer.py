"""
Markup Analyzer
Metrics, pattern flags and combined findings for arbitrary markup.
"""

import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ..core.logging_config import get_logger
from ..models.violations import Violation
from . import ast
from .parser import MarkupParseError, parse

if TYPE_CHECKING:
    from ..safety.scanner import SecurityScanner
    from ..safety.structural import StructuralValidator

logger = get_logger(__name__)

_TAG = re.compile(r"<([A-Z][\w.]*)")
_BRANCH = re.compile(r"\b(?:if|else|switch|case)\b|&&|\|\||\?\?")

_PATTERNS = {
    "has_form": re.compile(r"input|select|textarea|button", re.IGNORECASE),
    "has_table": re.compile(r"grid|<table|columns", re.IGNORECASE),
    "has_modal": re.compile(r"modal", re.IGNORECASE),
    "has_list": re.compile(r"list|items", re.IGNORECASE),
    "has_dark_mode": re.compile(r"dark|theme", re.IGNORECASE),
}


class CodeMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    lines_of_code: int
    comment_lines: int
    blank_lines: int
    component_count: int
    depth: int
    cyclomatic_complexity: int
    complexity: str


class CodePatterns(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_form: bool = False
    has_table: bool = False
    has_modal: bool = False
    has_list: bool = False
    has_dark_mode: bool = False


class MarkupAnalysis(BaseModel):
    """Everything known about a piece of markup without running it."""

    model_config = ConfigDict(frozen=True)

    components: list[str] = Field(default_factory=list)
    parsed: bool = True
    violations: list[Violation] = Field(default_factory=list)
    metrics: CodeMetrics
    patterns: CodePatterns


def element_depth(node: ast.Node) -> int:
    """Deepest element/fragment nesting under node."""
    deepest = 0
    stack = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        if isinstance(current, (ast.Element, ast.Fragment)):
            depth += 1
        deepest = max(deepest, depth)
        stack.extend((child, depth) for child in ast.iter_children(current))
    return deepest


def _tag_depth(code: str) -> int:
    # unparsable markup: rough bracket counting
    deepest = current = 0
    for ch in code:
        if ch == "<":
            current += 1
        elif ch == ">":
            deepest = max(deepest, current)
            current -= 1
    return deepest


def component_names(module: ast.Module) -> list[str]:
    """Element tags in first-seen order."""
    seen: dict[str, None] = {}
    for node in ast.walk(module):
        if isinstance(node, ast.Element):
            seen.setdefault(node.name, None)
    return list(seen)


def classify_complexity(component_count: int) -> str:
    if component_count > 10:
        return "complex"
    if component_count > 5:
        return "moderate"
    return "simple"


def detect_patterns(code: str) -> CodePatterns:
    return CodePatterns(**{name: bool(pattern.search(code)) for name, pattern in _PATTERNS.items()})


class MarkupAnalyzer:
    """Combines the structural validator and the markup content scan into one report."""

    def __init__(self, structural: "StructuralValidator", scanner: "SecurityScanner"):
        self.structural = structural
        self.scanner = scanner

    def analyze(self, code: str) -> MarkupAnalysis:
        try:
            module = parse(code)
        except MarkupParseError as e:
            logger.info("analysis_parse_failed", error=e.message, line=e.location.line)
            module = None

        if module is not None:
            components = component_names(module)
            depth = element_depth(module)
        else:
            components = list(dict.fromkeys(_TAG.findall(code)))
            depth = _tag_depth(code)

        lines = code.split("\n")
        comment_lines = sum(1 for line in lines if line.strip().startswith("//"))
        blank_lines = sum(1 for line in lines if not line.strip())

        metrics = CodeMetrics(
            lines_of_code=len(lines) - comment_lines - blank_lines,
            comment_lines=comment_lines,
            blank_lines=blank_lines,
            component_count=len(components),
            depth=depth,
            cyclomatic_complexity=len(_BRANCH.findall(code)) + 1,
            complexity=classify_complexity(len(components)),
        )

        violations = list(self.structural.validate(code).violations)
        violations.extend(self.scanner.scan_markup(code))

        return MarkupAnalysis(
            components=components,
            parsed=module is not None,
            violations=violations,
            metrics=metrics,
            patterns=detect_patterns(code),
        )


def format_report(analysis: MarkupAnalysis, title: str = "Code Analysis Report") -> str:
    """Markdown summary of an analysis."""
    metrics = analysis.metrics
    lines = [
        f"# {title}",
        "",
        "## Metrics",
        f"- Lines of Code: {metrics.lines_of_code}",
        f"- Components: {metrics.component_count}",
        f"- Nesting Depth: {metrics.depth}",
        f"- Complexity: {metrics.complexity}",
        "",
        "## Components Used",
    ]
    lines.extend(f"- {name}" for name in analysis.components)
    lines.extend(["", "## Patterns Detected"])
    labels = {
        "has_form": "Form pattern detected",
        "has_table": "Table/Grid pattern detected",
        "has_modal": "Modal/Dialog pattern detected",
        "has_list": "List pattern detected",
        "has_dark_mode": "Dark mode support detected",
    }
    lines.extend(f"- {label}" for name, label in labels.items() if getattr(analysis.patterns, name))
    lines.append("")
    if analysis.violations:
        lines.append("## Issues")
        lines.extend(f"- {v.category.value}: {v.message}" for v in analysis.violations)
    else:
        lines.extend(["## Status", "No issues detected"])
    return "\n".join(lines) + "\n"
