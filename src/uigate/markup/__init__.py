"""Markup: syntax tree, parser, emitter and analysis."""

from . import ast
from .analyzer import CodeMetrics, CodePatterns, MarkupAnalysis, MarkupAnalyzer, detect_patterns, format_report
from .emitter import CodeEmitter, escape_text
from .parser import MarkupParseError, MarkupParser, parse

__all__ = [
    "ast",
    "CodeMetrics",
    "CodePatterns",
    "MarkupAnalysis",
    "MarkupAnalyzer",
    "detect_patterns",
    "format_report",
    "CodeEmitter",
    "escape_text",
    "MarkupParseError",
    "MarkupParser",
    "parse",
]
