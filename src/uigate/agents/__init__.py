"""Deterministic agents: intent classification, planning and explanation."""

from .explainer import default_explanation, explain, format_explanation
from .intent import Entities, IntentClassifier, IntentResult, extract_entities, validate_requirements
from .planner import PlanComplexity, PlanGenerator, count_components, estimate_complexity, extract_title

__all__ = [
    "default_explanation",
    "explain",
    "format_explanation",
    "Entities",
    "IntentClassifier",
    "IntentResult",
    "extract_entities",
    "validate_requirements",
    "PlanComplexity",
    "PlanGenerator",
    "count_components",
    "estimate_complexity",
    "extract_title",
]
