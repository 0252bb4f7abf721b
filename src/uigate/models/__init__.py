"""Data models for plans, findings and versions."""

from .plan import ComponentNode, GenerationPlan, IntentType, LayoutHints
from .version import (
    DiffResult,
    Explanation,
    GenerationResponse,
    PatchResult,
    Version,
    VersionDraft,
    VersionMetadata,
)
from .violations import (
    Location,
    SecurityReport,
    StructuralReport,
    ValidationResult,
    Violation,
    ViolationCategory,
)

__all__ = [
    "ComponentNode",
    "GenerationPlan",
    "IntentType",
    "LayoutHints",
    "DiffResult",
    "Explanation",
    "GenerationResponse",
    "PatchResult",
    "Version",
    "VersionDraft",
    "VersionMetadata",
    "Location",
    "SecurityReport",
    "StructuralReport",
    "ValidationResult",
    "Violation",
    "ViolationCategory",
]
