"""
uigate
Deterministic UI generation behind a fail-closed safety gate.
"""

from .core.container import create_container
from .library import Manifest, PlanValidator, SchemaRegistry
from .pipeline import GenerationOutcome, Orchestrator, PipelineState, Rejection
from .versioning import VersionStore

__version__ = "0.1.0"

__all__ = [
    "create_container",
    "Manifest",
    "PlanValidator",
    "SchemaRegistry",
    "GenerationOutcome",
    "Orchestrator",
    "PipelineState",
    "Rejection",
    "VersionStore",
]
