"""Generation pipeline."""

from .orchestrator import ROLLBACK_PREFIX, Orchestrator
from .stages import GenerationOutcome, PipelineStage, PipelineState, Rejection, to_response

__all__ = [
    "ROLLBACK_PREFIX",
    "Orchestrator",
    "GenerationOutcome",
    "PipelineStage",
    "PipelineState",
    "Rejection",
    "to_response",
]
