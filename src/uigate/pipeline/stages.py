"""
Pipeline Stage Types
States, rejection records and outcomes of a generation request.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import ErrorKind
from ..models.version import GenerationResponse, Version
from ..models.violations import Violation


class PipelineState(str, Enum):
    """Per-request state machine; every request ends in RESPONDED or REJECTED."""

    RECEIVED = "Received"
    INTENT_CLASSIFIED = "IntentClassified"
    PLAN_GENERATED = "PlanGenerated"
    PLAN_VALIDATED = "PlanValidated"
    CODE_EMITTED = "CodeEmitted"
    SECURITY_CHECKED = "SecurityChecked"
    EXPLAINED = "Explained"
    DIFFED = "Diffed"
    PERSISTED = "Persisted"
    RESPONDED = "Responded"
    REJECTED = "Rejected"


class PipelineStage(str, Enum):
    """Step that produced a rejection."""

    REQUEST = "request"
    INTENT = "intent"
    PLANNING = "planning"
    PLAN_VALIDATION = "plan_validation"
    EMISSION = "emission"
    SECURITY = "security"
    STRUCTURAL = "structural"
    SERIALIZATION = "serialization"
    PERSISTENCE = "persistence"
    LOOKUP = "lookup"


class Rejection(BaseModel):
    """Structured failure returned instead of a version."""

    model_config = ConfigDict(frozen=True)

    stage: PipelineStage
    kind: ErrorKind
    message: str
    violations: list[Violation] = Field(default_factory=list)
    trail: list[PipelineState] = Field(default_factory=list)


class GenerationOutcome(BaseModel):
    """Successful run: the stored version plus what the pipeline learnt on the way."""

    model_config = ConfigDict(frozen=True)

    version: Version
    intent_confidence: float
    intent_reasoning: str
    complexity: str
    trail: list[PipelineState]

    @property
    def response(self) -> GenerationResponse:
        return to_response(self.version)


def to_response(version: Version) -> GenerationResponse:
    """Project a stored version onto the response shape."""
    return GenerationResponse(
        id=version.id,
        plan=version.plan,
        generated_code=version.generated_code,
        explanation=version.explanation,
        diff=version.diff_from_previous,
    )
