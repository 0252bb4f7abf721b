"""Version Data Models."""

from pydantic import BaseModel, ConfigDict, Field

from .plan import GenerationPlan, IntentType


class Explanation(BaseModel):
    """Human-readable rationale stored alongside generated markup."""

    model_config = ConfigDict(frozen=True)

    layout_reasoning: str
    component_selection_reasoning: dict[str, str] = Field(default_factory=dict)
    modification_reasoning: str | None = None
    tradeoffs: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)

    @classmethod
    def fallback(cls) -> "Explanation":
        """Minimal explanation used when explanation generation fails."""
        return cls(layout_reasoning="Generated layout structure")


class DiffResult(BaseModel):
    """Line/tag level delta between two markup strings."""

    model_config = ConfigDict(frozen=True)

    added: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list, description="Component kinds")
    summary: str = ""


class PatchResult(BaseModel):
    """Outcome of a best-effort structural patch."""

    model_config = ConfigDict(frozen=True)

    code: str
    incremental: bool
    success: bool = True
    message: str | None = None


class VersionMetadata(BaseModel):
    """Summary fields for history listings."""

    model_config = ConfigDict(frozen=True)

    intent: IntentType
    component_count: int = Field(ge=0)
    line_count: int = Field(ge=0)
    complexity: str = "simple"
    incremental_patch: bool | None = None


class VersionDraft(BaseModel):
    """A version before the store assigns its id."""

    model_config = ConfigDict(frozen=True)

    user_message: str
    plan: GenerationPlan
    generated_code: str
    explanation: Explanation
    diff_from_previous: DiffResult | None = None
    timestamp: int = Field(description="Epoch milliseconds")
    metadata: VersionMetadata


class Version(VersionDraft):
    """One immutable, persisted generation result."""

    id: str


class GenerationResponse(BaseModel):
    """Response shape handed to transports."""

    model_config = ConfigDict(frozen=True)

    id: str
    plan: GenerationPlan
    generated_code: str
    explanation: Explanation
    diff: DiffResult | None = None
