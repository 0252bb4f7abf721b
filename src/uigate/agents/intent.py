"""
Intent Classifier
Keyword scoring of a request into one of the five fixed intents.
"""

from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import Settings, get_settings
from ..core.errors import InputValidationError, IntentRequirementError
from ..core.logging_config import get_logger
from ..core.validate import GenerationRequest
from ..models.plan import IntentType
from ..safety.patterns import first_injection

logger = get_logger(__name__)

# Iteration order is the tie-breaking order
INTENT_KEYWORDS: dict[IntentType, tuple[str, ...]] = {
    IntentType.CREATE: ("create", "build", "design", "make", "new", "generate", "design a", "build a"),
    IntentType.MODIFY: ("update", "change", "modify", "edit", "add", "remove", "replace"),
    IntentType.REMOVE: ("delete", "remove", "eliminate", "drop"),
    IntentType.REGENERATE: ("regenerate", "redo", "retry", "again", "different version"),
    IntentType.ROLLBACK: ("revert", "rollback", "go back", "restore", "previous"),
}

INTENT_REASONS: dict[IntentType, str] = {
    IntentType.CREATE: "User is requesting a new UI component or layout",
    IntentType.MODIFY: "User is requesting changes to existing UI",
    IntentType.REMOVE: "User is requesting deletion of components",
    IntentType.REGENERATE: "User is requesting recreation of UI with modifications",
    IntentType.ROLLBACK: "User is requesting restoration of previous version",
}

COMPONENT_VOCABULARY = (
    "button", "card", "header", "input", "select", "form",
    "modal", "list", "grid", "stack", "alert", "divider", "textarea",
)
LAYOUT_TERMS = ("horizontal", "vertical", "grid", "row", "column", "center", "flex")
STYLE_TERMS = ("dark", "light", "compact", "spacious", "minimal", "bold")

REQUIRES_PREVIOUS = frozenset({IntentType.MODIFY, IntentType.REGENERATE, IntentType.ROLLBACK})


class IntentResult(BaseModel):
    """Classification outcome."""

    model_config = ConfigDict(frozen=True)

    intent: IntentType
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    matches: int = Field(default=0, ge=0)
    signature: Optional[str] = Field(default=None, description="Injection signature that short-circuited scoring")


class Entities(BaseModel):
    """Vocabulary terms found in a request, in vocabulary order."""

    model_config = ConfigDict(frozen=True)

    components: list[str] = Field(default_factory=list)
    layout_hints: list[str] = Field(default_factory=list)
    style_hints: list[str] = Field(default_factory=list)


def extract_entities(message: str) -> Entities:
    """Independent substring scans for components, layout and style terms."""
    lowered = message.lower()
    return Entities(
        components=[term for term in COMPONENT_VOCABULARY if term in lowered],
        layout_hints=[term for term in LAYOUT_TERMS if term in lowered],
        style_hints=[term for term in STYLE_TERMS if term in lowered],
    )


class IntentClassifier:
    """Classifies requests; injection signatures short-circuit to a zero-confidence create."""

    def classify(self, message: str, previous_version_id: Optional[str] = None) -> IntentResult:
        lowered = message.lower()

        signature = first_injection(lowered)
        if signature is not None:
            logger.warning("intent_injection_signature", signature=signature.name)
            return IntentResult(
                intent=IntentType.CREATE,
                confidence=0.0,
                reasoning=f"Potential security violation detected: {signature.name}",
                signature=signature.name,
            )

        winner = IntentType.CREATE
        best = 0
        for intent, keywords in INTENT_KEYWORDS.items():
            matches = sum(1 for keyword in keywords if keyword in lowered)
            if matches > best:
                best = matches
                winner = intent

        if (
            previous_version_id
            and winner is IntentType.CREATE
            and "rollback" not in lowered
            and "regenerate" not in lowered
        ):
            winner = IntentType.MODIFY

        result = IntentResult(
            intent=winner,
            confidence=min(best / 3, 1.0),
            reasoning=f"{INTENT_REASONS[winner]}. (Keyword matches: {best})",
            matches=best,
        )
        logger.debug("intent_classified", intent=result.intent.value, confidence=result.confidence)
        return result


def validate_requirements(
    intent: IntentType,
    request: GenerationRequest,
    version_exists: Callable[[str], bool],
    settings: Optional[Settings] = None,
) -> None:
    """
    Enforce per-intent preconditions before planning starts.

    Raises:
        IntentRequirementError: modify/regenerate/rollback without a resolvable previous version
        InputValidationError: create with a message shorter than the configured minimum
    """
    settings = settings or get_settings()

    if intent in REQUIRES_PREVIOUS:
        previous = request.previous_version_id
        if not previous:
            raise IntentRequirementError(f'Intent "{intent.value}" requires previous_version_id')
        if not version_exists(previous):
            raise IntentRequirementError(f'Intent "{intent.value}" references unknown version {previous}')
    elif intent is IntentType.CREATE:
        if len(request.message.strip()) < settings.min_create_length:
            raise InputValidationError(
                f"Create intent requires a descriptive message (min {settings.min_create_length} chars)"
            )
