"""Error taxonomy for the generation gate.

Validation-category errors are raised inside a stage and recovered at the
stage boundary by the orchestrator, which turns them into structured
rejections. They never escape ``Orchestrator.generate``.
"""

from enum import Enum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from uigate.models.violations import Violation


class ErrorKind(str, Enum):
    """Stable names for every failure the gate can report."""

    INPUT_VALIDATION = "InputValidationError"
    INTENT_REQUIREMENT = "IntentRequirementError"
    PLAN_VALIDATION = "PlanValidationError"
    SECURITY_VIOLATION = "SecurityViolationError"
    STRUCTURAL_VIOLATION = "StructuralViolationError"
    NOT_FOUND = "NotFoundError"
    INTERNAL_SERIALIZATION = "InternalSerializationError"
    INTERNAL = "InternalError"


class UIGateError(Exception):
    """Base error carrying the violations that caused it."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, violations: Sequence["Violation"] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.violations: list["Violation"] = list(violations or [])


class InputValidationError(UIGateError):
    """Request message is empty, too long, or too short for its intent."""

    kind = ErrorKind.INPUT_VALIDATION


class IntentRequirementError(UIGateError):
    """Intent needs a previous version that was not supplied or does not exist."""

    kind = ErrorKind.INTENT_REQUIREMENT


class PlanValidationError(UIGateError):
    """Plan violates the component schemas."""

    kind = ErrorKind.PLAN_VALIDATION


class SecurityViolationError(UIGateError):
    """Input or markup matched an injection or forbidden-content signature."""

    kind = ErrorKind.SECURITY_VIOLATION


class StructuralViolationError(UIGateError):
    """Emitted markup breaks the component manifest."""

    kind = ErrorKind.STRUCTURAL_VIOLATION


class NotFoundError(UIGateError):
    """Unknown version id or component kind."""

    kind = ErrorKind.NOT_FOUND


class InternalSerializationError(UIGateError):
    """Result cannot be represented in the response format."""

    kind = ErrorKind.INTERNAL_SERIALIZATION


__all__ = [
    "ErrorKind",
    "UIGateError",
    "InputValidationError",
    "IntentRequirementError",
    "PlanValidationError",
    "SecurityViolationError",
    "StructuralViolationError",
    "NotFoundError",
    "InternalSerializationError",
]
