"""Input validation with strong typing."""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InputValidationError


# Validation limits
MAX_MESSAGE_LENGTH = 10_000
MAX_JSON_DEPTH = 20
SANITIZE_MAX_LENGTH = 5_000

_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")


class RequestValidator(BaseModel):
    """Base validator with strict configuration."""

    model_config = ConfigDict(
        strict=True, validate_assignment=True, extra="forbid", frozen=True  # Immutable by default
    )


class GenerationRequest(RequestValidator):
    """Validated generation request."""

    message: str = Field(min_length=1)
    previous_version_id: str | None = Field(default=None)

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Ensure message is non-empty after stripping."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Message cannot be empty")
        return stripped

    @field_validator("previous_version_id")
    @classmethod
    def validate_previous_version_id(cls, v: str | None) -> str | None:
        """Treat blank references as absent."""
        if v is None or not v.strip():
            return None
        return v.strip()


def build_request(
    message: Any,
    previous_version_id: Any = None,
    max_length: int = MAX_MESSAGE_LENGTH,
) -> GenerationRequest:
    """
    Build a GenerationRequest, converting pydantic failures into InputValidationError.

    Args:
        message: Raw request text
        previous_version_id: Optional reference to a stored version
        max_length: Configured message length limit

    Raises:
        InputValidationError: If the message is missing, blank or too long
    """
    try:
        request = GenerationRequest(message=message, previous_version_id=previous_version_id)
    except ValidationError as e:
        reasons = "; ".join(err["msg"] for err in e.errors())
        raise InputValidationError(f"Invalid request: {reasons}") from e

    if len(request.message) > max_length:
        raise InputValidationError(
            f"Message length {len(request.message)} exceeds maximum {max_length}"
        )
    return request


def sanitize_input(text: str, max_length: int = SANITIZE_MAX_LENGTH) -> str:
    """Strip control characters and cap the length of user text."""
    return _CONTROL_CHARS.sub("", text)[:max_length]


def validate_json_depth(obj: Any, max_depth: int = MAX_JSON_DEPTH, current_depth: int = 0) -> int:
    """
    Return the nesting depth of a JSON-like object.

    Args:
        obj: Object to measure
        max_depth: Maximum allowed nesting depth
        current_depth: Current depth (internal)

    Raises:
        InputValidationError: If depth exceeds limit
    """
    if current_depth > max_depth:
        raise InputValidationError(f"JSON nesting depth {current_depth} exceeds maximum {max_depth}")

    deepest = current_depth
    if isinstance(obj, dict):
        for value in obj.values():
            deepest = max(deepest, validate_json_depth(value, max_depth, current_depth + 1))
    elif isinstance(obj, list):
        for item in obj:
            deepest = max(deepest, validate_json_depth(item, max_depth, current_depth + 1))
    return deepest
