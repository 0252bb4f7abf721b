"""
Core infrastructure: configuration, logging, errors, ids, hashing and serialization.

``core.container`` wires the whole pipeline and is imported explicitly,
not re-exported here.
"""

from .config import Settings, get_settings
from .errors import (
    ErrorKind,
    InputValidationError,
    IntentRequirementError,
    InternalSerializationError,
    NotFoundError,
    PlanValidationError,
    SecurityViolationError,
    StructuralViolationError,
    UIGateError,
)
from .hash import Algorithm, hash_fields, hash_string
from .id import extract_timestamp, is_valid, is_version_id, new_version_id
from .json import ensure_serializable, safe_json_dumps
from .logging_config import LogContext, configure_logging, get_logger
from .tracing import trace_operation
from .validate import GenerationRequest, build_request, sanitize_input, validate_json_depth

__all__ = [
    "Settings",
    "get_settings",
    "ErrorKind",
    "InputValidationError",
    "IntentRequirementError",
    "InternalSerializationError",
    "NotFoundError",
    "PlanValidationError",
    "SecurityViolationError",
    "StructuralViolationError",
    "UIGateError",
    "Algorithm",
    "hash_fields",
    "hash_string",
    "extract_timestamp",
    "is_valid",
    "is_version_id",
    "new_version_id",
    "ensure_serializable",
    "safe_json_dumps",
    "LogContext",
    "configure_logging",
    "get_logger",
    "trace_operation",
    "GenerationRequest",
    "build_request",
    "sanitize_input",
    "validate_json_depth",
]
