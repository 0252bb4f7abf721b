"""Findings shared by the plan validator, security scanner and structural validator."""

from enum import Enum
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field


class ViolationCategory(str, Enum):
    """Tagged kind of a finding."""

    FORBIDDEN_IMPORT = "ForbiddenImport"
    DYNAMIC_LOAD = "DynamicLoad"
    EVAL_USAGE = "EvalUsage"
    INLINE_HANDLER = "InlineHandler"
    INLINE_STYLE = "InlineStyle"
    FORBIDDEN_GLOBAL = "ForbiddenGlobal"
    UNKNOWN_COMPONENT = "UnknownComponent"
    UNKNOWN_PROP = "UnknownProp"
    PATTERN_MATCH = "PatternMatch"
    SCHEMA_ERROR = "SchemaError"


class Location(BaseModel):
    """Source position: 1-based line, 0-based column."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=1)
    column: int = Field(ge=0)


class Violation(BaseModel):
    """A single rule breach with enough context to show the caller what failed."""

    model_config = ConfigDict(frozen=True)

    category: ViolationCategory
    message: str
    location: Location | None = None
    path: str | None = Field(default=None, description="Dotted path into a plan")
    snippet: str | None = Field(default=None, description="Matched source text")


class ValidationResult(BaseModel):
    """Plan validation outcome."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    violations: list[Violation] = Field(default_factory=list)

    @classmethod
    def from_violations(cls, violations: Sequence[Violation]) -> "ValidationResult":
        return cls(valid=not violations, violations=list(violations))


class SecurityReport(BaseModel):
    """Content scan outcome."""

    model_config = ConfigDict(frozen=True)

    safe: bool
    violations: list[Violation] = Field(default_factory=list)

    @classmethod
    def from_violations(cls, violations: Sequence[Violation]) -> "SecurityReport":
        return cls(safe=not violations, violations=list(violations))


class StructuralReport(BaseModel):
    """Syntax-tree whitelist outcome."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    violations: list[Violation] = Field(default_factory=list)
    components: list[str] = Field(default_factory=list, description="Element tags in first-seen order")
