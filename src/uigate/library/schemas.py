"""
Component Schema Types
Prop and nesting contracts for whitelisted components.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PropKind(str, Enum):
    """Value kinds a prop may declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    HANDLER = "handler"
    ARRAY = "array"
    OBJECT = "object"


class PropSpec(BaseModel):
    """Declaration of a single prop."""

    model_config = ConfigDict(frozen=True)

    kind: PropKind
    required: bool = False
    default: Any = None
    values: Optional[tuple[str, ...]] = Field(default=None, description="Enum members")
    description: str = ""


class StructuralConstraints(BaseModel):
    """Nesting rules. None means unconstrained."""

    model_config = ConfigDict(frozen=True)

    max_children: Optional[int] = Field(default=None, ge=0)
    min_children: Optional[int] = Field(default=None, ge=0)
    allowed_parents: Optional[tuple[str, ...]] = None
    allowed_children: Optional[tuple[str, ...]] = None


class ComponentSchema(BaseModel):
    """Everything the pipeline knows about one component kind."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    description: str = ""
    props: dict[str, PropSpec] = Field(default_factory=dict)
    constraints: StructuralConstraints = Field(default_factory=StructuralConstraints)

    @property
    def prop_names(self) -> tuple[str, ...]:
        return tuple(self.props)

    @property
    def required_props(self) -> tuple[str, ...]:
        return tuple(name for name, spec in self.props.items() if spec.required)

    def accepts_child(self, kind: str) -> bool:
        allowed = self.constraints.allowed_children
        return allowed is None or kind in allowed

    def accepts_parent(self, kind: str) -> bool:
        allowed = self.constraints.allowed_parents
        return allowed is None or kind in allowed
