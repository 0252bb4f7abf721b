"""Plan Data Models."""

from enum import Enum
from typing import Any, Iterator, Union

from pydantic import BaseModel, ConfigDict, Field


class IntentType(str, Enum):
    """Request intents, in tie-breaking order."""

    CREATE = "create"
    MODIFY = "modify"
    REMOVE = "remove"
    REGENERATE = "regenerate"
    ROLLBACK = "rollback"


class ComponentNode(BaseModel):
    """One component in a plan tree."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique within the plan")
    kind: str = Field(..., description="SchemaRegistry key")
    props: dict[str, Any] = Field(default_factory=dict)
    children: list[Union["ComponentNode", str]] = Field(default_factory=list)

    def child_nodes(self) -> list["ComponentNode"]:
        """Children that are components (literal text excluded)."""
        return [c for c in self.children if isinstance(c, ComponentNode)]


class LayoutHints(BaseModel):
    """Root layout. Plain strings so out-of-range values reach the validator."""

    model_config = ConfigDict(frozen=True)

    direction: str | None = "vertical"
    spacing: str | None = "md"


class GenerationPlan(BaseModel):
    """Validated intermediate tree emitted as markup."""

    model_config = ConfigDict(frozen=True)

    intent: IntentType = IntentType.CREATE
    components: list[ComponentNode] = Field(default_factory=list)
    layout: LayoutHints | None = Field(default_factory=LayoutHints)
    description: str = ""

    def iter_nodes(self) -> Iterator[ComponentNode]:
        """Yield every node in tree (pre-)order."""
        stack = list(reversed(self.components))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.child_nodes()))


ComponentNode.model_rebuild()
