"""
Plan Generator
Deterministic keyword-driven planning of a component tree.
"""

import re
from typing import Any, Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field

from ..core.hash import hash_fields
from ..core.logging_config import get_logger
from ..models.plan import ComponentNode, GenerationPlan, IntentType, LayoutHints
from .intent import extract_entities

logger = get_logger(__name__)

DEFAULT_TITLE = "Application"

_QUOTED = re.compile(r'"([^"]+)"')
_TITLE_PATTERN = re.compile(r'(?:title|called|named)\s+(?:")?([^".,]+)', re.IGNORECASE)

# Vocabulary term -> (kind, default props). "form" has no component of its own.
DEFAULT_COMPONENTS: dict[str, tuple[str, dict[str, Any]]] = {
    "button": ("Button", {"children": "Click Me", "variant": "primary"}),
    "card": ("Card", {"title": "Card Title"}),
    "header": ("Header", {"title": "Header", "showNav": False}),
    "input": ("Input", {"label": "Input", "type": "text", "placeholder": "Enter text"}),
    "select": ("Select", {"label": "Select", "options": ["Option 1", "Option 2", "Option 3"]}),
    "modal": ("Modal", {"title": "Modal", "open": True}),
    "list": ("List", {"items": ["Item 1", "Item 2", "Item 3"], "renderItem": "item"}),
    "grid": ("Grid", {"columns": 2, "gap": "md"}),
    "stack": ("Stack", {"direction": "vertical", "spacing": "md"}),
    "alert": ("Alert", {"message": "Alert message", "type": "info"}),
    "divider": ("Divider", {"spacing": "md"}),
    "textarea": ("TextArea", {"label": "Message", "placeholder": "Enter text", "rows": 4}),
}

# (trigger word, id prefix, props) in emission order
FORM_FIELDS: tuple[tuple[str, str, dict[str, Any]], ...] = (
    ("email", "input_email", {"label": "Email", "type": "email", "placeholder": "Enter your email"}),
    ("password", "input_password", {"label": "Password", "type": "password", "placeholder": "Enter your password"}),
    ("name", "input_name", {"label": "Name", "type": "text", "placeholder": "Enter your name"}),
)


class PlanComplexity(BaseModel):
    """Size estimate for a plan."""

    model_config = ConfigDict(frozen=True)

    complexity: Literal["simple", "moderate", "complex"]
    component_count: int = Field(ge=0)
    estimated_loc: int = Field(ge=0)


def extract_title(message: str) -> str:
    """Quoted text, then a title/called/named phrase, else the default title."""
    quoted = _QUOTED.search(message)
    if quoted:
        return quoted.group(1)
    named = _TITLE_PATTERN.search(message)
    if named:
        return named.group(1).strip()
    return DEFAULT_TITLE


def count_components(nodes: Iterable[ComponentNode]) -> int:
    """Count nodes including every nested descendant."""
    return sum(1 + count_components(node.child_nodes()) for node in nodes)


def estimate_complexity(plan: GenerationPlan) -> PlanComplexity:
    count = count_components(plan.components)
    if count <= 3:
        complexity = "simple"
    elif count <= 8:
        complexity = "moderate"
    else:
        complexity = "complex"
    return PlanComplexity(complexity=complexity, component_count=count, estimated_loc=count * 8 + 20)


class PlanGenerator:
    """
    Turns request text into a GenerationPlan.

    The same message always yields the same plan: node ids are hashed from
    the message and the emission sequence instead of drawn at random.
    """

    def plan(self, message: str, intent: IntentType = IntentType.CREATE) -> GenerationPlan:
        """
        Build a plan for a request.

        Args:
            message: Sanitized request text
            intent: Classified intent, recorded on the plan

        Returns:
            Unvalidated GenerationPlan
        """
        lowered = message.lower()
        entities = extract_entities(message)
        sequence = 0

        def node(prefix: str, kind: str, props: dict[str, Any], children: list[ComponentNode] | None = None) -> ComponentNode:
            nonlocal sequence
            sequence += 1
            node_id = f"{prefix}_{hash_fields(message, str(sequence), truncate=8)}"
            return ComponentNode(id=node_id, kind=kind, props=props, children=children or [])

        direction = "horizontal" if "horizontal" in lowered else "vertical"
        if "compact" in lowered:
            spacing = "sm"
        elif "spacious" in lowered:
            spacing = "lg"
        else:
            spacing = "md"

        components: list[ComponentNode] = []

        if any(word in lowered for word in ("header", "title", "top")):
            components.append(
                node("header", "Header", {"title": extract_title(message), "showNav": "nav" in lowered})
            )

        if "form" in lowered or "login" in lowered:
            for trigger, prefix, props in FORM_FIELDS:
                if trigger in lowered:
                    components.append(node(prefix, "Input", dict(props)))
            components.append(
                node("button_submit", "Button", {"children": "Submit", "variant": "primary", "fullWidth": True})
            )

        for term in entities.components:
            default = DEFAULT_COMPONENTS.get(term)
            if default is None:
                continue
            kind, props = default
            if any(existing.kind == kind for existing in components):
                continue
            components.append(node(term, kind, dict(props)))

        if len(components) > 1 and "card" not in lowered:
            wrapper = node("card", "Card", {"title": "Content"}, components[1:])
            components = [components[0], wrapper]
        elif not components:
            components = [node("card", "Card", {"title": "Content"})]

        plan = GenerationPlan(
            intent=intent,
            components=components,
            layout=LayoutHints(direction=direction, spacing=spacing),
            description=f"Layout with {len(components)} components in {direction} direction",
        )
        logger.debug(
            "plan_generated",
            intent=intent.value,
            roots=len(components),
            components=count_components(components),
            layout_hints=entities.layout_hints,
            style_hints=entities.style_hints,
        )
        return plan
