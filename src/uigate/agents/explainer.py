"""
Explainer
Human-readable rationale for a generated layout.
"""

from collections import Counter

from ..core.logging_config import get_logger
from ..models.plan import GenerationPlan, IntentType
from ..models.version import Explanation
from .planner import count_components

logger = get_logger(__name__)

COMPONENT_REASONS: dict[str, str] = {
    "Header": "Provides clear page title and navigation context at the top of the layout.",
    "Button": "Enables user interaction with clear call-to-action. Different variants (primary/secondary) guide visual hierarchy.",
    "Input": "Collects specific text input from users. Type variants (email, password) provide semantic meaning and appropriate keyboard on mobile.",
    "Select": "Provides constrained selection from predefined options, reducing input errors compared to free-text input.",
    "TextArea": "Allows multi-line text input for longer content like messages, comments, or descriptions.",
    "Modal": "Focuses user attention on critical actions or information by overlaying on the page content.",
    "List": "Displays multiple items in a scannable, organized format. Improves readability for iterable data.",
    "Grid": "Creates responsive multi-column layouts. Naturally adapts to available screen width.",
    "Stack": "Provides flexible directional layout component for organizing content in rows or columns.",
    "Alert": "Communicates status messages, warnings, or errors with color-coded visual indicators for quick recognition.",
    "Divider": "Provides visual separation between content sections without adding layout complexity.",
    "Text": "Ensures semantic text content with consistent typography scaling.",
}

MODIFICATION_REASONS: dict[IntentType, str] = {
    IntentType.CREATE: "Generated new UI based on your requirements.",
    IntentType.MODIFY: "Updated component props and layout to reflect your requested changes while preserving existing structure.",
    IntentType.REMOVE: "Removed specified components from layout and reorganized remaining components for balanced composition.",
    IntentType.REGENERATE: "Regenerated UI with fresh component configuration based on original request and your feedback.",
    IntentType.ROLLBACK: "Restored previous version to specified point in generation history.",
}

CONSTRAINTS: tuple[str, ...] = (
    "Only whitelisted deterministic components are used. Custom components cannot be added.",
    "No inline styles allowed. Use the component library's built-in theming system.",
    "No external JavaScript libraries injected. All interactivity requires parent component handlers.",
    "Generated code is static markup. Add event handlers and state management in parent component.",
    "Component nesting respects allowedChildren constraints defined in component schemas.",
    "All props are validated against component schema during generation.",
)


def _layout_reasoning(plan: GenerationPlan) -> str:
    layout = plan.layout
    direction = (layout.direction if layout else None) or "vertical"
    spacing = (layout.spacing if layout else None) or "md"

    if direction == "vertical":
        reasoning = f"Applied {direction} layout to create a natural top-to-bottom flow, which improves readability and is mobile-friendly."
    else:
        reasoning = f"Applied {direction} layout to arrange components side-by-side, optimizing space usage for larger screens."

    if spacing == "sm":
        reasoning += " Used compact spacing to create a dense, information-rich layout."
    elif spacing == "lg":
        reasoning += " Used spacious spacing to provide breathing room and improve visual hierarchy."
    else:
        reasoning += " Used default spacing for balanced visual separation."
    return reasoning


def _component_reason(kind: str, count: int) -> str:
    if kind == "Card":
        noun = "containers" if count > 1 else "container"
        return f"Encapsulates content in visually distinct {noun} for better visual hierarchy and organization."
    if kind in COMPONENT_REASONS:
        return COMPONENT_REASONS[kind]
    return f"Included in layout ({count} instance{'s' if count != 1 else ''})"


def _tradeoffs(plan: GenerationPlan) -> list[str]:
    kinds = {node.kind for node in plan.iter_nodes()}
    total = count_components(plan.components)
    tradeoffs = []

    if total > 5:
        tradeoffs.append("Multiple components increase visual complexity. Consider grouping into Cards for better organization.")
    if plan.layout is not None and plan.layout.direction == "horizontal" and total > 3:
        tradeoffs.append("Horizontal layout with many components may overflow on smaller screens. Consider responsive breakpoints.")
    if kinds & {"Input", "TextArea"}:
        tradeoffs.append("Form components use standard HTML inputs. Add form state management and validation in parent component.")
    if "Modal" in kinds:
        tradeoffs.append("Modals require state management. Initialize with open={false} and add close handler.")
    if "List" in kinds:
        tradeoffs.append("Lists require data array. Bind items prop to dynamic data and implement renderItem template.")

    if not tradeoffs:
        tradeoffs.append("All components use standard library props. No external dependencies required.")
    return tradeoffs


def explain(message: str, plan: GenerationPlan, code: str) -> Explanation:
    """
    Explain a generated layout.

    Args:
        message: Request text
        plan: Validated plan
        code: Emitted markup

    Returns:
        Explanation with layout, selection and modification reasoning
    """
    counts = Counter(node.kind for node in plan.iter_nodes())
    explanation = Explanation(
        layout_reasoning=_layout_reasoning(plan),
        component_selection_reasoning={kind: _component_reason(kind, n) for kind, n in counts.items()},
        modification_reasoning=MODIFICATION_REASONS.get(plan.intent, "Applied modifications to your UI."),
        tradeoffs=_tradeoffs(plan),
        constraints=list(CONSTRAINTS),
    )
    logger.debug("explanation_generated", kinds=len(counts), code_lines=code.count("\n") + 1, message_length=len(message))
    return explanation


def default_explanation() -> Explanation:
    """Fallback used when explanation generation fails."""
    return Explanation.fallback()


def format_explanation(explanation: Explanation) -> str:
    """Render an explanation as markdown."""
    lines = [
        "## Generation Explanation",
        "",
        "### Layout Reasoning",
        explanation.layout_reasoning,
        "",
        "### Component Selection",
    ]
    lines.extend(f"- **{kind}**: {reason}" for kind, reason in explanation.component_selection_reasoning.items())

    if explanation.modification_reasoning:
        lines.extend(["", "### Modifications", explanation.modification_reasoning])

    lines.extend(["", "### Tradeoffs & Considerations"])
    lines.extend(f"- {tradeoff}" for tradeoff in explanation.tradeoffs)

    lines.extend(["", "### Constraints"])
    lines.extend(f"- {constraint}" for constraint in explanation.constraints)
    return "\n".join(lines) + "\n"
