"""
Code Emitter
Renders a validated plan as a component module.
"""

from typing import Any, Optional

from ..core.config import Settings, get_settings
from ..core.json import safe_json_dumps
from ..core.logging_config import get_logger
from ..library.registry import SchemaRegistry
from ..models.plan import ComponentNode, GenerationPlan

logger = get_logger(__name__)

ROOT_KIND = "Stack"
COMPONENT_NAME = "GeneratedUI"
INDENT = "  "

_ENTITIES = {
    "&": "&amp;",
    '"': "&quot;",
    "<": "&lt;",
    ">": "&gt;",
    "{": "&#123;",
    "}": "&#125;",
}


def escape_text(value: str) -> str:
    """Entity-escape text for use in an attribute string or element body."""
    return "".join(_ENTITIES.get(ch, ch) for ch in value)


class CodeEmitter:
    """
    Plan -> markup.

    Output depends only on the plan, so a plan always renders to the same bytes.
    """

    def __init__(self, registry: SchemaRegistry, settings: Optional[Settings] = None):
        self.registry = registry
        self.library_module = (settings or get_settings()).ui_library_module

    def emit(self, plan: GenerationPlan) -> str:
        kinds = sorted({ROOT_KIND} | {node.kind for node in plan.iter_nodes()})
        direction = (plan.layout.direction if plan.layout else None) or "vertical"
        spacing = (plan.layout.spacing if plan.layout else None) or "md"

        lines = [
            "import React from 'react';",
            f"import {{ {', '.join(kinds)} }} from '{self.library_module}';",
            "",
            f"export default function {COMPONENT_NAME}() {{",
            f"{INDENT}return (",
            f'{INDENT * 2}<{ROOT_KIND} direction="{escape_text(direction)}" spacing="{escape_text(spacing)}">',
        ]
        for node in plan.components:
            self._render(node, 3, lines)
        lines.extend([
            f"{INDENT * 2}</{ROOT_KIND}>",
            f"{INDENT});",
            "}",
        ])

        code = "\n".join(lines) + "\n"
        logger.debug("code_emitted", kinds=len(kinds), lines=len(lines))
        return code

    def _ordered_props(self, node: ComponentNode) -> list[tuple[str, Any]]:
        schema = self.registry.get(node.kind)
        declared = list(schema.props) if schema else []
        ordered = [(name, node.props[name]) for name in declared if name in node.props]
        ordered.extend(sorted(((k, v) for k, v in node.props.items() if k not in declared), key=lambda item: item[0]))
        return ordered

    def _render(self, node: ComponentNode, depth: int, lines: list[str]) -> None:
        pad = INDENT * depth
        attributes: list[str] = []
        text: Optional[str] = None

        for name, value in self._ordered_props(node):
            if value is None:
                continue
            if name == "children" and isinstance(value, str):
                text = value
            elif isinstance(value, str):
                attributes.append(f'{name}="{escape_text(value)}"')
            else:
                attributes.append(f"{name}={{{safe_json_dumps(value)}}}")

        opening = node.kind + "".join(f" {attr}" for attr in attributes)

        if not node.children and text is None:
            lines.append(f"{pad}<{opening} />")
            return
        if not node.children:
            lines.append(f"{pad}<{opening}>{escape_text(text)}</{node.kind}>")
            return

        lines.append(f"{pad}<{opening}>")
        if text is not None:
            lines.append(f"{pad}{INDENT}{escape_text(text)}")
        for child in node.children:
            if isinstance(child, ComponentNode):
                self._render(child, depth + 1, lines)
            else:
                lines.append(f"{pad}{INDENT}{escape_text(child)}")
        lines.append(f"{pad}</{node.kind}>")
