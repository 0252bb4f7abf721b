"""
Plan Validator
Checks a generation plan against the component schemas before any markup exists.
"""

import re
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from ..core.config import Settings, get_settings
from ..core.errors import InputValidationError
from ..core.logging_config import get_logger
from ..core.validate import validate_json_depth
from ..models.plan import ComponentNode, GenerationPlan
from ..models.violations import ValidationResult, Violation, ViolationCategory
from .registry import SchemaRegistry
from .schemas import ComponentSchema, PropKind, PropSpec

logger = get_logger(__name__)

DIRECTIONS = frozenset({"horizontal", "vertical"})
SPACINGS = frozenset({"sm", "md", "lg"})

_HANDLER_NAME = re.compile(r"^[A-Za-z_$][\w$]*$")


def _schema_error(message: str, path: str) -> Violation:
    return Violation(category=ViolationCategory.SCHEMA_ERROR, message=message, path=path)


def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


class PlanValidator:
    """
    Whitelist check of a plan tree.

    Collects every violation rather than stopping at the first, so callers
    can show exactly which rules failed.
    """

    def __init__(self, registry: SchemaRegistry, settings: Optional[Settings] = None) -> None:
        self.registry = registry
        self.max_depth = (settings or get_settings()).max_plan_depth

    def validate(self, plan: Union[GenerationPlan, Mapping[str, Any]]) -> ValidationResult:
        """
        Validate a plan or a plan-shaped mapping.

        Args:
            plan: GenerationPlan instance or raw mapping

        Returns:
            ValidationResult, valid iff there are no violations
        """
        if not isinstance(plan, GenerationPlan):
            try:
                plan = GenerationPlan.model_validate(plan)
            except ValidationError as e:
                violations = [
                    _schema_error(err["msg"], ".".join(str(part) for part in err["loc"]) or "plan")
                    for err in e.errors()
                ]
                logger.info("plan_coercion_failed", violations=len(violations))
                return ValidationResult.from_violations(violations)

        violations: list[Violation] = []

        if not plan.components:
            violations.append(_schema_error("Plan must contain at least one component", "components"))

        seen_ids: set[str] = set()
        for index, node in enumerate(plan.components):
            self._check_node(node, f"components[{index}]", None, 1, seen_ids, violations)

        if plan.layout is not None:
            direction, spacing = plan.layout.direction, plan.layout.spacing
            if direction is not None and direction not in DIRECTIONS:
                violations.append(_schema_error(f"Invalid layout direction: {direction}", "layout.direction"))
            if spacing is not None and spacing not in SPACINGS:
                violations.append(_schema_error(f"Invalid layout spacing: {spacing}", "layout.spacing"))

        result = ValidationResult.from_violations(violations)
        logger.debug("plan_validated", valid=result.valid, violations=len(violations))
        return result

    def _check_node(
        self,
        node: ComponentNode,
        path: str,
        parent: Optional[ComponentSchema],
        depth: int,
        seen_ids: set[str],
        violations: list[Violation],
    ) -> None:
        if depth > self.max_depth:
            violations.append(_schema_error(f"Plan nesting exceeds maximum depth {self.max_depth}", path))
            return

        if node.id in seen_ids:
            violations.append(_schema_error(f"Duplicate component id: {node.id}", f"{path}.id"))
        seen_ids.add(node.id)

        schema = self.registry.get(node.kind)
        if schema is None:
            # Nothing is known about an unknown kind's subtree; report it once
            violations.append(
                Violation(
                    category=ViolationCategory.UNKNOWN_COMPONENT,
                    message=f"Component '{node.kind}' is not in the component library",
                    path=path,
                )
            )
            return

        self._check_props(node, schema, path, violations)

        if parent is not None and not (parent.accepts_child(schema.name) and schema.accepts_parent(parent.name)):
            violations.append(_schema_error(f"{schema.name} cannot be nested inside {parent.name}", path))

        constraints = schema.constraints
        count = len(node.children)
        if constraints.min_children is not None and count < constraints.min_children:
            violations.append(
                _schema_error(f"{schema.name} needs at least {constraints.min_children} children, got {count}", f"{path}.children")
            )
        if constraints.max_children is not None and count > constraints.max_children:
            violations.append(
                _schema_error(f"{schema.name} allows at most {constraints.max_children} children, got {count}", f"{path}.children")
            )

        for index, child in enumerate(node.children):
            if isinstance(child, ComponentNode):
                self._check_node(child, f"{path}.children[{index}]", schema, depth + 1, seen_ids, violations)

    def _check_props(
        self,
        node: ComponentNode,
        schema: ComponentSchema,
        path: str,
        violations: list[Violation],
    ) -> None:
        for name in schema.required_props:
            if node.props.get(name) is None:
                violations.append(
                    _schema_error(f"{schema.name} is missing required prop '{name}'", f"{path}.props.{name}")
                )

        for name, value in node.props.items():
            prop_path = f"{path}.props.{name}"
            spec = schema.props.get(name)
            if spec is None:
                violations.append(
                    Violation(
                        category=ViolationCategory.UNKNOWN_PROP,
                        message=f"{schema.name} does not declare prop '{name}'",
                        path=prop_path,
                    )
                )
                continue
            if value is None:
                continue
            problem = self._check_value(spec, value)
            if problem:
                violations.append(_schema_error(f"{schema.name}.{name}: {problem}", prop_path))

    def _check_value(self, spec: PropSpec, value: Any) -> Optional[str]:
        """Return a description of the type problem, or None when the value fits."""
        actual = _type_name(value)
        match spec.kind:
            case PropKind.STRING:
                ok = actual == "string"
            case PropKind.NUMBER:
                ok = actual == "number"
            case PropKind.BOOLEAN:
                ok = actual == "boolean"
            case PropKind.ARRAY:
                ok = actual == "array"
            case PropKind.OBJECT:
                ok = actual == "object"
            case PropKind.ENUM:
                if actual != "string" or value not in (spec.values or ()):
                    return f"expected one of {list(spec.values or ())}, got {value!r}"
                return None
            case PropKind.HANDLER:
                if actual != "string" or not _HANDLER_NAME.match(value):
                    return f"expected a handler identifier, got {value!r}"
                return None
            case _:
                ok = False

        if not ok:
            return f"expected {spec.kind.value}, got {actual}"

        if actual in ("array", "object"):
            try:
                validate_json_depth(value, self.max_depth)
            except InputValidationError as e:
                return e.message
        return None
