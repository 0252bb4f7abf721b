"""
Structural Validator
Syntax-tree whitelist enforcement on emitted markup.

Independent of the plan validator: it guards against the emitter itself
producing output outside the manifest, not just against bad plans.
"""

import re
from typing import Optional

from ..core.logging_config import get_logger
from ..library.registry import Manifest
from ..markup import ast
from ..markup.parser import MarkupParseError, parse
from ..models.violations import Location, StructuralReport, Violation, ViolationCategory

logger = get_logger(__name__)

DYNAMIC_LOADERS = frozenset({"require", "import", "importScripts"})
EVALUATORS = frozenset({"eval", "Function", "execScript"})
FORBIDDEN_GLOBALS = frozenset({
    "window", "document", "globalThis", "global", "process",
    "self", "localStorage", "sessionStorage", "navigator",
})

_HANDLER_ATTRIBUTE = re.compile(r"^on[A-Z]")


def _violation(category: ViolationCategory, message: str, location: Optional[Location]) -> Violation:
    return Violation(category=category, message=message, location=location)


def _is_string_value(value: Optional[ast.Node]) -> bool:
    if isinstance(value, ast.ExprContainer):
        value = value.expression
    if isinstance(value, ast.TemplateLiteral):
        return True
    return isinstance(value, ast.Literal) and isinstance(value.value, str)


class StructuralValidator:
    """Parses markup and walks every node against the manifest."""

    def __init__(self, manifest: Manifest):
        self.manifest = manifest

    def validate(self, code: str) -> StructuralReport:
        try:
            module = parse(code)
        except MarkupParseError as e:
            logger.info("structural_parse_failed", error=e.message, line=e.location.line)
            return StructuralReport(
                valid=False,
                violations=[_violation(ViolationCategory.SCHEMA_ERROR, f"Parse error: {e.message}", e.location)],
            )

        violations: list[Violation] = []
        components: dict[str, None] = {}
        callee_names: set[int] = set()

        for node in ast.walk(module):
            match node:
                case ast.ImportDecl():
                    self._check_import(node, violations)
                case ast.CallExpr() | ast.NewExpr():
                    self._check_call(node, violations, callee_names)
                case ast.Identifier(name="eval") if id(node) not in callee_names:
                    violations.append(
                        _violation(ViolationCategory.EVAL_USAGE, "Reference to eval is not allowed", node.loc)
                    )
                case ast.MemberExpr(object=ast.Identifier(name=name)) if name in FORBIDDEN_GLOBALS:
                    violations.append(
                        _violation(ViolationCategory.FORBIDDEN_GLOBAL, f"Access to global '{name}' is not allowed", node.loc)
                    )
                case ast.Element():
                    components.setdefault(node.name, None)
                    self._check_element(node, violations)

        report = StructuralReport(valid=not violations, violations=violations, components=list(components))
        logger.debug("structural_validated", valid=report.valid, violations=len(violations))
        return report

    def _check_import(self, node: ast.ImportDecl, violations: list[Violation]) -> None:
        if not self.manifest.allows_import(node.source):
            violations.append(
                _violation(ViolationCategory.FORBIDDEN_IMPORT, f"Import from '{node.source}' is not allowed", node.loc)
            )
            return
        if node.source == self.manifest.ui_library_module:
            for name in node.names:
                if not self.manifest.allows_component(name):
                    violations.append(
                        _violation(
                            ViolationCategory.UNKNOWN_COMPONENT,
                            f"Import of '{name}' from '{node.source}' is not in the component manifest",
                            node.loc,
                        )
                    )

    def _check_call(self, node: ast.Node, violations: list[Violation], callee_names: set[int]) -> None:
        callee = node.callee
        name = ast.callee_name(callee)
        if name is None:
            return
        named = callee if isinstance(callee, ast.Identifier) else callee.property
        verb = "Instantiation" if isinstance(node, ast.NewExpr) else "Call"

        if name in DYNAMIC_LOADERS:
            violations.append(
                _violation(ViolationCategory.DYNAMIC_LOAD, f"{verb} of '{name}' loads code dynamically", node.loc)
            )
        elif name in EVALUATORS:
            callee_names.add(id(named))
            violations.append(
                _violation(ViolationCategory.EVAL_USAGE, f"{verb} of '{name}' evaluates code", node.loc)
            )

    def _check_element(self, node: ast.Element, violations: list[Violation]) -> None:
        known = self.manifest.allows_component(node.name)
        if not known:
            violations.append(
                _violation(
                    ViolationCategory.UNKNOWN_COMPONENT,
                    f"Element <{node.name}> is not in the component manifest",
                    node.loc,
                )
            )

        for attribute in node.attributes:
            if isinstance(attribute, ast.SpreadAttribute):
                violations.append(
                    _violation(ViolationCategory.UNKNOWN_PROP, f"Spread attributes are not allowed on <{node.name}>", attribute.loc)
                )
                continue

            if attribute.name == "style":
                violations.append(
                    _violation(ViolationCategory.INLINE_STYLE, f"Inline style on <{node.name}> is not allowed", attribute.loc)
                )
            elif _HANDLER_ATTRIBUTE.match(attribute.name) and _is_string_value(attribute.value):
                violations.append(
                    _violation(
                        ViolationCategory.INLINE_HANDLER,
                        f"Inline handler '{attribute.name}' on <{node.name}> is not allowed",
                        attribute.loc,
                    )
                )

            if known and not self.manifest.allows_attribute(node.name, attribute.name):
                violations.append(
                    _violation(
                        ViolationCategory.UNKNOWN_PROP,
                        f"<{node.name}> does not declare attribute '{attribute.name}'",
                        attribute.loc,
                    )
                )
