"""
Markup Syntax Tree
Node types produced by the markup parser. Every node records its source
location and its start/end offsets.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Iterator, Optional, Union

from ..models.violations import Location


@dataclass
class Node:
    loc: Location
    start: int
    end: int

    @property
    def type(self) -> str:
        return type(self).__name__


# Module level

@dataclass
class ImportDecl(Node):
    source: str
    default: Optional[str] = None
    namespace: Optional[str] = None
    names: list[str] = field(default_factory=list)


@dataclass
class FunctionDecl(Node):
    name: Optional[str]
    params: list["Identifier"]
    body: Optional[Node]
    exported: bool = False


@dataclass
class ExportDefault(Node):
    declaration: Node


@dataclass
class Module(Node):
    body: list[Node] = field(default_factory=list)


# JSX

@dataclass
class Text(Node):
    value: str


@dataclass
class ExprContainer(Node):
    expression: Optional[Node]


@dataclass
class Attribute(Node):
    name: str
    value: Optional[Node]


@dataclass
class SpreadAttribute(Node):
    argument: Node


@dataclass
class Element(Node):
    name: str
    attributes: list[Union[Attribute, SpreadAttribute]] = field(default_factory=list)
    children: list[Node] = field(default_factory=list)
    self_closing: bool = False


@dataclass
class Fragment(Node):
    children: list[Node] = field(default_factory=list)


# Expressions

@dataclass
class Identifier(Node):
    name: str


@dataclass
class Literal(Node):
    value: Any
    raw: str


@dataclass
class TemplateLiteral(Node):
    quasis: list[str] = field(default_factory=list)
    expressions: list[Node] = field(default_factory=list)


@dataclass
class MemberExpr(Node):
    object: Node
    property: Node
    computed: bool = False
    optional: bool = False


@dataclass
class CallExpr(Node):
    callee: Node
    arguments: list[Node] = field(default_factory=list)


@dataclass
class NewExpr(Node):
    callee: Node
    arguments: list[Node] = field(default_factory=list)


@dataclass
class ArrayExpr(Node):
    elements: list[Node] = field(default_factory=list)


@dataclass
class ObjectProperty(Node):
    key: Node
    value: Node
    computed: bool = False
    shorthand: bool = False


@dataclass
class ObjectExpr(Node):
    properties: list[Node] = field(default_factory=list)


@dataclass
class ArrowFn(Node):
    params: list[Identifier]
    body: Optional[Node]
    expression: bool = True


@dataclass
class Unary(Node):
    operator: str
    argument: Node


@dataclass
class Binary(Node):
    operator: str
    left: Node
    right: Node


@dataclass
class Conditional(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass
class Spread(Node):
    argument: Node


def iter_children(node: Node) -> Iterator[Node]:
    """Direct child nodes in field order."""
    for f in fields(node):
        if f.name == "loc":
            continue
        value = getattr(node, f.name)
        if isinstance(value, Node):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield item


def walk(node: Node) -> Iterator[Node]:
    """Yield node and all descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(list(iter_children(current))))


def first_element(module: Module) -> Optional[Union[Element, Fragment]]:
    """First element or fragment in pre-order, i.e. the top-level rendered tree."""
    for node in walk(module):
        if isinstance(node, (Element, Fragment)):
            return node
    return None


def member_root(node: Node) -> Optional[Identifier]:
    """Leftmost identifier of a member chain (``window`` in ``window.a.b``)."""
    while isinstance(node, MemberExpr):
        node = node.object
    return node if isinstance(node, Identifier) else None


def callee_name(node: Node) -> Optional[str]:
    """Name a call targets: ``eval`` for ``eval(...)``, ``Function`` for ``window.Function(...)``."""
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, MemberExpr) and not node.computed and isinstance(node.property, Identifier):
        return node.property.name
    return None
