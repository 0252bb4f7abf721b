"""
Markup Parser
Scannerless recursive-descent parser for the restricted component module
format the emitter produces: imports, one exported render function and a
JSX tree with a small expression language. Everything else is rejected.
"""

import bisect
import html
import re
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from ..core.logging_config import get_logger
from ..models.violations import Location
from . import ast

logger = get_logger(__name__)

T = TypeVar("T", bound=ast.Node)

# Nested expressions and elements; keeps parsing well inside the interpreter stack
MAX_NESTING_DEPTH = 40

_IDENT = re.compile(r"[A-Za-z_$][\w$]*")
_JSX_IDENT = re.compile(r"[A-Za-z_$][\w$-]*")
_NUMBER = re.compile(r"0[xX][0-9a-fA-F]+|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_WS = re.compile(r"\s+")
_JSX_TEXT = re.compile(r"[^<{]*")

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}

# Operators by precedence, loosest first
_BINARY_LEVELS: tuple[tuple[str, ...], ...] = (
    ("??",),
    ("||",),
    ("&&",),
    ("===", "!==", "==", "!="),
    ("<=", ">=", "<", ">", "instanceof", "in"),
    ("+", "-"),
    ("*", "/", "%"),
)
_UNARY = ("!", "-", "+", "~", "typeof", "void")
_WORD_LITERALS = {"true": True, "false": False, "null": None, "undefined": None}
_RESERVED = frozenset({
    "function", "return", "export", "import", "class", "var", "let", "const", "if", "else",
    "for", "while", "do", "switch", "case", "break", "continue", "try", "catch", "finally",
    "throw", "delete", "yield", "await", "async", "with", "debugger", "this", "super",
    "default", "extends", "new", "typeof", "void", "instanceof", "in",
})


class MarkupParseError(Exception):
    """Source outside the supported subset, with the position it was found at."""

    def __init__(self, message: str, location: Location):
        super().__init__(f"{message} (line {location.line}, column {location.column})")
        self.message = message
        self.location = location


class MarkupParser:
    """
    Single-use parser over one source string.

    Prefer the module-level ``parse`` function.
    """

    def __init__(self, source: str):
        self.src = source
        self.pos = 0
        self.depth = 0
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", source)]

    # Positions

    def location(self, offset: int) -> Location:
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Location(line=line + 1, column=offset - self._line_starts[line])

    def error(self, message: str, offset: Optional[int] = None) -> MarkupParseError:
        return MarkupParseError(message, self.location(self.pos if offset is None else offset))

    def make(self, cls: Callable[..., T], start: int, **kwargs) -> T:
        return cls(loc=self.location(start), start=start, end=self.pos, **kwargs)

    @contextmanager
    def nested(self) -> Iterator[None]:
        if self.depth >= MAX_NESTING_DEPTH:
            raise self.error(f"Nesting deeper than {MAX_NESTING_DEPTH} levels")
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    # Low-level scanning

    def skip(self) -> None:
        """Skip whitespace and comments."""
        while self.pos < len(self.src):
            m = _WS.match(self.src, self.pos)
            if m:
                self.pos = m.end()
                continue
            if self.src.startswith("//", self.pos):
                newline = self.src.find("\n", self.pos)
                self.pos = len(self.src) if newline < 0 else newline + 1
                continue
            if self.src.startswith("/*", self.pos):
                close = self.src.find("*/", self.pos + 2)
                if close < 0:
                    raise self.error("Unterminated comment")
                self.pos = close + 2
                continue
            break

    def at_end(self) -> bool:
        self.skip()
        return self.pos >= len(self.src)

    def peek(self, token: str) -> bool:
        self.skip()
        if not self.src.startswith(token, self.pos):
            return False
        if _IDENT.fullmatch(token):
            # keywords must not run into a longer identifier
            after = self.pos + len(token)
            return after >= len(self.src) or not re.match(r"[\w$]", self.src[after])
        return True

    def accept(self, token: str) -> bool:
        if self.peek(token):
            self.pos += len(token)
            return True
        return False

    def expect(self, token: str) -> None:
        if not self.accept(token):
            found = self.src[self.pos:self.pos + 10] or "end of input"
            raise self.error(f"Expected '{token}' but found '{found}'")

    def identifier(self, allow_reserved: bool = False) -> ast.Identifier:
        self.skip()
        start = self.pos
        m = _IDENT.match(self.src, self.pos)
        if not m:
            raise self.error("Expected identifier")
        if not allow_reserved and m.group() in _RESERVED:
            raise self.error(f"Unsupported syntax: '{m.group()}'")
        self.pos = m.end()
        return self.make(ast.Identifier, start, name=m.group())

    def string_literal(self) -> ast.Literal:
        self.skip()
        start = self.pos
        quote = self.src[self.pos:self.pos + 1]
        if quote not in ("'", '"'):
            raise self.error("Expected string literal")
        self.pos += 1
        chars: list[str] = []
        while True:
            if self.pos >= len(self.src) or self.src[self.pos] == "\n":
                raise self.error("Unterminated string literal", start)
            ch = self.src[self.pos]
            if ch == quote:
                self.pos += 1
                break
            if ch == "\\":
                chars.append(self._escape())
                continue
            chars.append(ch)
            self.pos += 1
        return self.make(ast.Literal, start, value="".join(chars), raw=self.src[start:self.pos])

    def _escape(self) -> str:
        self.pos += 1
        if self.pos >= len(self.src):
            raise self.error("Unterminated escape sequence")
        ch = self.src[self.pos]
        if ch == "u":
            digits = self.src[self.pos + 1:self.pos + 5]
            if not re.fullmatch(r"[0-9a-fA-F]{4}", digits):
                raise self.error("Invalid unicode escape")
            self.pos += 5
            return chr(int(digits, 16))
        if ch == "x":
            digits = self.src[self.pos + 1:self.pos + 3]
            if not re.fullmatch(r"[0-9a-fA-F]{2}", digits):
                raise self.error("Invalid hex escape")
            self.pos += 3
            return chr(int(digits, 16))
        self.pos += 1
        return _ESCAPES.get(ch, ch)

    # Module

    def parse_module(self) -> ast.Module:
        start = 0
        body: list[ast.Node] = []
        while not self.at_end():
            if self.peek("import") and not self._lookahead_call():
                body.append(self.import_decl())
            elif self.peek("export"):
                body.append(self.export_default())
            elif self.peek("function"):
                body.append(self.function_decl())
            else:
                body.append(self.expression())
                self.accept(";")
        return ast.Module(loc=self.location(start), start=start, end=len(self.src), body=body)

    def _lookahead_call(self) -> bool:
        saved = self.pos
        self.expect("import")
        is_call = self.peek("(")
        self.pos = saved
        return is_call

    def import_decl(self) -> ast.ImportDecl:
        self.skip()
        start = self.pos
        self.expect("import")
        default = namespace = None
        names: list[str] = []

        self.skip()
        if self.src[self.pos:self.pos + 1] not in ("'", '"'):
            if self.accept("*"):
                self.expect("as")
                namespace = self.identifier().name
            elif self.peek("{"):
                names = self._named_imports()
            else:
                default = self.identifier().name
                if self.accept(","):
                    if self.accept("*"):
                        self.expect("as")
                        namespace = self.identifier().name
                    else:
                        names = self._named_imports()
            self.expect("from")

        source = self.string_literal()
        self.accept(";")
        return self.make(ast.ImportDecl, start, source=source.value, default=default, namespace=namespace, names=names)

    def _named_imports(self) -> list[str]:
        self.expect("{")
        names: list[str] = []
        while not self.accept("}"):
            imported = self.identifier(allow_reserved=True).name
            if self.accept("as"):
                self.identifier()
            names.append(imported)
            if not self.accept(","):
                self.expect("}")
                break
        return names

    def export_default(self) -> ast.Node:
        self.skip()
        start = self.pos
        self.expect("export")
        self.expect("default")
        if self.peek("function"):
            declaration = self.function_decl(exported=True)
        else:
            declaration = self.expression()
            self.accept(";")
        return self.make(ast.ExportDefault, start, declaration=declaration)

    def function_decl(self, exported: bool = False) -> ast.FunctionDecl:
        self.skip()
        start = self.pos
        self.expect("function")
        name = None
        if not self.peek("("):
            name = self.identifier().name
        params = self._params()
        body = self._return_block()
        return self.make(ast.FunctionDecl, start, name=name, params=params, body=body, exported=exported)

    def _params(self) -> list[ast.Identifier]:
        self.expect("(")
        params: list[ast.Identifier] = []
        while not self.accept(")"):
            params.append(self.identifier())
            if not self.accept(","):
                self.expect(")")
                break
        return params

    def _return_block(self) -> Optional[ast.Node]:
        """``{ return <expr>; }`` or an empty block."""
        self.expect("{")
        if self.accept("}"):
            return None
        self.expect("return")
        value = self.expression()
        self.accept(";")
        self.expect("}")
        return value

    # Expressions

    def expression(self) -> ast.Node:
        with self.nested():
            return self._conditional()

    def _conditional(self) -> ast.Node:
        self.skip()
        start = self.pos
        test = self.binary(0)
        if self.peek("??") or not self.accept("?"):
            return test
        consequent = self.expression()
        self.expect(":")
        alternate = self.expression()
        return self.make(ast.Conditional, start, test=test, consequent=consequent, alternate=alternate)

    def binary(self, level: int) -> ast.Node:
        if level >= len(_BINARY_LEVELS):
            return self.unary()
        self.skip()
        start = self.pos
        left = self.binary(level + 1)
        while True:
            if isinstance(left, (ast.Element, ast.Fragment)) and self.peek("<"):
                # adjacent element, not a comparison
                return left
            operator = self._binary_operator(_BINARY_LEVELS[level])
            if operator is None:
                return left
            right = self.binary(level + 1)
            left = self.make(ast.Binary, start, operator=operator, left=left, right=right)

    def _binary_operator(self, operators: tuple[str, ...]) -> Optional[str]:
        self.skip()
        for op in operators:
            if not self.peek(op):
                continue
            # "=>" and "=" belong to other productions; "?." is optional chaining
            following = self.src[self.pos + len(op):self.pos + len(op) + 1]
            if op in ("<", ">") and following == "=":
                continue
            if op in ("==", "!=") and following == "=":
                continue
            if op == "<" and following in ("/",):
                continue
            self.pos += len(op)
            return op
        return None

    def unary(self) -> ast.Node:
        prefixes: list[tuple[str, int]] = []
        while True:
            self.skip()
            start = self.pos
            op = next((op for op in _UNARY if self.peek(op)), None)
            if op is None:
                break
            if op in ("-", "+") and self.src.startswith(op * 2, self.pos):
                raise self.error(f"Unsupported operator '{op * 2}'")
            self.pos += len(op)
            prefixes.append((op, start))

        node = self.postfix()
        for op, start in reversed(prefixes):
            node = self.make(ast.Unary, start, operator=op, argument=node)
        return node

    def postfix(self) -> ast.Node:
        self.skip()
        start = self.pos
        node = self.primary()
        while True:
            if self.accept("?."):
                if self.peek("("):
                    node = self.make(ast.CallExpr, start, callee=node, arguments=self._arguments())
                else:
                    prop = self.identifier(allow_reserved=True)
                    node = self.make(ast.MemberExpr, start, object=node, property=prop, optional=True)
            elif self.accept("."):
                prop = self.identifier(allow_reserved=True)
                node = self.make(ast.MemberExpr, start, object=node, property=prop)
            elif self.accept("["):
                prop = self.expression()
                self.expect("]")
                node = self.make(ast.MemberExpr, start, object=node, property=prop, computed=True)
            elif self.peek("("):
                node = self.make(ast.CallExpr, start, callee=node, arguments=self._arguments())
            elif self.peek("`"):
                raise self.error("Unsupported syntax: tagged template")
            else:
                return node

    def _arguments(self) -> list[ast.Node]:
        self.expect("(")
        args: list[ast.Node] = []
        while not self.accept(")"):
            args.append(self._spread_or_expression())
            if not self.accept(","):
                self.expect(")")
                break
        return args

    def _spread_or_expression(self) -> ast.Node:
        self.skip()
        start = self.pos
        if self.accept("..."):
            argument = self.expression()
            return self.make(ast.Spread, start, argument=argument)
        return self.expression()

    def primary(self) -> ast.Node:
        self.skip()
        start = self.pos
        if self.pos >= len(self.src):
            raise self.error("Unexpected end of input")
        ch = self.src[self.pos]

        if ch in ("'", '"'):
            return self.string_literal()
        if ch == "`":
            return self.template_literal()
        if ch == "<":
            return self.jsx_element()
        if ch == "[":
            return self.array_literal()
        if ch == "{":
            return self.object_literal()
        if ch == "(":
            arrow = self._try_arrow()
            if arrow is not None:
                return arrow
            self.pos += 1
            inner = self.expression()
            self.expect(")")
            return inner

        m = _NUMBER.match(self.src, self.pos)
        if m and (ch.isdigit() or ch == "."):
            self.pos = m.end()
            raw = m.group()
            value = int(raw, 16) if raw[:2].lower() == "0x" else float(raw)
            if isinstance(value, float) and value.is_integer() and re.fullmatch(r"\d+", raw):
                value = int(raw)
            return self.make(ast.Literal, start, value=value, raw=raw)

        m = _IDENT.match(self.src, self.pos)
        if m:
            word = m.group()
            if word in _WORD_LITERALS:
                self.pos = m.end()
                return self.make(ast.Literal, start, value=_WORD_LITERALS[word], raw=word)
            if word == "new":
                return self.new_expression()
            if word == "import":
                # dynamic import() is parsed so the structural validator can flag it
                self.pos = m.end()
                if not self.peek("("):
                    raise self.error("Unsupported syntax: 'import'", start)
                return self.make(ast.Identifier, start, name="import")
            if word not in _RESERVED:
                arrow = self._try_arrow()
                if arrow is not None:
                    return arrow
            return self.identifier()

        raise self.error(f"Unexpected character '{ch}'")

    def new_expression(self) -> ast.NewExpr:
        self.skip()
        start = self.pos
        self.expect("new")
        self.skip()
        callee_start = self.pos
        callee: ast.Node = self.identifier(allow_reserved=self.peek("import"))
        while True:
            if self.accept("."):
                prop = self.identifier(allow_reserved=True)
                callee = self.make(ast.MemberExpr, callee_start, object=callee, property=prop)
            elif self.accept("["):
                prop = self.expression()
                self.expect("]")
                callee = self.make(ast.MemberExpr, callee_start, object=callee, property=prop, computed=True)
            else:
                break
        args = self._arguments() if self.peek("(") else []
        return self.make(ast.NewExpr, start, callee=callee, arguments=args)

    def _try_arrow(self) -> Optional[ast.ArrowFn]:
        """Parse an arrow function if one starts here, else rewind and return None."""
        self.skip()
        start = self.pos
        try:
            if self.peek("("):
                params = self._params()
            else:
                params = [self.identifier()]
            if not self.accept("=>"):
                self.pos = start
                return None
        except MarkupParseError:
            self.pos = start
            return None

        if self.peek("{"):
            body = self._return_block()
            return self.make(ast.ArrowFn, start, params=params, body=body, expression=False)
        body = self.expression()
        return self.make(ast.ArrowFn, start, params=params, body=body, expression=True)

    def template_literal(self) -> ast.TemplateLiteral:
        start = self.pos
        self.pos += 1
        quasis: list[str] = []
        expressions: list[ast.Node] = []
        chunk: list[str] = []
        while True:
            if self.pos >= len(self.src):
                raise self.error("Unterminated template literal", start)
            ch = self.src[self.pos]
            if ch == "`":
                self.pos += 1
                quasis.append("".join(chunk))
                break
            if ch == "\\":
                chunk.append(self._escape())
                continue
            if self.src.startswith("${", self.pos):
                self.pos += 2
                quasis.append("".join(chunk))
                chunk = []
                expressions.append(self.expression())
                self.expect("}")
                continue
            chunk.append(ch)
            self.pos += 1
        return self.make(ast.TemplateLiteral, start, quasis=quasis, expressions=expressions)

    def array_literal(self) -> ast.ArrayExpr:
        start = self.pos
        self.expect("[")
        elements: list[ast.Node] = []
        while not self.accept("]"):
            elements.append(self._spread_or_expression())
            if not self.accept(","):
                self.expect("]")
                break
        return self.make(ast.ArrayExpr, start, elements=elements)

    def object_literal(self) -> ast.ObjectExpr:
        start = self.pos
        self.expect("{")
        properties: list[ast.Node] = []
        while not self.accept("}"):
            properties.append(self._object_member())
            if not self.accept(","):
                self.expect("}")
                break
        return self.make(ast.ObjectExpr, start, properties=properties)

    def _object_member(self) -> ast.Node:
        self.skip()
        start = self.pos
        if self.accept("..."):
            return self.make(ast.Spread, start, argument=self.expression())

        computed = False
        key: ast.Node
        if self.accept("["):
            key = self.expression()
            self.expect("]")
            computed = True
        elif self.src[self.pos:self.pos + 1] in ("'", '"'):
            key = self.string_literal()
        elif _NUMBER.match(self.src, self.pos) and self.src[self.pos].isdigit():
            key = self.primary()
        else:
            key = self.identifier(allow_reserved=True)

        if self.accept(":"):
            value = self.expression()
            return self.make(ast.ObjectProperty, start, key=key, value=value, computed=computed)
        if isinstance(key, ast.Identifier) and not computed:
            if key.name in _RESERVED:
                raise self.error(f"Unsupported syntax: '{key.name}'", start)
            return self.make(ast.ObjectProperty, start, key=key, value=key, shorthand=True)
        raise self.error("Expected ':' in object literal")

    # JSX

    def jsx_element(self) -> ast.Node:
        with self.nested():
            return self._jsx_element()

    def _jsx_element(self) -> ast.Node:
        start = self.pos
        self.expect("<")
        if self.accept(">"):
            children = self._jsx_children()
            self.expect("<")
            self.expect("/")
            self.expect(">")
            return self.make(ast.Fragment, start, children=children)

        name = self._jsx_name()
        attributes = self._jsx_attributes()
        if self.accept("/"):
            self.expect(">")
            return self.make(ast.Element, start, name=name, attributes=attributes, self_closing=True)
        self.expect(">")

        children = self._jsx_children()
        close_at = self.pos
        self.expect("<")
        self.expect("/")
        closing = self._jsx_name()
        if closing != name:
            raise self.error(f"Expected closing tag </{name}> but found </{closing}>", close_at)
        self.expect(">")
        return self.make(ast.Element, start, name=name, attributes=attributes, children=children)

    def _jsx_name(self) -> str:
        self.skip()
        m = _JSX_IDENT.match(self.src, self.pos)
        if not m:
            raise self.error("Expected element name")
        self.pos = m.end()
        parts = [m.group()]
        while self.src.startswith(".", self.pos):
            self.pos += 1
            parts.append(self.identifier(allow_reserved=True).name)
        return ".".join(parts)

    def _jsx_attributes(self) -> list[ast.Node]:
        attributes: list[ast.Node] = []
        while True:
            self.skip()
            start = self.pos
            if self.peek("/") or self.peek(">"):
                return attributes
            if self.accept("{"):
                self.expect("...")
                argument = self.expression()
                self.expect("}")
                attributes.append(self.make(ast.SpreadAttribute, start, argument=argument))
                continue

            m = _JSX_IDENT.match(self.src, self.pos)
            if not m:
                raise self.error("Expected attribute name")
            self.pos = m.end()
            name = m.group()
            if self.src.startswith(":", self.pos):
                self.pos += 1
                name += ":" + self._jsx_name()

            value: Optional[ast.Node] = None
            if self.accept("="):
                value = self._jsx_attribute_value()
            attributes.append(self.make(ast.Attribute, start, name=name, value=value))

    def _jsx_attribute_value(self) -> ast.Node:
        self.skip()
        start = self.pos
        ch = self.src[self.pos:self.pos + 1]
        if ch in ("'", '"'):
            close = self.src.find(ch, self.pos + 1)
            if close < 0:
                raise self.error("Unterminated attribute string")
            raw = self.src[self.pos:close + 1]
            self.pos = close + 1
            return self.make(ast.Literal, start, value=html.unescape(raw[1:-1]), raw=raw)
        if ch == "{":
            return self._jsx_expression_container()
        if ch == "<":
            return self.jsx_element()
        raise self.error("Expected attribute value")

    def _jsx_expression_container(self) -> ast.ExprContainer:
        start = self.pos
        self.expect("{")
        if self.accept("}"):
            return self.make(ast.ExprContainer, start, expression=None)
        if self.peek("..."):
            expression: ast.Node = self._spread_or_expression()
        else:
            expression = self.expression()
        self.expect("}")
        return self.make(ast.ExprContainer, start, expression=expression)

    def _jsx_children(self) -> list[ast.Node]:
        children: list[ast.Node] = []
        while True:
            if self.pos >= len(self.src):
                raise self.error("Unterminated element")
            ch = self.src[self.pos]
            if ch == "<":
                rest = self.src[self.pos + 1:].lstrip()
                if rest.startswith("/"):
                    return children
                children.append(self.jsx_element())
            elif ch == "{":
                children.append(self._jsx_expression_container())
            else:
                children.append(self._jsx_text())

    def _jsx_text(self) -> ast.Text:
        start = self.pos
        raw = _JSX_TEXT.match(self.src, self.pos).group()
        for bad in ("}", ">"):
            index = raw.find(bad)
            if index >= 0:
                raise self.error(f"Unexpected '{bad}' in element text", start + index)
        self.pos = start + len(raw)
        return self.make(ast.Text, start, value=html.unescape(raw))


def parse(source: str) -> ast.Module:
    """
    Parse markup source into a Module.

    Raises:
        MarkupParseError: If the source is outside the supported subset
    """
    module = MarkupParser(source).parse_module()
    logger.debug("markup_parsed", statements=len(module.body))
    return module
