"""JSDoc type expressions — node definitions, the type arena, and the parser.

Type nodes never hold each other directly: every child field is a key into the
`TypeArena` that owns the file's types. A type-reference therefore *is* its
arena slot, and rewriting a reference means replacing that slot's content;
every holder of the key observes the new content.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field


# ============================================================
# TYPE NODES
# ============================================================


@dataclass(eq=False)
class TypeNode:
    """Base for all type nodes. `key` is the arena slot, set on insertion."""

    key: int = field(default=-1, kw_only=True)

    type = "TypeNode"


@dataclass(eq=False)
class TypeName(TypeNode):
    """A named type: `string`, `Foo`, `ns.Foo`."""

    value: str

    type = "TypeName"


@dataclass(eq=False)
class TypeAny(TypeNode):
    """`*`."""

    type = "TypeAny"


@dataclass(eq=False)
class TypeUnknown(TypeNode):
    """`?`."""

    type = "TypeUnknown"


@dataclass(eq=False)
class TypeStringValue(TypeNode):
    """String literal type; `value` is the raw text between the quotes."""

    value: str
    quote: str

    type = "TypeStringValue"


@dataclass(eq=False)
class TypeNumber(TypeNode):
    """Number literal type."""

    value: str

    type = "TypeNumber"


@dataclass(eq=False)
class TypeUnion(TypeNode):
    """A | B — 2+ elements."""

    elements: list[int]

    type = "TypeUnion"


@dataclass(eq=False)
class TypeIntersection(TypeNode):
    """A & B — 2+ elements."""

    elements: list[int]

    type = "TypeIntersection"


@dataclass(eq=False)
class TypeGeneric(TypeNode):
    """Array<T>, Object.<K, V>."""

    left: int
    elements: list[int]
    dot: bool = False

    type = "TypeGeneric"


@dataclass(eq=False)
class TypeArray(TypeNode):
    """T[]."""

    element: int

    type = "TypeArray"


@dataclass(eq=False)
class TypeObjectField(TypeNode):
    """key?: T inside an object type."""

    name: str
    right: int | None
    optional: bool = False
    readonly: bool = False
    quote: str = ""

    type = "TypeObjectField"


@dataclass(eq=False)
class TypeObject(TypeNode):
    """{a: T, b?: U}."""

    fields: list[int]
    separator: str = ","

    type = "TypeObject"


@dataclass(eq=False)
class TypeTuple(TypeNode):
    """[A, B]."""

    elements: list[int]

    type = "TypeTuple"


@dataclass(eq=False)
class TypeKeyValue(TypeNode):
    """Named parameter of a function type: `...name?: T`."""

    name: str
    right: int | None
    optional: bool = False
    variadic: bool = False

    type = "TypeKeyValue"


@dataclass(eq=False)
class TypeFunction(TypeNode):
    """`function(A, B): R` or `(a: A) => R`; `new (...) => R` when constructor."""

    parameters: list[int]
    return_type: int | None
    arrow: bool = False
    constructor: bool = False

    type = "TypeFunction"


@dataclass(eq=False)
class TypeParenthesis(TypeNode):
    """(T)."""

    element: int

    type = "TypeParenthesis"


@dataclass(eq=False)
class TypeNullable(TypeNode):
    """?T or T?."""

    element: int
    prefix: bool = True

    type = "TypeNullable"


@dataclass(eq=False)
class TypeNotNullable(TypeNode):
    """!T or T!."""

    element: int
    prefix: bool = True

    type = "TypeNotNullable"


@dataclass(eq=False)
class TypeOptional(TypeNode):
    """T=."""

    element: int
    prefix: bool = False

    type = "TypeOptional"


@dataclass(eq=False)
class TypeVariadic(TypeNode):
    """...T, or a bare `...`."""

    element: int | None
    prefix: bool = True

    type = "TypeVariadic"


@dataclass(eq=False)
class TypeTypeof(TypeNode):
    """typeof x."""

    element: int

    type = "TypeTypeof"


@dataclass(eq=False)
class TypeKeyof(TypeNode):
    """keyof T."""

    element: int

    type = "TypeKeyof"


TYPE_VISITOR_KEYS: dict[str, list[str]] = {
    "TypeName": [],
    "TypeAny": [],
    "TypeUnknown": [],
    "TypeStringValue": [],
    "TypeNumber": [],
    "TypeUnion": ["elements"],
    "TypeIntersection": ["elements"],
    "TypeGeneric": ["left", "elements"],
    "TypeArray": ["element"],
    "TypeObject": ["fields"],
    "TypeObjectField": ["right"],
    "TypeTuple": ["elements"],
    "TypeKeyValue": ["right"],
    "TypeFunction": ["parameters", "return_type"],
    "TypeParenthesis": ["element"],
    "TypeNullable": ["element"],
    "TypeNotNullable": ["element"],
    "TypeOptional": ["element"],
    "TypeVariadic": ["element"],
    "TypeTypeof": ["element"],
    "TypeKeyof": ["element"],
}


# ============================================================
# ARENA
# ============================================================


class TypeArena:
    """Owns every parsed type of one file, addressed by stable integer keys."""

    def __init__(self) -> None:
        self.slots: list[TypeNode] = []
        self.replaced: set[int] = set()

    def add(self, node: TypeNode) -> int:
        node.key = len(self.slots)
        self.slots.append(node)
        return node.key

    def get(self, key: int) -> TypeNode:
        return self.slots[key]

    def children(self, key: int) -> list[int]:
        node = self.slots[key]
        result: list[int] = []
        for name in TYPE_VISITOR_KEYS[node.type]:
            value = getattr(node, name)
            if isinstance(value, list):
                result.extend(value)
            elif value is not None:
                result.append(value)
        return result

    def reachable(self, key: int) -> list[int]:
        """Keys reachable from `key` (inclusive), pre-order, each once."""
        result: list[int] = []
        seen: set[int] = set()
        stack: list[int] = [key]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            result.append(current)
            kids = self.children(current)
            i = len(kids) - 1
            while i >= 0:
                stack.append(kids[i])
                i -= 1
        return result

    def replace(self, key: int, source_key: int) -> None:
        """Give slot `key` the content of slot `source_key`.

        Children stay shared: both slots now point at the same child keys.
        """
        content = copy.copy(self.slots[source_key])
        content.key = key
        self.slots[key] = content
        self.replaced.add(key)

    def touched(self, key: int) -> bool:
        """True when any slot reachable from `key` was replaced."""
        if not self.replaced:
            return False
        for k in self.reachable(key):
            if k in self.replaced:
                return True
        return False


# ============================================================
# PARSER
# ============================================================


class TypeParseError(Exception):
    """Error in a JSDoc type expression."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


_TT_NAME = "NAME"
_TT_STRING = "STRING"
_TT_NUMBER = "NUMBER"
_TT_PUNCT = "PUNCT"
_TT_EOF = "EOF"

_TYPE_PUNCT: list[str] = [
    "...",
    "=>",
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    "<",
    ">",
    ",",
    ";",
    ":",
    "|",
    "&",
    "?",
    "!",
    "=",
    "*",
    ".",
]

# Tokens after which a bare `?` or `...` stands alone
_TERMINATORS: set[str] = {",", ")", "]", "}", ">", "|", "&", "=", ";", ""}


def _name_char(c: str) -> bool:
    return c.isalnum() or c == "_" or c == "$" or c == "-" or c == "#" or c == "~"


def _tokenize_type(text: str) -> list[tuple[str, str, int]]:
    """Lex a type expression into (kind, value, offset) triples."""
    result: list[tuple[str, str, int]] = []
    pos = 0
    length = len(text)
    while pos < length:
        c = text[pos]
        if c.isspace():
            pos += 1
            continue
        start = pos
        if c == '"' or c == "'":
            pos += 1
            while pos < length and text[pos] != c:
                if text[pos] == "\\":
                    pos += 1
                pos += 1
            if pos >= length:
                raise TypeParseError("unterminated string in type", 1, start + 1)
            pos += 1
            result.append((_TT_STRING, text[start:pos], start))
            continue
        if c.isdigit() or (c == "-" and pos + 1 < length and text[pos + 1].isdigit()):
            pos += 1
            while pos < length and (text[pos].isalnum() or text[pos] in "._"):
                pos += 1
            result.append((_TT_NUMBER, text[start:pos], start))
            continue
        if c.isalpha() or c == "_" or c == "$":
            while pos < length and _name_char(text[pos]):
                pos += 1
            result.append((_TT_NAME, text[start:pos], start))
            continue
        matched = False
        for op in _TYPE_PUNCT:
            if text.startswith(op, pos):
                result.append((_TT_PUNCT, op, pos))
                pos += len(op)
                matched = True
                break
        if not matched:
            raise TypeParseError("unexpected character in type: " + repr(c), 1, pos + 1)
    result.append((_TT_EOF, "", length))
    return result


class TypeParser:
    """Recursive descent parser for JSDoc/TypeScript-flavoured type expressions."""

    def __init__(self, text: str, arena: TypeArena, line: int = 1):
        self.text: str = text
        self.arena: TypeArena = arena
        self.line: int = line
        self.tokens: list[tuple[str, str, int]] = _tokenize_type(text)
        self.pos: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def kind(self) -> str:
        return self.tokens[self.pos][0]

    def value(self) -> str:
        return self.tokens[self.pos][1]

    def peek_value(self, offset: int) -> str:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return ""
        return self.tokens[idx][1]

    def at(self, value: str) -> bool:
        tok = self.tokens[self.pos]
        return tok[1] == value and tok[0] in (_TT_PUNCT, _TT_NAME)

    def advance(self) -> str:
        value = self.tokens[self.pos][1]
        self.pos += 1
        return value

    def eat(self, value: str) -> bool:
        if self.at(value):
            self.pos += 1
            return True
        return False

    def expect(self, value: str) -> None:
        if not self.eat(value):
            got = self.value() or "end of type"
            raise self.error("expected '" + value + "', got '" + got + "'")

    def error(self, msg: str) -> TypeParseError:
        offset = self.tokens[self.pos][2]
        return TypeParseError(msg + " in type {" + self.text + "}", self.line, offset + 1)

    def add(self, node: TypeNode) -> int:
        return self.arena.add(node)

    # ── Grammar ──────────────────────────────────────────────

    def parse_root(self) -> int:
        if self.kind() == _TT_EOF:
            raise self.error("empty type")
        key = self.parse_union()
        if self.kind() != _TT_EOF:
            raise self.error("unexpected '" + self.value() + "'")
        return key

    def parse_union(self) -> int:
        self.eat("|")
        elements = [self.parse_intersection()]
        while self.eat("|"):
            elements.append(self.parse_intersection())
        if len(elements) == 1:
            return elements[0]
        return self.add(TypeUnion(elements))

    def parse_intersection(self) -> int:
        elements = [self.parse_prefix()]
        while self.eat("&"):
            elements.append(self.parse_prefix())
        if len(elements) == 1:
            return elements[0]
        return self.add(TypeIntersection(elements))

    def parse_prefix(self) -> int:
        if self.at("?"):
            if self.peek_value(1) in _TERMINATORS:
                self.advance()
                return self.add(TypeUnknown())
            self.advance()
            return self.add(TypeNullable(self.parse_prefix(), prefix=True))
        if self.eat("!"):
            return self.add(TypeNotNullable(self.parse_prefix(), prefix=True))
        if self.at("..."):
            if self.peek_value(1) in _TERMINATORS:
                self.advance()
                return self.add(TypeVariadic(None, prefix=True))
            self.advance()
            return self.add(TypeVariadic(self.parse_prefix(), prefix=True))
        if self.at("typeof") and self.kind_at(1) == _TT_NAME:
            self.advance()
            return self.add(TypeTypeof(self.parse_postfix()))
        if self.at("keyof"):
            self.advance()
            return self.add(TypeKeyof(self.parse_prefix()))
        return self.parse_postfix()

    def kind_at(self, offset: int) -> str:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return _TT_EOF
        return self.tokens[idx][0]

    def parse_postfix(self) -> int:
        key = self.parse_primary()
        while True:
            if self.at("[") and self.peek_value(1) == "]":
                self.advance()
                self.advance()
                key = self.add(TypeArray(key))
            elif self.at("<"):
                self.advance()
                key = self.add(TypeGeneric(key, self.parse_type_list(">"), dot=False))
            elif self.at(".") and self.peek_value(1) == "<":
                self.advance()
                self.advance()
                key = self.add(TypeGeneric(key, self.parse_type_list(">"), dot=True))
            elif self.at("?") and self.peek_value(1) in _TERMINATORS:
                self.advance()
                key = self.add(TypeNullable(key, prefix=False))
            elif self.at("!"):
                self.advance()
                key = self.add(TypeNotNullable(key, prefix=False))
            elif self.at("="):
                self.advance()
                key = self.add(TypeOptional(key, prefix=False))
            else:
                return key

    def parse_type_list(self, close: str) -> list[int]:
        elements: list[int] = []
        if self.eat(close):
            return elements
        elements.append(self.parse_union())
        while self.eat(","):
            if self.at(close):
                break
            elements.append(self.parse_union())
        self.expect(close)
        return elements

    def parse_primary(self) -> int:
        kind = self.kind()
        if kind == _TT_STRING:
            raw = self.advance()
            return self.add(TypeStringValue(raw[1:-1], raw[0]))
        if kind == _TT_NUMBER:
            return self.add(TypeNumber(self.advance()))
        if self.at("*"):
            self.advance()
            return self.add(TypeAny())
        if self.at("("):
            if self._arrow_ahead():
                return self.parse_arrow(constructor=False)
            self.advance()
            inner = self.parse_union()
            self.expect(")")
            return self.add(TypeParenthesis(inner))
        if self.at("{"):
            return self.parse_object()
        if self.at("["):
            self.advance()
            return self.add(TypeTuple(self.parse_type_list("]")))
        if self.at("new") and self.peek_value(1) == "(":
            self.advance()
            return self.parse_arrow(constructor=True)
        if self.at("function") and self.peek_value(1) == "(":
            return self.parse_function()
        if kind == _TT_NAME:
            name = self.advance()
            while self.at(".") and self.kind_at(1) == _TT_NAME:
                self.advance()
                name += "." + self.advance()
            return self.add(TypeName(name))
        if kind == _TT_EOF:
            raise self.error("unexpected end of type")
        raise self.error("unexpected '" + self.value() + "'")

    def _arrow_ahead(self) -> bool:
        """At `(`: does the matching `)` precede `=>`?"""
        depth = 0
        i = self.pos
        while i < len(self.tokens):
            kind, value, _ = self.tokens[i]
            if kind == _TT_PUNCT and value in ("(", "[", "{", "<"):
                depth += 1
            elif kind == _TT_PUNCT and value in (")", "]", "}", ">"):
                depth -= 1
                if depth == 0:
                    return i + 1 < len(self.tokens) and self.tokens[i + 1][1] == "=>"
            elif kind == _TT_EOF:
                return False
            i += 1
        return False

    def parse_arrow(self, constructor: bool) -> int:
        self.expect("(")
        params: list[int] = []
        while not self.at(")"):
            variadic = self.eat("...")
            if self.kind() != _TT_NAME:
                raise self.error("expected parameter name")
            name = self.advance()
            optional = self.eat("?")
            right: int | None = None
            if self.eat(":"):
                right = self.parse_union()
            params.append(self.add(TypeKeyValue(name, right, optional, variadic)))
            if not self.eat(","):
                break
        self.expect(")")
        self.expect("=>")
        ret = self.parse_union()
        return self.add(TypeFunction(params, ret, arrow=True, constructor=constructor))

    def parse_function(self) -> int:
        self.advance()
        self.expect("(")
        params: list[int] = []
        while not self.at(")"):
            if (self.at("this") or self.at("new")) and self.peek_value(1) == ":":
                name = self.advance()
                self.advance()
                params.append(self.add(TypeKeyValue(name, self.parse_union())))
            else:
                params.append(self.parse_union())
            if not self.eat(","):
                break
        self.expect(")")
        ret: int | None = None
        if self.eat(":"):
            ret = self.parse_prefix()
        return self.add(TypeFunction(params, ret, arrow=False))

    def parse_object(self) -> int:
        self.expect("{")
        fields: list[int] = []
        separator = ","
        first_separator = True
        while not self.at("}"):
            readonly = False
            if self.at("readonly") and self.kind_at(1) in (_TT_NAME, _TT_STRING):
                self.advance()
                readonly = True
            kind = self.kind()
            quote = ""
            if kind == _TT_STRING:
                raw = self.advance()
                quote = raw[0]
                name = raw[1:-1]
            elif kind == _TT_NAME or kind == _TT_NUMBER:
                name = self.advance()
            else:
                raise self.error("expected object field name")
            optional = self.eat("?")
            right: int | None = None
            if self.eat(":"):
                right = self.parse_union()
            fields.append(
                self.add(TypeObjectField(name, right, optional, readonly, quote))
            )
            if self.at(",") or self.at(";"):
                sep = self.advance()
                if first_separator:
                    separator = sep
                    first_separator = False
            else:
                break
        self.expect("}")
        return self.add(TypeObject(fields, separator))


def parse_type(text: str, arena: TypeArena, line: int = 1) -> int:
    """Parse a type expression into `arena`. Returns the root key."""
    return TypeParser(text, arena, line).parse_root()
