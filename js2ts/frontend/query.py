"""Selector queries over the syntax tree, in the style of esquery.

Supported grammar:

    selectors  := selector ("," selector)*
    selector   := compound (combinator compound)*
    combinator := " " | ">" | "~" | "+"
    compound   := (Type | "*")? (attr | pseudo)*
    attr       := "[" path (("=" | "!=") value)? "]"
    pseudo     := ":has(" relative ")" | ":not(" selectors ")"
                | ":matches(" selectors ")" | ":first-child" | ":last-child"

A `:has` argument may begin with a combinator (`:has(> DocTag)`); without one
it matches descendants. Matches come back in document (pre-order) order.
"""

from __future__ import annotations

from dataclasses import dataclass

from .ast import DOC_VISITOR_KEYS, VISITOR_KEYS
from .types import TYPE_VISITOR_KEYS, TypeArena

QUERY_VISITOR_KEYS: dict[str, list[str]] = {}
QUERY_VISITOR_KEYS.update(VISITOR_KEYS)
QUERY_VISITOR_KEYS["Program"] = ["body", "doc_blocks"]
QUERY_VISITOR_KEYS.update(DOC_VISITOR_KEYS)
QUERY_VISITOR_KEYS.update(TYPE_VISITOR_KEYS)


class SelectorError(Exception):
    """Malformed selector."""

    def __init__(self, msg: str, selector: str, col: int):
        self.msg: str = msg
        self.line: int = 1
        self.col: int = col
        super().__init__(msg + " in selector '" + selector + "' col " + str(col))


# ============================================================
# SELECTOR AST
# ============================================================


@dataclass
class Sel:
    """Base for selector nodes."""


@dataclass
class SelWildcard(Sel):
    pass


@dataclass
class SelType(Sel):
    name: str


@dataclass
class SelAttr(Sel):
    path: list[str]
    op: str | None
    value: str


@dataclass
class SelCompound(Sel):
    parts: list[Sel]


@dataclass
class SelHas(Sel):
    selectors: list[Sel]


@dataclass
class SelNot(Sel):
    selectors: list[Sel]


@dataclass
class SelMatches(Sel):
    selectors: list[Sel]


@dataclass
class SelNth(Sel):
    last: bool


@dataclass
class SelScope(Sel):
    """The subject of the enclosing `:has`."""


@dataclass
class SelBinary(Sel):
    op: str
    left: Sel
    right: Sel


# ============================================================
# SELECTOR PARSER
# ============================================================


class _SelectorParser:
    def __init__(self, text: str):
        self.text: str = text
        self.pos: int = 0

    def error(self, msg: str) -> SelectorError:
        return SelectorError(msg, self.text, self.pos + 1)

    def peek(self) -> str:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def skip_ws(self) -> bool:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1
        return self.pos > start

    def expect(self, c: str) -> None:
        if self.peek() != c:
            raise self.error("expected '" + c + "'")
        self.pos += 1

    def ident(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and (
            self.text[self.pos].isalnum() or self.text[self.pos] in "_-$"
        ):
            self.pos += 1
        if self.pos == start:
            raise self.error("expected name")
        return self.text[start : self.pos]

    def parse(self) -> list[Sel]:
        self.skip_ws()
        sels = self.parse_selectors()
        self.skip_ws()
        if self.pos != len(self.text):
            raise self.error("unexpected '" + self.peek() + "'")
        return sels

    def parse_selectors(self) -> list[Sel]:
        sels = [self.parse_selector()]
        while True:
            self.skip_ws()
            if self.peek() != ",":
                return sels
            self.pos += 1
            self.skip_ws()
            sels.append(self.parse_selector())

    def parse_selector(self) -> Sel:
        left = self.parse_compound()
        while True:
            had_ws = self.skip_ws()
            c = self.peek()
            if c == "" or c == "," or c == ")":
                return left
            if c in ">~+":
                self.pos += 1
                self.skip_ws()
                left = SelBinary(c, left, self.parse_compound())
            elif had_ws:
                left = SelBinary(" ", left, self.parse_compound())
            else:
                raise self.error("unexpected '" + c + "'")

    def parse_relative(self) -> list[Sel]:
        sels: list[Sel] = []
        while True:
            self.skip_ws()
            op = " "
            if self.peek() in (">", "~", "+"):
                op = self.peek()
                self.pos += 1
                self.skip_ws()
            sels.append(_anchor(self.parse_selector(), op))
            self.skip_ws()
            if self.peek() != ",":
                return sels
            self.pos += 1

    def parse_compound(self) -> Sel:
        parts: list[Sel] = []
        c = self.peek()
        if c == "*":
            self.pos += 1
            parts.append(SelWildcard())
        elif c.isalpha() or c == "_":
            parts.append(SelType(self.ident()))
        while True:
            c = self.peek()
            if c == "[":
                parts.append(self.parse_attr())
            elif c == ":":
                parts.append(self.parse_pseudo())
            else:
                break
        if not parts:
            raise self.error("expected selector")
        if len(parts) == 1:
            return parts[0]
        return SelCompound(parts)

    def parse_attr(self) -> Sel:
        self.expect("[")
        self.skip_ws()
        path = [self.ident()]
        while self.peek() == ".":
            self.pos += 1
            path.append(self.ident())
        self.skip_ws()
        if self.peek() == "]":
            self.pos += 1
            return SelAttr(path, None, "")
        if self.text.startswith("!=", self.pos):
            op = "!="
            self.pos += 2
        elif self.peek() == "=":
            op = "="
            self.pos += 1
        else:
            raise self.error("expected '=', '!=' or ']'")
        self.skip_ws()
        value = self.parse_value()
        self.skip_ws()
        self.expect("]")
        return SelAttr(path, op, value)

    def parse_value(self) -> str:
        c = self.peek()
        if c == '"' or c == "'":
            end = self.text.find(c, self.pos + 1)
            if end == -1:
                raise self.error("unterminated string")
            value = self.text[self.pos + 1 : end]
            self.pos = end + 1
            return value
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in "] \t":
            self.pos += 1
        if self.pos == start:
            raise self.error("expected value")
        return self.text[start : self.pos]

    def parse_pseudo(self) -> Sel:
        self.expect(":")
        name = self.ident()
        if name == "first-child":
            return SelNth(last=False)
        if name == "last-child":
            return SelNth(last=True)
        self.expect("(")
        if name == "has":
            inner: Sel = SelHas(self.parse_relative())
        elif name == "not":
            self.skip_ws()
            inner = SelNot(self.parse_selectors())
        elif name == "matches" or name == "is":
            self.skip_ws()
            inner = SelMatches(self.parse_selectors())
        else:
            raise self.error("unknown pseudo-class ':" + name + "'")
        self.skip_ws()
        self.expect(")")
        return inner


def _anchor(sel: Sel, op: str) -> Sel:
    """Hang a relative selector off the `:has` subject."""
    if isinstance(sel, SelBinary):
        return SelBinary(sel.op, _anchor(sel.left, op), sel.right)
    return SelBinary(op, SelScope(), sel)


# Bounded: typedef lookups add one selector per distinct name
_CACHE_SIZE = 256
_CACHE: dict[str, list[Sel]] = {}


def parse_selector(text: str) -> list[Sel]:
    """Parse a selector string (cached)."""
    sels = _CACHE.get(text)
    if sels is None:
        sels = _SelectorParser(text).parse()
        if len(_CACHE) >= _CACHE_SIZE:
            _CACHE.clear()
        _CACHE[text] = sels
    return sels


# ============================================================
# MATCHING
# ============================================================


def _text(value: object) -> str:
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


class Matcher:
    """Walks a tree through visitor keys, resolving arena keys to type nodes."""

    def __init__(
        self, keys: dict[str, list[str]] | None = None, arena: TypeArena | None = None
    ):
        self.keys: dict[str, list[str]] = keys if keys is not None else QUERY_VISITOR_KEYS
        self.arena: TypeArena | None = arena

    def _resolve(self, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            if self.arena is None:
                return None
            return self.arena.get(value)
        return value

    def children(self, node: object) -> list[object]:
        result: list[object] = []
        for key in self.keys.get(getattr(node, "type", ""), []):
            value = getattr(node, key, None)
            if isinstance(value, list):
                for item in value:
                    item = self._resolve(item)
                    if item is not None:
                        result.append(item)
            else:
                value = self._resolve(value)
                if value is not None:
                    result.append(value)
        return result

    def siblings(self, node: object, parent: object) -> tuple[list[object], int]:
        """The list field of `parent` holding `node`, and node's index in it."""
        for key in self.keys.get(getattr(parent, "type", ""), []):
            value = getattr(parent, key, None)
            if not isinstance(value, list):
                continue
            items = [self._resolve(item) for item in value]
            i = 0
            while i < len(items):
                if items[i] is node:
                    return items, i
                i += 1
        return [], -1

    def traverse(self, root: object) -> list[tuple[object, list[object]]]:
        """Pre-order (node, ancestry) pairs; ancestry is nearest-first."""
        result: list[tuple[object, list[object]]] = []
        stack: list[tuple[object, list[object]]] = [(root, [])]
        while stack:
            node, ancestry = stack.pop()
            result.append((node, ancestry))
            kids = self.children(node)
            child_ancestry = [node] + ancestry
            i = len(kids) - 1
            while i >= 0:
                stack.append((kids[i], child_ancestry))
                i -= 1
        return result

    def matches(
        self, node: object, sel: Sel, ancestry: list[object], scope: object = None
    ) -> bool:
        if isinstance(sel, SelWildcard):
            return True
        if isinstance(sel, SelType):
            return getattr(node, "type", None) == sel.name
        if isinstance(sel, SelAttr):
            return self._match_attr(node, sel)
        if isinstance(sel, SelCompound):
            for part in sel.parts:
                if not self.matches(node, part, ancestry, scope):
                    return False
            return True
        if isinstance(sel, SelNot):
            for inner in sel.selectors:
                if self.matches(node, inner, ancestry, scope):
                    return False
            return True
        if isinstance(sel, SelMatches):
            for inner in sel.selectors:
                if self.matches(node, inner, ancestry, scope):
                    return True
            return False
        if isinstance(sel, SelScope):
            return node is scope
        if isinstance(sel, SelHas):
            return self._match_has(node, sel, ancestry)
        if isinstance(sel, SelNth):
            if not ancestry:
                return False
            items, idx = self.siblings(node, ancestry[0])
            if idx == -1:
                return False
            if sel.last:
                return idx == len(items) - 1
            return idx == 0
        if isinstance(sel, SelBinary):
            return self._match_binary(node, sel, ancestry, scope)
        raise TypeError("unknown selector " + repr(sel))

    def _match_attr(self, node: object, sel: SelAttr) -> bool:
        value: object = node
        for name in sel.path:
            if value is None or not hasattr(value, name):
                return sel.op == "!="
            value = getattr(value, name)
        if sel.op is None:
            return value is not None
        if sel.op == "=":
            return _text(value) == sel.value
        return _text(value) != sel.value

    def _match_has(self, node: object, sel: SelHas, ancestry: list[object]) -> bool:
        for descendant, sub_ancestry in self.traverse(node)[1:]:
            full = sub_ancestry + ancestry
            for inner in sel.selectors:
                if self.matches(descendant, inner, full, node):
                    return True
        return False

    def _match_binary(
        self, node: object, sel: SelBinary, ancestry: list[object], scope: object
    ) -> bool:
        if not self.matches(node, sel.right, ancestry, scope):
            return False
        if sel.op == ">":
            return bool(ancestry) and self.matches(
                ancestry[0], sel.left, ancestry[1:], scope
            )
        if sel.op == " ":
            i = 0
            while i < len(ancestry):
                if self.matches(ancestry[i], sel.left, ancestry[i + 1 :], scope):
                    return True
                i += 1
            return False
        if not ancestry:
            return False
        items, idx = self.siblings(node, ancestry[0])
        if idx == -1:
            return False
        if sel.op == "+":
            return idx > 0 and self.matches(items[idx - 1], sel.left, ancestry, scope)
        j = 0
        while j < idx:
            if self.matches(items[j], sel.left, ancestry, scope):
                return True
            j += 1
        return False


def query(
    root: object,
    selector: str,
    keys: dict[str, list[str]] | None = None,
    arena: TypeArena | None = None,
) -> list[object]:
    """Every node under (and including) `root` matching `selector`, each once,
    in document order. A program's own type arena is used when none is given."""
    if arena is None:
        arena = getattr(root, "types", None)
    sels = parse_selector(selector)
    matcher = Matcher(keys, arena)
    result: list[object] = []
    seen: set[int] = set()
    for node, ancestry in matcher.traverse(root):
        if id(node) in seen:
            continue
        for sel in sels:
            if matcher.matches(node, sel, ancestry):
                seen.add(id(node))
                result.append(node)
                break
    return result
