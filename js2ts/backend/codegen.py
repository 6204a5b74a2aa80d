"""Tree-to-text serializer.

Nodes that still carry a source span are rebuilt from the source: the text
between a node's children is copied as-is and each child is generated in turn,
so untouched code keeps its exact layout. Nodes without a span (built by a
pass or a hook) are generated from structure with four-space indentation.

Node kinds the serializer knows nothing about are rendered by handlers
registered per kind; see `backend.adapter`.
"""

from __future__ import annotations

import bisect
from typing import Callable

from ..frontend.ast import VISITOR_KEYS, DocBlock, Node

Handler = Callable[["Serializer", object], str]

# Expression precedence (higher binds tighter)
PREC_SEQUENCE = 0
PREC_ASSIGN = 1
PREC_CONDITIONAL = 2
PREC_COALESCE = 3
PREC_OR = 4
PREC_AND = 5
PREC_BITOR = 6
PREC_BITXOR = 7
PREC_BITAND = 8
PREC_EQUALITY = 9
PREC_RELATIONAL = 10
PREC_SHIFT = 11
PREC_ADDITIVE = 12
PREC_MULTIPLICATIVE = 13
PREC_EXPONENT = 14
PREC_UNARY = 15
PREC_POSTFIX = 16
PREC_CALL = 17
PREC_NEW = 18
PREC_MEMBER = 19
PREC_PRIMARY = 20

BINARY_PREC: dict[str, int] = {
    "??": PREC_COALESCE,
    "||": PREC_OR,
    "&&": PREC_AND,
    "|": PREC_BITOR,
    "^": PREC_BITXOR,
    "&": PREC_BITAND,
    "==": PREC_EQUALITY,
    "!=": PREC_EQUALITY,
    "===": PREC_EQUALITY,
    "!==": PREC_EQUALITY,
    "<": PREC_RELATIONAL,
    ">": PREC_RELATIONAL,
    "<=": PREC_RELATIONAL,
    ">=": PREC_RELATIONAL,
    "in": PREC_RELATIONAL,
    "instanceof": PREC_RELATIONAL,
    "<<": PREC_SHIFT,
    ">>": PREC_SHIFT,
    ">>>": PREC_SHIFT,
    "+": PREC_ADDITIVE,
    "-": PREC_ADDITIVE,
    "*": PREC_MULTIPLICATIVE,
    "/": PREC_MULTIPLICATIVE,
    "%": PREC_MULTIPLICATIVE,
    "**": PREC_EXPONENT,
}

_STATEMENT_KINDS: set[str] = {
    "ExpressionStatement",
    "BlockStatement",
    "EmptyStatement",
    "DebuggerStatement",
    "ReturnStatement",
    "ThrowStatement",
    "IfStatement",
    "ForStatement",
    "ForInStatement",
    "ForOfStatement",
    "WhileStatement",
    "DoWhileStatement",
    "BreakStatement",
    "ContinueStatement",
    "LabeledStatement",
    "SwitchStatement",
    "TryStatement",
    "WithStatement",
    "VariableDeclaration",
    "FunctionDeclaration",
    "ClassDeclaration",
    "ImportDeclaration",
    "ExportNamedDeclaration",
    "ExportDefaultDeclaration",
    "ExportAllDeclaration",
}


def to_source(
    program: Node,
    source_content: str | None = None,
    handlers: dict[str, Handler] | None = None,
) -> str:
    """Render `program`. With `source_content`, spanned nodes reuse its text."""
    return Serializer(program, source_content, handlers or {}).generate(program)


def _quote_string(s: str) -> str:
    out = "'"
    for ch in s:
        if ch == "\n":
            out += "\\n"
        elif ch == "\r":
            out += "\\r"
        elif ch == "\t":
            out += "\\t"
        elif ch == "\\":
            out += "\\\\"
        elif ch == "'":
            out += "\\'"
        elif ord(ch) < 32:
            out += "\\x" + format(ord(ch), "02x")
        else:
            out += ch
    return out + "'"


def _literal_text(node: Node) -> str:
    raw = getattr(node, "raw", None)
    if raw:
        return raw
    value = node.value
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return _quote_string(value)
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return str(value)


def _append_lines(text: str, items: list[str]) -> str:
    """Append top-level items. An item opening with a line break starts right
    after a line that already ended, without adding a blank line."""
    for item in items:
        if item.startswith("\n") and (not text or text.endswith("\n")):
            item = item[1:]
        text += item
    return text


class Serializer:
    """Generates text for one program."""

    _INDENT: str = "    "

    def __init__(self, program: Node, source: str | None, handlers: dict[str, Handler]):
        self.program: Node = program
        self.source: str | None = source
        self.handlers: dict[str, Handler] = handlers
        self.indent_level: int = 0
        # Inside a for-statement init, where a bare `in` would end the init
        self.no_in: bool = False
        blocks: list[DocBlock] = []
        if source is not None:
            for block in getattr(program, "source_blocks", []):
                if block.start is not None and block.end is not None:
                    blocks.append(block)
        blocks.sort(key=lambda b: b.start)
        self.blocks: list[DocBlock] = blocks
        self.block_starts: list[int] = [b.start for b in blocks]

    # ── Dispatch ─────────────────────────────────────────────

    def generate(self, node: object) -> str:
        kind = getattr(node, "type", None)
        handler = self.handlers.get(kind)
        if handler is not None:
            return handler(self, node)
        if not isinstance(node, Node):
            raise ValueError("no handler for " + str(kind))
        if self.source is not None and node.start is not None:
            return self.from_source(node)
        return self.from_structure(node)

    def indent(self) -> str:
        return self._INDENT * self.indent_level

    # ── Source-preserving ────────────────────────────────────

    def children(self, node: Node) -> list[object]:
        result: list[object] = []
        for key in VISITOR_KEYS.get(node.type, []):
            value = getattr(node, key, None)
            if isinstance(value, list):
                for item in value:
                    if item is not None:
                        result.append(item)
            elif value is not None:
                result.append(value)
        if node.type == "TemplateLiteral":
            result.sort(key=lambda child: child.start if child.start is not None else -1)
        return result

    def gap(self, start: int, end: int) -> str:
        """Source text in [start, end), with documentation blocks re-rendered."""
        out: list[str] = []
        pos = start
        i = bisect.bisect_left(self.block_starts, start)
        while i < len(self.blocks) and self.blocks[i].start < end:
            block = self.blocks[i]
            if block.end <= end:
                out.append(self.source[pos : block.start])
                out.append(self.generate(block))
                pos = block.end
            i += 1
        out.append(self.source[pos:end])
        return "".join(out)

    def from_source(self, node: Node) -> str:
        items = self.children(node)
        last_spanned = -1
        i = 0
        while i < len(items):
            if getattr(items[i], "start", None) is not None:
                last_spanned = i
            i += 1
        out: list[str] = []
        pos = node.start
        i = 0
        while i <= last_spanned:
            child = items[i]
            start = getattr(child, "start", None)
            if start is None:
                out.append(self.generate(child))
            elif start >= pos:
                out.append(self.gap(pos, start))
                out.append(self.generate(child))
                pos = child.end
            # else: shares text with the previous child (shorthand property)
            i += 1
        trailing = [self.generate(child) for child in items[last_spanned + 1 :]]
        if node.type == "Program":
            text = "".join(out) + self.gap(pos, node.end)
            return _append_lines(text, trailing)
        out.extend(trailing)
        out.append(self.gap(pos, node.end))
        return "".join(out)

    # ── Structural ───────────────────────────────────────────

    def from_structure(self, node: Node) -> str:
        method = getattr(self, "gen_" + node.type, None)
        if method is None:
            raise ValueError("cannot generate " + node.type)
        return method(node)

    def expr(self, node: Node, prec: int) -> str:
        """Generate `node`, parenthesized when it binds looser than `prec`."""
        text = self.generate(node)
        if self.precedence(node) < prec:
            return "(" + text + ")"
        if self.no_in and node.type == "BinaryExpression" and node.operator == "in":
            return "(" + text + ")"
        return text

    def operand(self, node: Node) -> str:
        """The object of a member access or the callee of a call."""
        text = self.expr(node, PREC_CALL)
        if node.type == "ChainExpression":
            # `(a?.b).c` does not short-circuit `.c`
            return "(" + text + ")"
        if node.type == "Literal" and text.replace("_", "").isdigit():
            return "(" + text + ")"
        return text

    def precedence(self, node: Node) -> int:
        kind = node.type
        if kind == "SequenceExpression":
            return PREC_SEQUENCE
        if kind in (
            "AssignmentExpression",
            "AssignmentPattern",
            "ArrowFunctionExpression",
            "YieldExpression",
        ):
            return PREC_ASSIGN
        if kind == "ConditionalExpression":
            return PREC_CONDITIONAL
        if kind in ("BinaryExpression", "LogicalExpression"):
            return BINARY_PREC[node.operator]
        if kind in ("UnaryExpression", "AwaitExpression"):
            return PREC_UNARY
        if kind == "UpdateExpression":
            return PREC_UNARY if node.prefix else PREC_POSTFIX
        if kind in ("CallExpression", "ImportExpression", "TaggedTemplateExpression"):
            return PREC_CALL
        if kind == "NewExpression":
            return PREC_NEW
        if kind == "MemberExpression":
            return PREC_MEMBER
        if kind == "ChainExpression":
            return self.precedence(node.expression)
        return PREC_PRIMARY

    def statement(self, node: Node) -> str:
        """One statement at the current indentation (without leading indent)."""
        return self.generate(node)

    def block_body(self, body: list[Node]) -> str:
        if not body:
            return "{\n" + self.indent() + "}"
        self.indent_level += 1
        lines = [self.indent() + self.statement(stmt) for stmt in body]
        self.indent_level -= 1
        return "{\n" + "\n".join(lines) + "\n" + self.indent() + "}"

    def nested(self, body: Node) -> str:
        """A statement in a nested position (loop or branch body)."""
        if body.type == "BlockStatement":
            return " " + self.generate(body)
        self.indent_level += 1
        text = "\n" + self.indent() + self.statement(body)
        self.indent_level -= 1
        return text

    def params(self, params: list[Node]) -> str:
        return "(" + ", ".join(self.expr(p, PREC_ASSIGN) for p in params) + ")"

    def args(self, args: list[Node]) -> str:
        return "(" + ", ".join(self.expr(a, PREC_ASSIGN) for a in args) + ")"

    def key(self, key: Node, computed: bool) -> str:
        if computed:
            return "[" + self.expr(key, PREC_ASSIGN) + "]"
        return self.generate(key)

    # ── Program / statements ─────────────────────────────────

    def gen_Program(self, node: Node) -> str:
        text = ""
        for stmt in node.body:
            if text and not text.endswith("\n"):
                text += "\n"
            text = _append_lines(text, [self.statement(stmt)])
        if text and not text.endswith("\n"):
            text += "\n"
        return text

    def gen_EmptyStatement(self, node: Node) -> str:
        return ";"

    def gen_DebuggerStatement(self, node: Node) -> str:
        return "debugger;"

    def gen_ExpressionStatement(self, node: Node) -> str:
        text = self.expr(node.expression, PREC_SEQUENCE)
        if (
            text.startswith("{")
            or text.startswith("function")
            or text.startswith("class")
            or text.startswith("let [")
        ):
            text = "(" + text + ")"
        return text + ";"

    def gen_BlockStatement(self, node: Node) -> str:
        return self.block_body(node.body)

    def gen_StaticBlock(self, node: Node) -> str:
        return "static " + self.block_body(node.body)

    def gen_ReturnStatement(self, node: Node) -> str:
        if node.argument is None:
            return "return;"
        return "return " + self.expr(node.argument, PREC_SEQUENCE) + ";"

    def gen_ThrowStatement(self, node: Node) -> str:
        return "throw " + self.expr(node.argument, PREC_SEQUENCE) + ";"

    def gen_IfStatement(self, node: Node) -> str:
        text = "if (" + self.expr(node.test, PREC_SEQUENCE) + ")"
        text += self.nested(node.consequent)
        if node.alternate is not None:
            if node.consequent.type == "BlockStatement":
                text += " else"
            else:
                text += "\n" + self.indent() + "else"
            if node.alternate.type == "IfStatement":
                text += " " + self.generate(node.alternate)
            else:
                text += self.nested(node.alternate)
        return text

    def _for_init(self, node: Node) -> str:
        if node.type == "VariableDeclaration":
            return self.declaration(node)
        return self.expr(node, PREC_SEQUENCE)

    def gen_ForStatement(self, node: Node) -> str:
        init = ""
        if node.init is not None:
            saved = self.no_in
            self.no_in = True
            try:
                init = self._for_init(node.init)
            finally:
                self.no_in = saved
        test = self.expr(node.test, PREC_SEQUENCE) if node.test is not None else ""
        update = self.expr(node.update, PREC_SEQUENCE) if node.update is not None else ""
        head = "for (" + init + "; " + test + "; " + update + ")"
        return head + self.nested(node.body)

    def gen_ForInStatement(self, node: Node) -> str:
        head = "for (" + self._for_init(node.left) + " in "
        head += self.expr(node.right, PREC_SEQUENCE) + ")"
        return head + self.nested(node.body)

    def gen_ForOfStatement(self, node: Node) -> str:
        head = "for await (" if getattr(node, "is_await", False) else "for ("
        head += self._for_init(node.left) + " of "
        head += self.expr(node.right, PREC_ASSIGN) + ")"
        return head + self.nested(node.body)

    def gen_WhileStatement(self, node: Node) -> str:
        return "while (" + self.expr(node.test, PREC_SEQUENCE) + ")" + self.nested(node.body)

    def gen_DoWhileStatement(self, node: Node) -> str:
        text = "do" + self.nested(node.body)
        if node.body.type == "BlockStatement":
            text += " "
        else:
            text += "\n" + self.indent()
        return text + "while (" + self.expr(node.test, PREC_SEQUENCE) + ");"

    def gen_BreakStatement(self, node: Node) -> str:
        if node.label is None:
            return "break;"
        return "break " + self.generate(node.label) + ";"

    def gen_ContinueStatement(self, node: Node) -> str:
        if node.label is None:
            return "continue;"
        return "continue " + self.generate(node.label) + ";"

    def gen_LabeledStatement(self, node: Node) -> str:
        return self.generate(node.label) + ":" + self.nested(node.body)

    def gen_WithStatement(self, node: Node) -> str:
        return "with (" + self.expr(node.object, PREC_SEQUENCE) + ")" + self.nested(node.body)

    def gen_SwitchStatement(self, node: Node) -> str:
        text = "switch (" + self.expr(node.discriminant, PREC_SEQUENCE) + ") {\n"
        self.indent_level += 1
        for case in node.cases:
            text += self.indent() + self.generate(case) + "\n"
        self.indent_level -= 1
        return text + self.indent() + "}"

    def gen_SwitchCase(self, node: Node) -> str:
        if node.test is None:
            text = "default:"
        else:
            text = "case " + self.expr(node.test, PREC_SEQUENCE) + ":"
        self.indent_level += 1
        for stmt in node.consequent:
            text += "\n" + self.indent() + self.statement(stmt)
        self.indent_level -= 1
        return text

    def gen_TryStatement(self, node: Node) -> str:
        text = "try " + self.generate(node.block)
        if node.handler is not None:
            text += " " + self.generate(node.handler)
        if node.finalizer is not None:
            text += " finally " + self.generate(node.finalizer)
        return text

    def gen_CatchClause(self, node: Node) -> str:
        if node.param is None:
            return "catch " + self.generate(node.body)
        return "catch (" + self.generate(node.param) + ") " + self.generate(node.body)

    def declaration(self, node: Node) -> str:
        """A variable declaration without its semicolon."""
        parts = [self.generate(d) for d in node.declarations]
        return node.kind + " " + ", ".join(parts)

    def gen_VariableDeclaration(self, node: Node) -> str:
        return self.declaration(node) + ";"

    def gen_VariableDeclarator(self, node: Node) -> str:
        text = self.generate(node.id)
        if node.init is not None:
            text += " = " + self.expr(node.init, PREC_ASSIGN)
        return text

    def _function(self, node: Node, keyword: bool) -> str:
        text = "async " if getattr(node, "is_async", False) else ""
        if keyword:
            text += "function"
            if getattr(node, "generator", False):
                text += "*"
            if node.id is not None:
                text += " " + self.generate(node.id)
        elif getattr(node, "generator", False):
            text += "*"
        return text + self.params(node.params) + " " + self.generate(node.body)

    def gen_FunctionDeclaration(self, node: Node) -> str:
        return self._function(node, keyword=True)

    def gen_FunctionExpression(self, node: Node) -> str:
        return self._function(node, keyword=True)

    def gen_ArrowFunctionExpression(self, node: Node) -> str:
        text = "async " if getattr(node, "is_async", False) else ""
        text += self.params(node.params) + " => "
        if node.body.type == "BlockStatement":
            return text + self.generate(node.body)
        body = self.expr(node.body, PREC_ASSIGN)
        if body.startswith("{"):
            body = "(" + body + ")"
        return text + body

    def _class(self, node: Node) -> str:
        text = "class"
        if node.id is not None:
            text += " " + self.generate(node.id)
        if node.super_class is not None:
            text += " extends " + self.expr(node.super_class, PREC_CALL)
        return text + " " + self.generate(node.body)

    def gen_ClassDeclaration(self, node: Node) -> str:
        return self._class(node)

    def gen_ClassExpression(self, node: Node) -> str:
        return self._class(node)

    def gen_ClassBody(self, node: Node) -> str:
        return self.block_body(node.body)

    def gen_MethodDefinition(self, node: Node) -> str:
        text = "static " if node.is_static else ""
        value = node.value
        if node.kind in ("get", "set"):
            text += node.kind + " "
        if getattr(value, "is_async", False):
            text += "async "
        if getattr(value, "generator", False):
            text += "*"
        text += self.key(node.key, node.computed)
        return text + self.params(value.params) + " " + self.generate(value.body)

    def gen_PropertyDefinition(self, node: Node) -> str:
        text = "static " if node.is_static else ""
        text += self.key(node.key, node.computed)
        if node.value is not None:
            text += " = " + self.expr(node.value, PREC_ASSIGN)
        return text + ";"

    # ── Modules ──────────────────────────────────────────────

    def _specifiers(self, specifiers: list[Node]) -> str:
        return "{ " + ", ".join(self.generate(s) for s in specifiers) + " }"

    def gen_ImportDeclaration(self, node: Node) -> str:
        if not node.specifiers:
            return "import " + self.generate(node.source) + ";"
        parts: list[str] = []
        named: list[Node] = []
        for spec in node.specifiers:
            if spec.type == "ImportSpecifier":
                named.append(spec)
            else:
                parts.append(self.generate(spec))
        if named:
            parts.append(self._specifiers(named))
        return "import " + ", ".join(parts) + " from " + self.generate(node.source) + ";"

    def gen_ImportSpecifier(self, node: Node) -> str:
        imported = self.generate(node.imported)
        local = self.generate(node.local)
        if imported == local:
            return local
        return imported + " as " + local

    def gen_ImportDefaultSpecifier(self, node: Node) -> str:
        return self.generate(node.local)

    def gen_ImportNamespaceSpecifier(self, node: Node) -> str:
        return "* as " + self.generate(node.local)

    def gen_ExportNamedDeclaration(self, node: Node) -> str:
        if node.declaration is not None:
            return "export " + self.generate(node.declaration)
        text = "export " + self._specifiers(node.specifiers)
        if node.source is not None:
            text += " from " + self.generate(node.source)
        return text + ";"

    def gen_ExportSpecifier(self, node: Node) -> str:
        local = self.generate(node.local)
        exported = self.generate(node.exported)
        if local == exported:
            return local
        return local + " as " + exported

    def gen_ExportDefaultDeclaration(self, node: Node) -> str:
        decl = node.declaration
        if decl.type in _STATEMENT_KINDS:
            return "export default " + self.generate(decl)
        return "export default " + self.expr(decl, PREC_ASSIGN) + ";"

    def gen_ExportAllDeclaration(self, node: Node) -> str:
        text = "export *"
        if node.exported is not None:
            text += " as " + self.generate(node.exported)
        return text + " from " + self.generate(node.source) + ";"

    # ── Expressions ──────────────────────────────────────────

    def gen_Identifier(self, node: Node) -> str:
        return node.name

    def gen_PrivateIdentifier(self, node: Node) -> str:
        return "#" + node.name

    def gen_Literal(self, node: Node) -> str:
        return _literal_text(node)

    def gen_ThisExpression(self, node: Node) -> str:
        return "this"

    def gen_Super(self, node: Node) -> str:
        return "super"

    def gen_TemplateLiteral(self, node: Node) -> str:
        text = "`"
        i = 0
        while i < len(node.quasis):
            text += node.quasis[i].raw
            if i < len(node.expressions):
                text += "${" + self.expr(node.expressions[i], PREC_SEQUENCE) + "}"
            i += 1
        return text + "`"

    def gen_TemplateElement(self, node: Node) -> str:
        return node.raw

    def gen_TaggedTemplateExpression(self, node: Node) -> str:
        return self.expr(node.tag, PREC_CALL) + self.generate(node.quasi)

    def _elements(self, elements: list[Node | None]) -> str:
        parts: list[str] = []
        for element in elements:
            parts.append("" if element is None else self.expr(element, PREC_ASSIGN))
        text = ", ".join(parts)
        if elements and elements[-1] is None:
            text += ","
        return "[" + text + "]"

    def gen_ArrayExpression(self, node: Node) -> str:
        return self._elements(node.elements)

    def gen_ArrayPattern(self, node: Node) -> str:
        return self._elements(node.elements)

    def _properties(self, properties: list[Node]) -> str:
        if not properties:
            return "{}"
        self.indent_level += 1
        lines = [self.indent() + self.generate(p) for p in properties]
        self.indent_level -= 1
        return "{\n" + ",\n".join(lines) + "\n" + self.indent() + "}"

    def gen_ObjectExpression(self, node: Node) -> str:
        return self._properties(node.properties)

    def gen_ObjectPattern(self, node: Node) -> str:
        return self._properties(node.properties)

    def gen_Property(self, node: Node) -> str:
        value = node.value
        if node.shorthand:
            return self.expr(value, PREC_ASSIGN)
        key = self.key(node.key, node.computed)
        if node.kind in ("get", "set"):
            return node.kind + " " + key + self.params(value.params) + " " + self.generate(value.body)
        if node.method:
            text = "async " if getattr(value, "is_async", False) else ""
            if getattr(value, "generator", False):
                text += "*"
            return text + key + self.params(value.params) + " " + self.generate(value.body)
        return key + ": " + self.expr(value, PREC_ASSIGN)

    def gen_SpreadElement(self, node: Node) -> str:
        return "..." + self.expr(node.argument, PREC_ASSIGN)

    def gen_RestElement(self, node: Node) -> str:
        return "..." + self.expr(node.argument, PREC_ASSIGN)

    def gen_AssignmentPattern(self, node: Node) -> str:
        return self.expr(node.left, PREC_CALL) + " = " + self.expr(node.right, PREC_ASSIGN)

    def gen_UnaryExpression(self, node: Node) -> str:
        argument = self.expr(node.argument, PREC_UNARY)
        op = node.operator
        if op.isalpha():
            return op + " " + argument
        if argument.startswith(op):
            return op + " " + argument
        return op + argument

    def gen_UpdateExpression(self, node: Node) -> str:
        if node.prefix:
            return node.operator + self.expr(node.argument, PREC_UNARY)
        return self.expr(node.argument, PREC_POSTFIX) + node.operator

    def _binary(self, node: Node) -> str:
        prec = BINARY_PREC[node.operator]
        if node.operator == "**":
            # A unary operand on the left of `**` is a syntax error
            left = self.expr(node.left, PREC_POSTFIX)
            right = self.expr(node.right, prec)
        else:
            left = self.expr(node.left, prec)
            right = self.expr(node.right, prec + 1)
        return left + " " + node.operator + " " + right

    def gen_BinaryExpression(self, node: Node) -> str:
        return self._binary(node)

    def gen_LogicalExpression(self, node: Node) -> str:
        return self._binary(node)

    def gen_AssignmentExpression(self, node: Node) -> str:
        left = self.expr(node.left, PREC_CALL)
        return left + " " + node.operator + " " + self.expr(node.right, PREC_ASSIGN)

    def gen_ConditionalExpression(self, node: Node) -> str:
        return (
            self.expr(node.test, PREC_COALESCE)
            + " ? "
            + self.expr(node.consequent, PREC_ASSIGN)
            + " : "
            + self.expr(node.alternate, PREC_ASSIGN)
        )

    def gen_CallExpression(self, node: Node) -> str:
        callee = self.operand(node.callee)
        dot = "?." if getattr(node, "optional", False) else ""
        return callee + dot + self.args(node.arguments)

    def gen_NewExpression(self, node: Node) -> str:
        return "new " + self.expr(node.callee, PREC_NEW + 1) + self.args(node.arguments)

    def gen_MemberExpression(self, node: Node) -> str:
        obj = self.operand(node.object)
        optional = getattr(node, "optional", False)
        if node.computed:
            dot = "?.[" if optional else "["
            return obj + dot + self.expr(node.property, PREC_SEQUENCE) + "]"
        return obj + ("?." if optional else ".") + self.generate(node.property)

    def gen_ChainExpression(self, node: Node) -> str:
        return self.generate(node.expression)

    def gen_SequenceExpression(self, node: Node) -> str:
        return ", ".join(self.expr(e, PREC_ASSIGN) for e in node.expressions)

    def gen_AwaitExpression(self, node: Node) -> str:
        return "await " + self.expr(node.argument, PREC_UNARY)

    def gen_YieldExpression(self, node: Node) -> str:
        text = "yield*" if node.delegate else "yield"
        if node.argument is not None:
            text += " " + self.expr(node.argument, PREC_ASSIGN)
        return text

    def gen_MetaProperty(self, node: Node) -> str:
        return self.generate(node.meta) + "." + self.generate(node.property)

    def gen_ImportExpression(self, node: Node) -> str:
        return "import(" + self.expr(node.source, PREC_ASSIGN) + ")"
