"""JavaScript parser — recursive descent producing ESTree-shaped nodes."""

from __future__ import annotations

from .ast import Node
from .tokens import (
    TK_EOF,
    TK_NAME,
    TK_NUM,
    TK_PRIVATE,
    TK_PUNCT,
    TK_REGEX,
    TK_STRING,
    TK_TEMPLATE,
    Token,
)

ASSIGN_OPS: set[str] = {
    "=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "**=",
    "<<=",
    ">>=",
    ">>>=",
    "&=",
    "|=",
    "^=",
    "&&=",
    "||=",
    "??=",
}

# Binary operator precedence, loosest first
BINARY_PREC: dict[str, int] = {
    "??": 1,
    "||": 2,
    "&&": 3,
    "|": 4,
    "^": 5,
    "&": 6,
    "==": 7,
    "!=": 7,
    "===": 7,
    "!==": 7,
    "<": 8,
    ">": 8,
    "<=": 8,
    ">=": 8,
    "instanceof": 8,
    "in": 8,
    "<<": 9,
    ">>": 9,
    ">>>": 9,
    "+": 10,
    "-": 10,
    "*": 11,
    "/": 11,
    "%": 11,
    "**": 12,
}

LOGICAL_OPS: set[str] = {"||", "&&", "??"}

UNARY_OPS: set[str] = {"!", "~", "+", "-", "typeof", "void", "delete"}

# Words that never start an expression statement as an identifier
STATEMENT_KEYWORDS: set[str] = {
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "do",
    "else",
    "export",
    "finally",
    "for",
    "function",
    "if",
    "return",
    "switch",
    "throw",
    "try",
    "var",
    "while",
    "with",
}

# Tokens after which a modifier word (static, get, async...) is itself the key
_MODIFIER_ENDS: set[str] = {"(", "=", ";", "}", ",", ":"}

_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


def _number_value(raw: str) -> int | float:
    text = raw.replace("_", "")
    if text.endswith("n"):
        return int(text[:-1], 0)
    if len(text) > 1 and text[0] == "0" and text[1] in "xXoObB":
        return int(text, 0)
    if len(text) > 1 and text[0] == "0" and text.isdigit():
        for c in text:
            if c in "89":
                return int(text, 10)
        return int(text, 8)
    if "." in text or "e" in text or "E" in text:
        return float(text)
    return int(text)


def _string_value(raw: str) -> str:
    """Decode the escapes of a quoted string literal."""
    body = raw[1:-1]
    if "\\" not in body:
        return body
    out: list[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c != "\\" or i + 1 >= len(body):
            out.append(c)
            i += 1
            continue
        nxt = body[i + 1]
        if nxt in _ESCAPES:
            out.append(_ESCAPES[nxt])
            i += 2
        elif nxt == "x":
            out.append(chr(int(body[i + 2 : i + 4], 16)))
            i += 4
        elif nxt == "u" and i + 2 < len(body) and body[i + 2] == "{":
            close = body.index("}", i)
            out.append(chr(int(body[i + 3 : close], 16)))
            i = close + 1
        elif nxt == "u":
            out.append(chr(int(body[i + 2 : i + 6], 16)))
            i += 6
        elif nxt == "\r" and body.startswith("\r\n", i + 1):
            i += 3
        elif nxt == "\n":
            i += 2
        else:
            out.append(nxt)
            i += 2
    return "".join(out)


class Parser:
    """Recursive descent parser for modern JavaScript (script or module)."""

    def __init__(self, tokens: list[Token], source: str):
        self.tokens: list[Token] = tokens
        self.source: str = source
        self.pos: int = 0
        self.no_in: bool = False
        self.in_function: bool = False
        self.in_async: bool = False
        self.in_generator: bool = False

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.tokens[self.pos]
        return tok.value == value and (tok.type == TK_PUNCT or tok.type == TK_NAME)

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def eat(self, value: str) -> bool:
        if self.at(value):
            self.pos += 1
            return True
        return False

    def expect(self, value: str) -> Token:
        tok = self.current()
        if not self.at(value):
            got = tok.value if tok.type != TK_EOF else "end of input"
            raise self.error("expected '" + value + "', got '" + got + "'")
        return self.advance()

    def expect_name(self) -> Token:
        tok = self.current()
        if tok.type != TK_NAME:
            raise self.error("expected identifier, got '" + tok.value + "'")
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def start(self) -> int:
        return self.current().start

    def last_end(self) -> int:
        if self.pos == 0:
            return 0
        return self.tokens[self.pos - 1].end

    def finish(self, type_: str, start: int, **fields) -> Node:
        return Node(type_, start, self.last_end(), **fields)

    def consume_semicolon(self) -> None:
        """Accept `;`, or insert one before `}`, end of input or a line break."""
        if self.eat(";"):
            return
        tok = self.current()
        if tok.type == TK_EOF or self.at("}") or tok.nl_before:
            return
        raise self.error("expected ';', got '" + tok.value + "'")

    def _can_insert_semicolon(self) -> bool:
        tok = self.current()
        return tok.type == TK_EOF or tok.nl_before or self.at(";") or self.at("}")

    # ── Program ──────────────────────────────────────────────

    def parse_program(self) -> Node:
        body: list[Node] = []
        while not self.at_type(TK_EOF):
            body.append(self.parse_statement())
        return Node("Program", 0, len(self.source), body=body, source_type="module")

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> Node:
        tok = self.current()
        if tok.type == TK_PUNCT:
            if tok.value == "{":
                return self.parse_block()
            if tok.value == ";":
                start = self.start()
                self.advance()
                return self.finish("EmptyStatement", start)
        if tok.type == TK_NAME:
            value = tok.value
            if value == "var" or value == "const":
                return self.parse_var_statement()
            if value == "let" and self._let_is_declaration():
                return self.parse_var_statement()
            if value == "function":
                return self.parse_function(statement=True)
            if value == "async" and self._at_async_function():
                return self.parse_function(statement=True)
            if value == "class":
                return self.parse_class(statement=True)
            if value == "if":
                return self.parse_if()
            if value == "for":
                return self.parse_for()
            if value == "while":
                return self.parse_while()
            if value == "do":
                return self.parse_do_while()
            if value == "return":
                return self.parse_return()
            if value == "break" or value == "continue":
                return self.parse_jump()
            if value == "throw":
                return self.parse_throw()
            if value == "try":
                return self.parse_try()
            if value == "switch":
                return self.parse_switch()
            if value == "with":
                return self.parse_with()
            if value == "debugger":
                start = self.start()
                self.advance()
                self.consume_semicolon()
                return self.finish("DebuggerStatement", start)
            if value == "import" and self.peek(1).value not in ("(", "."):
                return self.parse_import()
            if value == "export":
                return self.parse_export()
            if value not in STATEMENT_KEYWORDS and self.peek(1).value == ":":
                return self.parse_labeled()
        return self.parse_expression_statement()

    def _let_is_declaration(self) -> bool:
        nxt = self.peek(1)
        return nxt.type == TK_NAME or nxt.value == "[" or nxt.value == "{"

    def _at_async_function(self) -> bool:
        nxt = self.peek(1)
        return nxt.value == "function" and not nxt.nl_before

    def parse_block(self) -> Node:
        start = self.start()
        self.expect("{")
        body: list[Node] = []
        while not self.at("}"):
            if self.at_type(TK_EOF):
                raise self.error("unterminated block")
            body.append(self.parse_statement())
        self.advance()
        return self.finish("BlockStatement", start, body=body)

    def parse_expression_statement(self) -> Node:
        start = self.start()
        expr = self.parse_expression()
        self.consume_semicolon()
        return self.finish("ExpressionStatement", start, expression=expr)

    def parse_var_declaration(self) -> Node:
        start = self.start()
        kind = self.advance().value
        declarations: list[Node] = []
        while True:
            dstart = self.start()
            target = self.parse_binding_target()
            init: Node | None = None
            if self.eat("="):
                init = self.parse_assign()
            declarations.append(
                self.finish("VariableDeclarator", dstart, id=target, init=init)
            )
            if not self.eat(","):
                break
        return self.finish(
            "VariableDeclaration", start, kind=kind, declarations=declarations
        )

    def parse_var_statement(self) -> Node:
        start = self.start()
        decl = self.parse_var_declaration()
        self.consume_semicolon()
        decl.start = start
        decl.end = self.last_end()
        return decl

    def parse_if(self) -> Node:
        start = self.start()
        self.advance()
        test = self.parse_paren_expression()
        consequent = self.parse_statement()
        alternate: Node | None = None
        if self.eat("else"):
            alternate = self.parse_statement()
        return self.finish(
            "IfStatement", start, test=test, consequent=consequent, alternate=alternate
        )

    def parse_paren_expression(self) -> Node:
        self.expect("(")
        saved = self.no_in
        self.no_in = False
        expr = self.parse_expression()
        self.no_in = saved
        self.expect(")")
        return expr

    def parse_for(self) -> Node:
        start = self.start()
        self.advance()
        is_await = self.eat("await")
        self.expect("(")
        init: Node | None = None
        if not self.at(";"):
            saved = self.no_in
            self.no_in = True
            if (
                self.at("var")
                or self.at("const")
                or (self.at("let") and self._let_is_declaration())
            ):
                init = self.parse_var_declaration()
            else:
                init = self.parse_expression()
            self.no_in = saved
            if self.at("of") or self.at("in"):
                kind = "ForOfStatement" if self.advance().value == "of" else "ForInStatement"
                if init.type != "VariableDeclaration":
                    init = self._to_pattern(init)
                right = self.parse_assign() if kind == "ForOfStatement" else self.parse_expression()
                self.expect(")")
                body = self.parse_statement()
                if kind == "ForOfStatement":
                    return self.finish(
                        kind, start, left=init, right=right, body=body, is_await=is_await
                    )
                return self.finish(kind, start, left=init, right=right, body=body)
        self.expect(";")
        test: Node | None = None
        if not self.at(";"):
            test = self.parse_expression()
        self.expect(";")
        update: Node | None = None
        if not self.at(")"):
            update = self.parse_expression()
        self.expect(")")
        body = self.parse_statement()
        return self.finish(
            "ForStatement", start, init=init, test=test, update=update, body=body
        )

    def parse_while(self) -> Node:
        start = self.start()
        self.advance()
        test = self.parse_paren_expression()
        body = self.parse_statement()
        return self.finish("WhileStatement", start, test=test, body=body)

    def parse_do_while(self) -> Node:
        start = self.start()
        self.advance()
        body = self.parse_statement()
        self.expect("while")
        test = self.parse_paren_expression()
        self.eat(";")
        return self.finish("DoWhileStatement", start, body=body, test=test)

    def parse_return(self) -> Node:
        start = self.start()
        self.advance()
        argument: Node | None = None
        if not self._can_insert_semicolon():
            argument = self.parse_expression()
        self.consume_semicolon()
        return self.finish("ReturnStatement", start, argument=argument)

    def parse_jump(self) -> Node:
        start = self.start()
        keyword = self.advance().value
        label: Node | None = None
        if self.at_type(TK_NAME) and not self.current().nl_before:
            tok = self.advance()
            label = Node("Identifier", tok.start, tok.end, name=tok.value)
        self.consume_semicolon()
        kind = "BreakStatement" if keyword == "break" else "ContinueStatement"
        return self.finish(kind, start, label=label)

    def parse_throw(self) -> Node:
        start = self.start()
        self.advance()
        if self.current().nl_before:
            raise self.error("illegal newline after throw")
        argument = self.parse_expression()
        self.consume_semicolon()
        return self.finish("ThrowStatement", start, argument=argument)

    def parse_try(self) -> Node:
        start = self.start()
        self.advance()
        block = self.parse_block()
        handler: Node | None = None
        finalizer: Node | None = None
        if self.at("catch"):
            cstart = self.start()
            self.advance()
            param: Node | None = None
            if self.eat("("):
                param = self.parse_binding_target()
                self.expect(")")
            body = self.parse_block()
            handler = self.finish("CatchClause", cstart, param=param, body=body)
        if self.eat("finally"):
            finalizer = self.parse_block()
        if handler is None and finalizer is None:
            raise self.error("missing catch or finally after try")
        return self.finish(
            "TryStatement", start, block=block, handler=handler, finalizer=finalizer
        )

    def parse_switch(self) -> Node:
        start = self.start()
        self.advance()
        discriminant = self.parse_paren_expression()
        self.expect("{")
        cases: list[Node] = []
        while not self.eat("}"):
            cstart = self.start()
            test: Node | None = None
            if self.eat("case"):
                test = self.parse_expression()
            else:
                self.expect("default")
            self.expect(":")
            consequent: list[Node] = []
            while not (self.at("case") or self.at("default") or self.at("}")):
                if self.at_type(TK_EOF):
                    raise self.error("unterminated switch")
                consequent.append(self.parse_statement())
            cases.append(
                self.finish("SwitchCase", cstart, test=test, consequent=consequent)
            )
        return self.finish(
            "SwitchStatement", start, discriminant=discriminant, cases=cases
        )

    def parse_with(self) -> Node:
        start = self.start()
        self.advance()
        obj = self.parse_paren_expression()
        body = self.parse_statement()
        return self.finish("WithStatement", start, object=obj, body=body)

    def parse_labeled(self) -> Node:
        start = self.start()
        tok = self.advance()
        label = Node("Identifier", tok.start, tok.end, name=tok.value)
        self.expect(":")
        body = self.parse_statement()
        return self.finish("LabeledStatement", start, label=label, body=body)

    # ── Modules ──────────────────────────────────────────────

    def parse_module_source(self) -> Node:
        tok = self.current()
        if tok.type != TK_STRING:
            raise self.error("expected module specifier")
        self.advance()
        return Node(
            "Literal", tok.start, tok.end, value=_string_value(tok.value), raw=tok.value
        )

    def parse_module_name(self) -> Node:
        tok = self.current()
        if tok.type == TK_STRING:
            return self.parse_module_source()
        tok = self.expect_name()
        return Node("Identifier", tok.start, tok.end, name=tok.value)

    def _skip_import_attributes(self) -> None:
        if (self.at("with") or self.at("assert")) and self.peek(1).value == "{":
            self.advance()
            self.advance()
            while not self.eat("}"):
                if self.at_type(TK_EOF):
                    raise self.error("unterminated import attributes")
                self.advance()

    def parse_import(self) -> Node:
        start = self.start()
        self.advance()
        specifiers: list[Node] = []
        if not self.at_type(TK_STRING):
            if self.at_type(TK_NAME) and not self.at("from") or (
                self.at("from") and self.peek(1).value == "from"
            ):
                tok = self.advance()
                local = Node("Identifier", tok.start, tok.end, name=tok.value)
                specifiers.append(
                    Node("ImportDefaultSpecifier", tok.start, tok.end, local=local)
                )
                self.eat(",")
            if self.at("*"):
                sstart = self.start()
                self.advance()
                self.expect("as")
                tok = self.expect_name()
                local = Node("Identifier", tok.start, tok.end, name=tok.value)
                specifiers.append(
                    self.finish("ImportNamespaceSpecifier", sstart, local=local)
                )
            elif self.eat("{"):
                while not self.eat("}"):
                    sstart = self.start()
                    imported = self.parse_module_name()
                    local = imported
                    if self.eat("as"):
                        tok = self.expect_name()
                        local = Node("Identifier", tok.start, tok.end, name=tok.value)
                    specifiers.append(
                        self.finish(
                            "ImportSpecifier", sstart, imported=imported, local=local
                        )
                    )
                    if not self.eat(","):
                        self.expect("}")
                        break
            self.expect("from")
        source = self.parse_module_source()
        self._skip_import_attributes()
        self.consume_semicolon()
        return self.finish(
            "ImportDeclaration", start, specifiers=specifiers, source=source
        )

    def parse_export(self) -> Node:
        start = self.start()
        self.advance()
        if self.eat("default"):
            if self.at("function") or (self.at("async") and self._at_async_function()):
                declaration = self.parse_function(statement=True, optional_id=True)
            elif self.at("class"):
                declaration = self.parse_class(statement=True, optional_id=True)
            else:
                declaration = self.parse_assign()
                self.consume_semicolon()
            return self.finish(
                "ExportDefaultDeclaration", start, declaration=declaration
            )
        if self.at("*"):
            self.advance()
            exported: Node | None = None
            if self.eat("as"):
                exported = self.parse_module_name()
            self.expect("from")
            source = self.parse_module_source()
            self._skip_import_attributes()
            self.consume_semicolon()
            return self.finish(
                "ExportAllDeclaration", start, exported=exported, source=source
            )
        if self.eat("{"):
            specifiers: list[Node] = []
            while not self.eat("}"):
                sstart = self.start()
                local = self.parse_module_name()
                exported_name = local
                if self.eat("as"):
                    exported_name = self.parse_module_name()
                specifiers.append(
                    self.finish(
                        "ExportSpecifier", sstart, local=local, exported=exported_name
                    )
                )
                if not self.eat(","):
                    self.expect("}")
                    break
            source: Node | None = None
            if self.eat("from"):
                source = self.parse_module_source()
                self._skip_import_attributes()
            self.consume_semicolon()
            return self.finish(
                "ExportNamedDeclaration",
                start,
                declaration=None,
                specifiers=specifiers,
                source=source,
            )
        declaration = self.parse_statement()
        if declaration.type not in (
            "VariableDeclaration",
            "FunctionDeclaration",
            "ClassDeclaration",
        ):
            raise ParseError("unexpected export", self.current().line, self.current().col)
        return self.finish(
            "ExportNamedDeclaration",
            start,
            declaration=declaration,
            specifiers=[],
            source=None,
        )

    # ── Functions and classes ────────────────────────────────

    def parse_function(self, statement: bool, optional_id: bool = False) -> Node:
        start = self.start()
        is_async = self.eat("async")
        self.expect("function")
        generator = self.eat("*")
        fn_id: Node | None = None
        if self.at_type(TK_NAME) and not self.at("("):
            tok = self.advance()
            fn_id = Node("Identifier", tok.start, tok.end, name=tok.value)
        elif statement and not optional_id:
            raise self.error("function name required")
        params, body = self.parse_function_rest(is_async, generator)
        kind = "FunctionDeclaration" if statement else "FunctionExpression"
        return self.finish(
            kind,
            start,
            id=fn_id,
            params=params,
            body=body,
            is_async=is_async,
            generator=generator,
        )

    def parse_function_rest(
        self, is_async: bool, generator: bool
    ) -> tuple[list[Node], Node]:
        saved = (self.in_function, self.in_async, self.in_generator, self.no_in)
        self.in_function = True
        self.in_async = is_async
        self.in_generator = generator
        self.no_in = False
        params = self.parse_params()
        body = self.parse_block()
        self.in_function, self.in_async, self.in_generator, self.no_in = saved
        return params, body

    def parse_params(self) -> list[Node]:
        self.expect("(")
        params: list[Node] = []
        while not self.at(")"):
            params.append(self.parse_binding_element())
            if not self.eat(","):
                break
        self.expect(")")
        return params

    def parse_method_value(self, is_async: bool, generator: bool) -> Node:
        start = self.start()
        params, body = self.parse_function_rest(is_async, generator)
        return self.finish(
            "FunctionExpression",
            start,
            id=None,
            params=params,
            body=body,
            is_async=is_async,
            generator=generator,
        )

    def parse_class(self, statement: bool, optional_id: bool = False) -> Node:
        start = self.start()
        self.expect("class")
        class_id: Node | None = None
        if self.at_type(TK_NAME) and not self.at("extends"):
            tok = self.advance()
            class_id = Node("Identifier", tok.start, tok.end, name=tok.value)
        elif statement and not optional_id:
            raise self.error("class name required")
        super_class: Node | None = None
        if self.eat("extends"):
            super_class = self.parse_lhs()
        body = self.parse_class_body()
        kind = "ClassDeclaration" if statement else "ClassExpression"
        return self.finish(
            kind, start, id=class_id, super_class=super_class, body=body
        )

    def parse_class_body(self) -> Node:
        start = self.start()
        self.expect("{")
        members: list[Node] = []
        while not self.eat("}"):
            if self.eat(";"):
                continue
            if self.at_type(TK_EOF):
                raise self.error("unterminated class body")
            members.append(self.parse_class_member())
        return self.finish("ClassBody", start, body=members)

    def _modifier_ahead(self) -> bool:
        """Is the current word a modifier rather than the member's own key?"""
        nxt = self.peek(1)
        if nxt.type == TK_EOF:
            return False
        return not (nxt.type == TK_PUNCT and nxt.value in _MODIFIER_ENDS)

    def parse_class_member(self) -> Node:
        start = self.start()
        is_static = False
        if self.at("static") and self._modifier_ahead():
            self.advance()
            is_static = True
            if self.at("{"):
                saved = (self.in_function, self.in_async, self.in_generator)
                self.in_function, self.in_async, self.in_generator = True, False, False
                block = self.parse_block()
                self.in_function, self.in_async, self.in_generator = saved
                return self.finish("StaticBlock", start, body=block.body)
        kind = "method"
        is_async = False
        generator = False
        if (
            self.at("async")
            and self._modifier_ahead()
            and not self.peek(1).nl_before
        ):
            self.advance()
            is_async = True
        if self.eat("*"):
            generator = True
        if (self.at("get") or self.at("set")) and self._modifier_ahead():
            kind = self.advance().value
        key, computed = self.parse_property_key()
        if self.at("("):
            if (
                not is_static
                and not computed
                and kind == "method"
                and self._key_name(key) == "constructor"
            ):
                kind = "constructor"
            value = self.parse_method_value(is_async, generator)
            return self.finish(
                "MethodDefinition",
                start,
                key=key,
                value=value,
                kind=kind,
                computed=computed,
                is_static=is_static,
            )
        field_value: Node | None = None
        if self.eat("="):
            saved = (self.in_function, self.in_async, self.in_generator)
            self.in_function, self.in_async, self.in_generator = True, False, False
            field_value = self.parse_assign()
            self.in_function, self.in_async, self.in_generator = saved
        self.consume_semicolon()
        return self.finish(
            "PropertyDefinition",
            start,
            key=key,
            value=field_value,
            computed=computed,
            is_static=is_static,
        )

    def _key_name(self, key: Node) -> str | None:
        if key.type == "Identifier":
            return key.name
        if key.type == "Literal" and isinstance(key.value, str):
            return key.value
        return None

    def parse_property_key(self) -> tuple[Node, bool]:
        tok = self.current()
        if self.at("["):
            self.advance()
            saved = self.no_in
            self.no_in = False
            key = self.parse_assign()
            self.no_in = saved
            self.expect("]")
            return key, True
        if tok.type == TK_NAME:
            self.advance()
            return Node("Identifier", tok.start, tok.end, name=tok.value), False
        if tok.type == TK_PRIVATE:
            self.advance()
            return (
                Node("PrivateIdentifier", tok.start, tok.end, name=tok.value[1:]),
                False,
            )
        if tok.type == TK_STRING:
            self.advance()
            return (
                Node(
                    "Literal",
                    tok.start,
                    tok.end,
                    value=_string_value(tok.value),
                    raw=tok.value,
                ),
                False,
            )
        if tok.type == TK_NUM:
            self.advance()
            return (
                Node(
                    "Literal",
                    tok.start,
                    tok.end,
                    value=_number_value(tok.value),
                    raw=tok.value,
                ),
                False,
            )
        raise self.error("unexpected '" + tok.value + "' in property key")

    # ── Patterns ─────────────────────────────────────────────

    def parse_binding_target(self) -> Node:
        if self.at("["):
            return self.parse_array_pattern()
        if self.at("{"):
            return self.parse_object_pattern()
        tok = self.expect_name()
        return Node("Identifier", tok.start, tok.end, name=tok.value)

    def parse_binding_element(self) -> Node:
        start = self.start()
        if self.eat("..."):
            argument = self.parse_binding_target()
            return self.finish("RestElement", start, argument=argument)
        target = self.parse_binding_target()
        if self.eat("="):
            default = self.parse_assign()
            return self.finish("AssignmentPattern", start, left=target, right=default)
        return target

    def parse_array_pattern(self) -> Node:
        start = self.start()
        self.expect("[")
        elements: list[Node | None] = []
        while not self.at("]"):
            if self.at(","):
                self.advance()
                elements.append(None)
                continue
            elements.append(self.parse_binding_element())
            if not self.eat(","):
                break
        self.expect("]")
        return self.finish("ArrayPattern", start, elements=elements)

    def parse_object_pattern(self) -> Node:
        start = self.start()
        self.expect("{")
        properties: list[Node] = []
        while not self.at("}"):
            pstart = self.start()
            if self.eat("..."):
                argument = self.parse_binding_target()
                properties.append(self.finish("RestElement", pstart, argument=argument))
            else:
                key, computed = self.parse_property_key()
                if self.eat(":"):
                    value = self.parse_binding_element()
                    shorthand = False
                else:
                    value = Node("Identifier", key.start, key.end, name=key.name)
                    shorthand = True
                    if self.eat("="):
                        default = self.parse_assign()
                        value = self.finish(
                            "AssignmentPattern", key.start, left=value, right=default
                        )
                properties.append(
                    self.finish(
                        "Property",
                        pstart,
                        key=key,
                        value=value,
                        kind="init",
                        method=False,
                        shorthand=shorthand,
                        computed=computed,
                    )
                )
            if not self.eat(","):
                break
        self.expect("}")
        return self.finish("ObjectPattern", start, properties=properties)

    def _to_pattern(self, node: Node) -> Node:
        """Reinterpret an expression as an assignment target."""
        if node.type in ("Identifier", "MemberExpression"):
            return node
        if node.type == "ObjectExpression":
            props: list[Node] = []
            for prop in node.properties:
                if prop.type == "SpreadElement":
                    props.append(
                        Node(
                            "RestElement",
                            prop.start,
                            prop.end,
                            argument=self._to_pattern(prop.argument),
                        )
                    )
                else:
                    prop.value = self._to_pattern(prop.value)
                    props.append(prop)
            return Node("ObjectPattern", node.start, node.end, properties=props)
        if node.type == "ArrayExpression":
            elements: list[Node | None] = []
            for element in node.elements:
                if element is None:
                    elements.append(None)
                elif element.type == "SpreadElement":
                    elements.append(
                        Node(
                            "RestElement",
                            element.start,
                            element.end,
                            argument=self._to_pattern(element.argument),
                        )
                    )
                else:
                    elements.append(self._to_pattern(element))
            return Node("ArrayPattern", node.start, node.end, elements=elements)
        if node.type == "AssignmentExpression" and node.operator == "=":
            return Node(
                "AssignmentPattern",
                node.start,
                node.end,
                left=self._to_pattern(node.left),
                right=node.right,
            )
        if node.type in ("AssignmentPattern", "ObjectPattern", "ArrayPattern"):
            return node
        raise ParseError(
            "invalid assignment target",
            self.source.count("\n", 0, node.start or 0) + 1,
            (node.start or 0) - self.source.rfind("\n", 0, node.start or 0),
        )

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self) -> Node:
        start = self.start()
        expr = self.parse_assign()
        if not self.at(","):
            return expr
        expressions = [expr]
        while self.eat(","):
            expressions.append(self.parse_assign())
        return self.finish("SequenceExpression", start, expressions=expressions)

    def _arrow_after_parens(self, offset: int) -> bool:
        """Token at `offset` is `(`: is its matching `)` followed by `=>`?"""
        depth = 0
        i = self.pos + offset
        while i < len(self.tokens):
            tok = self.tokens[i]
            if tok.type == TK_PUNCT:
                if tok.value in ("(", "[", "{"):
                    depth += 1
                elif tok.value in (")", "]", "}"):
                    depth -= 1
                    if depth == 0:
                        nxt = self.tokens[i + 1]
                        return nxt.value == "=>" and not nxt.nl_before
            elif tok.type == TK_EOF:
                return False
            i += 1
        return False

    def parse_assign(self) -> Node:
        tok = self.current()
        if tok.type == TK_NAME:
            nxt = self.peek(1)
            if tok.value == "yield" and self.in_generator:
                return self.parse_yield()
            if nxt.value == "=>" and not nxt.nl_before:
                return self.parse_arrow(is_async=False)
            if tok.value == "async" and not nxt.nl_before:
                if nxt.type == TK_NAME and self.peek(2).value == "=>":
                    return self.parse_arrow(is_async=True)
                if nxt.value == "(" and self._arrow_after_parens(1):
                    return self.parse_arrow(is_async=True)
        elif self.at("(") and self._arrow_after_parens(0):
            return self.parse_arrow(is_async=False)
        start = self.start()
        left = self.parse_conditional()
        op = self.current()
        if op.type == TK_PUNCT and op.value in ASSIGN_OPS:
            self.advance()
            if op.value == "=":
                left = self._to_pattern(left)
            right = self.parse_assign()
            return self.finish(
                "AssignmentExpression", start, operator=op.value, left=left, right=right
            )
        return left

    def parse_yield(self) -> Node:
        start = self.start()
        self.advance()
        delegate = False
        argument: Node | None = None
        if not self.current().nl_before:
            delegate = self.eat("*")
            tok = self.current()
            ends = (")", "]", "}", ",", ";", ":")
            if delegate or not (
                tok.type == TK_EOF or (tok.type == TK_PUNCT and tok.value in ends)
            ):
                argument = self.parse_assign()
        return self.finish(
            "YieldExpression", start, argument=argument, delegate=delegate
        )

    def parse_arrow(self, is_async: bool) -> Node:
        start = self.start()
        if is_async:
            self.advance()
        saved = (self.in_function, self.in_async, self.in_generator, self.no_in)
        self.in_function = True
        self.in_async = is_async
        self.in_generator = False
        if self.at("("):
            self.no_in = False
            params = self.parse_params()
        else:
            tok = self.expect_name()
            params = [Node("Identifier", tok.start, tok.end, name=tok.value)]
        self.expect("=>")
        if self.at("{"):
            self.no_in = False
            body = self.parse_block()
            expression_body = False
        else:
            self.no_in = saved[3]
            body = self.parse_assign()
            expression_body = True
        self.in_function, self.in_async, self.in_generator, self.no_in = saved
        return self.finish(
            "ArrowFunctionExpression",
            start,
            id=None,
            params=params,
            body=body,
            is_async=is_async,
            generator=False,
            expression_body=expression_body,
        )

    def parse_conditional(self) -> Node:
        start = self.start()
        test = self.parse_binary(0)
        if not self.eat("?"):
            return test
        saved = self.no_in
        self.no_in = False
        consequent = self.parse_assign()
        self.no_in = saved
        self.expect(":")
        alternate = self.parse_assign()
        return self.finish(
            "ConditionalExpression",
            start,
            test=test,
            consequent=consequent,
            alternate=alternate,
        )

    def _binary_op(self) -> str | None:
        tok = self.current()
        if tok.type == TK_PUNCT and tok.value in BINARY_PREC:
            return tok.value
        if tok.type == TK_NAME:
            if tok.value == "instanceof":
                return tok.value
            if tok.value == "in" and not self.no_in:
                return tok.value
        return None

    def parse_binary(self, min_prec: int) -> Node:
        start = self.start()
        left = self.parse_unary()
        while True:
            op = self._binary_op()
            if op is None:
                return left
            prec = BINARY_PREC[op]
            if prec <= min_prec:
                return left
            self.advance()
            # ** is right-associative
            right = self.parse_binary(prec - 1 if op == "**" else prec)
            kind = "LogicalExpression" if op in LOGICAL_OPS else "BinaryExpression"
            left = self.finish(kind, start, operator=op, left=left, right=right)

    def parse_unary(self) -> Node:
        start = self.start()
        tok = self.current()
        if (tok.type == TK_PUNCT or tok.type == TK_NAME) and tok.value in UNARY_OPS:
            self.advance()
            argument = self.parse_unary()
            return self.finish(
                "UnaryExpression",
                start,
                operator=tok.value,
                prefix=True,
                argument=argument,
            )
        if tok.type == TK_PUNCT and tok.value in ("++", "--"):
            self.advance()
            argument = self.parse_unary()
            return self.finish(
                "UpdateExpression",
                start,
                operator=tok.value,
                prefix=True,
                argument=argument,
            )
        if (
            tok.type == TK_NAME
            and tok.value == "await"
            and (self.in_async or not self.in_function)
        ):
            self.advance()
            argument = self.parse_unary()
            return self.finish("AwaitExpression", start, argument=argument)
        expr = self.parse_lhs()
        nxt = self.current()
        if nxt.type == TK_PUNCT and nxt.value in ("++", "--") and not nxt.nl_before:
            self.advance()
            return self.finish(
                "UpdateExpression",
                start,
                operator=nxt.value,
                prefix=False,
                argument=expr,
            )
        return expr

    def parse_lhs(self) -> Node:
        start = self.start()
        if self.at("new"):
            expr = self.parse_new()
        else:
            expr = self.parse_primary()
        return self.parse_call_tail(expr, start, allow_call=True)

    def parse_new(self) -> Node:
        start = self.start()
        new_tok = self.advance()
        if self.eat("."):
            tok = self.expect_name()
            meta = Node("Identifier", new_tok.start, new_tok.end, name="new")
            prop = Node("Identifier", tok.start, tok.end, name=tok.value)
            return self.finish("MetaProperty", start, meta=meta, property=prop)
        cstart = self.start()
        if self.at("new"):
            callee = self.parse_new()
        else:
            callee = self.parse_primary()
        callee = self.parse_call_tail(callee, cstart, allow_call=False)
        arguments: list[Node] = []
        if self.at("("):
            arguments = self.parse_arguments()
        return self.finish("NewExpression", start, callee=callee, arguments=arguments)

    def parse_arguments(self) -> list[Node]:
        self.expect("(")
        saved = self.no_in
        self.no_in = False
        args: list[Node] = []
        while not self.at(")"):
            astart = self.start()
            if self.eat("..."):
                argument = self.parse_assign()
                args.append(self.finish("SpreadElement", astart, argument=argument))
            else:
                args.append(self.parse_assign())
            if not self.eat(","):
                break
        self.no_in = saved
        self.expect(")")
        return args

    def _member_property(self) -> Node:
        tok = self.current()
        if tok.type == TK_NAME:
            self.advance()
            return Node("Identifier", tok.start, tok.end, name=tok.value)
        if tok.type == TK_PRIVATE:
            self.advance()
            return Node("PrivateIdentifier", tok.start, tok.end, name=tok.value[1:])
        raise self.error("expected property name, got '" + tok.value + "'")

    def parse_call_tail(self, expr: Node, start: int, allow_call: bool) -> Node:
        chained = False
        while True:
            tok = self.current()
            if self.at("."):
                self.advance()
                prop = self._member_property()
                expr = self.finish(
                    "MemberExpression",
                    start,
                    object=expr,
                    property=prop,
                    computed=False,
                    optional=False,
                )
            elif self.at("?.") and allow_call:
                self.advance()
                chained = True
                if self.at("("):
                    args = self.parse_arguments()
                    expr = self.finish(
                        "CallExpression",
                        start,
                        callee=expr,
                        arguments=args,
                        optional=True,
                    )
                elif self.at("["):
                    prop = self._computed_property()
                    expr = self.finish(
                        "MemberExpression",
                        start,
                        object=expr,
                        property=prop,
                        computed=True,
                        optional=True,
                    )
                else:
                    prop = self._member_property()
                    expr = self.finish(
                        "MemberExpression",
                        start,
                        object=expr,
                        property=prop,
                        computed=False,
                        optional=True,
                    )
            elif self.at("["):
                prop = self._computed_property()
                expr = self.finish(
                    "MemberExpression",
                    start,
                    object=expr,
                    property=prop,
                    computed=True,
                    optional=False,
                )
            elif self.at("(") and allow_call:
                args = self.parse_arguments()
                expr = self.finish(
                    "CallExpression", start, callee=expr, arguments=args, optional=False
                )
            elif tok.type == TK_TEMPLATE and tok.value.startswith("`") and not chained:
                quasi = self.parse_template()
                expr = self.finish(
                    "TaggedTemplateExpression", start, tag=expr, quasi=quasi
                )
            else:
                break
        if chained:
            expr = Node("ChainExpression", expr.start, expr.end, expression=expr)
        return expr

    def _computed_property(self) -> Node:
        self.expect("[")
        saved = self.no_in
        self.no_in = False
        prop = self.parse_expression()
        self.no_in = saved
        self.expect("]")
        return prop

    def parse_primary(self) -> Node:
        tok = self.current()
        start = tok.start
        if tok.type == TK_NAME:
            value = tok.value
            if value == "function":
                return self.parse_function(statement=False)
            if value == "async" and self._at_async_function():
                return self.parse_function(statement=False)
            if value == "class":
                return self.parse_class(statement=False)
            if value == "this":
                self.advance()
                return self.finish("ThisExpression", start)
            if value == "super":
                self.advance()
                return self.finish("Super", start)
            if value == "null":
                self.advance()
                return self.finish("Literal", start, value=None, raw="null")
            if value == "true" or value == "false":
                self.advance()
                return self.finish("Literal", start, value=value == "true", raw=value)
            if value == "import":
                self.advance()
                if self.eat("."):
                    prop_tok = self.expect_name()
                    meta = Node("Identifier", tok.start, tok.end, name="import")
                    prop = Node(
                        "Identifier", prop_tok.start, prop_tok.end, name=prop_tok.value
                    )
                    return self.finish("MetaProperty", start, meta=meta, property=prop)
                args = self.parse_arguments()
                if not args:
                    raise self.error("import() needs a module specifier")
                return self.finish("ImportExpression", start, source=args[0])
            if value in STATEMENT_KEYWORDS:
                raise self.error("unexpected keyword '" + value + "'")
            self.advance()
            return Node("Identifier", tok.start, tok.end, name=value)
        if tok.type == TK_NUM:
            self.advance()
            return Node(
                "Literal", tok.start, tok.end, value=_number_value(tok.value), raw=tok.value
            )
        if tok.type == TK_STRING:
            self.advance()
            return Node(
                "Literal", tok.start, tok.end, value=_string_value(tok.value), raw=tok.value
            )
        if tok.type == TK_REGEX:
            self.advance()
            close = tok.value.rfind("/")
            return Node(
                "Literal",
                tok.start,
                tok.end,
                value=None,
                raw=tok.value,
                regex={"pattern": tok.value[1:close], "flags": tok.value[close + 1 :]},
            )
        if tok.type == TK_TEMPLATE and tok.value.startswith("`"):
            return self.parse_template()
        if tok.type == TK_PRIVATE:
            # `#x in obj`
            self.advance()
            return Node("PrivateIdentifier", tok.start, tok.end, name=tok.value[1:])
        if self.at("("):
            return self.parse_paren_expression()
        if self.at("["):
            return self.parse_array()
        if self.at("{"):
            return self.parse_object()
        if tok.type == TK_EOF:
            raise self.error("unexpected end of input")
        raise self.error("unexpected '" + tok.value + "'")

    def parse_template(self) -> Node:
        start = self.start()
        quasis: list[Node] = []
        expressions: list[Node] = []
        saved = self.no_in
        self.no_in = False
        while True:
            tok = self.current()
            if tok.type != TK_TEMPLATE:
                raise self.error("unterminated template literal")
            self.advance()
            tail = not tok.value.endswith("${")
            qend = tok.end - 1 if tail else tok.end - 2
            raw = self.source[tok.start + 1 : qend]
            quasis.append(
                Node(
                    "TemplateElement", tok.start + 1, qend, raw=raw, cooked=raw, tail=tail
                )
            )
            if tail:
                break
            expressions.append(self.parse_expression())
            if not (self.at_type(TK_TEMPLATE) and self.current().value.startswith("}")):
                raise self.error("expected '}' closing template substitution")
        self.no_in = saved
        return self.finish(
            "TemplateLiteral", start, quasis=quasis, expressions=expressions
        )

    def parse_array(self) -> Node:
        start = self.start()
        self.expect("[")
        saved = self.no_in
        self.no_in = False
        elements: list[Node | None] = []
        while not self.at("]"):
            if self.at(","):
                self.advance()
                elements.append(None)
                continue
            estart = self.start()
            if self.eat("..."):
                argument = self.parse_assign()
                elements.append(self.finish("SpreadElement", estart, argument=argument))
            else:
                elements.append(self.parse_assign())
            if not self.eat(","):
                break
        self.no_in = saved
        self.expect("]")
        return self.finish("ArrayExpression", start, elements=elements)

    def parse_object(self) -> Node:
        start = self.start()
        self.expect("{")
        saved = self.no_in
        self.no_in = False
        properties: list[Node] = []
        while not self.at("}"):
            properties.append(self.parse_object_member())
            if not self.eat(","):
                break
        self.no_in = saved
        self.expect("}")
        return self.finish("ObjectExpression", start, properties=properties)

    def parse_object_member(self) -> Node:
        start = self.start()
        if self.eat("..."):
            argument = self.parse_assign()
            return self.finish("SpreadElement", start, argument=argument)
        kind = "init"
        is_async = False
        generator = False
        if self.at("async") and self._modifier_ahead() and not self.peek(1).nl_before:
            self.advance()
            is_async = True
        if self.eat("*"):
            generator = True
        if (self.at("get") or self.at("set")) and self._modifier_ahead():
            kind = self.advance().value
        key, computed = self.parse_property_key()
        if self.at("("):
            value = self.parse_method_value(is_async, generator)
            return self.finish(
                "Property",
                start,
                key=key,
                value=value,
                kind=kind,
                method=kind == "init",
                shorthand=False,
                computed=computed,
            )
        if self.eat(":"):
            value = self.parse_assign()
            return self.finish(
                "Property",
                start,
                key=key,
                value=value,
                kind="init",
                method=False,
                shorthand=False,
                computed=computed,
            )
        if key.type != "Identifier" or computed:
            raise self.error("expected ':' after property key")
        value = Node("Identifier", key.start, key.end, name=key.name)
        if self.at("="):
            # Cover grammar for `({a = 1} = obj)`
            self.advance()
            default = self.parse_assign()
            value = self.finish(
                "AssignmentPattern", key.start, left=value, right=default
            )
        return self.finish(
            "Property",
            start,
            key=key,
            value=value,
            kind="init",
            method=False,
            shorthand=True,
            computed=False,
        )
