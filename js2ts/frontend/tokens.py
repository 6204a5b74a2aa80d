"""JavaScript tokenizer — lexes source into a flat token list plus comments."""

from __future__ import annotations


# Token type constants
TK_NAME = "NAME"
TK_PRIVATE = "PRIVATE"
TK_NUM = "NUM"
TK_STRING = "STRING"
TK_TEMPLATE = "TEMPLATE"
TK_REGEX = "REGEX"
TK_PUNCT = "PUNCT"
TK_EOF = "EOF"

# Keywords after which a `/` starts a regular expression, not a division
KEYWORDS_BEFORE_EXPR: set[str] = {
    "await",
    "case",
    "delete",
    "do",
    "else",
    "extends",
    "in",
    "instanceof",
    "new",
    "of",
    "return",
    "throw",
    "typeof",
    "void",
    "yield",
}

# Punctuators, sorted by length descending for greedy matching
PUNCTUATORS: list[str] = [
    ">>>=",
    "...",
    "===",
    "!==",
    "**=",
    "<<=",
    ">>=",
    ">>>",
    "&&=",
    "||=",
    "??=",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "<<",
    ">>",
    "**",
    "{",
    "}",
    "(",
    ")",
    "[",
    "]",
    ";",
    ",",
    "<",
    ">",
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "!",
    "~",
    "?",
    ":",
    "=",
    ".",
    "@",
]


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, source span and position."""

    def __init__(
        self, type_: str, value: str, start: int, end: int, line: int, col: int
    ):
        self.type: str = type_
        self.value: str = value
        self.start: int = start
        self.end: int = end
        self.line: int = line
        self.col: int = col
        self.nl_before: bool = False

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


class Comment:
    """A comment span. `kind` is "Block" or "Line"; `value` excludes delimiters."""

    def __init__(self, kind: str, value: str, start: int, end: int, line: int):
        self.kind: str = kind
        self.value: str = value
        self.start: int = start
        self.end: int = end
        self.line: int = line

    def is_jsdoc(self) -> bool:
        """True for `/** ... */` blocks (but not `/***/` or `/**/`)."""
        return (
            self.kind == "Block"
            and self.value.startswith("*")
            and not self.value.startswith("**")
            and self.value != "*"
        )

    def __repr__(self) -> str:
        return "Comment(" + self.kind + ", " + repr(self.value) + ")"


def is_id_start(c: str) -> bool:
    if (c >= "a" and c <= "z") or (c >= "A" and c <= "Z"):
        return True
    if c == "_" or c == "$":
        return True
    return ord(c) > 127 and c.isalpha()


def is_id_part(c: str) -> bool:
    return is_id_start(c) or _is_digit(c) or (ord(c) > 127 and c.isalnum())


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_hex(c: str) -> bool:
    return (c >= "0" and c <= "9") or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _regex_allowed(prev: Token | None) -> bool:
    """Decide whether `/` after `prev` opens a regular expression."""
    if prev is None:
        return True
    if prev.type == TK_NAME:
        return prev.value in KEYWORDS_BEFORE_EXPR
    if prev.type == TK_PUNCT:
        return prev.value not in (")", "]", "}", "++", "--")
    if prev.type == TK_TEMPLATE:
        return prev.value.endswith("${")
    return False


class _Lexer:
    def __init__(self, source: str):
        self.src: str = source
        self.pos: int = 0
        self.line: int = 1
        self.line_start: int = 0
        self.tokens: list[Token] = []
        self.comments: list[Comment] = []
        # One entry per open brace: True when it closes a template substitution
        self.braces: list[bool] = []
        self.nl_pending: bool = False

    def error(self, msg: str, pos: int) -> TokenizeError:
        line = self.src.count("\n", 0, pos) + 1
        col = pos - (self.src.rfind("\n", 0, pos) + 1) + 1
        return TokenizeError(msg, line, col)

    def _advance_lines(self, start: int, end: int) -> None:
        """Account for newlines in src[start:end]."""
        i = self.src.find("\n", start, end)
        while i != -1:
            self.line += 1
            self.line_start = i + 1
            i = self.src.find("\n", i + 1, end)

    def _push(self, type_: str, start: int, end: int) -> Token:
        tok = Token(
            type_,
            self.src[start:end],
            start,
            end,
            self.line,
            start - self.line_start + 1,
        )
        tok.nl_before = self.nl_pending
        self.nl_pending = False
        self.tokens.append(tok)
        self._advance_lines(start, end)
        self.pos = end
        return tok

    def _prev(self) -> Token | None:
        if self.tokens:
            return self.tokens[-1]
        return None

    # ── Skipping ─────────────────────────────────────────────

    def skip_trivia(self) -> None:
        src = self.src
        length = len(src)
        while self.pos < length:
            c = src[self.pos]
            if c == "\n":
                self.pos += 1
                self.line += 1
                self.line_start = self.pos
                self.nl_pending = True
            elif c in " \t\r\f\v\ufeff\u00a0":
                self.pos += 1
            elif c == "\u2028" or c == "\u2029":
                self.pos += 1
                self.nl_pending = True
            elif c == "/" and self.pos + 1 < length and src[self.pos + 1] == "/":
                end = src.find("\n", self.pos)
                if end == -1:
                    end = length
                self.comments.append(
                    Comment("Line", src[self.pos + 2 : end], self.pos, end, self.line)
                )
                self.pos = end
            elif c == "/" and self.pos + 1 < length and src[self.pos + 1] == "*":
                end = src.find("*/", self.pos + 2)
                if end == -1:
                    raise self.error("unterminated comment", self.pos)
                start = self.pos
                self.comments.append(
                    Comment("Block", src[start + 2 : end], start, end + 2, self.line)
                )
                if src.find("\n", start, end) != -1:
                    self.nl_pending = True
                self._advance_lines(start, end + 2)
                self.pos = end + 2
            else:
                return

    # ── Scanners ─────────────────────────────────────────────

    def scan_name(self) -> None:
        start = self.pos
        pos = start
        src = self.src
        while pos < len(src) and is_id_part(src[pos]):
            pos += 1
        self._push(TK_NAME, start, pos)

    def scan_private(self) -> None:
        start = self.pos
        pos = start + 1
        src = self.src
        if pos >= len(src) or not is_id_start(src[pos]):
            raise self.error("invalid private name", start)
        while pos < len(src) and is_id_part(src[pos]):
            pos += 1
        self._push(TK_PRIVATE, start, pos)

    def scan_number(self) -> None:
        src = self.src
        start = self.pos
        pos = start
        length = len(src)
        if src[pos] == "0" and pos + 1 < length and src[pos + 1] in "xXoObB":
            kind = src[pos + 1].lower()
            pos += 2
            digits_start = pos
            while pos < length and (_is_hex(src[pos]) or src[pos] == "_"):
                if kind == "b" and src[pos] not in "01_":
                    break
                if kind == "o" and src[pos] not in "01234567_":
                    break
                pos += 1
            if pos == digits_start:
                raise self.error("invalid number literal", start)
        else:
            while pos < length and (_is_digit(src[pos]) or src[pos] == "_"):
                pos += 1
            if pos < length and src[pos] == ".":
                pos += 1
                while pos < length and (_is_digit(src[pos]) or src[pos] == "_"):
                    pos += 1
            if pos < length and src[pos] in "eE":
                pos += 1
                if pos < length and src[pos] in "+-":
                    pos += 1
                if pos >= length or not _is_digit(src[pos]):
                    raise self.error("invalid number exponent", start)
                while pos < length and _is_digit(src[pos]):
                    pos += 1
        if pos < length and src[pos] == "n":
            pos += 1
        if pos < length and is_id_start(src[pos]):
            raise self.error("identifier directly after number", pos)
        self._push(TK_NUM, start, pos)

    def scan_string(self) -> None:
        src = self.src
        start = self.pos
        quote = src[start]
        pos = start + 1
        while pos < len(src) and src[pos] != quote:
            if src[pos] == "\\":
                pos += 2
                continue
            if src[pos] == "\n":
                raise self.error("unterminated string literal", start)
            pos += 1
        if pos >= len(src):
            raise self.error("unterminated string literal", start)
        self._push(TK_STRING, start, pos + 1)

    def scan_template_chunk(self) -> None:
        """Scan from a backtick or a substitution-closing brace to the next
        backtick or `${`."""
        src = self.src
        start = self.pos
        pos = start + 1
        while pos < len(src):
            c = src[pos]
            if c == "\\":
                pos += 2
                continue
            if c == "`":
                self._push(TK_TEMPLATE, start, pos + 1)
                return
            if c == "$" and pos + 1 < len(src) and src[pos + 1] == "{":
                self._push(TK_TEMPLATE, start, pos + 2)
                self.braces.append(True)
                return
            pos += 1
        raise self.error("unterminated template literal", start)

    def scan_regex(self) -> None:
        src = self.src
        start = self.pos
        pos = start + 1
        in_class = False
        while True:
            if pos >= len(src) or src[pos] == "\n":
                raise self.error("unterminated regular expression", start)
            c = src[pos]
            if c == "\\":
                pos += 2
                continue
            if c == "[":
                in_class = True
            elif c == "]":
                in_class = False
            elif c == "/" and not in_class:
                break
            pos += 1
        pos += 1
        while pos < len(src) and is_id_part(src[pos]):
            pos += 1
        self._push(TK_REGEX, start, pos)

    def scan_punct(self) -> None:
        src = self.src
        pos = self.pos
        for op in PUNCTUATORS:
            if src.startswith(op, pos):
                # `?.` followed by a digit is a conditional and a number
                if op == "?." and pos + 2 < len(src) and _is_digit(src[pos + 2]):
                    continue
                if op == "{":
                    self.braces.append(False)
                elif op == "}":
                    if self.braces and self.braces[-1]:
                        self.braces.pop()
                        self.scan_template_chunk()
                        return
                    if self.braces:
                        self.braces.pop()
                self._push(TK_PUNCT, pos, pos + len(op))
                return
        raise self.error("unexpected character: " + repr(src[pos]), pos)

    # ── Driver ───────────────────────────────────────────────

    def run(self) -> None:
        src = self.src
        if src.startswith("#!"):
            end = src.find("\n")
            if end == -1:
                end = len(src)
            self.comments.append(Comment("Hashbang", src[2:end], 0, end, 1))
            self.pos = end
        while True:
            self.skip_trivia()
            if self.pos >= len(src):
                break
            c = src[self.pos]
            if is_id_start(c):
                self.scan_name()
            elif c == "#":
                self.scan_private()
            elif _is_digit(c) or (
                c == "." and self.pos + 1 < len(src) and _is_digit(src[self.pos + 1])
            ):
                self.scan_number()
            elif c == '"' or c == "'":
                self.scan_string()
            elif c == "`":
                self.scan_template_chunk()
            elif c == "/" and _regex_allowed(self._prev()):
                self.scan_regex()
            else:
                self.scan_punct()
        eof = Token(
            TK_EOF, "", len(src), len(src), self.line, len(src) - self.line_start + 1
        )
        eof.nl_before = self.nl_pending
        self.tokens.append(eof)


def tokenize(source: str) -> tuple[list[Token], list[Comment]]:
    """Tokenize JavaScript source. Returns (tokens ending with TK_EOF, comments)."""
    lexer = _Lexer(source)
    lexer.run()
    return lexer.tokens, lexer.comments
