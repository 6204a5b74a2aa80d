"""JSDoc comment parsing and attachment.

Turns `/** ... */` comments into DocBlock nodes: description lines, tags with
their `{type}`, name and description, plus the layout facts the serializer
needs to put a rewritten block back (indentation, surrounding line breaks).
"""

from __future__ import annotations

import bisect

from .ast import DocBlock, DocTag, Node, walk
from .tokens import Comment, Token
from .types import TypeArena, TypeParseError, parse_type

# Tags whose first word after the type is a name
NAME_TAGS: set[str] = {
    "arg",
    "argument",
    "callback",
    "class",
    "constant",
    "const",
    "event",
    "fires",
    "function",
    "func",
    "listens",
    "member",
    "memberof",
    "method",
    "name",
    "namespace",
    "param",
    "prop",
    "property",
    "template",
    "typedef",
    "var",
}


def _is_blank(text: str) -> bool:
    return text.strip() == ""


def _content_lines(comment: Comment) -> list[tuple[str, int]]:
    """Strip delimiters and leading `*` gutters. Returns (text, line) pairs with
    blank lines at either end removed."""
    body = comment.value[1:]
    raw_lines = body.split("\n")
    result: list[tuple[str, int]] = []
    i = 0
    while i < len(raw_lines):
        text = raw_lines[i].rstrip()
        if i > 0:
            stripped = text.lstrip()
            if stripped.startswith("*"):
                stripped = stripped[1:]
                if stripped.startswith(" "):
                    stripped = stripped[1:]
                text = stripped
            else:
                text = stripped
        else:
            text = text.lstrip()
        result.append((text, comment.line + i))
        i += 1
    while result and _is_blank(result[0][0]):
        result.pop(0)
    while result and _is_blank(result[-1][0]):
        result.pop()
    return result


def _split_type(rest: str) -> tuple[str, str, bool]:
    """Split a leading `{...}` off `rest`. Returns (type, remainder, found)."""
    if not rest.startswith("{"):
        return "", rest, False
    depth = 0
    i = 0
    while i < len(rest):
        c = rest[i]
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return rest[1:i], rest[i + 1 :], True
        i += 1
    return "", rest, False


def _split_name(rest: str) -> tuple[str, str]:
    """Split the name word (or `[name=default]` group) off `rest`."""
    if rest.startswith("["):
        depth = 0
        i = 0
        while i < len(rest):
            if rest[i] == "[":
                depth += 1
            elif rest[i] == "]":
                depth -= 1
                if depth == 0:
                    return rest[: i + 1], rest[i + 1 :]
            i += 1
        return rest, ""
    i = 0
    while i < len(rest) and not rest[i].isspace():
        i += 1
    return rest[:i], rest[i:]


def _parse_tag(lines: list[tuple[str, int]], arena: TypeArena) -> DocTag:
    first, line = lines[0]
    text = "\n".join([first] + [entry[0] for entry in lines[1:]])
    i = 1
    while i < len(text) and not text[i].isspace() and text[i] != "{":
        i += 1
    tag = DocTag(text[1:i], line=line)
    rest = text[i:].lstrip(" \t")
    raw_type, after, found = _split_type(rest)
    if found:
        tag.raw_type = raw_type
        if not _is_blank(raw_type):
            try:
                tag.parsed_type = parse_type(raw_type, arena, line)
            except TypeParseError as e:
                raise TypeParseError(
                    "in @" + tag.tag + ": " + e.msg, line, e.col
                ) from None
        rest = after.lstrip(" \t")
    if tag.tag in NAME_TAGS:
        if rest.startswith("\n"):
            rest = rest.lstrip()
        name, rest = _split_name(rest)
        if name.startswith("[") and name.endswith("]"):
            tag.optional = True
            inner = name[1:-1]
            eq = inner.find("=")
            if eq != -1:
                tag.default = inner[eq + 1 :].strip()
                inner = inner[:eq]
            name = inner.strip()
        tag.name = name
        rest = rest.lstrip(" \t")
        if rest.startswith("- "):
            rest = rest[2:]
    description = rest.split("\n")
    while description and _is_blank(description[0]):
        description.pop(0)
    while description and _is_blank(description[-1]):
        description.pop()
    tag.description = description
    return tag


def _layout(block: DocBlock, comment: Comment, source: str) -> None:
    """Record indentation, surrounding line breaks and the owned span."""
    cs = comment.start
    ce = comment.end
    line_begin = source.rfind("\n", 0, cs) + 1
    prefix = source[line_begin:cs]
    indent_end = 0
    while indent_end < len(prefix) and prefix[indent_end] in " \t":
        indent_end += 1
    block.initial = prefix[:indent_end]
    block.start = cs
    if _is_blank(prefix):
        if line_begin > 0:
            block.start = line_begin - 1
            block.leading_break = True
        else:
            block.start = 0
    j = ce
    while j < len(source) and source[j] in " \t":
        j += 1
    if source.startswith("\r\n", j) or source.startswith("\n", j):
        block.end_line = True
        j += 2 if source[j] == "\r" else 1
        while j < len(source) and source[j] in " \t":
            j += 1
    block.end = j


def parse_doc_comment(comment: Comment, source: str, arena: TypeArena) -> DocBlock:
    """Parse one `/** ... */` comment into a DocBlock."""
    lines = _content_lines(comment)
    block = DocBlock([], line=comment.line)
    block.one_line = "\n" not in comment.value
    i = 0
    while i < len(lines) and not lines[i][0].startswith("@"):
        block.description.append(lines[i][0])
        i += 1
    while block.description and _is_blank(block.description[-1]):
        block.description.pop()
    while i < len(lines):
        section = [lines[i]]
        i += 1
        while i < len(lines) and not lines[i][0].startswith("@"):
            section.append(lines[i])
            i += 1
        tag = _parse_tag(section, arena)
        tag.parent = block
        block.tags.append(tag)
    _layout(block, comment, source)
    return block


def parse_doc_blocks(
    comments: list[Comment], source: str, arena: TypeArena
) -> list[DocBlock]:
    """Parse every JSDoc comment, in source order. Owned spans never overlap:
    a block that starts right after another gives up its leading break."""
    blocks: list[DocBlock] = []
    for comment in comments:
        if not comment.is_jsdoc():
            continue
        block = parse_doc_comment(comment, source, arena)
        if blocks and block.start < blocks[-1].end:
            block.start = max(blocks[-1].end, comment.start)
            block.leading_break = False
        blocks.append(block)
    return blocks


def attach_doc_blocks(
    program: Node,
    blocks: list[DocBlock],
    comments: list[Comment],
    tokens: list[Token],
) -> None:
    """Attach each block to the outermost node starting at the first token after
    it, when nothing but whitespace and at most one line break separates them.
    Unattached blocks get the program as parent."""
    starts: dict[int, Node] = {}
    for node in walk(program):
        if node is program or node.start is None:
            continue
        if node.start not in starts:
            starts[node.start] = node
    token_starts = [tok.start for tok in tokens]
    jsdoc_comments = [c for c in comments if c.is_jsdoc()]
    comment_starts = [c.start for c in comments]
    i = 0
    while i < len(blocks):
        block = blocks[i]
        comment = jsdoc_comments[i]
        block.parent = program
        idx = bisect.bisect_left(token_starts, comment.end)
        tok = tokens[idx]
        next_comment = bisect.bisect_left(comment_starts, comment.end)
        blocked = (
            next_comment < len(comments) and comments[next_comment].start < tok.start
        )
        end_line = comment.line + comment.value.count("\n")
        node = starts.get(tok.start)
        if node is not None and not blocked and tok.line - end_line <= 1:
            if node.jsdoc is None:
                node.jsdoc = block
                block.parent = node
        i += 1
