"""Serializer handlers for documentation and type nodes.

Source blocks are re-rendered in place of their owned layout span:

- a block dropped from the registry leaves only the line break it occupied,
  and nothing at the top of the file;
- an unmodified block is copied verbatim;
- a modified or synthesized block is rendered from its tags and placed by its
  layout flags: `"\\n" + text + "\\n" + indent` when it sits on its own
  line, `text + " "` when code follows on the same line.
"""

from __future__ import annotations

from ..frontend.ast import DOC_VISITOR_KEYS, DocBlock, DocTag, Node
from ..frontend.types import TYPE_VISITOR_KEYS, TypeArena
from .codegen import Handler, Serializer, to_source
from .jsdoc import block_to_string, is_modified, tag_to_string, type_to_string


class DocAdapter:
    """Handlers bound to one program's registry and type arena."""

    def __init__(self, program: Node):
        self.program: Node = program
        self.arena: TypeArena = program.types
        self.source: str = getattr(program, "source_text", "")
        self.registered: set[int] = {id(block) for block in program.doc_blocks}

    def handlers(self) -> dict[str, Handler]:
        result: dict[str, Handler] = {}
        for kind in DOC_VISITOR_KEYS:
            result[kind] = self.render
        for kind in TYPE_VISITOR_KEYS:
            result[kind] = self.render
        return result

    def render(self, serializer: Serializer, node: object) -> str:
        if isinstance(node, DocBlock):
            return self.render_block(node)
        if isinstance(node, DocTag):
            return tag_to_string(node, self.arena)
        return type_to_string(self.arena, node.key)

    def _follow_indent(self, block: DocBlock) -> str:
        """Indentation of the line after the block, as it stood in the source."""
        span = self.source[block.start : block.end]
        return span[span.rfind("\n") + 1 :]

    def _lead(self, block: DocBlock) -> str:
        """Line break and indentation the block's span opens with."""
        span = self.source[block.start : block.end]
        return span[: span.find(block.delimiter)]

    def render_block(self, block: DocBlock) -> str:
        if block.start is None:
            text = block_to_string(block, self.arena)
            if block.end_line:
                lead = "\n" if block.leading_break else ""
                return lead + text + "\n" + block.initial
            return text + " "
        if id(block) not in self.registered:
            return self.render_dropped(block)
        if not is_modified(block, self.arena):
            return self.source[block.start : block.end]
        text = block_to_string(block, self.arena)
        if block.end_line:
            return self._lead(block) + text + "\n" + self._follow_indent(block)
        return self._lead(block) + text + " "

    def render_dropped(self, block: DocBlock) -> str:
        text = ""
        if block.leading_break or (block.end_line and block.start > 0):
            text = "\n"
        if block.end_line:
            return text + self._follow_indent(block)
        if block.leading_break:
            return text + block.initial
        return text


def _drop_leading_blank_lines(text: str) -> str:
    while True:
        nl = text.find("\n")
        if nl < 0 or text[:nl].strip():
            return text
        text = text[nl + 1 :]


def generate(program: Node, source_content: str | None = None) -> str:
    """Serialize `program` with documentation handlers installed.

    Blocks dropped from the top of the file take the blank lines after them
    along, unless the source itself opened with a blank line.
    """
    if source_content is None:
        source_content = getattr(program, "source_text", None)
    text = to_source(program, source_content, DocAdapter(program).handlers())
    if source_content and _drop_leading_blank_lines(source_content) == source_content:
        text = _drop_leading_blank_lines(text)
    return text
