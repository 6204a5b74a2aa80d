"""Frontend package - converts JavaScript source to a documented syntax tree."""

from .ast import DocBlock, DocTag, Node, set_parents, walk
from .jsdoc import attach_doc_blocks, parse_doc_blocks
from .parse import ParseError, Parser
from .query import SelectorError, query
from .tokens import TokenizeError, tokenize
from .types import TypeArena, TypeParseError


def parse(source: str) -> Node:
    """Frontend pipeline: source → Program with its JSDoc registry.

    The returned Program carries `doc_blocks` (the live registry passes edit),
    `source_blocks` (every block as parsed, in source order), `comments` and
    `types` (the arena owning every parsed type).
    """
    # Phase 1: Tokenize; comments are collected on the side
    tokens, comments = tokenize(source)

    # Phase 2: Parse to ESTree-shaped nodes
    program = Parser(tokens, source).parse_program()

    # Phase 3: Parse JSDoc blocks and attach them to the nodes they precede
    arena = TypeArena()
    blocks = parse_doc_blocks(comments, source, arena)
    attach_doc_blocks(program, blocks, comments, tokens)

    program.source_text = source
    program.doc_blocks = list(blocks)
    program.source_blocks = blocks
    program.comments = comments
    program.types = arena
    set_parents(program)
    return program


__all__ = [
    "DocBlock",
    "DocTag",
    "Node",
    "ParseError",
    "SelectorError",
    "TokenizeError",
    "TypeArena",
    "TypeParseError",
    "parse",
    "query",
    "walk",
]
