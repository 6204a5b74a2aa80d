"""Local typedef inlining.

A block carrying both `@local` and `@typedef {T} Name` declares a file-private
alias. Every `Name` reference in the file's documentation is rewritten to `T`
by replacing the reference's arena slot, so each holder of that slot sees the
substituted type. The typedef tag is then dropped from its block.
"""

from __future__ import annotations

from ..frontend.ast import DocTag, Node
from ..frontend.query import query
from ..frontend.types import TypeArena
from .errors import AmbiguousTypedefError, UnsupportedShapeError

LOCAL_TYPEDEFS = 'DocBlock:has(> DocTag[tag="local"]) > DocTag[tag="typedef"]'


def _quote(value: str) -> str:
    return '"' + value + '"'


def find_local_typedefs(program: Node) -> list[DocTag]:
    """Local typedef tags in document order. Tags without a name or a parsed
    type are not local typedefs and are left alone."""
    found: list[DocTag] = []
    seen: dict[str, DocTag] = {}
    for tag in query(program, LOCAL_TYPEDEFS):
        if not tag.name or tag.parsed_type is None:
            continue
        if tag.name in seen:
            raise AmbiguousTypedefError(tag.name, seen[tag.name].line, tag.line)
        seen[tag.name] = tag
        found.append(tag)
    return found


def _inline(program: Node, arena: TypeArena, typedef: DocTag) -> int:
    root = typedef.parsed_type
    refs = query(program, "TypeName[value=" + _quote(typedef.name) + "]")
    own = set(arena.reachable(root))
    count = 0
    for ref in refs:
        if ref.key in own:
            raise UnsupportedShapeError(
                "recursive local typedef '" + typedef.name + "'", typedef.line, 1
            )
        arena.replace(ref.key, root)
        count += 1
    return count


def _remove_tag(tag: DocTag) -> None:
    block = tag.parent
    i = 0
    while i < len(block.tags):
        if block.tags[i] is tag:
            del block.tags[i]
            block.tags_removed += 1
            return
        i += 1


def inline_local_typedefs(program: Node) -> int:
    """Inline every local typedef. Returns the number of rewritten references."""
    arena: TypeArena = program.types
    typedefs = find_local_typedefs(program)
    count = 0
    for typedef in typedefs:
        count += _inline(program, arena, typedef)
        _remove_tag(typedef)
    return count
