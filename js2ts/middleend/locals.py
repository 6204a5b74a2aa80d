"""Drop documentation blocks left holding nothing but `@local` markers."""

from __future__ import annotations

from ..frontend.ast import Node
from ..frontend.query import query

LOCAL_ONLY = 'DocBlock:has(> DocTag[tag="local"]):not(:has(> DocTag[tag!="local"]))'


def remove_local_blocks(program: Node) -> int:
    """Unregister local-only blocks. The nodes they were attached to keep
    their `jsdoc` link; only the registry forgets them. Returns the count."""
    doomed = {id(block) for block in query(program, LOCAL_ONLY)}
    if not doomed:
        return 0
    before = len(program.doc_blocks)
    program.doc_blocks = [b for b in program.doc_blocks if id(b) not in doomed]
    return before - len(program.doc_blocks)
