"""Constructors for synthesized nodes.

Built nodes carry no source span, so the serializer generates their text from
structure. Type builders insert into the arena they are bound to and return
the new key.
"""

from __future__ import annotations

from .ast import DocBlock, DocTag, Node
from .types import (
    TypeArena,
    TypeFunction,
    TypeGeneric,
    TypeIntersection,
    TypeKeyValue,
    TypeName,
    TypeObject,
    TypeObjectField,
    TypeUnion,
    parse_type,
)


class Builders:
    """Node builders bound to one program's type arena."""

    def __init__(self, arena: TypeArena):
        self.arena: TypeArena = arena

    # ── Program nodes ────────────────────────────────────────

    def identifier(self, name: str) -> Node:
        return Node("Identifier", name=name)

    def literal(self, value: object) -> Node:
        return Node("Literal", value=value, raw=None)

    def member(self, obj: Node, prop: Node | str, computed: bool = False) -> Node:
        if isinstance(prop, str):
            prop = self.identifier(prop)
        return Node(
            "MemberExpression", object=obj, property=prop, computed=computed, optional=False
        )

    def call(self, callee: Node, arguments: list[Node]) -> Node:
        return Node("CallExpression", callee=callee, arguments=arguments, optional=False)

    def expression_statement(self, expression: Node) -> Node:
        return Node("ExpressionStatement", expression=expression)

    def return_statement(self, argument: Node | None) -> Node:
        return Node("ReturnStatement", argument=argument)

    def variable_declaration(self, kind: str, name: str, init: Node | None) -> Node:
        declarator = Node("VariableDeclarator", id=self.identifier(name), init=init)
        return Node("VariableDeclaration", kind=kind, declarations=[declarator])

    # ── Documentation nodes ──────────────────────────────────

    def doc_tag(
        self, tag: str, raw_type: str = "", name: str = "", description: str = ""
    ) -> DocTag:
        parsed: int | None = None
        if raw_type:
            parsed = parse_type(raw_type, self.arena)
        lines = description.split("\n") if description else []
        return DocTag(tag, raw_type=raw_type, parsed_type=parsed, name=name, description=lines)

    def doc_block(
        self, tags: list[DocTag], description: list[str] | None = None
    ) -> DocBlock:
        block = DocBlock(tags, description=list(description or []))
        for tag in tags:
            tag.parent = block
        return block

    def type_cast(self, raw_type: str) -> DocBlock:
        """A one-line `/** @type {T} */` block, as placed before a cast."""
        block = self.doc_block([self.doc_tag("type", raw_type)])
        block.one_line = True
        return block

    def typedef(self, name: str, raw_type: str) -> DocBlock:
        """A multi-line `@typedef {T} name` block that sits on its own line.

        The type is kept as text only: member lists may carry `static` and
        private names that are not type syntax.
        """
        block = self.doc_block([DocTag("typedef", raw_type=raw_type, name=name)])
        block.leading_break = True
        block.end_line = True
        return block

    # ── Type nodes ───────────────────────────────────────────

    def type_name(self, value: str) -> int:
        return self.arena.add(TypeName(value))

    def type_union(self, elements: list[int]) -> int:
        return self.arena.add(TypeUnion(elements))

    def type_intersection(self, elements: list[int]) -> int:
        return self.arena.add(TypeIntersection(elements))

    def type_generic(self, left: int, elements: list[int]) -> int:
        return self.arena.add(TypeGeneric(left, elements))

    def type_object(self, fields: list[tuple[str, int]]) -> int:
        keys = [self.arena.add(TypeObjectField(name, right)) for name, right in fields]
        return self.arena.add(TypeObject(keys, separator=";"))

    def type_function(
        self, params: list[tuple[str, int | None, bool]], return_type: int | None
    ) -> int:
        keys = [
            self.arena.add(TypeKeyValue(name, right, optional))
            for name, right, optional in params
        ]
        return self.arena.add(TypeFunction(keys, return_type, arrow=True))
